#!/usr/bin/env python3

"""
Camera motion presets and per-frame transforms.

The 'auto' preset is resolved once, when the document is built, by
pick_auto_motion(); the chosen preset id is stored in params.chosen.
Sampling code only reads that value and never draws random numbers, so a
re-render of the same document produces the same motion.
"""

import copy
from reelplanlib.core import utils

#============================================

DEFAULT_PRESET_ID = 'kenburns_soft'

MOTION_TYPES = ('none', 'zoom', 'pan', 'combined', 'hold_then_pan')

MOTION_TYPE_ALIASES = {
	'hold-then-pan': 'hold_then_pan',
}

DEFAULT_HOLD_RATIO = 0.3

#============================================

def _preset(preset_id: str, motion_type: str, **params) -> dict:
	return {'id': preset_id, 'motion_type': motion_type, 'params': params}

MOTION_PRESETS = {
	'none': _preset('none', 'none'),
	# zoom
	'kenburns_soft': _preset('kenburns_soft', 'zoom', start_scale=1.0, end_scale=1.05),
	'kenburns_strong': _preset('kenburns_strong', 'zoom', start_scale=1.0, end_scale=1.15),
	'kenburns_zoom_out': _preset('kenburns_zoom_out', 'zoom', start_scale=1.1, end_scale=1.0),
	# light pan, -5% to +5%
	'pan_lr': _preset('pan_lr', 'pan', start_x=-5, end_x=5, start_y=0, end_y=0),
	'pan_rl': _preset('pan_rl', 'pan', start_x=5, end_x=-5, start_y=0, end_y=0),
	'pan_tb': _preset('pan_tb', 'pan', start_x=0, end_x=0, start_y=-5, end_y=5),
	'pan_bt': _preset('pan_bt', 'pan', start_x=0, end_x=0, start_y=5, end_y=-5),
	# wide slide, -10% to +10%
	'slide_lr': _preset('slide_lr', 'pan', start_x=-10, end_x=10, start_y=0, end_y=0),
	'slide_rl': _preset('slide_rl', 'pan', start_x=10, end_x=-10, start_y=0, end_y=0),
	'slide_tb': _preset('slide_tb', 'pan', start_x=0, end_x=0, start_y=-10, end_y=10),
	'slide_bt': _preset('slide_bt', 'pan', start_x=0, end_x=0, start_y=10, end_y=-10),
	# hold for 30% of the scene, then slide
	'hold_then_slide_lr': _preset('hold_then_slide_lr', 'hold_then_pan',
		start_x=-5, end_x=10, start_y=0, end_y=0, hold_ratio=0.3),
	'hold_then_slide_rl': _preset('hold_then_slide_rl', 'hold_then_pan',
		start_x=5, end_x=-10, start_y=0, end_y=0, hold_ratio=0.3),
	'hold_then_slide_tb': _preset('hold_then_slide_tb', 'hold_then_pan',
		start_x=0, end_x=0, start_y=-5, end_y=10, hold_ratio=0.3),
	'hold_then_slide_bt': _preset('hold_then_slide_bt', 'hold_then_pan',
		start_x=0, end_x=0, start_y=5, end_y=-10, hold_ratio=0.3),
	# zoom and pan together
	'combined_zoom_pan_lr': _preset('combined_zoom_pan_lr', 'combined',
		start_scale=1.0, end_scale=1.08, start_x=-3, end_x=3, start_y=0, end_y=0),
	'combined_zoom_pan_rl': _preset('combined_zoom_pan_rl', 'combined',
		start_scale=1.0, end_scale=1.08, start_x=3, end_x=-3, start_y=0, end_y=0),
}

# 'none' and the strong presets are left out on purpose
AUTO_MOTION_CANDIDATES = (
	'kenburns_soft',
	'kenburns_zoom_out',
	'pan_lr',
	'pan_rl',
	'slide_lr',
	'slide_rl',
	'hold_then_slide_lr',
	'hold_then_slide_rl',
)

#============================================

def pick_auto_motion(seed: int) -> str:
	"""Document-build time only."""
	index = abs(int(seed)) % len(AUTO_MOTION_CANDIDATES)
	return AUTO_MOTION_CANDIDATES[index]

#============================================

def resolve_auto_motion(seed: int) -> dict:
	"""
	Build the persisted descriptor for an 'auto' scene motion.

	Called by the document builder, never while sampling frames.
	"""
	return {
		'id': 'auto',
		'motion_type': 'none',
		'params': {
			'seed': int(seed),
			'chosen': pick_auto_motion(seed),
		},
	}

#============================================

def get_motion_preset(preset_id) -> dict:
	preset = MOTION_PRESETS.get(preset_id) if preset_id else None
	if preset is None:
		preset = MOTION_PRESETS[DEFAULT_PRESET_ID]
	return copy.deepcopy(preset)

#============================================

def normalize_motion_type(raw_type) -> str:
	if raw_type is None:
		return None
	motion_type = str(raw_type).strip().lower()
	motion_type = MOTION_TYPE_ALIASES.get(motion_type, motion_type)
	if motion_type not in MOTION_TYPES:
		return None
	return motion_type

#============================================

def resolve_motion(descriptor) -> dict:
	"""
	Turn a scene motion descriptor into a concrete preset.

	Missing descriptors, unknown ids and unresolved 'auto' descriptors all
	fall back to the soft Ken Burns zoom.
	"""
	if isinstance(descriptor, str):
		descriptor = {'id': descriptor}
	if not isinstance(descriptor, dict):
		return get_motion_preset(DEFAULT_PRESET_ID)
	preset_id = descriptor.get('id')
	params = descriptor.get('params') or {}
	if preset_id == 'auto':
		chosen = params.get('chosen')
		preset = get_motion_preset(chosen)
		preset['params']['seed'] = params.get('seed')
		preset['params']['chosen'] = preset['id']
		preset['auto'] = True
		return preset
	motion_type = normalize_motion_type(descriptor.get('motion_type'))
	if motion_type is None:
		return get_motion_preset(preset_id)
	merged = {}
	if preset_id in MOTION_PRESETS:
		merged.update(MOTION_PRESETS[preset_id]['params'])
	merged.update(params)
	return {
		'id': preset_id or 'custom',
		'motion_type': motion_type,
		'params': merged,
	}

#============================================

def identity_transform() -> dict:
	return {
		'scale': 1.0,
		'translate_x_pct': 0.0,
		'translate_y_pct': 0.0,
	}

#============================================

def _param(params: dict, key: str, default: float) -> float:
	value = params.get(key)
	if value is None or isinstance(value, bool):
		return default
	return utils.clamp(value, -1000.0, 1000.0)

#============================================

def motion_transform(preset: dict, frame, duration_frames) -> dict:
	"""
	Transform of a resolved preset at a scene-relative frame.

	Args:
		preset: Output of resolve_motion().
		frame: Scene-relative frame.
		duration_frames: Scene length in frames.

	Returns:
		dict with scale, translate_x_pct, translate_y_pct (percent of frame).
	"""
	transform = identity_transform()
	motion_type = preset.get('motion_type', 'none')
	params = preset.get('params') or {}
	duration_frames = max(0, int(duration_frames))
	if motion_type in ('zoom', 'combined'):
		start_scale = _param(params, 'start_scale', 1.0)
		end_scale = _param(params, 'end_scale', 1.05)
		transform['scale'] = utils.interpolate(frame, (0, duration_frames),
			(start_scale, end_scale))
	if motion_type in ('pan', 'combined'):
		transform['translate_x_pct'] = utils.interpolate(frame, (0, duration_frames),
			(_param(params, 'start_x', 0.0), _param(params, 'end_x', 0.0)),
			easing=utils.ease_in_out)
		transform['translate_y_pct'] = utils.interpolate(frame, (0, duration_frames),
			(_param(params, 'start_y', 0.0), _param(params, 'end_y', 0.0)),
			easing=utils.ease_in_out)
	if motion_type == 'hold_then_pan':
		hold_ratio = utils.clamp_unit(_param(params, 'hold_ratio', DEFAULT_HOLD_RATIO))
		hold_frames = int(duration_frames * hold_ratio)
		start_x = _param(params, 'start_x', 0.0)
		start_y = _param(params, 'start_y', 0.0)
		if frame <= hold_frames:
			transform['translate_x_pct'] = start_x
			transform['translate_y_pct'] = start_y
		else:
			transform['translate_x_pct'] = utils.interpolate(frame,
				(hold_frames, duration_frames),
				(start_x, _param(params, 'end_x', 0.0)), easing=utils.ease_out)
			transform['translate_y_pct'] = utils.interpolate(frame,
				(hold_frames, duration_frames),
				(start_y, _param(params, 'end_y', 0.0)), easing=utils.ease_out)
	return transform
