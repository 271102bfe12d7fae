#!/usr/bin/env python3

from reelplanlib.core import schema
from reelplanlib.core import utils
from reelplanlib.core import voices

#============================================

SUBTITLE_FADE_FRAMES = 10

STYLE_PRESETS = ('minimal', 'outline', 'band', 'pop', 'cinematic')

STYLE_COMPAT_MAP = {
	'default': 'outline',
	'news': 'band',
}

SIZE_PRESETS = {
	'sm': 28,
	'md': 38,
	'lg': 52,
}

#============================================

def parse_telop_settings(build_settings: dict) -> dict:
	telops = (build_settings or {}).get('telops') or {}
	style_preset = telops.get('style_preset') or 'outline'
	style_preset = STYLE_COMPAT_MAP.get(style_preset, style_preset)
	if style_preset not in STYLE_PRESETS:
		style_preset = 'outline'
	size_preset = telops.get('size_preset') or 'md'
	if size_preset not in SIZE_PRESETS:
		size_preset = 'md'
	overrides = {}
	for key, value in (telops.get('scene_overrides') or {}).items():
		overrides[str(key)] = bool(value)
	return {
		'enabled': telops.get('enabled', True) is not False,
		'style_preset': style_preset,
		'size_preset': size_preset,
		'font_size': SIZE_PRESETS[size_preset],
		'position_preset': telops.get('position_preset') or 'bottom',
		'custom_style': telops.get('custom_style'),
		'typography': telops.get('typography'),
		'scene_overrides': overrides,
	}

#============================================

def subtitle_enabled(telops: dict, scene: dict) -> bool:
	if scene.get('text_render_mode') != schema.TEXT_RENDER_OVERLAY:
		return False
	enabled = telops['enabled']
	scene_key = str(scene['idx'])
	if scene_key in telops['scene_overrides']:
		enabled = telops['scene_overrides'][scene_key]
	return enabled

#============================================

def subtitle_text(scene: dict, t_ms) -> str:
	scene_voices = scene.get('effective_voices') or []
	current = voices.find_active_voice(scene_voices, t_ms)
	if current is not None and current.get('text'):
		return current['text']
	if len(scene_voices) == 0:
		return scene.get('dialogue') or ''
	return ''

#============================================

def subtitle_opacity(frame, duration_frames: int) -> float:
	fade_frames = SUBTITLE_FADE_FRAMES
	if duration_frames <= 2 * fade_frames:
		fade_frames = max(0, int(duration_frames) // 2)
	if fade_frames <= 0:
		return 1.0
	if frame < fade_frames:
		return utils.clamp_unit(utils.interpolate(frame, (0, fade_frames), (0.0, 1.0)))
	if frame > duration_frames - fade_frames:
		return utils.clamp_unit(utils.interpolate(frame,
			(duration_frames - fade_frames, duration_frames), (1.0, 0.0)))
	return 1.0

#============================================

def subtitle_at(telops: dict, scene: dict, frame, duration_frames: int, t_ms) -> dict:
	if not subtitle_enabled(telops, scene):
		return None
	text = subtitle_text(scene, t_ms)
	if text.strip() == '':
		return None
	return {
		'text': text,
		'opacity': subtitle_opacity(frame, duration_frames),
		'style_preset': telops['style_preset'],
		'font_size': telops['font_size'],
		'position': telops['position_preset'],
		'custom_style': telops['custom_style'],
	}
