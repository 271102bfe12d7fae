#!/usr/bin/env python3

"""
Caption and speech-balloon overlay visibility.

An overlay shows on the half-open window [start_ms, end_ms) of its scene
and fades in and out linearly over FADE_DURATION_MS at both edges. In
baked-into-image mode the text already lives in a pre-rendered image, so an
overlay without that image is skipped and no text is ever drawn.
"""

from reelplanlib.core import schema
from reelplanlib.core import utils

#============================================

FADE_DURATION_MS = 150
DEFAULT_Z_INDEX = 10

#============================================

def overlay_opacity(overlay: dict, t_ms, fade_ms=FADE_DURATION_MS) -> float:
	start_ms = overlay.get('start_ms')
	end_ms = overlay.get('end_ms')
	if start_ms is None or end_ms is None:
		return 0.0
	if t_ms < start_ms or t_ms >= end_ms:
		return 0.0
	fade_ms = utils.non_negative_ms(fade_ms, 0)
	fade_in_end = start_ms + fade_ms
	fade_out_start = end_ms - fade_ms
	if t_ms < fade_in_end:
		opacity = utils.interpolate(t_ms, (start_ms, fade_in_end), (0.0, 1.0))
	elif t_ms >= fade_out_start:
		opacity = utils.interpolate(t_ms, (fade_out_start, end_ms), (1.0, 0.0))
	else:
		opacity = 1.0
	return utils.clamp_unit(opacity)

#============================================

def is_overlay_renderable(overlay: dict, text_render_mode: str) -> bool:
	if text_render_mode == schema.TEXT_RENDER_NONE:
		return False
	if text_render_mode == schema.TEXT_RENDER_BAKED:
		if not overlay.get('bubble_image_url'):
			return False
	return True

#============================================

def overlay_box(overlay: dict, width: int, height: int) -> dict:
	position = overlay.get('position') or {}
	size = overlay.get('size') or {}
	x_frac = utils.clamp_unit(position.get('x', 0.0))
	y_frac = utils.clamp_unit(position.get('y', 0.0))
	w_frac = utils.clamp_unit(size.get('w', 0.0))
	h_frac = utils.clamp_unit(size.get('h', 0.0))
	return {
		'left': x_frac * width,
		'top': y_frac * height,
		'width': w_frac * width,
		'height': h_frac * height,
	}

#============================================

def visible_overlays(scene: dict, t_ms, width: int, height: int,
	fade_ms=FADE_DURATION_MS) -> list:
	"""
	Overlays of a scene drawn at scene-relative time t_ms, lowest z first.

	Args:
		scene: Normalized scene.
		t_ms: Scene-relative time in milliseconds.
		width: Frame width in pixels.
		height: Frame height in pixels.
		fade_ms: Edge fade length.

	Returns:
		list of dicts with id, opacity, box, z_index, and either image_url
		(baked) or text and style (overlay-rendered).
	"""
	mode = scene.get('text_render_mode', schema.TEXT_RENDER_OVERLAY)
	visible = []
	for overlay in scene.get('overlays') or []:
		if not is_overlay_renderable(overlay, mode):
			continue
		opacity = overlay_opacity(overlay, t_ms, fade_ms)
		if opacity <= 0.0:
			continue
		z_index = overlay.get('z_index')
		if z_index is None:
			z_index = DEFAULT_Z_INDEX
		item = {
			'id': overlay.get('id'),
			'opacity': opacity,
			'z_index': z_index,
			'shape': overlay.get('shape', 'round'),
			'box': overlay_box(overlay, width, height),
		}
		if mode == schema.TEXT_RENDER_BAKED:
			item['image_url'] = overlay.get('bubble_image_url')
			item['draw_text'] = False
		else:
			item['text'] = overlay.get('text', '')
			item['style'] = overlay.get('style') or {}
			item['draw_text'] = True
		visible.append(item)
	visible.sort(key=lambda item: item['z_index'])
	return visible
