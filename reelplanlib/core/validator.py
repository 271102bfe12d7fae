#!/usr/bin/env python3

"""
Preflight checks run before a render.

The validator only reports. Critical errors mean the render would fail or
show broken media; warnings flag documents that render but are probably
not what the author meant. Nothing here raises.
"""

from reelplanlib.core import ducking
from reelplanlib.core import schema
from reelplanlib.core import voices

#============================================

ABSOLUTE_URL_PREFIXES = ('http://', 'https://')

#============================================

def is_absolute_url(url) -> bool:
	if not isinstance(url, str):
		return False
	return url.startswith(ABSOLUTE_URL_PREFIXES)

#============================================

def _check_url(url, label: str, critical_errors: list) -> None:
	if not url:
		critical_errors.append(f"{label}: url is empty")
		return
	if not is_absolute_url(url):
		critical_errors.append(f"{label}: url is not absolute: {url}")

#============================================

def validate_scenes(scenes: list) -> dict:
	"""
	Check resolved scenes for render blockers and likely mistakes.

	Args:
		scenes: Scenes after duration resolution.

	Returns:
		dict with is_valid, critical_errors and warnings.
	"""
	critical_errors = []
	warnings = []
	previous_idx = None
	seen_idx = set()
	for scene in scenes:
		idx = scene['idx']
		label = f"scene {idx}"
		if idx in seen_idx:
			critical_errors.append(f"{label}: idx is not unique")
		elif previous_idx is not None and _idx_key(idx) <= _idx_key(previous_idx):
			critical_errors.append(f"{label}: idx is not increasing")
		seen_idx.add(idx)
		previous_idx = idx
		assets = scene['assets']
		image = assets.get('image')
		video_clip = assets.get('video_clip')
		if image is None and video_clip is None:
			critical_errors.append(f"{label}: needs an image or a video clip")
		if isinstance(image, dict):
			_check_url(image.get('url'), f"{label} image", critical_errors)
		elif image is not None:
			_check_url(image, f"{label} image", critical_errors)
		for voice in assets.get('voices') or []:
			_check_url(voice.get('audio_url'), f"{label} voice {voice.get('id')}",
				critical_errors)
		scene_voices = scene.get('effective_voices') or []
		if len(scene_voices) == 0 and video_clip is None:
			warnings.append(f"{label}: scene is silent")
		for (first_id, second_id) in voices.find_overlapping_voices(scene_voices):
			warnings.append(f"{label}: voice {second_id} overlaps voice {first_id}")
		if scene.get('text_render_mode') == schema.TEXT_RENDER_BAKED:
			for overlay in scene.get('overlays') or []:
				if not overlay.get('bubble_image_url'):
					warnings.append(
						f"{label}: baked overlay {overlay.get('id')} has no image and is skipped"
					)
		scene_bgm = assets.get('bgm')
		if scene_bgm is not None:
			(start_ms, end_ms) = ducking.clamp_scene_bgm_window(scene_bgm,
				scene['timing']['duration_ms'])
			if end_ms <= start_ms:
				warnings.append(f"{label}: scene bgm window is empty")
	return {
		'is_valid': len(critical_errors) == 0,
		'critical_errors': critical_errors,
		'warnings': warnings,
	}

#============================================

def _idx_key(idx):
	try:
		return float(idx)
	except (TypeError, ValueError):
		return float('-inf')
