#!/usr/bin/env python3

"""
Global background music volume around scene-level music cues.

While a scene plays its own music the document music is muted outright
(no partial duck, two music beds at once are never audible). Around each
muted interval the document music fades out before and fades back in
after, over FADE_DURATION_MS. Intervals are computed once per document;
the volume is then a pure function of the absolute frame.

Known edge case: when two intervals sit closer than two fade lengths, a
frame can be both in the fade-in after one interval and the fade-out
before the next. The first interval in document order decides.
"""

from reelplanlib.core import utils

#============================================

FADE_DURATION_MS = 120
DEFAULT_BASE_VOLUME = 0.3
MUTE_VOLUME = 0.0

#============================================

def resolve_base_volume(build_settings: dict, global_bgm: dict) -> float:
	audio_settings = (build_settings or {}).get('audio') or {}
	base_volume = audio_settings.get('bgm_volume')
	if base_volume is None and global_bgm is not None:
		base_volume = global_bgm.get('volume')
	if base_volume is None:
		base_volume = DEFAULT_BASE_VOLUME
	return utils.clamp_unit(base_volume)

#============================================

def fade_frames_for(fps, fade_ms=FADE_DURATION_MS) -> int:
	return max(0, utils.ms_to_frame(utils.non_negative_ms(fade_ms, 0), fps))

#============================================

def clamp_scene_bgm_window(scene_bgm: dict, scene_duration_ms) -> tuple:
	"""
	Scene-relative (start_ms, end_ms) of a scene music cue, clamped to the scene.
	"""
	duration_ms = utils.non_negative_ms(scene_duration_ms, 0)
	raw_start = scene_bgm.get('start_ms')
	raw_end = scene_bgm.get('end_ms')
	if raw_start is None:
		raw_start = 0
	if raw_end is None:
		raw_end = duration_ms
	start_ms = utils.clamp(raw_start, 0, duration_ms)
	end_ms = utils.clamp(raw_end, start_ms, duration_ms)
	return (start_ms, end_ms)

#============================================

def scene_bgm_interval(entry: dict, fps) -> dict:
	"""
	Absolute frame interval of one timeline entry's scene music, or None.
	"""
	scene = entry['scene']
	scene_bgm = scene['assets'].get('bgm')
	if scene_bgm is None:
		return None
	(start_ms, end_ms) = clamp_scene_bgm_window(scene_bgm,
		scene['timing']['duration_ms'])
	start_frame = entry['start_frame'] + utils.ms_to_frame(start_ms, fps)
	end_frame = min(entry['end_frame'],
		entry['start_frame'] + utils.ms_to_frame(end_ms, fps))
	if end_frame <= start_frame:
		return None
	return {
		'scene_idx': scene['idx'],
		'start_frame': start_frame,
		'end_frame': end_frame,
		'start_ms': start_ms,
		'end_ms': end_ms,
	}

#============================================

def build_scene_bgm_intervals(layout: list, fps) -> list:
	"""
	Absolute [start_frame, end_frame) intervals where scene music plays.

	Args:
		layout: Timeline entries from TimelinePlanner.assemble().
		fps: Frame rate.

	Returns:
		list of interval dicts in document order. Empty intervals are dropped.
	"""
	intervals = []
	for entry in layout:
		interval = scene_bgm_interval(entry, fps)
		if interval is not None:
			intervals.append(interval)
	return intervals

#============================================

def is_in_scene_bgm_interval(intervals: list, frame) -> bool:
	for interval in intervals:
		if frame >= interval['start_frame'] and frame < interval['end_frame']:
			return True
	return False

#============================================

def global_bgm_volume(intervals: list, frame, fade_frames: int,
	base_volume=DEFAULT_BASE_VOLUME) -> float:
	base_volume = utils.clamp_unit(base_volume)
	if is_in_scene_bgm_interval(intervals, frame):
		return MUTE_VOLUME
	for interval in intervals:
		start_frame = interval['start_frame']
		end_frame = interval['end_frame']
		if frame >= start_frame - fade_frames and frame < start_frame:
			volume = utils.interpolate(frame, (start_frame - fade_frames, start_frame),
				(base_volume, MUTE_VOLUME))
			return utils.clamp_unit(volume)
		if frame >= end_frame and frame < end_frame + fade_frames:
			volume = utils.interpolate(frame, (end_frame, end_frame + fade_frames),
				(MUTE_VOLUME, base_volume))
			return utils.clamp_unit(volume)
	return base_volume
