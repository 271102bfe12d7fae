#!/usr/bin/env python3

import bisect
from reelplanlib.core import utils

#============================================

SCENE_FADE_FRAMES = 15

#============================================

class TimelinePlanner():
	def __init__(self, scenes: list, fps):
		self.scenes = scenes
		self.fps = utils.parse_fps(fps)
		self.layout = []
		self._start_frames = []

	#============================
	def assemble(self) -> list:
		layout = []
		cursor_ms = 0
		for position, scene in enumerate(self.scenes):
			duration_ms = utils.non_negative_ms(scene['timing']['duration_ms'], 0)
			start_frame = utils.ms_to_frame(cursor_ms, self.fps)
			end_frame = utils.ms_to_frame(cursor_ms + duration_ms, self.fps)
			layout.append({
				'position': position,
				'idx': scene['idx'],
				'start_ms': cursor_ms,
				'duration_ms': duration_ms,
				'start_frame': start_frame,
				'end_frame': end_frame,
				'duration_frames': end_frame - start_frame,
				'scene': scene,
			})
			cursor_ms += duration_ms
		self.layout = layout
		self._start_frames = [entry['start_frame'] for entry in layout]
		return layout

	#============================
	def total_duration_ms(self):
		if len(self.layout) == 0:
			return 0
		last = self.layout[-1]
		return last['start_ms'] + last['duration_ms']

	#============================
	def total_duration_frames(self) -> int:
		if len(self.layout) == 0:
			return 0
		return self.layout[-1]['end_frame']

	#============================
	def scene_at_frame(self, frame) -> dict:
		if frame < 0 or frame >= self.total_duration_frames():
			return None
		# bisect_right skips zero-length scenes sharing a start frame
		position = bisect.bisect_right(self._start_frames, frame) - 1
		if position < 0:
			return None
		return self.layout[position]

	#============================
	def validate_layout(self) -> None:
		expected_frame = 0
		for entry in self.layout:
			if entry['start_frame'] != expected_frame:
				raise RuntimeError(
					f"scene {entry['idx']} starts at frame {entry['start_frame']}, expected {expected_frame}"
				)
			if entry['duration_frames'] < 0:
				raise RuntimeError(f"scene {entry['idx']} has a negative frame length")
			expected_frame = entry['end_frame']

#============================================

def scene_fade_frames(duration_frames: int) -> int:
	return min(SCENE_FADE_FRAMES, max(0, int(duration_frames)) // 4)

#============================================

def scene_opacity(frame, duration_frames: int) -> float:
	fade_frames = scene_fade_frames(duration_frames)
	if fade_frames <= 0:
		return 1.0
	if frame < fade_frames:
		return utils.clamp_unit(utils.interpolate(frame, (0, fade_frames), (0.0, 1.0)))
	if frame > duration_frames - fade_frames:
		return utils.clamp_unit(utils.interpolate(frame,
			(duration_frames - fade_frames, duration_frames), (1.0, 0.0)))
	return 1.0

#============================================

def build_summary(scenes: list) -> dict:
	total_duration_ms = 0
	has_audio = False
	has_video_clips = False
	scenes_with_voices = 0
	for scene in scenes:
		total_duration_ms += scene['timing']['duration_ms']
		if len(scene.get('effective_voices') or []) > 0:
			has_audio = True
			scenes_with_voices += 1
		if scene['assets'].get('video_clip') is not None:
			has_video_clips = True
	return {
		'total_scenes': len(scenes),
		'total_duration_ms': total_duration_ms,
		'has_audio': has_audio,
		'has_video_clips': has_video_clips,
		'scenes_with_voices': scenes_with_voices,
	}
