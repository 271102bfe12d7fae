#!/usr/bin/env python3

"""
Audio clip schedule for a laid-out timeline.

Four tracks are scheduled: narration voices, per-scene sound effects,
per-scene music and the document-wide music bed. Every clip is a plain
dict with absolute frame bounds, so a renderer or exporter can place it
without knowing anything about scenes.
"""

import numpy
from reelplanlib.core import ducking
from reelplanlib.core import utils

#============================================

DEFAULT_NARRATION_VOLUME = 1.0
DEFAULT_SFX_VOLUME = 0.8

TRACK_VOICE = 'voice'
TRACK_SFX = 'sfx'
TRACK_SCENE_BGM = 'scene_bgm'
TRACK_GLOBAL_BGM = 'global_bgm'

TRACK_ORDER = (TRACK_VOICE, TRACK_SFX, TRACK_SCENE_BGM, TRACK_GLOBAL_BGM)

SLOPE_TOLERANCE = 1e-9

#============================================

def _volume_segment(start_frame: int, end_frame: int, start_volume: float,
	end_volume: float) -> dict:
	return {
		'start_frame': start_frame,
		'end_frame': end_frame,
		'start_volume': start_volume,
		'end_volume': end_volume,
	}

#============================================

class AudioPlanner():
	def __init__(self, layout: list, fps, build_settings: dict = None,
		global_bgm: dict = None, bgm_fade_ms=ducking.FADE_DURATION_MS):
		self.layout = layout
		self.fps = utils.parse_fps(fps)
		self.build_settings = build_settings or {}
		self.global_bgm = global_bgm
		audio_settings = self.build_settings.get('audio') or {}
		narration_volume = audio_settings.get('narration_volume')
		if narration_volume is None:
			narration_volume = DEFAULT_NARRATION_VOLUME
		self.narration_volume = utils.clamp_unit(narration_volume)
		self.base_volume = ducking.resolve_base_volume(self.build_settings, global_bgm)
		self.fade_frames = ducking.fade_frames_for(self.fps, bgm_fade_ms)
		self.intervals = ducking.build_scene_bgm_intervals(layout, self.fps)
		self.clips = []

	#============================
	def _frames(self, ms) -> int:
		return utils.ms_to_frame(utils.non_negative_ms(ms, 0), self.fps)

	#============================
	def _total_ms(self):
		if len(self.layout) == 0:
			return 0
		last = self.layout[-1]
		return last['start_ms'] + last['duration_ms']

	#============================
	def build(self) -> list:
		clips = []
		for entry in self.layout:
			clips.extend(self._voice_clips(entry))
			clips.extend(self._sfx_clips(entry))
			scene_bgm_clip = self._scene_bgm_clip(entry)
			if scene_bgm_clip is not None:
				clips.append(scene_bgm_clip)
		global_clip = self._global_bgm_clip()
		if global_clip is not None:
			clips.append(global_clip)
		self.clips = clips
		return clips

	#============================
	def _voice_clips(self, entry: dict) -> list:
		clips = []
		scene = entry['scene']
		for voice in scene.get('effective_voices') or []:
			url = voice.get('audio_url')
			if not url:
				continue
			start_frame = entry['start_frame'] + self._frames(voice.get('start_ms'))
			end_frame = min(entry['end_frame'],
				start_frame + self._frames(voice.get('duration_ms')))
			if end_frame <= start_frame:
				continue
			clips.append({
				'track': TRACK_VOICE,
				'id': voice.get('id'),
				'scene_idx': scene['idx'],
				'url': url,
				'start_frame': start_frame,
				'end_frame': end_frame,
				'offset_frames': 0,
				'source_frames': None,
				'loop': False,
				'volume': self.narration_volume,
				'fade_in_frames': 0,
				'fade_out_frames': 0,
				'text': voice.get('text', ''),
			})
		return clips

	#============================
	def _sfx_clips(self, entry: dict) -> list:
		clips = []
		scene = entry['scene']
		scene_ms = scene['timing']['duration_ms']
		for sfx in scene.get('sfx') or []:
			url = sfx.get('url')
			if not url:
				continue
			start_ms = utils.clamp(utils.non_negative_ms(sfx.get('start_ms'), 0), 0, scene_ms)
			end_ms = sfx.get('end_ms')
			if end_ms is None and sfx.get('duration_ms') is not None:
				end_ms = start_ms + utils.non_negative_ms(sfx.get('duration_ms'), 0)
			if end_ms is None:
				end_ms = scene_ms
			end_ms = utils.clamp(end_ms, start_ms, scene_ms)
			start_frame = entry['start_frame'] + self._frames(start_ms)
			end_frame = min(entry['end_frame'], entry['start_frame'] + self._frames(end_ms))
			if end_frame <= start_frame:
				continue
			volume = sfx.get('volume')
			if volume is None:
				volume = DEFAULT_SFX_VOLUME
			clips.append({
				'track': TRACK_SFX,
				'id': sfx.get('id'),
				'scene_idx': scene['idx'],
				'url': url,
				'name': sfx.get('name'),
				'start_frame': start_frame,
				'end_frame': end_frame,
				'offset_frames': 0,
				'source_frames': None,
				'loop': bool(sfx.get('loop', False)),
				'volume': utils.clamp_unit(volume),
				'fade_in_frames': self._frames(sfx.get('fade_in_ms')),
				'fade_out_frames': self._frames(sfx.get('fade_out_ms')),
			})
		return clips

	#============================
	def _scene_bgm_clip(self, entry: dict) -> dict:
		interval = ducking.scene_bgm_interval(entry, self.fps)
		if interval is None:
			return None
		scene_bgm = entry['scene']['assets']['bgm']
		return {
			'track': TRACK_SCENE_BGM,
			'id': f"scene-bgm-{interval['scene_idx']}",
			'scene_idx': interval['scene_idx'],
			'url': scene_bgm['url'],
			'name': scene_bgm.get('name'),
			'start_frame': interval['start_frame'],
			'end_frame': interval['end_frame'],
			'offset_frames': self._frames(scene_bgm.get('audio_offset_ms')),
			'source_frames': None,
			'loop': scene_bgm['loop'],
			'volume': utils.clamp_unit(scene_bgm['volume']),
			'fade_in_frames': self._frames(scene_bgm.get('fade_in_ms')),
			'fade_out_frames': self._frames(scene_bgm.get('fade_out_ms')),
		}

	#============================
	def _global_bgm_clip(self) -> dict:
		if self.global_bgm is None:
			return None
		audio_settings = self.build_settings.get('audio') or {}
		if audio_settings.get('bgm_enabled') is False:
			return None
		total_ms = self._total_ms()
		window_start_ms = utils.non_negative_ms(self.global_bgm.get('video_start_ms'), 0)
		window_end_ms = self.global_bgm.get('video_end_ms')
		if window_end_ms is None:
			window_end_ms = total_ms
		window_end_ms = utils.clamp(window_end_ms, 0, total_ms)
		if window_end_ms - window_start_ms <= 0:
			return None
		source_frames = None
		if self.global_bgm.get('duration_ms') is not None:
			source_frames = self._frames(self.global_bgm.get('duration_ms'))
		return {
			'track': TRACK_GLOBAL_BGM,
			'id': 'global-bgm',
			'scene_idx': None,
			'url': self.global_bgm['url'],
			'start_frame': self._frames(window_start_ms),
			'end_frame': self._frames(window_end_ms),
			'offset_frames': self._frames(self.global_bgm.get('audio_offset_ms')),
			'source_frames': source_frames,
			'loop': self.global_bgm['loop'],
			'volume': self.base_volume,
			'fade_in_frames': 0,
			'fade_out_frames': 0,
		}

	#============================
	def global_clip(self) -> dict:
		for clip in self.clips:
			if clip['track'] == TRACK_GLOBAL_BGM:
				return clip
		return None

	#============================
	def clip_volume(self, clip: dict, frame) -> float:
		"""
		Playback volume of a scheduled clip at an absolute frame.

		Args:
			clip: Entry from build().
			frame: Absolute frame.

		Returns:
			float in [0, 1]; 0 outside the clip or past the end of a
			non-looping source.
		"""
		if frame < clip['start_frame'] or frame >= clip['end_frame']:
			return 0.0
		source_frames = clip.get('source_frames')
		if not clip['loop'] and source_frames is not None:
			if frame - clip['start_frame'] + clip['offset_frames'] >= source_frames:
				return 0.0
		if clip['track'] == TRACK_GLOBAL_BGM:
			return ducking.global_bgm_volume(self.intervals, frame,
				self.fade_frames, self.base_volume)
		volume = clip['volume']
		fade_in = clip['fade_in_frames']
		fade_out = clip['fade_out_frames']
		if fade_in > 0 and frame < clip['start_frame'] + fade_in:
			volume *= utils.interpolate(frame,
				(clip['start_frame'], clip['start_frame'] + fade_in), (0.0, 1.0))
		if fade_out > 0 and frame >= clip['end_frame'] - fade_out:
			volume *= utils.interpolate(frame,
				(clip['end_frame'] - fade_out, clip['end_frame']), (1.0, 0.0))
		return utils.clamp_unit(volume)

	#============================
	def volume_segments(self, clip: dict) -> list:
		"""
		Split a clip into runs of frames where its volume moves linearly.

		Args:
			clip: Entry from build().

		Returns:
			list of dicts with start_frame, end_frame (exclusive),
			start_volume and end_volume (volume at the last frame of the run).
		"""
		segments = []
		if clip['end_frame'] <= clip['start_frame']:
			return segments
		run_start = clip['start_frame']
		first = self.clip_volume(clip, run_start)
		previous = first
		slope = None
		for frame in range(clip['start_frame'] + 1, clip['end_frame']):
			volume = self.clip_volume(clip, frame)
			step = volume - previous
			if slope is None:
				slope = step
			elif abs(step - slope) > SLOPE_TOLERANCE:
				segments.append(_volume_segment(run_start, frame, first, previous))
				run_start = frame
				first = volume
				slope = None
			previous = volume
		segments.append(_volume_segment(run_start, clip['end_frame'], first, previous))
		return segments

	#============================
	def active_clips(self, frame) -> list:
		active = []
		for clip in self.clips:
			if frame < clip['start_frame'] or frame >= clip['end_frame']:
				continue
			active.append({
				'track': clip['track'],
				'id': clip['id'],
				'url': clip['url'],
				'scene_idx': clip['scene_idx'],
				'source_frame': frame - clip['start_frame'] + clip['offset_frames'],
				'volume': self.clip_volume(clip, frame),
			})
		return active

	#============================
	def global_volume(self, frame) -> float:
		clip = self.global_clip()
		if clip is None:
			return 0.0
		return self.clip_volume(clip, frame)

	#============================
	def volume_curve(self, frames) -> numpy.ndarray:
		"""
		Global music volume for every frame in frames (a count or an iterable).
		"""
		if isinstance(frames, int):
			frames = range(frames)
		frame_list = list(frames)
		curve = numpy.zeros(len(frame_list), dtype=numpy.float64)
		for index, frame in enumerate(frame_list):
			curve[index] = self.global_volume(frame)
		return curve
