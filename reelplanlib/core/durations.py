#!/usr/bin/env python3

from reelplanlib.core import utils
from reelplanlib.core import voices

#============================================

MS_PER_CHAR = 300
MIN_SCENE_DURATION_MS = 2000
DEFAULT_SCENE_DURATION_MS = 5000

#============================================

def resolve_scene_duration(assets: dict, dialogue: str = '',
	head_pad_ms=0, tail_pad_ms=0, default_ms=DEFAULT_SCENE_DURATION_MS):
	result = resolve_scene_duration_with_reason(assets, dialogue,
		head_pad_ms, tail_pad_ms, default_ms)
	return result['duration_ms']

#============================================

def resolve_scene_duration_with_reason(assets: dict, dialogue: str = '',
	head_pad_ms=0, tail_pad_ms=0, default_ms=DEFAULT_SCENE_DURATION_MS) -> dict:
	"""
	Resolve a scene duration by strict source priority.

	Order: voice cues, video clip, legacy audio, dialogue estimate, default.
	Newer data always wins when several sources are present.

	Args:
		assets: Scene asset bundle.
		dialogue: Legacy dialogue text.
		head_pad_ms: Silence before the audio.
		tail_pad_ms: Silence after the audio.
		default_ms: Duration for scenes with nothing to measure.

	Returns:
		dict with duration_ms and reason
		(voice, video, audio, estimate, default).
	"""
	assets = assets or {}
	head_pad_ms = utils.non_negative_ms(head_pad_ms, 0)
	tail_pad_ms = utils.non_negative_ms(tail_pad_ms, 0)
	padding_ms = head_pad_ms + tail_pad_ms
	voice_list = assets.get('voices') or []
	if len(voice_list) > 0:
		total_ms = 0
		for voice in voice_list:
			total_ms += utils.non_negative_ms(voice.get('duration_ms'), 0)
		return {'duration_ms': total_ms + padding_ms, 'reason': 'voice'}
	video_clip = assets.get('video_clip')
	if isinstance(video_clip, dict) and video_clip.get('duration_ms') is not None:
		# clip length is authoritative, padding is not applied
		clip_ms = utils.non_negative_ms(video_clip.get('duration_ms'), 0)
		return {'duration_ms': clip_ms, 'reason': 'video'}
	audio = assets.get('audio')
	if isinstance(audio, dict) and audio.get('duration_ms') is not None:
		audio_ms = utils.non_negative_ms(audio.get('duration_ms'), 0)
		return {'duration_ms': audio_ms + padding_ms, 'reason': 'audio'}
	if dialogue:
		estimated_ms = max(MIN_SCENE_DURATION_MS, len(dialogue) * MS_PER_CHAR)
		return {'duration_ms': estimated_ms + padding_ms, 'reason': 'estimate'}
	return {'duration_ms': default_ms, 'reason': 'default'}

#============================================

def resolve_scene_timings(scenes: list,
	default_ms=DEFAULT_SCENE_DURATION_MS) -> list:
	"""
	Fill timing.start_ms/duration_ms and voice start offsets on normalized scenes.
	"""
	resolved = []
	cursor_ms = 0
	for scene in scenes:
		timing = dict(scene['timing'])
		result = resolve_scene_duration_with_reason(scene['assets'],
			scene.get('dialogue', ''), timing.get('head_pad_ms', 0),
			timing.get('tail_pad_ms', 0), default_ms)
		timing['start_ms'] = cursor_ms
		timing['duration_ms'] = result['duration_ms']
		timing['duration_reason'] = result['reason']
		cursor_ms += result['duration_ms']
		timed_scene = dict(scene)
		timed_scene['timing'] = timing
		timed_scene['effective_voices'] = voices.resolve_voice_timings(
			scene.get('effective_voices') or [])
		resolved.append(timed_scene)
	return resolved
