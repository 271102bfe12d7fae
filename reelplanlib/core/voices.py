#!/usr/bin/env python3

from reelplanlib.core import utils

#============================================

def make_legacy_voice(audio: dict, scene_idx, dialogue: str) -> dict:
	"""
	Stand-in narration cue for a scene that only carries a legacy audio track.
	"""
	if not isinstance(audio, dict) or not audio.get('url'):
		return None
	return {
		'id': f"legacy-audio-{scene_idx}",
		'role': 'narration',
		'character_key': None,
		'character_name': None,
		'audio_url': audio.get('url'),
		'duration_ms': utils.non_negative_ms(audio.get('duration_ms'), 0),
		'text': dialogue or '',
		'start_ms': 0,
		'format': audio.get('format', 'mp3'),
	}

#============================================

def has_explicit_start(voice: dict) -> bool:
	start_ms = voice.get('start_ms')
	if start_ms is None or isinstance(start_ms, bool):
		return False
	return True

#============================================

def resolve_voice_timings(voice_list: list) -> list:
	resolved = []
	cursor_ms = 0
	for voice in voice_list or []:
		duration_ms = utils.non_negative_ms(voice.get('duration_ms'), 0)
		if has_explicit_start(voice):
			start_ms = voice['start_ms']
		else:
			start_ms = cursor_ms
		cursor_ms = start_ms + duration_ms
		timed_voice = dict(voice)
		timed_voice['start_ms'] = start_ms
		resolved.append(timed_voice)
	return resolved

#============================================

def voice_end_ms(voice: dict):
	start_ms = voice.get('start_ms') or 0
	return start_ms + utils.non_negative_ms(voice.get('duration_ms'), 0)

#============================================

def find_active_voice(voice_list: list, t_ms: float) -> dict:
	for voice in voice_list or []:
		start_ms = voice.get('start_ms') or 0
		if t_ms >= start_ms and t_ms < voice_end_ms(voice):
			return voice
	return None

#============================================

def find_overlapping_voices(voice_list: list) -> list:
	"""
	Pairs of consecutive resolved cues whose audio would overlap.

	Only reported; playback keeps the authored start times.
	"""
	overlaps = []
	previous = None
	for voice in voice_list or []:
		if previous is not None:
			if (voice.get('start_ms') or 0) < voice_end_ms(previous):
				overlaps.append((previous.get('id'), voice.get('id')))
		previous = voice
	return overlaps
