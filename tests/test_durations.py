#!/usr/bin/env python3

"""
Tests for scene duration priority and cumulative timing.
"""

# Standard Library
import os
import sys
import unittest

REPO_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if REPO_ROOT not in sys.path:
	sys.path.insert(0, REPO_ROOT)

TESTS_DIR = os.path.abspath(os.path.dirname(__file__))
if TESTS_DIR not in sys.path:
	sys.path.insert(0, TESTS_DIR)
from doc_utils import make_document
from doc_utils import make_scene
from doc_utils import make_voice

# local repo modules
from reelplanlib.core import durations
from reelplanlib.core import schema

#============================================

class SceneDurationTest(unittest.TestCase):
	#============================================
	def test_voices_sum_plus_padding(self) -> None:
		assets = {'voices': [{'duration_ms': 1200}, {'duration_ms': 800}]}
		result = durations.resolve_scene_duration(assets, '', 100, 200)
		self.assertEqual(result, 2300)

	#============================================
	def test_voices_win_over_legacy_audio(self) -> None:
		assets = {
			'voices': [{'duration_ms': 1000}],
			'audio': {'url': 'https://cdn.example.com/a.mp3', 'duration_ms': 9000},
		}
		result = durations.resolve_scene_duration_with_reason(assets)
		self.assertEqual(result['duration_ms'], 1000)
		self.assertEqual(result['reason'], 'voice')

	#============================================
	def test_video_clip_ignores_padding(self) -> None:
		assets = {'video_clip': {'url': 'https://cdn.example.com/v.mp4', 'duration_ms': 4000}}
		result = durations.resolve_scene_duration_with_reason(assets, 'hello', 500, 500)
		self.assertEqual(result['duration_ms'], 4000)
		self.assertEqual(result['reason'], 'video')

	#============================================
	def test_video_clip_beats_legacy_audio(self) -> None:
		assets = {
			'video_clip': {'url': 'https://cdn.example.com/v.mp4', 'duration_ms': 4000},
			'audio': {'url': 'https://cdn.example.com/a.mp3', 'duration_ms': 3000},
		}
		self.assertEqual(durations.resolve_scene_duration(assets), 4000)

	#============================================
	def test_legacy_audio_plus_padding(self) -> None:
		assets = {'audio': {'url': 'https://cdn.example.com/a.mp3', 'duration_ms': 3000}}
		result = durations.resolve_scene_duration_with_reason(assets, '', 100, 0)
		self.assertEqual(result['duration_ms'], 3100)
		self.assertEqual(result['reason'], 'audio')

	#============================================
	def test_dialogue_estimate_has_floor(self) -> None:
		self.assertEqual(durations.resolve_scene_duration({}, 'abc'), 2000)
		self.assertEqual(durations.resolve_scene_duration({}, 'a' * 10), 3000)
		self.assertEqual(durations.resolve_scene_duration({}, 'a' * 10, 0, 250), 3250)

	#============================================
	def test_default_duration(self) -> None:
		result = durations.resolve_scene_duration_with_reason({})
		self.assertEqual(result['duration_ms'], 5000)
		self.assertEqual(result['reason'], 'default')
		self.assertEqual(durations.resolve_scene_duration({}, default_ms=7000), 7000)

	#============================================
	def test_negative_voice_duration_counts_as_zero(self) -> None:
		assets = {'voices': [{'duration_ms': -500}, {'duration_ms': 700}]}
		self.assertEqual(durations.resolve_scene_duration(assets), 700)

#============================================

class SceneTimingTest(unittest.TestCase):
	#============================================
	def test_cumulative_start_ignores_authored_values(self) -> None:
		scenes = [
			make_scene(1, voices=[make_voice('a', 5000)], timing={'start_ms': 999, 'duration_ms': 1}),
			make_scene(2, voices=[make_voice('b', 3000)]),
			make_scene(3, voices=[make_voice('c', 4000)]),
		]
		normalized = schema.normalize_document(make_document(scenes))
		resolved = durations.resolve_scene_timings(normalized['scenes'])
		starts = [scene['timing']['start_ms'] for scene in resolved]
		self.assertEqual(starts, [0, 5000, 8000])
		self.assertEqual(resolved[0]['timing']['authored_start_ms'], 999)
		self.assertEqual(resolved[0]['timing']['duration_ms'], 5000)

	#============================================
	def test_voice_offsets_are_filled(self) -> None:
		scenes = [make_scene(1, voices=[make_voice('a', 1000), make_voice('b', 500)])]
		normalized = schema.normalize_document(make_document(scenes))
		resolved = durations.resolve_scene_timings(normalized['scenes'])
		voice_starts = [voice['start_ms'] for voice in resolved[0]['effective_voices']]
		self.assertEqual(voice_starts, [0, 1000])

#============================================

def main() -> None:
	"""Run the unit tests."""
	unittest.main()

#============================================

if __name__ == "__main__":
	main()
