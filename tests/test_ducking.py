#!/usr/bin/env python3

"""
Unit tests for global music ducking around scene music.
"""

# Standard Library
import os
import sys

# PIP3 modules
import pytest

REPO_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if REPO_ROOT not in sys.path:
	sys.path.insert(0, REPO_ROOT)

TESTS_DIR = os.path.abspath(os.path.dirname(__file__))
if TESTS_DIR not in sys.path:
	sys.path.insert(0, TESTS_DIR)
from doc_utils import make_document
from doc_utils import make_scene

# local repo modules
from reelplanlib.core import ducking
from reelplanlib.core import durations
from reelplanlib.core import schema
from reelplanlib.core import utils
from reelplanlib.core.timeline import TimelinePlanner

#============================================

FPS = 30

def _interval(start_frame: int, end_frame: int) -> dict:
	return {'scene_idx': 1, 'start_frame': start_frame, 'end_frame': end_frame}

#============================================

def test_fade_frames_for_default() -> None:
	assert ducking.fade_frames_for(FPS) == 4
	assert ducking.fade_frames_for(FPS, 0) == 0

#============================================

def test_volume_around_one_interval() -> None:
	# scene music over [1000, 3000) ms at 30 fps
	intervals = [_interval(30, 90)]
	fade = ducking.fade_frames_for(FPS)
	assert ducking.global_bgm_volume(intervals, 60, fade, 0.3) == 0.0
	assert ducking.global_bgm_volume(intervals, 15, fade, 0.3) == pytest.approx(0.3)
	assert ducking.global_bgm_volume(intervals, 30, fade, 0.3) == 0.0
	assert ducking.global_bgm_volume(intervals, 90, fade, 0.3) == pytest.approx(0.0)
	assert ducking.global_bgm_volume(intervals, 94, fade, 0.3) == pytest.approx(0.3)

#============================================

def test_fade_midpoints() -> None:
	intervals = [_interval(30, 90)]
	fade = ducking.fade_frames_for(FPS)
	before_frame = utils.ms_to_frame(1000 - 60, FPS)
	after_frame = utils.ms_to_frame(3000 + 60, FPS)
	assert ducking.global_bgm_volume(intervals, before_frame, fade, 0.3) == pytest.approx(0.15)
	assert ducking.global_bgm_volume(intervals, after_frame, fade, 0.3) == pytest.approx(0.15)

#============================================

def test_no_intervals_returns_base() -> None:
	assert ducking.global_bgm_volume([], 10, 4, 0.42) == pytest.approx(0.42)
	assert ducking.global_bgm_volume([], 10, 4) == pytest.approx(ducking.DEFAULT_BASE_VOLUME)

#============================================

def test_colliding_fades_first_interval_wins() -> None:
	intervals = [_interval(30, 40), _interval(46, 60)]
	# frame 42 is in the fade-in after the first and the fade-out before the second
	assert ducking.global_bgm_volume(intervals, 42, 4, 0.3) == pytest.approx(0.15)

#============================================

def test_resolve_base_volume() -> None:
	assert ducking.resolve_base_volume({'audio': {'bgm_volume': 0.5}}, {'volume': 0.2}) == 0.5
	assert ducking.resolve_base_volume({}, {'volume': 0.2}) == 0.2
	assert ducking.resolve_base_volume({}, None) == 0.3
	assert ducking.resolve_base_volume({'audio': {'bgm_volume': 2.0}}, None) == 1.0

#============================================

def test_clamp_scene_bgm_window() -> None:
	assert ducking.clamp_scene_bgm_window({}, 5000) == (0, 5000)
	assert ducking.clamp_scene_bgm_window({'start_ms': -100, 'end_ms': 9000}, 5000) == (0, 5000)
	assert ducking.clamp_scene_bgm_window({'start_ms': 4000, 'end_ms': 1000}, 5000) == (4000, 4000)

#============================================

def test_intervals_from_layout() -> None:
	scenes = [
		make_scene(1, assets={'bgm': {'url': 'https://cdn.example.com/s.mp3',
			'start_ms': 1000, 'end_ms': 3000}}),
		make_scene(2, assets={'bgm': {'url': 'https://cdn.example.com/t.mp3',
			'start_ms': 6000, 'end_ms': 7000}}),
		make_scene(3, bgm={'url': 'https://cdn.example.com/u.mp3'}),
	]
	normalized = schema.normalize_document(make_document(scenes))
	resolved = durations.resolve_scene_timings(normalized['scenes'])
	planner = TimelinePlanner(resolved, FPS)
	layout = planner.assemble()
	intervals = ducking.build_scene_bgm_intervals(layout, FPS)
	# the second scene's window clamps to nothing and is dropped
	assert [interval['scene_idx'] for interval in intervals] == [1, 3]
	assert (intervals[0]['start_frame'], intervals[0]['end_frame']) == (30, 90)
	assert (intervals[1]['start_frame'], intervals[1]['end_frame']) == (300, 450)
	assert ducking.is_in_scene_bgm_interval(intervals, 89)
	assert not ducking.is_in_scene_bgm_interval(intervals, 90)
