#!/usr/bin/env python3

"""
Unit tests for caption settings and per-frame caption state.
"""

# Standard Library
import os
import sys

# PIP3 modules
import pytest

REPO_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if REPO_ROOT not in sys.path:
	sys.path.insert(0, REPO_ROOT)

# local repo modules
from reelplanlib.core import schema
from reelplanlib.core import subtitles

#============================================

def _scene(mode: str = schema.TEXT_RENDER_OVERLAY, voice_list: list = None,
	dialogue: str = '') -> dict:
	return {
		'idx': 1,
		'text_render_mode': mode,
		'dialogue': dialogue,
		'effective_voices': voice_list or [],
	}

#============================================

def _voices() -> list:
	return [
		{'id': 'a', 'start_ms': 0, 'duration_ms': 1000, 'text': 'first line'},
		{'id': 'b', 'start_ms': 2000, 'duration_ms': 1000, 'text': 'second line'},
	]

#============================================

def test_default_settings() -> None:
	telops = subtitles.parse_telop_settings({})
	assert telops['enabled'] is True
	assert telops['style_preset'] == 'outline'
	assert telops['size_preset'] == 'md'
	assert telops['font_size'] == 38
	assert telops['position_preset'] == 'bottom'

#============================================

@pytest.mark.parametrize("raw_style,expected", [
	('news', 'band'),
	('default', 'outline'),
	('pop', 'pop'),
	('glitter', 'outline'),
])
def test_style_compat_names(raw_style, expected) -> None:
	telops = subtitles.parse_telop_settings({'telops': {'style_preset': raw_style}})
	assert telops['style_preset'] == expected

#============================================

def test_scene_override_disables_caption() -> None:
	telops = subtitles.parse_telop_settings({'telops': {'scene_overrides': {1: False}}})
	assert subtitles.subtitle_enabled(telops, _scene()) is False
	telops = subtitles.parse_telop_settings({'telops': {'enabled': False,
		'scene_overrides': {'1': True}}})
	assert subtitles.subtitle_enabled(telops, _scene()) is True

#============================================

def test_baked_and_none_modes_have_no_caption() -> None:
	telops = subtitles.parse_telop_settings({})
	assert subtitles.subtitle_enabled(telops, _scene(schema.TEXT_RENDER_BAKED)) is False
	assert subtitles.subtitle_enabled(telops, _scene(schema.TEXT_RENDER_NONE)) is False

#============================================

def test_caption_text_follows_voice() -> None:
	scene = _scene(voice_list=_voices(), dialogue='ignored')
	assert subtitles.subtitle_text(scene, 500) == 'first line'
	assert subtitles.subtitle_text(scene, 1500) == ''
	assert subtitles.subtitle_text(scene, 2500) == 'second line'

#============================================

def test_caption_text_uses_dialogue_without_voices() -> None:
	assert subtitles.subtitle_text(_scene(dialogue='plain'), 100) == 'plain'

#============================================

def test_caption_opacity() -> None:
	assert subtitles.subtitle_opacity(0, 100) == 0.0
	assert subtitles.subtitle_opacity(5, 100) == pytest.approx(0.5)
	assert subtitles.subtitle_opacity(50, 100) == 1.0
	assert subtitles.subtitle_opacity(100, 100) == 0.0
	assert subtitles.subtitle_opacity(0, 1) == 1.0

#============================================

def test_subtitle_at() -> None:
	telops = subtitles.parse_telop_settings({'telops': {'size_preset': 'lg'}})
	scene = _scene(voice_list=_voices())
	caption = subtitles.subtitle_at(telops, scene, 15, 90, 500)
	assert caption['text'] == 'first line'
	assert caption['font_size'] == 52
	assert caption['opacity'] == 1.0
	assert subtitles.subtitle_at(telops, scene, 45, 90, 1500) is None
