#!/usr/bin/env python3

"""
Unit tests for overlay visibility and fades.
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
from reelplanlib.core import overlays
from reelplanlib.core import schema

#============================================

def _overlay(overlay_id: str = 'b1', **extra) -> dict:
	overlay = {
		'id': overlay_id,
		'text': 'hello',
		'start_ms': 1000,
		'end_ms': 2000,
		'position': {'x': 0.1, 'y': 0.2},
		'size': {'w': 0.5, 'h': 0.25},
	}
	overlay.update(extra)
	return overlay

#============================================

def _scene(mode: str, overlay_list: list) -> dict:
	return {'idx': 1, 'text_render_mode': mode, 'overlays': overlay_list}

#============================================

@pytest.mark.parametrize("t_ms,expected", [
	(999, 0.0),
	(1000, 0.0),
	(1075, 0.5),
	(1500, 1.0),
	(1925, 0.5),
	(2000, 0.0),
	(2500, 0.0),
])
def test_overlay_opacity(t_ms, expected) -> None:
	assert overlays.overlay_opacity(_overlay(), t_ms) == pytest.approx(expected)

#============================================

def test_missing_window_is_hidden() -> None:
	assert overlays.overlay_opacity({'start_ms': 1000}, 1500) == 0.0

#============================================

def test_baked_without_image_is_skipped() -> None:
	scene = _scene(schema.TEXT_RENDER_BAKED, [_overlay()])
	assert overlays.visible_overlays(scene, 1500, 1000, 500) == []

#============================================

def test_baked_with_image_draws_no_text() -> None:
	overlay = _overlay(bubble_image_url='https://cdn.example.com/b1.png')
	scene = _scene(schema.TEXT_RENDER_BAKED, [overlay])
	visible = overlays.visible_overlays(scene, 1500, 1000, 500)
	assert len(visible) == 1
	assert visible[0]['draw_text'] is False
	assert visible[0]['image_url'] == 'https://cdn.example.com/b1.png'
	assert 'text' not in visible[0]

#============================================

def test_none_mode_draws_nothing() -> None:
	scene = _scene(schema.TEXT_RENDER_NONE, [_overlay()])
	assert overlays.visible_overlays(scene, 1500, 1000, 500) == []

#============================================

def test_overlay_mode_box_and_order() -> None:
	scene = _scene(schema.TEXT_RENDER_OVERLAY, [
		_overlay('top', z_index=20),
		_overlay('bottom', z_index=5),
		_overlay('default'),
	])
	visible = overlays.visible_overlays(scene, 1500, 1000, 500)
	assert [item['id'] for item in visible] == ['bottom', 'default', 'top']
	box = visible[0]['box']
	assert box == {'left': 100.0, 'top': 100.0, 'width': 500.0, 'height': 125.0}
	assert visible[0]['draw_text'] is True
	assert visible[0]['text'] == 'hello'

#============================================

def test_custom_fade_length() -> None:
	assert overlays.overlay_opacity(_overlay(), 1050, fade_ms=100) == pytest.approx(0.5)
	assert overlays.overlay_opacity(_overlay(), 1001, fade_ms=0) == 1.0
