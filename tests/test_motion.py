#!/usr/bin/env python3

"""
Unit tests for motion presets and transforms.
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
from reelplanlib.core import motion

#============================================

def test_auto_pick_is_deterministic() -> None:
	for seed in (0, 1, 17, 12345, -4):
		first = motion.pick_auto_motion(seed)
		assert first == motion.pick_auto_motion(seed)
		assert first in motion.AUTO_MOTION_CANDIDATES
	assert motion.pick_auto_motion(0) == 'kenburns_soft'
	assert motion.pick_auto_motion(9) == 'kenburns_zoom_out'

#============================================

def test_resolve_auto_motion_descriptor() -> None:
	descriptor = motion.resolve_auto_motion(2)
	assert descriptor['id'] == 'auto'
	assert descriptor['params']['chosen'] == 'pan_lr'
	preset = motion.resolve_motion(descriptor)
	assert preset['id'] == 'pan_lr'
	assert preset['motion_type'] == 'pan'
	assert preset['auto'] is True

#============================================

def test_auto_without_choice_falls_back() -> None:
	preset = motion.resolve_motion({'id': 'auto', 'params': {}})
	assert preset['id'] == motion.DEFAULT_PRESET_ID

#============================================

@pytest.mark.parametrize("descriptor", [None, {}, {'id': 'bogus'}, 'bogus', 42])
def test_unknown_descriptor_falls_back(descriptor) -> None:
	assert motion.resolve_motion(descriptor)['id'] == 'kenburns_soft'

#============================================

def test_string_preset_id() -> None:
	assert motion.resolve_motion('slide_rl')['id'] == 'slide_rl'

#============================================

def test_preset_copies_are_independent() -> None:
	preset = motion.get_motion_preset('kenburns_soft')
	preset['params']['end_scale'] = 9.0
	assert motion.MOTION_PRESETS['kenburns_soft']['params']['end_scale'] == 1.05

#============================================

def test_zoom_is_linear() -> None:
	preset = motion.resolve_motion({'id': 'kenburns_soft'})
	assert motion.motion_transform(preset, 0, 100)['scale'] == pytest.approx(1.0)
	assert motion.motion_transform(preset, 50, 100)['scale'] == pytest.approx(1.025)
	assert motion.motion_transform(preset, 100, 100)['scale'] == pytest.approx(1.05)

#============================================

def test_pan_eases_in_and_out() -> None:
	preset = motion.resolve_motion({'id': 'pan_lr'})
	assert motion.motion_transform(preset, 0, 100)['translate_x_pct'] == pytest.approx(-5.0)
	assert motion.motion_transform(preset, 50, 100)['translate_x_pct'] == pytest.approx(0.0, abs=1e-9)
	assert motion.motion_transform(preset, 100, 100)['translate_x_pct'] == pytest.approx(5.0)
	early = motion.motion_transform(preset, 10, 100)['translate_x_pct']
	assert early < -5.0 + 10.0 * 0.1

#============================================

def test_hold_then_pan() -> None:
	preset = motion.resolve_motion({'id': 'hold_then_slide_lr'})
	assert motion.motion_transform(preset, 20, 100)['translate_x_pct'] == -5
	assert motion.motion_transform(preset, 30, 100)['translate_x_pct'] == -5
	assert motion.motion_transform(preset, 100, 100)['translate_x_pct'] == pytest.approx(10.0)
	assert motion.motion_transform(preset, 100, 100)['scale'] == 1.0

#============================================

def test_explicit_hyphenated_motion_type() -> None:
	descriptor = {
		'id': 'custom_hold',
		'motion_type': 'hold-then-pan',
		'params': {'start_x': 0, 'end_x': 10, 'hold_ratio': 0.5},
	}
	preset = motion.resolve_motion(descriptor)
	assert preset['motion_type'] == 'hold_then_pan'
	assert motion.motion_transform(preset, 50, 100)['translate_x_pct'] == 0
	assert motion.motion_transform(preset, 100, 100)['translate_x_pct'] == pytest.approx(10.0)

#============================================

def test_none_preset_is_identity() -> None:
	preset = motion.resolve_motion({'id': 'none'})
	assert motion.motion_transform(preset, 10, 100) == motion.identity_transform()
