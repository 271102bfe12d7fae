#!/usr/bin/env python3

import math
from decimal import Decimal
from fractions import Fraction

#============================================

_QUIET_MODE = False

#============================================

def set_quiet_mode(quiet: bool) -> None:
	global _QUIET_MODE
	_QUIET_MODE = bool(quiet)

#============================================

def is_quiet_mode() -> bool:
	return _QUIET_MODE

#============================================

def parse_fps(raw_fps) -> Fraction:
	if raw_fps is None:
		raise RuntimeError("build_settings.fps is required")
	if isinstance(raw_fps, bool):
		raise RuntimeError("build_settings.fps must be int, float, or fraction string")
	if isinstance(raw_fps, Fraction):
		fps = raw_fps
	elif isinstance(raw_fps, int):
		fps = Fraction(raw_fps, 1)
	elif isinstance(raw_fps, (float, Decimal)):
		fps = Fraction(str(raw_fps))
	elif isinstance(raw_fps, str):
		value = raw_fps.strip()
		if '/' in value:
			parts = value.split('/')
			fps = Fraction(int(parts[0]), int(parts[1]))
		else:
			fps = Fraction(value)
	else:
		raise RuntimeError("build_settings.fps must be int, float, or fraction string")
	if fps <= 0:
		raise RuntimeError("build_settings.fps must be positive")
	return fps

#============================================

def to_fraction(value) -> Fraction:
	"""
	Exact rational form of a millisecond or frame value.

	Floats go through their shortest repr so 33.3 stays 333/10.
	"""
	if isinstance(value, Fraction):
		return value
	if isinstance(value, bool):
		return Fraction(int(value), 1)
	if isinstance(value, int):
		return Fraction(value, 1)
	if isinstance(value, float):
		if math.isnan(value) or math.isinf(value):
			return Fraction(0, 1)
		return Fraction(str(value))
	return Fraction(str(value))

#============================================

def round_half_up_fraction(value: Fraction) -> int:
	numerator = value.numerator
	denominator = value.denominator
	whole = numerator // denominator
	remainder = numerator - (whole * denominator)
	if remainder * 2 > denominator:
		return whole + 1
	if remainder * 2 == denominator:
		return whole + 1
	return whole

#============================================

def ms_to_frame(ms, fps) -> int:
	fps_fraction = parse_fps(fps)
	frame_fraction = to_fraction(ms) / 1000 * fps_fraction
	return round_half_up_fraction(frame_fraction)

#============================================

def frame_to_ms(frame, fps) -> int:
	fps_fraction = parse_fps(fps)
	ms_fraction = to_fraction(frame) / fps_fraction * 1000
	return round_half_up_fraction(ms_fraction)

#============================================

def frame_to_ms_exact(frame, fps) -> float:
	"""Unrounded position of a frame in milliseconds."""
	fps_fraction = parse_fps(fps)
	return float(to_fraction(frame) / fps_fraction * 1000)

#============================================

def clamp(value, low: float, high: float) -> float:
	if value is None:
		return low
	value = float(value)
	if math.isnan(value):
		return low
	if value < low:
		return low
	if value > high:
		return high
	return value

#============================================

def clamp_unit(value) -> float:
	return clamp(value, 0.0, 1.0)

#============================================

def non_negative_ms(value, default: int = 0):
	if value is None:
		return default
	if isinstance(value, bool):
		return default
	if isinstance(value, float):
		if math.isnan(value) or math.isinf(value):
			return default
	if value < 0:
		return 0
	return value

#============================================

def ease_in_out(progress: float) -> float:
	return 0.5 - 0.5 * math.cos(math.pi * progress)

#============================================

def ease_out(progress: float) -> float:
	return math.sin(0.5 * math.pi * progress)

#============================================

def interpolate(value, input_range: tuple, output_range: tuple,
	easing=None) -> float:
	"""
	Clamped interpolation of value from input_range onto output_range.

	Args:
		value: Position on the input axis (frame or ms).
		input_range: (start, end) on the input axis.
		output_range: (start, end) output values.
		easing: Optional callable mapping progress 0..1 to 0..1.

	Returns:
		Interpolated output, never outside output_range.
	"""
	(in_start, in_end) = input_range
	(out_start, out_end) = output_range
	in_start = float(in_start)
	in_end = float(in_end)
	value = float(value)
	if in_end <= in_start:
		if value >= in_end:
			return float(out_end)
		return float(out_start)
	progress = clamp((value - in_start) / (in_end - in_start), 0.0, 1.0)
	if easing is not None:
		progress = clamp(easing(progress), 0.0, 1.0)
	return float(out_start) + (float(out_end) - float(out_start)) * progress
