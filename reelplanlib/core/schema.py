#!/usr/bin/env python3

"""
Schema adapter for project documents.

Every supported document generation is normalized here into one scene
shape, so the duration, timing, motion, ducking and overlay code never
branches on the schema version.
"""

import copy
from reelplanlib.core import utils
from reelplanlib.core import voices

#============================================

SUPPORTED_SCHEMA_VERSIONS = ('1.1', '1.5')

# canonical audio shape a writer must populate for each version
CANONICAL_AUDIO_SHAPES = {
	'1.1': 'audio',
	'1.5': 'voices',
}

TEXT_RENDER_OVERLAY = 'overlay-rendered'
TEXT_RENDER_BAKED = 'baked-into-image'
TEXT_RENDER_NONE = 'none'

TEXT_RENDER_ALIASES = {
	'overlay-rendered': TEXT_RENDER_OVERLAY,
	'overlay': TEXT_RENDER_OVERLAY,
	'remotion': TEXT_RENDER_OVERLAY,
	'baked-into-image': TEXT_RENDER_BAKED,
	'baked': TEXT_RENDER_BAKED,
	'none': TEXT_RENDER_NONE,
}

#============================================

class UnsupportedSchemaVersion(RuntimeError):
	def __init__(self, version):
		self.version = version
		supported = ', '.join(SUPPORTED_SCHEMA_VERSIONS)
		super().__init__(
			f"unsupported schema_version {version!r}, expected one of: {supported}"
		)

#============================================

def detect_schema_version(document: dict) -> str:
	if not isinstance(document, dict):
		raise RuntimeError("project document must be a mapping")
	raw_version = document.get('schema_version')
	if isinstance(raw_version, bool) or raw_version is None:
		raise UnsupportedSchemaVersion(raw_version)
	if isinstance(raw_version, (int, float)):
		version = str(float(raw_version))
	else:
		version = str(raw_version).strip()
	if version not in SUPPORTED_SCHEMA_VERSIONS:
		raise UnsupportedSchemaVersion(raw_version)
	return version

#============================================

def canonical_audio_shape(version: str) -> str:
	shape = CANONICAL_AUDIO_SHAPES.get(version)
	if shape is None:
		raise UnsupportedSchemaVersion(version)
	return shape

#============================================

def validate_writer_shape(document: dict) -> None:
	"""
	Check that a freshly written document uses one canonical audio shape.

	Readers accept both shapes side by side; writers must not.
	"""
	version = detect_schema_version(document)
	canonical = canonical_audio_shape(version)
	for scene in document.get('scenes') or []:
		assets = scene.get('assets') or {}
		has_voices = len(assets.get('voices') or []) > 0
		has_audio = assets.get('audio') is not None
		if canonical == 'voices' and has_audio:
			raise RuntimeError(
				f"scene {scene.get('idx')}: schema {version} writers must not populate assets.audio"
			)
		if canonical == 'audio' and has_voices:
			raise RuntimeError(
				f"scene {scene.get('idx')}: schema {version} writers must not populate assets.voices"
			)

#============================================

def normalize_text_render_mode(raw_mode) -> str:
	if raw_mode is None:
		return TEXT_RENDER_OVERLAY
	mode = TEXT_RENDER_ALIASES.get(str(raw_mode).strip().lower())
	if mode is None:
		return TEXT_RENDER_OVERLAY
	return mode

#============================================

def normalize_document(document: dict) -> dict:
	version = detect_schema_version(document)
	source = copy.deepcopy(document)
	raw_scenes = source.get('scenes') or []
	scenes = []
	for position, raw_scene in enumerate(raw_scenes, start=1):
		scenes.append(normalize_scene(raw_scene, position))
	global_assets = source.get('assets') or {}
	return {
		'schema_version': version,
		'project_id': source.get('project_id'),
		'project_title': source.get('project_title', ''),
		'build_settings': source.get('build_settings') or {},
		'global': source.get('global') or {},
		'assets': {
			'bgm': _normalize_global_bgm(global_assets.get('bgm')),
		},
		'scenes': scenes,
		'summary': source.get('summary') or {},
	}

#============================================

def normalize_scene(raw_scene: dict, position: int) -> dict:
	if not isinstance(raw_scene, dict):
		raise RuntimeError("scenes entries must be mappings")
	assets = raw_scene.get('assets') or {}
	timing = raw_scene.get('timing') or {}
	idx = raw_scene.get('idx', position)
	# voices are honored under every version; they always outrank legacy audio
	authored_voices = list(assets.get('voices') or [])
	legacy_audio = assets.get('audio')
	effective_voices = authored_voices
	legacy_voice = False
	if len(authored_voices) == 0 and legacy_audio is not None:
		synthesized = voices.make_legacy_voice(legacy_audio, idx,
			raw_scene.get('dialogue') or '')
		if synthesized is not None:
			effective_voices = [synthesized]
			legacy_voice = True
	scene_bgm = assets.get('bgm')
	if scene_bgm is None:
		scene_bgm = raw_scene.get('bgm')
	overlays = raw_scene.get('overlays')
	if overlays is None:
		overlays = raw_scene.get('balloons')
	return {
		'idx': idx,
		'role': raw_scene.get('role', ''),
		'title': raw_scene.get('title', ''),
		'dialogue': raw_scene.get('dialogue') or '',
		'timing': {
			'start_ms': None,
			'duration_ms': None,
			'head_pad_ms': utils.non_negative_ms(timing.get('head_pad_ms'), 0),
			'tail_pad_ms': utils.non_negative_ms(timing.get('tail_pad_ms'), 0),
			'authored_start_ms': timing.get('start_ms'),
			'authored_duration_ms': timing.get('duration_ms'),
		},
		'text_render_mode': normalize_text_render_mode(raw_scene.get('text_render_mode')),
		'assets': {
			'image': assets.get('image'),
			'video_clip': assets.get('video_clip'),
			'voices': authored_voices,
			'audio': legacy_audio,
			'bgm': _normalize_scene_bgm(scene_bgm),
		},
		'effective_voices': effective_voices,
		'legacy_voice': legacy_voice,
		'motion': raw_scene.get('motion'),
		'overlays': list(overlays or []),
		'sfx': list(raw_scene.get('sfx') or []),
	}

#============================================

def _normalize_scene_bgm(raw_bgm) -> dict:
	if not isinstance(raw_bgm, dict) or not raw_bgm.get('url'):
		return None
	return {
		'url': raw_bgm.get('url'),
		'name': raw_bgm.get('name'),
		'start_ms': raw_bgm.get('start_ms'),
		'end_ms': raw_bgm.get('end_ms'),
		'volume': raw_bgm.get('volume', 0.25),
		'loop': bool(raw_bgm.get('loop', True)),
		'fade_in_ms': utils.non_negative_ms(raw_bgm.get('fade_in_ms'), 0),
		'fade_out_ms': utils.non_negative_ms(raw_bgm.get('fade_out_ms'), 0),
		'audio_offset_ms': utils.non_negative_ms(raw_bgm.get('audio_offset_ms'), 0),
	}

#============================================

def _normalize_global_bgm(raw_bgm) -> dict:
	if not isinstance(raw_bgm, dict) or not raw_bgm.get('url'):
		return None
	return {
		'url': raw_bgm.get('url'),
		'volume': raw_bgm.get('volume'),
		'duration_ms': raw_bgm.get('duration_ms'),
		'loop': bool(raw_bgm.get('loop', False)),
		'video_start_ms': utils.non_negative_ms(raw_bgm.get('video_start_ms'), 0),
		'video_end_ms': raw_bgm.get('video_end_ms'),
		'audio_offset_ms': utils.non_negative_ms(raw_bgm.get('audio_offset_ms'), 0),
	}
