#!/usr/bin/env python3

import os
import yaml
from reelplanlib.core import durations
from reelplanlib.core import schema
from reelplanlib.core import subtitles
from reelplanlib.core import utils

#============================================

MAX_DOCUMENT_BYTES = 10 ** 7

DEFAULT_FPS = 30
DEFAULT_ASPECT_RATIO = '16:9'
DEFAULT_CODEC = 'h264'

RESOLUTION_MAP = {
	'1080p': {
		'9:16': (1080, 1920),
		'16:9': (1920, 1080),
		'1:1': (1080, 1080),
	},
	'720p': {
		'9:16': (720, 1280),
		'16:9': (1280, 720),
		'1:1': (720, 720),
	},
}

#============================================

class ProjectData():
	def __init__(self):
		self.source_file = None
		self.raw = {}
		self.document = {}
		self.schema_version = None
		self.profile = {}
		self.telops = {}
		self.default_scene_ms = durations.DEFAULT_SCENE_DURATION_MS

#============================================

class ProjectLoader():
	def __init__(self, source, fps=None, width: int = None, height: int = None):
		"""
		Args:
			source: Path to a YAML/JSON document, or an already parsed dict.
			fps: Target playback fps, overrides build_settings.fps.
			width: Target width, overrides build_settings.resolution.
			height: Target height, overrides build_settings.resolution.
		"""
		self.source = source
		self.fps = fps
		self.width = width
		self.height = height

	#============================
	def load(self) -> ProjectData:
		project = ProjectData()
		if isinstance(self.source, dict):
			project.raw = self.source
		else:
			project.source_file = self.source
			project.raw = self._load_yaml()
		project.document = schema.normalize_document(project.raw)
		project.schema_version = project.document['schema_version']
		build_settings = project.document['build_settings']
		project.profile = self._parse_profile(build_settings)
		project.telops = subtitles.parse_telop_settings(build_settings)
		project.default_scene_ms = self._parse_default_scene_ms(
			project.document['global'])
		return project

	#============================
	def _load_yaml(self) -> dict:
		file_size = os.path.getsize(self.source)
		if file_size > MAX_DOCUMENT_BYTES:
			raise RuntimeError("document file is larger than 10MB")
		with open(self.source, 'r') as data_file:
			data = yaml.safe_load(data_file)
		if not isinstance(data, dict):
			raise RuntimeError("project document must be a mapping at the top level")
		return data

	#============================
	def _parse_profile(self, build_settings: dict) -> dict:
		if not isinstance(build_settings, dict):
			raise RuntimeError("build_settings must be a mapping")
		raw_fps = self.fps
		if raw_fps is None:
			raw_fps = build_settings.get('fps', DEFAULT_FPS)
		fps = utils.parse_fps(raw_fps)
		aspect_ratio = build_settings.get('aspect_ratio') or DEFAULT_ASPECT_RATIO
		(width, height) = self._parse_resolution(build_settings.get('resolution'),
			aspect_ratio)
		if self.width is not None:
			width = int(self.width)
		if self.height is not None:
			height = int(self.height)
		if width <= 0 or height <= 0:
			raise RuntimeError("build_settings.resolution must be positive")
		audio = build_settings.get('audio') or {}
		if not isinstance(audio, dict):
			raise RuntimeError("build_settings.audio must be a mapping")
		transition = build_settings.get('transition') or {}
		if not isinstance(transition, dict):
			raise RuntimeError("build_settings.transition must be a mapping")
		return {
			'fps': fps,
			'width': width,
			'height': height,
			'aspect_ratio': aspect_ratio,
			'codec': build_settings.get('codec', DEFAULT_CODEC),
			'transition': {
				'type': transition.get('type', 'none'),
				'duration_ms': utils.non_negative_ms(transition.get('duration_ms'), 0),
			},
		}

	#============================
	def _parse_resolution(self, resolution, aspect_ratio: str) -> tuple:
		if resolution is None or (isinstance(resolution, str) and resolution in RESOLUTION_MAP):
			size_map = RESOLUTION_MAP[resolution or '1080p']
			if aspect_ratio not in size_map:
				raise RuntimeError(f"unsupported build_settings.aspect_ratio: {aspect_ratio}")
			return size_map[aspect_ratio]
		if isinstance(resolution, dict):
			return (int(resolution.get('width', 0)), int(resolution.get('height', 0)))
		if isinstance(resolution, (list, tuple)) and len(resolution) == 2:
			return (int(resolution[0]), int(resolution[1]))
		if isinstance(resolution, str) and 'x' in resolution:
			parts = resolution.lower().split('x')
			return (int(parts[0]), int(parts[1]))
		raise RuntimeError("build_settings.resolution must be {width, height} or [width, height]")

	#============================
	def _parse_default_scene_ms(self, global_settings: dict) -> int:
		default_ms = global_settings.get('default_scene_duration_ms')
		if default_ms is None:
			return durations.DEFAULT_SCENE_DURATION_MS
		return utils.non_negative_ms(default_ms, durations.DEFAULT_SCENE_DURATION_MS)
