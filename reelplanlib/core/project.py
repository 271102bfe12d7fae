#!/usr/bin/env python3

from reelplanlib.core import ducking
from reelplanlib.core import durations
from reelplanlib.core import motion
from reelplanlib.core import overlays
from reelplanlib.core import subtitles
from reelplanlib.core import timeline
from reelplanlib.core import utils
from reelplanlib.core import validator
from reelplanlib.core.audio import AudioPlanner
from reelplanlib.core.loader import ProjectLoader
from reelplanlib.core.timeline import TimelinePlanner

#============================================

class ReelProject():
	def __init__(self, source, fps=None, width: int = None, height: int = None,
		bgm_fade_ms=ducking.FADE_DURATION_MS,
		overlay_fade_ms=overlays.FADE_DURATION_MS, dry_run: bool = False):
		loader = ProjectLoader(source, fps=fps, width=width, height=height)
		self._project = loader.load()
		self.bgm_fade_ms = utils.non_negative_ms(bgm_fade_ms, ducking.FADE_DURATION_MS)
		self.overlay_fade_ms = utils.non_negative_ms(overlay_fade_ms,
			overlays.FADE_DURATION_MS)
		self.dry_run = dry_run
		self.scenes = durations.resolve_scene_timings(
			self._project.document['scenes'], self._project.default_scene_ms)
		self._timeline = TimelinePlanner(self.scenes, self._project.profile['fps'])
		self.layout = self._timeline.assemble()
		self._motions = [motion.resolve_motion(scene.get('motion'))
			for scene in self.scenes]
		self._audio = AudioPlanner(self.layout, self._project.profile['fps'],
			self._project.document['build_settings'],
			self._project.document['assets']['bgm'], bgm_fade_ms=self.bgm_fade_ms)
		self._audio.build()
		self._sync_public_fields()

	#============================
	def _sync_public_fields(self) -> None:
		self.source_file = self._project.source_file
		self.document = self._project.document
		self.schema_version = self._project.schema_version
		self.profile = self._project.profile
		self.telops = self._project.telops
		self.fps = self.profile['fps']
		self.width = self.profile['width']
		self.height = self.profile['height']
		self.summary = timeline.build_summary(self.scenes)
		self.intervals = self._audio.intervals
		self.clips = self._audio.clips

	#============================
	def total_duration_ms(self):
		return self._timeline.total_duration_ms()

	#============================
	def total_frames(self) -> int:
		return self._timeline.total_duration_frames()

	#============================
	def scene_at_frame(self, frame) -> dict:
		return self._timeline.scene_at_frame(frame)

	#============================
	def global_bgm_volume(self, frame) -> float:
		"""
		Ducked document music volume at an absolute frame.
		"""
		return ducking.global_bgm_volume(self.intervals, frame,
			self._audio.fade_frames, self._audio.base_volume)

	#============================
	def clip_segments(self, clip: dict) -> list:
		return self._audio.volume_segments(clip)

	#============================
	def volume_curve(self, frames=None):
		if frames is None:
			frames = self.total_frames()
		return self._audio.volume_curve(frames)

	#============================
	def _scene_visual(self, entry: dict, local_frame: int) -> dict:
		scene = entry['scene']
		video_clip = scene['assets'].get('video_clip')
		if isinstance(video_clip, dict) and video_clip.get('url'):
			return {
				'type': 'video',
				'url': video_clip['url'],
				'motion': None,
				'transform': motion.identity_transform(),
			}
		image = scene['assets'].get('image')
		image_url = image.get('url') if isinstance(image, dict) else image
		if image_url:
			preset = self._motions[entry['position']]
			return {
				'type': 'image',
				'url': image_url,
				'motion': preset['id'],
				'transform': motion.motion_transform(preset, local_frame,
					entry['duration_frames']),
			}
		return {
			'type': 'placeholder',
			'label': f"Scene {scene['idx']}",
			'motion': None,
			'transform': motion.identity_transform(),
		}

	#============================
	def sample(self, frame: int) -> dict:
		"""
		Everything a renderer needs to draw and mix one absolute frame.

		Args:
			frame: Absolute frame index.

		Returns:
			dict with the scene state (None outside the timeline), the global
			music volume and the active audio clips.
		"""
		global_clip = self._audio.global_clip()
		scheduled = False
		if global_clip is not None:
			scheduled = global_clip['start_frame'] <= frame < global_clip['end_frame']
		result = {
			'frame': frame,
			'time_ms': utils.frame_to_ms(frame, self.fps),
			'global_bgm': {
				'scheduled': scheduled,
				'volume': self._audio.global_volume(frame),
			},
			'audio': self._audio.active_clips(frame),
			'scene': None,
		}
		entry = self.scene_at_frame(frame)
		if entry is None:
			return result
		scene = entry['scene']
		local_frame = frame - entry['start_frame']
		local_ms = utils.frame_to_ms_exact(local_frame, self.fps)
		result['scene'] = {
			'idx': scene['idx'],
			'position': entry['position'],
			'local_frame': local_frame,
			'local_ms': local_ms,
			'duration_frames': entry['duration_frames'],
			'opacity': timeline.scene_opacity(local_frame, entry['duration_frames']),
			'text_render_mode': scene['text_render_mode'],
			'visual': self._scene_visual(entry, local_frame),
			'overlays': overlays.visible_overlays(scene, local_ms, self.width,
				self.height, self.overlay_fade_ms),
			'caption': subtitles.subtitle_at(self.telops, scene, local_frame,
				entry['duration_frames'], local_ms),
		}
		return result

	#============================
	def sample_ms(self, ms) -> dict:
		return self.sample(utils.ms_to_frame(ms, self.fps))

	#============================
	def plan(self) -> dict:
		scenes = []
		for entry in self.layout:
			scene = entry['scene']
			preset = self._motions[entry['position']]
			scenes.append({
				'idx': scene['idx'],
				'start_ms': entry['start_ms'],
				'duration_ms': entry['duration_ms'],
				'duration_reason': scene['timing']['duration_reason'],
				'start_frame': entry['start_frame'],
				'end_frame': entry['end_frame'],
				'duration_frames': entry['duration_frames'],
				'text_render_mode': scene['text_render_mode'],
				'visual': self._scene_visual(entry, 0)['type'],
				'motion': {
					'id': preset['id'],
					'motion_type': preset['motion_type'],
				},
				'voices': [
					{
						'id': voice.get('id'),
						'start_ms': voice.get('start_ms'),
						'duration_ms': voice.get('duration_ms'),
					}
					for voice in scene.get('effective_voices') or []
				],
				'legacy_voice': scene['legacy_voice'],
			})
		return {
			'project': {
				'id': self.document['project_id'],
				'title': self.document['project_title'],
				'schema_version': self.schema_version,
			},
			'profile': {
				'fps': str(self.fps),
				'width': self.width,
				'height': self.height,
				'aspect_ratio': self.profile['aspect_ratio'],
				'codec': self.profile['codec'],
				'transition': self.profile['transition'],
			},
			'total_duration_ms': self.total_duration_ms(),
			'total_frames': self.total_frames(),
			'summary': self.summary,
			'scenes': scenes,
			'scene_bgm_intervals': self.intervals,
			'audio': self.clips,
		}

	#============================
	def validate(self) -> dict:
		self._timeline.validate_layout()
		return validator.validate_scenes(self.scenes)

	#============================
	def run(self) -> dict:
		report = self.validate()
		if not utils.is_quiet_mode():
			for warning in report['warnings']:
				print(f"warning: {warning}")
		if not report['is_valid']:
			raise RuntimeError("project failed validation: "
				+ "; ".join(report['critical_errors']))
		if self.dry_run and not utils.is_quiet_mode():
			print("dry run: validation complete")
		return report
