import argparse
import os
import lxml.etree
from reelplanlib.core import audio
from reelplanlib.core.project import ReelProject

#============================================

def parse_args():
	"""
	Parse command-line arguments.
	"""
	parser = argparse.ArgumentParser(description="Export a reel project timeline to MLT XML")
	parser.add_argument('-d', '--document', dest='document_file', required=True,
		help='project document (yaml or json)')
	parser.add_argument('-o', '--output', dest='output_file',
		help='output MLT XML file path')
	parser.add_argument('--fps', dest='fps',
		help='target fps, overrides build_settings.fps')
	args = parser.parse_args()
	return args

#============================================

def reduce_fraction(num: int, den: int) -> tuple:
	if den == 0:
		return (num, den)
	a = num
	b = den
	while b != 0:
		a, b = b, a % b
	gcd = a if a != 0 else 1
	return (num // gcd, den // gcd)

#============================================

def assign_lanes(clips: list) -> list:
	"""
	Split clips into lanes so no two clips in one lane overlap.

	Returns:
		list of clip lists, each sorted by start_frame.
	"""
	lanes = []
	lane_ends = []
	for clip in sorted(clips, key=lambda item: item['start_frame']):
		placed = False
		for index, lane_end in enumerate(lane_ends):
			if clip['start_frame'] >= lane_end:
				lanes[index].append(clip)
				lane_ends[index] = clip['end_frame']
				placed = True
				break
		if not placed:
			lanes.append([clip])
			lane_ends.append(clip['end_frame'])
	return lanes

#============================================
class MltExporter():
	def __init__(self, project, output_file: str = None):
		if isinstance(project, ReelProject):
			self.project = project
		else:
			self.project = ReelProject(project, dry_run=True)
		self.output_file = output_file or self._default_output_path()
		self.producer_counter = 0
		self.root = None
		self.playlist_nodes = {}

	#============================
	def _default_output_path(self) -> str:
		source_file = self.project.source_file
		if source_file is None:
			return 'project.mlt'
		base, _ = os.path.splitext(source_file)
		return base + ".mlt"

	#============================
	def export(self) -> None:
		self.root = lxml.etree.Element('mlt')
		self._emit_profile()
		playlist_ids = [self._emit_video_playlist()]
		for track_name in audio.TRACK_ORDER:
			track_clips = [clip for clip in self.project.clips
				if clip['track'] == track_name]
			for lane_index, lane in enumerate(assign_lanes(track_clips)):
				playlist_id = f"{track_name}_{lane_index}"
				self._emit_audio_playlist(playlist_id, lane)
				playlist_ids.append(playlist_id)
		self._emit_tractor(playlist_ids)
		self._write_output()

	#============================
	def _emit_profile(self) -> None:
		fps = self.project.fps
		width = self.project.width
		height = self.project.height
		(display_num, display_den) = reduce_fraction(width, height)
		profile = lxml.etree.SubElement(self.root, 'profile')
		profile.set('description', 'reelplan')
		profile.set('width', str(width))
		profile.set('height', str(height))
		profile.set('progressive', '1')
		profile.set('sample_aspect_num', '1')
		profile.set('sample_aspect_den', '1')
		profile.set('display_aspect_num', str(display_num))
		profile.set('display_aspect_den', str(display_den))
		profile.set('frame_rate_num', str(fps.numerator))
		profile.set('frame_rate_den', str(fps.denominator))
		profile.set('colorspace', '709')

	#============================
	def _emit_video_playlist(self) -> str:
		playlist_id = 'video_base'
		playlist_elem = lxml.etree.SubElement(self.root, 'playlist')
		playlist_elem.set('id', playlist_id)
		for entry in self.project.layout:
			duration_frames = entry['duration_frames']
			if duration_frames <= 0:
				continue
			visual = self.project.sample(entry['start_frame'])['scene']['visual']
			if visual['type'] == 'video':
				producer_id = self._emit_media_producer(visual['url'])
			elif visual['type'] == 'image':
				producer_id = self._emit_image_producer(visual['url'], duration_frames)
			else:
				producer_id = self._emit_color_producer(duration_frames)
			playlist_entry = lxml.etree.SubElement(playlist_elem, 'entry')
			playlist_entry.set('producer', producer_id)
			playlist_entry.set('in', '0')
			playlist_entry.set('out', str(duration_frames - 1))
			self._set_property(playlist_entry, 'reelplan:scene_idx', str(entry['idx']))
			if visual['motion'] is not None:
				self._set_property(playlist_entry, 'reelplan:motion', visual['motion'])
		self.playlist_nodes[playlist_id] = playlist_elem
		return playlist_id

	#============================
	def _emit_audio_playlist(self, playlist_id: str, clips: list) -> None:
		playlist_elem = lxml.etree.SubElement(self.root, 'playlist')
		playlist_elem.set('id', playlist_id)
		cursor = 0
		for clip in clips:
			if clip['start_frame'] > cursor:
				self._emit_blank_entry(playlist_elem, clip['start_frame'] - cursor)
			producer_id = self._emit_media_producer(clip['url'], clip['loop'])
			# one entry per linear volume run
			for segment in self.project.clip_segments(clip):
				source_in = clip['offset_frames'] + segment['start_frame'] - clip['start_frame']
				length = segment['end_frame'] - segment['start_frame']
				playlist_entry = lxml.etree.SubElement(playlist_elem, 'entry')
				playlist_entry.set('producer', producer_id)
				playlist_entry.set('in', str(source_in))
				playlist_entry.set('out', str(source_in + length - 1))
				self._emit_volume_filter(playlist_entry, segment['start_volume'],
					segment['end_volume'])
			cursor = clip['end_frame']
		self.playlist_nodes[playlist_id] = playlist_elem

	#============================
	def _emit_blank_entry(self, playlist_elem, duration_frames: int) -> None:
		if duration_frames <= 0:
			raise RuntimeError("blank duration must be positive")
		blank_elem = lxml.etree.SubElement(playlist_elem, 'blank')
		blank_elem.set('length', str(duration_frames))

	#============================
	def _emit_media_producer(self, resource: str, loop: bool = False) -> str:
		producer_id = self._next_producer_id('source')
		producer = lxml.etree.SubElement(self.root, 'producer')
		producer.set('id', producer_id)
		self._set_property(producer, 'mlt_service', 'avformat')
		self._set_property(producer, 'resource', resource)
		if loop:
			self._set_property(producer, 'eof', 'loop')
		return producer_id

	#============================
	def _emit_image_producer(self, resource: str, duration_frames: int) -> str:
		producer_id = self._next_producer_id('image')
		producer = lxml.etree.SubElement(self.root, 'producer')
		producer.set('id', producer_id)
		self._set_property(producer, 'mlt_service', 'qimage')
		self._set_property(producer, 'resource', resource)
		self._set_property(producer, 'length', str(duration_frames))
		self._set_property(producer, 'out', str(duration_frames - 1))
		return producer_id

	#============================
	def _emit_color_producer(self, duration_frames: int) -> str:
		producer_id = self._next_producer_id('color')
		producer = lxml.etree.SubElement(self.root, 'producer')
		producer.set('id', producer_id)
		self._set_property(producer, 'mlt_service', 'color')
		self._set_property(producer, 'resource', '#000000')
		self._set_property(producer, 'length', str(duration_frames))
		self._set_property(producer, 'out', str(duration_frames - 1))
		return producer_id

	#============================
	def _emit_volume_filter(self, parent, volume: float, end_volume: float = None) -> None:
		filter_elem = lxml.etree.SubElement(parent, 'filter')
		self._set_property(filter_elem, 'mlt_service', 'volume')
		self._set_property(filter_elem, 'gain', f"{volume:.4f}")
		if end_volume is not None and f"{end_volume:.4f}" != f"{volume:.4f}":
			self._set_property(filter_elem, 'end', f"{end_volume:.4f}")

	#============================
	def _emit_tractor(self, playlist_ids: list) -> None:
		tractor = lxml.etree.SubElement(self.root, 'tractor')
		tractor.set('id', 'tractor0')
		self._set_property(tractor, 'reelplan:schema_version',
			self.project.schema_version)
		multitrack = lxml.etree.SubElement(tractor, 'multitrack')
		for playlist_id in playlist_ids:
			track_elem = lxml.etree.SubElement(multitrack, 'track')
			track_elem.set('producer', playlist_id)

	#============================
	def _set_property(self, parent, name: str, value: str) -> None:
		prop = lxml.etree.SubElement(parent, 'property')
		prop.set('name', name)
		prop.text = value

	#============================
	def _next_producer_id(self, prefix: str) -> str:
		self.producer_counter += 1
		return f"{prefix}_{self.producer_counter:04d}"

	#============================
	def _write_output(self) -> None:
		os.makedirs(os.path.dirname(self.output_file) or '.', exist_ok=True)
		tree = lxml.etree.ElementTree(self.root)
		tree.write(self.output_file, encoding='utf-8', xml_declaration=True)

#============================================
#============================================
#============================================


def main():
	args = parse_args()
	project = ReelProject(args.document_file, fps=args.fps, dry_run=True)
	exporter = MltExporter(project, args.output_file)
	exporter.export()
	print(f"wrote {exporter.output_file}")


if __name__ == '__main__':
	main()
