import argparse
import os
import numpy
import PIL.Image
import PIL.ImageDraw
import PIL.ImageFont
from reelplanlib.core import audio
from reelplanlib.core.project import ReelProject

#============================================

TRACK_COLORS = {
	'scene': (70, 110, 170),
	audio.TRACK_VOICE: (90, 160, 90),
	audio.TRACK_SFX: (200, 150, 60),
	audio.TRACK_SCENE_BGM: (170, 80, 150),
	audio.TRACK_GLOBAL_BGM: (120, 120, 120),
}

BACKGROUND = (24, 24, 28)
LABEL_COLOR = (230, 230, 230)
CURVE_COLOR = (240, 200, 60)

#============================================

def parse_args():
	"""
	Parse command-line arguments.
	"""
	parser = argparse.ArgumentParser(description="Draw a reel project timeline chart")
	parser.add_argument('-d', '--document', dest='document_file', required=True,
		help='project document (yaml or json)')
	parser.add_argument('-o', '--output', dest='output_file',
		help='output PNG file path')
	parser.add_argument('-w', '--width', dest='chart_width', type=int, default=1600,
		help='chart width in pixels')
	args = parser.parse_args()
	return args

#============================================

def resample_curve(curve: numpy.ndarray, columns: int) -> numpy.ndarray:
	"""
	Map a per-frame curve onto a fixed number of pixel columns.
	"""
	if columns <= 0:
		return numpy.zeros(0, dtype=numpy.float64)
	if len(curve) == 0:
		return numpy.zeros(columns, dtype=numpy.float64)
	positions = numpy.linspace(0, len(curve) - 1, columns)
	return numpy.interp(positions, numpy.arange(len(curve)), curve)

#============================================
class TimelineChart():
	def __init__(self, project, output_file: str = None, width: int = 1600,
		row_height: int = 36, curve_height: int = 120):
		if isinstance(project, ReelProject):
			self.project = project
		else:
			self.project = ReelProject(project, dry_run=True)
		self.output_file = output_file or self._default_output_path()
		self.width = int(width)
		self.row_height = int(row_height)
		self.curve_height = int(curve_height)
		self.label_width = 110
		self.margin = 10
		self.rows = ['scene'] + list(audio.TRACK_ORDER)

	#============================
	def _default_output_path(self) -> str:
		source_file = self.project.source_file
		if source_file is None:
			return 'timeline.png'
		base, _ = os.path.splitext(source_file)
		return base + "-timeline.png"

	#============================
	def plot_width(self) -> int:
		return max(1, self.width - self.label_width - 2 * self.margin)

	#============================
	def frame_to_x(self, frame) -> float:
		total_frames = max(1, self.project.total_frames())
		return self.margin + self.label_width + frame * self.plot_width() / total_frames

	#============================
	def render(self):
		height = (2 * self.margin + len(self.rows) * self.row_height
			+ self.curve_height + self.margin)
		image = PIL.Image.new("RGB", (self.width, height), color=BACKGROUND)
		draw = PIL.ImageDraw.Draw(image)
		font = self._load_font()
		for row_index, row_name in enumerate(self.rows):
			top = self.margin + row_index * self.row_height
			draw.text((self.margin, top + 4), row_name, font=font, fill=LABEL_COLOR)
			for (start_frame, end_frame, label) in self._row_spans(row_name):
				self._draw_span(draw, font, top, start_frame, end_frame, label,
					TRACK_COLORS[row_name])
		curve_top = self.margin + len(self.rows) * self.row_height + self.margin
		self._draw_curve(draw, font, curve_top)
		return image

	#============================
	def export(self) -> None:
		image = self.render()
		os.makedirs(os.path.dirname(self.output_file) or '.', exist_ok=True)
		image.save(self.output_file)

	#============================
	def _row_spans(self, row_name: str) -> list:
		if row_name == 'scene':
			return [(entry['start_frame'], entry['end_frame'], str(entry['idx']))
				for entry in self.project.layout]
		spans = []
		for clip in self.project.clips:
			if clip['track'] != row_name:
				continue
			spans.append((clip['start_frame'], clip['end_frame'], str(clip['id'] or '')))
		return spans

	#============================
	def _draw_span(self, draw, font, top: int, start_frame: int, end_frame: int,
		label: str, color: tuple) -> None:
		if end_frame <= start_frame:
			return
		left = self.frame_to_x(start_frame)
		right = max(left + 1, self.frame_to_x(end_frame) - 1)
		bottom = top + self.row_height - 6
		draw.rectangle((left, top + 2, right, bottom), fill=color)
		if right - left > 24:
			draw.text((left + 3, top + 6), label, font=font, fill=LABEL_COLOR)

	#============================
	def _draw_curve(self, draw, font, top: int) -> None:
		bottom = top + self.curve_height
		left = self.margin + self.label_width
		draw.text((self.margin, top + 4), 'bgm volume', font=font, fill=LABEL_COLOR)
		draw.rectangle((left, top, left + self.plot_width(), bottom), outline=LABEL_COLOR)
		curve = self.project.volume_curve()
		columns = resample_curve(curve, self.plot_width())
		if len(columns) == 0:
			return
		ys = bottom - numpy.clip(columns, 0.0, 1.0) * (self.curve_height - 2) - 1
		points = [(left + index, float(y)) for index, y in enumerate(ys)]
		if len(points) == 1:
			draw.point(points, fill=CURVE_COLOR)
			return
		draw.line(points, fill=CURVE_COLOR, width=2)

	#============================
	def _load_font(self):
		try:
			return PIL.ImageFont.truetype("DejaVuSans.ttf", 12)
		except OSError:
			return PIL.ImageFont.load_default()

#============================================
#============================================
#============================================


def main():
	args = parse_args()
	chart = TimelineChart(args.document_file, args.output_file, width=args.chart_width)
	chart.export()
	print(f"wrote {chart.output_file}")


if __name__ == '__main__':
	main()
