#!/usr/bin/env python3

import argparse
import yaml
from tqdm import tqdm
from reelplanlib.core import utils
from reelplanlib.core.project import ReelProject
from reelplanlib.exporters.chart import TimelineChart
from reelplanlib.exporters.mlt import MltExporter

#============================================

def parse_args(argv=None):
	"""
	Parse command-line arguments.
	"""
	parser = argparse.ArgumentParser(description="Plan and inspect a reel video timeline")
	parser.add_argument('-d', '--document', dest='document_file', required=True,
		help='project document (yaml or json)')
	parser.add_argument('-n', '--dry-run', dest='dry_run', action='store_true',
		help='validate only')
	parser.add_argument('-p', '--dump-plan', dest='dump_plan', action='store_true',
		help='print the computed timeline plan')
	sample_group = parser.add_mutually_exclusive_group()
	sample_group.add_argument('-f', '--frame', dest='frame', type=int,
		help='print the sampled state of one absolute frame')
	sample_group.add_argument('-t', '--time-ms', dest='time_ms', type=float,
		help='print the sampled state at an absolute time in milliseconds')
	parser.add_argument('--sweep', dest='sweep', action='store_true',
		help='sample every frame and check volume and opacity bounds')
	parser.add_argument('--mlt', dest='mlt_file',
		help='write the timeline as MLT XML')
	parser.add_argument('--chart', dest='chart_file',
		help='write a PNG timeline chart')
	parser.add_argument('--fps', dest='fps',
		help='target fps, overrides build_settings.fps')
	parser.add_argument('--width', dest='width', type=int,
		help='target width, overrides build_settings.resolution')
	parser.add_argument('--height', dest='height', type=int,
		help='target height, overrides build_settings.resolution')
	parser.add_argument('--bgm-fade-ms', dest='bgm_fade_ms', type=float, default=120,
		help='global music fade length around scene music')
	parser.add_argument('--overlay-fade-ms', dest='overlay_fade_ms', type=float,
		default=150, help='overlay fade in and out length')
	parser.add_argument('-q', '--quiet', dest='quiet', action='store_true',
		help='suppress progress output')
	args = parser.parse_args(argv)
	return args

#============================================

def _unit_problems(label: str, value) -> list:
	if value < 0.0 or value > 1.0:
		return [f"{label} out of range: {value}"]
	return []

#============================================

def check_sample(sample: dict) -> list:
	problems = []
	frame = sample['frame']
	problems += _unit_problems(f"frame {frame} global bgm volume",
		sample['global_bgm']['volume'])
	for clip in sample['audio']:
		problems += _unit_problems(f"frame {frame} {clip['track']} {clip['id']} volume",
			clip['volume'])
	scene = sample['scene']
	if scene is None:
		return problems
	problems += _unit_problems(f"frame {frame} scene opacity", scene['opacity'])
	for overlay in scene['overlays']:
		problems += _unit_problems(f"frame {frame} overlay {overlay['id']} opacity",
			overlay['opacity'])
	if scene['caption'] is not None:
		problems += _unit_problems(f"frame {frame} caption opacity",
			scene['caption']['opacity'])
	return problems

#============================================

def sweep_frames(project: ReelProject) -> list:
	total_frames = project.total_frames()
	if utils.is_quiet_mode():
		iter_range = range(total_frames)
	else:
		iter_range = tqdm(range(total_frames))
	problems = []
	for frame in iter_range:
		problems += check_sample(project.sample(frame))
	return problems

#============================================

def main(argv=None):
	args = parse_args(argv)
	utils.set_quiet_mode(args.quiet)
	project = ReelProject(args.document_file, fps=args.fps, width=args.width,
		height=args.height, bgm_fade_ms=args.bgm_fade_ms,
		overlay_fade_ms=args.overlay_fade_ms, dry_run=args.dry_run)
	project.run()
	if args.dry_run:
		return
	if args.dump_plan:
		print(yaml.safe_dump(project.plan(), sort_keys=False))
	if args.frame is not None:
		print(yaml.safe_dump(project.sample(args.frame), sort_keys=False))
	if args.time_ms is not None:
		print(yaml.safe_dump(project.sample_ms(args.time_ms), sort_keys=False))
	if args.sweep:
		problems = sweep_frames(project)
		for problem in problems:
			print(problem)
		if len(problems) > 0:
			raise RuntimeError(f"sweep found {len(problems)} out of range values")
		if not utils.is_quiet_mode():
			print(f"sweep: {project.total_frames()} frames ok")
	if args.mlt_file:
		exporter = MltExporter(project, args.mlt_file)
		exporter.export()
		if not utils.is_quiet_mode():
			print(f"wrote {exporter.output_file}")
	if args.chart_file:
		chart = TimelineChart(project, args.chart_file)
		chart.export()
		if not utils.is_quiet_mode():
			print(f"wrote {chart.output_file}")


if __name__ == '__main__':
	main()
