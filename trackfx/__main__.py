"""
trackfx Command Line Interface

Usage:
    trackfx <command> [options]

Commands:
    render      Draw tracked boxes over a video
    info        Summarize a tracking data file
    properties  Show an effect's properties at a frame

Examples:
    trackfx render input.mp4 -td clip.data -o preview.mp4
    trackfx render input.mp4 -c tracker.json --match-fps
    trackfx info clip.data
    trackfx properties tracker.json -f 120
"""

import sys
import argparse
import logging

from trackfx import __version__


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog='trackfx',
        description='Tracked object overlay effect',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )

    parser.add_argument(
        '-V', '--version',
        action='version',
        version=f'trackfx {__version__}',
    )
    parser.add_argument(
        '-v', '--verbose',
        action='store_true',
        help='Show debug logging',
    )

    subparsers = parser.add_subparsers(dest='command', help='Command to run')

    # Render command
    render_parser = subparsers.add_parser(
        'render',
        help='Draw tracked boxes over a video',
    )
    render_parser.add_argument('input', help='Input video file')
    render_parser.add_argument(
        '-c', '--config',
        help='Effect JSON file',
    )
    render_parser.add_argument(
        '-td', '--track-data',
        help='Tracking data file (overrides the path in the effect JSON)',
    )
    render_parser.add_argument(
        '-o', '--output',
        help='Output video (default: <input>_tracked.mp4)',
    )
    render_parser.add_argument(
        '-fs', '--first-frame',
        type=int,
        default=1,
        help='First frame to process (default: 1)',
    )
    render_parser.add_argument(
        '-fe', '--frame-end',
        type=int,
        default=None,
        help='Last frame to process (default: end of video)',
    )
    render_parser.add_argument(
        '--match-fps',
        action='store_true',
        help='Rescale tracked frames from the effect BaseFPS to the video frame rate',
    )
    render_parser.add_argument(
        '-q', '--quiet',
        action='store_true',
        help='Suppress progress output',
    )

    # Info command
    info_parser = subparsers.add_parser(
        'info',
        help='Summarize a tracking data file',
    )
    info_parser.add_argument('track_data', help='Tracking data file')

    # Properties command
    props_parser = subparsers.add_parser(
        'properties',
        help="Show an effect's properties at a frame",
    )
    props_parser.add_argument('config', help='Effect JSON file')
    props_parser.add_argument(
        '-f', '--frame',
        type=int,
        default=1,
        help='Frame to evaluate (default: 1)',
    )

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format='%(levelname)s %(name)s: %(message)s',
    )

    if args.command is None:
        parser.print_help()
        return 0

    if args.command == 'render':
        return run_render(args)
    elif args.command == 'info':
        return run_info(args)
    elif args.command == 'properties':
        return run_properties(args)
    else:
        parser.print_help()
        return 1


def run_render(args) -> int:
    """Run the render command."""
    from pathlib import Path

    from trackfx.core.config import load_effect
    from trackfx.core.errors import TrackFXError
    from trackfx.core.video import VideoReader, VideoWriter
    from trackfx.effects import Tracker

    try:
        tracker = load_effect(args.config) if args.config else Tracker()
    except (FileNotFoundError, TrackFXError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if args.track_data and not tracker.load_tracked_data(args.track_data):
        print(f"Error: could not load tracking data {args.track_data}", file=sys.stderr)
        return 1

    if not Path(args.input).exists():
        print(f"Error: video file not found: {args.input}", file=sys.stderr)
        return 1

    if not tracker.tracked_data:
        print("Warning: no tracking data, output will match input")

    output = args.output or f"{Path(args.input).stem}_tracked.mp4"
    print(f"Rendering {args.input} -> {output}")

    with VideoReader(args.input, args.first_frame, args.frame_end) as reader:
        props = reader.properties
        if args.match_fps:
            try:
                factor = tracker.match_frame_rate(props.frame_rate)
            except ValueError as e:
                print(f"Error: {e}", file=sys.stderr)
                return 1
            print(f"Rescaled tracked frames by {factor:.4f}")

        tracker.initialize(props.to_dict())
        drawn = 0
        with VideoWriter(output, props) as writer:
            for frame_num, frame in reader:
                if tracker.tracked_data.contains(frame_num):
                    drawn += 1
                writer.write(tracker.process_frame(frame_num, frame))
                if not args.quiet:
                    print(f"\rFrame {frame_num}: {drawn} boxes drawn", end='')
        tracker.finalize()

    print("\nDone!")
    return 0


def run_info(args) -> int:
    """Run the info command."""
    from trackfx.core.errors import TrackingFileError
    from trackfx.tracking import read_tracking_file

    try:
        data = read_tracking_file(args.track_data)
    except TrackingFileError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    valid = data.valid_frames
    print(f"Tracking file: {args.track_data}")
    print(f"  Records:      {len(data.frames)}")
    print(f"  Valid:        {len(valid)}")
    if valid:
        ids = [f.id for f in valid]
        print(f"  Frame range:  {min(ids)} - {max(ids)}")
    if data.last_updated is not None:
        print(f"  Last updated: {data.last_updated.isoformat()}")
    return 0


def run_properties(args) -> int:
    """Run the properties command."""
    from trackfx.core.config import load_effect
    from trackfx.core.errors import TrackFXError

    try:
        effect = load_effect(args.config)
    except (FileNotFoundError, TrackFXError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(effect.properties_json(args.frame))
    return 0


if __name__ == '__main__':
    sys.exit(main())
