"""
EXR Layer Import
Main entry point - command line edition
"""
import argparse
import dataclasses
import logging
import sys

from app_config import APP_DISPLAY_NAME, APP_DESCRIPTION
from exr_import.sink.directory import OUTPUT_FORMATS


def build_parser():
    parser = argparse.ArgumentParser(
        prog='exr-import',
        description=f'{APP_DISPLAY_NAME} - {APP_DESCRIPTION}',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""Examples:
  python main.py render.exr                        # Write layers to the default folder
  python main.py render.exr --output out/          # Write layers to out/render/
  python main.py render.exr --format tiff          # TIFF instead of PNG
  python main.py render.exr --list-layers          # Show layers and their layout only
        """)

    parser.add_argument('input', help='OpenEXR file to import')
    parser.add_argument('--output', metavar='DIR',
                        help='Output directory for the directory sink')
    parser.add_argument('--sink', help='Sink backend (directory, memory)')
    parser.add_argument('--decoder', help='Decoder backend (openexr)')
    parser.add_argument('--format', choices=sorted(OUTPUT_FORMATS),
                        help='Image format written by the directory sink')
    parser.add_argument('--gamma', type=float, help='Gamma (accepted, not applied)')
    parser.add_argument('--exposure', type=float, help='Exposure in stops (accepted, not applied)')
    parser.add_argument('--config', metavar='PATH', help='Configuration file')
    parser.add_argument('--list-layers', action='store_true',
                        help='List layers, channels and layout without converting')
    parser.add_argument('--discard-partial', action='store_true',
                        help='Delete the partially written canvas when a layer fails')
    parser.add_argument('--log-dir', metavar='DIR', help='Directory for the log file')
    parser.add_argument('-v', '--verbose', action='store_true', help='Debug output on the console')
    return parser


def apply_arguments(config, args):
    """Overlay command line options on the loaded configuration"""
    if args.sink:
        config.set('sink', args.sink)
    if args.decoder:
        config.set('decoder', args.decoder)
    if args.output:
        config.data.setdefault('output', {})['directory'] = args.output
    if args.format:
        config.data.setdefault('output', {})['format'] = args.format
    overrides = {}
    if args.gamma is not None:
        overrides['gamma'] = args.gamma
    if args.exposure is not None:
        overrides['exposure'] = args.exposure
    if overrides:
        # Raises ValueError for out-of-range values
        settings = dataclasses.replace(config.get_conversion_settings(), **overrides)
        config.set_conversion_settings(settings)
    if args.discard_partial:
        config.set('discard_partial_canvas', True)
    return config


def main(argv=None):
    args = build_parser().parse_args(argv)

    from exr_import.config import Config
    try:
        config = apply_arguments(Config(args.config), args)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    # Initialize logging before any backend is created
    from logging_config import setup_logging
    if args.verbose:
        console_level = logging.DEBUG
    else:
        console_level = getattr(logging, str(config.get('log_level', 'INFO')).upper(), logging.INFO)
    setup_logging(log_dir=args.log_dir, console_level=console_level)

    from exr_import.importer import ExrImporter

    try:
        importer = ExrImporter(config)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if args.list_layers:
        try:
            summaries = importer.describe(args.input)
        except ValueError as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1
        for summary in summaries:
            print(f"{summary.name or '<default>'}: {', '.join(summary.channels)} "
                  f"[{summary.layer_type.value}]")
        return 0

    result = importer.import_file(args.input)
    if not result.success:
        print(f"Error: {result.error}", file=sys.stderr)
        return 1

    canvas = result.canvas
    if canvas.location:
        print(f"Wrote {canvas.layer_count} layer(s) to {canvas.location}")
    else:
        print(f"Converted {canvas.layer_count} layer(s)")
    return 0


if __name__ == "__main__":
    sys.exit(main())
