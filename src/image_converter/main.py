"""Main module for the image converter CLI."""

import sys
import asyncio
import argparse
from pathlib import Path
from typing import List, Optional

from .core import (
    ConfigurationError,
    ConverterConfig,
    ConverterFactory,
    InvalidFileTypeError,
    OutputFormat,
    UploadedFile,
    get_logger,
)
from .core.logging_config import set_debug_logging

VERSION = "0.1.0"


def read_uploads(paths: List[str]) -> List[UploadedFile]:
    """Read files from disk into upload records."""
    uploads = []
    for raw_path in paths:
        path = Path(raw_path)
        stat = path.stat()
        uploads.append(
            UploadedFile(
                name=path.name,
                data=path.read_bytes(),
                size=stat.st_size,
                last_modified=int(stat.st_mtime * 1000),
            )
        )
    return uploads


def run_convert(args: argparse.Namespace) -> int:
    """Convert the given files and write the results. Returns the exit code."""
    logger = get_logger("image-converter.cli")

    overrides = {"debug": args.debug}
    if args.format:
        overrides["default_format"] = args.format
    if args.concurrency is not None:
        overrides["concurrency"] = args.concurrency
    if args.timeout is not None:
        overrides["item_timeout"] = args.timeout
    if args.native_ico:
        overrides["native_ico"] = True

    try:
        config = ConverterConfig.from_env(**overrides)
    except ConfigurationError as e:
        print(f"error: {e}", file=sys.stderr)
        return 2

    if config.debug:
        set_debug_logging("image_converter")
        set_debug_logging("image-converter.cli")

    missing = [p for p in args.files if not Path(p).is_file()]
    if missing:
        print(f"error: file(s) not found: {', '.join(missing)}", file=sys.stderr)
        return 2

    controller = ConverterFactory.create_controller(config=config)
    try:
        controller.add_files(read_uploads(args.files))
    except InvalidFileTypeError as e:
        print(f"error: {e}", file=sys.stderr)
        return 2

    output_dir = Path(args.output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    try:
        summary = asyncio.run(controller.convert_all(config.default_format))

        for output in controller.results():
            destination = output_dir / output.filename
            destination.write_bytes(output.data)
            logger.debug(f"Wrote {destination} ({output.size} bytes)")
            print(f"{destination}")

        print(summary.message())
        for item_id, error in summary.errors.items():
            print(f"  {item_id}: {error}", file=sys.stderr)
    finally:
        controller.remove_all()

    return 1 if summary.partial_failure else 0


def main(argv: Optional[List[str]] = None) -> None:
    """
    Entry point for the command-line interface (CLI) of the image converter.

    Commands:
        convert: Convert image files to one output format
        formats: List supported output formats
        version: Show version information
    """
    parser: argparse.ArgumentParser = argparse.ArgumentParser(
        prog="image-converter",
        description="Image Converter - convert images between PNG, JPEG, WEBP, BMP, GIF, TIFF, PDF and ICO",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Convert two photos to WEBP in the current directory
  image-converter convert a.jpg b.png --format webp

  # Build 32x32 icons into ./icons, at most 4 at a time
  image-converter convert *.png --format ico --output-dir icons --concurrency 4

  # Show version
  image-converter version
        """,
    )

    subparsers: argparse._SubParsersAction = parser.add_subparsers(
        dest="command", help="Available commands"
    )

    convert_parser: argparse.ArgumentParser = subparsers.add_parser(
        "convert", help="Convert image files to another format"
    )
    convert_parser.add_argument("files", nargs="+", help="Image files to convert")
    convert_parser.add_argument(
        "--format",
        "-f",
        type=str,
        default=None,
        choices=[fmt.value for fmt in OutputFormat] + ["jpg"],
        help="Output format (default: png, or IMAGE_CONVERTER_DEFAULT_FORMAT)",
    )
    convert_parser.add_argument(
        "--output-dir", "-o", default=".", help="Directory for converted files"
    )
    convert_parser.add_argument(
        "--concurrency", type=int, default=None, help="Maximum concurrent conversions"
    )
    convert_parser.add_argument(
        "--timeout", type=float, default=None, help="Per-image timeout in seconds"
    )
    convert_parser.add_argument(
        "--native-ico",
        action="store_true",
        help="Write real ICO containers instead of 32x32 PNG payloads",
    )
    convert_parser.add_argument(
        "--debug", action="store_true", help="Enable debug logging"
    )

    subparsers.add_parser("formats", help="List supported output formats")
    subparsers.add_parser("version", help="Show version information")

    args: argparse.Namespace = parser.parse_args(argv)

    if args.command == "convert":
        sys.exit(run_convert(args))

    elif args.command == "formats":
        for fmt in OutputFormat:
            print(f"{fmt.value:<5} .{fmt.extension:<5} {fmt.mime_type}")
        sys.exit(0)

    elif args.command == "version":
        print("Image Converter CLI")
        print(f"Version {VERSION}")
        print("Batch image format conversion with Pillow")
        sys.exit(0)

    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
