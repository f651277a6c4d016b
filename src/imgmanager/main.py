"""Main module for the imgmanager CLI."""

import sys
import argparse
import posixpath
from datetime import date, datetime
from pathlib import Path
from typing import List, Optional

from . import __version__
from .core import ImageManager, ImgManagerError, ManagerConfig, get_logger, set_package_level
from .core.protocols import StorageDrive
from .drives import LocalDrive, S3Drive


def _parse_day(value: str) -> date:
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected YYYY-MM-DD, got {value!r}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="imgmanager",
        description="Store images by capture date and serve their thumbnails",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Store a photo under ./photos/YYYY/MM/DD/
  imgmanager --root ./photos upload IMG_0001.jpg

  # Fetch (and generate if needed) its thumbnail from S3
  imgmanager --bucket my-photos thumbnail 2023/05/01/IMG_0001.jpg -o thumb.jpg

  # List a week of uploads
  imgmanager --root ./photos list --start 2023-05-01 --end 2023-05-07
        """,
    )
    parser.add_argument("--root", default=".", help="Local drive root directory")
    parser.add_argument("--bucket", help="Use an S3 drive on this bucket")
    parser.add_argument("--prefix", default="", help="Key prefix for the S3 drive")
    parser.add_argument("--workers", type=int, default=0, help="Worker count")
    parser.add_argument(
        "--thumbnail-size", type=int, default=0, help="Thumbnail bounding box edge"
    )
    parser.add_argument(
        "--quality", type=int, default=0, help="Thumbnail JPEG quality"
    )
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    upload_parser = subparsers.add_parser("upload", help="Store image files")
    upload_parser.add_argument("files", nargs="+", type=Path, help="Image files")
    upload_parser.add_argument("--name", help="Object name (single file only)")
    upload_parser.add_argument(
        "--date", default="", help="Fallback capture time 'YYYY:MM:DD HH:MM:SS'"
    )
    upload_parser.add_argument(
        "--thumbnail", action="store_true", help="Also queue thumbnail generation"
    )

    thumb_parser = subparsers.add_parser("thumbnail", help="Fetch a thumbnail")
    thumb_parser.add_argument("path", help="Storage path of the original image")
    thumb_parser.add_argument("-o", "--output", type=Path, help="Output file")

    list_parser = subparsers.add_parser("list", help="List images by date")
    list_parser.add_argument("--start", type=_parse_day, required=True)
    list_parser.add_argument("--end", type=_parse_day, default=None)
    list_parser.add_argument("--limit", type=int, default=0, help="Stop after N")

    delete_parser = subparsers.add_parser("delete", help="Delete stored images")
    delete_parser.add_argument("paths", nargs="+", help="Storage paths")

    subparsers.add_parser("version", help="Show version information")
    return parser


def build_drive(args: argparse.Namespace) -> StorageDrive:
    if args.bucket:
        return S3Drive(args.bucket, prefix=args.prefix)
    return LocalDrive(args.root)


def _upload(manager: ImageManager, args: argparse.Namespace) -> int:
    if args.name and len(args.files) > 1:
        print("--name can only be used with a single file", file=sys.stderr)
        return 2
    for file in args.files:
        data = file.read_bytes()
        name = args.name or file.name
        path = manager.upload_img(data, name, args.date)
        if args.thumbnail:
            manager.generate_thumbnail_async(path, data)
        print(path)
    return 0


def _thumbnail(manager: ImageManager, args: argparse.Namespace) -> int:
    with manager.get_thumbnail(args.path) as thumb:
        data = thumb.read()
    output = args.output or Path(posixpath.basename(thumb.path))
    output.write_bytes(data)
    print(f"{thumb.path} -> {output} ({len(data)} bytes)")
    return 0


def _list(manager: ImageManager, args: argparse.Namespace) -> int:
    end = args.end or date.today()
    seen = 0

    def show(path: str, size: int) -> bool:
        nonlocal seen
        seen += 1
        print(f"{size:>12}  {path}")
        return not (args.limit and seen >= args.limit)

    manager.range_by_date(args.start, show, end=end)
    return 0


def _delete(manager: ImageManager, args: argparse.Namespace) -> int:
    manager.delete_img(args.paths)
    return 0


def main(argv: Optional[List[str]] = None) -> None:
    """
    Entry point for the imgmanager command-line interface.

    Uploads and deletes are queued on the manager's worker pool; the
    manager is stopped with a drain before exiting so they complete.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command == "version":
        print("imgmanager CLI")
        print(f"Version {__version__}")
        sys.exit(0)

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    if args.debug:
        set_package_level("DEBUG")
    logger = get_logger("imgmanager")

    config = ManagerConfig(
        worker_count=args.workers,
        thumbnail_max_width=args.thumbnail_size,
        thumbnail_max_height=args.thumbnail_size,
        thumbnail_quality=args.quality,
        unbounded_range=False,
    )
    commands = {
        "upload": _upload,
        "thumbnail": _thumbnail,
        "list": _list,
        "delete": _delete,
    }

    manager = ImageManager(config=config, drive=build_drive(args), logger=logger)
    try:
        code = commands[args.command](manager, args)
    except (ImgManagerError, OSError) as exc:
        logger.error(f"{args.command} failed: {exc}")
        code = 1
    finally:
        manager.stop(drain=True)
    sys.exit(code)


if __name__ == "__main__":
    main()
