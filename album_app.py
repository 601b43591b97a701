#!/usr/bin/env python3
"""Sticker Album - collect pictures as numbered 2:3 stickers in a 1000-slot album."""

import argparse
import logging
import sys

from controller import AlbumApp, MainWindow
from importer import ImportItem
from models import DEFAULT_QUOTA_BYTES


def main():
    parser = argparse.ArgumentParser(description="Sticker Album")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    parser.add_argument("--data-dir", default=None,
                        help="Directory for the album record (default: per-user app data)")
    parser.add_argument("--quota-mb", type=float, default=DEFAULT_QUOTA_BYTES / (1024 * 1024),
                        help="Storage quota in MiB (default: %(default)s)")
    parser.add_argument("files", nargs="*", help="Images to add to the album")
    args = parser.parse_args()

    if args.debug:
        logging.basicConfig(level=logging.DEBUG)

    app = AlbumApp(sys.argv)
    app.setApplicationName("Sticker Album")
    window = MainWindow(data_dir=args.data_dir, quota_bytes=int(args.quota_mb * 1024 * 1024))
    window.show()

    # macOS file-open events (images dropped on the Dock icon)
    app.file_open_requested.connect(lambda path: window.import_items([ImportItem.from_path(path)]))

    if args.files:
        window.import_items([ImportItem.from_path(p) for p in args.files])

    sys.exit(app.exec())


if __name__ == "__main__":
    main()
