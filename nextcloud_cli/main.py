"""
nextcloud-cli entry point.

Usage:
    nextcloud-cli upload --url=https://cloud.example.com --username=john --password=secret hello.txt
    nextcloud-cli --path=Documents upload --fail-fast a.txt b.txt
    nextcloud-cli download Documents/a.txt -o a.txt
    nextcloud-cli share file-drop Documents
"""

import argparse
import logging
import posixpath
import sys
from pathlib import Path
from typing import List, Optional

from . import config
from .client import ERROR_DETECTION_MODES, create_storage
from .errors import ConfigurationError, NextcloudError
from .storage import Storage
from .uploader import STRATEGIES, UploadContext

logger = logging.getLogger("nextcloud_cli")


def _connection_options() -> argparse.ArgumentParser:
    # Shared by the top-level parser and every command, so flags may come
    # before or after the command name.
    parent = argparse.ArgumentParser(add_help=False, argument_default=argparse.SUPPRESS)
    parent.add_argument("--url", help="url of the nextcloud host (*)")
    parent.add_argument("--username", help="your username (*)")
    parent.add_argument("--password", help="your password (*)")
    parent.add_argument("--path", help="target path")
    parent.add_argument("--timeout", type=float, help="request timeout in seconds")
    parent.add_argument("--error-detection", choices=ERROR_DETECTION_MODES,
                        help="how WebDAV errors are detected")
    parent.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    return parent


def build_parser() -> argparse.ArgumentParser:
    common = _connection_options()
    parser = argparse.ArgumentParser(
        prog="nextcloud-cli",
        description="Upload files to and manage shares on a Nextcloud instance",
        parents=[common],
    )
    commands = parser.add_subparsers(dest="command", metavar="command")

    upload = commands.add_parser("upload", parents=[common], help="upload local files")
    upload.add_argument("files", nargs="+", help="files relative to the working directory")
    upload.add_argument("--fail-fast", action="store_true", help="stop at the first failed file")

    download = commands.add_parser("download", parents=[common], help="download a remote file")
    download.add_argument("remote")
    download.add_argument("-o", "--output", help="local file (defaults to the remote file name)")

    share = commands.add_parser("share", parents=[common], help="create a public link share")
    share.add_argument("kind", choices=("file-drop", "read-only"))
    share.add_argument("remote")

    mkdir = commands.add_parser("mkdir", parents=[common], help="create a remote directory")
    mkdir.add_argument("remote")

    delete = commands.add_parser("delete", parents=[common], help="delete a remote path")
    delete.add_argument("remote")

    return parser


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else config.LOG_LEVEL,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


def run_upload(ctx: UploadContext, files: List[str], fail_fast: bool = False) -> int:
    strategy = "fail-fast" if fail_fast else "best-effort"
    if fail_fast:
        try:
            STRATEGIES[strategy](ctx, files)
        except (OSError, NextcloudError) as e:
            logger.error(f"Upload aborted: {e}")
            return 1
        return 0
    report = STRATEGIES[strategy](ctx, files)
    return 0 if report.ok else 1


def run_download(storage: Storage, remote: str, output: Optional[str], workdir: Path) -> int:
    data = storage.download(remote)
    local = Path(output) if output else workdir / posixpath.basename(remote.rstrip("/"))
    local.write_bytes(data)
    logger.info(f"Downloaded {remote} to {local} ({len(data)} bytes)")
    return 0


def run_share(storage: Storage, kind: str, remote: str) -> int:
    if kind == "file-drop":
        result = storage.create_file_drop_share(remote)
    else:
        result = storage.create_read_only_share(remote)
    logger.info(f"Created {kind} share {result.id} for {remote}")
    print(result.url)
    return 0


def main(argv: Optional[List[str]] = None, storage: Optional[Storage] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    _setup_logging(getattr(args, "verbose", False))

    if not args.command:
        logger.info("missing command")
        parser.print_help()
        return 0

    if storage is None:
        try:
            storage = create_storage(
                getattr(args, "url", config.NEXTCLOUD_URL),
                getattr(args, "username", config.NEXTCLOUD_USERNAME),
                getattr(args, "password", config.NEXTCLOUD_PASSWORD),
                timeout=getattr(args, "timeout", config.NEXTCLOUD_TIMEOUT),
                error_detection=getattr(args, "error_detection", config.NEXTCLOUD_ERROR_DETECTION),
            )
        except ConfigurationError as e:
            logger.error(f"storage can't be created. reason: {e}")
            return 1

    workdir = Path.cwd()
    ctx = UploadContext(storage, getattr(args, "path", config.NEXTCLOUD_PATH), workdir)

    if args.command == "upload":
        return run_upload(ctx, args.files, args.fail_fast)

    try:
        if args.command == "download":
            return run_download(storage, args.remote, args.output, workdir)
        if args.command == "share":
            return run_share(storage, args.kind, args.remote)
        if args.command == "mkdir":
            storage.mkdir(args.remote)
        elif args.command == "delete":
            storage.delete(args.remote)
    except (OSError, NextcloudError) as e:
        logger.error(f"{args.command} {args.remote} failed: {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
