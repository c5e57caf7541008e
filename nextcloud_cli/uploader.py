"""
Upload several local files to a remote directory.

Two strategies are available:
    best-effort   log each failure and carry on with the next file
    fail-fast     stop at the first failure and raise it
"""

import logging
import posixpath
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Tuple

from .errors import NextcloudError
from .storage import Storage

logger = logging.getLogger(__name__)


@dataclass
class UploadContext:
    """Everything an upload needs: where files come from and where they go."""
    storage: Storage
    target_path: str = ""
    workdir: Path = field(default_factory=Path.cwd)

    def local_path(self, source: str) -> Path:
        return Path(self.workdir) / source

    def remote_path(self, source: str) -> str:
        if not self.target_path:
            return source
        return posixpath.join(self.target_path, source)

    def ensure_target(self) -> None:
        """Best-effort creation of the target directory."""
        if not self.target_path:
            return
        try:
            self.storage.mkdir(self.target_path)
            logger.info(f"New directory created {self.target_path}")
        except NextcloudError as e:
            logger.info(f"Could not create {self.target_path} (continuing): {e}")


@dataclass
class UploadReport:
    uploaded: List[str] = field(default_factory=list)
    failed: List[Tuple[str, str]] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed


def _upload_one(ctx: UploadContext, source: str) -> None:
    logger.info(f"Uploading {source}")
    content = ctx.local_path(source).read_bytes()
    ctx.storage.upload(content, ctx.remote_path(source))


def upload_best_effort(ctx: UploadContext, sources: Iterable[str]) -> UploadReport:
    """Upload every source, logging and skipping the ones that fail."""
    ctx.ensure_target()
    report = UploadReport()
    for source in sources:
        try:
            _upload_one(ctx, source)
        except (OSError, NextcloudError) as e:
            logger.error(f"Upload failed {source}: {e}")
            report.failed.append((source, str(e)))
            continue
        report.uploaded.append(source)

    logger.info(f"Upload complete: {len(report.uploaded)} succeeded, {len(report.failed)} failed")
    return report


def upload_fail_fast(ctx: UploadContext, sources: Iterable[str]) -> List[str]:
    """Upload sources in order; the first error aborts the rest."""
    ctx.ensure_target()
    uploaded = []
    for source in sources:
        _upload_one(ctx, source)
        uploaded.append(source)
    return uploaded


STRATEGIES: Dict[str, Callable] = {
    "best-effort": upload_best_effort,
    "fail-fast": upload_fail_fast,
}
