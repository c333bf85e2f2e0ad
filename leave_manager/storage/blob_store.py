# leave_manager/storage/blob_store.py
"""Disk-backed store for uploaded work-log files."""
import logging
import re
import shutil
import time
import uuid
from pathlib import Path
from typing import BinaryIO

from leave_manager.config import DOC_DIR, WORKLOG_SUBDIR

log = logging.getLogger(__name__)


def safe_filename(name: str) -> str:
    """Keep word chars (Hangul included), dot and dash; everything else becomes '_'."""
    base = Path(name or "").name or "worklog"
    return re.sub(r"[^\w.\-]", "_", base)


class LocalBlobStore:
    """
    Files live under <root>/<subdir>/. References handed back to callers are
    root-relative ("worklogs/<name>") so they can be served from /static.
    """

    def __init__(self, root: Path = DOC_DIR, subdir: str = WORKLOG_SUBDIR):
        self.root = Path(root)
        self.subdir = subdir
        (self.root / self.subdir).mkdir(parents=True, exist_ok=True)

    def save(self, fileobj: BinaryIO, original_name: str) -> str:
        stamp = int(time.time() * 1000)
        stored_name = f"{stamp}_{uuid.uuid4().hex[:8]}_{safe_filename(original_name)}"
        dest = self.root / self.subdir / stored_name
        with dest.open("wb") as out_f:
            shutil.copyfileobj(fileobj, out_f)
        log.info("Stored upload %s as %s", original_name, dest)
        return f"{self.subdir}/{stored_name}"

    def path_for(self, reference: str) -> Path:
        return self.root / reference

    def delete(self, reference: str) -> None:
        try:
            self.path_for(reference).unlink()
        except FileNotFoundError:
            log.warning("Blob %s already gone", reference)


_default_store = None


def get_blob_store() -> LocalBlobStore:
    """FastAPI dependency; overridden in tests."""
    global _default_store
    if _default_store is None:
        _default_store = LocalBlobStore()
    return _default_store
