"""
Local disk storage for rendered chart artifacts.
"""
from __future__ import annotations

import hashlib
import logging
import os
import tempfile
from pathlib import Path

logger = logging.getLogger(__name__)

DATA_DIR = Path(os.environ.get("DATA_DIR", "./data"))
ARTIFACTS_DIR = DATA_DIR / "artifacts"
LOCAL_RECORD_ID = "local"


def ensure_dirs() -> None:
    """Create data directories if they don't exist."""
    ARTIFACTS_DIR.mkdir(parents=True, exist_ok=True)


def sha256_bytes(data: bytes) -> str:
    """Compute sha256 hex digest of raw bytes."""
    return hashlib.sha256(data).hexdigest()


def get_artifact_dir(record_id: str | None) -> Path:
    """Return the artifact directory for a record (``local`` when there is none)."""
    return ARTIFACTS_DIR / (record_id or LOCAL_RECORD_ID)


def get_artifact_path(record_id: str | None, filename: str) -> Path:
    """Return the full path to a specific artifact."""
    return get_artifact_dir(record_id) / filename


def write_atomic(path: Path, data: bytes) -> Path:
    """
    Write *data* to *path* through a temp file in the same directory.

    The temp file is moved into place with ``os.replace``, so readers see either
    the old file or the complete new one.  A failed write leaves nothing behind.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "wb") as fh:
            fh.write(data)
            fh.flush()
            os.fsync(fh.fileno())
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise
    return path


def save_artifact(record_id: str | None, filename: str, data: bytes) -> Path:
    """Save a generated artifact to the record's artifact dir."""
    ensure_dirs()
    path = write_atomic(get_artifact_path(record_id, filename), data)
    logger.info(f"[{record_id or LOCAL_RECORD_ID}] Saved {filename} ({len(data)} bytes, sha256={sha256_bytes(data)[:12]})")
    return path
