"""Utility functions for backup/restore operations."""

import asyncio
import gzip
import json
import os
import re
import secrets
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

from .._utils import logger
from .models import BackupKind

BACKUP_PREFIXES = {
    BackupKind.FULL: "backup_",
    BackupKind.INCREMENTAL: "incremental_",
}
JSON_SUFFIX = ".json"
COMPRESSED_SUFFIX = ".gz"

# Cosmos DB system properties dropped when metadata is excluded. ``_ts`` stays.
SYSTEM_PROPERTIES = ("_rid", "_self", "_etag", "_attachments")

_EPOCH_MS = re.compile(r"^(?:backup|incremental)_(\d{13})(?:_|\.)")


def generate_backup_id(kind: BackupKind, started_at: Optional[datetime] = None) -> str:
    """Generate backup ID from the start instant.

    Returns:
        Backup ID in format: <prefix><epoch-ms>_<6 hex chars>
    """
    started_at = started_at or datetime.now(timezone.utc)
    epoch_ms = int(started_at.timestamp() * 1000)
    return f"{BACKUP_PREFIXES[kind]}{epoch_ms}_{secrets.token_hex(3)}"


def backup_file_name(backup_id: str, compress: bool) -> str:
    return f"{backup_id}{JSON_SUFFIX}{COMPRESSED_SUFFIX if compress else ''}"


def classify_backup_file(file_name: str) -> Optional[BackupKind]:
    """Map a file name to its backup kind by prefix, or None if it is not a backup."""
    if not (file_name.endswith(JSON_SUFFIX) or file_name.endswith(JSON_SUFFIX + COMPRESSED_SUFFIX)):
        return None
    if file_name.startswith(BACKUP_PREFIXES[BackupKind.INCREMENTAL]):
        return BackupKind.INCREMENTAL
    if file_name.startswith(BACKUP_PREFIXES[BackupKind.FULL]):
        return BackupKind.FULL
    return None


def creation_time_from_name(file_name: str) -> Optional[datetime]:
    """Recover the creation instant encoded in a backup file name."""
    match = _EPOCH_MS.match(file_name)
    if not match:
        return None
    return datetime.fromtimestamp(int(match.group(1)) / 1000, tz=timezone.utc)


def strip_system_properties(document: Dict[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in document.items() if k not in SYSTEM_PROPERTIES}


def _write_file(path: Path, payload: bytes) -> None:
    tmp_path = path.with_name(f".{path.name}.tmp")
    try:
        with open(tmp_path, "wb") as f:
            f.write(payload)
        os.replace(tmp_path, path)
    finally:
        if tmp_path.exists():
            tmp_path.unlink()


async def write_snapshot(data: Dict[str, Any], output_path: Path, compress: bool) -> int:
    """Serialize a snapshot to disk, gzip-compressed if requested.

    The file appears under its final name only once fully written.

    Args:
        data: Snapshot document (metadata + containers)
        output_path: Destination file path
        compress: Whether to gzip the JSON text

    Returns:
        Size of the written file in bytes
    """
    payload = json.dumps(data, indent=2, default=str).encode("utf-8")
    if compress:
        payload = await asyncio.to_thread(gzip.compress, payload)

    await asyncio.to_thread(_write_file, output_path, payload)
    logger.debug(f"Snapshot written: {output_path} ({len(payload):,} bytes)")
    return len(payload)


def _read_file(path: Path) -> bytes:
    with open(path, "rb") as f:
        return f.read()


async def read_snapshot(input_path: Path) -> Dict[str, Any]:
    """Load a snapshot file, decompressing ``.gz`` files transparently.

    Raises:
        OSError: If the file cannot be read
        ValueError: If the content is not a valid snapshot document
    """
    payload = await asyncio.to_thread(_read_file, input_path)
    if input_path.name.endswith(COMPRESSED_SUFFIX):
        payload = await asyncio.to_thread(gzip.decompress, payload)

    data = json.loads(payload.decode("utf-8"))
    if not isinstance(data, dict) or not isinstance(data.get("containers"), dict):
        raise ValueError(f"Backup file {input_path.name} has no containers section")

    logger.debug(f"Snapshot loaded: {input_path}")
    return data
