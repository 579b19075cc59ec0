"""Tests for backup utility functions."""

import gzip
import json
import re
import pytest
from datetime import datetime, timezone

from parkrun_helper.backup.models import BackupKind
from parkrun_helper.backup.utils import (
    backup_file_name,
    classify_backup_file,
    creation_time_from_name,
    generate_backup_id,
    read_snapshot,
    strip_system_properties,
    write_snapshot,
)


def test_generate_backup_id():
    """Test backup ID generation."""
    started = datetime(2023, 11, 14, 22, 13, 20, tzinfo=timezone.utc)

    full_id = generate_backup_id(BackupKind.FULL, started)
    incremental_id = generate_backup_id(BackupKind.INCREMENTAL, started)

    assert re.fullmatch(r"backup_1700000000000_[0-9a-f]{6}", full_id)
    assert re.fullmatch(r"incremental_1700000000000_[0-9a-f]{6}", incremental_id)


def test_backup_ids_within_same_millisecond_differ():
    started = datetime(2024, 1, 1, tzinfo=timezone.utc)
    ids = {generate_backup_id(BackupKind.FULL, started) for _ in range(50)}
    assert len(ids) > 1


def test_backup_file_name():
    assert backup_file_name("backup_1_abc123", compress=True) == "backup_1_abc123.json.gz"
    assert backup_file_name("backup_1_abc123", compress=False) == "backup_1_abc123.json"


@pytest.mark.parametrize("file_name,kind", [
    ("incremental_1700000000000.json.gz", BackupKind.INCREMENTAL),
    ("backup_1700000000000.json", BackupKind.FULL),
    ("backup_1700000000000_a1b2c3.json.gz", BackupKind.FULL),
    ("incremental_1700000000000_a1b2c3.json", BackupKind.INCREMENTAL),
    ("notes.txt", None),
    ("backup_1700000000000.tar.gz", None),
    ("snapshot_1700000000000.json", None),
])
def test_classify_backup_file(file_name, kind):
    assert classify_backup_file(file_name) == kind


def test_creation_time_from_name():
    assert creation_time_from_name("backup_1700000000000_a1b2c3.json.gz") == datetime(
        2023, 11, 14, 22, 13, 20, tzinfo=timezone.utc
    )
    assert creation_time_from_name("incremental_1700000000000.json") is not None
    assert creation_time_from_name("backup_latest.json") is None


def test_strip_system_properties_keeps_modification_time():
    doc = {"id": "h1", "_rid": "r", "_self": "s", "_etag": "e", "_attachments": "a", "_ts": 5}
    assert strip_system_properties(doc) == {"id": "h1", "_ts": 5}


@pytest.mark.asyncio
async def test_write_snapshot_compressed(temp_backup_dir):
    data = {"metadata": {"backupId": "b"}, "containers": {"helpers": [{"id": "h1"}]}}
    path = temp_backup_dir / "backup_1.json.gz"

    size = await write_snapshot(data, path, compress=True)

    assert size == path.stat().st_size
    assert json.loads(gzip.decompress(path.read_bytes())) == data
    assert list(temp_backup_dir.iterdir()) == [path]


@pytest.mark.asyncio
async def test_read_snapshot_handles_both_encodings(temp_backup_dir):
    data = {"metadata": {}, "containers": {"helpers": []}}
    plain = temp_backup_dir / "backup_1.json"
    compressed = temp_backup_dir / "backup_2.json.gz"

    await write_snapshot(data, plain, compress=False)
    await write_snapshot(data, compressed, compress=True)

    assert await read_snapshot(plain) == data
    assert await read_snapshot(compressed) == data


@pytest.mark.asyncio
async def test_read_snapshot_rejects_invalid_content(temp_backup_dir):
    no_containers = temp_backup_dir / "backup_1.json"
    no_containers.write_text(json.dumps({"metadata": {}}))
    not_json = temp_backup_dir / "backup_2.json"
    not_json.write_text("{truncated")

    with pytest.raises(ValueError):
        await read_snapshot(no_containers)
    with pytest.raises(ValueError):
        await read_snapshot(not_json)
