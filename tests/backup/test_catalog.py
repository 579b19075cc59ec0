"""Tests for the backup catalog and retention pruning."""

import pytest
from datetime import datetime, timedelta, timezone
from unittest.mock import patch

from parkrun_helper.backup.catalog import BackupCatalog
from parkrun_helper.backup.models import BackupKind

NOW = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)


def backup_name(prefix: str, created: datetime, suffix: str = ".json.gz") -> str:
    return f"{prefix}{int(created.timestamp() * 1000)}_abcdef{suffix}"


def touch(directory, name: str, content: bytes = b"{}"):
    path = directory / name
    path.write_bytes(content)
    return path


@pytest.fixture
def catalog(temp_backup_dir):
    return BackupCatalog(temp_backup_dir, now=lambda: NOW)


@pytest.mark.asyncio
async def test_list_classifies_and_sorts_newest_first(catalog, temp_backup_dir):
    older = touch(temp_backup_dir, backup_name("backup_", NOW - timedelta(days=2)))
    newer = touch(temp_backup_dir, backup_name("incremental_", NOW - timedelta(hours=1), ".json"), b"[1, 2]")
    touch(temp_backup_dir, "readme.txt")
    (temp_backup_dir / "backup_dir.json").mkdir()

    entries = await catalog.list_backups()

    assert [e.file_name for e in entries] == [newer.name, older.name]
    assert entries[0].type == BackupKind.INCREMENTAL
    assert entries[0].size == 6
    assert entries[0].created == NOW - timedelta(hours=1)
    assert entries[1].type == BackupKind.FULL
    assert entries[1].file_path == str(older)


@pytest.mark.asyncio
async def test_list_missing_directory_is_empty(tmp_path):
    catalog = BackupCatalog(tmp_path / "does-not-exist")
    assert await catalog.list_backups() == []


@pytest.mark.asyncio
async def test_entry_serializes_with_camel_case(catalog, temp_backup_dir):
    touch(temp_backup_dir, backup_name("backup_", NOW))
    entry = (await catalog.list_backups())[0]

    dumped = entry.model_dump(by_alias=True, mode="json")

    assert set(dumped) == {"fileName", "filePath", "size", "created", "modified", "type"}
    assert dumped["type"] == "full"


@pytest.mark.asyncio
async def test_find_prefers_exact_id(catalog, temp_backup_dir):
    exact = touch(temp_backup_dir, "backup_1700000000000_aaaaaa.json.gz")
    touch(temp_backup_dir, "backup_1700000000000_aaaaaa_copy.json.gz")

    assert (await catalog.find("backup_1700000000000_aaaaaa")).file_name == exact.name
    assert (await catalog.find("_copy")).file_name == "backup_1700000000000_aaaaaa_copy.json.gz"
    assert await catalog.find("backup_999") is None


@pytest.mark.asyncio
async def test_retention_deletes_only_expired_files(catalog, temp_backup_dir):
    day_0 = touch(temp_backup_dir, backup_name("backup_", NOW - timedelta(days=40)))
    day_10 = touch(temp_backup_dir, backup_name("backup_", NOW - timedelta(days=30)))
    day_40 = touch(temp_backup_dir, backup_name("incremental_", NOW))

    deleted = await catalog.delete_older_than(30)

    assert deleted == 1
    assert not day_0.exists()
    assert day_10.exists()
    assert day_40.exists()


@pytest.mark.asyncio
async def test_retention_skips_files_that_fail_to_delete(catalog, temp_backup_dir):
    touch(temp_backup_dir, backup_name("backup_", NOW - timedelta(days=50)))
    touch(temp_backup_dir, backup_name("incremental_", NOW - timedelta(days=60)))

    real_unlink = type(temp_backup_dir).unlink
    calls = []

    def flaky_unlink(path, *args, **kwargs):
        calls.append(path.name)
        if path.name.startswith("incremental_"):
            raise PermissionError("read-only")
        return real_unlink(path, *args, **kwargs)

    with patch.object(type(temp_backup_dir), "unlink", flaky_unlink):
        deleted = await catalog.delete_older_than(30)

    assert len(calls) == 2
    assert deleted == 1
    assert [e.type for e in await catalog.list_backups()] == [BackupKind.INCREMENTAL]
