import pytest

from studyhub.domain.entities import FileStatus
from studyhub.services.database import DatabaseFactory, MemoryAdapter
from studyhub.services.storage import FileStorageFactory, LocalFileStorage
from tests.conftest import seed_file


@pytest.mark.asyncio
async def test_local_storage_round_trip(storage):
    await storage.save_bytes(b"hello", "u1/f1.md")

    assert await storage.file_exists("u1/f1.md")
    assert await storage.get_file("u1/f1.md") == b"hello"
    assert await storage.get_file_url("u1/f1.md") == "http://testserver/files/raw/u1/f1.md"
    assert await storage.delete_file("u1/f1.md")
    assert not await storage.file_exists("u1/f1.md")


@pytest.mark.asyncio
async def test_local_storage_refuses_paths_outside_its_directory(storage):
    with pytest.raises(FileNotFoundError):
        await storage.get_file("../../etc/passwd")


@pytest.mark.asyncio
async def test_update_file_applies_set_and_increment_together(db):
    file = await seed_file(db)

    updated = await db.update_file(
        file.id, updates={"summary_content": "<p>s</p>"}, increments={"summary_count": 1}
    )

    assert updated["summary_content"] == "<p>s</p>"
    assert updated["summary_count"] == 1
    assert await db.update_file("missing", updates={"summary_content": "x"}) is None


@pytest.mark.asyncio
async def test_returned_records_are_copies(db):
    file = await seed_file(db)
    record = await db.get_file(file.id)
    record["name"] = "changed"

    assert (await db.get_file(file.id))["name"] == "notes.pdf"


@pytest.mark.asyncio
async def test_list_files_filters_status_and_pages(db):
    first = await seed_file(db)
    subject_id = first.subject_id
    await db.update_file(first.id, updates={"status": FileStatus.DELETED})

    assert await db.count_files(subject_id) == 1
    assert await db.count_files(subject_id, status=FileStatus.ACTIVE) == 0
    assert await db.list_files(subject_id, status=FileStatus.ACTIVE, skip=0, limit=10) == []


def test_factories_build_configured_backends(tmp_path):
    assert isinstance(DatabaseFactory.create("memory"), MemoryAdapter)
    assert isinstance(FileStorageFactory.create("local", base_dir=tmp_path), LocalFileStorage)
    with pytest.raises(ValueError):
        DatabaseFactory.create("sqlite")
    with pytest.raises(ValueError):
        FileStorageFactory.create("ftp")
