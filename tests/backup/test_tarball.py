"""Tests for TarballPackager and Exporter."""

import pytest
from pathlib import Path
from unittest.mock import AsyncMock

from chef_backup.backup.exporter import Exporter
from chef_backup.backup.tarball import TarballPackager
from chef_backup.exceptions import ExportError, PackagingError


@pytest.fixture
def populated(data_map):
    data_map.add_service("bookshelf", "/bookshelf/data")
    data_map.add_service("redis_lb", None)
    data_map.add_service("postgresql", "/pg/data")
    data_map.add_config("opscode", "/etc/opscode")
    data_map.add_config("opscode-manage", "/etc/opscode-manage")
    return data_map


@pytest.mark.asyncio
async def test_tarball_includes_everything(make_context, populated, runner):
    context = make_context()
    (Path(context.tmp_dir) / "sql.sql").write_text("dump")
    (Path(context.tmp_dir) / "manifest.json").write_text("{}")
    packager = TarballPackager(context, populated, runner=runner)

    await packager.create_tarball()

    cmd = (
        f"tar -czf {context.tmp_dir}/chef-backup-{context.backup_time}.tgz "
        "/bookshelf/data /pg/data /etc/opscode /etc/opscode-manage "
        "manifest.json sql.sql"
    )
    runner.assert_awaited_once_with(cmd, cwd=context.tmp_dir)


def test_tarball_command_is_stable(make_context, populated, runner):
    context = make_context()
    for name in ("b.sql", "a.json", "c.txt"):
        (Path(context.tmp_dir) / name).write_text("x")
    packager = TarballPackager(context, populated, runner=runner)

    first = packager.tarball_command()

    assert first == packager.tarball_command()
    assert first.endswith("a.json b.sql c.txt")


@pytest.mark.asyncio
async def test_tarball_failure_is_fatal(make_context, populated, failed_result):
    packager = TarballPackager(make_context(), populated, runner=AsyncMock(return_value=failed_result))

    with pytest.raises(PackagingError):
        await packager.create_tarball()


@pytest.mark.asyncio
async def test_export_moves_tarball_to_archive_location(make_context, runner, tmp_path):
    export_dir = tmp_path / "mnt" / "chef-backups"
    context = make_context(export_dir=str(export_dir))

    exported = await Exporter(context, runner=runner).export_tarball()

    runner.assert_awaited_once_with(
        f"rsync -chaz {context.tmp_dir}/chef-backup-{context.backup_time}.tgz {export_dir}/",
        cwd=None
    )
    assert export_dir.is_dir()
    assert exported == export_dir / context.archive_name


@pytest.mark.asyncio
async def test_export_failure_is_fatal(make_context, failed_result):
    exporter = Exporter(make_context(), runner=AsyncMock(return_value=failed_result))

    with pytest.raises(ExportError):
        await exporter.export_tarball()


@pytest.mark.asyncio
async def test_export_dir_not_creatable(make_context, runner, tmp_path):
    blocker = tmp_path / "file"
    blocker.write_text("not a directory")
    exporter = Exporter(make_context(export_dir=str(blocker / "sub")), runner=runner)

    with pytest.raises(ExportError, match="Cannot create"):
        await exporter.export_tarball()
    runner.assert_not_awaited()
