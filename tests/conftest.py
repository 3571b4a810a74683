"""Global pytest configuration and fixtures."""

import pytest
import sys
from pathlib import Path
from unittest.mock import AsyncMock

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from chef_backup.backup.models import BackupContext
from chef_backup.config import RunningConfig, Settings
from chef_backup.data_map import DataMap
from chef_backup.roles import Mode, Role
from chef_backup.shell import ShellResult

BACKUP_TIME = "2024-05-01-12-30-00"


@pytest.fixture
def backup_time():
    return BACKUP_TIME


@pytest.fixture
def ok_result():
    return ShellResult(success=True, exit_code=0)


@pytest.fixture
def failed_result():
    return ShellResult(success=False, exit_code=1, error="boom")


@pytest.fixture
def runner(ok_result):
    """Shell collaborator that succeeds for every command."""
    return AsyncMock(return_value=ok_result)


@pytest.fixture
def install_dir(tmp_path):
    """Fake install tree with a few service directories."""
    root = tmp_path / "opt" / "opscode"
    for service in ("bookshelf", "keepalived", "nginx", "opscode-erchef", "postgresql"):
        (root / "sv" / service).mkdir(parents=True)
    return root


@pytest.fixture
def settings(tmp_path, install_dir):
    return Settings(
        install_dir=str(install_dir),
        export_dir=str(tmp_path / "export"),
        tmp_dir=str(tmp_path / "work"),
    )


@pytest.fixture
def make_running_config():
    def _make(**data):
        return RunningConfig(data)
    return _make


@pytest.fixture
def make_context(tmp_path):
    def _make(role=Role.BACKEND, mode=Mode.OFFLINE, **overrides):
        tmp_dir = tmp_path / "run"
        tmp_dir.mkdir(exist_ok=True)
        fields = {
            "role": role,
            "mode": mode,
            "tmp_dir": str(tmp_dir),
            "backup_time": BACKUP_TIME,
            "export_dir": str(tmp_path / "export"),
        }
        fields.update(overrides)
        return BackupContext(**fields)
    return _make


@pytest.fixture
def data_map():
    return DataMap(backup_time=BACKUP_TIME, topology="standalone", role="backend")
