"""Tests for the chef-backup command line."""

import json
import os
import pytest
from unittest.mock import AsyncMock, MagicMock, patch

from chef_backup.backup import BackupOrchestrator
from chef_backup.backup.manager import CONFIG_ONLY_PLAN, OFFLINE_PLAN
from chef_backup.cli import build_parser, confirm_offline, main, run_backup, settings_from_args
from chef_backup.exceptions import ConfigurationError
from chef_backup.roles import Mode, Role


def test_settings_from_args():
    args = build_parser().parse_args([
        "--running-config", "/tmp/running.json",
        "--export-dir", "/mnt/backups",
        "--config-only",
        "--yes",
        "--verbose",
    ])

    settings = settings_from_args(args)

    assert settings.running_config_path == "/tmp/running.json"
    assert settings.export_dir == "/mnt/backups"
    assert settings.config_only is True
    assert settings.agree_to_go_offline is True
    assert settings.log_level == "DEBUG"


@pytest.mark.parametrize("answer,expected", [("y", True), ("YES", True), ("", False), ("n", False)])
def test_confirm_offline(answer, expected):
    assert confirm_offline(prompt=lambda _: answer) is expected


def make_orchestrator(plan, agree=False):
    orchestrator = MagicMock(spec=BackupOrchestrator)
    orchestrator.settings = MagicMock(agree_to_go_offline=agree)
    orchestrator.plan.return_value = (Role.BACKEND, Mode.OFFLINE, plan)
    orchestrator.backup = AsyncMock(return_value=MagicMock(export_path="/mnt/chef-backup.tgz"))
    return orchestrator


@pytest.mark.asyncio
async def test_declining_offline_backup_has_no_side_effects():
    orchestrator = make_orchestrator(OFFLINE_PLAN)

    assert await run_backup(orchestrator, prompt=lambda _: "n") == 1
    orchestrator.backup.assert_not_awaited()


@pytest.mark.asyncio
async def test_agreed_offline_backup_skips_prompt():
    orchestrator = make_orchestrator(OFFLINE_PLAN, agree=True)
    prompt = MagicMock()

    assert await run_backup(orchestrator, prompt=prompt) == 0
    prompt.assert_not_called()
    orchestrator.backup.assert_awaited_once()


@pytest.mark.asyncio
async def test_plans_without_shutdown_never_prompt():
    orchestrator = make_orchestrator(CONFIG_ONLY_PLAN)
    prompt = MagicMock()

    assert await run_backup(orchestrator, prompt=prompt) == 0
    prompt.assert_not_called()


def test_main_reports_configuration_errors(tmp_path):
    assert main(["--running-config", str(tmp_path / "missing.json")]) == 1


def test_main_reports_unknown_role(tmp_path):
    path = tmp_path / "running.json"
    path.write_text(json.dumps({"private_chef": {"role": "worker"}}))

    assert main(["--running-config", str(path), "--yes"]) == 1


def test_main_reports_invalid_settings(tmp_path):
    with patch.dict(os.environ, {"CHEF_BACKUP_LOG_LEVEL": "verbose"}):
        assert main(["--running-config", str(tmp_path / "running.json")]) == 1


def test_invalid_settings_are_configuration_errors():
    args = build_parser().parse_args([])

    with patch.dict(os.environ, {"CHEF_BACKUP_LOG_LEVEL": "verbose"}):
        with pytest.raises(ConfigurationError, match="log_level"):
            settings_from_args(args)
