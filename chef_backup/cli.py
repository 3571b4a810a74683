"""Command line entry point for chef-backup."""

import argparse
import asyncio
import sys
from typing import List, Optional

from pydantic import ValidationError

from ._utils import configure_logging, logger
from .backup import BackupOrchestrator, BackupStep
from .config import DEFAULT_RUNNING_CONFIG, Settings
from .exceptions import ChefBackupError, ConfigurationError


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="chef-backup",
        description="Back up a Chef Server node into a single tarball"
    )
    parser.add_argument(
        "--running-config",
        help=f"Path to the running config (default: {DEFAULT_RUNNING_CONFIG})",
        default=None
    )
    parser.add_argument(
        "--export-dir",
        help="Directory the finished archive is copied to",
        default=None
    )
    parser.add_argument(
        "--tmp-dir",
        help="Parent directory for the run's working directory",
        default=None
    )
    parser.add_argument(
        "--config-only",
        action="store_true",
        help="Only back up configuration directories; never stop services or dump the database"
    )
    parser.add_argument(
        "-y", "--yes",
        action="store_true",
        help="Agree to take the server offline without prompting"
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging"
    )
    return parser


def settings_from_args(args: argparse.Namespace) -> Settings:
    overrides = {}
    if args.running_config:
        overrides["running_config_path"] = args.running_config
    if args.export_dir:
        overrides["export_dir"] = args.export_dir
    if args.tmp_dir:
        overrides["tmp_dir"] = args.tmp_dir
    if args.config_only:
        overrides["config_only"] = True
    if args.yes:
        overrides["agree_to_go_offline"] = True
    if args.verbose:
        overrides["log_level"] = "DEBUG"
    try:
        return Settings(**overrides)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid settings: {e}") from e


def confirm_offline(prompt=input) -> bool:
    answer = prompt(
        "This backup stops all Chef Server services except postgresql and keepalived. "
        "Continue? [y/N] "
    )
    return answer.strip().lower() in ("y", "yes")


async def run_backup(orchestrator: BackupOrchestrator, prompt=input) -> int:
    _, _, plan = orchestrator.plan()
    if BackupStep.STOP_SERVICES in plan and not orchestrator.settings.agree_to_go_offline:
        if not confirm_offline(prompt):
            logger.warning("Offline backup aborted by user")
            return 1

    result = await orchestrator.backup()
    logger.info(f"Archive exported to {result.export_path}")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        settings = settings_from_args(args)
        configure_logging(settings.log_level)
        orchestrator = BackupOrchestrator(settings)
        return asyncio.run(run_backup(orchestrator))
    except ChefBackupError as e:
        logger.error(str(e))
        return 1


if __name__ == "__main__":
    sys.exit(main())
