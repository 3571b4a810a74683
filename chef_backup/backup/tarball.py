"""Archive creation for a backup run."""

import shlex
from pathlib import Path
from typing import List

from .._utils import logger
from ..data_map import DataMap
from ..exceptions import PackagingError, ShellCommandError
from ..shell import run, run_checked
from .models import BackupContext


class TarballPackager:
    """Bundle registered data directories and tmp_dir artifacts with tar."""

    def __init__(self, context: BackupContext, data_map: DataMap, runner=run):
        self.context = context
        self.data_map = data_map
        self.runner = runner

    def tmp_dir_entries(self) -> List[str]:
        """Top-level entries of tmp_dir, by name, in sorted order."""
        return sorted(p.name for p in Path(self.context.tmp_dir).iterdir())

    def tarball_command(self) -> str:
        members = list(self.data_map.data_dirs()) + self.tmp_dir_entries()
        parts = [f"tar -czf {shlex.quote(self.context.archive_path)}"]
        parts.extend(shlex.quote(m) for m in members)
        return " ".join(parts).strip()

    async def create_tarball(self) -> Path:
        """Create ``chef-backup-<backup_time>.tgz`` inside tmp_dir.

        tar runs from tmp_dir so tmp_dir artifacts are stored under relative
        member names.

        Raises:
            PackagingError: if tar fails
        """
        command = self.tarball_command()
        logger.info(f"Creating archive: {self.context.archive_path}")
        try:
            await run_checked(command, cwd=self.context.tmp_dir, runner=self.runner)
        except (ShellCommandError, OSError) as e:
            raise PackagingError(f"Archive creation failed: {e}") from e

        logger.info("Archive created")
        return Path(self.context.archive_path)
