"""Copy the finished archive to the export directory."""

from pathlib import Path

from .._utils import logger
from ..exceptions import ExportError, ShellCommandError
from ..shell import run, run_checked
from .models import BackupContext


class Exporter:
    """rsync the archive out of tmp_dir; the source copy is left in place."""

    def __init__(self, context: BackupContext, runner=run):
        self.context = context
        self.runner = runner

    def export_command(self) -> str:
        return f"rsync -chaz {self.context.archive_path} {self.context.export_dir}/"

    async def export_tarball(self) -> Path:
        """Sync the archive into export_dir, creating the directory if needed.

        Returns:
            Path of the exported archive

        Raises:
            ExportError: if export_dir cannot be created or rsync fails
        """
        export_dir = Path(self.context.export_dir)
        try:
            export_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise ExportError(f"Cannot create export directory {export_dir}: {e}") from e

        logger.info(f"Exporting archive to {export_dir}")
        try:
            await run_checked(self.export_command(), runner=self.runner)
        except (ShellCommandError, OSError) as e:
            raise ExportError(f"Export failed: {e}") from e

        return export_dir / self.context.archive_name
