"""PostgreSQL export for backend and standalone nodes."""

from pathlib import Path

from .._utils import logger
from ..config import RunningConfig, Settings
from ..data_map import DataMap
from ..exceptions import DumpError, ShellCommandError
from ..shell import run, run_checked
from .models import BackupContext

DEFAULT_PG_USER = "opscode-pgsql"


class DatabaseDumper:
    """Dump every database with pg_dumpall into the run's tmp_dir."""

    def __init__(
        self,
        context: BackupContext,
        data_map: DataMap,
        settings: Settings,
        running_config: RunningConfig,
        runner=run
    ):
        self.context = context
        self.data_map = data_map
        self.settings = settings
        self.running_config = running_config
        self.runner = runner

    def dump_command(self) -> str:
        username = self.running_config.get("postgresql", "username", default=DEFAULT_PG_USER)
        bin_dir = self.settings.embedded_bin
        return " ".join([
            f"{bin_dir}/chpst",
            f"-u {username}",
            f"{bin_dir}/pg_dumpall",
            f"> {self.context.dump_path}",
        ])

    async def dump_db(self) -> bool:
        """Export the database and record the result in the data map.

        Returns:
            True when a dump was taken, False on nodes without a database

        Raises:
            DumpError: if pg_dumpall fails; the partial dump is removed first
        """
        if not self.context.role.holds_data:
            logger.debug("Frontend node, skipping database dump")
            return False

        logger.info(f"Dumping database to {self.context.dump_path}")
        try:
            await run_checked(self.dump_command(), runner=self.runner)
        except (ShellCommandError, OSError) as e:
            self._discard_partial_dump()
            raise DumpError(f"Database dump failed: {e}") from e

        self.data_map.update_service("postgresql", pg_dump_success=True)
        logger.info("Database dump complete")
        return True

    def _discard_partial_dump(self) -> None:
        dump_file = Path(self.context.dump_path)
        if dump_file.exists():
            logger.warning(f"Removing partial database dump: {dump_file}")
            dump_file.unlink()
