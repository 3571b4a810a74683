"""Backup orchestration for a Chef Server node."""

import shutil
import tempfile
from contextlib import AsyncExitStack
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from .._utils import logger, generate_backup_time
from ..config import DEFAULT_EXPORT_DIR, RunningConfig, Settings
from ..data_map import DataMap
from ..roles import Mode, Role, RoleResolver
from ..shell import run
from .database import DatabaseDumper
from .exporter import Exporter
from .manifest import ManifestWriter
from .models import BackupContext, BackupResult
from .populator import DataMapPopulator
from .services import ALWAYS_RUNNING, ServiceLifecycleController
from .tarball import TarballPackager


class BackupStep(str, Enum):
    POPULATE_DATA_MAP = "populate_data_map"
    STOP_SERVICES = "stop_services"
    DUMP_DB = "dump_db"
    WRITE_MANIFEST = "write_manifest"
    CREATE_TARBALL = "create_tarball"
    START_SERVICES = "start_services"
    EXPORT_TARBALL = "export_tarball"
    CLEANUP = "cleanup"


# The data map is populated first: the dump records its result on the
# postgresql entry, which must already exist.
CONFIG_ONLY_PLAN: Tuple[BackupStep, ...] = (
    BackupStep.POPULATE_DATA_MAP,
    BackupStep.WRITE_MANIFEST,
    BackupStep.CREATE_TARBALL,
    BackupStep.EXPORT_TARBALL,
    BackupStep.CLEANUP,
)

ONLINE_PLAN: Tuple[BackupStep, ...] = (
    BackupStep.POPULATE_DATA_MAP,
    BackupStep.DUMP_DB,
    BackupStep.WRITE_MANIFEST,
    BackupStep.CREATE_TARBALL,
    BackupStep.EXPORT_TARBALL,
    BackupStep.CLEANUP,
)

OFFLINE_PLAN: Tuple[BackupStep, ...] = (
    BackupStep.POPULATE_DATA_MAP,
    BackupStep.STOP_SERVICES,
    BackupStep.DUMP_DB,
    BackupStep.WRITE_MANIFEST,
    BackupStep.CREATE_TARBALL,
    BackupStep.START_SERVICES,
    BackupStep.EXPORT_TARBALL,
    BackupStep.CLEANUP,
)

BACKUP_PLANS: Dict[Tuple[Role, Mode], Tuple[BackupStep, ...]] = {
    (Role.FRONTEND, Mode.ONLINE): CONFIG_ONLY_PLAN,
    (Role.FRONTEND, Mode.OFFLINE): CONFIG_ONLY_PLAN,
    (Role.BACKEND, Mode.ONLINE): ONLINE_PLAN,
    (Role.BACKEND, Mode.OFFLINE): OFFLINE_PLAN,
    (Role.STANDALONE, Mode.ONLINE): ONLINE_PLAN,
    (Role.STANDALONE, Mode.OFFLINE): OFFLINE_PLAN,
}


def plan_for(role: Role, mode: Mode, config_only: bool = False) -> Tuple[BackupStep, ...]:
    if config_only:
        return CONFIG_ONLY_PLAN
    return BACKUP_PLANS[(role, mode)]


class BackupRun:
    """State of one backup run: its context, data map and components.

    Step methods are named after ``BackupStep`` values. Stopping services
    registers the matching restart on the run's exit stack before any stop
    request is issued.
    """

    def __init__(
        self,
        orchestrator: "BackupOrchestrator",
        context: BackupContext,
        data_map: DataMap,
        stack: AsyncExitStack
    ):
        self.orchestrator = orchestrator
        self.context = context
        self.data_map = data_map
        self.stack = stack
        self.services_stopped = False

        settings = orchestrator.settings
        running_config = orchestrator.running_config
        runner = orchestrator.runner

        self.services = ServiceLifecycleController(settings, running_config, runner=runner)
        self.populator = DataMapPopulator(
            context, data_map, running_config,
            stateful_services=running_config.get("backup", "stateful_services"),
            config_directories=running_config.get("backup", "config_directories"),
            opt_dir=str(Path(settings.install_dir).parent)
        )
        self.dumper = DatabaseDumper(context, data_map, settings, running_config, runner=runner)
        self.manifest_writer = ManifestWriter(context, data_map)
        self.packager = TarballPackager(context, data_map, runner=runner)
        self.exporter = Exporter(context, runner=runner)

    async def execute(self, plan: Tuple[BackupStep, ...]) -> List[str]:
        executed = []
        for step in plan:
            logger.debug(f"Backup step: {step.value}")
            await getattr(self, step.value)()
            executed.append(step.value)
        return executed

    async def populate_data_map(self) -> None:
        self.populator.populate()

    async def stop_services(self) -> None:
        self.stack.push_async_callback(self.start_services)
        self.services_stopped = True
        await self.services.stop_all(exclude=ALWAYS_RUNNING)

    async def dump_db(self) -> None:
        await self.dumper.dump_db()

    async def write_manifest(self) -> None:
        await self.manifest_writer.write_manifest()

    async def create_tarball(self) -> None:
        await self.packager.create_tarball()

    async def start_services(self) -> None:
        if not self.services_stopped:
            return
        await self.services.start_all()
        self.services_stopped = False

    async def export_tarball(self) -> None:
        await self.exporter.export_tarball()

    async def cleanup(self) -> None:
        self.orchestrator.cleanup(self.context.tmp_dir)


class BackupOrchestrator:
    """Run a tar backup of this node according to its role and backup mode."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        running_config: Optional[RunningConfig] = None,
        runner=run
    ):
        """Initialize the orchestrator.

        Args:
            settings: Process settings; read from the environment when omitted
            running_config: Node configuration; loaded from
                ``settings.running_config_path`` when omitted
            runner: Shell collaborator used for every external command
        """
        self.settings = settings or Settings()
        self.running_config = running_config or RunningConfig.load(self.settings.running_config_path)
        self.runner = runner

    @property
    def config_only(self) -> bool:
        return self.settings.config_only or bool(
            self.running_config.get("backup", "config_only", default=False)
        )

    @property
    def export_dir(self) -> str:
        return (
            self.settings.export_dir
            or self.running_config.get("backup", "export_dir")
            or DEFAULT_EXPORT_DIR
        )

    def plan(self) -> Tuple[Role, Mode, Tuple[BackupStep, ...]]:
        """Resolve role, mode and the step plan without side effects."""
        role, mode = RoleResolver(self.running_config).resolve()
        return role, mode, plan_for(role, mode, self.config_only)

    def create_tmp_dir(self) -> str:
        base_dir = self.settings.tmp_dir or self.running_config.get("backup", "tmp_dir")
        if base_dir:
            Path(base_dir).mkdir(parents=True, exist_ok=True)
        return tempfile.mkdtemp(prefix="chef_backup", dir=base_dir)

    def cleanup(self, tmp_dir: str) -> None:
        """Remove the run's tmp_dir; safe to call more than once."""
        path = Path(tmp_dir)
        if path.exists():
            shutil.rmtree(path)
            logger.info(f"Removed temporary directory: {path}")

    def _release_tmp_dir(self, tmp_dir: str) -> None:
        try:
            self.cleanup(tmp_dir)
        except OSError as e:
            logger.error(f"Failed to remove temporary directory {tmp_dir}: {e}")

    async def backup(self) -> BackupResult:
        """Run the backup.

        Whatever step fails, services stopped by this run are started again
        and tmp_dir is removed before the error propagates.

        Returns:
            BackupResult describing the exported archive

        Raises:
            ConfigurationError: if the node role cannot be resolved
            ChefBackupError: if a fatal pipeline step fails
        """
        role, mode, plan = self.plan()
        backup_time = generate_backup_time()
        logger.info(
            f"Starting Chef Server backup {backup_time} "
            f"(role={role.value}, mode={mode.value}{', config only' if self.config_only else ''})"
        )

        async with AsyncExitStack() as stack:
            tmp_dir = self.create_tmp_dir()
            stack.callback(self._release_tmp_dir, tmp_dir)

            context = BackupContext(
                role=role,
                mode=mode,
                tmp_dir=tmp_dir,
                backup_time=backup_time,
                export_dir=self.export_dir,
                config_only=self.config_only,
                topology=self.running_config.topology,
            )
            data_map = DataMap(backup_time=backup_time, topology=context.topology, role=role.value)
            backup_run = BackupRun(self, context, data_map, stack)

            try:
                steps = await backup_run.execute(plan)
            except Exception as e:
                logger.error(f"Backup {backup_time} failed: {e}")
                raise

        logger.info(f"Backup complete: {context.archive_name}")
        return BackupResult(
            backup_time=backup_time,
            role=role,
            mode=mode,
            archive_name=context.archive_name,
            export_path=f"{context.export_dir}/{context.archive_name}",
            steps=steps,
        )
