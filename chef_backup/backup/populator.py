"""Discover the directories a node's backup has to capture."""

import json
from pathlib import Path
from typing import List, Optional, Sequence

from .._utils import logger
from ..config import RunningConfig
from ..data_map import DataMap
from .models import BackupContext

STATEFUL_SERVICES = ["rabbitmq", "opscode-solr4", "redis_lb", "postgresql", "bookshelf"]
CONFIG_DIRECTORIES = ["opscode", "opscode-manage", "opscode-reporting", "opscode-analytics"]

DEFAULT_HA_PROVIDER = "drbd"
DEFAULT_HA_PATH = "/var/opt/opscode/drbd/data"


class DataMapPopulator:
    """Register config directories, service data and versions in a DataMap."""

    def __init__(
        self,
        context: BackupContext,
        data_map: DataMap,
        running_config: RunningConfig,
        stateful_services: Optional[Sequence[str]] = None,
        config_directories: Optional[Sequence[str]] = None,
        opt_dir: str = "/opt"
    ):
        self.context = context
        self.data_map = data_map
        self.running_config = running_config
        self.stateful_services: List[str] = list(stateful_services or STATEFUL_SERVICES)
        self.config_directories: List[str] = list(config_directories or CONFIG_DIRECTORIES)
        self.opt_dir = Path(opt_dir)

    def populate(self) -> DataMap:
        for config in self.config_directories:
            self.data_map.add_config(config, f"/etc/{config}")

        if self.context.role.holds_data and not self.context.config_only:
            for service in self.stateful_services:
                data_dir = self.running_config.get(service, "data_dir")
                if data_dir is None:
                    logger.warning(f"No data directory configured for {service}")
                self.data_map.add_service(service, data_dir)

        self._add_versions()

        if self.context.topology == "ha":
            self.data_map.add_ha_info(
                "provider", self.running_config.get("ha", "provider", default=DEFAULT_HA_PROVIDER)
            )
            self.data_map.add_ha_info(
                "path", self.running_config.get("ha", "path", default=DEFAULT_HA_PATH)
            )

        logger.info(
            f"Data map populated: {len(self.data_map.services)} services, "
            f"{len(self.data_map.configs)} configs"
        )
        return self.data_map

    def _add_versions(self) -> None:
        for project in self.config_directories:
            manifest_path = self.opt_dir / project / "version-manifest.json"
            if not manifest_path.is_file():
                continue
            try:
                with open(manifest_path, "r") as f:
                    manifest = json.load(f)
            except (OSError, json.JSONDecodeError) as e:
                logger.warning(f"Failed to read {manifest_path}: {e}")
                continue

            self.data_map.add_version(project, {
                "version": manifest.get("build_version"),
                "revision": manifest.get("build_git_revision"),
            })
