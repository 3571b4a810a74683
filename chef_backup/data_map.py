"""In-memory registry of everything captured by a backup run."""

from typing import Any, Dict, Optional

from .exceptions import DataMapError


class DataMap:
    """Services, config directories and versions discovered during a backup.

    Entries are only ever added once; a second ``add_*`` for the same name
    raises instead of replacing the first entry. Updates go through
    ``update_service`` and require the entry to exist already.
    """

    strategy = "tar"

    def __init__(self, backup_time: Optional[str] = None, topology: Optional[str] = None,
                 role: Optional[str] = None):
        self.backup_time = backup_time
        self.topology = topology
        self.role = role
        self.services: Dict[str, Dict[str, Any]] = {}
        self.configs: Dict[str, Dict[str, Any]] = {}
        self.versions: Dict[str, Dict[str, Any]] = {}
        self.ha: Dict[str, Any] = {}

    def add_service(self, name: str, data_dir: Optional[str] = None) -> None:
        if name in self.services:
            raise DataMapError(f"Service already registered: {name}")
        self.services[name] = {"data_dir": data_dir, "pg_dump_success": False}

    def update_service(self, name: str, **fields: Any) -> None:
        if name not in self.services:
            raise DataMapError(f"Service not registered: {name}")
        self.services[name].update(fields)

    def add_config(self, name: str, data_dir: str) -> None:
        if name in self.configs:
            raise DataMapError(f"Config already registered: {name}")
        self.configs[name] = {"data_dir": data_dir}

    def add_version(self, project: str, data: Dict[str, Any]) -> None:
        if project in self.versions:
            raise DataMapError(f"Version already registered: {project}")
        self.versions[project] = dict(data)

    def add_ha_info(self, key: str, value: Any) -> None:
        self.ha[key] = value

    def data_dirs(self):
        """Located data directories, services first, then configs."""
        for entries in (self.services, self.configs):
            for entry in entries.values():
                if entry.get("data_dir"):
                    yield entry["data_dir"]

    def manifest(self) -> Dict[str, Any]:
        return {
            "strategy": self.strategy,
            "backup_time": self.backup_time,
            "topology": self.topology,
            "role": self.role,
            "ha": dict(self.ha),
            "services": {name: dict(entry) for name, entry in self.services.items()},
            "configs": {name: dict(entry) for name, entry in self.configs.items()},
            "versions": {name: dict(entry) for name, entry in self.versions.items()},
        }
