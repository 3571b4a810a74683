"""Data models for backup runs."""

from typing import Dict, Any, List, Optional
from pydantic import BaseModel, ConfigDict, Field

from ..roles import Mode, Role


class BackupContext(BaseModel):
    """Parameters fixed at the start of a backup run."""

    model_config = ConfigDict(frozen=True)

    role: Role
    mode: Mode
    tmp_dir: str = Field(..., description="Working directory owned by this run")
    backup_time: str = Field(..., description="Timestamp used in every artifact name")
    export_dir: str = Field(..., description="Destination for the finished archive")
    config_only: bool = False
    topology: str = "standalone"

    @property
    def archive_name(self) -> str:
        return f"chef-backup-{self.backup_time}.tgz"

    @property
    def archive_path(self) -> str:
        return f"{self.tmp_dir}/{self.archive_name}"

    @property
    def dump_path(self) -> str:
        return f"{self.tmp_dir}/chef_backup-{self.backup_time}.sql"

    @property
    def manifest_path(self) -> str:
        return f"{self.tmp_dir}/manifest.json"


class BackupManifest(BaseModel):
    """Backup manifest shipped inside the archive."""

    strategy: str = Field(..., description="Backup strategy")
    backup_time: Optional[str] = Field(None, description="Backup run timestamp")
    topology: Optional[str] = None
    role: Optional[str] = None
    ha: Dict[str, Any] = Field(default_factory=dict)
    services: Dict[str, Dict[str, Any]] = Field(default_factory=dict)
    configs: Dict[str, Dict[str, Any]] = Field(default_factory=dict)
    versions: Dict[str, Dict[str, Any]] = Field(default_factory=dict)


class BackupResult(BaseModel):
    """Summary of a completed backup run."""

    backup_time: str
    role: Role
    mode: Mode
    archive_name: str
    export_path: str
    steps: List[str]
