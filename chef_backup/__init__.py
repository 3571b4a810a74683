from .backup import BackupOrchestrator
from .config import RunningConfig, Settings
from .data_map import DataMap
from .roles import Mode, Role, RoleResolver

__version__ = "0.3.0"
__author__ = "Chef Backup Maintainers"
__url__ = "https://github.com/chef-backup/chef-backup"

__all__ = [
    "BackupOrchestrator",
    "DataMap",
    "Mode",
    "Role",
    "RoleResolver",
    "RunningConfig",
    "Settings",
]
