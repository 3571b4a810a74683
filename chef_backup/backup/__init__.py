from .manager import BackupOrchestrator, BackupStep, plan_for
from .models import BackupContext, BackupManifest, BackupResult

__all__ = [
    "BackupOrchestrator",
    "BackupStep",
    "BackupContext",
    "BackupManifest",
    "BackupResult",
    "plan_for",
]
