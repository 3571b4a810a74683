"""Error kinds raised by the backup pipeline."""


class ChefBackupError(Exception):
    """Base exception for chef-backup errors."""
    pass


class ConfigurationError(ChefBackupError):
    """The node configuration cannot be resolved."""
    pass


class DataMapError(ChefBackupError):
    """A data map entry was duplicated or is missing."""
    pass


class ShellCommandError(ChefBackupError):
    def __init__(self, command: str, result):
        self.command = command
        self.result = result
        detail = (result.error or result.output).strip()
        super().__init__(f"Command failed ({result.exit_code}): {command}: {detail}")


class ServiceControlError(ChefBackupError):
    def __init__(self, service: str, action: str, reason: str):
        self.service = service
        self.action = action
        super().__init__(f"Failed to {action} {service}: {reason}")


class DumpError(ChefBackupError):
    """The database export failed."""
    pass


class ManifestError(ChefBackupError):
    """The manifest could not be written."""
    pass


class PackagingError(ChefBackupError):
    """The archive could not be created."""
    pass


class ExportError(ChefBackupError):
    """The archive could not be copied to the export directory."""
    pass
