"""Node role and backup mode classification."""

from enum import Enum
from typing import Tuple

from ._utils import logger
from .config import RunningConfig
from .exceptions import ConfigurationError


class Role(str, Enum):
    FRONTEND = "frontend"
    BACKEND = "backend"
    STANDALONE = "standalone"

    @property
    def holds_data(self) -> bool:
        """Backends and standalone nodes own the primary data stores."""
        return self is not Role.FRONTEND


class Mode(str, Enum):
    ONLINE = "online"
    OFFLINE = "offline"


class RoleResolver:
    """Classify the current node from its running config."""

    def __init__(self, running_config: RunningConfig):
        self.running_config = running_config

    def resolve(self) -> Tuple[Role, Mode]:
        """Return the node's role and backup mode.

        Raises:
            ConfigurationError: if the role is missing or unrecognized
        """
        return self.resolve_role(), self.resolve_mode()

    def resolve_role(self) -> Role:
        value = self.running_config.get("role")
        if value is None:
            raise ConfigurationError("No role found in the running config")
        try:
            return Role(str(value).lower())
        except ValueError:
            valid = ", ".join(r.value for r in Role)
            raise ConfigurationError(f"Unknown role '{value}', expected one of: {valid}")

    def resolve_mode(self) -> Mode:
        value = self.running_config.get("backup", "mode")
        if value is None:
            return Mode.OFFLINE
        try:
            return Mode(str(value).lower())
        except ValueError:
            logger.warning(f"Unknown backup mode '{value}', falling back to offline")
            return Mode.OFFLINE
