"""Stop and start the server's managed services."""

import asyncio
from pathlib import Path
from typing import Iterable, List, Optional

from .._utils import logger
from ..config import RunningConfig, Settings
from ..exceptions import ServiceControlError
from ..shell import run

# Kept running during a backup so failover and the database stay available
ALWAYS_RUNNING = frozenset({"postgresql", "keepalived"})


class ServiceLifecycleController:
    """Issue stop/start requests for every enabled service.

    Requests in one batch run concurrently and are all awaited before the
    method returns. A failing service is logged and reported but never stops
    the rest of the batch.
    """

    def __init__(self, settings: Settings, running_config: RunningConfig, runner=run):
        self.settings = settings
        self.running_config = running_config
        self.runner = runner

    def all_services(self) -> List[str]:
        """Service names installed under the service directory."""
        service_dir = Path(self.settings.service_dir)
        if not service_dir.is_dir():
            logger.warning(f"Service directory not found: {service_dir}")
            return []
        return sorted(p.name for p in service_dir.iterdir())

    def enabled_services(self) -> List[str]:
        return [sv for sv in self.all_services() if self.running_config.service_enabled(sv)]

    async def stop_all(self, exclude: Optional[Iterable[str]] = None) -> List[str]:
        """Stop every enabled service not in ``exclude``.

        Returns:
            Names of services that failed to stop
        """
        excluded = set(exclude or ())
        services = [sv for sv in self.enabled_services() if sv not in excluded]
        logger.info(f"Stopping services: {', '.join(services) or 'none'}")
        return await self._batch("stop", services)

    async def start_all(self) -> List[str]:
        """Start every enabled service.

        Returns:
            Names of services that failed to start
        """
        services = self.enabled_services()
        logger.info(f"Starting services: {', '.join(services) or 'none'}")
        return await self._batch("start", services)

    async def stop_service(self, service: str) -> None:
        await self._control("stop", service)

    async def start_service(self, service: str) -> None:
        await self._control("start", service)

    async def _batch(self, action: str, services: List[str]) -> List[str]:
        results = await asyncio.gather(
            *(self._control(action, sv) for sv in services),
            return_exceptions=True
        )

        failed = []
        for service, outcome in zip(services, results):
            if isinstance(outcome, ServiceControlError):
                logger.error(str(outcome))
                failed.append(service)
            elif isinstance(outcome, BaseException):
                raise outcome
        return failed

    async def _control(self, action: str, service: str) -> None:
        command = f"{self.settings.ctl_command} {action} {service}"
        try:
            result = await self.runner(command, cwd=None)
        except OSError as e:
            raise ServiceControlError(service, action, str(e))

        if not result.success:
            reason = (result.error or result.output).strip() or f"exit code {result.exit_code}"
            raise ServiceControlError(service, action, reason)
        logger.debug(f"{action} {service}: ok")
