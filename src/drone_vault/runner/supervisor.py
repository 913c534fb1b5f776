"""Run long-lived services together and stop them together."""

from __future__ import annotations

import logging
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from typing import Protocol

logger = logging.getLogger(__name__)


class Service(Protocol):
    """A blocking task that can be asked to stop from another thread."""

    name: str

    def run(self) -> None: ...

    def stop(self) -> None: ...


class Supervisor:
    """Fail-fast supervisor for the HTTP server and the token renewer.

    Each service runs on its own worker thread. As soon as one of them
    returns or raises, every service is stopped; there are no restarts.
    Once all have returned, the first error (preferring the service that
    finished first) is re-raised.

    Args:
        services: The services to run.
    """

    def __init__(self, *services: Service) -> None:
        if not services:
            raise ValueError("at least one service is required")
        self._services: tuple[Service, ...] = services

    def stop(self) -> None:
        """Ask every service to stop."""
        for service in self._services:
            try:
                service.stop()
            except Exception:
                logger.warning("Service %s failed to stop", service.name, exc_info=True)

    def run(self) -> None:
        """Run all services until the first one terminates.

        Raises:
            BaseException: The first error raised by a service.
        """
        with ThreadPoolExecutor(
            max_workers=len(self._services),
            thread_name_prefix="drone-vault",
        ) as pool:
            futures: dict[Future[None], Service] = {
                pool.submit(service.run): service for service in self._services
            }
            first: Future[None] | None = None
            try:
                done, _ = wait(futures, return_when=FIRST_COMPLETED)
                first = next(iter(done))
                logger.info("%s terminated; shutting down", futures[first].name)
            except KeyboardInterrupt:
                logger.info("interrupted; shutting down")
            self.stop()

            ordered = [first] if first is not None else []
            ordered += [future for future in futures if future is not first]
            errors = [
                (futures[future], error)
                for future in ordered
                if (error := future.exception()) is not None
            ]

        for service, error in errors[1:]:
            logger.debug("%s also failed: %s", service.name, error)
        if errors:
            service, error = errors[0]
            logger.error("%s failed: %s", service.name, error)
            raise error
