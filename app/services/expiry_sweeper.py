"""Periodic appointment expiry sweep."""

import asyncio
from collections.abc import Callable

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from app.services.appointment_service import AppointmentService

logger = structlog.get_logger()


class ExpirySweeper:
    """Runs the appointment expiry sweep on a fixed interval."""

    def __init__(self, session_factory: Callable[[], AsyncSession], interval_seconds: float):
        """Initialize sweeper with a session factory and interval."""
        self.session_factory = session_factory
        self.interval_seconds = interval_seconds
        self._task: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        """Whether the background loop is active."""
        return self._task is not None and not self._task.done()

    async def sweep_once(self) -> int:
        """Run a single sweep in its own session."""
        async with self.session_factory() as session:
            return await AppointmentService(session).mark_expired()

    async def _run(self) -> None:
        while True:
            try:
                await self.sweep_once()
            except asyncio.CancelledError:
                raise
            except Exception as e:
                logger.error("expiry_sweep_failed", error=str(e), exc_info=True)

            await asyncio.sleep(self.interval_seconds)

    def start(self) -> None:
        """Start the background loop. No-op when the interval is 0."""
        if self.interval_seconds <= 0 or self.running:
            return

        self._task = asyncio.create_task(self._run(), name="appointment-expiry-sweeper")
        logger.info("expiry_sweeper_started", interval_seconds=self.interval_seconds)

    async def stop(self) -> None:
        """Cancel the background loop and wait for it to finish."""
        if self._task is None:
            return

        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("expiry_sweeper_stopped")
