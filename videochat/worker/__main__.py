"""Worker process entry point: ``python -m videochat.worker``."""

import asyncio

from videochat.commons.settings import Settings, get_settings
from videochat.commons.telemetry import configure_logging, get_logger
from videochat.infrastructure.factory import InfrastructureFactory
from videochat.worker.runner import Worker

logger = get_logger(__name__)


async def run_worker(settings: Settings) -> None:
    """Build the infrastructure and consume jobs until signalled."""
    factory = InfrastructureFactory(settings)
    try:
        await factory.ensure_indexes()
        worker = Worker(
            queue=factory.get_job_queue(),
            pipeline=factory.get_pipeline(),
            settings=settings.worker,
        )
        worker.install_signal_handlers()
        await worker.run()
    finally:
        await factory.close_all()


def main() -> None:
    settings = get_settings()
    configure_logging(
        level=settings.telemetry.log_level,
        format_type=settings.telemetry.log_format,
    )
    logger.info(
        "Starting worker",
        extra={
            "environment": settings.app.environment,
            "queue": settings.queue.name,
            "version": settings.app.version,
        },
    )
    asyncio.run(run_worker(settings))


if __name__ == "__main__":
    main()
