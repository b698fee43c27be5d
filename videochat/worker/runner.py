"""Long-running consumer of ``process-video`` jobs."""

import asyncio
import contextlib
import os
import signal
import socket

from videochat.application.services.pipeline import VideoProcessingPipeline
from videochat.commons.settings.models import WorkerSettings
from videochat.commons.telemetry import LogContext, get_logger, set_correlation_id
from videochat.domain.exceptions import QueueError
from videochat.domain.models.job import PROCESS_VIDEO, Job
from videochat.infrastructure.queue.base import JobQueueBase

logger = get_logger(__name__)


def default_worker_id() -> str:
    return f"{socket.gethostname()}:{os.getpid()}"


class Worker:
    """Consumes jobs from the queue and runs the pipeline for each.

    At most ``concurrency`` jobs run at once. While a job runs its lease is
    extended every ``heartbeat_interval_seconds``. A job is acked when the
    pipeline returns and failed with the raised error otherwise; an error
    never stops the consume loop. Setting the stop event (SIGINT/SIGTERM)
    stops claiming new jobs and waits for the running ones.
    """

    def __init__(
        self,
        queue: JobQueueBase,
        pipeline: VideoProcessingPipeline,
        settings: WorkerSettings | None = None,
        worker_id: str | None = None,
        job_type: str = PROCESS_VIDEO,
    ) -> None:
        """Initialize the worker.

        Args:
            queue: Injected job queue.
            pipeline: Processing pipeline run per job.
            settings: Concurrency, heartbeat and startup options.
            worker_id: Lease owner name (host:pid if None).
            job_type: Job type to consume.
        """
        self._queue = queue
        self._pipeline = pipeline
        self._settings = settings or WorkerSettings()
        self._worker_id = worker_id or default_worker_id()
        self._job_type = job_type

        self._stop_event = asyncio.Event()
        self._slots = asyncio.Semaphore(self._settings.concurrency)
        self._tasks: set[asyncio.Task[None]] = set()

        self.completed = 0
        self.failed = 0

    @property
    def worker_id(self) -> str:
        return self._worker_id

    @property
    def stop_event(self) -> asyncio.Event:
        return self._stop_event

    def stop(self) -> None:
        """Request a graceful shutdown."""
        if not self._stop_event.is_set():
            logger.info("Shutdown requested", extra={"worker_id": self._worker_id})
        self._stop_event.set()

    def install_signal_handlers(self) -> None:
        """Stop on SIGINT and SIGTERM."""
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            try:
                loop.add_signal_handler(sig, self.stop)
            except NotImplementedError:
                # Event loops without signal support (Windows)
                signal.signal(sig, lambda *_: loop.call_soon_threadsafe(self.stop))

    async def start(self) -> None:
        """Startup housekeeping before consuming."""
        if self._settings.clean_queue_on_startup:
            stats = await self._queue.stats()
            removed = await self._queue.purge()
            logger.warning(
                "Queue cleaned on startup",
                extra={"removed": removed, "before": stats.as_dict()},
            )

    async def run(self) -> None:
        """Consume until the stop event is set, then drain running jobs."""
        await self.start()
        logger.info(
            "Worker started",
            extra={
                "worker_id": self._worker_id,
                "job_type": self._job_type,
                "concurrency": self._settings.concurrency,
            },
        )

        jobs = self._queue.consume(self._job_type, self._worker_id, self._stop_event)
        try:
            while not self._stop_event.is_set():
                await self._slots.acquire()
                try:
                    job = await anext(jobs)
                except StopAsyncIteration:
                    self._slots.release()
                    break
                except BaseException:
                    self._slots.release()
                    raise
                task = asyncio.create_task(self._run_job(job))
                self._tasks.add(task)
                task.add_done_callback(self._tasks.discard)
        finally:
            await jobs.aclose()
            if self._tasks:
                logger.info("Waiting for running jobs", extra={"running": len(self._tasks)})
                await asyncio.gather(*self._tasks, return_exceptions=True)

        logger.info(
            "Worker stopped",
            extra={
                "worker_id": self._worker_id,
                "completed": self.completed,
                "failed": self.failed,
            },
        )

    async def _run_job(self, job: Job) -> None:
        set_correlation_id(job.id)
        try:
            with LogContext(job_id=job.id, video_id=job.video_id):
                await self._process(job)
        finally:
            self._slots.release()

    async def _process(self, job: Job) -> None:
        heartbeat = asyncio.create_task(self._heartbeat(job))
        error: Exception | None = None
        try:
            await self._pipeline.process(job)
        except Exception as e:
            error = e
        finally:
            heartbeat.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await heartbeat

        try:
            if error is None:
                await self._queue.ack(job)
                self.completed += 1
                logger.info("Job completed")
            else:
                await self._queue.fail(job, error)
                self.failed += 1
                logger.error(
                    "Job failed",
                    extra={"error_type": type(error).__name__, "error": str(error)},
                )
        except QueueError as e:
            # Lease lost; the job will be redelivered to another consumer
            logger.error("Could not settle job", extra={"error": str(e)})

    async def _heartbeat(self, job: Job) -> None:
        interval = self._settings.heartbeat_interval_seconds
        while True:
            await asyncio.sleep(interval)
            try:
                await self._queue.heartbeat(job)
            except QueueError as e:
                logger.warning("Lease heartbeat failed", extra={"error": str(e)})
                return
