"""Queue worker running the video processing pipeline."""

from videochat.worker.runner import Worker, default_worker_id

__all__ = ["Worker", "default_worker_id"]
