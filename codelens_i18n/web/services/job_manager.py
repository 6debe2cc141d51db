"""Job manager for tracking background analysis jobs."""

import asyncio
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional, AsyncGenerator
import json

from ...analysis.usage_analyzer import CancellationToken


class JobStatus(str, Enum):
    """Job status enum."""
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"


@dataclass
class JobProgress:
    """Progress update for a job."""
    percentage: int
    message: str
    extra: dict = field(default_factory=dict)


@dataclass
class Job:
    """Represents a background job."""
    job_id: str
    job_type: str  # "analysis"
    status: JobStatus
    created_at: str
    token: CancellationToken = field(default_factory=CancellationToken)
    progress: Optional[JobProgress] = None
    result: Optional[dict] = None
    error: Optional[str] = None

    @property
    def finished(self) -> bool:
        return self.status in (JobStatus.COMPLETED, JobStatus.FAILED, JobStatus.CANCELLED)


class JobManager:
    """Manages background jobs and their progress streams."""

    def __init__(self):
        self.jobs: dict[str, Job] = {}
        self.queues: dict[str, asyncio.Queue] = {}

    def create_job(self, job_type: str) -> Job:
        """Create a new job."""
        job_id = str(uuid.uuid4())
        job = Job(
            job_id=job_id,
            job_type=job_type,
            status=JobStatus.PENDING,
            created_at=datetime.now().isoformat(),
        )
        self.jobs[job_id] = job
        self.queues[job_id] = asyncio.Queue()
        return job

    def get_job(self, job_id: str) -> Optional[Job]:
        """Get a job by ID."""
        return self.jobs.get(job_id)

    def update_status(self, job_id: str, status: JobStatus) -> None:
        """Update job status."""
        if job_id in self.jobs:
            self.jobs[job_id].status = status

    def set_running(self, job_id: str) -> None:
        """Mark job as running."""
        self.update_status(job_id, JobStatus.RUNNING)

    def set_completed(self, job_id: str, result: dict = None) -> None:
        """Mark job as completed."""
        if job_id in self.jobs:
            self.jobs[job_id].status = JobStatus.COMPLETED
            self.jobs[job_id].result = result

    def set_failed(self, job_id: str, error: str) -> None:
        """Mark job as failed."""
        if job_id in self.jobs:
            self.jobs[job_id].status = JobStatus.FAILED
            self.jobs[job_id].error = error

    def set_cancelled(self, job_id: str) -> None:
        """Mark job as cancelled."""
        self.update_status(job_id, JobStatus.CANCELLED)

    def cancel_job(self, job_id: str) -> bool:
        """
        Request cancellation of a job.

        The running analysis notices the request at its next checkpoint.
        """
        job = self.jobs.get(job_id)
        if job is None or job.finished:
            return False
        job.token.cancel()
        return True

    async def send_progress(
        self,
        job_id: str,
        percentage: int,
        message: str,
        **extra,
    ) -> None:
        """Send a progress update to the job's stream."""
        if job_id not in self.queues:
            return

        progress = JobProgress(
            percentage=percentage,
            message=message,
            extra=extra,
        )

        if job_id in self.jobs:
            self.jobs[job_id].progress = progress

        await self.queues[job_id].put(progress)

    async def send_complete(self, job_id: str, result: dict = None) -> None:
        """Send completion event to the job's stream."""
        if job_id in self.queues:
            await self.queues[job_id].put({"complete": True, "result": result})

    async def send_cancelled(self, job_id: str) -> None:
        """Send cancellation event to the job's stream."""
        if job_id in self.queues:
            await self.queues[job_id].put({"cancelled": True})

    async def send_error(self, job_id: str, error: str) -> None:
        """Send error event to the job's stream."""
        if job_id in self.queues:
            await self.queues[job_id].put({"error": error})

    async def stream_progress(self, job_id: str) -> AsyncGenerator[str, None]:
        """
        Yield Server-Sent Events for job progress.

        Yields SSE-formatted strings.
        """
        if job_id not in self.queues:
            yield f"data: {json.dumps({'error': 'Job not found'})}\n\n"
            return

        queue = self.queues[job_id]

        while True:
            try:
                data = await asyncio.wait_for(queue.get(), timeout=30.0)

                # Check for completion, cancellation or error
                if isinstance(data, dict):
                    if data.get("complete"):
                        yield f"event: complete\ndata: {json.dumps(data)}\n\n"
                        break
                    if data.get("cancelled"):
                        yield f"event: cancelled\ndata: {json.dumps(data)}\n\n"
                        break
                    if data.get("error"):
                        yield f"event: error\ndata: {json.dumps(data)}\n\n"
                        break
                    yield f"data: {json.dumps(data)}\n\n"
                elif isinstance(data, JobProgress):
                    event_data = {
                        "percentage": data.percentage,
                        "message": data.message,
                        **data.extra,
                    }
                    yield f"event: progress\ndata: {json.dumps(event_data)}\n\n"

            except asyncio.TimeoutError:
                # Send heartbeat to keep connection alive
                yield ": heartbeat\n\n"

    def cleanup_job(self, job_id: str) -> None:
        """Clean up job resources."""
        if job_id in self.queues:
            del self.queues[job_id]
        # Keep job in self.jobs for status queries

    def list_jobs(self) -> list[Job]:
        """List jobs, newest first."""
        jobs = list(self.jobs.values())
        jobs.sort(key=lambda j: j.created_at, reverse=True)
        return jobs
