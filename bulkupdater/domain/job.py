"""
Domain model for a single project update.

A Job moves strictly forward through PENDING -> RUNNING -> SUCCEEDED|FAILED,
with PENDING -> FAILED for a process that could not be started. The
status enum is the cheap discriminant; the payload (process handle, failure
message, exit code) lives on the job itself.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Optional

from .. import utils


class JobStatus(Enum):
    """Job lifecycle states."""

    PENDING = "pending"  # Queued, no process yet
    RUNNING = "running"  # Editor process spawned
    SUCCEEDED = "succeeded"  # Editor exited with 0
    FAILED = "failed"  # Spawn, poll or exit code failure

    @property
    def terminal(self) -> bool:
        return self in (JobStatus.SUCCEEDED, JobStatus.FAILED)


_TRANSITIONS = {
    (JobStatus.PENDING, JobStatus.RUNNING),
    (JobStatus.PENDING, JobStatus.FAILED),
    (JobStatus.RUNNING, JobStatus.SUCCEEDED),
    (JobStatus.RUNNING, JobStatus.FAILED),
}


class InvalidTransitionError(Exception):
    def __init__(self, job, target):
        super().__init__("Cannot move job for {!r} from {} to {}".format(
            job.project, job.status.value, target.value))
        self.job = job
        self.target = target


@dataclass(eq=False)
class Job:  # pylint: disable=too-many-instance-attributes
    """
    One project directory to be updated by the editor.

    Only the Runner moves a job between states.
    """

    project: str
    status: JobStatus = JobStatus.PENDING

    # Payload
    process: Optional[Any] = field(default=None, repr=False)
    message: Optional[str] = None
    rc: Optional[int] = None
    logfile: Optional[str] = None

    # Timing
    create_time: Optional[datetime] = None
    start_time: Optional[datetime] = None
    stop_time: Optional[datetime] = None

    def __post_init__(self):
        self.project = str(self.project)
        if self.create_time is None:
            self.create_time = utils.utcNow()

    def _transition(self, target: JobStatus):
        if (self.status, target) not in _TRANSITIONS:
            raise InvalidTransitionError(self, target)
        self.status = target

    def start(self, process):
        """PENDING -> RUNNING, taking ownership of the process handle."""
        self._transition(JobStatus.RUNNING)
        self.process = process
        self.start_time = utils.utcNow()

    def succeed(self):
        self._transition(JobStatus.SUCCEEDED)
        self.rc = 0
        self._finish()

    def fail(self, message: str, rc: Optional[int] = None):
        self._transition(JobStatus.FAILED)
        self.message = message
        self.rc = rc
        self._finish()

    def _finish(self):
        self.process = None
        self.stop_time = utils.utcNow()

    def is_pending(self) -> bool:
        return self.status == JobStatus.PENDING

    def is_running(self) -> bool:
        return self.status == JobStatus.RUNNING

    def is_finished(self) -> bool:
        return self.status.terminal

    @property
    def pid(self) -> Optional[int]:
        return getattr(self.process, "pid", None)

    def duration_seconds(self) -> Optional[float]:
        """
        Return duration in seconds.

        Returns None if the job hasn't started yet.
        """
        if not self.start_time:
            return None
        end = self.stop_time or utils.utcNow()
        return (end - self.start_time).total_seconds()

    def duration_str(self) -> str:
        duration = self.duration_seconds()
        if duration is None:
            return "-:--"

        hours = int(duration // 3600)
        minutes = int((duration % 3600) // 60)
        seconds = int(duration % 60)

        if hours > 0:
            return f"{hours}:{minutes:02d}:{seconds:02d}"
        return f"{minutes}:{seconds:02d}"

    def state_str(self) -> str:
        """Return human-readable state string."""
        if self.status == JobStatus.PENDING:
            return "Waiting for others to finish"
        elif self.status == JobStatus.RUNNING:
            if self.pid is not None:
                return f"Running (pid {self.pid})"
            return "Running"
        elif self.status == JobStatus.SUCCEEDED:
            return "Finished without warnings."
        return f"Failed: {self.message}"

    def __str__(self) -> str:
        return f"{self.duration_str():>7} {self.project}: {self.state_str()}"
