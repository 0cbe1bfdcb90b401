"""
Domain models for bulkupdater.

This package contains the job state machine with no process management.
"""

from .job import InvalidTransitionError, Job, JobStatus

__all__ = ["InvalidTransitionError", "Job", "JobStatus"]
