"""
Text progress output for an update run.
"""

from typing import Dict, Iterable

from .domain import Job, JobStatus
from .utils import sprint


def countsLine(counts: Dict[JobStatus, int]) -> str:
    return ", ".join("{} {}".format(counts.get(status, 0), status.value)
                     for status in JobStatus)


class ProgressReporter(object):
    """
    Prints what changed since the previous call to report().

    In full mode every job whose status changed gets a line; in summary
    mode a single counts line is printed whenever the counts change.
    """

    def __init__(self, summary=False, out=None):
        self.summary = summary
        self._out = out
        self._seen: Dict[int, JobStatus] = {}
        self._lastCounts = None

    def _print(self, *args):
        sprint(*args, file=self._out)

    def report(self, jobs: Iterable[Job]):
        jobs = list(jobs)
        if self.summary:
            counts = {status: 0 for status in JobStatus}
            for job in jobs:
                counts[job.status] += 1
            if counts != self._lastCounts:
                self._lastCounts = counts
                self._print(countsLine(counts))
            return
        for job in jobs:
            if self._seen.get(id(job)) != job.status:
                self._seen[id(job)] = job.status
                self._print(job)
