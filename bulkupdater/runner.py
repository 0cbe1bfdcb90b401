"""
Bounded-concurrency runner for editor batch updates.

The Runner never blocks: every call to tick() polls the running editor
processes once, records the ones that exited, then starts pending jobs in
enqueue order until ``concurrency_limit`` processes are running. The caller
decides how often to tick (a UI frame, a timer, a CLI sleep loop).

Processes are never killed. drain_pending() takes the not-yet-started
projects back out; anything already running keeps running on its own.
"""

from collections import Counter
import os
import subprocess
from subprocess import DEVNULL, STDOUT, Popen
import sys
from typing import Callable, Dict, List, Optional, Tuple

from . import logging, utils
from .domain import Job, JobStatus

LOG = logging.getLogger(__name__)

if sys.platform == "win32":
    DEFAULT_EXECUTABLE = os.path.join("Editor", "Unity.exe")
else:
    DEFAULT_EXECUTABLE = os.path.join("Editor", "Unity")

BATCH_ARGS = ["-batchmode", "-nographics", "-quit"]
PROJECT_FLAG = "-projectPath"

LOG_TIME_FMT = "%Y%m%d-%H%M%S"


def popen_spawn(cmd, stdout):
    # Editors run in their own process group, out of reach of the host
    # terminal's Ctrl-C.
    if os.name == "nt":
        return Popen(cmd, stdin=DEVNULL, stdout=stdout, stderr=STDOUT,
                     creationflags=subprocess.CREATE_NEW_PROCESS_GROUP)
    return Popen(cmd, stdin=DEVNULL, stdout=stdout, stderr=STDOUT,
                 start_new_session=True)


def editor_command(tool_path, project) -> List[str]:
    return [str(tool_path)] + BATCH_ARGS + [PROJECT_FLAG, str(project)]


class Runner(object):
    def __init__(
            self,
            tool_root,
            concurrency_limit: int,
            executable: str = DEFAULT_EXECUTABLE,
            log_dir: Optional[str] = None,
            spawn: Optional[Callable] = None,
    ):
        # pylint: disable=too-many-arguments
        if concurrency_limit < 1:
            raise ValueError(
                "concurrency limit must be at least 1, got {}".format(
                    concurrency_limit))
        self._jobs: List[Job] = []
        self.concurrency_limit = concurrency_limit
        self.tool_path = os.path.join(str(tool_root), executable)
        self._log_dir = log_dir
        self._spawn = spawn or popen_spawn

    def __repr__(self):
        return "Runner(tool_path={!r}, limit={}, jobs={})".format(
            self.tool_path, self.concurrency_limit, len(self._jobs))

    @property
    def jobs(self) -> Tuple[Job, ...]:
        return tuple(self._jobs)

    def enqueue(self, project) -> Job:
        job = Job(project=project)
        self._jobs.append(job)
        LOG.debug("enqueue %s", job.project)
        return job

    def running_count(self) -> int:
        return sum(1 for job in self._jobs if job.is_running())

    def counts(self) -> Dict[JobStatus, int]:
        counter = Counter(job.status for job in self._jobs)
        return {status: counter.get(status, 0) for status in JobStatus}

    def tick(self) -> bool:
        """
        Poll running jobs, then start pending ones up to the limit.

        Returns True while any job is still running.
        """
        running = 0
        for job in self._jobs:
            if job.is_running():
                self._poll(job)
                if job.is_running():
                    running += 1

        available = max(self.concurrency_limit - running, 0)
        for job in self._jobs:
            if available <= 0:
                break
            if job.is_pending() and self._dispatch(job):
                available -= 1
                running += 1

        return running > 0

    def drain_pending(self) -> List[str]:
        """
        Remove every job that has not started and return its project path,
        in enqueue order. Running and finished jobs are left alone.
        """
        pending = [job for job in self._jobs if job.is_pending()]
        self._jobs = [job for job in self._jobs if not job.is_pending()]
        LOG.debug("drained %d pending jobs, %d still running",
                  len(pending), self.running_count())
        return [job.project for job in pending]

    def _poll(self, job: Job):
        try:
            rc = job.process.poll()
        except OSError as err:
            LOG.info("poll failed for %s", job.project, exc_info=True)
            job.fail("Could not fetch editor state: {}".format(err))
            return
        if rc is None:
            return
        if rc == 0:
            LOG.info("editor finished %s", job.project)
            job.succeed()
        else:
            LOG.info("editor failed %s rc=%d", job.project, rc)
            job.fail("Editor exited with code {}.".format(rc), rc=rc)

    def _open_log(self, job: Job):
        if not self._log_dir:
            return None
        name = "{}-{}.log".format(
            utils.keyEscape(utils.projectName(job.project)),
            utils.utcNow().strftime(LOG_TIME_FMT))
        path = os.path.join(self._log_dir, name)
        # pylint: disable=consider-using-with
        log_fp = open(path, "ab")
        job.logfile = path
        return log_fp

    def _dispatch(self, job: Job) -> bool:
        cmd = editor_command(self.tool_path, job.project)
        LOG.debug("spawn %r", cmd)
        log_fp = None
        try:
            log_fp = self._open_log(job)
            process = self._spawn(cmd, log_fp if log_fp else DEVNULL)
        except (OSError, ValueError) as err:
            LOG.info("spawn failed for %s", job.project, exc_info=True)
            job.fail("Could not start the editor process: {}".format(err))
            return False
        finally:
            if log_fp is not None:
                log_fp.close()
        job.start(process)
        LOG.info("started editor pid=%s for %s", job.pid, job.project)
        return True
