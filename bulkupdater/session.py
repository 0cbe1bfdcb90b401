"""
Host-side state for one updater: the project list waiting to be updated,
the chosen editor version and, while an update is in progress, the Runner.

This is everything the interactive front end needs besides drawing:
start() hands the list to a new Runner, tick() drives it, and stop()
puts the projects that never started back at the end of the list.
"""

from collections import namedtuple
from typing import Iterable, List, Optional

from . import logging
from .catalog import VersionCatalog
from .runner import DEFAULT_EXECUTABLE, Runner

LOG = logging.getLogger(__name__)

MIN_PROCESSES = 1
MAX_PROCESSES = 99
HIGH_PROCESS_WARNING = 9

StopResult = namedtuple("StopResult", "reclaimed, detached")


class SessionError(Exception):
    pass


def check_max_processes(value: int) -> int:
    if not MIN_PROCESSES <= value <= MAX_PROCESSES:
        raise SessionError(
            "max processes must be between {} and {}, got {}".format(
                MIN_PROCESSES, MAX_PROCESSES, value))
    if value > HIGH_PROCESS_WARNING:
        LOG.warning("%d editor processes at once may exhaust memory", value)
    return value


class UpdateSession(object):
    # pylint: disable=too-many-instance-attributes
    def __init__(
            self,
            catalog: VersionCatalog,
            projects: Iterable[str] = (),
            version: Optional[str] = None,
            max_processes: int = 2,
            executable: str = DEFAULT_EXECUTABLE,
            log_dir: Optional[str] = None,
            spawn=None,
    ):
        # pylint: disable=too-many-arguments
        self.catalog = catalog
        self.projects: List[str] = [str(p) for p in projects]
        self._version = version
        self._max_processes = check_max_processes(max_processes)
        self.executable = executable
        self.log_dir = log_dir
        self._spawn = spawn
        self.runner: Optional[Runner] = None
        self.occupied = False

    @property
    def version(self) -> Optional[str]:
        return self._version

    @property
    def max_processes(self) -> int:
        return self._max_processes

    @max_processes.setter
    def max_processes(self, value: int):
        self._max_processes = check_max_processes(value)

    @property
    def active(self) -> bool:
        return self.runner is not None

    def add_projects(self, paths: Iterable[str]):
        for path in paths:
            self.projects.append(str(path))

    def remove_project(self, path: str):
        try:
            self.projects.remove(str(path))
        except ValueError as err:
            raise SessionError(
                "Project not in list: {}".format(path)) from err

    def clear_projects(self):
        self.projects = []

    def available_versions(self) -> List[str]:
        return self.catalog.versions()

    def refresh_versions(self) -> List[str]:
        self.catalog.invalidate()
        versions = self.catalog.versions()
        if self._version is not None and self._version not in versions:
            LOG.info("selected version %s no longer installed", self._version)
            self._version = None
        return versions

    def select_version(self, version: str):
        versions = self.available_versions()
        if version not in versions:
            raise SessionError(
                "Version {} is not installed in {} (found: {})".format(
                    version, self.catalog.root,
                    ", ".join(versions) or "none"))
        self._version = version

    def start(self) -> Runner:
        if self.runner is not None:
            raise SessionError("An update is already in progress")
        if self._version is None:
            raise SessionError("No editor version selected")
        if not self.projects:
            raise SessionError("No projects to update")
        runner = Runner(
            self.catalog.version_path(self._version),
            self._max_processes,
            executable=self.executable,
            log_dir=self.log_dir,
            spawn=self._spawn)
        for project in self.projects:
            runner.enqueue(project)
        LOG.info("start update of %d projects to %s", len(self.projects),
                 self._version)
        self.projects = []
        self.runner = runner
        self.occupied = False
        return runner

    def tick(self) -> bool:
        if self.runner is None:
            return False
        self.occupied = self.runner.tick()
        return self.occupied

    def stop(self) -> StopResult:
        """
        Stop managing the current runner. Projects that never started go
        back to the end of the project list; running editors are left
        running and returned as ``detached``.
        """
        if self.runner is None:
            return StopResult([], [])
        runner, self.runner = self.runner, None
        self.occupied = False
        reclaimed = runner.drain_pending()
        detached = [job for job in runner.jobs if job.is_running()]
        self.projects.extend(reclaimed)
        LOG.info("stopped: %d projects reclaimed, %d editors left running",
                 len(reclaimed), len(detached))
        return StopResult(reclaimed, detached)
