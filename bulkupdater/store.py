"""
Persistence of the project list and selected version between runs.
"""

import os
import tempfile

import simplejson as json

from . import logging

LOG = logging.getLogger(__name__)


class StoreError(Exception):
    pass


class State(object):
    def __init__(self, projects=None, version=None):
        self.projects = list(projects or [])
        self.version = version

    def __repr__(self):
        return "State(projects={!r}, version={!r})".format(
            self.projects, self.version)

    def toJson(self):
        return {"projects": list(self.projects), "version": self.version}

    @classmethod
    def fromJson(cls, data):
        if not isinstance(data, dict):
            raise StoreError("State must be a JSON object")
        projects = data.get("projects", [])
        version = data.get("version")
        if not isinstance(projects, list) or not all(
                isinstance(p, str) for p in projects):
            raise StoreError("\"projects\" must be a list of paths")
        if version is not None and not isinstance(version, str):
            raise StoreError("\"version\" must be a string or null")
        return cls(projects, version)


class StateStore(object):
    def __init__(self, path):
        self.path = path

    def load(self) -> State:
        try:
            with open(self.path, encoding="utf-8") as fp:
                data = json.load(fp)
        except FileNotFoundError:
            LOG.debug("no state file at %s", self.path)
            return State()
        except ValueError as err:
            # JSONDecodeError and UnicodeDecodeError
            raise StoreError("Malformed state file {}: {}".format(
                self.path, err)) from err
        except OSError as err:
            raise StoreError("Cannot read state file {}: {}".format(
                self.path, err)) from err
        try:
            return State.fromJson(data)
        except StoreError as err:
            raise StoreError("Malformed state file {}: {}".format(
                self.path, err)) from err

    def save(self, state: State):
        dirName = os.path.dirname(self.path) or "."
        try:
            fd, tmpName = tempfile.mkstemp(prefix=".state-", dir=dirName)
        except OSError as err:
            raise StoreError("Cannot write state file {}: {}".format(
                self.path, err)) from err
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fp:
                json.dump(state.toJson(), fp, indent=2)
            os.replace(tmpName, self.path)
        except BaseException:
            os.unlink(tmpName)
            raise
        LOG.debug("saved %r to %s", state, self.path)
