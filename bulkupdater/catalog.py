"""
Discovery of installed editor versions.

An editor install root (e.g. the Unity Hub "Editor" directory) holds one
subdirectory per installed version, named like ``2022.3.5f1``. Only the
immediate children of the root are inspected.
"""

import os
import re
from typing import List, Optional

from . import logging

LOG = logging.getLogger(__name__)

VERSION_PATTERN = re.compile(r"^\d{4}\.\d+\.\d+[A-Za-z]\d+$")


class DiscoveryError(Exception):
    """The version root itself could not be listed."""

    def __init__(self, root, cause):
        super().__init__("Cannot list editor versions in {!r}: {}".format(
            str(root), cause))
        self.root = root
        self.cause = cause


def is_version_name(name: str) -> bool:
    return VERSION_PATTERN.fullmatch(name) is not None


def discover(root) -> List[str]:
    """
    Return the names of version directories directly under ``root``, in
    directory listing order.

    Entries that cannot be inspected are skipped. Raises DiscoveryError if
    ``root`` cannot be listed at all.
    """
    try:
        it = os.scandir(root)
    except OSError as err:
        LOG.debug("discover(%r) failed", root, exc_info=True)
        raise DiscoveryError(root, err) from err

    versions = []
    with it:
        while True:
            try:
                entry = next(it)
            except StopIteration:
                break
            except OSError:
                # the directory stream cannot be resumed after a read error
                LOG.debug("listing of %r cut short", root, exc_info=True)
                break
            try:
                is_dir = entry.is_dir()
            except OSError:
                LOG.debug("skip entry %r", entry.name, exc_info=True)
                continue
            if is_dir and is_version_name(entry.name):
                versions.append(entry.name)
    LOG.debug("discover(%r) => %r", root, versions)
    return versions


class VersionCatalog(object):
    """
    Caches the result of discover() for one root until invalidated.

    A failed discovery is cached too, so repeated reads re-raise the same
    DiscoveryError instead of hitting the filesystem on every call.
    """

    def __init__(self, root):
        self._root = str(root)
        self._versions: Optional[List[str]] = None
        self._error: Optional[DiscoveryError] = None

    @property
    def root(self) -> str:
        return self._root

    @root.setter
    def root(self, value):
        value = str(value)
        if value != self._root:
            self._root = value
            self.invalidate()

    def invalidate(self):
        self._versions = None
        self._error = None

    def versions(self) -> List[str]:
        if self._error is not None:
            raise self._error
        if self._versions is None:
            try:
                self._versions = discover(self._root)
            except DiscoveryError as err:
                self._error = err
                raise
        return list(self._versions)

    def version_path(self, version: str) -> str:
        return os.path.join(self._root, version)
