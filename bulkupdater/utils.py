import datetime
import logging
import os
import re

import chardet
import dateutil.tz

SPACER_EACH = "========================================"
SPACER = SPACER_EACH + SPACER_EACH

LOG = logging.getLogger(__name__)


def strForEach(value):
    try:
        return str(value)
    except (UnicodeDecodeError, UnicodeEncodeError):
        LOG.debug("%r", value, exc_info=1)
        return '{!r}'.format(value)


def sprint(*args, **kwargs):
    """sprint: "safe" print - ignore IOError"""
    try:
        print(*list(map(strForEach, args)), **kwargs)
    except IOError:
        LOG.debug("sprint ignore IOError", exc_info=1)
    except (UnicodeEncodeError, UnicodeDecodeError):
        print('codec error', repr(args))
        LOG.debug("%r", args, exc_info=1)


def utcNow():
    return datetime.datetime.now(dateutil.tz.tzutc())


def autoDecode(byteArray):
    detected = chardet.detect(byteArray)
    encoding = detected['encoding']
    if not encoding or detected['confidence'] < 0.5:  # very arbitrary
        encoding = 'utf-8'
    return byteArray.decode(encoding)


_UNSAFE_CHARS = re.compile(r'[^A-Za-z0-9_#.-]')


def keyEscape(inp):
    return _UNSAFE_CHARS.sub('+', inp)


def projectName(project):
    """Last path component of a project directory, for display and file names."""
    name = os.path.basename(os.path.normpath(str(project)))
    return name or str(project)


class PathListError(Exception):
    pass


def readPathList(byteArray):
    """
    Parse a list of project paths, one per line. Blank lines and lines
    starting with '#' are ignored.
    """
    try:
        text = autoDecode(byteArray)
    except (UnicodeDecodeError, LookupError) as err:
        raise PathListError("Cannot decode project list: {}".format(err)) from err
    paths = []
    for line in text.splitlines():
        line = line.strip()
        if not line or line.startswith('#'):
            continue
        paths.append(line)
    return paths
