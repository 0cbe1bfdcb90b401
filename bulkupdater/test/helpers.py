from contextlib import contextmanager
from io import StringIO
import os
import sys

HOME = '/home/me'


def resetEnv():
    os.environ['HOME'] = HOME
    os.environ['BULKUPDATER_STATE_DIR'] = '/tmp/BADDIR'


@contextmanager
def capturedOutput():
    ''' Used to capture stdout or stderr.
    eg.
    with capturedOutput() as (out, err):
        print("foo")

    self.assertEqual(out.getvalue(), "foo")
    '''
    newOut, newErr = StringIO(), StringIO()
    oldOut, oldErr = sys.stdout, sys.stderr
    try:
        sys.stdout, sys.stderr = newOut, newErr
        yield sys.stdout, sys.stderr
    finally:
        sys.stdout, sys.stderr = oldOut, oldErr


class FakeProcess(object):
    """Stands in for subprocess.Popen; the test decides when it exits."""

    nextPid = 1000

    def __init__(self, cmd):
        self.cmd = cmd
        self.returncode = None
        self.pollError = None
        self.pollCount = 0
        FakeProcess.nextPid += 1
        self.pid = FakeProcess.nextPid

    @property
    def project(self):
        return self.cmd[self.cmd.index("-projectPath") + 1]

    def exit(self, rc):
        self.returncode = rc

    def poll(self):
        self.pollCount += 1
        if self.pollError is not None:
            raise self.pollError
        return self.returncode


class FakeSpawner(object):
    """
    Callable used as a Runner spawn factory. Records every process it
    starts; projects listed in ``failFor`` raise the given error instead.
    """

    def __init__(self, failFor=None):
        self.processes = []
        self.failFor = dict(failFor or {})
        self.stdouts = []

    def __call__(self, cmd, stdout):
        project = cmd[cmd.index("-projectPath") + 1]
        if project in self.failFor:
            raise self.failFor[project]
        proc = FakeProcess(cmd)
        self.processes.append(proc)
        self.stdouts.append(stdout)
        return proc

    def byProject(self, project):
        for proc in self.processes:
            if proc.project == project:
                return proc
        raise KeyError(project)
