from io import StringIO
import unittest

from bulkupdater.domain import Job, JobStatus
from bulkupdater.progress import ProgressReporter, countsLine

from .helpers import FakeProcess


def startedJob(project):
    job = Job(project=project)
    job.start(FakeProcess(["-projectPath", project]))
    return job


class TestProgressReporter(unittest.TestCase):
    def test_full_prints_changes_only(self):
        out = StringIO()
        reporter = ProgressReporter(out=out)
        first, second = startedJob("/p/A"), Job(project="/p/B")
        reporter.report([first, second])
        reporter.report([first, second])
        lines = out.getvalue().splitlines()
        self.assertEqual(2, len(lines))
        self.assertIn("/p/A", lines[0])
        self.assertIn("/p/B: Waiting for others to finish", lines[1])

        first.succeed()
        reporter.report([first, second])
        lines = out.getvalue().splitlines()
        self.assertEqual(3, len(lines))
        self.assertIn("Finished without warnings.", lines[2])

    def test_summary(self):
        out = StringIO()
        reporter = ProgressReporter(summary=True, out=out)
        jobs = [startedJob("/p/A"), Job(project="/p/B")]
        reporter.report(jobs)
        reporter.report(jobs)
        jobs[0].fail("Editor exited with code 1.", rc=1)
        reporter.report(jobs)
        self.assertEqual(
            ["1 pending, 1 running, 0 succeeded, 0 failed",
             "1 pending, 0 running, 0 succeeded, 1 failed"],
            out.getvalue().splitlines())


def testCountsLine():
    assert countsLine({JobStatus.SUCCEEDED: 3}) == (
        "0 pending, 0 running, 3 succeeded, 0 failed")
