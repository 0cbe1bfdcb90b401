"""
Tests for the job state machine.
"""

from datetime import timedelta
import unittest

import pytest

from bulkupdater.domain import InvalidTransitionError, Job, JobStatus

from .helpers import FakeProcess


class TestJob(unittest.TestCase):
    """Test Job domain model."""

    def test_create_pending(self):
        job = Job(project="/work/game")
        self.assertEqual(job.project, "/work/game")
        self.assertEqual(job.status, JobStatus.PENDING)
        self.assertTrue(job.is_pending())
        self.assertFalse(job.is_finished())
        self.assertIsNone(job.process)
        self.assertIsNotNone(job.create_time)
        self.assertIsNone(job.start_time)

    def test_start(self):
        job = Job(project="/work/game")
        proc = FakeProcess(["editor", "-projectPath", "/work/game"])
        job.start(proc)
        self.assertTrue(job.is_running())
        self.assertIs(job.process, proc)
        self.assertEqual(job.pid, proc.pid)
        self.assertIsNotNone(job.start_time)

    def test_succeed_drops_process(self):
        job = Job(project="/work/game")
        job.start(FakeProcess(["-projectPath", "/work/game"]))
        job.succeed()
        self.assertEqual(job.status, JobStatus.SUCCEEDED)
        self.assertEqual(job.rc, 0)
        self.assertIsNone(job.process)
        self.assertIsNotNone(job.stop_time)
        self.assertTrue(job.is_finished())

    def test_fail_from_pending(self):
        job = Job(project="/work/game")
        job.fail("Could not start the editor process: nope")
        self.assertEqual(job.status, JobStatus.FAILED)
        self.assertIsNone(job.start_time)
        self.assertIn("nope", job.state_str())

    def test_fail_with_code(self):
        job = Job(project="/work/game")
        job.start(FakeProcess(["-projectPath", "/work/game"]))
        job.fail("Editor exited with code 3.", rc=3)
        self.assertEqual(3, job.rc)
        self.assertEqual("Failed: Editor exited with code 3.", job.state_str())

    def test_state_str(self):
        job = Job(project="/work/game")
        self.assertEqual("Waiting for others to finish", job.state_str())
        job.start(FakeProcess(["-projectPath", "/work/game"]))
        self.assertIn("Running", job.state_str())
        job.succeed()
        self.assertEqual("Finished without warnings.", job.state_str())

    def test_duration(self):
        job = Job(project="/work/game")
        self.assertIsNone(job.duration_seconds())
        self.assertEqual("-:--", job.duration_str())
        job.start(FakeProcess(["-projectPath", "/work/game"]))
        job.stop_time = job.start_time + timedelta(seconds=75)
        self.assertAlmostEqual(75.0, job.duration_seconds(), delta=0.1)
        self.assertEqual("1:15", job.duration_str())
        job.stop_time = job.start_time + timedelta(hours=2, seconds=5)
        self.assertEqual("2:00:05", job.duration_str())

    def test_str_contains_project(self):
        job = Job(project="/work/game")
        self.assertIn("/work/game", str(job))

    def test_identity_equality(self):
        self.assertNotEqual(Job(project="/a"), Job(project="/a"))


def _succeeded():
    job = Job(project="/p")
    job.start(FakeProcess(["-projectPath", "/p"]))
    job.succeed()
    return job


def _failed():
    job = Job(project="/p")
    job.fail("boom")
    return job


def _running():
    job = Job(project="/p")
    job.start(FakeProcess(["-projectPath", "/p"]))
    return job


@pytest.mark.parametrize("makeJob, action", [
    (_succeeded, lambda job: job.fail("again")),
    (_succeeded, lambda job: job.succeed()),
    (_succeeded, lambda job: job.start(None)),
    (_failed, lambda job: job.succeed()),
    (_failed, lambda job: job.start(None)),
    (_running, lambda job: job.start(None)),
    (lambda: Job(project="/p"), lambda job: job.succeed()),
])
def testIllegalTransitions(makeJob, action):
    job = makeJob()
    before = job.status
    with pytest.raises(InvalidTransitionError):
        action(job)
    assert job.status == before


def testTerminalStatuses():
    assert {s for s in JobStatus if s.terminal} == {
        JobStatus.SUCCEEDED, JobStatus.FAILED}
