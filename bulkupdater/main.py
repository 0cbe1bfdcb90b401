#!/usr/bin/env python
import argparse
from importlib import metadata
import os
import sys
import time

import bulkupdater.logging

from .argparse import addArgumentParserBaseFlags
from .binutils import binDescriptionWithStandardFooter
from .catalog import DiscoveryError, VersionCatalog
from .config import Config, ConfigError
from .domain import JobStatus
from .progress import ProgressReporter, countsLine
from .session import SessionError, UpdateSession
from .store import State, StateStore, StoreError
from .utils import SPACER, PathListError, readPathList, sprint

_DEBUG_LOG_FILE_NAME = "bulkupdater-debug"
LOG = bulkupdater.logging.getLogger(__name__)

DESC = binDescriptionWithStandardFooter("""
bulkupdate - Update many editor projects to one editor version in batch mode

Projects are kept in a list between runs. `--update` starts one editor per
project, at most `--max-processes` at a time. Interrupting an update with
Ctrl-C leaves the running editors alone and puts the projects that did not
start yet back in the list.


Examples:
    # Show the installed editor versions
    $ bulkupdate -V

    # Queue two projects and pick the target version
    $ bulkupdate -a ~/work/game -a ~/work/tools -s 2022.3.5f1

    # Run the update, three editors at a time
    $ bulkupdate -u -j 3
""")


def parseArgs(args=None):
    if args is None:
        prog = sys.argv[0]
        args = sys.argv[1:]
    else:
        prog = None

    op = argparse.ArgumentParser(
        prog=os.path.basename(prog) if prog else "bulkupdate",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        description=DESC)

    addArgumentParserBaseFlags(op, _DEBUG_LOG_FILE_NAME)

    op.add_argument("--version", action="store_true",
                    help="Show the bulkupdater version")
    op.add_argument("--versions-path", dest="versionsPath", metavar="DIR",
                    help="Directory holding one subdirectory per installed "
                    "editor version (overrides the rc-file)")
    op.add_argument("-j", "--max-processes", dest="maxProcesses",
                    metavar="N", type=int,
                    help="Maximum number of editors running at once")
    op.add_argument("-V", "--list-versions", action="store_true",
                    help="List installed editor versions")
    op.add_argument("-l", "--list", action="store_true",
                    help="List queued projects and the selected version")
    op.add_argument("-a", "--add", metavar="PATH", action="append",
                    help="Add a project directory to the list")
    op.add_argument("-f", "--projects-file", metavar="FILE", action="append",
                    help="Add project directories listed in FILE, one per line")
    op.add_argument("--remove", metavar="PATH", action="append",
                    help="Remove a project directory from the list")
    op.add_argument("--clear", action="store_true",
                    help="Empty the project list")
    op.add_argument("-s", "--select", metavar="VERSION",
                    help="Select the editor version to update to")
    op.add_argument("-u", "--update", action="store_true",
                    help="Update every listed project to the selected version")

    return op.parse_args(args)


def listVersions(session):
    versions = session.available_versions()
    if not versions:
        sprint("No editor versions found in", session.catalog.root)
        return
    for version in versions:
        mark = "*" if version == session.version else " "
        sprint(mark, version)


def listProjects(session):
    sprint("Version:", session.version or "<none>")
    if not session.projects:
        sprint("No projects queued")
        return
    for project in session.projects:
        sprint("  " + project)


def handleNonExecOptions(options, session):
    if options.version:
        sprint("Version", metadata.version("bulk-editor-updater"))
        return True
    elif options.list_versions:
        listVersions(session)
        return True
    elif options.list:
        listProjects(session)
        return True
    return False


def handleWriteOptions(options, session):
    changed = False
    if options.clear:
        session.clear_projects()
        changed = True
    if options.remove:
        for path in options.remove:
            session.remove_project(path)
        changed = True
    if options.add:
        session.add_projects(options.add)
        changed = True
    if options.projects_file:
        for fileName in options.projects_file:
            with open(os.path.expanduser(fileName), "rb") as fp:
                session.add_projects(readPathList(fp.read()))
        changed = True
    if options.select:
        session.select_version(options.select)
        changed = True
    return changed


def runUpdate(session, config, reporter=None, sleep=time.sleep):
    runner = session.start()
    sprint("Updating {} projects to {} ({} at a time)".format(
        len(runner.jobs), session.version, runner.concurrency_limit))
    if reporter is None:
        reporter = ProgressReporter(summary=config.uiProgressSummary)
    try:
        while True:
            occupied = session.tick()
            reporter.report(runner.jobs)
            if not occupied:
                break
            sleep(config.pollInterval)
    except KeyboardInterrupt:
        LOG.debug("KeyboardInterrupt", exc_info=True)
        sprint("\ninterrupted")
        result = session.stop()
        sprint(SPACER)
        sprint("Put {} projects back in the list".format(len(result.reclaimed)))
        for job in result.detached:
            sprint("Still running in the background:", job)
        return 1

    session.stop()
    sprint(SPACER)
    sprint(countsLine(runner.counts()))
    failed = [job for job in runner.jobs if job.status == JobStatus.FAILED]
    for job in failed:
        sprint(job)
        if job.logfile:
            sprint("  log:", job.logfile)
    return 1 if failed else 0


def impl_main(args=None):
    options = parseArgs(args)
    config = Config(options)

    bulkupdater.logging.setup(
        config.logDir,
        _DEBUG_LOG_FILE_NAME,
        debug=options.debug)
    LOG.debug("starting with args %s", options)
    LOG.debug("python: %s", sys.version)

    store = StateStore(config.stateFile)
    state = store.load()
    session = UpdateSession(
        VersionCatalog(config.versionsPath),
        projects=state.projects,
        version=state.version,
        max_processes=config.maxProcesses,
        executable=config.executable,
        log_dir=config.logDir)

    def save():
        store.save(State(session.projects, session.version))

    if handleNonExecOptions(options, session):
        return 0

    changed = handleWriteOptions(options, session)
    if changed:
        save()

    if options.update:
        try:
            return runUpdate(session, config)
        finally:
            save()

    if not changed:
        listProjects(session)
    return 0


def main(args=None):
    try:
        rc = impl_main(args=args)
    except (ConfigError, DiscoveryError, PathListError, SessionError,
            StoreError, OSError) as error:
        print("Error:", error, file=sys.stderr)
        sys.exit(1)
    sys.exit(rc)


if __name__ == "__main__":
    main()
