import configparser
import os
import sys

from .runner import DEFAULT_EXECUTABLE

if sys.platform == "win32":
    DEFAULT_VERSIONS_PATH = "C:\\Program Files\\Unity\\Hub\\Editor"
elif sys.platform == "darwin":
    DEFAULT_VERSIONS_PATH = "/Applications/Unity/Hub/Editor"
else:
    DEFAULT_VERSIONS_PATH = "~/Unity/Hub/Editor"

RC_FILE_HELP = """\
Sample rcfile:
    [editor]
    versions path = {versionsPath}
    executable = {executable}
    [runner]
    max processes = 2  # 1..99
    poll interval = 0.5  # seconds
    [ui]
    progress = full|summary  # default=full
""".format(versionsPath=DEFAULT_VERSIONS_PATH, executable=DEFAULT_EXECUTABLE)


PROGRESS_FULL = "full"
PROGRESS_SUMMARY = "summary"

PROGRESS_CHOICES = (PROGRESS_FULL, PROGRESS_SUMMARY)  # first is the default


def _getConfig(cfgParser, section, option, defaultValue=None):
    if not cfgParser.has_section(section):
        return defaultValue
    if not cfgParser.has_option(section, option):
        return defaultValue
    return cfgParser.get(section, option)


def _getEnumConfig(cfgParser, section, option, choices):
    optionVal = _getConfig(cfgParser, section, option, choices[0])
    if optionVal not in choices:
        raise ConfigError(
            "RC file has invalid \"{section}.{option}\" setting {optionVal}.  Valid "
            "options: {allowedVals}".format(
                section=section,
                option=option,
                optionVal=optionVal,
                allowedVals=", ".join(choices)))

    return optionVal


def _getNumberConfig(cfgParser, section, option, default, convert,
                     minimum=None, maximum=None):
    # pylint: disable=too-many-arguments
    val = _getConfig(cfgParser, section, option, None)
    if val is None:
        return default
    try:
        number = convert(val)
    except ValueError as err:
        raise ConfigError(
            "RC file has invalid \"{section}.{option}\" setting {optionVal}.  "
            "Expected a number".format(
                section=section,
                option=option,
                optionVal=val)) from err
    if (minimum is not None and number < minimum) or (
            maximum is not None and number > maximum):
        raise ConfigError(
            "RC file has out of range \"{section}.{option}\" setting "
            "{optionVal}".format(
                section=section,
                option=option,
                optionVal=val))
    return number


class ConfigError(Exception):
    pass


class Config(object):
    # pylint: disable=too-many-instance-attributes
    validConfig = {
        'editor': {'versions path', 'executable'},
        'runner': {'max processes', 'poll interval'},
        'ui': {'progress'},
    }

    def _validateConfigParser(self, cfgParser):
        cfgSections = set(cfgParser.sections())
        unknownSections = cfgSections - set(self.validConfig.keys())
        if unknownSections:
            raise ConfigError(
                "RC file has unknown configuration sections: {}".format(
                    ", ".join(sorted(unknownSections))))
        for section in cfgSections:
            cfgValues = set(cfgParser.options(section))
            unknownOptions = cfgValues - self.validConfig[section]
            if unknownOptions:
                raise ConfigError(
                    "RC file has unknown configuration options in "
                    "section \"{}\": {}".format(
                        section, ", ".join(sorted(unknownOptions))))

    def __init__(self, options):
        stateDir = os.path.expanduser(options.stateDir)
        self.options = options
        self._stateDir = os.path.join(stateDir, "state")
        self._logDir = os.path.join(stateDir, "log")

        rcFile = os.path.expanduser(options.rcFile)
        cfgParser = configparser.RawConfigParser(inline_comment_prefixes=('#',))
        try:
            cfgParser.read(rcFile)
        except configparser.Error as err:
            raise ConfigError("RC file {} is malformed: {}".format(
                rcFile, err)) from err
        self._validateConfigParser(cfgParser)

        self._versionsPath = _getConfig(
            cfgParser, "editor", "versions path", DEFAULT_VERSIONS_PATH)
        self._executable = _getConfig(
            cfgParser, "editor", "executable", DEFAULT_EXECUTABLE)
        self._maxProcesses = _getNumberConfig(
            cfgParser, "runner", "max processes", 2, int, 1, 99)
        self._pollInterval = _getNumberConfig(
            cfgParser, "runner", "poll interval", 0.5, float, minimum=0.01)
        self._uiProgress = _getEnumConfig(
            cfgParser, 'ui', 'progress', PROGRESS_CHOICES)

        if getattr(options, "versionsPath", None):
            self._versionsPath = options.versionsPath
        if getattr(options, "maxProcesses", None) is not None:
            self._maxProcesses = options.maxProcesses

    @property
    def verbose(self):
        return self.options.verbose

    @staticmethod
    def checkDir(dirName):
        if not os.access(dirName, os.W_OK | os.X_OK | os.R_OK):
            os.makedirs(dirName)
        return dirName

    @property
    def stateDir(self):
        return self.checkDir(self._stateDir)

    @property
    def logDir(self):
        return self.checkDir(self._logDir)

    @property
    def stateFile(self):
        return os.path.join(self.stateDir, "projects.json")

    @property
    def versionsPath(self):
        return os.path.expanduser(self._versionsPath)

    @property
    def executable(self):
        return self._executable

    @property
    def maxProcesses(self):
        return self._maxProcesses

    @property
    def pollInterval(self):
        return self._pollInterval

    @property
    def uiProgressSummary(self):
        return self._uiProgress == PROGRESS_SUMMARY
