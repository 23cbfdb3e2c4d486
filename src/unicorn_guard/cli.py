import sys

from twisted.python.filepath import (
    FilePath,
)
from twisted.python import usage

from .common import (
    parse_guid,
)
from .config import (
    default_config_path,
    load_configuration,
)
from .guard import (
    ANSWER_NO,
    ANSWER_UNDEFINED,
    ANSWER_YES,
    PendingSave,
    SaveGuard,
    SaveItem,
)
from .store import (
    live_store_from_path,
)
from .util.eliotutil import (
    maybe_enable_eliot_logging,
    with_eliot_options,
)

DEFAULT_LANGUAGE = u"en"
DEFAULT_VERSION = 1


def parse_item(text):
    """
    Parse a command-line item reference: ``ID[:LANGUAGE[:VERSION]]``.

    :raises usage.UsageError: if ``text`` isn't a reference

    :returns SaveItem:
    """
    parts = text.split(u":")
    if len(parts) > 3:
        raise usage.UsageError(u"Invalid item '{}'".format(text))
    try:
        record_id = parse_guid(parts[0])
        language = parts[1] if len(parts) > 1 else DEFAULT_LANGUAGE
        version = int(parts[2]) if len(parts) > 2 else DEFAULT_VERSION
    except ValueError:
        raise usage.UsageError(u"Invalid item '{}'".format(text))
    if not language:
        raise usage.UsageError(u"Invalid item '{}'".format(text))
    return SaveItem(record_id, language, version)


class CheckOptions(usage.Options):
    """
    Check whether saving some records would overwrite changed snapshots.
    """

    optParameters = [
        ("live", "l", None, "Item file, or directory of item files, holding the live (pre-save) state"),
        ("answer", "a", None, "Act on an operator answer (yes, no or undefined) instead of checking"),
    ]
    description = (
        "Compare live records against the serialized snapshots of every "
        "configured profile before they are saved. Items are given as "
        "ID[:LANGUAGE[:VERSION]] and default to language '{}' version {}.".format(
            DEFAULT_LANGUAGE,
            DEFAULT_VERSION,
        )
    )

    items = ()

    def parseArgs(self, *items):
        if not items:
            raise usage.UsageError("must specify at least one item")
        self.items = [parse_item(item) for item in items]

    def postOptions(self):
        if self["live"] is None:
            raise usage.UsageError("--live is required")
        answer = self["answer"]
        if answer is not None and answer not in (ANSWER_YES, ANSWER_NO, ANSWER_UNDEFINED):
            raise usage.UsageError(
                "--answer must be one of {}, {} or {}".format(
                    ANSWER_YES,
                    ANSWER_NO,
                    ANSWER_UNDEFINED,
                )
            )


def check(options):
    """
    Run the conflict check.

    :returns int: the process exit code; 0 if the save may proceed
    """
    profiles = load_configuration(options.parent.config_path)
    live_store = live_store_from_path(FilePath(options["live"]))
    guard = SaveGuard.from_profiles(live_store, profiles)

    pending_save = PendingSave(options.items)
    if options["answer"] is not None:
        pending_save.resume(options["answer"])

    decision = guard.process(pending_save)
    if decision.message is not None:
        print(decision.message, file=options.stdout)
    else:
        print(u"{}".format(decision.outcome), file=options.stdout)
    return 0 if decision.proceed else 1


@with_eliot_options
class BaseOptions(usage.Options):
    stdout = sys.stdout
    stderr = sys.stderr

    optFlags = [
        ["version", "V", "Display version numbers."],
        ["debug", "d", "Let exceptions out, with a full traceback."],
    ]
    optParameters = [
        ("config", "c", None,
         "The profile configuration file (default: {})".format(default_config_path().path)),
    ]

    @property
    def config_path(self):
        """
        The FilePath where our config is located
        """
        if self["config"] is None:
            return default_config_path()
        return FilePath(self["config"])


class UnicornGuardCommand(BaseOptions):

    subCommands = [
        ["check", None, CheckOptions, "Check records before saving them."],
    ]
    description = (
        "Guard live records against overwriting serialized snapshots "
        "which have changed since they were last synchronized."
    )

    @property
    def parent(self):
        return None

    @parent.setter
    def parent(self, ignored):
        pass

    def opt_version(self):
        """
        Display unicorn-guard version and exit.
        """
        from . import __version__
        print("Unicorn Guard version {}".format(__version__), file=self.stdout)
        sys.exit(0)

    def postOptions(self):
        if not hasattr(self, 'subOptions'):
            raise usage.UsageError("must specify a subcommand")

    def getSynopsis(self):
        return "Usage: unicorn-guard [global-options] <subcommand> [subcommand-options]"


subDispatch = {
    "check": check,
}


def dispatch_unicorn_guard_command(args, stdout=None, stderr=None):
    """
    Run a unicorn-guard command with the given args

    :returns int: the exit code of the (sub)command
    """
    options = UnicornGuardCommand()
    if stdout is not None:
        options.stdout = stdout
    if stderr is not None:
        options.stderr = stderr

    try:
        options.parseOptions(args)
    except usage.UsageError as e:
        print("Error: {}".format(e), file=options.stderr)
        # if a user just typed "unicorn-guard" don't make them re-run
        # with "--help" just to see the sub-commands they were
        # supposed to use
        if not args:
            print(options, file=options.stderr)
        return 1

    return run_unicorn_guard_options(options)


def run_unicorn_guard_options(options):
    """
    Runs a unicorn-guard subcommand with the provided options.

    :param options: already-parsed options.

    :returns int: the exit code of the (sub)command
    """
    so = options.subOptions
    so.stdout = options.stdout
    so.stderr = options.stderr

    logging = maybe_enable_eliot_logging(options)
    try:
        f = subDispatch[options.subCommand]

        # we want to let exceptions out to the top level if --debug is
        # on because this gives better stack-traces
        if options['debug']:
            return f(so)

        try:
            return f(so)
        except Exception as e:
            print(u"Error: {}".format(e), file=options.stderr)
            return 1
    finally:
        if logging is not None:
            logging.stopService()


def _entry():
    """
    Implement the *unicorn-guard* console script declared in ``setup.py``.

    :return: ``None``
    """
    sys.exit(dispatch_unicorn_guard_command(sys.argv[1:]))
