"""
Tests for the ``unicorn-guard`` command line.
"""

from io import (
    StringIO,
)

from testtools import (
    ExpectedException,
)
from testtools.matchers import (
    Contains,
    Equals,
    StartsWith,
)

from twisted.python.filepath import (
    FilePath,
)
from twisted.python.usage import (
    UsageError,
)

from .common import (
    SyncTestCase,
)
from .fixtures import (
    RECORD_ID,
    TITLE_ID,
)
from .. import (
    __version__,
)
from ..cli import (
    dispatch_unicorn_guard_command,
    parse_item,
)
from ..common import (
    RecordVanished,
)
from ..config import (
    CONFIG_FILENAME,
)
from ..guard import (
    SaveItem,
)


def item_document(title_value):
    return (
        u'ID: "{id}"\n'
        u"Path: /sitecore/content/Home\n"
        u"DB: master\n"
        u"Languages:\n"
        u"- Language: en\n"
        u"  Versions:\n"
        u"  - Version: 1\n"
        u"    Fields:\n"
        u'    - ID: "{title_id}"\n'
        u"      Hint: Title\n"
        u"      Value: {title}\n"
    ).format(id=RECORD_ID, title_id=TITLE_ID, title=title_value).encode("utf8")


class ParseItemTests(SyncTestCase):
    """
    Tests for ``parse_item``.
    """

    def test_defaults(self):
        """
        Language and version default when only an ID is given.
        """
        self.assertThat(
            parse_item(u"{{{}}}".format(RECORD_ID)),
            Equals(SaveItem(RECORD_ID, u"en", 1)),
        )

    def test_full(self):
        """
        Language and version may both be given.
        """
        self.assertThat(
            parse_item(u"{}:da:3".format(RECORD_ID)),
            Equals(SaveItem(RECORD_ID, u"da", 3)),
        )

    def test_invalid(self):
        """
        Anything that isn't a reference is a usage error.
        """
        invalid = [
            u"home",
            u"{}:da:three".format(RECORD_ID),
            u"{}::1".format(RECORD_ID),
            u"{}:en:1:2".format(RECORD_ID),
        ]
        for text in invalid:
            with ExpectedException(UsageError, "Invalid item"):
                parse_item(text)


class CheckCommandTests(SyncTestCase):
    """
    Tests for ``unicorn-guard check``.
    """

    def setUp(self):
        super(CheckCommandTests, self).setUp()
        self.basedir = FilePath(self.mktemp())
        self.basedir.makedirs()
        self.config = self.basedir.child(CONFIG_FILENAME)
        self.config.setContent(
            b"profiles:\n"
            b"  - name: Content\n"
            b"    snapshot_path: serialization\n"
            b"    include:\n"
            b"      - database: master\n"
            b"        path: /sitecore/content\n"
        )
        master = self.basedir.child(u"serialization").child(u"master")
        master.makedirs()
        master.child(u"Home.yml").setContent(item_document(u"Hi"))
        self.live = self.basedir.child(u"live")
        self.live.makedirs()
        self.stdout = StringIO()
        self.stderr = StringIO()

    def run_command(self, *args):
        return dispatch_unicorn_guard_command(
            ["--config", self.config.path] + list(args),
            stdout=self.stdout,
            stderr=self.stderr,
        )

    def check(self, title_value, *extra):
        self.live.child(u"Home.yml").setContent(item_document(title_value))
        return self.run_command(
            "check",
            "--live", self.live.path,
            *(list(extra) + [str(RECORD_ID)])
        )

    def test_allow(self):
        """
        A save matching the snapshot is allowed.
        """
        self.assertThat(self.check(u"Hi"), Equals(0))
        self.assertThat(self.stdout.getvalue(), Equals(u"allow\n"))

    def test_block(self):
        """
        A conflicting save is blocked and the conflict message printed.
        """
        self.assertThat(self.check(u"Hello"), Equals(1))
        self.assertThat(
            self.stdout.getvalue(),
            StartsWith(u"CRITICAL MESSAGE FROM UNICORN:\n"),
        )
        self.assertThat(self.stdout.getvalue(), Contains(u"\nTitle\n"))

    def test_confirmed(self):
        """
        Answering "yes" commits the save.
        """
        self.assertThat(self.check(u"Hello", "--answer", "yes"), Equals(0))
        self.assertThat(self.stdout.getvalue(), Equals(u"commit\n"))

    def test_denied(self):
        """
        Answering "no" aborts the save.
        """
        self.assertThat(self.check(u"Hello", "--answer", "no"), Equals(1))
        self.assertThat(self.stdout.getvalue(), Equals(u"abort\n"))

    def test_invalid_answer(self):
        """
        Only the known answers are accepted.
        """
        self.assertThat(self.check(u"Hello", "--answer", "maybe"), Equals(1))
        self.assertThat(self.stderr.getvalue(), StartsWith(u"Error: --answer must be"))

    def test_unknown_item(self):
        """
        Checking an item the live state doesn't have is an error.
        """
        self.live.child(u"Home.yml").setContent(item_document(u"Hi"))
        code = self.run_command(
            "check",
            "--live", self.live.path,
            "110d559f-dea5-42ea-9c1c-8a5df7e70ef9",
        )
        self.assertThat(code, Equals(1))
        self.assertThat(self.stdout.getvalue(), StartsWith(u"Exception occurred: Existing item"))
        self.eliot_logger.flush_tracebacks(RecordVanished)

    def test_missing_configuration(self):
        """
        A missing configuration file is reported without a traceback.
        """
        self.config.remove()
        self.assertThat(self.check(u"Hi"), Equals(1))
        self.assertThat(self.stderr.getvalue(), StartsWith(u"Error: no configuration at"))

    def test_no_items(self):
        """
        At least one item must be given.
        """
        code = self.run_command("check", "--live", self.live.path)
        self.assertThat(code, Equals(1))
        self.assertThat(self.stderr.getvalue(), Contains(u"must specify at least one item"))

    def test_no_live_state(self):
        """
        The live state must be given.
        """
        code = self.run_command("check", str(RECORD_ID))
        self.assertThat(code, Equals(1))
        self.assertThat(self.stderr.getvalue(), Contains(u"--live is required"))


class UnicornGuardCommandTests(SyncTestCase):
    """
    Tests for the top-level command.
    """

    def setUp(self):
        super(UnicornGuardCommandTests, self).setUp()
        self.stdout = StringIO()
        self.stderr = StringIO()

    def test_no_arguments(self):
        """
        With no arguments at all the usage is shown.
        """
        code = dispatch_unicorn_guard_command([], stdout=self.stdout, stderr=self.stderr)
        self.assertThat(code, Equals(1))
        self.assertThat(self.stderr.getvalue(), StartsWith(u"Error: must specify a subcommand"))
        self.assertThat(self.stderr.getvalue(), Contains(u"Usage: unicorn-guard"))

    def test_version(self):
        """
        ``--version`` prints the version and exits.
        """
        with ExpectedException(SystemExit):
            dispatch_unicorn_guard_command(["--version"], stdout=self.stdout, stderr=self.stderr)
        self.assertThat(
            self.stdout.getvalue(),
            Equals(u"Unicorn Guard version {}\n".format(__version__)),
        )
