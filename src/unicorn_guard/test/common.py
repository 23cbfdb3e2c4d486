__all__ = [
    "SyncTestCase",
]

import tempfile
from functools import partial

from testtools import (
    TestCase,
)
from testtools.twistedsupport import (
    SynchronousDeferredRunTest,
)

from twisted.python.filepath import FilePath

from .eliotutil import (
    EliotLoggedRunTest,
)


class _TestCaseMixin(object):
    """
    A mixin for ``TestCase`` which collects helpful behaviors for subclasses.

    Those behaviors are:

    * All of the features of testtools TestCase.
    * Each test method will be run in a unique Eliot action context which
      identifies the test and collects all Eliot log messages emitted by that
      test (including setUp and tearDown messages).
    * trial-compatible mktemp method
    """
    def setUp(self):
        self.addCleanup(
            partial(setattr, tempfile, "tempdir", tempfile.tempdir),
        )
        return super(_TestCaseMixin, self).setUp()

    def mktemp(self):
        """
        Create a new path name which can be used for a new file or directory.

        The result is a path that is guaranteed to be unique.  The parent
        of the path will exist, but the path will not.

        :return str: The newly created path
        """
        tmp = FilePath(tempfile.mkdtemp())
        self.addCleanup(tmp.remove)
        return tmp.child(u"tmp").path


class SyncTestCase(_TestCaseMixin, TestCase):
    """
    A ``TestCase`` which can run tests that may return an already-fired
    ``Deferred``.
    """
    run_tests_with = EliotLoggedRunTest.make_factory(
        SynchronousDeferredRunTest,
    )

    # without this method, instantiating a SyncTestCase (or
    # e.g. testtools.TestCase) results in a traceback
    def runTest(self, *a, **kw):
        raise NotImplementedError
