"""
Tests for ``unicorn_guard.profile``.
"""

from testtools.matchers import (
    Equals,
)

from .common import (
    SyncTestCase,
)
from .fixtures import (
    TEXT_ID,
    TITLE_ID,
    live_record,
)
from ..profile import (
    ExcludedFieldsFilter,
    IncludeEverything,
    PathPredicate,
    PathRule,
)


class PathRuleTests(SyncTestCase):
    """
    Tests for ``PathRule``.
    """

    def setUp(self):
        super(PathRuleTests, self).setUp()
        self.rule = PathRule(
            u"master",
            u"/sitecore/content/",
            exclude=[u"/sitecore/content/Archive"],
        )

    def test_root(self):
        """
        The rule's own path is included.
        """
        self.assertThat(self.rule.includes(u"master", u"/sitecore/content"), Equals(True))

    def test_descendant(self):
        """
        Paths below the rule's path are included, ignoring case.
        """
        self.assertThat(
            self.rule.includes(u"MASTER", u"/Sitecore/Content/Home/About"),
            Equals(True),
        )

    def test_sibling_prefix(self):
        """
        A path that merely starts with the same characters is not below
        the rule's path.
        """
        self.assertThat(
            self.rule.includes(u"master", u"/sitecore/contentious"),
            Equals(False),
        )

    def test_excluded(self):
        """
        Excluded paths and everything below them are left out.
        """
        self.assertThat(
            self.rule.includes(u"master", u"/sitecore/content/archive/2019"),
            Equals(False),
        )

    def test_other_database(self):
        """
        Only the rule's database is included.
        """
        self.assertThat(self.rule.includes(u"web", u"/sitecore/content"), Equals(False))


class PredicateTests(SyncTestCase):
    """
    Tests for ``PathPredicate`` and ``IncludeEverything``.
    """

    def test_any_rule(self):
        """
        A record included by any rule is in scope.
        """
        predicate = PathPredicate([
            PathRule(u"master", u"/sitecore/templates"),
            PathRule(u"master", u"/sitecore/content/Home"),
        ])
        self.assertThat(predicate.includes(live_record([])), Equals(True))
        self.assertThat(
            predicate.includes(live_record([], name=u"About")),
            Equals(False),
        )

    def test_no_rules(self):
        """
        A predicate without rules includes nothing.
        """
        self.assertThat(PathPredicate([]).includes(live_record([])), Equals(False))

    def test_everything(self):
        """
        ``IncludeEverything`` includes every record.
        """
        self.assertThat(IncludeEverything().includes(live_record([])), Equals(True))


class ExcludedFieldsFilterTests(SyncTestCase):
    """
    Tests for ``ExcludedFieldsFilter``.
    """

    def test_excluded(self):
        """
        Only the listed fields are excluded.
        """
        field_filter = ExcludedFieldsFilter([TITLE_ID])
        self.assertThat(field_filter.includes(TITLE_ID), Equals(False))
        self.assertThat(field_filter.includes(TEXT_ID), Equals(True))
