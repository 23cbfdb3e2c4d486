# Copyright 2020 Least Authority TFA GmbH
# See COPYING for details.

"""
Synchronization profiles: which records and which fields a snapshot
store is responsible for.
"""

from uuid import (
    UUID,
)

from zope.interface import (
    Interface,
    implementer,
)

import attr
from attr.validators import (
    instance_of,
    deep_iterable,
)

from .util.attrs_zope import (
    provides,
)


class IRecordPredicate(Interface):
    """
    Decides which records a profile manages.
    """

    def includes(record):
        """
        :param LiveRecord record: the record to consider

        :returns bool: ``True`` if ``record`` is in scope
        """


class IFieldFilter(Interface):
    """
    Decides which fields are ever compared against a snapshot.
    """

    def includes(field_id):
        """
        :param UUID field_id: the field to consider

        :returns bool: ``True`` if the field takes part in comparisons
        """


class ISnapshotStore(Interface):
    """
    Access to the serialized snapshots of one profile.
    """

    def get_by_id(record_id, database):
        """
        :param UUID record_id: the record to look up

        :param unicode database: the database (scope) of the record

        :returns: a ``SerializedRecord`` or ``None`` if there is no
            snapshot for that record
        """


class ILiveRecordStore(Interface):
    """
    Access to the current (pre-save) state of live records.
    """

    def get_record(record_id, language, version):
        """
        :returns: a ``LiveRecord`` or ``None`` if there is no such
            record version
        """


class IConfirmationPrompt(Interface):
    """
    Shows a conflict message to the operator, who will answer later.
    """

    def confirm(message):
        """
        Present ``message`` and ask whether to overwrite anyway. The
        answer arrives later, as a post-back.
        """


def _normalize_path(path):
    return path.rstrip(u"/").lower()


def _is_at_or_below(path, root):
    return path == root or path.startswith(root + u"/")


@attr.s(frozen=True)
class PathRule(object):
    """
    Include the record at ``path`` and all its descendants in
    ``database``, except those at or below any of ``exclude``.

    Paths compare case-insensitively.
    """
    database = attr.ib(validator=instance_of(str))
    path = attr.ib(converter=_normalize_path)
    exclude = attr.ib(
        default=(),
        converter=lambda paths: tuple(_normalize_path(p) for p in paths),
    )

    def includes(self, database, path):
        if database.lower() != self.database.lower():
            return False
        path = _normalize_path(path)
        if not _is_at_or_below(path, self.path):
            return False
        return not any(
            _is_at_or_below(path, excluded)
            for excluded in self.exclude
        )


@implementer(IRecordPredicate)
@attr.s(frozen=True)
class PathPredicate(object):
    """
    A record is in scope if any of our rules includes it.
    """
    rules = attr.ib(
        converter=tuple,
        validator=deep_iterable(instance_of(PathRule)),
    )

    def includes(self, record):
        return any(
            rule.includes(record.database, record.path)
            for rule in self.rules
        )


@implementer(IRecordPredicate)
class IncludeEverything(object):
    """
    Every record is in scope.
    """

    def includes(self, record):
        return True


@implementer(IFieldFilter)
@attr.s(frozen=True)
class ExcludedFieldsFilter(object):
    """
    Compare every field except the ones listed.
    """
    excluded = attr.ib(
        default=frozenset(),
        converter=frozenset,
        validator=deep_iterable(instance_of(UUID)),
    )

    def includes(self, field_id):
        return field_id not in self.excluded


@attr.s(frozen=True)
class SynchronizationProfile(object):
    """
    A named bundle of scope, snapshot store and field rules.
    """
    name = attr.ib(validator=instance_of(str))
    predicate = attr.ib(validator=provides(IRecordPredicate))
    store = attr.ib(validator=provides(ISnapshotStore))
    field_filter = attr.ib(
        default=attr.Factory(ExcludedFieldsFilter),
        validator=provides(IFieldFilter),
    )
