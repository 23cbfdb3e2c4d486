# Copyright 2020 Least Authority TFA GmbH
# See COPYING for details.

"""
Run every profile against every record of a pending save.
"""

import attr
from attr.validators import (
    instance_of,
)

from .evaluator import (
    evaluate_record,
)
from .profile import (
    SynchronizationProfile,
)


@attr.s
class ConflictReport(object):
    """
    The desynchronized fields of every record which has any.

    Records are kept in the order they were first reported.
    """
    _entries = attr.ib(default=attr.Factory(dict))  # LiveRecord -> list[FieldDesynchronization]

    def add(self, record, desyncs):
        """
        Merge ``desyncs`` into whatever is already known about
        ``record``. A field reported by more than one profile appears
        once, where it was first seen.

        :param LiveRecord record: the record that conflicts

        :param list[FieldDesynchronization] desyncs: what conflicts;
            nothing is recorded if this is empty
        """
        if not desyncs:
            return
        known = self._entries.setdefault(record, [])
        for desync in desyncs:
            if desync not in known:
                known.append(desync)

    def items(self):
        """
        :returns: (LiveRecord, tuple[FieldDesynchronization]) pairs
        """
        return [
            (record, tuple(desyncs))
            for record, desyncs in self._entries.items()
        ]

    def records(self):
        return list(self._entries)

    def desynchronizations_for(self, record):
        return tuple(self._entries.get(record, ()))

    def __len__(self):
        return len(self._entries)

    def __bool__(self):
        return bool(self._entries)

    @property
    def allowed(self):
        """
        ``True`` if nothing conflicts and the save may proceed.
        """
        return not self._entries


@attr.s(frozen=True)
class ConflictAggregator(object):
    """
    Compares live records against every configured profile.

    :ivar tuple[SynchronizationProfile] profiles: every profile to
        consult, in order
    """
    profiles = attr.ib(
        converter=tuple,
        validator=attr.validators.deep_iterable(instance_of(SynchronizationProfile)),
    )

    def aggregate(self, live_records):
        """
        Evaluate every record against every profile.

        Nothing is caught here: a failure reading a snapshot aborts the
        whole check, and it is up to the caller to treat that as a
        conflict.

        :param live_records: iterable of ``LiveRecord``

        :returns ConflictReport: empty if the save may proceed
        """
        report = ConflictReport()
        for record in live_records:
            for profile in self.profiles:
                report.add(record, evaluate_record(record, profile))
        return report
