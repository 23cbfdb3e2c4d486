# Copyright 2020 Least Authority TFA GmbH
# See COPYING for details.

"""
Compare one live record against the snapshot held by one profile.
"""

from .comparator import (
    MISMATCH,
    compare_field,
)
from .model import (
    FieldDesynchronization,
    VERSION_MISSING,
)
from .versions import (
    resolve_version,
)
from .util.eliotutil import (
    DESYNCHRONIZED,
    EVALUATE_RECORD,
)


def _by_id(fields):
    """
    :returns dict: field ID -> the first field with that ID
    """
    by_id = {}
    for field in fields:
        by_id.setdefault(field.id, field)
    return by_id


def field_desynchronizations(live_record, serialized_record, field_filter):
    """
    :param LiveRecord live_record: the pre-save record

    :param SerializedRecord serialized_record: its snapshot

    :param IFieldFilter field_filter: the profile's field rules

    :returns list[FieldDesynchronization]: every mismatched field, in
        the order of ``live_record.fields``; or just ``VERSION_MISSING``
        if the snapshot has no matching version.
    """
    serialized_version = resolve_version(
        serialized_record,
        live_record.version,
        live_record.language,
    )
    if serialized_version is None:
        return [VERSION_MISSING]

    versioned_fields = _by_id(serialized_version.fields)
    shared_fields = _by_id(serialized_record.shared_fields)

    desyncs = []
    for live_field in live_record.fields:
        serialized_field = versioned_fields.get(live_field.id)
        if serialized_field is None:
            serialized_field = shared_fields.get(live_field.id)
        if compare_field(live_field, serialized_field, field_filter) == MISMATCH:
            desyncs.append(FieldDesynchronization(live_field.name))
    return desyncs


def evaluate_record(live_record, profile):
    """
    Find the fields of ``live_record`` that don't match ``profile``'s
    snapshot of it.

    Records the profile doesn't manage, and records it has no snapshot
    of, can't conflict and produce an empty list.

    :param LiveRecord live_record: the pre-save record

    :param SynchronizationProfile profile: where to look

    :returns list[FieldDesynchronization]: possibly empty
    """
    if not profile.predicate.includes(live_record):
        return []

    with EVALUATE_RECORD(
        profile=profile.name,
        record_id=live_record.id,
        language=live_record.language,
        version=live_record.version,
        database=live_record.database,
    ):
        serialized_record = profile.store.get_by_id(
            live_record.id,
            live_record.database,
        )
        if serialized_record is None:
            return []

        desyncs = field_desynchronizations(
            live_record,
            serialized_record,
            profile.field_filter,
        )
        if desyncs:
            DESYNCHRONIZED.log(
                field_names=[d.field_name for d in desyncs],
            )
        return desyncs
