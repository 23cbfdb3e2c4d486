# Copyright 2020 Least Authority TFA GmbH
# See COPYING for details.

"""
Compare a single live field against its serialized counterpart.
"""

MATCH = u"match"
MISMATCH = u"mismatch"
SKIP = u"skip"


def is_comparable(live_field, field_filter):
    """
    Revision, created (by) and updated (by) change on every save, and
    attachments are not stored inline in snapshots, so none of those
    are ever compared no matter what ``field_filter`` says.

    :param LiveField live_field: the field to consider

    :param IFieldFilter field_filter: the profile's field rules

    :returns bool: ``True`` if ``live_field`` takes part in comparisons
    """
    if live_field.is_audit or live_field.is_attachment:
        return False
    return field_filter.includes(live_field.id)


def compare_field(live_field, serialized_field, field_filter):
    """
    :param LiveField live_field: the pre-save value

    :param SerializedField serialized_field: the value in the snapshot,
        or ``None`` if the snapshot doesn't have this field at all

    :param IFieldFilter field_filter: the profile's field rules

    :returns: one of ``MATCH``, ``MISMATCH`` or ``SKIP``
    """
    if not is_comparable(live_field, field_filter):
        return SKIP
    # a field added to a template doesn't re-serialize every record
    # using it, so a missing field overwrites nothing
    if serialized_field is None:
        return SKIP
    if serialized_field.value != live_field.value:
        return MISMATCH
    return MATCH
