# Copyright 2020 Least Authority TFA GmbH
# See COPYING for details.

"""
Read-only views of live records and their serialized snapshots.

Everything in here is built fresh for each save attempt and none of it
is persisted by the conflict check.
"""

from uuid import (
    UUID,
)

import attr
from attr.validators import (
    instance_of,
    optional,
    deep_iterable,
)


# built-in audit fields; their values change on every save so they are
# never compared
REVISION_FIELD_ID = UUID("8cdc337e-a112-42fb-bbb4-4143751e123f")
UPDATED_FIELD_ID = UUID("d9cf14b1-fa16-4ba6-9288-e8a174d4d522")
CREATED_FIELD_ID = UUID("25bed78c-4957-4165-998a-ca1b52f67497")
CREATED_BY_FIELD_ID = UUID("5dd74568-4d4b-44c1-b513-0af5f4cda34f")
UPDATED_BY_FIELD_ID = UUID("badd9cf9-53e0-4d0c-bcc0-2d784c282f6a")

AUDIT_FIELD_IDS = frozenset([
    REVISION_FIELD_ID,
    UPDATED_FIELD_ID,
    CREATED_FIELD_ID,
    CREATED_BY_FIELD_ID,
    UPDATED_BY_FIELD_ID,
])

ATTACHMENT_FIELD_TYPE = u"attachment"


def _tuple_of(cls):
    return deep_iterable(
        member_validator=instance_of(cls),
        iterable_validator=instance_of(tuple),
    )


@attr.s(frozen=True)
class LiveField(object):
    """
    One field of a live record.

    :ivar UUID id: stable identifier of the field

    :ivar unicode name: human-readable field name (used in reports)

    :ivar unicode value: the raw value, in string form

    :ivar unicode type: the field type tag (e.g. ``Single-Line Text``)
    """
    id = attr.ib(validator=instance_of(UUID))
    name = attr.ib(validator=instance_of(str))
    value = attr.ib(validator=instance_of(str))
    type = attr.ib(default=u"", validator=instance_of(str))

    @property
    def is_audit(self):
        """
        ``True`` if this is one of the built-in revision/audit fields.
        """
        return self.id in AUDIT_FIELD_IDS

    @property
    def is_attachment(self):
        """
        ``True`` if this field holds a binary attachment.
        """
        return self.type.lower() == ATTACHMENT_FIELD_TYPE


@attr.s(frozen=True)
class LiveRecord(object):
    """
    The pre-save state of a record, as read from the live store.

    :ivar UUID id: stable record identifier

    :ivar unicode name: the record's name

    :ivar unicode language: language name (e.g. ``en``)

    :ivar int version: version number within ``language``

    :ivar unicode database: the database (scope) the record lives in

    :ivar tuple[LiveField] fields: every field of this version,
        shared and versioned alike

    :ivar unicode path: location of the record in the content tree

    :ivar unicode display_name: name shown to operators; defaults to
        ``name``
    """
    id = attr.ib(validator=instance_of(UUID))
    name = attr.ib(validator=instance_of(str))
    language = attr.ib(validator=instance_of(str))
    version = attr.ib(validator=instance_of(int))
    database = attr.ib(validator=instance_of(str))
    fields = attr.ib(default=(), converter=tuple, validator=_tuple_of(LiveField))
    path = attr.ib(default=u"", validator=instance_of(str))
    display_name = attr.ib(
        default=attr.Factory(lambda self: self.name, takes_self=True),
        validator=instance_of(str),
    )


@attr.s(frozen=True)
class SerializedField(object):
    """
    A field value as stored in a snapshot.

    :ivar unicode hint: the field name, for humans reading the snapshot
    """
    id = attr.ib(validator=instance_of(UUID))
    value = attr.ib(validator=instance_of(str))
    hint = attr.ib(default=None, validator=optional(instance_of(str)))
    type = attr.ib(default=None, validator=optional(instance_of(str)))


@attr.s(frozen=True)
class SerializedVersion(object):
    """
    One (version number, language) of a snapshot, with its
    version-specific fields.
    """
    number = attr.ib(validator=instance_of(int))
    language = attr.ib(validator=instance_of(str))
    fields = attr.ib(default=(), converter=tuple, validator=_tuple_of(SerializedField))


@attr.s(frozen=True)
class SerializedRecord(object):
    """
    A snapshot of a record as last externalized to the snapshot store.

    :ivar tuple[SerializedField] shared_fields: version-independent
        fields

    :ivar tuple[SerializedVersion] versions: every serialized version,
        across all languages
    """
    id = attr.ib(validator=instance_of(UUID))
    database = attr.ib(validator=instance_of(str))
    shared_fields = attr.ib(default=(), converter=tuple, validator=_tuple_of(SerializedField))
    versions = attr.ib(default=(), converter=tuple, validator=_tuple_of(SerializedVersion))
    path = attr.ib(default=u"", validator=instance_of(str))
    template = attr.ib(default=None, validator=optional(instance_of(UUID)))
    parent = attr.ib(default=None, validator=optional(instance_of(UUID)))

    @property
    def name(self):
        """
        The last segment of our path.
        """
        return self.path.rstrip(u"/").rsplit(u"/", 1)[-1]


@attr.s(frozen=True)
class FieldDesynchronization(object):
    """
    A single field whose live value does not match the snapshot.
    """
    field_name = attr.ib(validator=instance_of(str))


# the snapshot has no version matching the live record at all
VERSION_MISSING = FieldDesynchronization(u"Version")
