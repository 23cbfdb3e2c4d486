"""
Records, snapshots and collaborators shared by the tests.
"""

from uuid import (
    UUID,
)

import attr
from zope.interface import (
    implementer,
)

from ..model import (
    LiveField,
    LiveRecord,
    REVISION_FIELD_ID,
    SerializedField,
    SerializedRecord,
    SerializedVersion,
)
from ..profile import (
    IConfirmationPrompt,
    ISnapshotStore,
    IncludeEverything,
    SynchronizationProfile,
)
from ..store import (
    InMemorySnapshotStore,
)

RECORD_ID = UUID("0de95ae4-41ab-4d01-9eb0-67441b7c2450")
OTHER_RECORD_ID = UUID("110d559f-dea5-42ea-9c1c-8a5df7e70ef9")
TITLE_ID = UUID("75577384-3c97-45da-a847-81b00500e250")
TEXT_ID = UUID("a60acd61-a6db-4182-8329-c957982cec74")
SORTORDER_ID = UUID("ba3f86a2-4a1c-4d78-b63d-91c2779c1b5e")


def title(value):
    return LiveField(id=TITLE_ID, name=u"Title", value=value, type=u"Single-Line Text")


def text(value):
    return LiveField(id=TEXT_ID, name=u"Text", value=value, type=u"Rich Text")


def revision(value):
    return LiveField(id=REVISION_FIELD_ID, name=u"__Revision", value=value)


def live_record(fields, record_id=RECORD_ID, name=u"Home", language=u"en", version=1):
    return LiveRecord(
        id=record_id,
        name=name,
        language=language,
        version=version,
        database=u"master",
        fields=fields,
        path=u"/sitecore/content/{}".format(name),
    )


def snapshot(record, values, shared=None, language=None, version=None):
    """
    :param LiveRecord record: what the snapshot is of

    :param dict values: field ID -> serialized value, stored in the
        version matching ``record`` (or ``language``/``version``)

    :param dict shared: field ID -> serialized value, stored as shared
        fields
    """
    return SerializedRecord(
        id=record.id,
        database=record.database,
        shared_fields=[
            SerializedField(id=field_id, value=value)
            for field_id, value in (shared or {}).items()
        ],
        versions=[
            SerializedVersion(
                number=record.version if version is None else version,
                language=record.language if language is None else language,
                fields=[
                    SerializedField(id=field_id, value=value)
                    for field_id, value in values.items()
                ],
            ),
        ],
        path=record.path,
    )


def profile_with(*snapshots, **kw):
    """
    :returns SynchronizationProfile: a profile managing everything,
        whose store holds ``snapshots``
    """
    store = InMemorySnapshotStore()
    for s in snapshots:
        store.add(s)
    return SynchronizationProfile(
        name=kw.get("name", u"test"),
        predicate=kw.get("predicate", IncludeEverything()),
        store=store,
        **({"field_filter": kw["field_filter"]} if "field_filter" in kw else {})
    )


@implementer(ISnapshotStore)
@attr.s
class BrokenSnapshotStore(object):
    """
    A snapshot store which fails every lookup.
    """
    exception = attr.ib()

    def get_by_id(self, record_id, database):
        raise self.exception


@implementer(IConfirmationPrompt)
@attr.s
class MemoryPrompt(object):
    """
    Remembers every message it was asked to show.
    """
    messages = attr.ib(default=attr.Factory(list))

    def confirm(self, message):
        self.messages.append(message)
