# Copyright 2020 Least Authority TFA GmbH
# See COPYING for details.

"""
Snapshot stores and live-record stores.
"""

import attr
from attr.validators import (
    instance_of,
)

from twisted.python.filepath import (
    FilePath,
)
from zope.interface import (
    implementer,
)

from .common import (
    CorruptSnapshot,
)
from .formatting import (
    parse_record,
    live_records_from_serialized,
)
from .profile import (
    ISnapshotStore,
    ILiveRecordStore,
)
from .util.eliotutil import (
    LOAD_SNAPSHOT,
)

SNAPSHOT_EXTENSION = u".yml"


def _snapshot_files(root):
    """
    :param FilePath root: a directory

    :returns: every snapshot file below ``root``, sorted by path
    """
    if not root.isdir():
        return []
    return sorted(
        (
            path
            for path in root.walk()
            if path.isfile() and path.basename().endswith(SNAPSHOT_EXTENSION)
        ),
        key=lambda path: path.path,
    )


def read_snapshot(path):
    """
    :param FilePath path: a snapshot file

    :raises CorruptSnapshot: if the file isn't a snapshot

    :returns SerializedRecord:
    """
    with LOAD_SNAPSHOT(snapshot_path=path.path):
        with path.open("r") as f:
            data = f.read()
        try:
            text = data.decode("utf8")
        except UnicodeDecodeError as e:
            raise CorruptSnapshot(path.path, str(e))
        return parse_record(text, path.path)


@implementer(ISnapshotStore)
@attr.s
class InMemorySnapshotStore(object):
    """
    Snapshots held in memory, keyed by (ID, database).
    """
    _records = attr.ib(default=attr.Factory(dict))

    def add(self, record):
        """
        :param SerializedRecord record: replaces any existing snapshot
            with the same ID and database
        """
        self._records[(record.id, record.database.lower())] = record

    def get_by_id(self, record_id, database):
        return self._records.get((record_id, database.lower()))


@implementer(ISnapshotStore)
@attr.s
class FilesystemSnapshotStore(object):
    """
    Snapshots stored as YAML files, one per record, in a directory per
    database: ``<root>/<database>/**/*.yml``.

    Files are named after record paths rather than IDs, so every file
    of a database is read to find which file holds which ID. Only that
    mapping is remembered: the file holding a record is read again on
    every lookup, and the whole directory is read again when a record
    isn't where it was (or wasn't anywhere).

    :ivar FilePath root: the top of the snapshot tree
    """
    root = attr.ib(validator=instance_of(FilePath))
    _locations = attr.ib(init=False, default=attr.Factory(dict))  # database -> {UUID: FilePath}

    def _database_root(self, database):
        return self.root.child(database)

    def _scan(self, database):
        """
        Read every snapshot of ``database``.

        :returns dict: UUID -> SerializedRecord
        """
        records = {}
        locations = {}
        for path in _snapshot_files(self._database_root(database)):
            record = read_snapshot(path)
            records[record.id] = record
            locations[record.id] = path
        self._locations[database] = locations
        return records

    def _read_known(self, record_id, database):
        """
        :returns: the record from the file it was last seen in, or
            ``None`` if that file is gone or now holds something else
        """
        path = self._locations.get(database, {}).get(record_id)
        if path is None:
            return None
        path.changed()
        if not path.isfile():
            return None
        record = read_snapshot(path)
        if record.id != record_id:
            return None
        return record

    def get_by_id(self, record_id, database):
        database = database.lower()
        record = self._read_known(record_id, database)
        if record is None:
            record = self._scan(database).get(record_id)
        return record


@implementer(ILiveRecordStore)
@attr.s
class InMemoryLiveRecordStore(object):
    """
    Live records held in memory, keyed by (ID, language, version).
    """
    _records = attr.ib(default=attr.Factory(dict))

    def add(self, record):
        """
        :param LiveRecord record: replaces any existing record version
        """
        self._records[(record.id, record.language, record.version)] = record

    def get_record(self, record_id, language, version):
        return self._records.get((record_id, language, version))


def live_store_from_path(path):
    """
    Load live records described in the snapshot format.

    :param FilePath path: a single item file, or a directory searched
        recursively for item files

    :returns InMemoryLiveRecordStore: every version of every item found
    """
    if path.isdir():
        paths = _snapshot_files(path)
    else:
        paths = [path]
    store = InMemoryLiveRecordStore()
    for snapshot_path in paths:
        for record in live_records_from_serialized(read_snapshot(snapshot_path)):
            store.add(record)
    return store
