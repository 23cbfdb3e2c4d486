# Copyright 2020 Least Authority TFA GmbH
# See COPYING for details.

"""
Read the YAML item format that snapshots are stored in.

An item looks like::

    ---
    ID: "0de95ae4-41ab-4d01-9eb0-67441b7c2450"
    Parent: "f7b1d7f4-...-..."
    Template: "76036f5e-...-..."
    Path: /sitecore/content/Home
    DB: master
    SharedFields:
    - ID: "..."
      Hint: __Sortorder
      Value: 100
    Languages:
    - Language: en
      Fields:
      - ID: "..."
        Hint: Unversioned thing
        Value: x
      Versions:
      - Version: 1
        Fields:
        - ID: "..."
          Hint: Title
          Value: Hello

Every scalar is read as text so that values compare exactly as they
were written. Per-language ``Fields`` apply to every version of that
language, except where the version has its own value for the same
field.
"""

from .common import (
    CorruptSnapshot,
    parse_guid,
)
from .model import (
    LiveField,
    LiveRecord,
    SerializedField,
    SerializedRecord,
    SerializedVersion,
)
from .util.encoding import (
    load_yaml_text,
)


def _require(data, key, source):
    try:
        return data[key]
    except (KeyError, TypeError):
        raise CorruptSnapshot(source, u"missing '{}'".format(key))


def _guid(text, source):
    try:
        return parse_guid(text)
    except ValueError:
        raise CorruptSnapshot(source, u"invalid ID {!r}".format(text))


def _optional_guid(data, key, source):
    value = data.get(key)
    if not value:
        return None
    return _guid(value, source)


def _list(data, key, source):
    value = data.get(key)
    if value is None or value == u"":
        return []
    if not isinstance(value, list):
        raise CorruptSnapshot(source, u"'{}' must be a list".format(key))
    return value


def _fields(data, key, source):
    fields = []
    for entry in _list(data, key, source):
        if not isinstance(entry, dict):
            raise CorruptSnapshot(source, u"field entries must be mappings")
        value = entry.get(u"Value", u"")
        if not isinstance(value, str):
            raise CorruptSnapshot(source, u"field values must be text")
        fields.append(
            SerializedField(
                id=_guid(_require(entry, u"ID", source), source),
                value=value,
                hint=entry.get(u"Hint"),
                type=entry.get(u"Type"),
            )
        )
    return fields


def _version_number(text, source):
    try:
        return int(text)
    except (TypeError, ValueError):
        raise CorruptSnapshot(source, u"invalid version {!r}".format(text))


def record_from_data(data, source=u"<unknown>"):
    """
    :param dict data: a parsed item document (with text scalars)

    :param unicode source: where ``data`` came from, for errors

    :raises CorruptSnapshot: if ``data`` isn't an item

    :returns SerializedRecord:
    """
    if not isinstance(data, dict):
        raise CorruptSnapshot(source, u"not an item document")

    versions = []
    for language in _list(data, u"Languages", source):
        if not isinstance(language, dict):
            raise CorruptSnapshot(source, u"language entries must be mappings")
        language_name = _require(language, u"Language", source)
        unversioned = _fields(language, u"Fields", source)
        for version in _list(language, u"Versions", source):
            if not isinstance(version, dict):
                raise CorruptSnapshot(source, u"version entries must be mappings")
            versioned = _fields(version, u"Fields", source)
            versioned_ids = {field.id for field in versioned}
            versions.append(
                SerializedVersion(
                    number=_version_number(_require(version, u"Version", source), source),
                    language=language_name,
                    fields=versioned + [
                        field
                        for field in unversioned
                        if field.id not in versioned_ids
                    ],
                )
            )

    return SerializedRecord(
        id=_guid(_require(data, u"ID", source), source),
        database=_require(data, u"DB", source),
        shared_fields=_fields(data, u"SharedFields", source),
        versions=versions,
        path=data.get(u"Path", u""),
        template=_optional_guid(data, u"Template", source),
        parent=_optional_guid(data, u"Parent", source),
    )


def parse_record(stream, source=u"<stream>"):
    """
    Parse one item document.

    :param stream: text or a file-like object

    :raises CorruptSnapshot: if the document isn't YAML or isn't an item

    :returns SerializedRecord:
    """
    # yaml.YAMLError doesn't cover decoding problems
    try:
        data = load_yaml_text(stream)
    except Exception as e:
        raise CorruptSnapshot(source, str(e))
    return record_from_data(data, source)


def _field_name(field):
    if field.hint:
        return field.hint
    return str(field.id)


def live_records_from_serialized(record):
    """
    Expand an item document into one live record per version, each
    carrying its shared and version-specific fields. Used to describe
    live state in the same format as snapshots.

    :param SerializedRecord record:

    :returns list[LiveRecord]:
    """
    return [
        LiveRecord(
            id=record.id,
            name=record.name,
            language=version.language,
            version=version.number,
            database=record.database,
            path=record.path,
            fields=[
                LiveField(
                    id=field.id,
                    name=_field_name(field),
                    value=field.value,
                    type=field.type or u"",
                )
                for field in record.shared_fields + version.fields
            ],
        )
        for version in record.versions
    ]
