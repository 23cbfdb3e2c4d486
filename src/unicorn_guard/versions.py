# Copyright 2020 Least Authority TFA GmbH
# See COPYING for details.


def resolve_version(serialized_record, version_number, language):
    """
    Find the serialized version matching a live record version.

    Versions are assumed to be unique per (number, language); the
    first match wins.

    :param SerializedRecord serialized_record: the snapshot

    :param int version_number: the live record's version number

    :param unicode language: the live record's language name

    :returns: the matching ``SerializedVersion`` or ``None``. ``None``
        usually means the version was created after the last time the
        snapshot was written.
    """
    for version in serialized_record.versions:
        if version.number == version_number and version.language == language:
            return version
    return None
