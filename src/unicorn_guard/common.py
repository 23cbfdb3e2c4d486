# Copyright 2020 Least Authority TFA GmbH
# See COPYING for details.

"""
Common functions and types used by other modules.
"""

from uuid import (
    UUID,
)

import attr


@attr.s(auto_exc=True)
class RecordVanished(Exception):
    """
    The live-record store did not have a record which is part of a save
    in progress. This should never occur.
    """
    record_id = attr.ib(validator=attr.validators.instance_of(UUID))
    language = attr.ib(validator=attr.validators.instance_of(str))
    version = attr.ib(validator=attr.validators.instance_of(int))

    def __str__(self):
        return u"Existing item {} ({}, version {}) did not exist!".format(
            self.record_id,
            self.language,
            self.version,
        )


@attr.s(auto_exc=True)
class CorruptSnapshot(Exception):
    """
    A serialized snapshot could not be interpreted as a record.

    :ivar unicode path: where the snapshot came from (a file path, or
        some other description of the source)

    :ivar unicode reason: what was wrong with it
    """
    path = attr.ib(validator=attr.validators.instance_of(str))
    reason = attr.ib(validator=attr.validators.instance_of(str))

    def __str__(self):
        return u"Corrupt snapshot '{}': {}".format(self.path, self.reason)


@attr.s(auto_exc=True)
class ConfigurationError(Exception):
    """
    The synchronization profile configuration is not valid.
    """
    reason = attr.ib(validator=attr.validators.instance_of(str))

    def __str__(self):
        return self.reason


def parse_guid(text):
    """
    Parse a GUID in any of the common textual forms, with or without
    braces (``{0DE95AE4-41AB-4D01-9EB0-67441B7C2450}``).

    :param unicode text: the GUID

    :raises ValueError: if this is not a GUID

    :returns UUID: the parsed identifier
    """
    if not isinstance(text, str):
        raise ValueError("GUID must be text, not {!r}".format(text))
    return UUID(text.strip().strip(u"{}"))
