# Copyright 2020 Least Authority TFA GmbH
# See COPYING for details.

"""
Eliot logging fields, action types and command-line helpers.
"""

import json
import os
from uuid import (
    UUID,
)

from eliot import (
    Action,
    ActionType,
    Field,
    MessageType,
    FileDestination,
    ValidationError,
    add_destinations,
    remove_destination,
    start_task,
)
from twisted.application.service import Service
from twisted.python import usage

import attr


def validateInstanceOf(t):
    """
    Return an Eliot validator that requires values to be instances of ``t``.
    """
    def validator(v):
        if not isinstance(v, t):
            raise ValidationError("{} not an instance of {}".format(v, t))
    return validator


def validateSetMembership(s):
    """
    Return an Eliot validator that requires values to be elements of ``s``.
    """
    def validator(v):
        if v not in s:
            raise ValidationError("{} not in {}".format(v, s))
    return validator


RECORD_ID = Field(
    u"record_id",
    str,
    u"The identifier of a record being checked.",
    validateInstanceOf(UUID),
)

LANGUAGE = Field.for_types(
    u"language",
    [str],
    u"The language of the record version being checked.",
)

VERSION = Field.for_types(
    u"version",
    [int],
    u"The version number of the record being checked.",
)

DATABASE = Field.for_types(
    u"database",
    [str],
    u"The database (scope) a record lives in.",
)

PROFILE_NAME = Field.for_types(
    u"profile",
    [str],
    u"The name of a synchronization profile.",
)

RECORD_COUNT = Field.for_types(
    u"record_count",
    [int],
    u"The number of records in a pending save.",
)

FIELD_NAMES = Field(
    u"field_names",
    lambda names: list(names),
    u"The names of fields which did not match the serialized version.",
)

OUTCOME = Field.for_types(
    u"outcome",
    [str],
    u"The decision made about a pending save.",
    validateSetMembership({u"allow", u"block", u"commit", u"abort"}),
)

SNAPSHOT_PATH = Field.for_types(
    u"snapshot_path",
    [str],
    u"The location of a serialized snapshot on disk.",
)


CHECK_BEFORE_SAVE = ActionType(
    u"unicorn-guard:check-before-save",
    [RECORD_COUNT],
    [OUTCOME],
    u"Decide whether a pending save may overwrite the serialized snapshots.",
)

CHECK_AFTER_CONFIRMATION = ActionType(
    u"unicorn-guard:check-after-confirmation",
    [],
    [OUTCOME],
    u"Act on the operator's answer to a conflict confirmation.",
)

FIND_CONFLICTS = ActionType(
    u"unicorn-guard:find-conflicts",
    [RECORD_COUNT],
    [],
    u"Compare every record of a pending save against every profile.",
)

EVALUATE_RECORD = ActionType(
    u"unicorn-guard:evaluate-record",
    [PROFILE_NAME, RECORD_ID, LANGUAGE, VERSION, DATABASE],
    [],
    u"Compare one live record against one profile's snapshot.",
)

DESYNCHRONIZED = MessageType(
    u"unicorn-guard:desynchronized",
    [FIELD_NAMES],
    u"A live record did not match a profile's snapshot of it.",
)

LOAD_SNAPSHOT = ActionType(
    u"unicorn-guard:load-snapshot",
    [SNAPSHOT_PATH],
    [],
    u"Read and parse a serialized snapshot from disk.",
)


def opt_eliot_fd(self, fd):
    """
    File descriptor to send log eliot to.
    """
    try:
        fd = int(fd)
    except Exception as e:
        raise usage.UsageError(str(e))

    stdio_fds = {
        1: self.stdout,
        2: self.stderr,
    }

    def to_fd():
        f = stdio_fds.get(fd)
        if f is None:
            f = os.fdopen(fd, "w")
        return FileDestination(f)

    self.setdefault("eliot-destinations", []).append(to_fd)


def opt_eliot_task_fields(self, task_fields):
    """
    Wrap all logs in a task with given (JSON) fields. (for testing)
    """
    try:
        task_fields = json.loads(task_fields)
    except Exception as e:
        raise usage.UsageError(str(e))
    self.setdefault("eliot-task-fields", {}).update(task_fields)


def with_eliot_options(cls):
    cls.opt_eliot_fd = opt_eliot_fd
    cls.opt_eliot_task_fields = opt_eliot_task_fields
    return cls


def maybe_enable_eliot_logging(options):
    """
    Start sending Eliot logs wherever the command-line asked for.

    :returns: a started ``IService`` which must be stopped when the
        command is done, or ``None`` if no logging was requested.
    """
    destinations = options.get("eliot-destinations")
    task_fields = options.get("eliot-task-fields")
    if not destinations:
        return None

    destinations = [destination() for destination in destinations]
    service = _EliotLogging(destinations, task_fields)
    service.startService()
    return service


@attr.s
class _EliotLogging(Service):
    """
    A service which adds some Eliot destinations while it is running.

    :ivar list[eliot.IDestination] destinations: The Eliot destinations
        which are added by this service.
    """

    destinations = attr.ib(
        validator=attr.validators.deep_iterable(attr.validators.is_callable())
    )
    task_fields = attr.ib(
        default=None,
        validator=attr.validators.optional(attr.validators.instance_of(dict))
    )
    task = attr.ib(
        init=False,
        default=None,
        validator=attr.validators.optional(attr.validators.instance_of(Action)),
    )

    def startService(self):
        if self.task_fields:
            self.task = start_task(**self.task_fields)
            self.task.__enter__()
        add_destinations(*self.destinations)
        return Service.startService(self)

    def stopService(self):
        if self.task is not None:
            self.task.finish()
        for dest in self.destinations:
            remove_destination(dest)
        return Service.stopService(self)
