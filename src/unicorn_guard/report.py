# Copyright 2020 Least Authority TFA GmbH
# See COPYING for details.

"""
Render conflict reports for operators. The wording here is read by
people and matched by tooling; keep it stable.
"""

PREAMBLE = (
    u"CRITICAL MESSAGE FROM UNICORN:\n"
    u"You need to run a Unicorn sync. The following fields did not match the serialized version:\n"
)

CONFIRMATION = (
    u"\n\nDo you want to overwrite anyway?\n"
    u"THIS MAY CAUSE LOST WORK."
)


def _field_names(desyncs):
    return u", ".join(desync.field_name for desync in desyncs)


def format_report(report):
    """
    :param ConflictReport report: what conflicts

    :returns: the message to show the operator, or ``None`` if
        ``report`` is empty. With exactly one record flagged only its
        field names are listed; otherwise each line is prefixed with
        the record's display name.
    """
    items = report.items()
    if not items:
        return None

    lines = []
    for record, desyncs in items:
        if len(items) > 1:
            lines.append(u"\n{}: {}".format(record.display_name, _field_names(desyncs)))
        else:
            lines.append(u"\n{}".format(_field_names(desyncs)))

    return PREAMBLE + u"".join(lines) + CONFIRMATION


def format_failure(exception):
    """
    :param Exception exception: whatever went wrong during the check

    :returns unicode: the message shown instead of a conflict report
    """
    return u"Exception occurred: {}".format(exception)
