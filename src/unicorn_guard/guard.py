# Copyright 2020 Least Authority TFA GmbH
# See COPYING for details.

"""
Hook the conflict check into a save workflow.

A save which would overwrite changed snapshots is held back and the
operator is asked to confirm. The workflow resumes the very same check
later with the operator's answer (a "post-back").

Note that this does not catch every possible conflict: renames, moves
and template schema edits never pass through a save check. Running a
sync after pulling snapshot changes is still required.
"""

from uuid import (
    UUID,
)

import automat
import attr
from attr.validators import (
    instance_of,
    optional,
)
from eliot import (
    Message,
    write_traceback,
)

from .aggregator import (
    ConflictAggregator,
)
from .common import (
    RecordVanished,
)
from .profile import (
    ILiveRecordStore,
    IConfirmationPrompt,
)
from .report import (
    format_report,
    format_failure,
)
from .util.attrs_zope import (
    provides,
)
from .util.eliotutil import (
    CHECK_BEFORE_SAVE,
    CHECK_AFTER_CONFIRMATION,
    FIND_CONFLICTS,
)

ALLOW = u"allow"
BLOCK = u"block"
COMMIT = u"commit"
ABORT = u"abort"

ANSWER_YES = u"yes"
ANSWER_NO = u"no"
ANSWER_UNDEFINED = u"undefined"


@attr.s(frozen=True)
class Decision(object):
    """
    What the save workflow should do next.

    :ivar unicode outcome: one of ``ALLOW``, ``BLOCK``, ``COMMIT`` or
        ``ABORT``

    :ivar unicode message: for ``BLOCK``, what to show the operator
    """
    outcome = attr.ib(validator=attr.validators.in_([ALLOW, BLOCK, COMMIT, ABORT]))
    message = attr.ib(default=None, validator=optional(instance_of(str)))

    @property
    def proceed(self):
        """
        ``True`` if the save may go ahead.
        """
        return self.outcome in (ALLOW, COMMIT)


@attr.s(frozen=True)
class SaveItem(object):
    """
    One record version which is about to be saved.
    """
    id = attr.ib(validator=instance_of(UUID))
    language = attr.ib(validator=instance_of(str))
    version = attr.ib(validator=instance_of(int))


@attr.s
class PendingSave(object):
    """
    The state of one save in the surrounding workflow.

    :ivar tuple[SaveItem] items: what is being saved

    :ivar bool is_post_back: ``True`` when the workflow is resuming
        after a confirmation prompt

    :ivar unicode result: the recorded answer on a post-back

    :ivar bool save_animation: whether the workflow should show its
        save-completed feedback

    :ivar bool aborted: the workflow must not complete this save

    :ivar bool waiting_for_post_back: the workflow is suspended until
        the operator answers
    """
    items = attr.ib(converter=tuple, validator=attr.validators.deep_iterable(instance_of(SaveItem)))
    is_post_back = attr.ib(default=False, validator=instance_of(bool))
    result = attr.ib(default=None, validator=optional(instance_of(str)))
    save_animation = attr.ib(default=True)
    aborted = attr.ib(default=False)
    waiting_for_post_back = attr.ib(default=False)
    check = attr.ib(default=None)  # SaveCheck, once one has run

    def abort(self):
        self.save_animation = False
        self.aborted = True

    def wait_for_post_back(self):
        self.waiting_for_post_back = True

    def resume(self, answer):
        """
        The operator answered; the workflow is about to re-enter the
        guard.
        """
        self.waiting_for_post_back = False
        self.is_post_back = True
        self.result = answer


def _existing_record(live_store, item):
    record = live_store.get_record(item.id, item.language, item.version)
    if record is None:
        raise RecordVanished(item.id, item.language, item.version)
    return record


def find_conflicts(live_store, aggregator, items):
    """
    Compare the pre-save state of ``items`` against every profile.

    Any failure at all is logged and reported as a conflict, so an
    internal error can never let a save through unchecked.

    :param ILiveRecordStore live_store: where pre-save state lives

    :param ConflictAggregator aggregator: the configured profiles

    :param items: the ``SaveItem`` instances being saved

    :returns: ``None`` if the save may proceed, otherwise the message
        to show the operator
    """
    with FIND_CONFLICTS(record_count=len(items)):
        try:
            records = [
                _existing_record(live_store, item)
                for item in items
            ]
            return format_report(aggregator.aggregate(records))
        except Exception as e:
            write_traceback()
            return format_failure(e)


def _last_one(things):
    """
    Used as a 'collector' for Automat state transitions; only the final
    output (the Decision) is interesting.
    """
    return list(things)[-1]


@attr.s
class SaveCheck(object):
    """
    The conflict check for a single pending save.

    The state-machine is implemented with Automat; to see it:

        automat-visualize unicorn_guard.guard
    """
    _pending_save = attr.ib(validator=instance_of(PendingSave))
    _prompt = attr.ib(default=None, validator=optional(provides(IConfirmationPrompt)))

    _machine = automat.MethodicalMachine()

    # debug
    set_trace = _machine._setTrace

    def __attrs_post_init__(self):
        def tracer(old_state, the_input, new_state):
            Message.log(
                message_type=u"state_transition",
                old_state=old_state,
                trigger=the_input,
                new_state=new_state,
            )
        self.set_trace(tracer)

    # API methods, used by SaveGuard

    def start(self):
        """
        A check of the pending save is beginning.
        """
        self._check_requested()

    def finish(self, message):
        """
        The check is done.

        :param message: ``None`` if nothing conflicts, otherwise the
            message for the operator

        :returns Decision: ``ALLOW`` or ``BLOCK``
        """
        if message is None:
            return self._no_conflicts()
        return self._conflicts_found(message)

    def answer(self, answer):
        """
        The operator answered the confirmation prompt. Only an explicit
        ``ANSWER_YES`` allows the overwrite.

        :returns Decision: ``COMMIT`` or ``ABORT``
        """
        if answer == ANSWER_YES:
            return self._overwrite_confirmed()
        return self._overwrite_denied()

    def resumed(self):
        """
        The pending save was suspended by a check which is no longer
        available (e.g. a different process asked the question).
        """
        self._post_back_received()

    # state-machine below

    @_machine.state(initial=True)
    def _idle(self):
        """
        Nothing has been checked yet.
        """

    @_machine.state()
    def _checking(self):
        """
        Comparing live records against snapshots.
        """

    @_machine.state()
    def _allowed(self):
        """
        Nothing conflicts; the save proceeds untouched.
        """

    @_machine.state()
    def _awaiting_confirmation(self):
        """
        Conflicts were shown to the operator; the save is suspended.
        """

    @_machine.state()
    def _committed(self):
        """
        The operator chose to overwrite the snapshots anyway.
        """

    @_machine.state()
    def _aborted(self):
        """
        The operator declined (or never answered); the save is aborted.
        """

    @_machine.input()
    def _check_requested(self):
        """
        A save is about to happen.
        """

    @_machine.input()
    def _no_conflicts(self):
        """
        Every in-scope snapshot matches.
        """

    @_machine.input()
    def _conflicts_found(self, message):
        """
        Something conflicts (or the check itself failed).
        """

    @_machine.input()
    def _post_back_received(self):
        """
        The workflow resumed a save suspended elsewhere.
        """

    @_machine.input()
    def _overwrite_confirmed(self):
        """
        The operator said "yes".
        """

    @_machine.input()
    def _overwrite_denied(self):
        """
        The operator said "no", or cancelled.
        """

    @_machine.output()
    def _allow(self):
        return Decision(ALLOW)

    @_machine.output()
    def _ask_operator(self, message):
        self._pending_save.wait_for_post_back()
        if self._prompt is not None:
            self._prompt.confirm(message)

    @_machine.output()
    def _block(self, message):
        return Decision(BLOCK, message)

    @_machine.output()
    def _commit(self):
        return Decision(COMMIT)

    @_machine.output()
    def _abort(self):
        self._pending_save.abort()
        return Decision(ABORT)

    _idle.upon(
        _check_requested,
        enter=_checking,
        outputs=[],
    )
    _idle.upon(
        _post_back_received,
        enter=_awaiting_confirmation,
        outputs=[],
    )
    _checking.upon(
        _no_conflicts,
        enter=_allowed,
        outputs=[_allow],
        collector=_last_one,
    )
    _checking.upon(
        _conflicts_found,
        enter=_awaiting_confirmation,
        outputs=[_ask_operator, _block],
        collector=_last_one,
    )
    _awaiting_confirmation.upon(
        _overwrite_confirmed,
        enter=_committed,
        outputs=[_commit],
        collector=_last_one,
    )
    _awaiting_confirmation.upon(
        _overwrite_denied,
        enter=_aborted,
        outputs=[_abort],
        collector=_last_one,
    )


@attr.s
class SaveGuard(object):
    """
    Prevents a save from unintentionally overwriting a changed
    serialized snapshot.

    For example: user A changes a record and commits the snapshot; user
    B pulls that snapshot but doesn't sync it, then edits the same
    record. Without this guard, B's save would silently discard A's
    change.
    """
    _live_store = attr.ib(validator=provides(ILiveRecordStore))
    _aggregator = attr.ib(validator=instance_of(ConflictAggregator))
    _prompt = attr.ib(default=None, validator=optional(provides(IConfirmationPrompt)))

    @classmethod
    def from_profiles(cls, live_store, profiles, prompt=None):
        """
        :param ILiveRecordStore live_store: where pre-save state lives

        :param profiles: every ``SynchronizationProfile`` to consult

        :param IConfirmationPrompt prompt: shows messages to the operator
        """
        return cls(live_store, ConflictAggregator(profiles), prompt)

    def check_before_save(self, pending_save):
        """
        Check a save that is about to happen.

        :param PendingSave pending_save: the save

        :returns Decision: ``ALLOW`` (nothing touched) or ``BLOCK``, in
            which case ``pending_save`` is waiting for a post-back and
            ``check_after_confirmation`` must be called with the answer.
        """
        with CHECK_BEFORE_SAVE(record_count=len(pending_save.items)) as action:
            check = SaveCheck(pending_save, self._prompt)
            pending_save.check = check
            check.start()
            message = find_conflicts(
                self._live_store,
                self._aggregator,
                pending_save.items,
            )
            decision = check.finish(message)
            action.add_success_fields(outcome=decision.outcome)
        return decision

    def check_after_confirmation(self, pending_save, answer):
        """
        Resume a blocked save with the operator's answer. The check is
        not re-run.

        :param PendingSave pending_save: the save that was blocked

        :param unicode answer: ``ANSWER_YES``, ``ANSWER_NO`` or
            ``ANSWER_UNDEFINED``; anything but ``ANSWER_YES`` aborts

        :returns Decision: ``COMMIT`` or ``ABORT``
        """
        with CHECK_AFTER_CONFIRMATION() as action:
            pending_save.resume(answer)
            check = pending_save.check
            if check is None:
                check = SaveCheck(pending_save, self._prompt)
                pending_save.check = check
                check.resumed()
            decision = check.answer(answer)
            action.add_success_fields(outcome=decision.outcome)
        return decision

    def process(self, pending_save):
        """
        Single entry point for a save workflow: checks a fresh save, or
        acts on the recorded answer of a post-back.

        :returns Decision:
        """
        if pending_save.is_post_back:
            return self.check_after_confirmation(pending_save, pending_save.result)
        return self.check_before_save(pending_save)
