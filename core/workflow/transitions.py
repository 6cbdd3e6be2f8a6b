"""
Candidate status transition table.

The table is an immutable value built once at startup and handed to the
workflow engine. A transition is legal only when a rule exists for the exact
``(from, to)`` pair: there are no implicit self transitions and no wildcards.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Iterable, Mapping, Optional

from database.models.responses import CandidateStatus


@dataclass(frozen=True)
class NotificationSettings:
    """Who hears about an applied transition, and with what text."""

    notify_candidate: bool = False
    notify_hiring_manager: bool = False
    email_template: Optional[str] = None


@dataclass(frozen=True)
class TransitionRule:
    """One legal edge of the status graph."""

    from_status: CandidateStatus
    to_status: CandidateStatus
    requires_approval: bool = False
    notification_settings: NotificationSettings = field(
        default_factory=NotificationSettings
    )
    # Named conditions under which the system may apply this rule on its own
    auto_transition_conditions: tuple[str, ...] = ()


class TransitionTable:
    """
    Read-only lookup over a set of transition rules.

    Args:
        rules: Rules keyed internally by ``(from_status, to_status)``. A
            duplicate pair is a configuration error.
    """

    def __init__(self, rules: Iterable[TransitionRule]):
        index: dict[tuple[CandidateStatus, CandidateStatus], TransitionRule] = {}
        for rule in rules:
            key = (rule.from_status, rule.to_status)
            if key in index:
                raise ValueError(
                    f"Duplicate transition rule {rule.from_status.value} -> "
                    f"{rule.to_status.value}"
                )
            index[key] = rule
        self._rules: Mapping[
            tuple[CandidateStatus, CandidateStatus], TransitionRule
        ] = MappingProxyType(index)

    def lookup(
        self, from_status: CandidateStatus, to_status: CandidateStatus
    ) -> Optional[TransitionRule]:
        """Return the rule for the exact pair, or None when the move is illegal."""
        return self._rules.get((CandidateStatus(from_status), CandidateStatus(to_status)))

    def is_allowed(
        self, from_status: CandidateStatus, to_status: CandidateStatus
    ) -> bool:
        return self.lookup(from_status, to_status) is not None

    def auto_rules_from(self, from_status: CandidateStatus) -> list[TransitionRule]:
        """Rules leaving ``from_status`` that the system may apply without a user."""
        return [
            rule
            for rule in self._rules.values()
            if rule.from_status == from_status
            and rule.auto_transition_conditions
            and not rule.requires_approval
        ]

    def targets_from(self, from_status: CandidateStatus) -> list[CandidateStatus]:
        """Statuses reachable in one step from ``from_status``."""
        return [to for (frm, to) in self._rules if frm == from_status]

    @property
    def rules(self) -> tuple[TransitionRule, ...]:
        return tuple(self._rules.values())

    def __len__(self) -> int:
        return len(self._rules)

    def __iter__(self):
        return iter(self._rules.values())


SELECTED_TEMPLATE = "Congratulations! You have been selected for the next round."
REJECTED_TEMPLATE = (
    "Thank you for your interest. We have decided to move forward with other "
    "candidates."
)
ON_HOLD_TEMPLATE = "Your application is currently on hold. We will contact you soon."

ASSESSMENT_COMPLETED = "assessment_completed"


def build_default_transition_table() -> TransitionTable:
    """
    Build the standard hiring workflow.

    ``pending`` is the only initial status. Selecting or rejecting a candidate
    under review needs a human approval; every other edge applies immediately.
    """
    S = CandidateStatus
    return TransitionTable(
        [
            TransitionRule(
                S.PENDING,
                S.IN_REVIEW,
                auto_transition_conditions=(ASSESSMENT_COMPLETED,),
                notification_settings=NotificationSettings(
                    notify_candidate=False, notify_hiring_manager=True
                ),
            ),
            TransitionRule(
                S.IN_REVIEW,
                S.SELECTED,
                requires_approval=True,
                notification_settings=NotificationSettings(
                    notify_candidate=True,
                    notify_hiring_manager=True,
                    email_template=SELECTED_TEMPLATE,
                ),
            ),
            TransitionRule(
                S.IN_REVIEW,
                S.REJECTED,
                requires_approval=True,
                notification_settings=NotificationSettings(
                    notify_candidate=True,
                    notify_hiring_manager=True,
                    email_template=REJECTED_TEMPLATE,
                ),
            ),
            TransitionRule(
                S.IN_REVIEW,
                S.ON_HOLD,
                notification_settings=NotificationSettings(
                    notify_candidate=True,
                    notify_hiring_manager=False,
                    email_template=ON_HOLD_TEMPLATE,
                ),
            ),
            TransitionRule(
                S.ON_HOLD,
                S.IN_REVIEW,
                notification_settings=NotificationSettings(
                    notify_candidate=True, notify_hiring_manager=True
                ),
            ),
            TransitionRule(
                S.SELECTED,
                S.WITHDRAWN,
                notification_settings=NotificationSettings(
                    notify_candidate=False, notify_hiring_manager=True
                ),
            ),
        ]
    )
