"""Tests for the candidate status transition table."""

import itertools

import pytest

from core.workflow.transitions import (
    ASSESSMENT_COMPLETED,
    TransitionRule,
    TransitionTable,
    build_default_transition_table,
)
from database.models.responses import CandidateStatus as S


@pytest.fixture
def table():
    return build_default_transition_table()


EXPECTED_EDGES = {
    (S.PENDING, S.IN_REVIEW),
    (S.IN_REVIEW, S.SELECTED),
    (S.IN_REVIEW, S.REJECTED),
    (S.IN_REVIEW, S.ON_HOLD),
    (S.ON_HOLD, S.IN_REVIEW),
    (S.SELECTED, S.WITHDRAWN),
}


class TestDefaultTable:

    def test_exact_edge_set(self, table):
        assert {(r.from_status, r.to_status) for r in table} == EXPECTED_EDGES

    @pytest.mark.parametrize("from_status,to_status", [
        pair for pair in itertools.product(S, S) if pair not in EXPECTED_EDGES
    ])
    def test_everything_else_is_illegal(self, table, from_status, to_status):
        assert table.lookup(from_status, to_status) is None
        assert not table.is_allowed(from_status, to_status)

    def test_no_self_transitions(self, table):
        assert all(not table.is_allowed(s, s) for s in S)

    @pytest.mark.parametrize("to_status", [S.SELECTED, S.REJECTED])
    def test_final_decisions_need_approval(self, table, to_status):
        assert table.lookup(S.IN_REVIEW, to_status).requires_approval

    def test_rejection_notifies_candidate_with_template(self, table):
        settings = table.lookup(S.IN_REVIEW, S.REJECTED).notification_settings
        assert settings.notify_candidate
        assert settings.notify_hiring_manager
        assert "move forward with other candidates" in settings.email_template

    def test_lookup_accepts_raw_values(self, table):
        assert table.lookup("pending", "in_review") is not None

    def test_terminal_statuses(self, table):
        assert table.targets_from(S.REJECTED) == []
        assert table.targets_from(S.WITHDRAWN) == []

    def test_only_pending_moves_automatically(self, table):
        auto = [rule for s in S for rule in table.auto_rules_from(s)]
        assert [(r.from_status, r.to_status) for r in auto] == [(S.PENDING, S.IN_REVIEW)]
        assert auto[0].auto_transition_conditions == (ASSESSMENT_COMPLETED,)


class TestTransitionTable:

    def test_duplicate_pair_rejected(self):
        with pytest.raises(ValueError, match="Duplicate transition rule"):
            TransitionTable([
                TransitionRule(S.PENDING, S.IN_REVIEW),
                TransitionRule(S.PENDING, S.IN_REVIEW, requires_approval=True),
            ])

    def test_gated_rules_are_never_automatic(self):
        table = TransitionTable([
            TransitionRule(
                S.PENDING,
                S.IN_REVIEW,
                requires_approval=True,
                auto_transition_conditions=(ASSESSMENT_COMPLETED,),
            ),
        ])
        assert table.auto_rules_from(S.PENDING) == []

    def test_table_is_read_only(self):
        table = TransitionTable([TransitionRule(S.PENDING, S.IN_REVIEW)])
        with pytest.raises(TypeError):
            table._rules[(S.IN_REVIEW, S.SELECTED)] = TransitionRule(S.IN_REVIEW, S.SELECTED)

    def test_rules_are_frozen(self):
        rule = TransitionRule(S.PENDING, S.IN_REVIEW)
        with pytest.raises(AttributeError):
            rule.requires_approval = True
