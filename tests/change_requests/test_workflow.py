"""Tests for the pure transition function."""

import pytest

from pmo_approvals.change_requests.types import (
    ChangeRequestStatus as S,
    ChangeRequestType as T,
    ReturnTarget,
    ReviewAction as A,
)
from pmo_approvals.change_requests.workflow import next_transition
from pmo_approvals.errors import InvalidTransitionError, ValidationError
from pmo_approvals.permissions.types import Role


NON_FACULTY = [t for t in T if t is not T.FACULTY]
ACTIVE = [S.PENDING, S.PENDING_MAIN_PMO]
TERMINAL = [S.APPROVED, S.REJECTED]


class TestApprove:
    @pytest.mark.parametrize("status", ACTIVE)
    @pytest.mark.parametrize("role", list(Role) + [None])
    def test_faculty_always_approved(self, status, role):
        t = next_transition(status, T.FACULTY, A.APPROVE, role)
        assert t.new_status is S.APPROVED

    @pytest.mark.parametrize("request_type", NON_FACULTY)
    def test_sub_pmo_escalates_pending(self, request_type):
        t = next_transition(S.PENDING, request_type, A.APPROVE, Role.SUB_PMO)
        assert t.new_status is S.PENDING_MAIN_PMO
        assert t.changed

    @pytest.mark.parametrize("request_type", NON_FACULTY)
    @pytest.mark.parametrize("role", [Role.SUB_PMO, Role.MAIN_PMO, Role.ADMINISTRATOR, Role.DEPARTMENT_DIRECTOR])
    def test_pending_main_pmo_approved(self, request_type, role):
        t = next_transition(S.PENDING_MAIN_PMO, request_type, A.APPROVE, role)
        assert t.new_status is S.APPROVED

    @pytest.mark.parametrize("role", [Role.MAIN_PMO, Role.ADMINISTRATOR, Role.DEPARTMENT_DIRECTOR])
    def test_other_approvers_approve_directly(self, role):
        t = next_transition(S.PENDING, T.SCOPE, A.APPROVE, role)
        assert t.new_status is S.APPROVED

    @pytest.mark.parametrize("status", [S.RETURNED_TO_PROJECT_MANAGER, S.RETURNED_TO_SUB_PMO])
    def test_returned_cannot_be_approved(self, status):
        with pytest.raises(InvalidTransitionError):
            next_transition(status, T.BUDGET, A.APPROVE, Role.MAIN_PMO)


class TestReject:
    @pytest.mark.parametrize("reason", [None, "", "   "])
    def test_reason_required(self, reason):
        with pytest.raises(ValidationError):
            next_transition(S.PENDING, T.BUDGET, A.REJECT, Role.MAIN_PMO,
                            rejection_reason=reason, return_to=ReturnTarget.SUB_PMO)

    @pytest.mark.parametrize("return_to", [None, ReturnTarget.PROJECT_MANAGER, ReturnTarget.SUB_PMO])
    @pytest.mark.parametrize("status", ACTIVE)
    def test_sub_pmo_always_returns_to_project_manager(self, return_to, status):
        t = next_transition(status, T.BUDGET, A.REJECT, Role.SUB_PMO,
                            rejection_reason="incomplete", return_to=return_to)
        assert t.new_status is S.RETURNED_TO_PROJECT_MANAGER

    def test_return_to_sub_pmo(self):
        t = next_transition(S.PENDING, T.BUDGET, A.REJECT, Role.MAIN_PMO,
                            rejection_reason="insufficient budget detail",
                            return_to=ReturnTarget.SUB_PMO)
        assert t.new_status is S.RETURNED_TO_SUB_PMO
        assert t.rejection_reason == "insufficient budget detail"

    def test_no_return_target_is_terminal(self):
        t = next_transition(S.PENDING_MAIN_PMO, T.CLOSURE, A.REJECT, Role.ADMINISTRATOR,
                            rejection_reason="not viable")
        assert t.new_status is S.REJECTED

    def test_reason_is_trimmed(self):
        t = next_transition(S.PENDING, T.BUDGET, A.REJECT, Role.MAIN_PMO,
                            rejection_reason="  too vague  ", return_to=ReturnTarget.PROJECT_MANAGER)
        assert t.rejection_reason == "too vague"


class TestResubmit:
    @pytest.mark.parametrize("status", [S.RETURNED_TO_PROJECT_MANAGER, S.RETURNED_TO_SUB_PMO])
    def test_returned_goes_back_to_pending(self, status):
        t = next_transition(status, T.BUDGET, A.RESUBMIT, Role.PROJECT_MANAGER)
        assert t.new_status is S.PENDING
        assert t.rejection_reason is None

    @pytest.mark.parametrize("status", ACTIVE)
    def test_active_cannot_be_resubmitted(self, status):
        with pytest.raises(InvalidTransitionError):
            next_transition(status, T.BUDGET, A.RESUBMIT, Role.PROJECT_MANAGER)


class TestTerminal:
    @pytest.mark.parametrize("status", TERMINAL)
    @pytest.mark.parametrize("action", list(A))
    def test_terminal_states_reject_every_action(self, status, action):
        with pytest.raises(InvalidTransitionError) as exc_info:
            next_transition(status, T.BUDGET, action, Role.ADMINISTRATOR,
                            rejection_reason="again", return_to=ReturnTarget.SUB_PMO)
        assert exc_info.value.current_status == status.value

    def test_invalid_transition_is_a_validation_error(self):
        with pytest.raises(ValidationError):
            next_transition(S.APPROVED, T.BUDGET, A.APPROVE, Role.MAIN_PMO)
