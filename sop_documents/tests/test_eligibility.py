"""Action eligibility per (role, document)."""
from __future__ import annotations

import unittest

from sop_documents.dto.controls_state import ActionState
from sop_documents.enum.document_action import DocumentAction as A
from sop_documents.enum.document_status import DocumentStatus as S
from sop_documents.enum.user_role import UserRole as R
from sop_documents.logic.eligibility import action_state, action_states, eligible_actions, visible_actions
from sop_documents.logic.pending_with import DOCUMENT_CREATOR, DOCUMENT_OWNER
from sop_documents.models.document_models import SopDocument


def doc(status: S, **kw) -> SopDocument:
    return SopDocument(id="d1", status=status, sop_name="Cash Handling", **kw)


class TestSignOff(unittest.TestCase):
    def test_pending_statuses_map_to_one_role(self):
        self.assertIn(A.APPROVE, eligible_actions(R.DOCUMENT_CREATOR, doc(S.PENDING_CREATOR_APPROVAL)))
        self.assertIn(A.REJECT, eligible_actions(R.REQUESTER, doc(S.PENDING_REQUESTER_APPROVAL)))
        self.assertIn(A.APPROVE, eligible_actions(R.DOCUMENT_REQUESTER, doc(S.PENDING_REQUESTER_APPROVAL)))
        self.assertIn(A.APPROVE, eligible_actions(R.DOCUMENT_OWNER, doc(S.PENDING_OWNER_APPROVAL)))

        self.assertNotIn(A.APPROVE, eligible_actions(R.DOCUMENT_OWNER, doc(S.PENDING_CREATOR_APPROVAL)))
        self.assertNotIn(A.APPROVE, eligible_actions(R.DOCUMENT_CREATOR, doc(S.PENDING_OWNER_APPROVAL)))

    def test_under_review_follows_pending_party(self):
        reviewed_by_people = doc(S.UNDER_REVIEW, reviewers=("alice",))
        self.assertIn(A.APPROVE, eligible_actions(R.REVIEWER, reviewed_by_people))
        self.assertIn(A.APPROVE, eligible_actions(R.REQUESTER, reviewed_by_people))
        self.assertNotIn(A.APPROVE, eligible_actions(R.DOCUMENT_CREATOR, reviewed_by_people))

        no_reviewers = doc(S.UNDER_REVIEW)
        self.assertIn(A.APPROVE, eligible_actions(R.DOCUMENT_CREATOR, no_reviewers))
        self.assertNotIn(A.APPROVE, eligible_actions(R.REQUESTER, no_reviewers))

    def test_reviewer_waits_while_creator_is_pending(self):
        no_reviewers = doc(S.UNDER_REVIEW)
        actions = eligible_actions(R.REVIEWER, no_reviewers)
        for action in (A.APPROVE, A.REJECT, A.QUERY):
            self.assertNotIn(action, actions)

    def test_owner_step_after_reviewer_sign_off(self):
        d = doc(S.UNDER_REVIEW, reviewers=("alice",), pending_with=DOCUMENT_OWNER)
        self.assertIn(A.APPROVE, eligible_actions(R.DOCUMENT_OWNER, d))
        self.assertNotIn(A.APPROVE, eligible_actions(R.REVIEWER, d))
        self.assertNotIn(A.APPROVE, eligible_actions(R.REQUESTER, d))

    def test_creator_override(self):
        d = doc(S.UNDER_REVIEW, reviewers=("alice",), pending_with=DOCUMENT_CREATOR)
        self.assertIn(A.APPROVE, eligible_actions(R.DOCUMENT_CREATOR, d))
        self.assertNotIn(A.QUERY, eligible_actions(R.REVIEWER, d))

    def test_query_and_review_only_under_review(self):
        d = doc(S.UNDER_REVIEW, reviewers=("alice",))
        actions = eligible_actions(R.REVIEWER, d)
        self.assertIn(A.QUERY, actions)
        self.assertIn(A.REVIEW_DOCUMENT, actions)
        self.assertNotIn(A.QUERY, eligible_actions(R.REVIEWER, doc(S.DRAFT)))


class TestStartReview(unittest.TestCase):
    def test_first_time_live_is_visible_but_disabled(self):
        d = doc(S.LIVE, review_cycle=0)
        for role in (R.DOCUMENT_OWNER, R.DOCUMENT_CONTROLLER):
            self.assertEqual(action_state(role, d, A.START_REVIEW), ActionState.disabled())
            self.assertNotIn(A.START_REVIEW, eligible_actions(role, d))
            self.assertIn(A.START_REVIEW, visible_actions(role, d))

    def test_reviewed_live_is_enabled(self):
        d = doc(S.LIVE, review_cycle=2)
        self.assertEqual(action_state(R.DOCUMENT_OWNER, d, A.START_REVIEW), ActionState.active())

    def test_live_cr_is_disabled(self):
        d = doc(S.LIVE_CR, review_cycle=2)
        for role in (R.DOCUMENT_OWNER, R.DOCUMENT_CONTROLLER):
            self.assertEqual(action_state(role, d, A.START_REVIEW), ActionState.disabled())
            self.assertNotIn(A.START_REVIEW, eligible_actions(role, d))

    def test_complete_change_request_only_on_live_cr(self):
        for role in (R.DOCUMENT_OWNER, R.DOCUMENT_CONTROLLER):
            self.assertIn(A.COMPLETE_CHANGE_REQUEST, eligible_actions(role, doc(S.LIVE_CR)))
            self.assertNotIn(A.COMPLETE_CHANGE_REQUEST, eligible_actions(role, doc(S.LIVE)))
        for role in (R.REVIEWER, R.REQUESTER, R.DOCUMENT_CREATOR):
            self.assertNotIn(A.COMPLETE_CHANGE_REQUEST, eligible_actions(role, doc(S.LIVE_CR)))

    def test_hidden_for_other_roles(self):
        d = doc(S.LIVE, review_cycle=1)
        for role in (R.REVIEWER, R.REQUESTER, R.DOCUMENT_CREATOR, R.ADMIN):
            self.assertEqual(action_state(role, d, A.START_REVIEW), ActionState.hidden())


class TestControllerActions(unittest.TestCase):
    def test_change_status_only_from_approved(self):
        self.assertIn(A.CHANGE_STATUS, eligible_actions(R.DOCUMENT_CONTROLLER, doc(S.APPROVED)))
        self.assertNotIn(A.CHANGE_STATUS, eligible_actions(R.DOCUMENT_CONTROLLER, doc(S.LIVE)))
        self.assertNotIn(A.CHANGE_STATUS, eligible_actions(R.DOCUMENT_OWNER, doc(S.APPROVED)))

    def test_address_query(self):
        self.assertIn(A.ADDRESS_QUERY, eligible_actions(R.DOCUMENT_CONTROLLER, doc(S.QUERIED)))
        self.assertNotIn(A.ADDRESS_QUERY, eligible_actions(R.DOCUMENT_CONTROLLER, doc(S.APPROVED)))

    def test_housekeeping_is_controller_only(self):
        housekeeping = {A.ARCHIVE, A.DELETE, A.SEND_REMINDER}
        for status in S:
            for role in R:
                if role == R.DOCUMENT_CONTROLLER:
                    continue
                self.assertFalse(
                    housekeeping & eligible_actions(role, doc(status)),
                    f"{role.value} on {status.value}",
                )

    def test_send_reminder_not_on_approved(self):
        self.assertNotIn(A.SEND_REMINDER, eligible_actions(R.DOCUMENT_CONTROLLER, doc(S.APPROVED)))
        self.assertIn(A.SEND_REMINDER, eligible_actions(R.DOCUMENT_CONTROLLER, doc(S.UNDER_REVIEW)))

    def test_archive_and_delete(self):
        live = eligible_actions(R.DOCUMENT_CONTROLLER, doc(S.LIVE))
        self.assertTrue({A.ARCHIVE, A.DELETE} <= live)
        self.assertNotIn(A.DELETE, eligible_actions(R.DOCUMENT_CONTROLLER, doc(S.DELETED)))


class TestEdit(unittest.TestCase):
    def test_controller_and_creator_can_edit_open_documents(self):
        for status in (S.DRAFT, S.UNDER_REVIEW, S.LIVE, S.LIVE_CR, S.REJECTED):
            for role in (R.DOCUMENT_CONTROLLER, R.DOCUMENT_CREATOR):
                self.assertIn(A.EDIT, eligible_actions(role, doc(status)), f"{role.value} on {status.value}")

    def test_no_edit_on_approved_or_inactive(self):
        for status in (S.APPROVED, S.ARCHIVED, S.DELETED):
            self.assertEqual(action_state(R.DOCUMENT_CONTROLLER, doc(status), A.EDIT), ActionState.hidden())

    def test_other_roles_cannot_edit(self):
        for role in (R.REVIEWER, R.REQUESTER, R.DOCUMENT_OWNER, R.ADMIN):
            self.assertNotIn(A.EDIT, eligible_actions(role, doc(S.LIVE)))


class TestRestoreAndMisc(unittest.TestCase):
    def test_restore_for_any_role_on_inactive(self):
        for role in R:
            self.assertIn(A.RESTORE, eligible_actions(role, doc(S.ARCHIVED)))
            self.assertIn(A.RESTORE, eligible_actions(role, doc(S.DELETED)))
            self.assertNotIn(A.RESTORE, eligible_actions(role, doc(S.LIVE)))

    def test_upload_revised(self):
        self.assertIn(A.UPLOAD_REVISED, eligible_actions(R.DOCUMENT_OWNER, doc(S.UNDER_REVISION)))
        self.assertNotIn(A.UPLOAD_REVISED, eligible_actions(R.DOCUMENT_CONTROLLER, doc(S.UNDER_REVISION)))

    def test_string_inputs_are_accepted(self):
        self.assertIn(A.CHANGE_STATUS, eligible_actions("document-controller", doc(S.APPROVED)))
        self.assertEqual(action_state("document-controller", doc(S.APPROVED), "changeStatus"), ActionState.active())

    def test_action_states_cover_every_action(self):
        states = action_states(R.ADMIN, doc(S.DRAFT))
        self.assertEqual(set(states), set(A))


if __name__ == "__main__":
    unittest.main()
