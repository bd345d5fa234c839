from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from assessment_engine.core.constants import ASSESSMENT_SESSION_COMPLETED, OrgRoleEnum
from tests.helpers import factories
from tests.helpers.asserts import api_call, assert_error


class TestSessionEndpoints:
    def _start(self, client, headers, assessment_id):
        response = api_call(client, "POST", f"/assessments/{assessment_id}/sessions", headers=headers)
        return response.json()["data"]

    def test_start_session(self, client: TestClient, auth_headers, candidate_context, published_assessment, deck):
        response = client.post(
            f"/assessments/{published_assessment.id}/sessions",
            headers={**auth_headers(candidate_context), "X-Forwarded-For": "203.0.113.9, 10.0.0.1"},
        )

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["status"] == "in_progress"
        assert data["question_order"] == [card.id for card in deck.cards]
        assert data["ip_address"] == "203.0.113.9"

    def test_start_session_is_idempotent(self, client: TestClient, auth_headers, candidate_context, published_assessment):
        headers = auth_headers(candidate_context)

        first = self._start(client, headers, published_assessment.id)
        second = self._start(client, headers, published_assessment.id)

        assert first["id"] == second["id"]

    def test_start_session_with_wrong_access_code(self, client: TestClient, db_session: Session, auth_headers, org, deck, creator, candidate_context):
        gated = factories.create_assessment(db_session, org, deck, creator, access_code="OPEN-SESAME")

        response = client.post(
            f"/assessments/{gated.id}/sessions",
            headers=auth_headers(candidate_context),
            json={"access_code": "open-sesame"},
        )

        assert_error(response, 403, "INVALID_ACCESS_CODE")

    def test_start_session_with_access_code(self, client: TestClient, db_session: Session, auth_headers, org, deck, creator, candidate_context):
        gated = factories.create_assessment(db_session, org, deck, creator, access_code="OPEN-SESAME")

        response = client.post(
            f"/assessments/{gated.id}/sessions",
            headers=auth_headers(candidate_context),
            json={"access_code": "OPEN-SESAME"},
        )

        assert response.status_code == 201

    def test_cooldown_is_locked(self, client: TestClient, db_session: Session, auth_headers, org, deck, creator, candidate_context):
        assessment = factories.create_assessment(db_session, org, deck, creator, cooldown_minutes=30)
        headers = auth_headers(candidate_context)
        session = self._start(client, headers, assessment.id)
        api_call(client, "POST", f"/sessions/{session['id']}/complete", headers=headers)

        response = client.post(f"/assessments/{assessment.id}/sessions", headers=headers)

        error = assert_error(response, 423, "COOLDOWN_ACTIVE")
        assert error["details"]["minutes_left"] == 30

    def test_questions_hide_correct_answers(self, client: TestClient, auth_headers, candidate_context, published_assessment):
        headers = auth_headers(candidate_context)
        session = self._start(client, headers, published_assessment.id)

        response = api_call(client, "GET", f"/sessions/{session['id']}/questions", headers=headers)

        questions = response.json()["data"]
        assert [q["question_id"] for q in questions] == session["question_order"]
        assert all("correct_index" not in q for q in questions)

    def test_submit_answer_and_resume(self, client: TestClient, auth_headers, candidate_context, published_assessment, deck):
        headers = auth_headers(candidate_context)
        session = self._start(client, headers, published_assessment.id)
        card = deck.cards[1]

        response = api_call(
            client,
            "POST",
            f"/sessions/{session['id']}/answers",
            headers=headers,
            json={"question_id": card.id, "selected_index": card.correct_index, "time_remaining_seconds": 540},
        )
        assert response.json()["data"] == {"is_correct": True}

        answers = api_call(client, "GET", f"/sessions/{session['id']}/answers", headers=headers).json()["data"]
        assert answers == [{"question_id": card.id, "selected_index": card.correct_index}]

        refreshed = api_call(client, "GET", f"/sessions/{session['id']}", headers=headers).json()["data"]
        assert refreshed["time_remaining_seconds"] == 540

    def test_submit_answer_for_foreign_question(self, client: TestClient, db_session: Session, auth_headers, org, candidate_context, published_assessment):
        headers = auth_headers(candidate_context)
        session = self._start(client, headers, published_assessment.id)
        other_card = factories.create_deck(db_session, org, correct_indexes=[2]).cards[0]

        response = client.post(
            f"/sessions/{session['id']}/answers",
            headers=headers,
            json={"question_id": other_card.id, "selected_index": 2},
        )

        assert_error(response, 400, "QUESTION_NOT_IN_SESSION")

    def test_submit_answer_rejects_negative_index(self, client: TestClient, auth_headers, candidate_context, published_assessment, deck):
        headers = auth_headers(candidate_context)
        session = self._start(client, headers, published_assessment.id)

        response = client.post(
            f"/sessions/{session['id']}/answers",
            headers=headers,
            json={"question_id": deck.cards[0].id, "selected_index": -1},
        )

        error = assert_error(response, 422, "VALIDATION_ERROR")
        assert error["details"]["validation_errors"]

    def test_complete_session(self, client: TestClient, auth_headers, candidate_context, published_assessment, deck, published_events):
        headers = auth_headers(candidate_context)
        session = self._start(client, headers, published_assessment.id)
        for card in deck.cards:
            api_call(
                client,
                "POST",
                f"/sessions/{session['id']}/answers",
                headers=headers,
                json={"question_id": card.id, "selected_index": card.correct_index},
            )

        response = api_call(client, "POST", f"/sessions/{session['id']}/complete", headers=headers)

        assert response.json()["data"] == {"score": 100, "passed": True, "total": 2, "correct": 2}
        assert [event for event, _ in published_events] == [ASSESSMENT_SESSION_COMPLETED]

        again = client.post(f"/sessions/{session['id']}/complete", headers=headers)
        assert_error(again, 409, "ALREADY_COMPLETED")

    def test_results_and_percentile_after_completion(self, client: TestClient, auth_headers, candidate_context, published_assessment):
        headers = auth_headers(candidate_context)
        session = self._start(client, headers, published_assessment.id)

        pending = client.get(f"/sessions/{session['id']}/percentile", headers=headers)
        assert_error(pending, 409, "NOT_SCORED")

        api_call(client, "POST", f"/sessions/{session['id']}/complete", headers=headers)

        percentile = api_call(client, "GET", f"/sessions/{session['id']}/percentile", headers=headers).json()["data"]
        assert percentile == {"percentile": 100, "rank": 1, "total_sessions": 1}

        results = api_call(client, "GET", f"/sessions/{session['id']}/results", headers=headers).json()["data"]
        assert results["session"]["score"] == 0
        assert len(results["answers"]) == 2

    def test_tab_switch_and_violations(self, client: TestClient, auth_headers, candidate_context, creator_context, published_assessment):
        headers = auth_headers(candidate_context)
        session = self._start(client, headers, published_assessment.id)

        api_call(client, "POST", f"/sessions/{session['id']}/tab-switch", headers=headers)
        api_call(client, "POST", f"/sessions/{session['id']}/tab-switch", headers=headers)

        forbidden = client.get(f"/sessions/{session['id']}/violations", headers=headers)
        assert_error(forbidden, 403, "FORBIDDEN")

        violations = api_call(
            client, "GET", f"/sessions/{session['id']}/violations", headers=auth_headers(creator_context)
        ).json()["data"]
        assert violations["tab_switch_count"] == 2
        assert [entry["type"] for entry in violations["tab_switch_log"]] == ["tab_hidden", "tab_hidden"]

    def test_other_candidates_cannot_read_session(self, client: TestClient, db_session: Session, auth_headers, org, candidate_context, published_assessment):
        session = self._start(client, auth_headers(candidate_context), published_assessment.id)
        other = factories.make_context(factories.create_profile(db_session), org, OrgRoleEnum.CANDIDATE)

        response = client.get(f"/sessions/{session['id']}", headers=auth_headers(other))

        assert_error(response, 404, "NOT_FOUND")

    def test_expire_stale_sessions(self, client: TestClient, auth_headers, creator_context):
        response = api_call(client, "POST", "/sessions/expire", headers=auth_headers(creator_context))
        assert response.json()["data"]["expired_count"] >= 0

    def test_missing_token_is_rejected(self, client: TestClient, published_assessment):
        response = client.post(f"/assessments/{published_assessment.id}/sessions")
        assert response.status_code in (401, 403)

    def test_invalid_token_is_rejected(self, client: TestClient, published_assessment):
        response = client.post(
            f"/assessments/{published_assessment.id}/sessions",
            headers={"Authorization": "Bearer not-a-token"},
        )
        assert_error(response, 401, "UNAUTHORIZED")

    def test_my_sessions(self, client: TestClient, auth_headers, candidate_context, published_assessment):
        headers = auth_headers(candidate_context)
        session = self._start(client, headers, published_assessment.id)

        response = api_call(client, "GET", "/sessions/me", headers=headers)

        data = response.json()["data"]
        assert [s["id"] for s in data] == [session["id"]]
        assert data[0]["assessment_title"] == published_assessment.title
        assert data[0]["total_questions"] == 2
