from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from assessment_engine.core.constants import ASSESSMENT_SESSION_COMPLETED, OrgRoleEnum
from assessment_engine.services.session_effects import handle_assessment_session_completed
from tests.helpers import factories
from tests.helpers.asserts import api_call


def test_assessment_full_flow(client: TestClient, db_session: Session, auth_headers, org, creator_context, published_events):
    """
    Creator publishes an assessment, a candidate takes it, the completion
    event issues a certificate and the creator reviews the results.
    """
    creator_headers = auth_headers(creator_context)
    candidate = factories.create_profile(db_session, full_name="Flow Candidate")
    candidate_headers = auth_headers(factories.make_context(candidate, org, OrgRoleEnum.CANDIDATE))
    deck = factories.create_deck(db_session, org, correct_indexes=[0, 1, 2, 3])
    factories.map_deck_to_skill(db_session, org, deck, name="Warehouse")

    created = api_call(client, "POST", "/assessments/", headers=creator_headers, json={
        "title": "Warehouse Induction",
        "deck_id": deck.id,
        "time_limit_minutes": 15,
        "pass_score": 75,
        "question_count": 4,
        "shuffle_questions": True,
        "max_attempts": 2,
    }).json()["data"]
    api_call(client, "POST", f"/assessments/{created['id']}/publish", headers=creator_headers)

    session = api_call(client, "POST", f"/assessments/{created['id']}/sessions", headers=candidate_headers).json()["data"]
    assert sorted(session["question_order"]) == sorted(card.id for card in deck.cards)

    correct_by_id = {card.id: card.correct_index for card in deck.cards}
    questions = api_call(client, "GET", f"/sessions/{session['id']}/questions", headers=candidate_headers).json()["data"]
    # three right, one wrong
    for position, question in enumerate(questions):
        correct = correct_by_id[question["question_id"]]
        selected = correct if position < 3 else (correct + 1) % 4
        api_call(client, "POST", f"/sessions/{session['id']}/answers", headers=candidate_headers, json={
            "question_id": question["question_id"],
            "selected_index": selected,
            "time_spent_seconds": 12.5,
        })

    completion = api_call(client, "POST", f"/sessions/{session['id']}/complete", headers=candidate_headers).json()["data"]
    assert completion == {"score": 75, "passed": True, "total": 4, "correct": 3}

    event_type, event_data = published_events[-1]
    assert event_type == ASSESSMENT_SESSION_COMPLETED
    assert event_data["session_id"] == session["id"]
    handle_assessment_session_completed(event_data)
    db_session.expire_all()

    finished = api_call(client, "GET", f"/sessions/{session['id']}", headers=candidate_headers).json()["data"]
    assert finished["status"] == "completed"
    assert finished["certificate_url"]

    scores = api_call(client, "GET", "/skills/me/scores", headers=candidate_headers).json()["data"]
    assert [(s["score"], s["assessments_taken"]) for s in scores] == [(75.0, 1)]

    results = api_call(client, "GET", f"/assessments/{created['id']}/results", headers=creator_headers).json()["data"]
    assert results["stats"] == {"avg_score": 75, "pass_rate": 100, "total_attempts": 1}

    review = api_call(client, "GET", f"/sessions/{session['id']}/results", headers=candidate_headers).json()["data"]
    assert sum(1 for answer in review["answers"] if answer["is_correct"]) == 3
    assert all(answer["time_spent_seconds"] == 13 for answer in review["answers"])

    second = api_call(client, "POST", f"/assessments/{created['id']}/sessions", headers=candidate_headers).json()["data"]
    api_call(client, "POST", f"/sessions/{second['id']}/complete", headers=candidate_headers)

    blocked = client.post(f"/assessments/{created['id']}/sessions", headers=candidate_headers)
    assert blocked.status_code == 409
    assert blocked.json()["error"]["code"] == "MAX_ATTEMPTS_REACHED"
