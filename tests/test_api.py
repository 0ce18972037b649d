from datetime import timedelta

import pytest

from conftest import NOON

QUIZ_PAYLOAD = {
    "title": "Capitals",
    "description": "Warm-up",
    "questions": [
        {
            "question_text": "Capital of France?",
            "question_type": "single",
            "options": [
                {"option_text": "Lyon"},
                {"option_text": "Paris", "is_correct": True},
            ],
        },
        {
            "question_text": "Which are capitals?",
            "question_type": "multiple",
            "marks": 3,
            "options": [
                {"option_text": "Bern", "is_correct": True},
                {"option_text": "Oslo", "is_correct": True},
                {"option_text": "Zurich"},
            ],
        },
    ],
}


@pytest.fixture
async def quiz(client):
    response = await client.post("/instructor/quiz/create-quiz", json=QUIZ_PAYLOAD)
    assert response.status_code == 201
    assert response.json()["max_score"] == 4

    response = await client.get(f"/instructor/quiz/quiz-details/{response.json()['id']}")
    assert response.status_code == 200
    return response.json()


@pytest.fixture
async def timed_session(client, quiz):
    response = await client.post(
        "/instructor/session/create-session",
        json={
            "quiz_id": quiz["id"],
            "session_name": "geo",
            "open_from": NOON.isoformat(),
            "open_until": (NOON + timedelta(hours=1)).isoformat(),
        },
    )
    assert response.status_code == 201
    return response.json()


def answers_for(quiz, *picks):
    """picks: one list of option indexes per question."""
    return {
        question["id"]: [question["options"][idx]["id"] for idx in chosen]
        for question, chosen in zip(quiz["questions"], picks)
    }


async def test_full_session_round_trip(client, clock, quiz, timed_session):
    assert timed_session["state"] == "open"

    response = await client.get("/participant/session/open-sessions")
    assert [s["session_name"] for s in response.json()] == ["geo"]

    response = await client.get("/participant/session/geo/quiz")
    assert response.status_code == 200
    participant_view = response.json()
    assert participant_view["title"] == "Capitals"
    assert all(
        "is_correct" not in option
        for question in participant_view["questions"]
        for option in question["options"]
    )

    response = await client.post(
        "/participant/session/geo/submit",
        json={"participant_identity": " ada ", "answers": answers_for(quiz, [1], [0])},
    )
    assert response.status_code == 201
    submitted = response.json()
    # 1 + round(3 * 1/2)
    assert (submitted["score"], submitted["max_score"]) == (3, 4)
    assert set(submitted) == {"result_token", "score", "max_score"}

    response = await client.get(f"/participant/result/{submitted['result_token']}")
    assert response.json()["status"] == "withheld"

    clock.now = NOON + timedelta(hours=2)

    response = await client.get(f"/participant/result/{submitted['result_token']}")
    result = response.json()
    assert result["status"] == "available"
    assert result["participant_identity"] == "ada"
    assert result["quiz_title"] == "Capitals"
    assert [q["points"] for q in result["questions"]] == [1, 2]

    response = await client.get("/instructor/session/statistics/geo")
    stats = response.json()
    assert stats["participant_count"] == 1
    assert stats["average_score"] == 3
    assert [q["correct_count"] for q in stats["per_question"]] == [1, 0]

    response = await client.get("/instructor/session/submissions/geo")
    assert [s["participant_identity"] for s in response.json()] == ["ada"]

    response = await client.get("/instructor/session/session-details/geo")
    assert response.json()["state"] == "closed"


async def test_duplicate_submission_is_a_conflict(client, quiz, timed_session):
    payload = {"participant_identity": "ada", "answers": {}}
    assert (await client.post("/participant/session/geo/submit", json=payload)).status_code == 201

    response = await client.post("/participant/session/geo/submit", json=payload)

    assert response.status_code == 409
    body = response.json()
    assert body["kind"] == "conflict"
    assert body["detail"] == "You have already participated in this quiz (geo)"


async def test_closed_session_is_forbidden(client, clock, quiz, timed_session):
    clock.now = NOON + timedelta(hours=1, seconds=1)

    response = await client.post(
        "/participant/session/geo/submit", json={"participant_identity": "ada", "answers": {}}
    )

    assert response.status_code == 403
    body = response.json()
    assert body["kind"] == "session_not_open"
    assert body["details"]["state"] == "closed"

    response = await client.get("/participant/session/geo/quiz")
    assert response.status_code == 403


async def test_foreign_option_is_an_invalid_answer(client, quiz, timed_session):
    first, second = quiz["questions"]
    response = await client.post(
        "/participant/session/geo/submit",
        json={
            "participant_identity": "ada",
            "answers": {first["id"]: [second["options"][0]["id"]]},
        },
    )

    assert response.status_code == 400
    assert response.json()["kind"] == "invalid_answer"

    response = await client.get("/instructor/session/submissions/geo")
    assert response.json() == []


@pytest.mark.parametrize("identity", ["", "   ", "ada;drop", "x" * 101])
async def test_malformed_identity_is_rejected(client, quiz, timed_session, identity):
    response = await client.post(
        "/participant/session/geo/submit",
        json={"participant_identity": identity, "answers": {}},
    )
    assert response.status_code == 422


async def test_unknown_resources_are_not_found(client):
    response = await client.post(
        "/participant/session/nope/submit", json={"participant_identity": "ada", "answers": {}}
    )
    assert response.status_code == 404
    assert response.json()["kind"] == "not_found"

    response = await client.get("/participant/result/" + "0" * 32)
    assert response.status_code == 404


async def test_invalid_quiz_definition_is_rejected(client):
    payload = {
        "title": "Broken",
        "questions": [
            {
                "question_text": "Pick one",
                "question_type": "single",
                "options": [
                    {"option_text": "a", "is_correct": True},
                    {"option_text": "b", "is_correct": True},
                ],
            }
        ],
    }

    response = await client.post("/instructor/quiz/create-quiz", json=payload)

    assert response.status_code == 400
    assert response.json()["kind"] == "invalid_input"
    assert response.json()["details"]["question_index"] == 0


async def test_session_window_must_not_end_before_it_starts(client, quiz):
    response = await client.post(
        "/instructor/session/create-session",
        json={
            "quiz_id": quiz["id"],
            "open_from": NOON.isoformat(),
            "open_until": (NOON - timedelta(minutes=5)).isoformat(),
        },
    )
    assert response.status_code == 400


async def test_deleting_the_quiz_keeps_the_session(client, quiz, timed_session):
    response = await client.delete(f"/instructor/quiz/delete-quiz/{quiz['id']}")
    assert response.status_code == 204

    response = await client.get("/instructor/session/session-details/geo")
    assert response.status_code == 200

    response = await client.post(
        "/participant/session/geo/submit", json={"participant_identity": "ada", "answers": {}}
    )
    assert response.status_code == 404


async def test_delete_session(client, quiz, timed_session):
    await client.post(
        "/participant/session/geo/submit", json={"participant_identity": "ada", "answers": {}}
    )

    response = await client.delete("/instructor/session/delete-session/geo")
    assert response.status_code == 204

    response = await client.get("/instructor/session/session-details/geo")
    assert response.status_code == 404


async def test_replaced_quiz_keeps_earlier_results(client, clock, quiz, timed_session):
    response = await client.post(
        "/participant/session/geo/submit",
        json={"participant_identity": "ada", "answers": answers_for(quiz, [1], [0, 1])},
    )
    token = response.json()["result_token"]

    replacement = {
        "title": "Capitals v2",
        "questions": [QUIZ_PAYLOAD["questions"][0]],
    }
    response = await client.put(f"/instructor/quiz/replace-quiz/{quiz['id']}", json=replacement)
    assert response.status_code == 200
    assert response.json()["question_count"] == 1

    response = await client.get(f"/instructor/quiz/quiz-details/{quiz['id']}")
    assert len(response.json()["questions"]) == 1

    clock.now = NOON + timedelta(hours=2)
    result = (await client.get(f"/participant/result/{token}")).json()
    assert (result["score"], result["max_score"]) == (4, 4)
    assert len(result["questions"]) == 2


async def test_blank_session_name_is_rejected(client, quiz):
    response = await client.post(
        "/instructor/session/create-session",
        json={"quiz_id": quiz["id"], "session_name": "   "},
    )
    assert response.status_code == 422


async def test_list_quizzes(client, quiz):
    response = await client.get("/instructor/quiz/list-quizzes")

    assert response.status_code == 200
    assert response.json() == [
        {
            "id": quiz["id"],
            "title": "Capitals",
            "description": "Warm-up",
            "question_count": 2,
            "max_score": 4,
            "created_at": response.json()[0]["created_at"],
        }
    ]
