"""Tests for scoring and recording submissions over HTTP."""
import pytest

RECYCLING = {"type": "recycling", "items": [{"category": "metal", "quantity": 2}, {"category": "plastic", "quantity": 3}]}
BIKE_RIDE = {"type": "carbon", "trips": [{"mode": "bike", "distance_km": 4.2}]}


def submit(client, headers, challenge_id, payload):
    return client.post("/api/submissions/", json={"challenge_id": challenge_id, "payload": payload}, headers=headers)


@pytest.fixture
def recycling_challenge(make_challenge):
    return make_challenge("recycling")


@pytest.fixture
def carbon_challenge(make_challenge):
    return make_challenge("carbon")


@pytest.fixture
def shower_challenge(make_challenge):
    return make_challenge("shower")


class TestCreateSubmission:
    def test_scores_and_updates_totals(self, client, recycling_challenge, bob):
        resp = submit(client, bob, recycling_challenge["id"], RECYCLING)
        assert resp.status_code == 201, resp.text
        data = resp.json()
        assert data["submission"]["score"] == 27
        assert data["submission"]["type"] == "recycling"
        assert data["formatted_score"] == "27"
        assert data["total_score"] == 27
        assert data["level"] == 1
        assert data["level_progress"] == pytest.approx(27)
        assert "first_submission" in data["unlocked_achievements"]

        me = client.get("/api/users/me", headers=bob).json()
        assert me["total_score"] == 27
        assert me["achievements"] == ["first_submission"]

    def test_recycling_score_is_capped(self, client, recycling_challenge, bob):
        payload = {"type": "recycling", "items": [{"category": "metal", "quantity": 30}]}
        data = submit(client, bob, recycling_challenge["id"], payload).json()
        assert data["submission"]["score"] == 100
        assert "zero_waste_hero" in data["unlocked_achievements"]

    def test_crew_score_accumulates(self, client, crew, recycling_challenge, alice, bob):
        submit(client, alice, recycling_challenge["id"], RECYCLING)
        submit(client, bob, recycling_challenge["id"], RECYCLING)
        assert client.get(f"/api/crews/{crew['id']}", headers=alice).json()["score"] == 54

    def test_concurrent_sessions_do_not_lose_score(self, db_session, crew, recycling_challenge, clock):
        from api.crews.crews_model import Crew
        from api.submissions.submissions_service import SubmissionService
        from api.user.user_model import User
        from config.database import SessionLocal
        from scoring.payloads import RecyclingPayload

        payload = RecyclingPayload.model_validate(RECYCLING)
        first, second = SessionLocal(), SessionLocal()
        try:
            # second worker holds copies loaded before the first one commits
            assert second.get(Crew, crew["id"]).score == 0
            assert second.get(User, "bob").total_score == 0
            SubmissionService(first, clock=clock).create_submission("bob", recycling_challenge["id"], payload)
            SubmissionService(second, clock=clock).create_submission("bob", recycling_challenge["id"], payload)
        finally:
            first.close()
            second.close()

        db_session.expire_all()
        assert db_session.get(Crew, crew["id"]).score == 54
        bob = db_session.get(User, "bob")
        assert bob.total_score == 54
        assert bob.level_progress == pytest.approx(54)

    def test_empty_payload_rejected(self, client, carbon_challenge, bob):
        resp = submit(client, bob, carbon_challenge["id"], {"type": "carbon", "trips": []})
        assert resp.status_code == 422
        assert resp.json()["detail"] == {"code": "INVALID_SUBMISSION", "message": "Please add at least one trip"}

    def test_payload_must_match_challenge_type(self, client, carbon_challenge, bob):
        resp = submit(client, bob, carbon_challenge["id"], RECYCLING)
        assert resp.status_code == 422
        assert resp.json()["detail"]["code"] == "TYPE_MISMATCH"

    def test_unknown_payload_type(self, client, carbon_challenge, bob):
        resp = submit(client, bob, carbon_challenge["id"], {"type": "flights", "legs": []})
        assert resp.status_code == 422

    def test_fields_from_other_types_rejected(self, client, shower_challenge, bob):
        payload = {"type": "shower", "duration_minutes": 4, "items": [{"category": "metal", "quantity": 1}]}
        assert submit(client, bob, shower_challenge["id"], payload).status_code == 422

    def test_non_members_rejected(self, client, carbon_challenge, carol):
        assert submit(client, carol, carbon_challenge["id"], BIKE_RIDE).status_code == 403

    def test_closed_challenge_rejected(self, client, carbon_challenge, alice, bob):
        client.post(f"/api/challenges/{carbon_challenge['id']}/close", json={}, headers=alice)
        resp = submit(client, bob, carbon_challenge["id"], BIKE_RIDE)
        assert resp.status_code == 422
        assert resp.json()["detail"]["code"] == "CHALLENGE_INACTIVE"

    def test_unknown_challenge(self, client, crew, bob):
        assert submit(client, bob, "missing", BIKE_RIDE).status_code == 404


class TestLimits:
    def test_rejected_attempts_do_not_use_the_window(self, client, recycling_challenge, limiter, bob):
        full_day = {"type": "recycling", "items": [{"category": "paper", "quantity": 100}]}
        assert submit(client, bob, recycling_challenge["id"], full_day).status_code == 201
        for _ in range(6):
            resp = submit(client, bob, recycling_challenge["id"], {"type": "recycling", "items": [{"category": "glass", "quantity": 1}]})
            assert resp.status_code == 422
            assert resp.json()["detail"]["code"] == "DAILY_LIMIT_REACHED"
        key = limiter.submission_key("bob", recycling_challenge["id"])
        assert len(limiter._hits[key]) == 1

    def test_rate_limit_per_user_and_challenge(self, client, carbon_challenge, recycling_challenge, clock, bob):
        for _ in range(5):
            assert submit(client, bob, carbon_challenge["id"], BIKE_RIDE).status_code == 201
        resp = submit(client, bob, carbon_challenge["id"], BIKE_RIDE)
        assert resp.status_code == 429
        assert resp.headers["X-RateLimit-Limit"] == "5"
        assert resp.headers["X-RateLimit-Remaining"] == "0"
        assert int(resp.headers["Retry-After"]) >= 1

        # other challenges are unaffected
        assert submit(client, bob, recycling_challenge["id"], RECYCLING).status_code == 201

        clock.advance(seconds=61)
        assert submit(client, bob, carbon_challenge["id"], BIKE_RIDE).status_code == 201

    def test_shower_daily_caps(self, client, shower_challenge, clock, bob):
        for minutes in (4, 8, 12):
            assert submit(client, bob, shower_challenge["id"], {"type": "shower", "duration_minutes": minutes}).status_code == 201
        resp = submit(client, bob, shower_challenge["id"], {"type": "shower", "duration_minutes": 3})
        assert resp.status_code == 422
        assert resp.json()["detail"]["code"] == "DAILY_LIMIT_REACHED"

        assert submit(client, bob, shower_challenge["id"], {"type": "shower", "skipped": True}).status_code == 201
        assert submit(client, bob, shower_challenge["id"], {"type": "shower", "skipped": True}).status_code == 422

        clock.advance(days=1)
        assert submit(client, bob, shower_challenge["id"], {"type": "shower", "duration_minutes": 3}).status_code == 201

    def test_recycling_daily_item_cap(self, client, recycling_challenge, bob):
        sixty = {"type": "recycling", "items": [{"category": "paper", "quantity": 60}]}
        assert submit(client, bob, recycling_challenge["id"], sixty).status_code == 201
        too_many = {"type": "recycling", "items": [{"category": "paper", "quantity": 41}]}
        assert submit(client, bob, recycling_challenge["id"], too_many).status_code == 422
        enough = {"type": "recycling", "items": [{"category": "paper", "quantity": 40}]}
        assert submit(client, bob, recycling_challenge["id"], enough).status_code == 201


class TestReadAndDelete:
    def test_list_mine_paginates(self, client, carbon_challenge, clock, bob):
        ids = []
        for _ in range(3):
            ids.append(submit(client, bob, carbon_challenge["id"], BIKE_RIDE).json()["submission"]["id"])
            clock.advance(seconds=1)
        assert [s["id"] for s in client.get("/api/submissions/mine", headers=bob).json()] == ids[::-1]
        page = client.get("/api/submissions/mine?limit=1&offset=1", headers=bob).json()
        assert [s["id"] for s in page] == [ids[1]]
        assert client.get("/api/submissions/mine?limit=1&sort_by=nope", headers=bob).status_code == 422

    def test_visibility(self, client, carbon_challenge, alice, bob, carol):
        submission_id = submit(client, bob, carbon_challenge["id"], BIKE_RIDE).json()["submission"]["id"]
        assert client.get(f"/api/submissions/{submission_id}", headers=alice).status_code == 200
        assert client.get(f"/api/submissions/{submission_id}", headers=carol).status_code == 403

    def test_meal_breakdown(self, client, make_challenge, bob):
        challenge = make_challenge("food")
        payload = {
            "type": "food",
            "items": [
                {"name": "Porridge", "category": "dairy", "quantity": 1, "meal_type": "breakfast"},
                {"name": "Beef stew", "category": "meat", "quantity": 2, "meal_type": "dinner"},
            ],
        }
        data = submit(client, bob, challenge["id"], payload).json()
        assert data["submission"]["score"] == pytest.approx((20 - 6.5) * 5)

        meals = client.get(f"/api/submissions/{data['submission']['id']}/meals", headers=bob).json()
        by_meal = {m["meal_type"]: m for m in meals["meals"]}
        assert by_meal["breakfast"]["footprint_kg"] == 1.5
        assert by_meal["dinner"]["formatted"] == "5.0kg"
        assert by_meal["lunch"]["formatted"] == "0g"
        assert meals["total_kg"] == 6.5

    def test_meals_only_for_food(self, client, carbon_challenge, bob):
        submission_id = submit(client, bob, carbon_challenge["id"], BIKE_RIDE).json()["submission"]["id"]
        assert client.get(f"/api/submissions/{submission_id}/meals", headers=bob).status_code == 400

    def test_delete_recomputes_totals(self, client, recycling_challenge, alice, bob):
        first = submit(client, bob, recycling_challenge["id"], RECYCLING).json()["submission"]["id"]
        submit(client, bob, recycling_challenge["id"], {"type": "recycling", "items": [{"category": "glass", "quantity": 1}]})

        assert client.delete(f"/api/submissions/{first}", headers=alice).status_code == 403
        resp = client.delete(f"/api/submissions/{first}", headers=bob)
        assert resp.status_code == 200
        assert client.get("/api/users/me", headers=bob).json()["total_score"] == 3
        assert client.get(f"/api/submissions/{first}", headers=bob).status_code == 404

    def test_carbon_submissions_are_permanent(self, client, carbon_challenge, bob):
        submission_id = submit(client, bob, carbon_challenge["id"], BIKE_RIDE).json()["submission"]["id"]
        assert client.delete(f"/api/submissions/{submission_id}", headers=bob).status_code == 400


class TestPreview:
    def test_preview_does_not_persist(self, client, bob):
        payload = {"type": "recycling", "items": [{"category": "metal", "quantity": 30}]}
        data = client.post("/api/submissions/preview", json={"payload": payload}, headers=bob).json()
        assert data["raw_score"] == 180
        assert data["score"] == 100
        assert data["footprint_kg"] is None
        assert client.get("/api/submissions/mine", headers=bob).json() == []

    def test_preview_carbon_footprint(self, client, bob):
        payload = {"type": "carbon", "trips": [{"mode": "car", "distance_km": 10}, {"mode": "walk", "distance_km": 1}]}
        data = client.post("/api/submissions/preview", json={"payload": payload}, headers=bob).json()
        assert data["score"] == 10
        assert data["footprint_kg"] == pytest.approx(1.2)

    def test_preview_validates(self, client, bob):
        resp = client.post("/api/submissions/preview", json={"payload": {"type": "shower"}}, headers=bob)
        assert resp.status_code == 422
