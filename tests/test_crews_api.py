"""Tests for the crews endpoints."""


class TestCreateAndJoin:
    def test_creator_becomes_leader_and_member(self, client, alice):
        resp = client.post("/api/crews/", json={"name": "Green Team"}, headers=alice)
        assert resp.status_code == 201
        data = resp.json()
        assert data["leader_id"] == "alice"
        assert data["member_count"] == 1
        assert len(data["join_code"]) == 6

        mine = client.get("/api/crews/mine", headers=alice).json()
        assert mine["id"] == data["id"]
        assert mine["members"][0]["is_leader"] is True

    def test_join_code_is_case_insensitive(self, client, crew, bob):
        detail = client.get(f"/api/crews/{crew['id']}", headers=bob).json()
        assert {m["user_id"] for m in detail["members"]} == {"alice", "bob"}

    def test_join_code_hidden_from_non_members(self, client, crew, carol):
        resp = client.get(f"/api/crews/{crew['id']}", headers=carol)
        assert resp.status_code == 200
        assert resp.json()["join_code"] is None

    def test_one_crew_per_user(self, client, crew, alice, bob):
        assert client.post("/api/crews/", json={"name": "Second crew"}, headers=alice).status_code == 409
        assert client.post("/api/crews/join", json={"join_code": crew["join_code"]}, headers=bob).status_code == 409

    def test_unknown_join_code(self, client, crew, carol):
        assert client.post("/api/crews/join", json={"join_code": "ZZZZZZ"}, headers=carol).status_code == 404

    def test_short_description_rejected(self, client, carol):
        resp = client.post("/api/crews/", json={"name": "Blue Team", "description": "tiny"}, headers=carol)
        assert resp.status_code == 422
        assert resp.json()["detail"]["code"] == "INVALID_FIELD"

    def test_requires_token(self, client):
        assert client.get("/api/crews/").status_code in (401, 403)


class TestMembership:
    def test_leader_cannot_leave(self, client, crew, alice):
        assert client.post(f"/api/crews/{crew['id']}/leave", headers=alice).status_code == 400

    def test_member_leaves(self, client, crew, bob):
        assert client.post(f"/api/crews/{crew['id']}/leave", headers=bob).status_code == 200
        assert client.get("/api/crews/mine", headers=bob).status_code == 404

    def test_only_leader_removes_members(self, client, crew, alice, bob):
        assert client.delete(f"/api/crews/{crew['id']}/members/alice", headers=bob).status_code == 403
        assert client.delete(f"/api/crews/{crew['id']}/members/alice", headers=alice).status_code == 400
        assert client.delete(f"/api/crews/{crew['id']}/members/bob", headers=alice).status_code == 200
        detail = client.get(f"/api/crews/{crew['id']}", headers=alice).json()
        assert detail["member_count"] == 1

    def test_regenerate_join_code(self, client, crew, alice, bob, carol):
        assert client.post(f"/api/crews/{crew['id']}/join-code", headers=bob).status_code == 403
        new_code = client.post(f"/api/crews/{crew['id']}/join-code", headers=alice).json()["join_code"]
        assert new_code != crew["join_code"]
        assert client.post("/api/crews/join", json={"join_code": crew["join_code"]}, headers=carol).status_code == 404
        assert client.post("/api/crews/join", json={"join_code": new_code}, headers=carol).status_code == 200


class TestStatsAndRankings:
    def test_empty_crew_stats(self, client, crew, alice):
        stats = client.get(f"/api/crews/{crew['id']}/stats", headers=alice).json()
        assert stats["member_count"] == 2
        assert stats["total_score"] == 0
        assert stats["recent_activity"] == []

    def test_rankings_share_position_on_ties(self, client, crew, carol):
        client.post("/api/crews/", json={"name": "Blue Team"}, headers=carol)
        rankings = client.get("/api/crews/rankings", headers=carol).json()
        assert [r["position"] for r in rankings] == [1, 1]
        assert all(r["tied_with"] == 2 for r in rankings)
