"""API tests for trips, members and invitations."""

from tests.conftest import ALICE, BOB, CAROL, MALLORY


class TestTrips:
    """Tests for trip CRUD."""

    def test_create_trip_adds_owner(self, client, db):
        response = client.post("/api/v1/trips", json={
            "name": "Porto",
            "start_date": "2026-07-01",
            "end_date": "2026-07-05",
        })
        assert response.status_code == 201
        trip_id = response.json()["id"]
        members = db.rows("trip_members", trip_id=trip_id)
        assert [(m["user_id"], m["role"]) for m in members] == [(ALICE, "owner")]

    def test_create_trip_rejects_reversed_dates(self, client):
        response = client.post("/api/v1/trips", json={
            "name": "Porto",
            "start_date": "2026-07-05",
            "end_date": "2026-07-01",
        })
        assert response.status_code == 422

    def test_failed_membership_removes_trip(self, client, db):
        db.fail("trip_members", "insert")
        response = client.post("/api/v1/trips", json={"name": "Porto"})
        assert response.status_code == 500
        assert db.rows("trips", name="Porto") == []

    def test_list_only_own_trips(self, client, db, trip, login_as):
        db.seed("trips", {"name": "Elsewhere", "created_by": MALLORY})
        response = client.get("/api/v1/trips")
        assert [t["name"] for t in response.json()] == ["Lisbon"]

        login_as(MALLORY)
        assert client.get("/api/v1/trips").json() == []

    def test_non_member_gets_404(self, client, trip, login_as):
        login_as(MALLORY)
        response = client.get(f"/api/v1/trips/{trip['id']}")
        assert response.status_code == 404
        assert response.json()["detail"] == "Access denied or trip not found."

    def test_member_cannot_update_trip(self, client, trip, login_as):
        login_as(BOB)
        response = client.put(f"/api/v1/trips/{trip['id']}", json={"name": "Madrid"})
        assert response.status_code == 403

    def test_owner_updates_trip(self, client, trip):
        response = client.put(f"/api/v1/trips/{trip['id']}", json={"name": "Lisboa"})
        assert response.status_code == 200
        assert response.json()["name"] == "Lisboa"

    def test_only_owner_deletes(self, client, db, trip, login_as):
        login_as(BOB)
        assert client.delete(f"/api/v1/trips/{trip['id']}").status_code == 403

        login_as(ALICE)
        assert client.delete(f"/api/v1/trips/{trip['id']}").status_code == 204
        assert db.rows("trips", id=trip["id"]) == []


class TestMembers:
    """Tests for membership management."""

    def test_list_members_with_profiles(self, client, trip):
        response = client.get(f"/api/v1/trips/{trip['id']}/members")
        assert response.status_code == 200
        names = {m["user_id"]: m["username"] for m in response.json()}
        assert names == {ALICE: "alice", BOB: "bob", CAROL: "carol"}

    def test_invite_by_email(self, client, db, trip):
        db.rpc_handlers["get_user_id_by_email"] = lambda params: MALLORY
        response = client.post(f"/api/v1/trips/{trip['id']}/members", json={"email": "mallory@example.com"})
        assert response.status_code == 201
        assert response.json()["role"] == "member"
        assert response.json()["username"] == "mallory"
        assert db.rpc_calls == [("get_user_id_by_email", {"email": "mallory@example.com"})]

    def test_invite_unknown_email(self, client, db, trip):
        db.rpc_handlers["get_user_id_by_email"] = lambda params: None
        response = client.post(f"/api/v1/trips/{trip['id']}/members", json={"email": "nobody@example.com"})
        assert response.status_code == 404

    def test_invite_existing_member(self, client, db, trip):
        db.rpc_handlers["get_user_id_by_email"] = lambda params: BOB
        response = client.post(f"/api/v1/trips/{trip['id']}/members", json={"email": "bob@example.com"})
        assert response.status_code == 400

    def test_member_cannot_invite(self, client, db, trip, login_as):
        login_as(BOB)
        db.rpc_handlers["get_user_id_by_email"] = lambda params: MALLORY
        response = client.post(f"/api/v1/trips/{trip['id']}/members", json={"email": "mallory@example.com"})
        assert response.status_code == 403
        assert db.rpc_calls == []

    def test_last_owner_cannot_be_demoted_or_leave(self, client, trip):
        response = client.put(f"/api/v1/trips/{trip['id']}/members/{ALICE}", json={"role": "member"})
        assert response.status_code == 400
        response = client.delete(f"/api/v1/trips/{trip['id']}/members/{ALICE}")
        assert response.status_code == 400

    def test_promote_then_owner_can_leave(self, client, db, trip):
        response = client.put(f"/api/v1/trips/{trip['id']}/members/{BOB}", json={"role": "owner"})
        assert response.json()["role"] == "owner"
        assert client.delete(f"/api/v1/trips/{trip['id']}/members/{ALICE}").status_code == 204
        assert db.rows("trip_members", trip_id=trip["id"], user_id=ALICE) == []

    def test_member_can_leave_but_not_remove_others(self, client, trip, login_as):
        login_as(BOB)
        assert client.delete(f"/api/v1/trips/{trip['id']}/members/{CAROL}").status_code == 403
        assert client.delete(f"/api/v1/trips/{trip['id']}/members/{BOB}").status_code == 204

    def test_role_change_includes_profile(self, client, trip):
        response = client.put(f"/api/v1/trips/{trip['id']}/members/{BOB}", json={"role": "co-owner"})
        assert response.status_code == 200
        member = response.json()
        assert member["role"] == "co-owner"
        assert member["username"] == "bob"
        assert member["full_name"] == "Bob Brown"

    def test_co_owner_cannot_take_over_trip(self, client, db, trip, login_as):
        db.tables["trip_members"] = [
            m for m in db.tables["trip_members"] if m["user_id"] != BOB
        ]
        db.seed("trip_members", {"trip_id": trip["id"], "user_id": BOB, "role": "co-owner"})
        login_as(BOB)

        response = client.put(f"/api/v1/trips/{trip['id']}/members/{BOB}", json={"role": "owner"})
        assert response.status_code == 403
        response = client.put(f"/api/v1/trips/{trip['id']}/members/{ALICE}", json={"role": "member"})
        assert response.status_code == 403
        assert client.delete(f"/api/v1/trips/{trip['id']}/members/{ALICE}").status_code == 403
        assert client.delete(f"/api/v1/trips/{trip['id']}").status_code == 403

        assert db.rows("trip_members", trip_id=trip["id"], user_id=ALICE)[0]["role"] == "owner"
        assert db.rows("trip_members", trip_id=trip["id"], user_id=BOB)[0]["role"] == "co-owner"
        assert len(db.rows("trips", id=trip["id"])) == 1

    def test_co_owner_manages_non_owners(self, client, db, trip, login_as):
        db.tables["trip_members"] = [
            m for m in db.tables["trip_members"] if m["user_id"] != BOB
        ]
        db.seed("trip_members", {"trip_id": trip["id"], "user_id": BOB, "role": "co-owner"})
        login_as(BOB)

        response = client.put(f"/api/v1/trips/{trip['id']}/members/{CAROL}", json={"role": "co-owner"})
        assert response.status_code == 200
        assert client.delete(f"/api/v1/trips/{trip['id']}/members/{CAROL}").status_code == 204


class TestInvitations:
    """Tests for invitation links."""

    def test_create_invitation_builds_join_url(self, client, db, trip):
        db.rpc_handlers["create_trip_invitation"] = lambda params: [{
            "invitation_id": "inv-1",
            "token": "abc123",
            "expires_at": "2026-01-08T00:00:00+00:00",
        }]
        response = client.post(f"/api/v1/trips/{trip['id']}/invitations", json={})
        assert response.status_code == 201
        assert response.json()["join_url"].endswith("/join-trip?token=abc123")
        assert db.rpc_calls[0][1] == {"p_trip_id": trip["id"], "p_email": None}

    def test_accept_invitation(self, client, db, trip, login_as):
        db.rpc_handlers["use_trip_invitation"] = lambda params: [{"success": True, "trip_id": trip["id"]}]
        login_as(MALLORY)
        response = client.post("/api/v1/trips/join", json={"token": "abc123"})
        assert response.status_code == 200
        assert response.json()["trip_id"] == trip["id"]
        assert db.rpc_calls[0][1] == {"p_token": "abc123", "p_user_id": MALLORY}

    def test_expired_invitation(self, client, db):
        db.rpc_handlers["use_trip_invitation"] = lambda params: [
            {"success": False, "trip_id": None, "error_message": "Invitation has expired"}
        ]
        response = client.post("/api/v1/trips/join", json={"token": "old"})
        assert response.status_code == 400
        assert response.json()["detail"] == "Invitation has expired"
