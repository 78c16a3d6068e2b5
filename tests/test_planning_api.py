"""API tests for date and destination proposals, votes and discussions."""

from tests.conftest import ALICE, BOB, CAROL, MALLORY


def _propose_dates(client, trip_id, title="Early July", start="2026-07-01", end="2026-07-07"):
    response = client.post(f"/api/v1/trips/{trip_id}/date-proposals", json={
        "title": title, "start_date": start, "end_date": end,
    })
    assert response.status_code == 201
    return response.json()


def _propose_destination(client, trip_id, name="Sintra", date_proposal_id=None):
    response = client.post(f"/api/v1/trips/{trip_id}/destination-proposals", json={
        "destination_name": name, "date_proposal_id": date_proposal_id,
    })
    assert response.status_code == 201
    return response.json()


def _vote(client, trip_id, vote_type, **target):
    return client.post(f"/api/v1/trips/{trip_id}/votes", json={"vote_type": vote_type, **target})


class TestDateProposals:
    """Tests for date proposals."""

    def test_reversed_dates_are_rejected(self, client, trip):
        response = client.post(f"/api/v1/trips/{trip['id']}/date-proposals", json={
            "title": "Backwards", "start_date": "2026-07-07", "end_date": "2026-07-01",
        })
        assert response.status_code == 422

    def test_list_is_enriched(self, client, trip, login_as):
        proposal = _propose_dates(client, trip["id"])
        destination = _propose_destination(client, trip["id"], date_proposal_id=proposal["id"])
        _vote(client, trip["id"], "available", date_proposal_id=proposal["id"])
        login_as(BOB)
        _vote(client, trip["id"], "unavailable", date_proposal_id=proposal["id"])
        client.post(f"/api/v1/trips/{trip['id']}/discussions", json={
            "comment_text": "Too hot?", "date_proposal_id": proposal["id"],
        })

        listed = client.get(f"/api/v1/trips/{trip['id']}/date-proposals").json()
        assert len(listed) == 1
        item = listed[0]
        assert item["proposed_by_profile"]["username"] == "alice"
        assert item["vote_stats"] == {
            "upvotes": 1, "downvotes": 1, "neutral_votes": 0, "total_votes": 2, "net_score": 0,
        }
        assert item["user_vote"] == "unavailable"
        assert item["discussion_count"] == 1
        assert [d["id"] for d in item["linked_destinations"]] == [destination["id"]]

    def test_newest_first(self, client, trip):
        _propose_dates(client, trip["id"], title="First")
        _propose_dates(client, trip["id"], title="Second")
        titles = [p["title"] for p in client.get(f"/api/v1/trips/{trip['id']}/date-proposals").json()]
        assert titles == ["Second", "First"]

    def test_unreadable_votes_give_zero_stats(self, client, db, trip):
        proposal = _propose_dates(client, trip["id"])
        _vote(client, trip["id"], "available", date_proposal_id=proposal["id"])
        db.fail("proposal_votes", "select")

        listed = client.get(f"/api/v1/trips/{trip['id']}/date-proposals").json()
        assert listed[0]["vote_stats"]["total_votes"] == 0
        stats = client.get(f"/api/v1/date-proposals/{proposal['id']}/stats").json()
        assert stats["upvotes"] == 0

    def test_finalizing_sets_trip_dates(self, client, trip):
        proposal = _propose_dates(client, trip["id"])
        response = client.put(f"/api/v1/date-proposals/{proposal['id']}", json={"is_finalized": True})
        assert response.status_code == 200
        assert response.json()["is_finalized"] is True

        updated_trip = client.get(f"/api/v1/trips/{trip['id']}").json()
        assert updated_trip["start_date"] == "2026-07-01"
        assert updated_trip["end_date"] == "2026-07-07"

    def test_update_checks_stored_dates(self, client, trip):
        proposal = _propose_dates(client, trip["id"])
        response = client.put(f"/api/v1/date-proposals/{proposal['id']}", json={"end_date": "2026-06-01"})
        assert response.status_code == 422

    def test_only_proposer_or_owner_can_change(self, client, db, trip, login_as):
        login_as(BOB)
        proposal = _propose_dates(client, trip["id"])

        login_as(CAROL)
        assert client.put(f"/api/v1/date-proposals/{proposal['id']}", json={"title": "Mine"}).status_code == 403
        assert client.delete(f"/api/v1/date-proposals/{proposal['id']}").status_code == 403

        login_as(ALICE)
        assert client.put(f"/api/v1/date-proposals/{proposal['id']}", json={"title": "Ours"}).json()["title"] == "Ours"
        assert client.delete(f"/api/v1/date-proposals/{proposal['id']}").status_code == 204
        assert db.rows("date_proposals") == []

    def test_outsider_cannot_see_proposals(self, client, trip, login_as):
        proposal = _propose_dates(client, trip["id"])
        login_as(MALLORY)
        assert client.get(f"/api/v1/trips/{trip['id']}/date-proposals").status_code == 404
        assert client.delete(f"/api/v1/date-proposals/{proposal['id']}").status_code == 404


class TestDestinationProposals:
    """Tests for destination proposals."""

    def test_linked_date_proposal_is_included(self, client, trip):
        dates = _propose_dates(client, trip["id"])
        _propose_destination(client, trip["id"], date_proposal_id=dates["id"])
        listed = client.get(f"/api/v1/trips/{trip['id']}/destination-proposals").json()
        assert listed[0]["linked_date_proposal"]["id"] == dates["id"]

    def test_link_to_other_trip_is_rejected(self, client, db, trip):
        other = db.seed("date_proposals", {
            "trip_id": "other-trip", "proposed_by": MALLORY, "title": "x",
            "start_date": "2026-07-01", "end_date": "2026-07-02",
        })
        response = client.post(f"/api/v1/trips/{trip['id']}/destination-proposals", json={
            "destination_name": "Porto", "date_proposal_id": other["id"],
        })
        assert response.status_code == 400

    def test_update_destination(self, client, trip):
        proposal = _propose_destination(client, trip["id"])
        response = client.put(f"/api/v1/destination-proposals/{proposal['id']}", json={
            "destination_notes": "Take the train",
        })
        assert response.json()["destination_notes"] == "Take the train"
        assert response.json()["destination_name"] == "Sintra"


class TestVotes:
    """Tests for voting."""

    def test_voting_again_replaces_vote(self, client, db, trip):
        proposal = _propose_destination(client, trip["id"])
        _vote(client, trip["id"], "available", destination_proposal_id=proposal["id"])
        response = _vote(client, trip["id"], "maybe", destination_proposal_id=proposal["id"])
        assert response.status_code == 200
        assert response.json()["vote_type"] == "maybe"
        assert len(db.rows("proposal_votes")) == 1

        stats = client.get(f"/api/v1/destination-proposals/{proposal['id']}/stats").json()
        assert stats["neutral_votes"] == 1
        assert stats["total_votes"] == 1

    def test_exactly_one_target(self, client, trip):
        dates = _propose_dates(client, trip["id"])
        destination = _propose_destination(client, trip["id"])
        both = _vote(client, trip["id"], "available",
                     date_proposal_id=dates["id"], destination_proposal_id=destination["id"])
        assert both.status_code == 422
        assert _vote(client, trip["id"], "available").status_code == 422

    def test_unknown_vote_type(self, client, trip):
        dates = _propose_dates(client, trip["id"])
        assert _vote(client, trip["id"], "yes", date_proposal_id=dates["id"]).status_code == 422

    def test_vote_on_other_trip_proposal(self, client, db, trip):
        other = db.seed("destination_proposals", {
            "trip_id": "other-trip", "proposed_by": MALLORY, "destination_name": "Oslo",
        })
        assert _vote(client, trip["id"], "available", destination_proposal_id=other["id"]).status_code == 404

    def test_get_and_delete_my_vote(self, client, trip):
        dates = _propose_dates(client, trip["id"])
        _vote(client, trip["id"], "maybe", date_proposal_id=dates["id"])
        url = f"/api/v1/trips/{trip['id']}/votes/me"

        assert client.get(url, params={"date_proposal_id": dates["id"]}).json()["vote_type"] == "maybe"
        assert client.delete(url, params={"date_proposal_id": dates["id"]}).status_code == 204
        assert client.get(url, params={"date_proposal_id": dates["id"]}).json() is None


class TestDiscussions:
    """Tests for proposal comments."""

    def _comment(self, client, trip_id, text, **extra):
        response = client.post(f"/api/v1/trips/{trip_id}/discussions", json={"comment_text": text, **extra})
        assert response.status_code == 201
        return response.json()

    def test_replies_nest_one_level(self, client, trip, login_as):
        dates = _propose_dates(client, trip["id"])
        root = self._comment(client, trip["id"], "Works for me", date_proposal_id=dates["id"])
        login_as(BOB)
        reply = self._comment(client, trip["id"], "Same", parent_comment_id=root["id"])
        nested = self._comment(client, trip["id"], "+1", parent_comment_id=reply["id"])

        assert reply["date_proposal_id"] == dates["id"]
        assert nested["parent_comment_id"] == root["id"]

        threads = client.get(f"/api/v1/trips/{trip['id']}/discussions",
                             params={"date_proposal_id": dates["id"]}).json()
        assert len(threads) == 1
        assert threads[0]["user_profile"]["username"] == "alice"
        assert [r["comment_text"] for r in threads[0]["replies"]] == ["Same", "+1"]

    def test_without_replies(self, client, trip):
        root = self._comment(client, trip["id"], "General question")
        self._comment(client, trip["id"], "Answer", parent_comment_id=root["id"])
        threads = client.get(f"/api/v1/trips/{trip['id']}/discussions",
                             params={"include_replies": False}).json()
        assert threads[0]["replies"] == []

    def test_only_author_edits_and_deletes(self, client, trip, login_as):
        comment = self._comment(client, trip["id"], "Hello")

        login_as(BOB)
        assert client.put(f"/api/v1/discussions/{comment['id']}", json={"comment_text": "Hi"}).status_code == 403
        assert client.delete(f"/api/v1/discussions/{comment['id']}").status_code == 403

        login_as(ALICE)
        edited = client.put(f"/api/v1/discussions/{comment['id']}", json={"comment_text": "Hi"}).json()
        assert edited["comment_text"] == "Hi"
        assert edited["is_edited"] is True
        assert client.delete(f"/api/v1/discussions/{comment['id']}").status_code == 204

    def test_empty_comment(self, client, trip):
        response = client.post(f"/api/v1/trips/{trip['id']}/discussions", json={"comment_text": ""})
        assert response.status_code == 422
