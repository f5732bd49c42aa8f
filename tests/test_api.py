"""Tests for the HTTP API."""

import pytest

CONFIG = {
    "goals": {"items": [{"id": "a"}, {"id": "b"}, {"id": "c"}, {"id": "d"}]},
    "tiers": [{"id": "bronze", "threshold": 1}, {"id": "silver", "threshold": 3}],
}


@pytest.fixture
def challenge(make_challenge, join):
    challenge = make_challenge(configuration=CONFIG)
    join(challenge.id, "W1AW", "K1ABC", "N2XYZ")
    return challenge


def report(client, challenge_id, callsign, goals, value=0):
    return client.post(
        f"/challenges/{challenge_id}/progress",
        json={"completedGoals": goals, "currentValue": value, "qualifyingQsoCount": len(goals)},
        headers={"X-Callsign": callsign},
    )


class TestProgressEndpoint:

    def test_report(self, client, challenge):
        response = report(client, challenge.id, "W1AW", ["a", "b"])
        assert response.status_code == 200

        body = response.json()
        assert body["accepted"] is True
        assert body["newBadges"] == []
        assert body["serverProgress"] == {
            "completedGoals": ["a", "b"],
            "currentValue": 0,
            "percentage": 50.0,
            "score": 2,
            "rank": 1,
            "currentTier": "bronze",
        }

    def test_callsign_normalized(self, client, challenge):
        response = report(client, challenge.id, " w1aw ", ["a"])
        assert response.status_code == 200

    def test_last_qso_date_accepted(self, client, challenge):
        response = client.post(
            f"/challenges/{challenge.id}/progress",
            json={"completedGoals": ["a"], "currentValue": 0, "qualifyingQsoCount": 1,
                  "lastQsoDate": "2026-02-01T14:00:00Z"},
            headers={"X-Callsign": "W1AW"},
        )
        assert response.status_code == 200

    def test_missing_callsign(self, client, challenge):
        response = client.post(
            f"/challenges/{challenge.id}/progress",
            json={"completedGoals": [], "currentValue": 0, "qualifyingQsoCount": 0},
        )
        assert response.status_code == 401

    def test_unknown_challenge(self, client):
        response = report(client, "missing", "W1AW", ["a"])
        assert response.status_code == 404
        assert response.json()["error_code"] == "CHALLENGE_NOT_FOUND"

    def test_not_participating(self, client, challenge):
        response = report(client, challenge.id, "N0CALL", ["a"])
        assert response.status_code == 403
        assert response.json() == {
            "status": "error",
            "error_code": "NOT_PARTICIPATING",
            "message": f"'N0CALL' is not participating in challenge '{challenge.id}'",
        }

    def test_invalid_body(self, client, challenge):
        response = client.post(
            f"/challenges/{challenge.id}/progress",
            json={"completedGoals": "a", "currentValue": "lots"},
            headers={"X-Callsign": "W1AW"},
        )
        assert response.status_code == 422

    def test_current_value_out_of_range(self, client, make_challenge, join):
        points = make_challenge(configuration={"scoring": {"method": "points"}})
        join(points.id, "W1AW")

        response = report(client, points.id, "W1AW", [], value=2**63)
        assert response.status_code == 422
        response = report(client, points.id, "W1AW", [], value=2**31)
        assert response.status_code == 422

        response = report(client, points.id, "W1AW", [], value=2**31 - 1)
        assert response.status_code == 200
        assert response.json()["serverProgress"]["score"] == 2**31 - 1

    def test_read_progress(self, client, challenge):
        report(client, challenge.id, "W1AW", ["a", "b", "c"])
        response = client.get(
            f"/challenges/{challenge.id}/progress", headers={"X-Callsign": "W1AW"}
        )
        assert response.status_code == 200
        assert response.json()["currentTier"] == "silver"
        assert response.json()["percentage"] == 75.0

    def test_leave(self, client, challenge):
        report(client, challenge.id, "W1AW", ["a"])
        response = client.delete(
            f"/challenges/{challenge.id}/participation", headers={"X-Callsign": "W1AW"}
        )
        assert response.status_code == 204

        board = client.get(f"/challenges/{challenge.id}/leaderboard").json()
        assert board["total"] == 0


class TestLeaderboardEndpoint:

    @pytest.fixture
    def reported(self, client, challenge):
        report(client, challenge.id, "W1AW", ["a"])
        report(client, challenge.id, "K1ABC", ["a", "b", "c"])
        report(client, challenge.id, "N2XYZ", ["a", "b"])
        return challenge

    def test_leaderboard(self, client, reported):
        response = client.get(f"/challenges/{reported.id}/leaderboard")
        assert response.status_code == 200

        body = response.json()
        assert body["total"] == 3
        assert body["userPosition"] is None
        assert body["lastUpdated"]
        assert [row["callsign"] for row in body["leaderboard"]] == ["K1ABC", "N2XYZ", "W1AW"]
        assert [row["rank"] for row in body["leaderboard"]] == [1, 2, 3]
        assert body["leaderboard"][0]["currentTier"] == "silver"
        assert body["leaderboard"][0]["completedAt"] is not None

    def test_timestamps_carry_utc_offset(self, client, reported):
        body = client.get(f"/challenges/{reported.id}/leaderboard").json()
        assert body["lastUpdated"].endswith(("Z", "+00:00"))
        assert body["leaderboard"][0]["completedAt"].endswith(("Z", "+00:00"))

    def test_empty_leaderboard_timestamp_carries_utc_offset(self, client, challenge):
        body = client.get(f"/challenges/{challenge.id}/leaderboard").json()
        assert body["lastUpdated"].endswith(("Z", "+00:00"))

    def test_limit_and_offset(self, client, reported):
        body = client.get(
            f"/challenges/{reported.id}/leaderboard", params={"limit": 1, "offset": 1}
        ).json()
        assert [row["callsign"] for row in body["leaderboard"]] == ["N2XYZ"]
        assert body["total"] == 3

    def test_around(self, client, reported):
        body = client.get(
            f"/challenges/{reported.id}/leaderboard",
            params={"around": "n2xyz", "radius": 0, "offset": 2},
        ).json()
        assert [row["callsign"] for row in body["leaderboard"]] == ["N2XYZ"]
        assert body["userPosition"]["rank"] == 2

    def test_viewer_header(self, client, reported):
        body = client.get(
            f"/challenges/{reported.id}/leaderboard",
            params={"limit": 1},
            headers={"X-Callsign": "W1AW"},
        ).json()
        assert body["userPosition"]["callsign"] == "W1AW"
        assert body["userPosition"]["rank"] == 3

    def test_around_unknown_callsign(self, client, reported):
        response = client.get(
            f"/challenges/{reported.id}/leaderboard", params={"around": "AB1CD"}
        )
        assert response.status_code == 403

    def test_invalid_limit(self, client, reported):
        response = client.get(f"/challenges/{reported.id}/leaderboard", params={"limit": 0})
        assert response.status_code == 422

    def test_unknown_challenge(self, client):
        response = client.get("/challenges/missing/leaderboard")
        assert response.status_code == 404


class TestSnapshotEndpoint:

    def test_create_and_read(self, client, challenge):
        report(client, challenge.id, "W1AW", ["a", "b"])

        created = client.post(f"/challenges/{challenge.id}/snapshot")
        assert created.status_code == 201
        assert created.json()["statistics"]["participants"] == 1

        latest = client.get(f"/challenges/{challenge.id}/snapshot")
        assert latest.status_code == 200
        assert latest.json()["finalStandings"][0]["callsign"] == "W1AW"
        assert latest.json()["endedAt"].endswith(("Z", "+00:00"))
        assert latest.json()["finalStandings"][0]["completedAt"].endswith("+00:00")

    def test_no_snapshot(self, client, challenge):
        response = client.get(f"/challenges/{challenge.id}/snapshot")
        assert response.status_code == 404


class TestHealth:

    def test_root(self, client):
        assert client.get("/").json()["name"] == "Carrier Challenges"

    def test_health(self, client):
        body = client.get("/health").json()
        assert body["database"] == "connected"
