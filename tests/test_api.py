"""Tests for the HTTP API."""

from datetime import timedelta

import pytest
from starlette.testclient import TestClient

from jira_tracker.api import create_app
from jira_tracker.config import Settings
from jira_tracker.integrations import IssueInfo, JiraError, TempoError


class FakeJira:
    """Resolves every key except NOPE-* to a numeric id."""

    def __init__(self) -> None:
        self.account_lookups = 0

    async def get_issue_info(self, key: str) -> IssueInfo:
        if key.startswith("NOPE"):
            raise JiraError("HTTP 404: Issue does not exist")
        return IssueInfo(id=str(10000 + len(key)), key=key)

    async def get_account_id(self) -> str:
        self.account_lookups += 1
        return "acc-from-jira"


class FakeTempo:
    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.submissions = []

    async def submit_all(self, trackers, account_id):
        if self.fail:
            raise TempoError("Submitting ABC-1 failed: HTTP 500")
        self.submissions.append((trackers, account_id))
        return len(trackers)


@pytest.fixture
def jira():
    return FakeJira()


@pytest.fixture
def tempo():
    return FakeTempo()


@pytest.fixture
def client(state, storage, jira, tempo):
    settings = Settings(_env_file=None, json_file=str(storage.path), jira_account_id="acc-1")
    app = create_app(settings, state=state, jira=jira, tempo=tempo, watch=False)
    with TestClient(app) as test_client:
        yield test_client


class TestTrackerRoutes:
    """Tests for /trackers and /tracker."""

    def test_create_starts_tracker(self, client):
        response = client.post("/trackers/ABC-1")

        assert response.status_code == 200
        body = response.json()
        assert body["key"] == "ABC-1"
        assert body["id"] == "10005"
        assert body["running"] is True
        assert body["duration"] == "0s"
        assert body["description"] is None

    def test_create_pauses_previous(self, client, clock):
        client.post("/trackers/ABC-1")
        clock.advance(90)
        client.post("/trackers/ABC-2")

        trackers = {t["key"]: t for t in client.get("/trackers").json()}
        assert trackers["ABC-1"]["running"] is False
        assert trackers["ABC-1"]["duration"] == "1m 30s"
        assert client.get("/tracker").json()["key"] == "ABC-2"

    def test_create_duplicate(self, client):
        client.post("/trackers/ABC-1")
        response = client.post("/trackers/ABC-1")

        assert response.status_code == 409
        assert "already exists" in response.json()["detail"]

    def test_create_malformed_key(self, client):
        assert client.post("/trackers/not a key").status_code == 400

    def test_create_unknown_issue(self, client, storage):
        assert client.post("/trackers/NOPE-1").status_code == 404
        assert not storage.exists()

    def test_get_and_list(self, client):
        client.post("/trackers/ABC-1")
        client.post("/trackers/ABC-2")

        assert [t["key"] for t in client.get("/trackers").json()] == ["ABC-1", "ABC-2"]
        assert client.get("/trackers/ABC-2").json()["running"] is True
        response = client.get("/trackers/ABC-9")
        assert response.status_code == 404
        assert response.json() == {"detail": "Tracker 'ABC-9' not found"}

    def test_start(self, client):
        client.post("/trackers/ABC-1")
        client.post("/trackers/ABC-2")

        assert client.post("/trackers/ABC-1/start").json()["running"] is True
        assert client.get("/tracker").json()["key"] == "ABC-1"
        assert client.post("/trackers/ABC-9/start").status_code == 404

    def test_pause(self, client, clock):
        client.post("/trackers/ABC-1")
        clock.advance(5)

        assert client.post("/tracker/pause").status_code == 204
        assert client.get("/tracker").status_code == 404
        assert client.post("/tracker/pause").status_code == 204
        assert client.get("/trackers/ABC-1").json()["duration"] == "5s"

    def test_delete(self, client):
        client.post("/trackers/ABC-1")

        assert client.delete("/trackers/ABC-1").status_code == 204
        assert client.get("/trackers/ABC-1").status_code == 404
        assert client.delete("/trackers/ABC-1").status_code == 404

    def test_clear(self, client):
        client.post("/trackers/ABC-1")
        client.post("/trackers/ABC-2")

        assert client.delete("/trackers").status_code == 204
        assert client.get("/trackers").json() == []
        assert client.get("/tracker").status_code == 404

    def test_sum(self, client, clock):
        client.post("/trackers/ABC-1")
        clock.advance(3600)
        client.post("/trackers/ABC-2")
        clock.advance(125)

        assert client.get("/sum").json() == {"duration": "1h 2m 5s"}


class TestAdjust:
    """Tests for PUT /trackers/{key}."""

    @pytest.fixture(autouse=True)
    def _trackers(self, client):
        client.post("/trackers/ABC-1")
        client.post("/trackers/ABC-2")
        client.post("/tracker/pause")

    def test_description(self, client):
        response = client.put("/trackers/ABC-1", json={"description": "Code review"})
        assert response.json()["description"] == "Code review"

        response = client.put("/trackers/ABC-1", json={"description": None})
        assert response.json()["description"] is None

    @pytest.mark.parametrize("field", ["plus", "add", "increase"])
    def test_plus(self, client, field):
        response = client.put("/trackers/ABC-1", json={field: "15m"})

        assert response.status_code == 200
        assert response.json()["duration"] == "15m"

    def test_plus_seconds(self, client):
        assert client.put("/trackers/ABC-1", json={"plus": 90}).json()["duration"] == "1m 30s"

    @pytest.mark.parametrize("field", ["minus", "sub", "subtract", "decrease"])
    def test_minus(self, client, field):
        client.put("/trackers/ABC-1", json={"plus": "1h"})
        response = client.put("/trackers/ABC-1", json={field: "20m"})

        assert response.json()["duration"] == "40m"

    def test_minus_beyond_elapsed(self, client):
        client.put("/trackers/ABC-1", json={"plus": "10m"})
        response = client.put("/trackers/ABC-1", json={"minus": "11m"})

        assert response.status_code == 400
        assert client.get("/trackers/ABC-1").json()["duration"] == "10m"

    def test_plus_using_other_tracker(self, client):
        client.put("/trackers/ABC-2", json={"plus": "30m"})

        response = client.put("/trackers/ABC-1", json={"plus": "10m", "from": "ABC-2"})

        assert response.json()["duration"] == "10m"
        assert client.get("/trackers/ABC-2").json()["duration"] == "20m"

    def test_minus_using_other_tracker(self, client):
        client.put("/trackers/ABC-1", json={"plus": "30m"})

        response = client.put("/trackers/ABC-1", json={"minus": "10m", "to": "ABC-2"})

        assert response.json()["duration"] == "20m"
        assert client.get("/trackers/ABC-2").json()["duration"] == "10m"

    def test_transfer_from_empty_tracker_fails(self, client):
        response = client.put("/trackers/ABC-1", json={"plus": "10m", "using": "ABC-2"})

        assert response.status_code == 400
        assert client.get("/trackers/ABC-1").json()["duration"] == "0s"

    def test_plus_past_largest_duration(self, client):
        assert client.put("/trackers/ABC-1", json={"plus": "999999999d"}).status_code == 200

        response = client.put("/trackers/ABC-1", json={"plus": "1d"})

        assert response.status_code == 400
        assert client.get("/trackers/ABC-1").json()["duration"] == "999999999d"
        assert client.get("/trackers").status_code == 200

    def test_unknown_tracker(self, client):
        assert client.put("/trackers/ABC-9", json={"plus": "1m"}).status_code == 404

    @pytest.mark.parametrize(
        "body",
        [
            {},
            {"plus": "1m", "minus": "1m"},
            {"plus": "1m", "description": "x"},
            {"plus": "soon"},
            {"plus": "1000000000d"},
            {"plus": None},
            {"description": "x", "using": "ABC-2"},
            {"plus": "1m", "bogus": True},
        ],
    )
    def test_invalid_bodies(self, client, body):
        assert client.put("/trackers/ABC-1", json=body).status_code == 422


class TestSubmit:
    """Tests for POST /submit."""

    def test_submit_clears_trackers(self, client, tempo, clock):
        client.post("/trackers/ABC-1")
        clock.advance(600)

        assert client.post("/submit").status_code == 204

        trackers, account_id = tempo.submissions[0]
        assert account_id == "acc-1"
        assert [t.key for t in trackers] == ["ABC-1"]
        assert trackers[0].duration == timedelta(minutes=10)
        assert client.get("/trackers").json() == []

    def test_submit_failure_keeps_trackers(self, client, tempo):
        tempo.fail = True
        client.post("/trackers/ABC-1")

        response = client.post("/submit")

        assert response.status_code == 502
        assert [t["key"] for t in client.get("/trackers").json()] == ["ABC-1"]

    def test_account_id_looked_up_when_unset(self, state, storage, jira, tempo):
        settings = Settings(_env_file=None, json_file=str(storage.path), jira_account_id="")
        app = create_app(settings, state=state, jira=jira, tempo=tempo, watch=False)
        with TestClient(app) as client:
            assert client.post("/submit").status_code == 204

        assert jira.account_lookups == 1
        assert tempo.submissions[0][1] == "acc-from-jira"
