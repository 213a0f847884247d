"""Tests for the player router and the live WebSocket channel."""

import time
from unittest.mock import patch

import pytest

from web.backend.deps import SESSION_COOKIE, session_registry
from web.backend.sync_manager import sync_manager

SESSION = {"X-Session-Id": "session-a"}
OTHER_SESSION = {"X-Session-Id": "session-b"}


@pytest.fixture
def catalog(make_user, upload):
    owner = make_user("owner")
    return [
        upload(owner["id"], "Alpha"),
        upload(owner["id"], "Bravo"),
        upload(owner["id"], "Charlie"),
    ]


def post(client, path, json=None, headers=SESSION):
    response = client.post(f"/api/player{path}", json=json, headers=headers)
    assert response.status_code == 200, response.text
    return response.json()


def enqueue_all(client, catalog, headers=SESSION):
    for song in catalog:
        state = post(client, "/enqueue", {"songId": song["id"]}, headers)
    return state


def test_initial_state_is_idle(client):
    state = client.get("/api/player/state", headers=SESSION).json()
    assert state["queue"] == []
    assert state["cursor"] is None
    assert state["currentTrack"] is None
    assert state["isPlaying"] is False
    assert state["elapsedSeconds"] == 0.0
    assert state["volume"] == pytest.approx(0.7)
    assert "serverTime" in state


def test_missing_session_id_sets_cookie(client):
    response = client.get("/api/player/state")
    assert response.status_code == 200
    assert SESSION_COOKIE in response.cookies


def test_enqueue_ignores_duplicates(client, catalog):
    post(client, "/enqueue", {"songId": catalog[0]["id"]})
    state = post(client, "/enqueue", {"songId": catalog[0]["id"]})
    assert [t["id"] for t in state["queue"]] == [catalog[0]["id"]]
    assert state["cursor"] is None


def test_enqueue_unknown_song_is_404(client):
    response = client.post("/api/player/enqueue", json={"songId": 999}, headers=SESSION)
    assert response.status_code == 404


def test_play_now_starts_and_counts_play(client, catalog):
    state = post(client, "/play-now", {"songId": catalog[1]["id"]})
    assert state["currentTrack"]["title"] == "Bravo"
    assert state["isPlaying"] is True
    assert state["cursor"] == 0

    song = client.get(f"/api/songs/{catalog[1]['id']}").json()
    assert song["plays"] == 1


def test_sessions_are_independent(client, catalog):
    post(client, "/play-now", {"songId": catalog[0]["id"]})
    other = client.get("/api/player/state", headers=OTHER_SESSION).json()
    assert other["queue"] == []


def test_transport_walkthrough(client, catalog):
    enqueue_all(client, catalog)

    state = post(client, "/queue/1/play")
    assert state["currentTrack"]["title"] == "Bravo"

    state = post(client, "/ended")
    assert state["currentTrack"]["title"] == "Charlie"
    assert state["isPlaying"] is True

    state = post(client, "/ended")
    assert state["currentTrack"]["title"] == "Charlie"
    assert state["isPlaying"] is False

    state = post(client, "/previous")
    assert state["currentTrack"]["title"] == "Bravo"
    assert state["isPlaying"] is True

    # Only explicit plays are counted, not transport moves
    assert client.get(f"/api/songs/{catalog[1]['id']}").json()["plays"] == 1


def test_previous_past_threshold_restarts(client, catalog):
    enqueue_all(client, catalog)
    post(client, "/queue/2/play")
    post(client, "/seek", {"seconds": 42.5})

    state = post(client, "/previous")

    assert state["cursor"] == 2
    assert state["elapsedSeconds"] == 0.0


def test_toggle_and_next(client, catalog):
    enqueue_all(client, catalog)
    assert post(client, "/toggle")["isPlaying"] is False  # nothing current

    post(client, "/next")
    state = post(client, "/toggle")
    assert state["cursor"] == 0
    assert state["isPlaying"] is False


def test_negative_seek_is_rejected(client):
    response = client.post("/api/player/seek", json={"seconds": -1}, headers=SESSION)
    assert response.status_code == 422


@pytest.mark.parametrize("volume, expected", [(-0.3, 0.0), (1.7, 1.0), (0.42, 0.42)])
def test_volume_is_clamped(client, volume, expected):
    state = post(client, "/volume", {"volume": volume})
    assert state["volume"] == pytest.approx(expected)


def test_remove_and_clear(client, catalog):
    enqueue_all(client, catalog)
    post(client, "/queue/2/play")

    response = client.delete("/api/player/queue/0", headers=SESSION)
    state = response.json()
    assert state["cursor"] == 1
    assert state["currentTrack"]["title"] == "Charlie"

    # Out of range is a no-op
    unchanged = client.delete("/api/player/queue/10", headers=SESSION).json()
    assert unchanged["queue"] == state["queue"]
    assert unchanged["cursor"] == 1

    state = client.delete("/api/player/queue", headers=SESSION).json()
    assert state["queue"] == []
    assert state["cursor"] is None


def test_end_session_forgets_queue(client, catalog):
    post(client, "/play-now", {"songId": catalog[0]["id"]})

    response = client.delete("/api/player/session", headers=SESSION)

    assert response.status_code == 200
    assert response.json()["queue"] == []
    assert "session-a" not in session_registry


class TestLiveChannel:
    def test_sends_state_on_connect(self, client, catalog):
        post(client, "/play-now", {"songId": catalog[0]["id"]})

        with client.websocket_connect("/ws/player?session=session-a") as ws:
            message = ws.receive_json()

        assert message["type"] == "playback:state"
        assert message["data"]["currentTrack"]["title"] == "Alpha"

    def test_pushes_changes_made_over_http(self, client, catalog):
        with client.websocket_connect("/ws/player?session=session-a") as ws:
            ws.receive_json()

            post(client, "/enqueue", {"songId": catalog[2]["id"]})
            message = ws.receive_json()

        assert message["type"] == "playback:state"
        assert [t["title"] for t in message["data"]["queue"]] == ["Charlie"]

    def test_client_ticks_update_elapsed(self, client, catalog):
        post(client, "/play-now", {"songId": catalog[0]["id"]})

        with client.websocket_connect("/ws/player?session=session-a") as ws:
            ws.receive_json()
            ws.send_json({"type": "playback:tick", "elapsedSeconds": 12.5})
            message = ws.receive_json()

        assert message["data"]["elapsedSeconds"] == 12.5
        assert session_registry.get("session-a").get_snapshot().elapsed_seconds == 12.5

    def test_client_track_end_advances(self, client, catalog):
        enqueue_all(client, catalog)
        post(client, "/queue/0/play")

        with client.websocket_connect("/ws/player?session=session-a") as ws:
            ws.receive_json()
            ws.send_json({"type": "playback:ended"})
            message = ws.receive_json()

        assert message["data"]["currentTrack"]["title"] == "Bravo"

    def test_disconnect_releases_subscription(self, client):
        with client.websocket_connect("/ws/player?session=session-a") as ws:
            ws.receive_json()
            assert session_registry.get("session-a").observer_count == 1
        # The server notices the close on its next receive
        engine = session_registry.get("session-a")
        for _ in range(50):
            if engine.observer_count == 0:
                break
            time.sleep(0.01)
        assert engine.observer_count == 0

    def test_handler_error_releases_subscription(self, client):
        with patch(
            "web.backend.routers.live._handle_client_message",
            side_effect=RuntimeError("bad message"),
        ):
            with pytest.raises(RuntimeError):
                with client.websocket_connect("/ws/player?session=session-a") as ws:
                    ws.receive_json()
                    ws.send_json({"type": "playback:tick", "elapsedSeconds": 1})
                    ws.receive_json()

        assert "session-a" not in sync_manager.connections
        assert session_registry.get("session-a").observer_count == 0
