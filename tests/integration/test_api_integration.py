"""Integration tests for API endpoints."""

from collections.abc import Generator
from unittest.mock import patch

from fastapi.testclient import TestClient
import pytest
from sqlmodel import Session

from src.api.deps import get_session
from src.main import app

ADMIN = {"X-User-Id": "admin"}
ALICE = {"X-User-Id": "alice"}

SESSION_BODY = {
    "id": "1735689600000",
    "name": "Friday game",
    "date": "2025-01-01T20:00:00",
    "config": {"chips_per_entry": 3000, "cny_per_entry": 300},
    "players": [
        {"name": "Alice", "entries": 1, "final_chips": 4500},
        {"name": "Bob", "entries": 2, "final_chips": 5000},
        {"name": "Carol", "entries": 1, "final_chips": 2500},
    ],
}


@pytest.fixture
def client(test_engine) -> Generator[TestClient, None, None]:
    """Create a test client with overridden dependencies."""

    def get_test_session() -> Generator[Session, None, None]:
        with Session(test_engine) as session:
            yield session

    app.dependency_overrides[get_session] = get_test_session

    with (
        patch("src.main.create_db_and_tables"),
        patch("src.main.configure_logging"),
        patch("src.services.access_service.ADMIN_USER_IDS", frozenset({"admin"})),
        TestClient(app, raise_server_exceptions=False) as test_client,
    ):
        yield test_client

    app.dependency_overrides.clear()


@pytest.mark.integration
class TestRootEndpoint:
    """Tests for the root endpoint."""

    def test_returns_welcome_message(self, client):
        response = client.get("/")

        assert response.status_code == 200
        assert response.json() == {"message": "Welcome to the chip ledger API"}


@pytest.mark.integration
class TestSettlementEndpoints:
    """Tests for /api/v1/settlement."""

    def test_preview_balanced_session(self, client):
        """Test results and transfers for a session that already sums to zero."""
        response = client.post(
            "/api/v1/settlement/preview",
            json={"config": SESSION_BODY["config"], "players": SESSION_BODY["players"]},
        )

        assert response.status_code == 200
        data = response.json()
        assert [p["pnl_cny"] for p in data["players"]] == pytest.approx([150.0, -100.0, -50.0])
        assert data["adjusted_total_cny"] == pytest.approx(0.0, abs=0.01)
        assert data["transfers"] == [
            {"from": "Bob", "to": "Alice", "amount": pytest.approx(100.0)},
            {"from": "Carol", "to": "Alice", "amount": pytest.approx(50.0)},
        ]

    def test_preview_corrects_discrepancy(self, client):
        """Test that a chip count error is spread over the winners."""
        response = client.post(
            "/api/v1/settlement/preview",
            json={
                "players": [
                    {"name": "Alice", "entries": 1, "final_chips": 4600},
                    {"name": "Bob", "entries": 1, "final_chips": 1500},
                ]
            },
        )

        data = response.json()
        assert data["raw_total_cny"] == pytest.approx(10.0)
        assert data["adjusted_total_cny"] == pytest.approx(0.0, abs=0.01)
        assert data["players"][0]["adjusted_pnl_cny"] == pytest.approx(150.0)

    def test_preview_rejects_negative_chips(self, client):
        response = client.post(
            "/api/v1/settlement/preview",
            json={"players": [{"name": "Alice", "entries": 1, "final_chips": -1}]},
        )

        assert response.status_code == 422
        assert response.json()["error"]["code"] == "request_validation_error"

    def test_transfers(self, client):
        response = client.post(
            "/api/v1/settlement/transfers",
            json={
                "balances": [
                    {"name": "A", "pnl": 60},
                    {"name": "B", "pnl": -40},
                    {"name": "C", "pnl": -20},
                ]
            },
        )

        assert response.status_code == 200
        assert response.json() == [
            {"from": "B", "to": "A", "amount": 40.0},
            {"from": "C", "to": "A", "amount": 20.0},
        ]


@pytest.mark.integration
class TestSessionEndpoints:
    """Tests for /api/v1/sessions."""

    def test_save_list_and_delete_private_session(self, client):
        response = client.post("/api/v1/sessions/", json=SESSION_BODY, headers=ALICE)

        assert response.status_code == 201
        data = response.json()
        assert data["session"]["id"] == "1735689600000"
        assert data["session"]["scope"] == "private"
        assert len(data["transfers"]) == 2

        listed = client.get("/api/v1/sessions/?scope=private", headers=ALICE).json()
        assert [s["id"] for s in listed] == ["1735689600000"]

        deleted = client.delete("/api/v1/sessions/1735689600000", headers=ALICE)
        assert deleted.status_code == 204
        assert client.get("/api/v1/sessions/?scope=private", headers=ALICE).json() == []

    def test_private_board_requires_sign_in(self, client):
        response = client.post("/api/v1/sessions/", json=SESSION_BODY)

        assert response.status_code == 403
        assert response.json()["error"]["code"] == "permission_denied"

    def test_public_write_requires_admin(self, client):
        """Test that a signed-in non-admin cannot write the public board."""
        response = client.post("/api/v1/sessions/?scope=public", json=SESSION_BODY, headers=ALICE)

        assert response.status_code == 403

    def test_admin_writes_public_board(self, client):
        response = client.post("/api/v1/sessions/?scope=public", json=SESSION_BODY, headers=ADMIN)

        assert response.status_code == 201
        assert [s["id"] for s in client.get("/api/v1/sessions/").json()] == ["1735689600000"]

    def test_session_without_players(self, client):
        body = {**SESSION_BODY, "players": []}

        response = client.post("/api/v1/sessions/", json=body, headers=ALICE)

        assert response.status_code == 422
        assert response.json()["error"]["code"] == "validation_error"

    def test_delete_unknown_session(self, client):
        response = client.delete("/api/v1/sessions/missing", headers=ALICE)

        assert response.status_code == 404

    def test_id_owned_by_another_board(self, client):
        client.post("/api/v1/sessions/", json=SESSION_BODY, headers=ALICE)

        response = client.post(
            "/api/v1/sessions/", json=SESSION_BODY, headers={"X-User-Id": "bob"}
        )

        assert response.status_code == 409


@pytest.mark.integration
class TestScoreboardEndpoints:
    """Tests for /api/v1/scoreboard."""

    def test_public_scoreboard(self, client):
        client.post("/api/v1/sessions/?scope=public", json=SESSION_BODY, headers=ADMIN)

        response = client.get("/api/v1/scoreboard/")

        assert response.status_code == 200
        data = response.json()
        assert data["sort_by"] == "score"
        players = data["players"]
        assert players[0]["name"] == "Alice"
        # Alice never lost, so her profit factor is infinite and serialized as null
        assert players[0]["profit_factor"] is None
        assert all(50 <= p["score"] <= 99 for p in players)

    def test_sort_by_total_pnl_ascending(self, client):
        client.post("/api/v1/sessions/?scope=public", json=SESSION_BODY, headers=ADMIN)

        response = client.get("/api/v1/scoreboard/?sort_by=total_pnl&descending=false")

        assert [p["name"] for p in response.json()["players"]] == ["Bob", "Carol", "Alice"]

    def test_unknown_sort_field(self, client):
        response = client.get("/api/v1/scoreboard/?sort_by=luck")

        assert response.status_code == 422

    def test_private_scoreboard_needs_identity(self, client):
        response = client.get("/api/v1/scoreboard/?scope=private")

        assert response.status_code == 403

    def test_share_code_flow(self, client):
        """Test sharing a private board and reading it anonymously."""
        client.post("/api/v1/sessions/", json=SESSION_BODY, headers=ALICE)

        shared = client.put(
            "/api/v1/scoreboard/share",
            json={"access_code": "alice-home", "display_name": "Alice's table"},
            headers=ALICE,
        )
        assert shared.status_code == 200
        assert shared.json()["owner_id"] == "alice"
        assert client.get("/api/v1/scoreboard/share", headers=ALICE).json()[
            "access_code"
        ] == "alice-home"

        response = client.get("/api/v1/scoreboard/shared/alice-home")

        assert response.status_code == 200
        assert sorted(p["name"] for p in response.json()["players"]) == [
            "Alice",
            "Bob",
            "Carol",
        ]

    def test_share_code_conflict(self, client):
        client.put("/api/v1/scoreboard/share", json={"access_code": "taken"}, headers=ALICE)

        response = client.put(
            "/api/v1/scoreboard/share", json={"access_code": "taken"}, headers=ADMIN
        )

        assert response.status_code == 409

    def test_unknown_share_code(self, client):
        response = client.get("/api/v1/scoreboard/shared/nothing-here")

        assert response.status_code == 404

    def test_cached_commentary_starts_empty(self, client):
        response = client.get("/api/v1/scoreboard/commentary")

        assert response.status_code == 200
        assert response.json() == {"scope": "public", "commentary": {}}

    def test_commentary_refresh_requires_write_access(self, client):
        response = client.post("/api/v1/scoreboard/commentary")

        assert response.status_code == 403

    def test_commentary_refresh_without_key(self, client):
        """Test that a refresh with commentary unconfigured is an error, not an empty 200."""
        with patch("src.services.commentary_service.GEMINI_API_KEY", ""):
            response = client.post("/api/v1/scoreboard/commentary", headers=ADMIN)

        assert response.status_code == 502
        assert response.json()["error"]["code"] == "commentary_not_configured"
