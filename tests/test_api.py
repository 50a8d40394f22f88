from random import Random

import pytest
from fastapi.testclient import TestClient

from rpgforge.api import create_api
from rpgforge.app import BotApp
from rpgforge.config import ApiConfig, ApiKey, RpgForgeConfig, StorageConfig

BASIC = {"X-API-Key": "basic-key"}
PREMIUM = {"X-API-Key": "premium-key"}


@pytest.fixture()
def client() -> TestClient:
    config = RpgForgeConfig(
        bot_token="test",
        storage=StorageConfig(backend="memory"),
        api=ApiConfig(
            keys={
                "basic-key": ApiKey(name="dashboard"),
                "premium-key": ApiKey(name="ops", premium=True),
            }
        ),
    )
    return TestClient(create_api(BotApp(config, rng=Random(1))))


def test_status_endpoints_are_public(client):
    body = client.get("/").json()
    assert body["success"] is True
    assert body["status"] == "online"
    health = client.get("/health").json()
    assert health["status"] == "healthy"
    assert health["uptime"] >= 0


def test_api_key_required(client):
    response = client.get("/api/user/1")
    assert response.status_code == 401
    assert response.json() == {"success": False, "message": "API key required"}

    response = client.get("/api/user/1", headers={"X-API-Key": "nope"})
    assert response.status_code == 401
    assert response.json()["message"] == "Invalid API key"

    response = client.get("/api/user/1", params={"apiKey": "basic-key"})
    assert response.status_code == 200


def test_user_profile_and_stats(client):
    profile = client.get("/api/user/1", headers=BASIC).json()["data"]
    assert profile["level"] == 1
    assert profile["gold"] == 100
    stats = client.get("/api/user/1/stats", headers=BASIC).json()["data"]
    assert stats["totalHunt"] == 0
    assert stats["expToNextLevel"] == 100


def test_experience_endpoint(client):
    response = client.post("/api/user/1/exp", json={"amount": 250}, headers=BASIC)
    assert response.status_code == 200
    assert response.json()["data"] == {"leveled": True, "level": 2, "exp": 150}

    response = client.post("/api/user/1/exp", json={"amount": 0}, headers=BASIC)
    assert response.status_code == 400
    assert response.json()["success"] is False


def test_gold_endpoint_adds_and_spends(client):
    assert client.post("/api/user/1/gold", json={"amount": 50}, headers=BASIC).json()["data"] == {
        "gold": 150
    }
    assert client.post("/api/user/1/gold", json={"amount": -30}, headers=BASIC).json()["data"] == {
        "gold": 120
    }
    response = client.post("/api/user/1/gold", json={"amount": -500}, headers=BASIC)
    assert response.status_code == 400
    assert response.json()["message"].startswith("Insufficient gold")
    assert client.post("/api/user/1/gold", json={"amount": 0}, headers=BASIC).status_code == 400
    assert client.post("/api/user/1/gold", json={}, headers=BASIC).status_code == 400


def test_inventory_add_and_remove(client):
    response = client.post(
        "/api/user/1/inventory/add", json={"itemId": "potion", "quantity": 2}, headers=BASIC
    )
    assert response.status_code == 200
    response = client.post("/api/user/1/inventory/add", json={"itemId": "beef"}, headers=BASIC)
    assert response.status_code == 200

    inventory = client.get("/api/user/1/inventory", headers=BASIC).json()["data"]
    assert inventory["consumables"]["potion"] == 2
    assert inventory["items"] == {"beef": 1}

    response = client.post(
        "/api/user/1/inventory/remove", json={"itemId": "beef", "quantity": 5}, headers=BASIC
    )
    assert response.status_code == 400
    response = client.post("/api/user/1/inventory/add", json={"itemId": "ghost"}, headers=BASIC)
    assert response.status_code == 404


def test_items_catalog(client):
    items = client.get("/api/items", headers=BASIC).json()["data"]
    assert any(item["id"] == "potion" for item in items)
    potion = client.get("/api/items/potion", headers=BASIC).json()["data"]
    assert potion["heal"] == 50
    assert potion["stackable"] is True
    assert client.get("/api/items/ghost", headers=BASIC).status_code == 404


def test_leaderboard_and_global_stats(client):
    client.post("/api/user/1/gold", json={"amount": 500}, headers=BASIC)
    client.post("/api/user/2/gold", json={"amount": 5}, headers=BASIC)

    board = client.get("/api/leaderboard/gold", params={"limit": 1}, headers=BASIC).json()["data"]
    assert len(board) == 1
    assert board[0]["user_id"] == "1"
    assert client.get("/api/leaderboard/wins", headers=BASIC).status_code == 400

    stats = client.get("/api/stats", headers=BASIC).json()["data"]
    assert stats["totalUsers"] == 2
    assert stats["totalGold"] == 705
    assert stats["avgLevel"] == 1


def test_admin_reset_requires_premium(client):
    client.post("/api/user/1/gold", json={"amount": 500}, headers=BASIC)
    response = client.post("/api/admin/user/1/reset", headers=BASIC)
    assert response.status_code == 403
    assert response.json()["message"] == "Premium only"

    response = client.post("/api/admin/user/1/reset", headers=PREMIUM)
    assert response.status_code == 200
    assert client.get("/api/user/1", headers=BASIC).json()["data"]["gold"] == 100


def test_spam_moderation_endpoints(client):
    for _ in range(3):
        response = client.post("/api/admin/spam/warn/7", json={"reason": "flood"}, headers=BASIC)
    assert response.json()["data"]["banned"] is True

    check = client.post("/api/admin/spam/check/7", headers=BASIC).json()["data"]
    assert check["banned"] is True
    assert check["ban"]["reason"] == "Too many warnings: flood"

    assert client.post("/api/admin/spam/unban/7", headers=BASIC).status_code == 200
    response = client.post("/api/admin/spam/unban/7", headers=BASIC)
    assert response.status_code == 400
    assert response.json()["message"] == "User not banned"

    response = client.post("/api/admin/spam/warn/8", headers=BASIC)
    assert response.json()["data"]["warnings"] == 1


def test_quest_catalog_listing(client):
    quests = client.get("/api/quests", headers=BASIC).json()["data"]
    by_id = {quest["id"]: quest for quest in quests}
    assert by_id["daily_hunt"]["reward"] == {"exp": 100, "gold": 200, "items": {}}
    assert by_id["beginner_hunt"]["reward"]["items"] == {"iron_sword": 1}


def test_quest_lifecycle(client):
    started = client.post("/api/user/1/quests/daily_fish/start", headers=BASIC).json()["data"]
    assert started["progress"] == 0
    assert started["completed"] is False

    response = client.post("/api/user/1/quests/daily_fish/complete", headers=BASIC)
    assert response.status_code == 400

    client.post("/api/user/1/quests/daily_fish/progress", headers=BASIC)
    progress = client.post(
        "/api/user/1/quests/daily_fish/progress", json={"amount": 5}, headers=BASIC
    ).json()["data"]
    assert progress["progress"] == 3
    assert progress["completedAt"] is not None

    claim = client.post("/api/user/1/quests/daily_fish/complete", headers=BASIC).json()["data"]
    assert claim == {"id": "daily_fish", "exp": 80, "gold": 150, "items": {}, "leveled": False, "level": 1}
    assert client.get("/api/user/1", headers=BASIC).json()["data"]["gold"] == 250
    assert client.get("/api/user/1/quests", headers=BASIC).json()["data"] == []


def test_unknown_quest_is_not_found(client):
    response = client.post("/api/user/1/quests/dragon/start", headers=BASIC)
    assert response.status_code == 404
    assert response.json() == {"success": False, "message": "Quest dragon not found"}
