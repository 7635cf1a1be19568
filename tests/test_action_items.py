import pytest


@pytest.fixture
def report(client, alice, create_incident):
    incident = create_incident(alice)
    response = client.post(f"/api/incidents/{incident['id']}/analyze", headers=alice["headers"])
    assert response.status_code == 201
    body = response.json()
    body["incident"] = incident
    return body


def test_update_action_item_status(client, alice, report):
    item = report["actionItems"][0]
    url = f"/api/action-items/{item['id']}"

    response = client.put(url, json={"status": "in_progress"}, headers=alice["headers"])
    assert response.status_code == 200
    assert response.json()["status"] == "in_progress"
    assert response.json()["title"] == item["title"]

    first = client.put(url, json={"status": "completed"}, headers=alice["headers"])
    second = client.put(url, json={"status": "completed"}, headers=alice["headers"])
    assert first.status_code == second.status_code == 200
    assert first.json() == second.json()
    assert second.json()["status"] == "completed"

    rca = client.get(f"/api/incidents/{report['incident']['id']}/rca", headers=alice["headers"])
    statuses = {i["id"]: i["status"] for i in rca.json()["actionItems"]}
    assert statuses[item["id"]] == "completed"


def test_update_action_item_rejects_unknown_status(client, alice, report):
    item = report["actionItems"][0]
    response = client.put(
        f"/api/action-items/{item['id']}", json={"status": "done"}, headers=alice["headers"]
    )
    assert response.status_code == 400
    response = client.put(f"/api/action-items/{item['id']}", json={}, headers=alice["headers"])
    assert response.status_code == 400


def test_foreign_action_item_is_forbidden(client, alice, bob, report):
    item = report["actionItems"][0]
    response = client.put(
        f"/api/action-items/{item['id']}", json={"status": "blocked"}, headers=bob["headers"]
    )
    assert response.status_code == 403

    rca = client.get(f"/api/incidents/{report['incident']['id']}/rca", headers=alice["headers"])
    assert rca.json()["actionItems"][0]["status"] == "pending"


def test_missing_action_item_is_not_found(client, alice):
    response = client.put(
        "/api/action-items/nope", json={"status": "completed"}, headers=alice["headers"]
    )
    assert response.status_code == 404
    assert response.json() == {"error": "Action item not found"}


def test_orphaned_action_item_is_not_found(client, alice, report):
    client.delete(f"/api/incidents/{report['incident']['id']}", headers=alice["headers"])

    item = report["actionItems"][0]
    response = client.put(
        f"/api/action-items/{item['id']}", json={"status": "completed"}, headers=alice["headers"]
    )
    assert response.status_code == 404


def test_action_item_requires_token(client, report):
    item = report["actionItems"][0]
    response = client.put(f"/api/action-items/{item['id']}", json={"status": "completed"})
    assert response.status_code == 401
