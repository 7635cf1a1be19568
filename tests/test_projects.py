from rootpilot.config import settings


def _create_project(client, user, **overrides):
    payload = {"title": "Compressor vibration study", "description": "Q3 vibration data"}
    payload.update(overrides)
    response = client.post("/api/projects", json=payload, headers=user["headers"])
    assert response.status_code == 201, response.text
    return response.json()


def test_create_and_get_project(client, alice):
    project = _create_project(client, alice, dataFileUrl="https://files.example.com/q3.csv")
    assert project["userId"] == alice["user"]["id"]
    assert project["status"] == "active"
    assert project["dataFileUrl"] == "https://files.example.com/q3.csv"
    assert project["analysisResults"] is None

    response = client.get(f"/api/projects/{project['id']}", headers=alice["headers"])
    assert response.status_code == 200
    assert response.json() == project


def test_create_project_requires_title(client, alice):
    response = client.post("/api/projects", json={"description": "x"}, headers=alice["headers"])
    assert response.status_code == 400
    assert response.json() == {"error": "Invalid input data"}


def test_list_projects_is_scoped_to_caller(client, alice, bob):
    first = _create_project(client, alice, title="First")
    second = _create_project(client, alice, title="Second")
    _create_project(client, bob, title="Bob's")

    response = client.get("/api/projects", headers=alice["headers"])
    assert response.status_code == 200
    assert [p["id"] for p in response.json()] == [first["id"], second["id"]]

    response = client.get("/api/projects", headers=bob["headers"])
    assert [p["title"] for p in response.json()] == ["Bob's"]


def test_update_project_merges_fields(client, alice):
    project = _create_project(client, alice)
    response = client.put(
        f"/api/projects/{project['id']}",
        json={"status": "archived"},
        headers=alice["headers"],
    )
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "archived"
    assert body["title"] == project["title"]
    assert body["description"] == project["description"]
    assert body["createdAt"] == project["createdAt"]


def test_update_project_rejects_bad_status(client, alice):
    project = _create_project(client, alice)
    response = client.put(
        f"/api/projects/{project['id']}", json={"status": "exploded"}, headers=alice["headers"]
    )
    assert response.status_code == 400


def test_foreign_project_is_forbidden_and_untouched(client, alice, bob):
    project = _create_project(client, alice)
    url = f"/api/projects/{project['id']}"

    assert client.get(url, headers=bob["headers"]).status_code == 403
    response = client.put(url, json={"title": "Hijacked"}, headers=bob["headers"])
    assert response.status_code == 403
    assert response.json() == {"error": "Access denied"}
    assert client.delete(url, headers=bob["headers"]).status_code == 403

    response = client.get(url, headers=alice["headers"])
    assert response.status_code == 200
    assert response.json()["title"] == project["title"]


def test_foreign_project_can_be_reported_as_missing(client, alice, bob, monkeypatch):
    monkeypatch.setattr(settings, "HIDE_FOREIGN_RESOURCES", True)
    project = _create_project(client, alice)

    response = client.get(f"/api/projects/{project['id']}", headers=bob["headers"])
    assert response.status_code == 404
    assert response.json() == {"error": "Project not found"}


def test_delete_project(client, alice):
    project = _create_project(client, alice)
    url = f"/api/projects/{project['id']}"

    response = client.delete(url, headers=alice["headers"])
    assert response.status_code == 200
    assert response.json() == {"message": "Project deleted successfully"}

    assert client.get(url, headers=alice["headers"]).status_code == 404
    assert client.delete(url, headers=alice["headers"]).status_code == 404


def test_missing_project_is_not_found(client, alice):
    response = client.get("/api/projects/does-not-exist", headers=alice["headers"])
    assert response.status_code == 404
    assert response.json() == {"error": "Project not found"}


def test_analyze_project_stores_results(client, alice):
    project = _create_project(client, alice)

    response = client.post(
        "/api/analyze", json={"projectId": project["id"]}, headers=alice["headers"]
    )
    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["message"] == "Analysis completed successfully"
    results = body["analysisResults"]
    assert results["analysisType"] == "root_cause"
    assert len(results["rootCauses"]) == 3
    assert len(results["chartData"]["timeSeriesData"]) == 30

    stored = client.get(f"/api/projects/{project['id']}", headers=alice["headers"]).json()
    assert stored["status"] == "completed"
    assert stored["analysisResults"] == results


def test_analyze_project_failures(client, alice, bob):
    project = _create_project(client, alice)

    response = client.post("/api/analyze", json={}, headers=alice["headers"])
    assert response.status_code == 400
    assert response.json() == {"error": "Project ID is required"}

    response = client.post("/api/analyze", json={"projectId": ""}, headers=alice["headers"])
    assert response.json() == {"error": "Project ID is required"}

    response = client.post(
        "/api/analyze", json={"projectId": "missing"}, headers=alice["headers"]
    )
    assert response.status_code == 404

    response = client.post(
        "/api/analyze", json={"projectId": project["id"]}, headers=bob["headers"]
    )
    assert response.status_code == 403

    response = client.post("/api/analyze", json={"projectId": project["id"]})
    assert response.status_code == 401
