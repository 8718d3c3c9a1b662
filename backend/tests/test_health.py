def test_health_endpoints(client):
    response = client.get("/api/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}

    live = client.get("/api/health/live")
    assert live.status_code == 200
    payload = live.json()
    assert payload["status"] == "ok"
    assert payload["reoptimization_requested"] is False


def test_oversized_request_is_refused(client):
    response = client.post(
        "/api/conflicts/detect",
        content=b"x" * 3_000_000,
        headers={"content-type": "application/json"},
    )
    assert response.status_code == 413
    assert "too large" in response.json()["message"]
