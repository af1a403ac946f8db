def test_health_ok(client):
    res = client.get("/api/health")
    assert res.status_code == 200
    body = res.json()
    assert body["status"] == "ok"
    assert body["storage"] is True
    assert body["store_loaded"] is True
    assert body["ai_adapter"] is True
