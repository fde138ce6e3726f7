"""
Test health and root endpoints.
"""


def test_health_check(test_client):
    response = test_client.get("/healthz")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert data["service"] == "palette-service"
    assert "version" in data


def test_root(test_client):
    response = test_client.get("/")

    assert response.status_code == 200
    assert response.json()["docs"] == "/docs"


def test_unknown_route_uses_message_shape(test_client):
    response = test_client.get("/does-not-exist")

    assert response.status_code == 404
    assert "message" in response.json()
