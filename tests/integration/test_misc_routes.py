from tailormint.exceptions import UpstreamError


def test_mailing_list_subscribe(client, monkeypatch):
    seen = {}

    def _upsert(email, firstname, lastname):
        seen.update(email=email, firstname=firstname)
        return [{"email": email}]

    monkeypatch.setattr("tailormint.mailing_list.repository.upsert_subscriber", _upsert)
    r = client.post("/api/v1/mailing-list", json={"email": "  Ada@Test.COM ", "firstname": "Ada"})
    assert r.status_code == 201
    assert r.json()["message"] == "Successfully subscribed to mailing list"
    assert seen["email"] == "ada@test.com"


def test_mailing_list_invalid_email(client):
    r = client.post("/api/v1/mailing-list", json={"email": "not-an-email"})
    assert r.status_code == 400
    assert r.json()["code"] == "invalid_request"


def test_mailing_list_upstream_failure(client, monkeypatch):
    def _fail(*a):
        raise UpstreamError("Failed to subscribe to mailing list")

    monkeypatch.setattr("tailormint.mailing_list.repository.upsert_subscriber", _fail)
    r = client.post("/api/v1/mailing-list", json={"email": "ada@test.com"})
    assert r.status_code == 500
    assert r.json()["retryable"] is False


def test_health(client):
    r = client.get("/api/v1/health")
    assert r.status_code == 200
    assert r.json()["ok"] is True
    assert r.json()["rate_limit"]["enabled"] is False


def test_health_supabase(client, monkeypatch):
    monkeypatch.setattr("tailormint.health.router.health_supabase_info", lambda: {"configured": True, "reachable": True})
    assert client.get("/api/v1/health/supabase").status_code == 200

    monkeypatch.setattr("tailormint.health.router.health_supabase_info", lambda: {"configured": False, "reachable": False})
    assert client.get("/api/v1/health/supabase").status_code == 503


def test_unknown_route_is_json_404(client):
    r = client.get("/api/v1/nope")
    assert r.status_code == 404
    assert r.json() == {"error": "Not Found", "code": "not_found"}


def test_security_headers_present(client):
    r = client.get("/api/v1/health")
    assert r.headers["X-Content-Type-Options"] == "nosniff"
