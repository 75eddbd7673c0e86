from eti.core.config import settings


def test_health(client):
    res = client.get("/health")
    assert res.status_code == 200
    assert res.json()["status"] == "healthy"


def test_anonymous_session_is_landing(client):
    res = client.get("/api/v1/session")

    assert res.status_code == 200
    assert res.json()["role"] is None
    assert res.json()["rendered_view"] == "LANDING"


def test_login_lands_on_dashboard(client):
    res = client.post("/api/v1/session/login", json={"role": "HR_MANAGER"})

    assert res.status_code == 200
    assert res.json()["rendered_view"] == "DASHBOARD"
    assert res.json()["token"]


def test_admin_needs_access_code(client):
    assert client.post("/api/v1/session/login", json={"role": "ADMIN"}).status_code == 403
    assert client.post("/api/v1/session/admin-login", json={"access_code": "nope"}).status_code == 403

    res = client.post("/api/v1/session/admin-login", json={"access_code": settings.ADMIN_ACCESS_CODE})
    assert res.json()["rendered_view"] == "ADMIN_PANEL"


def test_candidate_cannot_open_dashboard_view(client, candidate_headers):
    res = client.post("/api/v1/session/navigate", json={"view": "DASHBOARD"}, headers=candidate_headers)

    assert res.json()["view"] == "DASHBOARD"
    assert res.json()["rendered_view"] == "CANDIDATE_PORTAL"


def test_select_and_close_candidate(client, hr_headers):
    res = client.post("/api/v1/session/select", json={"candidate_id": "demo-c1"}, headers=hr_headers)
    assert res.json()["rendered_view"] == "CANDIDATE_REPORT"

    headers = {"Authorization": f"Bearer {res.json()['token']}"}
    closed = client.post("/api/v1/session/close", headers=headers).json()
    assert closed["selected_candidate_id"] is None
    assert closed["rendered_view"] == "CANDIDATES"


def test_select_unknown_candidate(client, hr_headers):
    res = client.post("/api/v1/session/select", json={"candidate_id": "missing"}, headers=hr_headers)
    assert res.status_code == 404


def test_logout_returns_to_landing(client, hr_headers):
    res = client.post("/api/v1/session/logout", headers=hr_headers)
    assert res.json()["role"] is None
    assert res.json()["rendered_view"] == "LANDING"


def test_session_required(client):
    assert client.get("/api/v1/dashboard/stats").status_code == 401
    bad = {"Authorization": "Bearer not-a-token"}
    assert client.get("/api/v1/dashboard/stats", headers=bad).status_code == 401


def test_dashboard_requires_management(client, candidate_headers):
    assert client.get("/api/v1/dashboard/stats", headers=candidate_headers).status_code == 403


def test_dashboard_stats_on_demo_data(client, hr_headers):
    res = client.get("/api/v1/dashboard/stats", headers=hr_headers)

    assert res.json() == {"total_candidates": 3, "verified": 1, "host_community": 1, "high_risk": 1}


def test_recent_candidates(client, hr_headers):
    rows = client.get("/api/v1/dashboard/recent", params={"limit": 2}, headers=hr_headers).json()

    assert [row["id"] for row in rows] == ["demo-c1", "demo-c2"]
    assert rows[1]["risk_level"] == "HIGH"
    assert rows[1]["risk_severity"] == 2


def test_admin_overview(client, admin_headers, hr_headers):
    assert client.get("/api/v1/admin/overview", headers=hr_headers).status_code == 403

    overview = client.get("/api/v1/admin/overview", headers=admin_headers).json()

    assert overview["stats"]["total_candidates"] == 3
    assert overview["total_jobs"] == 2
    assert overview["store"] == {"ready": True, "candidates": "demo", "jobs": "demo"}
