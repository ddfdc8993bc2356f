import shutil

from fastapi.testclient import TestClient

from blogo.main import create_app


def build_client(container):
    return TestClient(create_app(container))


def test_health_reports_healthy(container, write_post):
    write_post("a.md", title="A")

    res = build_client(container).get("/health")

    assert res.status_code == 200
    body = res.json()
    assert body["status"] == "healthy"
    assert body["version"] == "1.0.0"
    assert {c["name"]: c["status"] for c in body["checks"]} == {"filesystem": "healthy", "cache": "healthy"}
    assert set(body["metrics"]["caches"]) == {"posts", "metadata", "post"}


def test_health_degraded_without_posts(container):
    res = build_client(container).get("/health")

    assert res.status_code == 200
    assert res.json()["status"] == "degraded"


def test_health_unhealthy_without_posts_dir(container, posts_dir):
    shutil.rmtree(posts_dir)

    res = build_client(container).get("/health")

    assert res.status_code == 503
    assert res.json()["status"] == "unhealthy"
