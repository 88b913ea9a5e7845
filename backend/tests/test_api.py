import os

from fastapi.testclient import TestClient

from sync_monitor.main import create_app

MIB = 1024 * 1024


def test_health_needs_no_token(app_settings):
    resp = TestClient(create_app(app_settings)).get("/health")
    assert resp.status_code == 200
    assert resp.json()["data"] == {"status": "ok", "env": "test"}


def test_protected_routes_require_token(app_settings):
    anon = TestClient(create_app(app_settings))
    for url in ("/logs", "/status", "/dashboard", "/logs/cron/tail", "/logs/cron/download"):
        assert anon.get(url).status_code == 401

    wrong = TestClient(create_app(app_settings), headers={"Authorization": "Bearer nope"})
    assert wrong.get("/logs").status_code == 401


def test_unset_token_denies_everyone(app_settings):
    app_settings.ADMIN_TOKEN = None
    c = TestClient(create_app(app_settings), headers={"Authorization": "Bearer anything"})
    assert c.get("/status").status_code == 401


def test_list_logs(roots, client):
    roots.home_log("sync/apache2/error.log", "boom\n")
    roots.home_log("supervisord.log", "started\n")

    body = client.get("/logs").json()
    assert body["total"] == 2
    assert [item["key"] for item in body["logs"]] == ["apache-error", "supervisord"]
    assert body["logs"][0]["size"] == 5
    assert body["logs"][0]["updated_at"].endswith("Z")


def test_tail_endpoint(roots, client):
    roots.home_log("sync/unison.log", "a\nb\nc\n")
    body = client.get("/logs/sync/tail", params={"lines": 2}).json()
    assert body["content"] == "b\nc"
    assert body["lines"] == 2


def test_tail_endpoint_clamps(roots, client):
    roots.home_log("sync/unison.log", "a\nb\nc\n")
    assert client.get("/logs/sync/tail", params={"lines": 5000}).json()["lines"] == 1000
    assert client.get("/logs/sync/tail", params={"lines": 0}).json()["content"] == "c"


def test_tail_unknown_key(client):
    assert client.get("/logs/nope/tail").status_code == 404


def test_download_streams_file(roots, client):
    roots.home_log("sync/apache2/error.log", "downloaded")
    resp = client.get("/logs/apache-error/download")

    assert resp.status_code == 200
    assert resp.content == b"downloaded"
    assert resp.headers["content-length"] == "10"
    assert resp.headers["content-disposition"] == 'attachment; filename="error.log"'
    assert resp.headers["content-type"].startswith("text/plain")


def test_download_unknown_key(client):
    resp = client.get("/logs/apache-error/download")
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Invalid log file."


def test_download_too_large(roots, client):
    roots.sized(roots.home, "sync/unison.log", 11 * MIB)
    assert client.get("/logs/sync/tail", params={"lines": 1}).status_code == 200

    resp = client.get("/logs/sync/download")
    assert resp.status_code == 413
    assert resp.json()["detail"] == "File too large for download."


def test_status_endpoint(roots, client):
    roots.status_file.write_text("sync disabled: by operator\n")
    body = client.get("/status").json()
    assert body == {"label": "Disabled", "color": "red", "error": None, "show_badge": False}


def test_dashboard_without_logs(client):
    body = client.get("/dashboard").json()
    assert body["logs"] == []
    assert body["selected"] is None
    assert body["notice"] == "No valid log files found or access denied."
    assert body["status"]["label"] == "Initializing"


def test_dashboard_selects_requested_or_first(roots, client):
    roots.home_log("sync/apache2/access.log", "GET /\n")
    roots.home_log("sync/cron.log", "job ran\n")

    body = client.get("/dashboard").json()
    assert body["selected"]["key"] == "apache-access"
    assert body["content"] == "GET /"

    body = client.get("/dashboard", params={"log": "cron"}).json()
    assert body["selected"]["key"] == "cron"
    assert body["content"] == "job ran"

    body = client.get("/dashboard", params={"log": "bogus"}).json()
    assert body["selected"]["key"] == "apache-access"


def test_dashboard_render_bypasses_cache(roots, client):
    roots.status_file.write_text("sync running\n")
    assert client.get("/status").json()["label"] == "Running"
    assert client.get("/logs").json()["total"] == 0

    roots.status_file.write_text("sync completed\n")
    roots.home_log("sync/unison.log", "fresh\n")

    # Cached values still served by the plain endpoints
    assert client.get("/status").json()["label"] == "Running"

    body = client.get("/dashboard").json()
    assert body["status"]["label"] == "Completed"
    assert body["selected"]["key"] == "sync"
    assert body["content"] == "fresh"


def test_request_id_is_echoed(client):
    resp = client.get("/health", headers={"x-request-id": "abc"})
    assert resp.headers["x-request-id"] == "abc"
    assert "x-response-ms" in resp.headers


def test_download_of_log_removed_after_validation(roots, client, monkeypatch):
    path = roots.home_log("sync/apache2/error.log", "downloaded")
    catalog = client.app.state.log_catalog
    real_get_catalog = catalog.get_catalog

    def catalog_then_remove():
        entries = real_get_catalog()
        if os.path.exists(path):
            os.unlink(path)
        return entries

    monkeypatch.setattr(catalog, "get_catalog", catalog_then_remove)
    resp = client.get("/logs/apache-error/download")

    assert resp.status_code == 500
    assert resp.json()["detail"] == "An error occurred during download."


def test_download_of_log_removed_while_streaming(roots, client, monkeypatch):
    path = roots.home_log("sync/apache2/error.log", "downloaded")
    catalog = client.app.state.log_catalog
    real_open_download = catalog.open_download

    def open_then_remove(key):
        target = real_open_download(key)
        os.unlink(path)
        return target

    monkeypatch.setattr(catalog, "open_download", open_then_remove)
    resp = client.get("/logs/apache-error/download")

    assert resp.status_code == 200
    assert resp.content == b"downloaded"
    assert resp.headers["content-length"] == "10"
