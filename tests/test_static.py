"""
tests/test_static.py -- Production serving of the compiled front end.

Covers:
  - index.html for / and for any client-side route
  - real files under the build directory and the /static asset mount
  - unknown /api/ paths stay JSON 404s instead of falling through to the SPA
  - paths that resolve outside the build directory never leak files
  - no static serving outside production or without an index.html
"""

from __future__ import annotations

from collections.abc import Generator

import pytest
from fastapi.testclient import TestClient

from api.main import create_app

INDEX_HTML = "<!doctype html><title>DevConnector</title>"
SECRET_TEXT = "outside the build directory"


@pytest.fixture(scope="module")
def build_dir(tmp_path_factory):
    """A client build with index.html, a root file and a /static asset, next to a file it must not serve."""
    root = tmp_path_factory.mktemp("frontend")
    build = root / "build"
    (build / "static" / "js").mkdir(parents=True)
    (build / "index.html").write_text(INDEX_HTML)
    (build / "manifest.json").write_text('{"name": "DevConnector"}')
    (build / "static" / "js" / "main.js").write_text("console.log('app');")
    (root / "secret.txt").write_text(SECRET_TEXT)
    return build


@pytest.fixture(scope="module")
def prod_client(build_dir, settings_factory) -> Generator[TestClient, None, None]:
    app = create_app(settings_factory(environment="production", static_dir=str(build_dir)))
    with TestClient(app) as c:
        yield c


class TestSpaServing:
    @pytest.mark.parametrize("path", ["/", "/some/route", "/profile/0123456789abcdef01234567"])
    def test_client_routes_get_index(self, prod_client, path):
        resp = prod_client.get(path)
        assert resp.status_code == 200, f"Expected 200 for {path}, got {resp.status_code}"
        assert resp.text == INDEX_HTML

    def test_root_level_file_served(self, prod_client):
        resp = prod_client.get("/manifest.json")
        assert resp.status_code == 200
        assert resp.json() == {"name": "DevConnector"}

    def test_static_asset_mount(self, prod_client):
        resp = prod_client.get("/static/js/main.js")
        assert resp.status_code == 200
        assert resp.text == "console.log('app');"

    def test_api_routes_still_answer(self, prod_client):
        resp = prod_client.get("/api/health")
        assert resp.status_code == 200
        assert resp.json()["status"] == "ok"

    def test_unknown_api_path_is_json_404(self, prod_client):
        resp = prod_client.get("/api/nope")
        assert resp.status_code == 404
        assert resp.json() == {"msg": "Not found"}

    @pytest.mark.parametrize("path", ["/../secret.txt", "/%2e%2e/secret.txt", "/static/../../secret.txt"])
    def test_paths_outside_build_never_leak(self, prod_client, path):
        resp = prod_client.get(path)
        assert SECRET_TEXT not in resp.text
        if resp.status_code == 200:
            assert resp.text == INDEX_HTML


class TestStaticDisabled:
    def test_not_served_outside_production(self, client):
        assert client.get("/").status_code == 404

    def test_not_served_without_index(self, tmp_path, settings_factory):
        app = create_app(settings_factory(environment="production", static_dir=str(tmp_path)))
        with TestClient(app) as c:
            assert c.get("/").status_code == 404
