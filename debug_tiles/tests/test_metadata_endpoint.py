import json

import debug_tiles.routes.metadata as metadata_routes
from debug_tiles.buildinfo import get_version_provider
from debug_tiles.config import settings
from debug_tiles.main import app
from debug_tiles.tilejson import TileJSON, build_tilejson


def test_tilejson_document(client):
    response = client.get("/", headers={"Accept": "application/json"})

    assert response.status_code == 200
    assert response.headers["content-type"] == "application/json"
    assert response.headers["access-control-allow-origin"] == "*"
    assert response.headers["vary"] == "Accept"

    data = json.loads(response.text)
    assert data["tilejson"] == "3.0.0"
    assert data["tiles"] == ["http://testserver/{z}/{x}/{y}.png"]
    assert data["minzoom"] == 0
    assert data["maxzoom"] == 30
    assert data["tileSize"] == 256
    # Unset fields are omitted
    assert "name" not in data
    assert "bounds" not in data


def test_tilejson_is_default_for_wildcard_accept(client):
    response = client.get("/", headers={"Accept": "*/*"})
    assert response.status_code == 200
    template = response.json()["tiles"][0]
    for placeholder in ("{z}", "{x}", "{y}"):
        assert placeholder in template


def test_tilejson_honors_forwarded_headers(client):
    response = client.get(
        "/",
        headers={
            "Accept": "application/json",
            "X-Forwarded-Proto": "https",
            "X-Forwarded-Host": "tiles.example.com, proxy.internal",
        },
    )
    assert response.json()["tiles"] == ["https://tiles.example.com/{z}/{x}/{y}.png"]


def test_tilejson_ignores_forwarded_headers_when_untrusted(client, monkeypatch):
    monkeypatch.setattr(settings, "trust_forwarded_headers", False)
    response = client.get(
        "/",
        headers={
            "Accept": "application/json",
            "X-Forwarded-Proto": "https",
            "X-Forwarded-Host": "tiles.example.com",
        },
    )
    assert response.json()["tiles"] == ["http://testserver/{z}/{x}/{y}.png"]


def test_html_landing_page_with_footer(client):
    app.dependency_overrides[get_version_provider] = lambda: (lambda: "debug-tiles@0123456789ab-dirty")

    response = client.get("/", headers={"Accept": "text/html,application/xhtml+xml"})

    assert response.status_code == 200
    assert response.headers["content-type"] == "text/html; charset=utf-8"
    assert response.headers["vary"] == "Accept"
    assert "<h1>Debug Tiles</h1>" in response.text
    assert response.text.endswith("<address>debug-tiles@0123456789ab-dirty</address>")


def test_html_landing_page_allows_empty_footer(client):
    app.dependency_overrides[get_version_provider] = lambda: (lambda: "")
    response = client.get("/", headers={"Accept": "text/html"})
    assert response.status_code == 200
    assert response.text.endswith("<address></address>")


def test_html_footer_is_escaped(client):
    app.dependency_overrides[get_version_provider] = lambda: (lambda: "<b>x</b>")
    response = client.get("/", headers={"Accept": "text/html"})
    assert "<address>&lt;b&gt;x&lt;/b&gt;</address>" in response.text


def test_static_assets_are_served(client):
    response = client.get("/index.html")
    assert response.status_code == 200
    assert "Debug Tiles" in response.text


def test_missing_static_asset_is_not_found(client):
    assert client.get("/missing.css").status_code == 404
    assert client.get("/nested/missing.css").status_code == 404


def test_tilejson_model_drops_unset_fields():
    doc = TileJSON(tiles=["http://a/{z}/{x}/{y}.png"], name="debug")
    data = json.loads(doc.to_json())
    assert data == {
        "tilejson": "3.0.0",
        "name": "debug",
        "tiles": ["http://a/{z}/{x}/{y}.png"],
        "minzoom": 0,
        "maxzoom": 30,
    }


def test_tilejson_model_drops_empty_and_zero_optional_fields():
    doc = TileJSON(
        tiles=["http://a/{z}/{x}/{y}.png"],
        name="",
        attribution="",
        tile_size=0,
        grids=[],
        minzoom=0,
    )
    data = json.loads(doc.to_json())
    assert data == {
        "tilejson": "3.0.0",
        "tiles": ["http://a/{z}/{x}/{y}.png"],
        "minzoom": 0,
        "maxzoom": 30,
    }


def test_tilejson_serialization_failure_returns_500(client, monkeypatch):
    class Broken:
        def to_json(self):
            raise ValueError("cannot serialize")

    monkeypatch.setattr(metadata_routes, "build_tilejson", lambda origin: Broken())

    response = client.get("/", headers={"Accept": "application/json"})
    assert response.status_code == 500
    assert response.text == "cannot serialize"


def test_build_tilejson_uses_origin():
    doc = build_tilejson("https://example.org:8443")
    assert doc.tiles == ["https://example.org:8443/{z}/{x}/{y}.png"]
    assert doc.tile_size == 256
