from concurrent.futures import ThreadPoolExecutor
from io import BytesIO

import pytest
from fastapi.testclient import TestClient
from PIL import Image

import debug_tiles.routes.tiles as tiles_routes
from debug_tiles.errors import TileEncodeError
from debug_tiles.main import app

client = TestClient(app)


def test_tile_png_success():
    """A well-formed tile path yields a 256px PNG with open CORS."""
    response = client.get("/2/3/5.png")

    assert response.status_code == 200
    assert response.headers["content-type"] == "image/png"
    assert response.headers["access-control-allow-origin"] == "*"
    im = Image.open(BytesIO(response.content))
    assert im.format == "PNG"
    assert im.size == (256, 256)


@pytest.mark.parametrize(
    "path",
    [
        "/abc/3/5.png",
        "/2/abc/5.png",
        "/2/3/abc.png",
        "/2/3/5.jpg",
        "/2/3/5",
        "/2/3/.png",
        "/2/3/1_0.png",
        "/2.5/3/5.png",
        "/" + "9" * 5000 + "/0/0.png",
        "/0/0/" + "9" * 5000 + ".png",
        "/99999999999999999999/0/0.png",
        "/9223372036854775808/0/0.png",
        "/0/-9223372036854775809/0.png",
    ],
)
def test_malformed_tile_paths_are_not_found(path):
    response = client.get(path)
    assert response.status_code == 404


def test_not_found_uses_error_response_body():
    response = client.get("/abc/3/5.png")
    assert response.status_code == 404
    body = response.json()
    assert body["code"] == "tile_not_found"
    assert body["details"] == {"path": "/abc/3/5.png"}


def test_out_of_range_coordinates_render_as_is():
    response = client.get("/-1/99999/-7.png")
    assert response.status_code == 200
    assert Image.open(BytesIO(response.content)).size == (256, 256)


def test_high_dpi_tile_is_double_size():
    response = client.get("/2/3/5@2x.png")
    assert response.status_code == 200
    assert Image.open(BytesIO(response.content)).size == (512, 512)


@pytest.mark.parametrize("path", ["/2/3/5@0x.png", "/2/3/5@99x.png", "/2/3/5@x.png"])
def test_high_dpi_scale_out_of_range_is_not_found(path):
    assert client.get(path).status_code == 404


def test_parse_tile_path():
    coord = tiles_routes.parse_tile_path("2", "-3", "+5@2x.png")
    assert (coord.z, coord.x, coord.y, coord.scale) == (2, -3, 5, 2)
    assert tiles_routes.parse_tile_path(" 2", "3", "5.png") is None
    assert tiles_routes.parse_tile_path("2", "3", "5.PNG") is None


def test_parse_tile_path_int64_bounds():
    top = tiles_routes.parse_tile_path("9223372036854775807", "-9223372036854775808", "007.png")
    assert (top.z, top.x, top.y) == (2**63 - 1, -(2**63), 7)
    assert tiles_routes.parse_tile_path("9223372036854775808", "0", "0.png") is None


def test_leading_zeros_do_not_count_toward_the_digit_limit():
    coord = tiles_routes.parse_tile_path("0" * 5000 + "5", "-" + "0" * 30 + "1", "0.png")
    assert (coord.z, coord.x, coord.y) == (5, -1, 0)



def test_encode_failure_returns_500_with_message(monkeypatch):
    def boom(im):
        raise TileEncodeError("encoder exploded")

    monkeypatch.setattr(tiles_routes.tile_render, "encode_png", boom)

    response = client.get("/2/3/5.png")
    assert response.status_code == 500
    assert response.text == "encoder exploded"


def test_repeated_requests_return_identical_bytes():
    first = client.get("/4/7/9.png")
    second = client.get("/4/7/9.png")
    assert first.content == second.content


def test_concurrent_requests_return_identical_bytes():
    with ThreadPoolExecutor(max_workers=4) as pool:
        responses = list(pool.map(lambda _: client.get("/2/3/5.png"), range(8)))
    assert all(r.status_code == 200 for r in responses)
    assert len({r.content for r in responses}) == 1
