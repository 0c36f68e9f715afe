"""Shared fixtures for the Stability AI MCP Server tests"""

import json
from io import BytesIO
from unittest.mock import MagicMock

import pytest
import requests
from PIL import Image

from models.config import StabilityConfig


def build_response(status_code=200, content=b"", headers=None, json_body=None):
    """Real ``requests.Response`` populated without touching the network"""
    response = requests.Response()
    response.status_code = status_code
    response.encoding = "utf-8"
    if json_body is not None:
        content = json.dumps(json_body).encode("utf-8")
        response.headers["Content-Type"] = "application/json"
    response._content = content
    response.headers.update(headers or {})
    return response


@pytest.fixture
def make_response():
    return build_response


@pytest.fixture
def config(tmp_path):
    return StabilityConfig(
        api_key="sk-test-key",
        timeout_ms=1000,
        output_dir=str(tmp_path / "images"),
        output_3d_dir=str(tmp_path / "meshes"),
    )


@pytest.fixture
def session():
    return MagicMock(spec=requests.Session)


@pytest.fixture
def png_bytes():
    buf = BytesIO()
    Image.new("RGB", (64, 48), (200, 30, 30)).save(buf, format="PNG")
    return buf.getvalue()


@pytest.fixture
def image_file(tmp_path, png_bytes):
    path = tmp_path / "input.png"
    path.write_bytes(png_bytes)
    return path
