"""Pytest configuration for gemini-image-mcp tests."""

import base64

import pytest

from gemini_client import ImagePart, TextPart

# 1x1 transparent PNG
PNG_B64 = "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAQAAAC1HAwCAAAAC0lEQVR42mNkYAAAAAYAAjCB0C8AAAAASUVORK5CYII="
PNG_BYTES = base64.b64decode(PNG_B64)


class FakeClient:
    """Stands in for GeminiClient: records calls and returns canned parts."""

    def __init__(self, parts=None, error=None):
        self.parts = parts or []
        self.error = error
        self.calls = []

    def generate_content(self, model_id, parts, aspect_ratio=None):
        self.calls.append({"model_id": model_id, "parts": parts, "aspect_ratio": aspect_ratio})
        if self.error is not None:
            raise self.error
        return list(self.parts)


@pytest.fixture
def fake_client():
    """Factory for fake clients: fake_client(parts) or fake_client(error=exc)."""

    def _make(parts=None, error=None):
        return FakeClient(parts, error)

    return _make


@pytest.fixture
def png_b64():
    return PNG_B64


@pytest.fixture
def png_bytes():
    return PNG_BYTES


@pytest.fixture
def output_dir(tmp_path):
    """Output directory that does not exist yet."""
    return str(tmp_path / "out" / "nested")


@pytest.fixture
def image_client():
    """Fake client replying with commentary and two images."""
    return FakeClient([TextPart("Here you go"), ImagePart(PNG_B64), ImagePart(PNG_B64, "image/jpeg")])


@pytest.fixture
def source_image(tmp_path):
    path = tmp_path / "source.jpg"
    path.write_bytes(PNG_BYTES)
    return str(path)
