"""Tests for image_storage."""

import os
from unittest.mock import patch

from image_storage import ensure_dir, save_image


class TestEnsureDir:
    def test_creates_missing_parents(self, output_dir):
        resolved = ensure_dir(output_dir)

        assert os.path.isabs(resolved)
        assert os.path.isdir(resolved)

    def test_idempotent(self, output_dir):
        assert ensure_dir(output_dir) == ensure_dir(output_dir)

    def test_relative_path_resolved_against_cwd(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)

        resolved = ensure_dir("generated-images")

        assert resolved == os.path.join(str(tmp_path), "generated-images")


class TestSaveImage:
    def test_writes_decoded_bytes(self, output_dir, png_b64, png_bytes):
        path = save_image(png_b64, output_dir, 0)

        assert os.path.isabs(path)
        with open(path, 'rb') as f:
            assert f.read() == png_bytes

    def test_filename_format(self, output_dir, png_b64):
        with patch("image_storage.time.time", return_value=1700000000.123):
            path = save_image(png_b64, output_dir, 3)

        assert os.path.basename(path) == "image-1700000000123-3.png"

    def test_same_millisecond_distinct_by_index(self, output_dir, png_b64):
        with patch("image_storage.time.time", return_value=1700000000.0):
            first = save_image(png_b64, output_dir, 0)
            second = save_image(png_b64, output_dir, 1)

        assert first != second
        assert os.path.exists(first)
        assert os.path.exists(second)

    def test_existing_file_not_overwritten(self, output_dir, png_b64, png_bytes):
        with patch("image_storage.time.time", return_value=1700000000.0):
            first = save_image(png_b64, output_dir, 0)
            with open(first, 'wb') as f:
                f.write(b"keep me")
            second = save_image(png_b64, output_dir, 0)

        assert os.path.basename(second) == "image-1700000000001-0.png"
        with open(first, 'rb') as f:
            assert f.read() == b"keep me"
        with open(second, 'rb') as f:
            assert f.read() == png_bytes
