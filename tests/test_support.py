"""
Support Module Tests
====================

Configuration loading, decoding helpers and image storage.
"""

import base64

import pytest

from ball_inspector.config import load_config
from ball_inspector.imaging import DecodeError, decode_data_url
from ball_inspector.imaging.decoder import sniff_mime_type, split_data_url
from ball_inspector.storage import ImageStore

from conftest import make_jpeg, to_data_url


class TestConfig:
    """Tests for YAML + environment configuration."""

    def test_defaults(self, tmp_path, monkeypatch):
        """Verify defaults with no file or env."""
        monkeypatch.delenv("OPENAI_API_KEY", raising=False)
        settings = load_config(str(tmp_path / "missing.yaml"))

        assert settings.preprocess.max_width == 800
        assert settings.preprocess.max_height == 600
        assert settings.preprocess.jpeg_quality is None
        assert settings.inference.api_key is None
        assert settings.storage.enabled is False

    def test_yaml_values(self, tmp_path):
        """Verify YAML values load."""
        path = tmp_path / "config.yaml"
        path.write_text("preprocess:\n  max_width: 640\ninference:\n  model: my-vision\n")

        settings = load_config(str(path))

        assert settings.preprocess.max_width == 640
        assert settings.preprocess.max_height == 600
        assert settings.inference.model == "my-vision"

    def test_env_overrides_yaml(self, tmp_path, monkeypatch):
        """Verify env vars win over YAML."""
        path = tmp_path / "config.yaml"
        path.write_text("inference:\n  model: from-yaml\n")
        monkeypatch.setenv("BALL_INSPECTOR_MODEL", "from-env")
        monkeypatch.setenv("OPENAI_API_KEY", "sk-env")
        monkeypatch.setenv("BALL_INSPECTOR_STORAGE_ENABLED", "true")
        monkeypatch.setenv("BALL_INSPECTOR_CAMERA_BACKEND", "static")

        settings = load_config(str(path))

        assert settings.inference.model == "from-env"
        assert settings.inference.api_key == "sk-env"
        assert settings.storage.enabled is True
        assert settings.camera.backend == "static"


class TestDecoding:
    """Tests for data URL handling."""

    def test_split_data_url(self):
        """Verify mime and payload are split."""
        assert split_data_url("data:image/png;base64,QUJD") == ("image/png", "QUJD")

    def test_data_url_decodes_dimensions(self):
        """Verify data URLs decode to the right size."""
        raw = decode_data_url(to_data_url(make_jpeg(123, 45)))

        assert (raw.width, raw.height) == (123, 45)
        assert raw.mime_type == "image/jpeg"

    @pytest.mark.parametrize("url", ["", "data:image/jpeg;base64,", "abc", "data:image/jpeg;base64,@@@"])
    def test_invalid_data_urls(self, url):
        """Verify invalid data URLs raise DecodeError."""
        with pytest.raises(DecodeError):
            decode_data_url(url)

    def test_sniff_mime_type(self):
        """Verify magic-byte mime detection."""
        assert sniff_mime_type(make_jpeg(10, 10)) == "image/jpeg"
        assert sniff_mime_type(b"\x89PNG\r\n\x1a\nrest") == "image/png"
        assert sniff_mime_type(b"????") == "application/octet-stream"


class TestImageStore:
    """Tests for pass-through persistence."""

    def test_save_writes_decoded_bytes(self, tmp_path):
        """Verify the store writes decoded bytes."""
        store = ImageStore(tmp_path / "captured_images")
        data = make_jpeg(20, 10)

        path = store.save(base64.b64encode(data).decode("ascii"), "ball_1.jpg")

        assert path == tmp_path / "captured_images" / "ball_1.jpg"
        assert path.read_bytes() == data

    def test_filename_cannot_escape_directory(self, tmp_path):
        """Verify path components are stripped."""
        store = ImageStore(tmp_path / "out")

        path = store.save(base64.b64encode(b"x").decode("ascii"), "../../evil.jpg")

        assert path.parent == tmp_path / "out"

    def test_invalid_payload(self, tmp_path):
        """Verify bad base64 raises ValueError."""
        with pytest.raises(ValueError):
            ImageStore(tmp_path).save("not base64!!", "x.jpg")
