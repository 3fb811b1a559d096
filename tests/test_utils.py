"""Tests for configuration, API key and image loading helpers."""

import base64

import pytest

from invisibrain.utils import DEFAULT_CONFIG, deep_merge, get_api_key, load_config, load_image


class TestLoadConfig:
    def test_defaults_when_file_missing(self, tmp_path, monkeypatch):
        monkeypatch.delenv("GEMINI_MODEL", raising=False)
        config = load_config(str(tmp_path / "missing.yaml"))
        assert config == DEFAULT_CONFIG

    def test_file_values_are_merged(self, tmp_path, monkeypatch):
        monkeypatch.delenv("GEMINI_MODEL", raising=False)
        path = tmp_path / "config.yaml"
        path.write_text("rate_limit:\n  min_interval_ms: 4000\nretry:\n  max_retries: 5\n")

        config = load_config(str(path))

        assert config["rate_limit"] == {"min_interval_ms": 4000, "max_daily_tokens": 4000000}
        assert config["retry"]["max_retries"] == 5
        assert config["history"]["max_history_length"] == 20

    def test_invalid_yaml_falls_back_to_defaults(self, tmp_path, monkeypatch):
        monkeypatch.delenv("GEMINI_MODEL", raising=False)
        path = tmp_path / "config.yaml"
        path.write_text("api: [unclosed\n")

        assert load_config(str(path)) == DEFAULT_CONFIG

    def test_model_from_environment_does_not_leak_into_defaults(self, monkeypatch):
        monkeypatch.setenv("GEMINI_MODEL", "gemini-2.0-flash")

        config = load_config(None)

        assert config["api"]["model"] == "gemini-2.0-flash"
        assert DEFAULT_CONFIG["api"]["model"] == "gemini-2.5-flash-lite"

    def test_deep_merge_overrides_nested_keys(self):
        merged = deep_merge({"a": {"b": 1, "c": 2}}, {"a": {"c": 3}, "d": 4})
        assert merged == {"a": {"b": 1, "c": 3}, "d": 4}


class TestApiKey:
    def test_explicit_key_wins(self, monkeypatch):
        monkeypatch.setenv("GEMINI_API_KEY", "from-env")
        assert get_api_key("from-cli") == "from-cli"

    def test_falls_back_to_google_api_key(self, monkeypatch):
        monkeypatch.delenv("GEMINI_API_KEY", raising=False)
        monkeypatch.setenv("GOOGLE_API_KEY", "google-key")
        assert get_api_key() == "google-key"


class TestLoadImage:
    def test_png(self, tmp_path):
        path = tmp_path / "shot.png"
        path.write_bytes(b"\x89PNG\r\n")

        image = load_image(str(path))

        assert image.mime_type == "image/png"
        assert base64.b64decode(image.data) == b"\x89PNG\r\n"

    def test_jpeg_mime_type(self, tmp_path):
        path = tmp_path / "shot.jpg"
        path.write_bytes(b"\xff\xd8")
        assert load_image(str(path)).mime_type == "image/jpeg"

    def test_unknown_extension_defaults_to_png(self, tmp_path):
        path = tmp_path / "capture.bin"
        path.write_bytes(b"data")
        assert load_image(str(path)).mime_type == "image/png"

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_image(str(tmp_path / "nope.png"))
