"""Tests for configuration loading."""

from pathlib import Path

import pytest
import yaml
from pydantic import ValidationError

from scrollcast.config import (
    BrowserConfig,
    Config,
    ReadinessConfig,
    RecordingConfig,
    ScriptConfig,
    TranscodeConfig,
)

ENV_VARS = [
    "HEADLESS", "VIEWPORT_WIDTH", "VIEWPORT_HEIGHT", "MARKER_SELECTOR",
    "MARKER_TIMEOUT_MS", "TMP_DIR", "RECORDINGS_DIR", "RECORD_ACTIONS",
    "FFMPEG_PATH", "VIDEO_CODEC", "TRANSCODE_OVERWRITE", "CAPTURE_URL",
    "SERVER_HOST", "SERVER_PORT",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for var in ENV_VARS:
        monkeypatch.delenv(var, raising=False)


class TestBrowserConfig:
    def test_defaults(self):
        cfg = BrowserConfig()
        assert cfg.headless is True
        assert cfg.viewport_width == 430
        assert cfg.viewport_height == 932
        assert cfg.extra_args == []

    def test_rejects_non_positive_viewport(self):
        with pytest.raises(ValidationError):
            BrowserConfig(viewport_width=0)


class TestReadinessConfig:
    def test_defaults(self):
        cfg = ReadinessConfig()
        assert cfg.selector == "span#video"
        assert cfg.timeout_ms == 5000

    def test_rejects_zero_timeout(self):
        with pytest.raises(ValidationError):
            ReadinessConfig(timeout_ms=0)


class TestScriptConfig:
    def test_defaults(self):
        cfg = ScriptConfig()
        assert cfg.outro_selector == "#outro"
        assert cfg.personalize_selector == "#turas-personalize-button"
        assert cfg.go_selector == "#turas-personalize-go"
        assert cfg.lead_in_ms == 500
        assert cfg.scroll_iterations == 200
        assert cfg.scroll_delta == 7
        assert cfg.scroll_delay_ms == 20
        assert cfg.settle_ms == 250
        assert cfg.hover_delay_ms == 150
        assert cfg.dwell_ms == 2000


class TestTranscodeConfig:
    def test_defaults(self):
        cfg = TranscodeConfig()
        assert cfg.ffmpeg_path == "ffmpeg"
        assert cfg.video_codec == "libx264"
        assert cfg.overwrite is False


class TestConfigFromEnv:
    def test_defaults_without_env(self):
        cfg = Config.from_env()
        assert cfg.browser.headless is True
        assert cfg.readiness.timeout_ms == 5000
        assert cfg.recording.recordings_dir == Path("tmp")
        assert cfg.server.port == 8081
        assert cfg.pipeline.url == "https://turas.app/s/taiwan/0vylwa7K"

    def test_viewport_from_env(self, monkeypatch):
        monkeypatch.setenv("VIEWPORT_WIDTH", "800")
        monkeypatch.setenv("VIEWPORT_HEIGHT", "600")
        cfg = Config.from_env()
        assert cfg.browser.viewport_width == 800
        assert cfg.browser.viewport_height == 600

    def test_marker_from_env(self, monkeypatch):
        monkeypatch.setenv("MARKER_SELECTOR", "#ready")
        monkeypatch.setenv("MARKER_TIMEOUT_MS", "1000")
        cfg = Config.from_env()
        assert cfg.readiness.selector == "#ready"
        assert cfg.readiness.timeout_ms == 1000

    def test_zero_marker_timeout_from_env_rejected(self, monkeypatch):
        monkeypatch.setenv("MARKER_TIMEOUT_MS", "0")
        with pytest.raises(ValidationError):
            Config.from_env()

    def test_transcode_from_env(self, monkeypatch):
        monkeypatch.setenv("FFMPEG_PATH", "/opt/ffmpeg/bin/ffmpeg")
        monkeypatch.setenv("TRANSCODE_OVERWRITE", "true")
        cfg = Config.from_env()
        assert cfg.transcode.ffmpeg_path == "/opt/ffmpeg/bin/ffmpeg"
        assert cfg.transcode.overwrite is True

    def test_tmp_dir_overrides_recordings_dir(self, monkeypatch):
        monkeypatch.setenv("RECORDINGS_DIR", "/recordings")
        monkeypatch.setenv("TMP_DIR", "/custom/tmp")
        cfg = Config.from_env()
        assert cfg.recording.recordings_dir == Path("/custom/tmp")


class TestConfigFromYaml:
    def test_missing_file_returns_defaults(self, tmp_path):
        cfg = Config.from_yaml(tmp_path / "nonexistent.yml")
        assert cfg.browser.viewport_width == 430

    def test_loads_yaml(self, tmp_path):
        config_file = tmp_path / "config.yml"
        config_file.write_text(yaml.dump({
            "script": {"scroll_iterations": 50, "dwell_ms": 0},
            "pipeline": {"url": "https://example.com"},
        }))
        cfg = Config.from_yaml(config_file)
        assert cfg.script.scroll_iterations == 50
        assert cfg.script.dwell_ms == 0
        assert cfg.pipeline.url == "https://example.com"
        # Defaults preserved for unset fields
        assert cfg.script.scroll_delta == 7

    def test_empty_yaml(self, tmp_path):
        config_file = tmp_path / "config.yml"
        config_file.write_text("")
        cfg = Config.from_yaml(config_file)
        assert cfg.readiness.selector == "span#video"


class TestConfigLoad:
    def test_env_overrides_yaml(self, tmp_path, monkeypatch):
        config_file = tmp_path / "config.yml"
        config_file.write_text(yaml.dump({
            "browser": {"viewport_width": 800, "viewport_height": 600},
        }))
        monkeypatch.setenv("VIEWPORT_WIDTH", "1024")
        cfg = Config.load(config_file)
        assert cfg.browser.viewport_width == 1024
        assert cfg.browser.viewport_height == 600


class TestConfigToYaml:
    def test_round_trips_through_safe_load(self, tmp_path):
        cfg = Config(recording=RecordingConfig(recordings_dir=tmp_path / "rec"))
        out = tmp_path / "nested" / "config.yml"
        cfg.to_yaml(out)

        content = yaml.safe_load(out.read_text())
        assert content["recording"]["recordings_dir"] == str(tmp_path / "rec")
        assert Config.from_yaml(out).recording.recordings_dir == tmp_path / "rec"
