"""Configuration management via environment variables and YAML."""

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field


class BrowserConfig(BaseModel):
    """Browser-specific configuration."""

    headless: bool = True
    viewport_width: int = Field(default=430, gt=0)
    viewport_height: int = Field(default=932, gt=0)
    extra_args: list[str] = Field(default_factory=list)


class ReadinessConfig(BaseModel):
    """Page-side readiness marker checked right after navigation."""

    selector: str = "span#video"
    timeout_ms: int = Field(default=5000, gt=0)  # 0 would disable the bound


class ScriptConfig(BaseModel):
    """Timing and selectors for the scripted scroll/interaction sequence.

    All delays are presentation parameters: they only shape how the recording
    looks, so they can be tuned freely.
    """

    outro_selector: str = "#outro"
    personalize_selector: str = "#turas-personalize-button"
    go_selector: str = "#turas-personalize-go"
    lead_in_ms: int = 500
    scroll_iterations: int = 200
    scroll_delta: float = 7  # pixels per wheel event
    scroll_delay_ms: int = 20
    settle_ms: int = 250
    hover_delay_ms: int = 150
    dwell_ms: int = 2000


class RecordingConfig(BaseModel):
    """Recording-related configuration."""

    recordings_dir: Path = Path("tmp")  # All raw and encoded videos go in tmp/
    record_actions: bool = True


class TranscodeConfig(BaseModel):
    """ffmpeg configuration."""

    ffmpeg_path: str = "ffmpeg"
    video_codec: str = "libx264"
    overwrite: bool = False
    chunk_size: int = Field(default=64 * 1024, gt=0)


class PipelineConfig(BaseModel):
    """Pipeline inputs."""

    url: str = "https://turas.app/s/taiwan/0vylwa7K"


class ServerConfig(BaseModel):
    """HTTP entry point configuration."""

    host: str = "0.0.0.0"
    port: int = 8081


class Config(BaseModel):
    """Main configuration class."""

    browser: BrowserConfig = Field(default_factory=BrowserConfig)
    readiness: ReadinessConfig = Field(default_factory=ReadinessConfig)
    script: ScriptConfig = Field(default_factory=ScriptConfig)
    recording: RecordingConfig = Field(default_factory=RecordingConfig)
    transcode: TranscodeConfig = Field(default_factory=TranscodeConfig)
    pipeline: PipelineConfig = Field(default_factory=PipelineConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)

    @classmethod
    def from_env(cls) -> "Config":
        """Load configuration from environment variables."""
        return cls(
            browser=BrowserConfig(
                headless=os.getenv("HEADLESS", "true").lower() == "true",
                viewport_width=int(os.getenv("VIEWPORT_WIDTH", "430")),
                viewport_height=int(os.getenv("VIEWPORT_HEIGHT", "932")),
            ),
            readiness=ReadinessConfig(
                selector=os.getenv("MARKER_SELECTOR", "span#video"),
                timeout_ms=int(os.getenv("MARKER_TIMEOUT_MS", "5000")),
            ),
            recording=RecordingConfig(
                recordings_dir=Path(os.getenv("TMP_DIR", os.getenv("RECORDINGS_DIR", "tmp"))),
                record_actions=os.getenv("RECORD_ACTIONS", "true").lower() == "true",
            ),
            transcode=TranscodeConfig(
                ffmpeg_path=os.getenv("FFMPEG_PATH", "ffmpeg"),
                video_codec=os.getenv("VIDEO_CODEC", "libx264"),
                overwrite=os.getenv("TRANSCODE_OVERWRITE", "false").lower() == "true",
            ),
            pipeline=PipelineConfig(
                url=os.getenv("CAPTURE_URL", PipelineConfig().url),
            ),
            server=ServerConfig(
                host=os.getenv("SERVER_HOST", "0.0.0.0"),
                port=int(os.getenv("SERVER_PORT", "8081")),
            ),
        )

    @classmethod
    def from_yaml(cls, path: Path | str) -> "Config":
        """Load configuration from a YAML file."""
        path = Path(path)
        if not path.exists():
            return cls()

        with open(path) as f:
            data = yaml.safe_load(f) or {}

        return cls(**data)

    @classmethod
    def load(cls, config_path: Path | str | None = None) -> "Config":
        """Load configuration from YAML file (if exists) merged with env vars.

        Environment variables take precedence over YAML values.
        """
        base_config: dict[str, Any] = {}

        if config_path:
            path = Path(config_path)
            if path.exists():
                with open(path) as f:
                    base_config = yaml.safe_load(f) or {}

        # Check for default config file
        default_path = Path("config.yml")
        if not config_path and default_path.exists():
            with open(default_path) as f:
                base_config = yaml.safe_load(f) or {}

        config = cls(**base_config) if base_config else cls()

        env_config = cls.from_env()

        # Merge - env vars take precedence for explicitly set values
        if os.getenv("HEADLESS"):
            config.browser.headless = env_config.browser.headless
        if os.getenv("VIEWPORT_WIDTH"):
            config.browser.viewport_width = env_config.browser.viewport_width
        if os.getenv("VIEWPORT_HEIGHT"):
            config.browser.viewport_height = env_config.browser.viewport_height
        if os.getenv("MARKER_SELECTOR"):
            config.readiness.selector = env_config.readiness.selector
        if os.getenv("MARKER_TIMEOUT_MS"):
            config.readiness.timeout_ms = env_config.readiness.timeout_ms
        if os.getenv("TMP_DIR") or os.getenv("RECORDINGS_DIR"):
            config.recording.recordings_dir = env_config.recording.recordings_dir
        if os.getenv("RECORD_ACTIONS"):
            config.recording.record_actions = env_config.recording.record_actions
        if os.getenv("FFMPEG_PATH"):
            config.transcode.ffmpeg_path = env_config.transcode.ffmpeg_path
        if os.getenv("VIDEO_CODEC"):
            config.transcode.video_codec = env_config.transcode.video_codec
        if os.getenv("TRANSCODE_OVERWRITE"):
            config.transcode.overwrite = env_config.transcode.overwrite
        if os.getenv("CAPTURE_URL"):
            config.pipeline.url = env_config.pipeline.url
        if os.getenv("SERVER_HOST"):
            config.server.host = env_config.server.host
        if os.getenv("SERVER_PORT"):
            config.server.port = env_config.server.port

        return config

    def to_yaml(self, path: Path | str) -> None:
        """Save configuration to a YAML file."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        with open(path, "w") as f:
            yaml.dump(self.model_dump(mode="json"), f, default_flow_style=False)
