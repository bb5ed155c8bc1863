"""
Configuration Management for voicegen-ms.

Configuration is read exactly once, before the service accepts requests,
and is immutable afterwards. It has two layers:

    1. Voice configuration (SynthesisConfig) - required, from the environment:
        SPEECH_KEY                -> credential_secret
        SPEECH_REGION             -> region
        CUSTOM_VOICE_NAME         -> voice_profile_id
        CUSTOM_VOICE_ENDPOINT_ID  -> endpoint_id
       Any missing or blank variable is a ConfigError and the process must
       not start. There are no defaults.

    2. Service settings (ServiceSettings) - optional, from YAML with
       environment overrides, falling back to the Defaults class.

Configuration Hierarchy for service settings (highest priority first):
    1. Environment variables (VOICEGEN_TIMEOUT_S, ...)
    2. YAML file (VOICEGEN_SETTINGS, default config/settings.yaml)
    3. Defaults class values

Example settings.yaml:
    synthesis:
      timeout_s: 10
      output_format: riff-24khz-16bit-mono-pcm
      language: en-US

    api:
      download_filename: voice.wav

    logging:
      level: 2
      log_dir: logs
"""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

from voicegen_ms.core.logging.levels import LogLevel, parse_level


class ConfigError(Exception):
    """
    Raised when the service cannot be configured.

    Always fatal: raised during startup, never while handling a request.
    The message names the offending keys but never echoes secret values.
    """
    pass


class ConfigValidationError(ConfigError):
    """Raised when a service setting is present but out of bounds."""
    pass


class Defaults:
    """
    Default values for optional service settings.

    The voice configuration has no defaults.
    """

    # ─────────────────────────────────────────────────────────────────────────
    # Synthesis
    # ─────────────────────────────────────────────────────────────────────────
    SYNTHESIS_TIMEOUT_S = 10.0                          # Budget per provider call
    SYNTHESIS_OUTPUT_FORMAT = "riff-24khz-16bit-mono-pcm"  # WAV container
    SYNTHESIS_LANGUAGE = "en-US"                        # xml:lang of the envelope

    # ─────────────────────────────────────────────────────────────────────────
    # API
    # ─────────────────────────────────────────────────────────────────────────
    API_DOWNLOAD_FILENAME = "voice.wav"

    # ─────────────────────────────────────────────────────────────────────────
    # Logging
    # ─────────────────────────────────────────────────────────────────────────
    LOGGING_JSONL_FILE = "voicegen-ms.jsonl"

    # ─────────────────────────────────────────────────────────────────────────
    # Files
    # ─────────────────────────────────────────────────────────────────────────
    SETTINGS_PATH = "config/settings.yaml"


# (environment variable, SynthesisConfig field)
REQUIRED_ENV_VARS = (
    ("SPEECH_KEY", "credential_secret"),
    ("SPEECH_REGION", "region"),
    ("CUSTOM_VOICE_NAME", "voice_profile_id"),
    ("CUSTOM_VOICE_ENDPOINT_ID", "endpoint_id"),
)


@dataclass(frozen=True)
class SynthesisConfig:
    """
    Immutable voice configuration shared by every request.

    Read-only after load, so it is shared across concurrent requests
    without locking. ``credential_secret`` is excluded from repr.

    Attributes:
        region: Cloud region hosting the speech resource (e.g. "westeurope").
        voice_profile_id: Name of the custom voice.
        endpoint_id: Deployment id of the custom voice endpoint.
        credential_secret: Subscription key for the speech resource.
    """
    region: str
    voice_profile_id: str
    endpoint_id: str
    credential_secret: str = field(repr=False)


@dataclass(frozen=True)
class SynthesisSettings:
    """Provider call tuning."""
    timeout_s: float = Defaults.SYNTHESIS_TIMEOUT_S
    output_format: str = Defaults.SYNTHESIS_OUTPUT_FORMAT
    language: str = Defaults.SYNTHESIS_LANGUAGE


@dataclass(frozen=True)
class ApiSettings:
    """HTTP surface options."""
    download_filename: str = Defaults.API_DOWNLOAD_FILENAME


@dataclass(frozen=True)
class LoggingSettings:
    """Validated ``logging`` section. Handlers are installed by core.logging."""
    level: LogLevel = LogLevel.NORMAL
    log_dir: Optional[str] = None
    jsonl_file: str = Defaults.LOGGING_JSONL_FILE


@dataclass(frozen=True)
class ServiceSettings:
    """
    Validated optional settings.

    Usage:
        settings = ServiceSettings.from_raw({"synthesis": {"timeout_s": 5}})
        settings.synthesis.timeout_s  # 5.0
    """
    synthesis: SynthesisSettings = field(default_factory=SynthesisSettings)
    api: ApiSettings = field(default_factory=ApiSettings)
    logging: LoggingSettings = field(default_factory=LoggingSettings)

    @classmethod
    def from_raw(
        cls,
        raw: Mapping[str, Any],
        environ: Optional[Mapping[str, str]] = None,
    ) -> "ServiceSettings":
        """
        Build settings from a raw YAML mapping plus environment overrides.

        Args:
            raw: Parsed YAML content (may be empty).
            environ: Environment mapping (defaults to os.environ).

        Raises:
            ConfigValidationError: If a value has the wrong type or range.
        """
        env = os.environ if environ is None else environ

        synthesis_raw = cls._section(raw, "synthesis")
        timeout_raw = env.get("VOICEGEN_TIMEOUT_S") or synthesis_raw.get(
            "timeout_s", Defaults.SYNTHESIS_TIMEOUT_S
        )
        synthesis = SynthesisSettings(
            timeout_s=cls._as_float("synthesis.timeout_s", timeout_raw),
            output_format=str(synthesis_raw.get("output_format", Defaults.SYNTHESIS_OUTPUT_FORMAT)).strip(),
            language=str(synthesis_raw.get("language", Defaults.SYNTHESIS_LANGUAGE)).strip(),
        )
        cls._validate_positive("synthesis.timeout_s", synthesis.timeout_s)
        cls._validate_non_empty("synthesis.output_format", synthesis.output_format)
        cls._validate_non_empty("synthesis.language", synthesis.language)

        api_raw = cls._section(raw, "api")
        api = ApiSettings(
            download_filename=str(api_raw.get("download_filename", Defaults.API_DOWNLOAD_FILENAME)).strip(),
        )
        cls._validate_filename("api.download_filename", api.download_filename)

        logging_raw = cls._section(raw, "logging")
        level_raw = env.get("VOICEGEN_LOG_LEVEL") or logging_raw.get("level", LogLevel.NORMAL)
        log_dir = env.get("VOICEGEN_LOG_DIR") or logging_raw.get("log_dir")
        logging_settings = LoggingSettings(
            level=cls._as_level("logging.level", level_raw),
            log_dir=str(log_dir) if log_dir else None,
            jsonl_file=str(
                env.get("VOICEGEN_JSONL_FILE")
                or logging_raw.get("jsonl_file", Defaults.LOGGING_JSONL_FILE)
            ).strip(),
        )
        cls._validate_filename("logging.jsonl_file", logging_settings.jsonl_file)

        return cls(synthesis=synthesis, api=api, logging=logging_settings)

    @staticmethod
    def _section(raw: Mapping[str, Any], name: str) -> Mapping[str, Any]:
        section = raw.get(name) or {}
        if not isinstance(section, Mapping):
            raise ConfigValidationError(f"{name} must be a mapping, got {type(section).__name__}")
        return section

    @staticmethod
    def _as_float(name: str, value: Any) -> float:
        try:
            return float(value)
        except (TypeError, ValueError):
            raise ConfigValidationError(f"{name} must be a number, got {value!r}")

    @staticmethod
    def _as_level(name: str, value: Any) -> LogLevel:
        try:
            return parse_level(value)
        except ValueError:
            raise ConfigValidationError(f"{name} must be 1-4 or a level name, got {value!r}")

    @staticmethod
    def _validate_positive(name: str, value: float) -> None:
        """Validate that a value is positive (> 0)."""
        if value <= 0:
            raise ConfigValidationError(f"{name} must be positive, got {value}")

    @staticmethod
    def _validate_non_empty(name: str, value: str) -> None:
        if not value:
            raise ConfigValidationError(f"{name} must not be empty")

    @staticmethod
    def _validate_filename(name: str, value: str) -> None:
        if not value or any(ch in value for ch in '"/\\\r\n'):
            raise ConfigValidationError(f"{name} must be a plain file name, got {value!r}")


@dataclass(frozen=True)
class ServiceConfig:
    """
    Everything the service needs, loaded once at startup.

    Attributes:
        synthesis: Required voice configuration.
        settings: Optional service settings.
    """
    synthesis: SynthesisConfig
    settings: ServiceSettings = field(default_factory=ServiceSettings)

    @property
    def budget_s(self) -> float:
        """Synthesis budget in seconds."""
        return self.settings.synthesis.timeout_s


def load_synthesis_config(environ: Optional[Mapping[str, str]] = None) -> SynthesisConfig:
    """
    Read the voice configuration from the environment.

    Args:
        environ: Environment mapping (defaults to os.environ).

    Returns:
        SynthesisConfig with whitespace-stripped values.

    Raises:
        ConfigError: If any required variable is missing or blank. All
            missing names are reported together.
    """
    env = os.environ if environ is None else environ

    values: Dict[str, str] = {}
    missing = []
    for var, attr in REQUIRED_ENV_VARS:
        value = (env.get(var) or "").strip()
        if not value:
            missing.append(var)
        values[attr] = value

    if missing:
        raise ConfigError(
            "missing required environment variable(s): " + ", ".join(missing)
        )

    return SynthesisConfig(**values)


def load_settings(
    path: Optional[str] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> ServiceSettings:
    """
    Load optional service settings from YAML.

    A missing file at the default location yields defaults. A missing file
    that was asked for explicitly (argument or VOICEGEN_SETTINGS) is an error.

    Args:
        path: Settings file path. None uses VOICEGEN_SETTINGS or the default.
        environ: Environment mapping (defaults to os.environ).

    Raises:
        ConfigError: Explicit file missing or not valid YAML.
        ConfigValidationError: A value is out of bounds.
    """
    env = os.environ if environ is None else environ
    explicit = path or env.get("VOICEGEN_SETTINGS")
    p = Path(explicit or Defaults.SETTINGS_PATH)

    if not p.exists():
        if explicit:
            raise ConfigError(f"settings file not found: {p.resolve()}")
        return ServiceSettings.from_raw({}, environ=env)

    try:
        with p.open("r", encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"settings file is not valid YAML: {p}: {e}")

    if not isinstance(raw, dict):
        raise ConfigValidationError(f"settings file must contain a mapping: {p}")

    return ServiceSettings.from_raw(raw, environ=env)


def load_config(
    path: Optional[str] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> ServiceConfig:
    """
    Load the complete service configuration.

    Called once from the application lifespan, before serving.

    Raises:
        ConfigError: Startup must abort.
    """
    return ServiceConfig(
        synthesis=load_synthesis_config(environ),
        settings=load_settings(path, environ),
    )
