"""Server configuration"""

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from errors import ConfigurationError

API_BASE = "https://api.stability.ai"
DEFAULT_TIMEOUT_MS = 60000
DEFAULT_OUTPUT_DIR = "./generated-images"
DEFAULT_3D_OUTPUT_DIR = "./generated-3d"

# Image-producing calls take much longer than plain API calls
IMAGE_TIMEOUT_MULTIPLIER = 3


@dataclass(frozen=True)
class StabilityConfig:
    """Process-wide settings, built once at startup and never mutated"""
    api_key: str
    timeout_ms: int = DEFAULT_TIMEOUT_MS
    output_dir: str = DEFAULT_OUTPUT_DIR
    output_3d_dir: str = DEFAULT_3D_OUTPUT_DIR
    base_url: str = API_BASE

    def __post_init__(self):
        if not self.api_key:
            raise ConfigurationError(
                "Stability AI API key not configured. Please set the STABILITY_API_KEY environment variable."
            )
        if isinstance(self.timeout_ms, bool) or not isinstance(self.timeout_ms, int) or self.timeout_ms <= 0:
            raise ConfigurationError("STABILITY_TIMEOUT must be a positive number")

    @property
    def timeout_seconds(self) -> float:
        return self.timeout_ms / 1000

    @property
    def image_timeout_seconds(self) -> float:
        return self.timeout_seconds * IMAGE_TIMEOUT_MULTIPLIER

    def __repr__(self):
        return (
            f"StabilityConfig(api_key='***', timeout_ms={self.timeout_ms}, "
            f"output_dir={self.output_dir!r}, output_3d_dir={self.output_3d_dir!r}, "
            f"base_url={self.base_url!r})"
        )


def load_config(environ: Optional[Mapping[str, str]] = None) -> StabilityConfig:
    """Build the configuration from environment variables.

    Args:
        environ: Mapping to read instead of ``os.environ`` (used by tests)

    Raises:
        ConfigurationError: If the API key is missing or the timeout is not a positive integer
    """
    env = os.environ if environ is None else environ

    timeout_raw = env.get("STABILITY_TIMEOUT")
    timeout_ms = DEFAULT_TIMEOUT_MS
    if timeout_raw:
        try:
            timeout_ms = int(timeout_raw.strip())
        except ValueError:
            raise ConfigurationError(
                f"STABILITY_TIMEOUT must be a positive number, got {timeout_raw!r}"
            ) from None

    return StabilityConfig(
        api_key=env.get("STABILITY_API_KEY", "").strip(),
        timeout_ms=timeout_ms,
        output_dir=env.get("STABILITY_OUTPUT_DIR") or DEFAULT_OUTPUT_DIR,
        output_3d_dir=env.get("STABILITY_3D_OUTPUT_DIR") or DEFAULT_3D_OUTPUT_DIR,
        base_url=(env.get("STABILITY_API_BASE") or API_BASE).rstrip("/"),
    )
