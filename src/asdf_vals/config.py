"""
Plugin configuration.

All environment-driven settings are resolved once, at process start, into an
immutable PluginConfig that is handed to every component. Nothing else in the
package reads the environment.
"""

import math
import os
from dataclasses import dataclass
from typing import Mapping, Optional

from asdf_vals.constants import (
    DEBUG_ENV_VAR,
    DEFAULT_MAX_RETRIES,
    DEFAULT_RETRY_DELAY,
    GH_REPO,
    GITHUB_TOKEN_ENV_VAR,
    MAX_RETRIES_ENV_VAR,
    RETRY_DELAY_ENV_VAR,
    TOOL_NAME,
    TOOL_TEST,
)
from asdf_vals.exceptions import ConfigValidationError
from asdf_vals.log_utils import logger


@dataclass(frozen=True)
class PluginConfig:
    """Immutable runtime settings for the plugin."""

    debug: bool = False
    max_retries: int = DEFAULT_MAX_RETRIES
    retry_delay: float = DEFAULT_RETRY_DELAY
    github_api_token: Optional[str] = None
    repo_url: str = GH_REPO
    tool_name: str = TOOL_NAME
    tool_test: str = TOOL_TEST

    @classmethod
    def from_environ(
        cls, environ: Optional[Mapping[str, str]] = None, strict: bool = False
    ) -> "PluginConfig":
        """
        Build a configuration from environment variables.

        Parameters:
            environ: Mapping to read from; defaults to `os.environ`.
            strict: When True, malformed numeric settings raise
                ConfigValidationError instead of falling back to defaults.

        Returns:
            PluginConfig: The resolved configuration.
        """
        env = os.environ if environ is None else environ

        token = (env.get(GITHUB_TOKEN_ENV_VAR) or "").strip() or None

        return cls(
            debug=env.get(DEBUG_ENV_VAR, "0").strip() == "1",
            max_retries=_parse_number(
                env, MAX_RETRIES_ENV_VAR, DEFAULT_MAX_RETRIES, int, strict
            ),
            retry_delay=_parse_number(
                env, RETRY_DELAY_ENV_VAR, DEFAULT_RETRY_DELAY, float, strict
            ),
            github_api_token=token,
        )

    @property
    def executable_name(self) -> str:
        """First whitespace-delimited token of the self-test invocation."""
        return self.tool_test.split()[0]

    @property
    def self_test_args(self) -> list:
        return self.tool_test.split()[1:]

    def describe(self) -> str:
        """Return a log-friendly summary that never includes the token."""
        return (
            f"debug={self.debug}, max_retries={self.max_retries}, "
            f"retry_delay={self.retry_delay}s, "
            f"token={'set' if self.github_api_token else 'unset'}"
        )


def _parse_number(env, name, default, kind, strict):
    raw = env.get(name)
    if raw is None or not raw.strip():
        return default

    try:
        value = kind(raw.strip())
    except ValueError:
        value = None

    if value is None or not math.isfinite(value) or value < 0:
        if strict:
            raise ConfigValidationError(
                f"Invalid value for {name}", details=f"got {raw!r}"
            )
        logger.warning(f"Invalid {name}={raw!r}; defaulting to {default}.")
        return default
    return value
