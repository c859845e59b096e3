"""Soft checks that warn about risky but valid configuration."""

import warnings
from typing import Any, Dict, List

from .duration import DurationParseError, parse_duration

_THIRTY_DAYS = 30 * 86400


def check_for_warnings(config_dict: Dict[str, Any]) -> List[str]:
    """
    Inspect the raw configuration and collect warning messages.

    Args:
        config_dict: Configuration as parsed from YAML (before validation)

    Returns:
        List of warning messages (empty when nothing looks suspicious)
    """
    messages = []

    feed = config_dict.get("feed", {})
    if isinstance(feed, dict):
        if not feed.get("enabled", False) and feed.get("source"):
            messages.append("feed.source is set but feed.enabled is false; the feed will not run")

        interval = feed.get("interval")
        if isinstance(interval, str):
            try:
                if parse_duration(interval) < 300:
                    messages.append(
                        f"Short feed.interval ({interval}) may hammer the upstream feed"
                    )
            except DurationParseError:
                pass  # reported by schema validation

    auth = config_dict.get("auth", {})
    if isinstance(auth, dict) and isinstance(auth.get("token_ttl"), str):
        try:
            if parse_duration(auth["token_ttl"]) > _THIRTY_DAYS:
                messages.append(
                    f"auth.token_ttl ({auth['token_ttl']}) is longer than 30 days"
                )
        except DurationParseError:
            pass

    server = config_dict.get("server", {})
    if isinstance(server, dict):
        origins = server.get("cors_origins", [])
        if isinstance(origins, list) and "*" in origins:
            messages.append("server.cors_origins contains '*'; any site may call the API")

    return messages


def emit_warnings(messages: List[str]) -> None:
    """Emit each message through the warnings module."""
    for message in messages:
        warnings.warn(message, UserWarning, stacklevel=2)
