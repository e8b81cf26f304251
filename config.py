"""Configuration management for the sandboxed filesystem server.

Handles loading settings from appsettings.json with sensible defaults, and
the tool enablement configuration given on the command line.
"""

import fnmatch
import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, List, Optional


# Default timeout for tree/search operations (seconds, 0 disables)
DEFAULT_SEARCH_TIMEOUT_SECONDS: float = 30.0

# Leading bytes inspected when deciding whether a file is binary
DEFAULT_BINARY_SAMPLE_BYTES: int = 8192

# Content search lines longer than this are trimmed to a snippet
DEFAULT_MAX_SNIPPET_CHARS: int = 500

DEFAULT_LOG_LEVEL = "INFO"

LOG_LEVEL_ENV_VAR = "SANDBOX_FS_LOG_LEVEL"

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _load_setting(key: str, config_dir: Path | None = None) -> Any:
    """Read a single key from appsettings.json.

    Args:
        key: Top-level property name.
        config_dir: Directory containing appsettings.json. If None, uses script directory.

    Returns:
        The raw value, or None if the file or key is missing or unreadable.
    """
    if config_dir is None:
        config_dir = Path(__file__).parent

    config_path = config_dir / "appsettings.json"

    try:
        if config_path.is_file():
            with config_path.open("r", encoding="utf-8") as f:
                config = json.load(f)
                if isinstance(config, dict):
                    return config.get(key)
    except (OSError, json.JSONDecodeError):
        # Config file corrupted or unreadable - use defaults
        pass

    return None


def load_search_timeout_seconds(config_dir: Path | None = None) -> float:
    """Load the tree/search timeout from appsettings.json.

    Long traversals are abandoned (and their worker stopped through the
    cancellation token) once this many seconds have elapsed.

    Args:
        config_dir: Directory containing appsettings.json. If None, uses script directory.

    Returns:
        Timeout in seconds. 0 disables the timeout. Defaults to 30.0.
    """
    value = _load_setting("searchTimeoutSeconds", config_dir)
    if isinstance(value, (int, float)) and not isinstance(value, bool) and value >= 0:
        return float(value)
    return DEFAULT_SEARCH_TIMEOUT_SECONDS


def load_binary_sample_bytes(config_dir: Path | None = None) -> int:
    """Load the binary detection sample size from appsettings.json.

    Returns:
        Positive number of bytes. Defaults to 8192.
    """
    value = _load_setting("binarySampleBytes", config_dir)
    if isinstance(value, int) and not isinstance(value, bool) and value > 0:
        return value
    return DEFAULT_BINARY_SAMPLE_BYTES


def load_max_snippet_chars(config_dir: Path | None = None) -> int:
    """Load the content search snippet length from appsettings.json.

    Returns:
        Positive number of characters. Defaults to 500.
    """
    value = _load_setting("maxSnippetChars", config_dir)
    if isinstance(value, int) and not isinstance(value, bool) and value > 0:
        return value
    return DEFAULT_MAX_SNIPPET_CHARS


def load_log_level(config_dir: Path | None = None) -> str:
    """Resolve the log level.

    The SANDBOX_FS_LOG_LEVEL environment variable wins over the 'logLevel'
    property of appsettings.json. Unknown names fall back to INFO.

    Returns:
        Upper-case logging level name.
    """
    for value in (os.environ.get(LOG_LEVEL_ENV_VAR), _load_setting("logLevel", config_dir)):
        if isinstance(value, str) and value.strip().upper() in _LOG_LEVELS:
            return value.strip().upper()
    return DEFAULT_LOG_LEVEL


@dataclass
class ToolConfig:
    """Which tools the server registers.

    Attributes:
        enabled_tools: Exact tool names or shell-style wildcards (e.g. "read_*").
        enable_all: Register every tool regardless of enabled_tools.
    """

    enabled_tools: List[str] = field(default_factory=list)
    enable_all: bool = False


def parse_tool_config(tools: str) -> ToolConfig:
    """Parse the --tools option.

    Args:
        tools: "all", an empty string, or a comma-separated list of names
            and wildcards.

    Returns:
        The parsed ToolConfig.
    """
    tools = tools.strip()
    if not tools or tools == "all":
        return ToolConfig(enable_all=True)

    names = [name.strip() for name in tools.split(",") if name.strip()]
    return ToolConfig(enabled_tools=names, enable_all=False)


def is_tool_enabled(tool_name: str, config: Optional[ToolConfig]) -> bool:
    """Check whether a tool should be registered.

    A missing config or enable_all enables everything; otherwise the name
    must equal an entry or match it as a wildcard pattern.
    """
    if config is None or config.enable_all:
        return True

    return any(
        pattern == tool_name or fnmatch.fnmatchcase(tool_name, pattern)
        for pattern in config.enabled_tools
    )


# Singletons: Load settings at module import
SEARCH_TIMEOUT_SECONDS: float = load_search_timeout_seconds()
BINARY_SAMPLE_BYTES: int = load_binary_sample_bytes()
MAX_SNIPPET_CHARS: int = load_max_snippet_chars()
