"""
Configuration file parsing and merging.

The main configuration is a TOML file (YAML and JSON are accepted too)
where every top-level table describes one tool, apart from the reserved
[cli-check] table that holds settings. Tools from external version files
(mise.toml, .tool-versions, other cli-check configs) are merged in
without overriding tools that are already defined.
"""

from __future__ import annotations

import json
import os
import tomllib
from dataclasses import dataclass, field
from typing import Any

import yaml

from .common import vlog
from .errors import ConfigError
from .tools import ToolDescriptor, format_unknown_tool_warning, resolve_tool_mapping


SETTINGS_SECTION = "cli-check"

# Searched in the root directory when no explicit path is given
DEFAULT_CONFIG_NAMES = (
    ".cli-check.toml",
    ".cli-check.yml",
    ".cli-check.yaml",
    ".cli-check.json",
)

SOURCE_TYPES = {"config", "mise", "tool-versions"}

SAMPLE_CONFIG = """\
# cli-check configuration file
# Check CLI tool versions

# Optional: configure external sources
# [cli-check]
# sources = [
#   { path = "mise.toml", type = "mise" },
#   { path = ".tool-versions", type = "tool-versions" }
# ]

[go]
cli = "go"
version = ">=1.20.0"

[docker]
cli = "docker"
version = ">=20.0.0"
optional = true
message = "Docker is optional but recommended for containerized development"

[node]
name = "Node.js"
cli = "node"
version = "^18.0.0 || ^20.0.0"
version_arg = "-v"
version_pattern = "v(\\\\d+\\\\.\\\\d+\\\\.\\\\d+)"

[make]
cli = "make"
# No version specified = existence check only
"""


@dataclass(frozen=True)
class Source:
    """
    External configuration source.

    Attributes:
        path: File path (relative paths resolve against the root directory)
        type: "config", "mise" or "tool-versions"
    """
    path: str
    type: str

    @staticmethod
    def from_dict(data: dict[str, Any]) -> Source:
        """Create Source from dictionary."""
        if not isinstance(data, dict) or not data.get("path"):
            raise ValueError(f"Invalid source entry: {data!r}. Expected {{path, type}}")
        return Source(path=str(data["path"]), type=str(data.get("type", "")))


@dataclass(frozen=True)
class Settings:
    """
    Settings from the [cli-check] table.

    Attributes:
        sources: External sources to merge, in order
        fail_on_unknown_tools: Report unknown external tools as errors and skip them
        skip_unknown_tools: Silently ignore unknown external tools
        warn_on_unknown_tools: Warn about unknown external tools but still check them
        timeout_seconds: Per-probe timeout
        max_workers: Maximum number of parallel checks
    """
    sources: tuple[Source, ...] = ()
    fail_on_unknown_tools: bool = False
    skip_unknown_tools: bool = False
    warn_on_unknown_tools: bool = True
    timeout_seconds: float = 5
    max_workers: int = 16

    def __post_init__(self):
        """Validate settings after initialization."""
        if self.timeout_seconds < 1 or self.timeout_seconds > 60:
            raise ValueError(
                f"Invalid timeout_seconds: {self.timeout_seconds}. "
                "Must be between 1 and 60"
            )

        if self.max_workers < 1 or self.max_workers > 32:
            raise ValueError(
                f"Invalid max_workers: {self.max_workers}. "
                "Must be between 1 and 32"
            )

    @staticmethod
    def from_dict(data: dict[str, Any]) -> Settings:
        """Create Settings from dictionary."""
        if not isinstance(data, dict):
            raise ValueError(f"[{SETTINGS_SECTION}] must be a table")
        return Settings(
            sources=tuple(Source.from_dict(s) for s in data.get("sources", [])),
            fail_on_unknown_tools=bool(data.get("fail_on_unknown_tools", False)),
            skip_unknown_tools=bool(data.get("skip_unknown_tools", False)),
            warn_on_unknown_tools=bool(data.get("warn_on_unknown_tools", True)),
            timeout_seconds=data.get("timeout_seconds", 5),
            max_workers=data.get("max_workers", 16),
        )


@dataclass(frozen=True)
class Config:
    """
    A parsed configuration file.

    Attributes:
        tools: Tool descriptors keyed by section name
        settings: Settings from the [cli-check] table
        source: Path the configuration was loaded from
    """
    tools: dict[str, ToolDescriptor] = field(default_factory=dict)
    settings: Settings = field(default_factory=Settings)
    source: str = ""

    @staticmethod
    def from_dict(data: dict[str, Any], source: str = "", origin: str = "config") -> Config:
        """Create Config from a parsed file.

        Args:
            data: Parsed file contents
            source: Path of the file
            origin: Value stored as each descriptor's source

        Raises:
            ValueError: a section is malformed
        """
        settings = Settings()
        tools: dict[str, ToolDescriptor] = {}

        for name, value in data.items():
            if name == SETTINGS_SECTION:
                try:
                    settings = Settings.from_dict(value)
                except (ValueError, TypeError) as e:
                    raise ValueError(f"failed to parse [{name}] section: {e}") from e
                continue

            if not isinstance(value, dict):
                raise ValueError(f"failed to parse [{name}] section: expected a table")
            try:
                tools[name] = ToolDescriptor.from_dict(name, value, source=origin)
            except ValueError as e:
                raise ValueError(f"failed to parse [{name}] section: {e}") from e

        return Config(tools=tools, settings=settings, source=source)


@dataclass
class LoadResult:
    """
    Tools ready for checking plus anything worth telling the user.

    Attributes:
        tools: Tool descriptors keyed by tool name
        warnings: Warnings and errors from external sources
        settings: Settings of the main configuration
        source: Path of the main configuration
    """
    tools: dict[str, ToolDescriptor] = field(default_factory=dict)
    warnings: list[str] = field(default_factory=list)
    settings: Settings = field(default_factory=Settings)
    source: str = ""


def _load_toml(file_path: str) -> dict[str, Any]:
    with open(file_path, "rb") as f:
        return tomllib.load(f)


def _load_yaml(file_path: str) -> dict[str, Any]:
    with open(file_path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f)
    return data if isinstance(data, dict) else {}


def _load_json(file_path: str) -> dict[str, Any]:
    with open(file_path, "r", encoding="utf-8") as f:
        data = json.load(f)
    return data if isinstance(data, dict) else {}


def read_config_data(file_path: str) -> dict[str, Any]:
    """
    Read a configuration file, choosing the parser by extension.

    Files without a known extension are read as TOML.

    Raises:
        ConfigError: file cannot be read or parsed
    """
    ext = os.path.splitext(file_path)[1].lower()
    loader = {".yml": _load_yaml, ".yaml": _load_yaml, ".json": _load_json}.get(ext, _load_toml)

    try:
        return loader(file_path)
    except OSError as e:
        raise ConfigError(f"failed to read config file: {e}") from e
    except (tomllib.TOMLDecodeError, yaml.YAMLError, json.JSONDecodeError) as e:
        raise ConfigError(f"failed to parse config file {file_path}: {e}") from e


def load_config_file(file_path: str, origin: str = "config", verbose: bool = False) -> Config:
    """
    Load configuration from a single file.

    Args:
        file_path: Path to configuration file
        origin: Source label stored on each descriptor
        verbose: Enable verbose logging

    Returns:
        Config object

    Raises:
        ConfigError: file is missing, unreadable or invalid
    """
    vlog(f"Loading config from: {file_path}", verbose)
    data = read_config_data(file_path)

    try:
        config = Config.from_dict(data, source=file_path, origin=origin)
    except (ValueError, TypeError) as e:
        raise ConfigError(f"invalid config file {file_path}: {e}") from e

    vlog(f"Loaded {len(config.tools)} tool(s) from {file_path}", verbose)
    return config


def find_config_file(root_dir: str = ".") -> str | None:
    """Return the first default config file present in root_dir."""
    for name in DEFAULT_CONFIG_NAMES:
        candidate = os.path.join(root_dir, name)
        if os.path.isfile(candidate):
            return candidate
    return None


def _resolve(path: str, root_dir: str) -> str:
    if os.path.isabs(path):
        return path
    return os.path.join(root_dir, path)


def load_and_merge(
    path: str | None = None,
    root_dir: str = ".",
    verbose: bool = False,
) -> LoadResult:
    """
    Load the main configuration and merge external sources.

    Explicit sources from [cli-check] are loaded in order. Without any,
    mise.toml and .tool-versions in root_dir are picked up automatically.
    Tools from the main file always win over external ones.

    Args:
        path: Config path; relative paths resolve against root_dir
        root_dir: Directory searched for configuration
        verbose: Enable verbose logging

    Returns:
        LoadResult

    Raises:
        ConfigError: main configuration cannot be loaded
    """
    root_dir = root_dir or "."
    if path:
        config_path = _resolve(path, root_dir)
    else:
        config_path = find_config_file(root_dir)
        if config_path is None:
            raise ConfigError(
                f"failed to read config file: none of {', '.join(DEFAULT_CONFIG_NAMES)} found in {root_dir}"
            )

    config = load_config_file(config_path, verbose=verbose)
    settings = config.settings
    result = LoadResult(tools=dict(config.tools), settings=settings, source=config_path)

    if settings.sources:
        for source in settings.sources:
            source_path = _resolve(source.path, root_dir)
            result.warnings.extend(_load_source(source_path, source.type, result.tools, settings, verbose))
    else:
        for name, source_type in (("mise.toml", "mise"), (".tool-versions", "tool-versions")):
            source_path = os.path.join(root_dir, name)
            if os.path.isfile(source_path):
                vlog(f"Auto-detected {source_path}", verbose)
                result.warnings.extend(_load_source(source_path, source_type, result.tools, settings, verbose))

    return result


def _load_source(
    path: str,
    source_type: str,
    tools: dict[str, ToolDescriptor],
    settings: Settings,
    verbose: bool,
) -> list[str]:
    """Merge one external source into tools and return its warnings."""
    if source_type == "config":
        return _load_config_source(path, tools, verbose)
    if source_type == "mise":
        return _load_mise_source(path, tools, settings)
    if source_type == "tool-versions":
        return _load_tool_versions_source(path, tools, settings)
    return [f"Error: unknown source type: {source_type}"]


def _load_config_source(path: str, tools: dict[str, ToolDescriptor], verbose: bool) -> list[str]:
    if not os.path.isfile(path):
        return []
    try:
        config = load_config_file(path, origin=f"config:{path}", verbose=verbose)
    except ConfigError as e:
        return [f"Error: {e.message}"]

    for name, tool in config.tools.items():
        if name not in tools:
            tools[name] = tool
    return []


def _add_external_tool(
    name: str,
    version: str | None,
    file_label: str,
    origin: str,
    tools: dict[str, ToolDescriptor],
    settings: Settings,
    warnings: list[str],
) -> None:
    if name in tools:
        return

    command, version_arg, known = resolve_tool_mapping(name)
    if not known:
        if settings.skip_unknown_tools:
            return
        if settings.fail_on_unknown_tools:
            warnings.append(f"Error: Unknown tool '{name}' in {file_label}")
            return
        if settings.warn_on_unknown_tools:
            warnings.append(format_unknown_tool_warning(name, file_label))

    tools[name] = ToolDescriptor(
        name=name,
        command=command,
        version=version or None,
        version_arg=version_arg,
        source=origin,
    )


def _extract_mise_version(value: Any) -> str:
    """Version from `node = "18"` or `terraform = { version = "1.0.0" }`."""
    if isinstance(value, str):
        return value
    if isinstance(value, dict) and isinstance(value.get("version"), str):
        return value["version"]
    return ""


def _load_mise_source(path: str, tools: dict[str, ToolDescriptor], settings: Settings) -> list[str]:
    if not os.path.isfile(path):
        return []
    try:
        data = _load_toml(path)
    except (OSError, tomllib.TOMLDecodeError) as e:
        return [f"Error parsing mise.toml: {e}"]

    warnings: list[str] = []
    mise_tools = data.get("tools", {})
    if not isinstance(mise_tools, dict):
        return ["Error parsing mise.toml: [tools] must be a table"]

    for name, value in mise_tools.items():
        _add_external_tool(
            name, _extract_mise_version(value), "mise.toml", f"mise:{path}", tools, settings, warnings
        )
    return warnings


def _load_tool_versions_source(path: str, tools: dict[str, ToolDescriptor], settings: Settings) -> list[str]:
    try:
        with open(path, "r", encoding="utf-8") as f:
            lines = f.read().splitlines()
    except FileNotFoundError:
        return []
    except OSError as e:
        return [f"Error reading .tool-versions: {e}"]

    warnings: list[str] = []
    for line in lines:
        line = line.strip()
        if not line or line.startswith("#"):
            continue

        parts = line.split()
        if len(parts) < 2:
            continue

        _add_external_tool(
            parts[0], parts[1], ".tool-versions", f"tool-versions:{path}", tools, settings, warnings
        )
    return warnings


def write_sample_config(root_dir: str = ".") -> str:
    """
    Write SAMPLE_CONFIG to .cli-check.toml in root_dir.

    Returns:
        Path of the written file

    Raises:
        ConfigError: the file already exists or cannot be written
    """
    path = os.path.join(root_dir, DEFAULT_CONFIG_NAMES[0])
    if os.path.exists(path):
        raise ConfigError(f"{DEFAULT_CONFIG_NAMES[0]} already exists")
    try:
        with open(path, "x", encoding="utf-8") as f:
            f.write(SAMPLE_CONFIG)
    except OSError as e:
        raise ConfigError(f"failed to write {path}: {e}") from e
    return path
