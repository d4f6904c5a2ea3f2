"""
Tool descriptors and known tool mappings.

A ToolDescriptor is the static, user-declared description of one tool to
check. Descriptors come from the configuration layer and are never
mutated by a check.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class ToolDescriptor:
    """
    Description of a single tool to check.

    Attributes:
        name: Display name (defaults to the config key)
        command: Executable name or path looked up on PATH
        version: Version constraint; None means existence check only
        version_arg: Explicit arguments used to print the version
        version_pattern: Regex used to extract the version
        optional: Report a missing or mismatched tool as a warning
        message: Advisory text shown when the check does not pass
        source: Where the descriptor was defined
    """
    name: str
    command: str
    version: str | None = None
    version_arg: str | None = None
    version_pattern: str | None = None
    optional: bool = False
    message: str | None = None
    source: str = "config"

    def __post_init__(self):
        if not self.command or not self.command.strip():
            raise ValueError(f"Tool '{self.name}': command must not be empty")

    @property
    def is_version_check(self) -> bool:
        return bool(self.version)

    @staticmethod
    def from_dict(key: str, data: dict[str, Any], source: str = "config") -> ToolDescriptor:
        """Create ToolDescriptor from a config table keyed by ``key``."""
        return ToolDescriptor(
            name=data.get("name") or key,
            command=data.get("cli") or key,
            version=_optional_str(data.get("version")),
            version_arg=_optional_str(data.get("version_arg")),
            version_pattern=_optional_str(data.get("version_pattern")),
            optional=bool(data.get("optional", False)),
            message=_optional_str(data.get("message")),
            source=source,
        )


def _optional_str(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


@dataclass(frozen=True)
class ToolMapping:
    """How to run a tool known by its mise/asdf name."""
    command: str
    version_arg: str | None = None


# mise/asdf plugin names -> executable and version argument
KNOWN_TOOL_MAPPINGS: dict[str, ToolMapping] = {
    "nodejs": ToolMapping("node", "--version"),
    "golang": ToolMapping("go", "version"),
    "awscli": ToolMapping("aws", "--version"),
    "golangci-lint": ToolMapping("golangci-lint", "version"),
    "just": ToolMapping("just", "--version"),
    "pnpm": ToolMapping("pnpm", "--version"),
    "tilt": ToolMapping("tilt", "version"),
    "python": ToolMapping("python", "--version"),
    "poetry": ToolMapping("poetry", "--version"),
    "helm": ToolMapping("helm", "version"),
    "kustomize": ToolMapping("kustomize", "version"),
    "mockery": ToolMapping("mockery", "version"),
    "kubeconform": ToolMapping("kubeconform", "version"),
}


def resolve_tool_mapping(name: str) -> tuple[str, str | None, bool]:
    """Resolve a mise/asdf tool name to its command and version argument.

    Args:
        name: Tool name as written in mise.toml or .tool-versions

    Returns:
        Tuple of (command, version_arg, known). Unknown tools use their
        name as the command and rely on smart guessing.
    """
    mapping = KNOWN_TOOL_MAPPINGS.get(name)
    if mapping:
        return (mapping.command, mapping.version_arg, True)
    return (name, None, False)


def format_unknown_tool_warning(name: str, source: str) -> str:
    """Format the warning for a tool name with no known mapping."""
    return (
        f"Warning: Unknown tool '{name}' from {source}. Using '{name}' as CLI command. "
        "If this is incorrect, define it explicitly in .cli-check.toml"
    )
