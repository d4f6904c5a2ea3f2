"""
cli-check - Pre-flight verification of installed CLI tools.

Core Modules:
- Probing: run a tool with its version argument or smart-guessed flags
- Extraction: pull a version string out of unstructured output
- Constraints: semantic version ranges (comparisons, ^, ~, wildcards, ||)
- Checking: per-tool state machine and parallel fan-out
- Foundation: configuration, rendering, logging
"""

__version__ = "1.0.0"

VERSION = __version__

# Core
from .tools import ToolDescriptor, KNOWN_TOOL_MAPPINGS, resolve_tool_mapping
from .errors import (
    CheckError,
    CommandNotFound,
    ProbeFailed,
    NoVersionFound,
    InvalidPattern,
    InvalidConstraint,
    InvalidVersion,
    VersionMismatch,
    ToolNotInConfiguration,
    ConfigError,
)
from .process import ProcessResult, ProcessRunner, SubprocessRunner, which
from .probe import ProbeResult, VERSION_ARG_SETS, looks_like_version_output, probe_version
from .extract import extract_version
from .constraints import Constraint, parse_constraint, parse_version, satisfies
from .checker import (
    CheckOutcome,
    STATUS_PASS,
    STATUS_FAIL,
    STATUS_OPTIONAL_MISSING,
    check_tool,
    check_all,
    summarize,
    should_exit_with_error,
)

# Foundation
from .config import Config, Settings, Source, LoadResult, load_config_file, load_and_merge
from .render import Renderer, outcomes_to_json
from .logging_config import setup_logging, get_logger

__all__ = [
    # Version
    "__version__",
    "VERSION",
    # Core
    "ToolDescriptor",
    "KNOWN_TOOL_MAPPINGS",
    "resolve_tool_mapping",
    "CheckError",
    "CommandNotFound",
    "ProbeFailed",
    "NoVersionFound",
    "InvalidPattern",
    "InvalidConstraint",
    "InvalidVersion",
    "VersionMismatch",
    "ToolNotInConfiguration",
    "ConfigError",
    "ProcessResult",
    "ProcessRunner",
    "SubprocessRunner",
    "which",
    "ProbeResult",
    "VERSION_ARG_SETS",
    "looks_like_version_output",
    "probe_version",
    "extract_version",
    "Constraint",
    "parse_constraint",
    "parse_version",
    "satisfies",
    "CheckOutcome",
    "STATUS_PASS",
    "STATUS_FAIL",
    "STATUS_OPTIONAL_MISSING",
    "check_tool",
    "check_all",
    "summarize",
    "should_exit_with_error",
    # Foundation
    "Config",
    "Settings",
    "Source",
    "LoadResult",
    "load_config_file",
    "load_and_merge",
    "Renderer",
    "outcomes_to_json",
    # Logging
    "setup_logging",
    "get_logger",
]
