"""Core utilities: configuration, naming policy, process execution and errors."""

from .config import AiddConfig, DocumentSchema, Workspace, load_config, resolve_repo_root
from .errors import (
    AiddError,
    CommandFailedError,
    CommandNotFoundError,
    ConfigError,
    FrontmatterError,
    UserInputError,
)

__all__ = [
    "AiddConfig",
    "DocumentSchema",
    "Workspace",
    "load_config",
    "resolve_repo_root",
    "AiddError",
    "CommandFailedError",
    "CommandNotFoundError",
    "ConfigError",
    "FrontmatterError",
    "UserInputError",
]
