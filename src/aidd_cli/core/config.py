"""Project configuration and repository root resolution.

Settings live in an optional ``.aidd/config.yaml`` at the repository root.
Every key has a default matching the bun/mise/supabase project layout the
tool was written for, so a repository without the file works out of the box.

Example::

    schema: tasks            # or "plan" (no per-task documents)
    trunk_branch: main
    checks:
      lint: mise run lint
      test: [bun, test]
    service:
      workdir: packages/platform/supabase
      project_id: my-app
    deploy:
      steps:
        - command: bun run build
          cwd: apps/web
"""

from __future__ import annotations

import logging
import os
import shlex
import subprocess
from dataclasses import dataclass, field
from enum import StrEnum
from pathlib import Path
from typing import Any

from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from aidd_cli.core import paths
from aidd_cli.core.errors import ConfigError

__all__ = [
    "CONFIG_RELPATH",
    "REPO_ROOT_ENV",
    "DocumentSchema",
    "CommandSpec",
    "DeployStep",
    "ServiceSettings",
    "AiddConfig",
    "Workspace",
    "load_config",
    "resolve_repo_root",
]

logger = logging.getLogger(__name__)

CONFIG_RELPATH = Path(".aidd") / "config.yaml"
REPO_ROOT_ENV = "AIDD_REPO_ROOT"


class DocumentSchema(StrEnum):
    """Which documents ``issue plan`` persists."""

    PLAN = "plan"
    TASKS = "tasks"


@dataclass(frozen=True)
class CommandSpec:
    """An external command as program + arguments."""

    program: str
    args: tuple[str, ...] = ()

    @classmethod
    def parse(cls, value: Any, key: str) -> CommandSpec:
        if isinstance(value, str):
            argv = shlex.split(value)
        elif isinstance(value, list) and all(isinstance(item, (str, int)) for item in value):
            argv = [str(item) for item in value]
        else:
            raise ConfigError(f"Invalid {key} in config.yaml: expected a command string or list")
        if not argv:
            raise ConfigError(f"Invalid {key} in config.yaml: command is empty")
        return cls(program=argv[0], args=tuple(argv[1:]))

    def __str__(self) -> str:
        return shlex.join([self.program, *self.args])


@dataclass(frozen=True)
class DeployStep:
    command: CommandSpec
    cwd: str = "."


@dataclass
class ServiceSettings:
    """Worktree-local supabase instance settings."""

    program: str = "supabase"
    workdir: str = "packages/platform/supabase"
    config_file: str = "config.toml"
    project_id: str = "ai-driven-development-sample"

    @property
    def config_relpath(self) -> Path:
        return Path(self.workdir) / self.config_file


def _default_deploy_steps() -> list[DeployStep]:
    return [
        DeployStep(CommandSpec("supabase", ("--workdir", "packages/platform/supabase", "db", "push"))),
        DeployStep(CommandSpec("bun", ("run", "build")), cwd="apps/web"),
        DeployStep(CommandSpec("bunx", ("wrangler", "deploy")), cwd="apps/web"),
    ]


@dataclass
class AiddConfig:
    schema: DocumentSchema = DocumentSchema.TASKS
    trunk_branch: str = "main"
    owner_agent: str = "claude"
    features_dir: str = paths.DEFAULT_FEATURES_DIR
    worktrees_dir: str = paths.DEFAULT_WORKTREES_DIR
    templates_dir: str = ".agent/templates"
    env_file: str = ".env"
    tool_install: CommandSpec = field(default_factory=lambda: CommandSpec("mise", ("install",)))
    package_install: CommandSpec = field(default_factory=lambda: CommandSpec("bun", ("install",)))
    lint: CommandSpec = field(default_factory=lambda: CommandSpec("mise", ("run", "lint")))
    test: CommandSpec = field(default_factory=lambda: CommandSpec("bun", ("test",)))
    service: ServiceSettings = field(default_factory=ServiceSettings)
    deploy_steps: list[DeployStep] = field(default_factory=_default_deploy_steps)

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> AiddConfig:
        config = cls()
        if not data:
            return config
        if not isinstance(data, dict):
            raise ConfigError("Invalid config.yaml: expected a mapping at the top level")

        schema = data.get("schema")
        if schema is not None:
            try:
                config.schema = DocumentSchema(str(schema).strip().lower())
            except ValueError as exc:
                valid = ", ".join(s.value for s in DocumentSchema)
                raise ConfigError(f"Invalid schema '{schema}' in config.yaml. Valid: {valid}") from exc

        for key in ("trunk_branch", "owner_agent", "features_dir", "worktrees_dir", "templates_dir", "env_file"):
            value = data.get(key)
            if value is None:
                continue
            if not isinstance(value, str) or not value.strip():
                raise ConfigError(f"Invalid {key} in config.yaml: expected a non-empty string")
            setattr(config, key, value.strip())

        install = _section(data, "install")
        if "tool" in install:
            config.tool_install = CommandSpec.parse(install["tool"], "install.tool")
        if "packages" in install:
            config.package_install = CommandSpec.parse(install["packages"], "install.packages")

        checks = _section(data, "checks")
        if "lint" in checks:
            config.lint = CommandSpec.parse(checks["lint"], "checks.lint")
        if "test" in checks:
            config.test = CommandSpec.parse(checks["test"], "checks.test")

        service = _section(data, "service")
        for key in ("program", "workdir", "config_file", "project_id"):
            value = service.get(key)
            if value is None:
                continue
            if not isinstance(value, str) or not value.strip():
                raise ConfigError(f"Invalid service.{key} in config.yaml: expected a non-empty string")
            setattr(config.service, key, value.strip())

        deploy = _section(data, "deploy")
        if "steps" in deploy:
            raw_steps = deploy["steps"]
            if not isinstance(raw_steps, list):
                raise ConfigError("Invalid deploy.steps in config.yaml: expected a list")
            steps: list[DeployStep] = []
            for index, raw in enumerate(raw_steps, start=1):
                if isinstance(raw, dict):
                    command = CommandSpec.parse(raw.get("command"), f"deploy.steps[{index}].command")
                    steps.append(DeployStep(command, cwd=str(raw.get("cwd") or ".")))
                else:
                    steps.append(DeployStep(CommandSpec.parse(raw, f"deploy.steps[{index}]")))
            config.deploy_steps = steps

        return config


def _section(data: dict[str, Any], key: str) -> dict[str, Any]:
    value = data.get(key)
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ConfigError(f"Invalid {key} in config.yaml: expected a mapping")
    return value


def load_config(repo_root: Path) -> AiddConfig:
    """Load .aidd/config.yaml, falling back to defaults when absent."""
    config_file = repo_root / CONFIG_RELPATH
    if not config_file.exists():
        logger.debug("No config file at %s, using defaults", config_file)
        return AiddConfig()

    yaml = YAML(typ="safe")
    try:
        with open(config_file, "r", encoding="utf-8") as f:
            data = yaml.load(f)
    except YAMLError as exc:
        raise ConfigError(f"Invalid YAML in {config_file}: {exc}") from exc
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigError(f"Failed to read {config_file}") from exc

    config = AiddConfig.from_dict(data)
    logger.debug("Loaded config from %s (schema=%s)", config_file, config.schema)
    return config


def resolve_repo_root(explicit: Path | None = None) -> Path:
    """Pick the repository root.

    Order: explicit path, ``AIDD_REPO_ROOT``, ``git rev-parse --show-toplevel``,
    then the current directory.
    """
    if explicit is not None:
        return explicit.resolve()

    env_root = os.environ.get(REPO_ROOT_ENV, "").strip()
    if env_root:
        return Path(env_root).resolve()

    try:
        result = subprocess.run(
            ["git", "rev-parse", "--show-toplevel"],
            capture_output=True,
            text=True,
            check=False,
        )
    except OSError:
        result = None
    if result is not None and result.returncode == 0 and result.stdout.strip():
        return Path(result.stdout.strip())

    logger.debug("Not inside a git repository, using current directory as root")
    return Path.cwd()


@dataclass
class Workspace:
    """Repository root plus configuration, passed to every operation."""

    root: Path
    config: AiddConfig = field(default_factory=AiddConfig)

    @classmethod
    def discover(cls, explicit_root: Path | None = None) -> Workspace:
        root = resolve_repo_root(explicit_root)
        return cls(root=root, config=load_config(root))

    @property
    def features_root(self) -> Path:
        return self.root / self.config.features_dir

    @property
    def templates_dir(self) -> Path:
        return self.root / self.config.templates_dir

    @property
    def uses_task_documents(self) -> bool:
        return self.config.schema is DocumentSchema.TASKS

    def worktree_path(self, issue: int, task: int | None = None) -> Path:
        return paths.worktree_path(self.root, issue, task, self.config.worktrees_dir)

    def worktree_relpath(self, issue: int, task: int | None = None) -> str:
        return f"{self.config.worktrees_dir}/{paths.worktree_name(issue, task)}"

    def features_dir(self, issue: int) -> Path:
        return paths.features_dir(self.root, issue, self.config.features_dir)

    def plan_file(self, issue: int) -> Path:
        return paths.plan_file(self.root, issue, self.config.features_dir)

    def task_dir(self, issue: int, task: int) -> Path:
        return paths.task_dir(self.root, issue, task, self.config.features_dir)

    def task_file(self, issue: int, task: int) -> Path:
        return paths.task_file(self.root, issue, task, self.config.features_dir)
