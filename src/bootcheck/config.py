"""
Centralized configuration for bootcheck.

Uses Pydantic BaseSettings for environment variable integration
and validation. Every path, command and constant used by the
provisioning and quality pipelines is defined here.

Configuration sources (in order of precedence):
1. Explicit constructor arguments
2. Environment variables (BOOTCHECK_*)
3. .bootcheck.env file
4. Default values

Settings are frozen: a config instance is built once at startup and
never mutated afterwards.

Example:
    from bootcheck.config import get_config

    config = get_config()
    print(config.log_file_path)  # <project_root>/logs/mcp_server.log

    # Override at runtime
    config = get_config(package_manager="uv", log_dir="var/logs")
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import List, Literal, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class BootcheckConfig(BaseSettings):
    """
    Central configuration for bootcheck.

    All settings can be overridden via environment variables
    prefixed with BOOTCHECK_. List settings take JSON values.

    Example:
        export BOOTCHECK_LOG_DIR=var/logs
        export BOOTCHECK_LINT_COMMAND='["ruff", "check", "src"]'
    """

    model_config = SettingsConfigDict(
        env_prefix="BOOTCHECK_",
        env_file=".bootcheck.env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    project_root: Path = Field(
        default_factory=Path.cwd,
        description="Directory all relative paths are resolved against",
    )

    # Package manager
    package_manager: str = Field(
        default="uv",
        description="Executable name of the dependency installer/syncer",
    )
    package_manager_version_args: List[str] = Field(
        default_factory=lambda: ["--version"],
        description="Arguments that make the package manager print its version",
    )
    install_script_url: str = Field(
        default="https://astral.sh/uv/install.sh",
        description="Remote install script fetched when the package manager is missing",
    )
    install_shell: str = Field(
        default="sh",
        description="Shell the install script is piped into",
    )
    extra_bin_dirs: List[str] = Field(
        default_factory=lambda: ["~/.local/bin"],
        description="Directories prepended to PATH before probing for tools",
    )
    sync_args: List[str] = Field(
        default_factory=lambda: ["sync", "--all-extras"],
        description="Package manager arguments that sync all dependencies and extras",
    )

    # Config file materialization
    env_file: str = Field(
        default=".env",
        description="Active configuration file created on first run",
    )
    env_template: str = Field(
        default=".env.example",
        description="Template the active configuration file is copied from",
    )

    # Logs
    log_dir: str = Field(default="logs", description="Server log directory")
    log_file: str = Field(
        default="mcp_server.log",
        description="Primary log file, followed with `setup --follow`",
    )
    activity_log_file: str = Field(
        default="mcp_activity.log",
        description="Secondary activity log file",
    )

    # Reserved flag files. Declared for compatibility, not read or written.
    docker_cleaned_flag: str = Field(default=".docker_cleaned")
    desktop_config_flag: str = Field(default=".desktop_configured")

    # Quality checks, each run as `<package_manager> run <command...>`
    lint_command: List[str] = Field(
        default_factory=lambda: ["ruff", "check", ".", "--fix"],
        min_length=1,
    )
    format_command: List[str] = Field(
        default_factory=lambda: ["black", "."],
        min_length=1,
    )
    isort_command: List[str] = Field(
        default_factory=lambda: ["isort", "."],
        min_length=1,
    )
    test_command: List[str] = Field(
        default_factory=lambda: ["pytest", "tests/", "-v", "-m", "not integration", "--tb=short"],
        min_length=1,
    )
    server_command: List[str] = Field(
        default_factory=lambda: ["python", "server.py"],
        description="Command shown in the post-setup guidance",
    )

    command_timeout_seconds: Optional[float] = Field(
        default=None,
        gt=0,
        description="Timeout for external commands; None waits indefinitely",
    )

    # Logging
    log_level: Literal["debug", "info", "warning", "error"] = Field(
        default="error",
        description="Logging level for bootcheck's own diagnostics",
    )
    log_format: Literal["json", "text"] = Field(
        default="text",
        description="Step event log format",
    )

    @field_validator("project_root")
    @classmethod
    def expand_root(cls, v: Path) -> Path:
        """Expand ~ and environment variables in the project root."""
        return Path(os.path.expanduser(os.path.expandvars(str(v))))

    @field_validator("extra_bin_dirs")
    @classmethod
    def expand_bin_dirs(cls, v: List[str]) -> List[str]:
        """Expand ~ and environment variables in PATH entries."""
        return [os.path.expanduser(os.path.expandvars(d)) for d in v]

    def resolve(self, relative: str) -> Path:
        """Resolve a configured path against the project root."""
        return self.project_root / relative

    @property
    def env_path(self) -> Path:
        return self.resolve(self.env_file)

    @property
    def env_template_path(self) -> Path:
        return self.resolve(self.env_template)

    @property
    def log_dir_path(self) -> Path:
        return self.resolve(self.log_dir)

    @property
    def log_file_path(self) -> Path:
        return self.log_dir_path / self.log_file

    @property
    def activity_log_path(self) -> Path:
        return self.log_dir_path / self.activity_log_file

    def run_argv(self, command: List[str]) -> List[str]:
        """Wrap a tool command so it runs inside the managed environment."""
        return [self.package_manager, "run", *command]


# Global singleton
_config: Optional[BootcheckConfig] = None


def get_config(**overrides) -> BootcheckConfig:
    """
    Get the global configuration instance.

    Creates a singleton on first call. Subsequent calls return
    the same instance unless overrides are provided.

    Args:
        **overrides: Override any config values

    Returns:
        BootcheckConfig instance
    """
    global _config

    if overrides or _config is None:
        _config = BootcheckConfig(**overrides)

    return _config


def reset_config() -> None:
    """Reset the global configuration (for testing)."""
    global _config
    _config = None
