"""Settings for litcheck runs, read from `pyproject.toml` or `.litcheck.toml`."""

from __future__ import annotations

import shlex
from dataclasses import dataclass, replace
from pathlib import Path
import tomllib


@dataclass
class CheckConfig:
    """Configuration for verifying the listings of a Markdown document.

    Attributes:
        tool: Checker command run against each extracted listing; the path of
            the transient file is appended as the final argument. Accepts a
            shell-style string or a sequence of arguments.
        exclude: Glob patterns naming listings that are never checked.
        jobs: Number of listings validated concurrently.
        timeout: Seconds allowed for each checker invocation, or None for no
            limit.
        workdir: Directory for transient files; the system temporary directory
            when None.
        strict: Whether malformed listing headers abort the run (True) or are
            skipped with a warning (False).
        max_file_size: Maximum document size in bytes that will be processed.
        max_line_length: Maximum line length allowed during parsing.
        max_listings: Maximum number of listings a document may contain.

    Examples:
        CheckConfig(tool="zig fmt --ast-check", exclude=("*.prf",), jobs=4)
    """

    # Toolchain
    tool: tuple[str, ...] | str = ("zig", "fmt", "--ast-check")
    timeout: float | None = 30.0
    workdir: str | None = None

    # Selection
    exclude: tuple[str, ...] | str = ("*.prf",)

    # Execution
    jobs: int = 1
    strict: bool = True

    # Limits
    max_file_size: int = 10 * 1024 * 1024
    max_line_length: int = 10_000
    max_listings: int = 10_000


class ConfigError(ValueError):
    """Exception raised when configuration values are invalid.

    Examples:
        raise ConfigError("`jobs` must be a positive integer")
    """


_MISSING = object()

# File name and the tables read from it, in lookup order within a directory
CONFIG_SOURCES: tuple[tuple[str, tuple[tuple[str, ...], ...]], ...] = (
    ("pyproject.toml", (("tool", "litcheck"),)),
    (".litcheck.toml", (("litcheck",), ("tool", "litcheck"))),
)


def load_config(search_path: Path) -> CheckConfig:
    """Load the settings closest to `search_path`.

    Each directory from `search_path` up to the filesystem root is searched
    for the files in `CONFIG_SOURCES`; the first file holding a litcheck table
    wins. Files that cannot be read or are not valid TOML are skipped, and
    defaults are returned when nothing is found.

    Raises:
        ConfigError: If the table is not a mapping or has unknown keys.

    Examples:
        load_config(Path("docs"))
    """
    for directory in (search_path.resolve(), *search_path.resolve().parents):
        for filename, table_paths in CONFIG_SOURCES:
            config = _load_from_file(directory / filename, table_paths)
            if config is not None:
                return normalize_config(config)
    return CheckConfig()


def _load_from_file(
    config_file: Path, table_paths: tuple[tuple[str, ...], ...]
) -> CheckConfig | None:
    if not config_file.is_file():
        return None

    try:
        data = tomllib.loads(config_file.read_text(encoding="UTF-8"))
    except (OSError, UnicodeDecodeError, tomllib.TOMLDecodeError):
        return None

    for table_path in table_paths:
        table: object = data
        for key in table_path:
            table = table.get(key, _MISSING) if isinstance(table, dict) else _MISSING
        if table is _MISSING:
            continue

        where = f"`[{'.'.join(table_path)}]` settings in {config_file}"
        if table is None or table == {}:
            return CheckConfig()
        if not isinstance(table, dict):
            raise ConfigError(f"Invalid {where}")
        try:
            return CheckConfig(**table)
        except TypeError as error:
            raise ConfigError(f"Invalid {where}") from error

    return None


def normalize_config(config: CheckConfig) -> CheckConfig:
    """Convert string and list values into the canonical tuple forms."""
    tool = config.tool
    if isinstance(tool, str):
        try:
            tool = shlex.split(tool)
        except ValueError as error:
            raise ConfigError(f"`tool` could not be parsed: {error}") from error
    if isinstance(tool, list):
        tool = tuple(tool)

    exclude = config.exclude
    if isinstance(exclude, str):
        exclude = (exclude,)
    elif isinstance(exclude, list):
        exclude = tuple(exclude)

    timeout = config.timeout
    if isinstance(timeout, int) and not isinstance(timeout, bool):
        timeout = float(timeout)

    return replace(config, tool=tool, exclude=exclude, timeout=timeout)


def validate_config(config: CheckConfig) -> None:
    """Reject settings a run cannot use.

    Raises:
        ConfigError: On an empty checker command, non-string exclusion
            patterns, non-positive limits or timeout, or a non-boolean `strict`.
    """
    config = normalize_config(config)

    if not isinstance(config.tool, tuple) or not config.tool:
        raise ConfigError("`tool` must not be empty")
    if not all(isinstance(argument, str) and argument for argument in config.tool):
        raise ConfigError("`tool` arguments must be non-empty strings")

    if not isinstance(config.exclude, tuple):
        raise ConfigError("`exclude` must be a list of glob patterns")
    if not all(isinstance(pattern, str) and pattern for pattern in config.exclude):
        raise ConfigError("`exclude` patterns must be non-empty strings")

    _ensure_positive_integers(
        jobs=config.jobs,
        max_file_size=config.max_file_size,
        max_line_length=config.max_line_length,
        max_listings=config.max_listings,
    )

    if config.timeout is not None:
        if isinstance(config.timeout, bool) or not isinstance(config.timeout, float):
            raise ConfigError("`timeout` must be a number of seconds")
        if config.timeout <= 0:
            raise ConfigError("`timeout` must be positive")

    if config.workdir is not None and not isinstance(config.workdir, str):
        raise ConfigError("`workdir` must be a path string")

    if not isinstance(config.strict, bool):
        raise ConfigError("`strict` must be a boolean")


def apply_overrides(config: CheckConfig, **overrides: object) -> CheckConfig:
    """Return `config` with command-line values laid over it.

    None values and an empty `exclude` mean the flag was not given and are
    skipped, so file settings stay in effect.

    Examples:
        apply_overrides(config, tool="zig fmt --check", jobs=4)
    """
    changes = {key: value for key, value in overrides.items() if value is not None}
    if changes.get("exclude") == ():
        del changes["exclude"]
    if not changes:
        return config
    return replace(config, **changes)


def build_config(search_path: Path, **overrides: object) -> CheckConfig:
    """Resolve the settings for a document in `search_path`.

    File settings are loaded, command-line `overrides` applied on top, and the
    result normalized and validated.

    Raises:
        ConfigError: If a config file or the combined settings are invalid.
    """
    config = load_config(search_path)
    config = apply_overrides(config, **overrides)
    config = normalize_config(config)
    validate_config(config)
    return config


def _ensure_positive_integers(**values: object) -> None:
    for key, value in values.items():
        if isinstance(value, bool) or not isinstance(value, int):
            raise ConfigError(f"`{key}` must be an integer")
        if value <= 0:
            raise ConfigError(f"`{key}` must be a positive integer")
