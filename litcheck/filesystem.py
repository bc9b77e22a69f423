"""Path checks and file writes for litcheck.

Documents are only read when they are regular Markdown files reached without
symlinks and below the configured size. Tangled listings are only written
inside the chosen output directory.
"""

from __future__ import annotations

import os
import stat
import tempfile
from pathlib import Path

from .constants import DEFAULT_MAX_FILE_SIZE, DEFAULT_MAX_LINE_LENGTH, DOCUMENT_EXTENSIONS

MAX_FILE_SIZE_ENV_VAR = "LITCHECK_MAX_FILE_SIZE"
MAX_LINE_LENGTH_ENV_VAR = "LITCHECK_MAX_LINE_LENGTH"


def limit_from_env(name: str, default: int) -> int:
    """Read a positive integer limit from the environment variable `name`.

    Raises:
        ValueError: If the variable is set but is not a positive integer.
    """
    raw = os.environ.get(name)
    if raw is None:
        return default

    try:
        limit = int(raw)
    except ValueError as error:
        raise ValueError(f"Invalid value for {name}: {raw} (expected positive integer)") from error

    if limit <= 0:
        raise ValueError(f"{name} must be a positive integer, got {limit}.")
    return limit


def get_max_file_size(default: int = DEFAULT_MAX_FILE_SIZE) -> int:
    """Document size limit in bytes, from `LITCHECK_MAX_FILE_SIZE` or `default`."""
    return limit_from_env(MAX_FILE_SIZE_ENV_VAR, default)


def get_max_line_length(default: int = DEFAULT_MAX_LINE_LENGTH) -> int:
    """Line length limit in characters, from `LITCHECK_MAX_LINE_LENGTH` or `default`."""
    return limit_from_env(MAX_LINE_LENGTH_ENV_VAR, default)


def contains_symlink(path: Path) -> bool:
    for candidate in (path, *path.parents):
        try:
            if candidate.is_symlink():
                return True
        except OSError:
            continue
    return False


def resolve_document(raw_path: str, max_file_size: int) -> Path:
    """Resolve the path of a document to check and apply the read guards.

    Args:
        raw_path: Path given on the command line, absolute or relative.
        max_file_size: Largest accepted document, in bytes.

    Returns:
        Path: The absolute path of the document.

    Raises:
        ValueError: If the path is missing, goes through a symlink, is not a
            regular file, or does not have a Markdown extension.
        IOError: If the file cannot be inspected or is larger than
            `max_file_size`.

    Examples:
        resolve_document("docs/proposal.md", max_file_size=1_048_576)
    """
    path = Path(raw_path).expanduser()
    if contains_symlink(path):
        raise ValueError(f"Symlinks are not supported for security reasons: {path}")

    try:
        document = path.resolve(strict=True)
    except FileNotFoundError as error:
        raise ValueError(f"{path} does not exist.") from error
    except OSError as error:
        raise ValueError(f"Error resolving {path}: {error}") from error

    if document.suffix.lower() not in DOCUMENT_EXTENSIONS:
        supported = ", ".join(DOCUMENT_EXTENSIONS)
        raise ValueError(
            f"{document} is not a Markdown file.\nSupported extensions are: {supported}"
        )

    try:
        info = os.lstat(document)
    except OSError as error:
        raise IOError(f"Error accessing {document}: {error}") from error

    if not stat.S_ISREG(info.st_mode):
        raise ValueError(f"{document} is not a regular file.")
    if info.st_size > max_file_size:
        raise IOError(f"{document} exceeds the maximum allowed size of {max_file_size} bytes.")
    return document


def resolve_output_path(output_dir: Path, name: str) -> Path:
    """Resolve where a listing named `name` is written below `output_dir`.

    Raises:
        ValueError: If the name is absolute or escapes `output_dir`.
    """
    relative = Path(name)
    if relative.is_absolute():
        raise ValueError(f"Refusing to write absolute listing path: {name}")

    base = output_dir.resolve()
    target = (base / relative).resolve()
    try:
        target.relative_to(base)
    except ValueError as error:
        raise ValueError(f"Listing `{name}` would be written outside of {base}") from error
    if target == base:
        raise ValueError(f"Listing `{name}` does not name a file")
    return target


def _file_mode() -> int:
    umask = os.umask(0)
    os.umask(umask)
    return 0o666 & ~umask


def write_atomic(filepath: Path, content: str):
    """Replace `filepath` with `content` so readers never see a partial file.

    The data goes to a sibling temporary file which is then renamed over the
    target. Missing parent directories are created.

    Raises:
        IOError: If the directory or the file cannot be written.
    """
    directory = filepath.parent
    try:
        directory.mkdir(parents=True, exist_ok=True)
    except OSError as error:
        raise IOError(f"Error creating {directory}: {error}") from error

    try:
        fd, staging = tempfile.mkstemp(prefix=f".{filepath.name}.", dir=directory)
    except OSError as error:
        raise IOError(f"Error writing {filepath}: {error}") from error

    try:
        with os.fdopen(fd, "w", encoding="UTF-8") as handle:
            handle.write(content)
            handle.flush()
            os.fsync(handle.fileno())
        # mkstemp creates 0600 files
        os.chmod(staging, _file_mode())
        os.replace(staging, filepath)
    except OSError as error:
        Path(staging).unlink(missing_ok=True)
        raise IOError(f"Error writing {filepath}: {error}") from error
