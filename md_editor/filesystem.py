"""Filesystem helpers for the md-editor command line."""

from __future__ import annotations

import os
import stat
import tempfile
from collections.abc import Callable
from pathlib import Path

from .constants import DEFAULT_MAX_FILE_SIZE, MARKDOWN_EXTENSIONS

MAX_FILE_SIZE_ENV_VAR = "MD_EDITOR_MAX_FILE_SIZE"


def get_max_file_size(default: int = DEFAULT_MAX_FILE_SIZE) -> int:
    """Resolve the maximum file size, letting the environment override `default`.

    Args:
        default: Size in bytes used when `MD_EDITOR_MAX_FILE_SIZE` is unset.

    Returns:
        int: Maximum allowed file size in bytes.

    Raises:
        ValueError: If the environment value is not a positive integer.

    Examples:
        os.environ["MD_EDITOR_MAX_FILE_SIZE"] = "204800"
        limit = get_max_file_size()
    """
    env_value = os.environ.get(MAX_FILE_SIZE_ENV_VAR)
    if env_value is None:
        return default

    try:
        max_size = int(env_value)
    except ValueError as error:
        raise ValueError(
            f"Invalid value for {MAX_FILE_SIZE_ENV_VAR}: {env_value} (expected positive integer)"
        ) from error

    if max_size <= 0:
        raise ValueError(f"{MAX_FILE_SIZE_ENV_VAR} must be a positive integer, got {max_size}.")
    return max_size


def contains_symlink(path: Path) -> bool:
    for candidate in (path, *path.parents):
        try:
            if candidate.is_symlink():
                return True
        except OSError:
            continue
    return False


def normalize_filepath(raw_path: str, base_dir: Path) -> Path:
    """Resolve a user-supplied markdown path and check it is safe to touch.

    Args:
        raw_path: Absolute or relative path to a markdown file.
        base_dir: Directory the file must live under.

    Returns:
        Path: The resolved absolute path.

    Raises:
        ValueError: If the path is missing, not a regular file, outside
            `base_dir`, goes through a symlink, or lacks a markdown extension.

    Examples:
        normalize_filepath("docs/guide.md", Path.cwd())
    """
    path = Path(raw_path).expanduser()

    if contains_symlink(path):
        raise ValueError(f"Symlinks are not supported: {path}")

    try:
        resolved = path.resolve(strict=True)
    except FileNotFoundError as error:
        raise ValueError(f"{path} does not exist.") from error
    except OSError as error:
        raise ValueError(f"Error resolving {path}: {error}") from error

    if not resolved.is_file():
        raise ValueError(f"{resolved} is not a regular file.")

    try:
        resolved.relative_to(base_dir)
    except ValueError as error:
        raise ValueError(f"{resolved} is outside of the working directory {base_dir}.") from error

    if resolved.suffix.lower() not in MARKDOWN_EXTENSIONS:
        raise ValueError(
            f"{resolved} is not a Markdown file.\n"
            f"Supported extensions are: {', '.join(MARKDOWN_EXTENSIONS)}"
        )

    return resolved


def collect_file_stat(filepath: Path) -> os.stat_result:
    """Stat a file without following symlinks.

    Raises:
        IOError: If the path is inaccessible, a symlink, or not a regular file.
    """
    try:
        stat_result = os.stat(filepath, follow_symlinks=False)
    except OSError as error:
        raise IOError(f"Error accessing {filepath}: {error}") from error

    if stat.S_ISLNK(stat_result.st_mode):
        raise IOError(f"Symlinks are not supported: {filepath}.")
    if not stat.S_ISREG(stat_result.st_mode):
        raise IOError(f"{filepath} is not a regular file.")
    return stat_result


def enforce_file_size(stat_result: os.stat_result, max_size: int, filepath: Path):
    if stat_result.st_size > max_size:
        raise IOError(f"{filepath} exceeds the maximum allowed size of {max_size} bytes.")


def ensure_file_unchanged(expected_stat: os.stat_result, current_stat: os.stat_result, filepath: Path):
    """Refuse to continue when a file changed between two stats.

    Raises:
        IOError: If inode, device, size, or modification time differ.
    """

    def fingerprint(stat_result: os.stat_result) -> tuple:
        return (
            getattr(stat_result, "st_ino", None),
            getattr(stat_result, "st_dev", None),
            stat_result.st_size,
            stat_result.st_mtime_ns,
        )

    if fingerprint(expected_stat) != fingerprint(current_stat):
        raise IOError(f"{filepath} changed during processing; refusing to overwrite.")


def read_markdown(filepath: Path) -> str:
    """Read a markdown file as UTF-8.

    Raises:
        IOError: If the file cannot be opened or is not valid UTF-8.

    Examples:
        content = read_markdown(Path("README.md"))
    """
    try:
        with open(filepath, "r", encoding="UTF-8") as handle:
            return handle.read()
    except (FileNotFoundError, PermissionError, IsADirectoryError, NotADirectoryError) as error:
        raise IOError(f"Error accessing {filepath}: {error}") from error
    except UnicodeDecodeError as error:
        raise IOError(f"{filepath} is not valid UTF-8: {error}") from error


def write_markdown(
    filepath: Path,
    content: str,
    expected_stat: os.stat_result,
    warn: Callable[[str], None] | None = None,
):
    """Atomically replace a markdown file with new content.

    The content goes to a temporary file in the same directory, which then
    replaces the original. Permissions and, where allowed, ownership carry
    over; the original access time is kept.

    Args:
        filepath: File to overwrite.
        content: New file content.
        expected_stat: Stat taken when the file was read, used to detect races.
        warn: Optional callback for non-fatal warnings.

    Raises:
        IOError: If the file changed since `expected_stat` was taken.

    Examples:
        write_markdown(Path("README.md"), formatted, stat_before)
    """
    ensure_file_unchanged(expected_stat, collect_file_stat(filepath), filepath)

    permissions = stat.S_IMODE(expected_stat.st_mode)
    uid = getattr(expected_stat, "st_uid", None)
    gid = getattr(expected_stat, "st_gid", None)

    temp_path: Path | None = None
    try:
        with tempfile.NamedTemporaryFile(
            mode="w", encoding="UTF-8", delete=False, dir=filepath.parent
        ) as tmp_file:
            temp_path = Path(tmp_file.name)
            tmp_file.write(content)
            tmp_file.flush()
            os.fsync(tmp_file.fileno())
            os.chmod(tmp_file.name, permissions)

            if uid is not None and gid is not None and hasattr(os, "chown"):
                try:
                    os.chown(tmp_file.name, uid, gid)
                except PermissionError:
                    if warn is not None:
                        warn(f"Warning: Could not preserve file ownership for {filepath.name}")

        os.replace(temp_path, filepath)

        current_stat = filepath.stat()
        os.utime(filepath, ns=(expected_stat.st_atime_ns, current_stat.st_mtime_ns))
    finally:
        if temp_path is not None:
            try:
                temp_path.unlink(missing_ok=True)
            except OSError:
                pass
