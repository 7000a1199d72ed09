from __future__ import annotations

import os
import socket
import stat
import time
import uuid
from pathlib import Path

import pytest

import md_editor.cli as cli_module
from md_editor.filesystem import MAX_FILE_SIZE_ENV_VAR

UNNORMALIZED = "* item\n"


def _write(tmp_path: Path, name: str, content: str) -> Path:
    target = tmp_path / name
    target.write_text(content, encoding="utf-8")
    return target


def _error_text(result) -> str:
    """Return combined stdout and exception text for assertions."""
    return f"{result.output}{result.exception}"


@pytest.mark.skipif(not hasattr(os, "symlink"), reason="Symlink support is required")
def test_symlink_rejected(cli_runner, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    source = _write(tmp_path, "source.md", "# Heading\n")
    link = tmp_path / "alias.md"
    try:
        os.symlink(source, link, target_is_directory=False)
    except OSError as error:  # pragma: no cover - platform dependent
        pytest.skip(f"Unable to create symlink: {error}")

    result = cli_runner.invoke(cli_module.cli, ["format", "--in-place", str(link)])
    assert result.exit_code != 0
    assert "Symlinks" in result.output
    assert source.read_text(encoding="utf-8") == "# Heading\n"


def test_path_traversal_prevented(cli_runner, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    outside = tmp_path.parent / f"outside-{uuid.uuid4().hex}.md"
    outside.write_text("# Outside\n", encoding="utf-8")

    try:
        result = cli_runner.invoke(cli_module.cli, ["parse", str(outside)])
        assert result.exit_code != 0
        assert "outside of the working directory" in result.output
    finally:
        outside.unlink(missing_ok=True)


def test_file_size_limit_enforced(cli_runner, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv(MAX_FILE_SIZE_ENV_VAR, "10")
    target = _write(tmp_path, "large.md", "X" * 20)

    result = cli_runner.invoke(cli_module.cli, ["format", "--in-place", str(target)])
    assert result.exit_code != 0
    assert "maximum allowed size" in _error_text(result)


def test_permissions_preserved_on_update(cli_runner, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    target = _write(tmp_path, "permissions.md", UNNORMALIZED)
    desired_mode = 0o640
    os.chmod(target, desired_mode)

    result = cli_runner.invoke(cli_module.cli, ["format", "--in-place", str(target)])
    assert result.exit_code == 0
    assert target.read_text(encoding="utf-8") == "- item\n"
    assert stat.S_IMODE(target.stat().st_mode) == desired_mode


def test_atime_preserved_mtime_updated(cli_runner, tmp_path, monkeypatch):
    """Verify atime is preserved but mtime reflects the actual modification."""
    monkeypatch.chdir(tmp_path)
    target = _write(tmp_path, "timestamps.md", UNNORMALIZED)

    specific_atime = time.time() - 86400
    specific_mtime = time.time() - 3600
    os.utime(target, times=(specific_atime, specific_mtime))

    original_stat = target.stat()

    result = cli_runner.invoke(cli_module.cli, ["format", "--in-place", str(target)])
    assert result.exit_code == 0

    updated_stat = target.stat()
    assert updated_stat.st_atime_ns == original_stat.st_atime_ns
    assert updated_stat.st_mtime_ns > original_stat.st_mtime_ns


def test_normalized_file_is_not_rewritten(cli_runner, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    target = _write(tmp_path, "clean.md", "- item\n")
    past = time.time() - 3600
    os.utime(target, times=(past, past))
    original_mtime_ns = target.stat().st_mtime_ns

    result = cli_runner.invoke(cli_module.cli, ["format", "--in-place", str(target)])
    assert result.exit_code == 0
    assert target.stat().st_mtime_ns == original_mtime_ns


def test_invalid_utf8_handling(cli_runner, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    target = tmp_path / "broken.md"
    target.write_bytes(b"\xff\xfe# Heading\n")

    result = cli_runner.invoke(cli_module.cli, ["parse", str(target)])
    assert result.exit_code != 0
    assert "is not valid UTF-8" in _error_text(result)


def test_race_condition_detection(cli_runner, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    target = _write(tmp_path, "race.md", UNNORMALIZED)

    original_read = cli_module.read_markdown

    def _read_and_mutate(path: Path) -> str:
        content = original_read(path)
        path.write_text(content + "\n# Mutated\n", encoding="utf-8")
        return content

    monkeypatch.setattr(cli_module, "read_markdown", _read_and_mutate)
    result = cli_runner.invoke(cli_module.cli, ["format", "--in-place", str(target)])

    assert result.exit_code != 0
    assert "changed during processing" in _error_text(result)
    assert "# Mutated" in target.read_text(encoding="utf-8")


@pytest.mark.skipif(not hasattr(os, "mkfifo"), reason="mkfifo not available")
def test_fifo_rejected(cli_runner, tmp_path, monkeypatch):
    """FIFOs are rejected so a read can never block."""
    monkeypatch.chdir(tmp_path)
    fifo_path = tmp_path / "pipe.md"

    try:
        os.mkfifo(fifo_path)
    except OSError as error:  # pragma: no cover - platform dependent
        pytest.skip(f"Unable to create FIFO: {error}")

    result = cli_runner.invoke(cli_module.cli, ["parse", str(fifo_path)])
    assert result.exit_code != 0
    assert "is not a regular file" in _error_text(result)


@pytest.mark.skipif(not hasattr(socket, "AF_UNIX"), reason="Unix sockets not available")
def test_socket_rejected(cli_runner, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    socket_path = tmp_path / "socket.md"

    sock = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
    try:
        sock.bind(str(socket_path))
    except OSError as error:  # pragma: no cover - platform dependent
        pytest.skip(f"Unable to create socket: {error}")
    finally:
        sock.close()

    result = cli_runner.invoke(cli_module.cli, ["stats", str(socket_path)])
    assert result.exit_code != 0
    assert "is not a regular file" in _error_text(result)
