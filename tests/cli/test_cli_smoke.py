# SPDX-License-Identifier: MIT

"""
CLI smoke tests.

These drive the real entrypoint in a subprocess, the way a build pipeline
would, and assert on exit codes only. That catches broken imports and
entrypoint wiring that unit tests miss.
"""

import subprocess
import sys
import textwrap
from pathlib import Path
from typing import Callable

import pytest

_REPO_ROOT = Path(__file__).resolve().parents[2]


def _run_cli(*args: str) -> subprocess.CompletedProcess[str]:
    """Run `pkghealth` with the given arguments and capture output."""
    return subprocess.run(
        [sys.executable, "-m", "pkghealth.cli.main", *args],
        capture_output=True,
        text=True,
        timeout=30,
        cwd=_REPO_ROOT,
    )


def _write_config(tmp_path: Path, scan_command: str, resolver_command: str = "xargs ldd") -> Path:
    config_file = tmp_path / "healthcheck.yaml"
    config_file.write_text(
        textwrap.dedent(f"""\
            global:
              config_version: "1.0.0"
            dependencies:
              scan_command: "{scan_command}"
              resolver_command: "{resolver_command}"
        """),
        encoding="utf-8",
    )
    return config_file


class TestHelpTexts:
    @pytest.mark.parametrize("subcommand", ["check", "info"])
    def test_subcommand_help_exits_zero(self, subcommand: str) -> None:
        result = _run_cli(subcommand, "--help")
        assert result.returncode == 0
        assert "usage" in result.stdout.lower()

    def test_root_help_exits_with_user_error(self) -> None:
        result = _run_cli()
        assert result.returncode == 1


class TestInfo:
    def test_info_runs_without_config(self) -> None:
        result = _run_cli("info")
        assert result.returncode == 0
        assert '"version"' in result.stderr

    def test_valid_config_is_accepted(self, tmp_config_file: Path) -> None:
        result = _run_cli("info", "--config", str(tmp_config_file))
        assert result.returncode == 0

    def test_nonexistent_config_returns_config_error(self) -> None:
        result = _run_cli("info", "--config", "/nonexistent/path.yaml")
        assert result.returncode == 2


class TestCheck:
    def test_missing_install_dir_is_user_error(self, tmp_path: Path) -> None:
        result = _run_cli("check", "--install-dir", str(tmp_path / "missing"), "--platform", "windows")
        assert result.returncode == 1

    def test_broken_config_is_config_error(self, install_dir: Path, broken_yaml_file: Path) -> None:
        result = _run_cli(
            "check", "--install-dir", str(install_dir), "--config", str(broken_yaml_file)
        )
        assert result.returncode == 2

    def test_windows_clean_install_passes(
        self, install_dir: Path, make_dll: Callable[..., Path]
    ) -> None:
        make_dll("a", 0x10000000, 0x1000)
        make_dll("b/b", 0x10001000, 0x1000)

        result = _run_cli("check", "--install-dir", str(install_dir), "--platform", "windows")
        assert result.returncode == 0

    def test_windows_check_at_debug_level(
        self, install_dir: Path, make_dll: Callable[..., Path], tmp_config_file: Path
    ) -> None:
        make_dll("a", 0x10000000, 0x1000)
        make_dll("b/b", 0x10001000, 0x1000)

        result = _run_cli(
            "check",
            "--install-dir", str(install_dir),
            "--platform", "windows",
            "--config", str(tmp_config_file),
        )
        assert result.returncode == 0
        assert "Decoded module" in result.stderr

    def test_windows_overlap_fails(self, install_dir: Path, make_dll: Callable[..., Path]) -> None:
        make_dll("a", 0x10000000, 0x2000)
        make_dll("b/b", 0x10001000, 0x1000)

        result = _run_cli("check", "--install-dir", str(install_dir), "--platform", "windows")
        assert result.returncode == 4
        assert "relocation_conflicts" in result.stderr
        assert "b/b" in result.stderr

    def test_linux_empty_scan_is_internal_error(self, install_dir: Path, tmp_path: Path) -> None:
        config_file = _write_config(tmp_path, "true {install_dir}")
        result = _run_cli(
            "check",
            "--install-dir", str(install_dir),
            "--platform", "linux",
            "--config", str(config_file),
        )
        assert result.returncode == 3

    def test_linux_self_contained_install_passes(self, install_dir: Path, tmp_path: Path) -> None:
        # Every binary resolves to a header with no libraries below it.
        config_file = _write_config(
            tmp_path, "echo {install_dir}/bin/tool", resolver_command="sed -e 's/$/:/'"
        )
        result = _run_cli(
            "check",
            "--install-dir", str(install_dir),
            "--platform", "linux",
            "--config", str(config_file),
        )
        assert result.returncode == 0

    def test_linux_external_library_fails(self, install_dir: Path, tmp_path: Path) -> None:
        config_file = _write_config(
            tmp_path,
            "echo {install_dir}/bin/tool",
            resolver_command="sed -e 's|$|:\\\\n    libfoo.so.1 => /usr/lib/libfoo.so.1 (0x00007f)|'",
        )
        result = _run_cli(
            "check",
            "--install-dir", str(install_dir),
            "--platform", "linux",
            "--config", str(config_file),
        )
        assert result.returncode == 4
        assert "/usr/lib/libfoo.so.1" in result.stderr
