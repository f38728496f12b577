#!/usr/bin/env python3
"""Code Quality Tests

Pragmatic gates on the source tree:
- ruff finds no syntax errors or undefined names
- every Python file compiles
- runtime modules stay reviewable in size
"""

import shutil
import subprocess
from pathlib import Path

import pytest

from kubepair.logger import session_logger as logger

SOURCE_DIRS = ["kubepair", "stress", "test"]


class TestCodeQuality:
    """Test suite for enforcing code quality standards."""

    _MAX_SOURCE_LINES = 600

    @pytest.fixture
    def project_root(self):
        """Get the project root directory."""
        # test/code_quality/test_code_quality.py -> test/code_quality -> test -> project_root
        return Path(__file__).parent.parent.parent

    @pytest.fixture
    def ruff_executable(self, project_root):
        """Get the path to the ruff executable."""
        venv_ruff = project_root / ".venv" / "bin" / "ruff"
        if venv_ruff.exists():
            return str(venv_ruff)

        system_ruff = shutil.which("ruff")
        if system_ruff:
            return system_ruff

        pytest.skip("ruff not found - install with: pip install -e .[dev]")

    def test_no_fatal_lint_errors(self, project_root, ruff_executable):
        """Run ruff restricted to errors that would break at runtime."""
        result = subprocess.run(
            [ruff_executable, "check", *SOURCE_DIRS, "--select", "E9,F63,F7,F82", "--output-format=concise", "--no-fix"],
            cwd=project_root,
            capture_output=True,
            text=True,
        )

        if result.returncode != 0:
            pytest.fail(
                "\n".join(
                    [
                        "",
                        "=" * 80,
                        "LINTING ERRORS DETECTED",
                        "=" * 80,
                        "",
                        result.stdout,
                        "",
                        f"Reproduce with: {ruff_executable} check {' '.join(SOURCE_DIRS)}",
                        "=" * 80,
                    ]
                )
            )

    def test_ruff_configuration_exists(self, project_root):
        """Verify that ruff configuration exists in pyproject.toml."""
        pyproject = project_root / "pyproject.toml"
        assert pyproject.exists(), "pyproject.toml not found"

        content = pyproject.read_text()
        assert "[tool.ruff]" in content, "ruff configuration not found in pyproject.toml"

    def test_no_syntax_errors(self, project_root):
        """
        Verify that all Python files have valid syntax.

        This is a basic check that complements ruff linting.
        """
        python_files = []
        for directory in SOURCE_DIRS:
            dir_path = project_root / directory
            if dir_path.exists():
                python_files.extend(dir_path.rglob("*.py"))

        syntax_errors = []
        for py_file in python_files:
            try:
                compile(py_file.read_text(), str(py_file), "exec")
            except SyntaxError as e:
                syntax_errors.append(f"{py_file}: {e}")

        assert not syntax_errors, "\n".join(["Syntax errors:", *syntax_errors])

    def test_no_very_large_source_files(self, project_root):
        """Fail if runtime packages contain very large Python source files."""
        offenders: list[tuple[Path, int]] = []
        for directory in ("kubepair", "stress"):
            for py_file in sorted((project_root / directory).rglob("*.py")):
                if py_file.name == "__init__.py":
                    continue
                line_count = len(py_file.read_text(encoding="utf-8", errors="replace").splitlines())
                if line_count > self._MAX_SOURCE_LINES:
                    offenders.append((py_file.relative_to(project_root), line_count))

        if offenders:
            for path, count in offenders:
                logger.warning(
                    "code_quality.large_file",
                    event="code_quality.large_file",
                    path=str(path),
                    lines=count,
                    recovery="Split the module into smaller modules",
                )
            pytest.fail(f"Files over {self._MAX_SOURCE_LINES} lines: {offenders}")
