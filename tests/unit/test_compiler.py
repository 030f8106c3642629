"""Tests for the lessc compiler adapter."""

from __future__ import annotations

import os
import subprocess
from pathlib import Path
from unittest.mock import patch

import pytest


def _completed(returncode: int = 0, stdout: str = "", stderr: str = ""):
    return subprocess.CompletedProcess(args=[], returncode=returncode, stdout=stdout, stderr=stderr)


class TestGetLesscBinary:
    def test_explicit_path_wins(self, monkeypatch: pytest.MonkeyPatch) -> None:
        from lesstheme.core.compiler import get_lessc_binary

        monkeypatch.setenv("LESSTHEME_LESSC", "/env/lessc")
        assert get_lessc_binary("/opt/lessc") == Path("/opt/lessc")

    def test_environment_variable(self, monkeypatch: pytest.MonkeyPatch) -> None:
        from lesstheme.core.compiler import get_lessc_binary

        monkeypatch.setenv("LESSTHEME_LESSC", "/env/lessc")
        assert get_lessc_binary() == Path("/env/lessc")

    def test_system_binary_on_path(self, monkeypatch: pytest.MonkeyPatch) -> None:
        from lesstheme.core.compiler import get_lessc_binary

        monkeypatch.delenv("LESSTHEME_LESSC", raising=False)
        with patch("lesstheme.core.compiler.shutil.which", return_value="/usr/local/bin/lessc"):
            assert get_lessc_binary() == Path("/usr/local/bin/lessc")

    def test_local_node_modules(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        from lesstheme.core.compiler import get_lessc_binary

        local = tmp_path / "node_modules" / ".bin" / "lessc"
        local.parent.mkdir(parents=True)
        local.write_text("#!/bin/sh\n")
        monkeypatch.delenv("LESSTHEME_LESSC", raising=False)
        monkeypatch.chdir(tmp_path)
        with patch("lesstheme.core.compiler.shutil.which", return_value=None):
            assert get_lessc_binary() == local

    def test_not_installed(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        from lesstheme.core.compiler import get_lessc_binary

        monkeypatch.delenv("LESSTHEME_LESSC", raising=False)
        monkeypatch.chdir(tmp_path)
        with patch("lesstheme.core.compiler.shutil.which", return_value=None):
            assert get_lessc_binary() is None


class TestLessCompiler:
    def test_command(self) -> None:
        from lesstheme.core.compiler import LessCompiler

        compiler = LessCompiler("/usr/bin/lessc", plugins=["npm-import=prefix=~"])
        cmd = compiler.command([Path("/lib/style"), Path("/styles")])
        assert cmd == [
            "/usr/bin/lessc",
            "--js",
            "--include-path=" + os.pathsep.join(["/lib/style", "/styles"]),
            "--npm-import=prefix=~",
            "-",
        ]

    def test_command_without_binary(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        from lesstheme.core.compiler import LessCompiler
        from lesstheme.core.errors import CompileError

        monkeypatch.delenv("LESSTHEME_LESSC", raising=False)
        monkeypatch.chdir(tmp_path)
        with patch("lesstheme.core.compiler.shutil.which", return_value=None):
            with pytest.raises(CompileError, match="lessc not found"):
                LessCompiler().command([])

    def test_render_passes_source_on_stdin(self) -> None:
        from lesstheme.core.compiler import LessCompiler

        with patch("lesstheme.core.compiler.subprocess.run") as mock_run:
            mock_run.return_value = _completed(stdout=".a {\n  color: red;\n}\n")
            css = LessCompiler("/usr/bin/lessc", timeout=5).render(
                "@c: red;\n.a { color: @c; }", [Path("/lib")]
            )

        assert css == ".a {\n  color: red;\n}\n"
        args, kwargs = mock_run.call_args
        assert args[0] == ["/usr/bin/lessc", "--js", "--include-path=/lib", "-"]
        assert kwargs["input"] == "@c: red;\n.a { color: @c; }"
        assert kwargs["timeout"] == 5
        assert kwargs["text"] is True

    def test_filename_directory_searched_first(self) -> None:
        from lesstheme.core.compiler import LessCompiler

        with patch("lesstheme.core.compiler.subprocess.run") as mock_run:
            mock_run.return_value = _completed()
            LessCompiler("lessc").render("", [Path("/lib")], filename=Path("/app/styles/a.less"))

        cmd = mock_run.call_args.args[0]
        assert cmd[2] == "--include-path=" + os.pathsep.join(["/app/styles", "/lib"])

    def test_nonzero_exit_raises(self) -> None:
        from lesstheme.core.compiler import LessCompiler
        from lesstheme.core.errors import CompileError

        stderr = "NameError: variable @missing is undefined in - on line 1"
        with patch("lesstheme.core.compiler.subprocess.run") as mock_run:
            mock_run.return_value = _completed(returncode=1, stderr=stderr)
            with pytest.raises(CompileError) as exc_info:
                LessCompiler("lessc").render(".a { color: @missing; }", [])

        assert exc_info.value.stderr == stderr
        assert "@missing is undefined" in exc_info.value.message

    def test_timeout_raises(self) -> None:
        from lesstheme.core.compiler import LessCompiler
        from lesstheme.core.errors import CompileError

        with patch("lesstheme.core.compiler.subprocess.run") as mock_run:
            mock_run.side_effect = subprocess.TimeoutExpired(cmd="lessc", timeout=1)
            with pytest.raises(CompileError, match="timed out"):
                LessCompiler("lessc", timeout=1).render("", [])

    def test_missing_executable_raises(self) -> None:
        from lesstheme.core.compiler import LessCompiler
        from lesstheme.core.errors import CompileError

        with patch("lesstheme.core.compiler.subprocess.run") as mock_run:
            mock_run.side_effect = FileNotFoundError("lessc")
            with pytest.raises(CompileError, match="not found"):
                LessCompiler("/nope/lessc").render("", [])


class TestRenderLessContent:
    def test_uses_given_compiler(self, fake_compiler) -> None:
        from lesstheme.core.compiler import render_less_content

        css = render_less_content("@c: #fff;\n.a { color: @c; }\n", [], fake_compiler)
        assert css == ".a {\n  color: #fff;\n}\n"
        assert len(fake_compiler.sources) == 1
