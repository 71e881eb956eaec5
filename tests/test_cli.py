"""
End-to-end tests for the command line front-end (qmaur/cli.py).
"""

import http.client
import subprocess
from unittest.mock import patch

import pytest

from conftest import rpc_body, rpc_entry, urlopen_returning
from qmaur.cli import build_parser, main


def pacman(stdout=b"", returncode=0, stderr=b""):
    return patch(
        "qmaur.inventory.subprocess.run",
        return_value=subprocess.CompletedProcess(
            args=["pacman", "-Qm"], returncode=returncode, stdout=stdout, stderr=stderr,
        ),
    )


def aur(*bodies):
    return patch("qmaur.aurweb.urllib.request.urlopen", urlopen_returning(*bodies))


class TestParser:
    """Tests for argument parsing."""

    def test_no_subcommand(self):
        args = build_parser().parse_args([])
        assert args.command is None
        assert args.verbose == 0 and args.quiet == 0

    def test_verbose_counted(self):
        assert build_parser().parse_args(["-vvv"]).verbose == 3

    def test_quiet_counted(self):
        assert build_parser().parse_args(["-qq", "checkupdates"]).quiet == 2

    def test_verbose_and_quiet_exclusive(self):
        with pytest.raises(SystemExit) as exc_info:
            build_parser().parse_args(["-v", "-q"])
        assert exc_info.value.code == 2

    def test_flags_after_subcommand(self):
        """Test -v/-q are accepted after the subcommand."""
        args = build_parser().parse_args(["search", "yay", "-vv"])
        assert args.verbose == 2 and args.quiet == 0
        args = build_parser().parse_args(["checkupdates", "-q"])
        assert args.quiet == 1 and args.verbose == 0

    def test_flags_before_subcommand_kept(self):
        """Test a flag given before the subcommand survives subcommand parsing."""
        args = build_parser().parse_args(["-v", "info", "yay"])
        assert args.verbose == 1 and args.quiet == 0

    def test_exclusive_after_subcommand(self):
        with pytest.raises(SystemExit) as exc_info:
            build_parser().parse_args(["info", "yay", "-v", "-q"])
        assert exc_info.value.code == 2

    def test_search_requires_query(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["search"])


class TestCheckUpdates:
    """Tests for the checkupdates command."""

    def test_reports_only_differences(self, capsys):
        """Test {a:1, b:2} vs AUR {a:2, b:2} prints exactly 'a 1 -> 2'."""
        with pacman(b"a 1\nb 2\n"), aur(rpc_body([rpc_entry("a", "2"), rpc_entry("b", "2")])):
            code = main(["--color", "never", "checkupdates"])

        assert code == 0
        assert capsys.readouterr().out.splitlines() == ["a 1 -> 2"]

    def test_default_command(self, capsys):
        """Test running without a subcommand performs checkupdates."""
        with pacman(b"a 1\n"), aur(rpc_body([rpc_entry("a", "2")])):
            code = main(["--color", "never"])
        assert code == 0
        assert capsys.readouterr().out == "a 1 -> 2\n"

    def test_not_found_notice_once(self, capsys):
        """Test a package absent from the AUR yields one notice."""
        with pacman(b"a 1\nlocal-only 3\n"), aur(rpc_body([rpc_entry("a", "1")])):
            code = main(["--color", "never", "checkupdates"])

        out = capsys.readouterr().out.splitlines()
        assert code == 0
        assert out == ["--package local-only was not found in AUR"]

    def test_malformed_line_skipped(self, capsys):
        """Test a short inventory line warns but the run continues."""
        with pacman(b"orphanline\na 1\n"), aur(rpc_body([rpc_entry("a", "2")])):
            code = main(["--color", "never", "checkupdates"])

        captured = capsys.readouterr()
        assert code == 0
        assert captured.out.splitlines() == ["a 1 -> 2"]
        assert "orphanline" in captured.err

    def test_pacman_failure_exits_1(self, capsys):
        """Test a failing pacman exits 1 with no comparison output."""
        with pacman(b"", returncode=1, stderr=b"error: could not open database"), \
                patch("qmaur.aurweb.urllib.request.urlopen") as urlopen:
            code = main(["checkupdates"])

        captured = capsys.readouterr()
        assert code == 1
        assert captured.out == ""
        assert "could not open database" in captured.err
        urlopen.assert_not_called()

    def test_pacman_non_utf8_exits_1(self, capsys):
        with pacman(b"a \xff\n"):
            assert main(["checkupdates"]) == 1
        assert capsys.readouterr().out == ""

    def test_aur_error_exits_1(self, capsys):
        """Test an RPC error is fatal."""
        with pacman(b"a 1\n"), aur(rpc_body(type_="error", error="Too many package results.")):
            code = main(["checkupdates"])
        captured = capsys.readouterr()
        assert code == 1
        assert captured.out == ""
        assert "Too many package results." in captured.err

    def test_no_foreign_packages(self, capsys):
        """Test an empty inventory skips the AUR entirely."""
        with pacman(b""), patch("qmaur.aurweb.urllib.request.urlopen") as urlopen:
            assert main(["checkupdates"]) == 0
        urlopen.assert_not_called()
        assert capsys.readouterr().out == ""

    def test_ignore_from_config(self, tmp_path, capsys):
        """Test ignored packages are not looked up or reported."""
        cfg = tmp_path / "c.yml"
        cfg.write_text("ignore: [b]\ncolor: never\n")
        mock = urlopen_returning(rpc_body([rpc_entry("a", "2")]))
        with pacman(b"a 1\nb 1\n"), patch("qmaur.aurweb.urllib.request.urlopen", mock):
            code = main(["--config", str(cfg), "checkupdates"])

        assert code == 0
        assert capsys.readouterr().out.splitlines() == ["a 1 -> 2"]
        assert "arg%5B%5D=b" not in mock.call_args.args[0].full_url

    def test_bad_config_exits_1(self, tmp_path, capsys):
        cfg = tmp_path / "c.yml"
        cfg.write_text("timeout_seconds: 0\n")
        assert main(["--config", str(cfg)]) == 1
        assert "Invalid timeout_seconds" in capsys.readouterr().err

    def test_quiet_suppresses_warnings(self, capsys):
        """Test -q hides the malformed-line warning."""
        with pacman(b"junk\na 1\n"), aur(rpc_body([rpc_entry("a", "1")])):
            assert main(["-q", "checkupdates"]) == 0
        assert capsys.readouterr().err == ""

    def test_double_quiet_hides_errors(self, capsys):
        """Test -qq silences even fatal errors, exit code still 1."""
        with pacman(b"", returncode=1, stderr=b"boom"):
            assert main(["-qq", "checkupdates"]) == 1
        assert capsys.readouterr().err == ""


class TestSearch:
    """Tests for the search command."""

    def test_search_prints_results(self, capsys):
        body = rpc_body([rpc_entry("yay-bin", "12-1"), rpc_entry("yay", "12-1")], type_="search")
        with aur(body):
            code = main(["--color", "never", "search", "yay"])
        out = capsys.readouterr().out.splitlines()
        assert code == 0
        assert out[0].startswith("aur/yay 12-1")
        assert out[2].startswith("aur/yay-bin 12-1")

    def test_search_no_results(self, capsys):
        with aur(rpc_body([], type_="search")):
            assert main(["search", "nothing-matches"]) == 0
        assert capsys.readouterr().out == ""

    def test_search_error_exits_1(self, capsys):
        with aur(rpc_body(type_="error", error="Query arg too small.")):
            assert main(["search", "a"]) == 1
        assert "Query arg too small." in capsys.readouterr().err


class TestInfo:
    """Tests for the info command."""

    def test_info_prints_details(self, capsys):
        with aur(rpc_body([rpc_entry("yay", "12.3.5-1")])):
            code = main(["--color", "never", "info", "yay"])
        out = capsys.readouterr().out
        assert code == 0
        assert "Name" in out and "yay" in out
        assert "12.3.5-1" in out

    def test_info_unknown_name_warns(self, capsys):
        """Test an unknown name is a warning, not a failure."""
        with aur(rpc_body([rpc_entry("yay", "1")])):
            code = main(["--color", "never", "info", "yay", "nosuchpkg"])
        captured = capsys.readouterr()
        assert code == 0
        assert "package nosuchpkg was not found in AUR" in captured.err
        assert "yay" in captured.out

    def test_truncated_response_exits_1(self, capsys):
        """Test an http.client protocol error is a logged fatal error."""
        with patch("qmaur.aurweb.urllib.request.urlopen",
                   side_effect=http.client.IncompleteRead(b"{")):
            assert main(["info", "yay"]) == 1
        assert "failed to fetch" in capsys.readouterr().err

    def test_verbose_after_subcommand(self, capsys):
        """Test -v after the subcommand raises the log level."""
        with aur(rpc_body([], type_="search")):
            assert main(["search", "nothing", "-v"]) == 0
        assert "no packages match" in capsys.readouterr().err


class TestCompletions:
    """Tests for the generate-bash-completions command."""

    def test_prints_script(self, capsys):
        assert main(["generate-bash-completions"]) == 0
        out = capsys.readouterr().out
        assert "complete -F _qmaur" in out
        assert "checkupdates" in out
