"""
Critical CLI tests: focus on data safety, dry-run default and argument handling.
These tests prevent catastrophic bugs that could cause data loss.
"""
import signal
import sys
from pathlib import Path
from unittest import mock
import pytest
from dupefinder.cli import CLIApplication, main
from dupefinder.commands import DuplicateCleanupCommand
from dupefinder.core.models import DigestAlgorithm, PolicyMode
from dupefinder.services.file_service import FileService


def run_cli(argv, interactive=False):
    with mock.patch.object(sys, 'argv', ['dupefinder'] + [str(a) for a in argv]):
        with mock.patch.object(CLIApplication, 'is_interactive', return_value=interactive):
            app = CLIApplication()
            app.run()
    return app


class TestArgumentParsing:

    def test_defaults(self):
        args = CLIApplication.parse_args(["/a"])

        assert args.directories == ["/a"]
        assert args.algorithm == "sha256"
        assert args.execute is False
        assert args.manual is False
        assert args.delete_from is None
        assert args.jobs == 1

    @pytest.mark.parametrize("flag, expected", [
        (["-md5"], "md5"),
        (["-sha256"], "sha256"),
        (["--algorithm", "xxh64"], "xxh64"),
        (["-a", "md5"], "md5"),
    ])
    def test_algorithm_flags(self, flag, expected):
        args = CLIApplication.parse_args(flag + ["/a"])

        assert args.algorithm == expected

    def test_unknown_algorithm_rejected(self):
        with pytest.raises(SystemExit):
            CLIApplication.parse_args(["--algorithm", "crc32", "/a"])

    def test_create_params(self, two_roots):
        app = CLIApplication()
        args = app.parse_args([str(two_roots["a"]), str(two_roots["b"]), "-d", "2",
                               "--manual", "--execute", "--trash", "-j", "3", "-md5"])

        params = app.create_params(args, [2])

        assert params.algorithm == DigestAlgorithm.MD5
        assert params.mode == PolicyMode.MANUAL
        assert params.dry_run is False
        assert params.use_trash is True
        assert params.jobs == 3
        assert params.deletion_roots == [str(two_roots["b"].resolve())]


class TestValidation:

    def test_force_requires_execute(self, two_roots):
        with pytest.raises(SystemExit) as exc_info:
            run_cli([two_roots["a"], "-d", "1", "--force"])
        assert exc_info.value.code == 1

    def test_no_existing_directory_is_configuration_error(self, tmp_path):
        with pytest.raises(SystemExit) as exc_info:
            run_cli([tmp_path / "missing", "-d", "1"])
        assert exc_info.value.code == 1

    def test_manual_needs_terminal(self, two_roots):
        with pytest.raises(SystemExit):
            run_cli([two_roots["a"], "-d", "1", "--manual"])

    def test_missing_delete_from_needs_terminal(self, two_roots):
        with pytest.raises(SystemExit):
            run_cli([two_roots["a"]])

    def test_execute_without_force_needs_terminal(self, two_roots):
        with pytest.raises(SystemExit):
            run_cli([two_roots["a"], "-d", "1", "--execute"])


class TestDeletionSafety:

    def test_dry_run_is_default_and_deletes_nothing(self, two_roots, tmp_path):
        log = tmp_path / "run.log"
        with mock.patch.object(FileService, 'remove_file') as mock_remove:
            run_cli([two_roots["a"], two_roots["b"], "-d", "1,2", "--log", log])

        mock_remove.assert_not_called()
        assert two_roots["x"].exists() and two_roots["y"].exists()
        content = log.read_text(encoding="utf-8")
        assert f"DRY run: Would delete {two_roots['y']}" in content
        assert f"Kept {two_roots['x']}" in content

    def test_execute_force_deletes_only_in_scope_copy(self, two_roots, tmp_path):
        log = tmp_path / "run.log"
        run_cli([two_roots["a"], two_roots["b"], "-d", "2", "--execute", "--force", "--log", log])

        assert two_roots["x"].exists()
        assert not two_roots["y"].exists()
        assert f"Deleted {two_roots['y']}" in log.read_text(encoding="utf-8")

    def test_trash_flag_routes_through_send2trash(self, two_roots, tmp_path):
        with mock.patch.object(FileService, 'move_to_trash') as mock_trash, \
                mock.patch.object(FileService, 'remove_file') as mock_remove:
            run_cli([two_roots["a"], two_roots["b"], "-d", "2", "--execute", "--force",
                     "--trash", "--log", tmp_path / "run.log"])

        mock_trash.assert_called_once_with(str(two_roots["y"]))
        mock_remove.assert_not_called()

    def test_confirmation_declined_aborts(self, two_roots, tmp_path, capsys):
        with mock.patch('builtins.input', return_value="n"):
            run_cli([two_roots["a"], two_roots["b"], "-d", "2", "--execute",
                     "--log", tmp_path / "run.log"], interactive=True)

        assert two_roots["y"].exists()
        assert "Aborted." in capsys.readouterr().out
        assert not (tmp_path / "run.log").exists()

    def test_interactive_directory_selection_and_manual_keep(self, two_roots, tmp_path):
        """Prompts: deletion dirs '1,2', sure 'y', keep file 2 of the group."""
        answers = iter(["1,2", "y", "2"])
        with mock.patch('builtins.input', side_effect=lambda *a: next(answers)):
            run_cli([two_roots["a"], two_roots["b"], "--execute", "--manual",
                     "--log", tmp_path / "run.log"], interactive=True)

        assert not two_roots["x"].exists()
        assert two_roots["y"].exists()

    def test_manual_invalid_answer_skips_group(self, two_roots, tmp_path):
        answers = iter(["y", "abc"])
        with mock.patch('builtins.input', side_effect=lambda *a: next(answers)):
            run_cli([two_roots["a"], two_roots["b"], "-d", "1,2", "--execute", "--manual",
                     "--log", tmp_path / "run.log"], interactive=True)

        assert two_roots["x"].exists() and two_roots["y"].exists()
        assert f"Skipped {two_roots['x']}" in (tmp_path / "run.log").read_text(encoding="utf-8")


class TestOutput:

    def test_summary_points_to_log(self, two_roots, tmp_path, capsys):
        log = tmp_path / "run.log"
        run_cli([two_roots["a"], two_roots["b"], "-d", "2", "--log", log])

        out = capsys.readouterr().out
        assert "Used Algo: SHA-256" in out
        assert "0 Dup Files processed." in out
        assert f"Check {log} for details." in out

    def test_quiet_prints_nothing(self, two_roots, tmp_path, capsys):
        run_cli([two_roots["a"], two_roots["b"], "-d", "2", "-q", "--log", tmp_path / "run.log"])

        assert capsys.readouterr().out == ""

    def test_log_header_lists_scan_roots(self, two_roots, tmp_path):
        log = tmp_path / "run.log"
        run_cli([two_roots["a"], two_roots["b"], "-d", "2", "-md5", "--log", log])

        lines = log.read_text(encoding="utf-8").splitlines()
        assert "Using algorithm: MD5" in lines
        assert f"- {two_roots['a']}" in lines
        assert f"- {two_roots['b']}" in lines

    def test_open_log_uses_file_service(self, two_roots, tmp_path):
        log = tmp_path / "run.log"
        with mock.patch.object(FileService, 'open_file') as mock_open:
            run_cli([two_roots["a"], "-d", "1", "--open-log", "--log", log])

        mock_open.assert_called_once_with(str(log))

    def test_verbose_progress_on_stderr(self, two_roots, tmp_path, capsys):
        run_cli([two_roots["a"], two_roots["b"], "-d", "2", "-v", "--log", tmp_path / "run.log"])

        captured = capsys.readouterr()
        assert "Calculating SHA-256 hashes: 3/3 (100%)" in captured.err
        assert "Run Statistics" in captured.out


class TestMain:

    def test_keyboard_interrupt_exits_130(self):
        with mock.patch.object(CLIApplication, 'run', side_effect=KeyboardInterrupt):
            with pytest.raises(SystemExit) as exc_info:
                main()
        assert exc_info.value.code == 130

    def test_unexpected_error_exits_1(self, monkeypatch):
        monkeypatch.delenv("DEBUG", raising=False)
        with mock.patch.object(CLIApplication, 'run', side_effect=ValueError("boom")):
            with pytest.raises(SystemExit) as exc_info:
                main()
        assert exc_info.value.code == 1


class TestInterrupt:

    def test_first_ctrl_c_requests_stop_second_aborts(self):
        app = CLIApplication()

        app.handle_interrupt(signal.SIGINT, None)

        assert app.stopped_flag() is True
        with pytest.raises(KeyboardInterrupt):
            app.handle_interrupt(signal.SIGINT, None)

    def test_ctrl_c_during_run_stops_without_deleting(self, two_roots, tmp_path):
        """The installed handler feeds the command's stop flag; nothing is deleted."""
        original_handler = signal.getsignal(signal.SIGINT)
        real_execute = DuplicateCleanupCommand.execute

        def interrupted_execute(self, params, sink, **kwargs):
            signal.getsignal(signal.SIGINT)(signal.SIGINT, None)
            return real_execute(self, params, sink, **kwargs)

        log = tmp_path / "run.log"
        with mock.patch.object(DuplicateCleanupCommand, 'execute', interrupted_execute):
            with pytest.raises(SystemExit) as exc_info:
                run_cli([two_roots["a"], two_roots["b"], "-d", "1,2", "--execute", "--force",
                         "--log", log])

        assert exc_info.value.code == 130
        assert two_roots["x"].exists() and two_roots["y"].exists()
        assert "Deleted" not in log.read_text(encoding="utf-8")
        assert signal.getsignal(signal.SIGINT) is original_handler
