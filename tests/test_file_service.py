"""
Tests for file service: removal backends and opening the audit log.
"""
import sys
import pytest
from unittest import mock
from dupefinder.services.file_service import FileService


class TestRemoveFile:

    def test_removes_file(self, tmp_path):
        f = tmp_path / "delete_me.txt"
        f.write_text("content")

        FileService.remove_file(str(f))

        assert not f.exists()

    def test_vanished_file_raises_file_not_found(self, tmp_path):
        """Files removed by someone else in the meantime surface as an error."""
        with pytest.raises(FileNotFoundError):
            FileService.remove_file(str(tmp_path / "gone.txt"))

    def test_preserves_other_files_in_directory(self, tmp_path):
        keep = tmp_path / "keep_me.txt"
        delete = tmp_path / "delete_me.txt"
        keep.write_text("keep")
        delete.write_text("delete")

        FileService.remove_file(str(delete))

        assert keep.exists()
        assert not delete.exists()


class TestMoveToTrash:

    def test_calls_send2trash_with_absolute_path(self, tmp_path):
        f = tmp_path / "photo.jpg"
        f.write_text("content")

        with mock.patch("dupefinder.services.file_service.send2trash") as mock_trash:
            FileService.move_to_trash(str(f))

        mock_trash.assert_called_once_with(str(f))

    def test_raises_for_nonexistent_file(self, tmp_path):
        with pytest.raises(FileNotFoundError, match="File not found"):
            FileService.move_to_trash(str(tmp_path / "does_not_exist.txt"))

    def test_send2trash_error_wrapped_as_runtime_error(self, tmp_path):
        f = tmp_path / "photo.jpg"
        f.write_text("content")

        with mock.patch("dupefinder.services.file_service.send2trash", side_effect=OSError("no trash")):
            with pytest.raises(RuntimeError, match="Failed to move to trash"):
                FileService.move_to_trash(str(f))


class TestGetRemover:

    def test_default_is_permanent_removal(self):
        assert FileService.get_remover(False) == FileService.remove_file

    def test_trash_backend(self):
        assert FileService.get_remover(True) == FileService.move_to_trash


class TestOpenFile:

    def test_uses_editor_env(self, tmp_path, monkeypatch):
        log = tmp_path / "log.txt"
        log.write_text("x")
        monkeypatch.setenv("EDITOR", "nano -v")

        with mock.patch("dupefinder.services.file_service.subprocess.run") as mock_run:
            FileService.open_file(str(log))

        args = mock_run.call_args.args[0]
        assert args == ["nano", "-v", str(log.resolve())]

    @pytest.mark.skipif(not sys.platform.startswith("linux"), reason="xdg-open fallback is Linux only")
    def test_falls_back_to_xdg_open(self, tmp_path, monkeypatch):
        log = tmp_path / "log.txt"
        log.write_text("x")
        monkeypatch.delenv("EDITOR", raising=False)

        with mock.patch("dupefinder.services.file_service.subprocess.run") as mock_run:
            FileService.open_file(str(log))

        assert mock_run.call_args.args[0][0] == "xdg-open"

    def test_missing_file_raises(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            FileService.open_file(str(tmp_path / "nope.txt"))

    def test_missing_editor_binary_raises_runtime_error(self, tmp_path, monkeypatch):
        log = tmp_path / "log.txt"
        log.write_text("x")
        monkeypatch.setenv("EDITOR", "definitely-not-an-editor-binary")

        with pytest.raises(RuntimeError, match="Failed to open file"):
            FileService.open_file(str(log))
