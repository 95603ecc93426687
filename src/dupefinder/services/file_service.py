"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

services/file_service.py
Filesystem side effects: removing duplicates and opening the audit log.
Removal is either permanent (os.remove) or to the system trash (send2trash).
"""
import os
import sys
import shlex
import subprocess
from pathlib import Path
from typing import Callable
from send2trash import send2trash


class FileService:
    """
    Cross-platform file operations.
    Every method raises on failure; callers decide whether the error is fatal.
    """

    @staticmethod
    def remove_file(file_path: str) -> None:
        """
        Permanently removes a file.
        A file that vanished since it was scanned raises FileNotFoundError.
        """
        os.remove(file_path)

    @staticmethod
    def move_to_trash(file_path: str) -> None:
        """Moves a file to the system trash."""
        path = Path(file_path).absolute()

        if not path.exists():
            raise FileNotFoundError(f"File not found: {path}")

        try:
            send2trash(str(path))
        except Exception as e:
            raise RuntimeError(f"Failed to move to trash: {e}") from e

    @staticmethod
    def get_remover(use_trash: bool) -> Callable[[str], None]:
        """Removal callable for the deletion policy engine."""
        return FileService.move_to_trash if use_trash else FileService.remove_file

    @staticmethod
    def open_file(file_path: str) -> None:
        """
        Opens a file for viewing: $EDITOR if set, otherwise the system default application.
        Blocks until a terminal editor exits.
        """
        path = Path(file_path).resolve()

        if not path.exists():
            raise FileNotFoundError(f"File not found: {path}")

        editor = os.environ.get("EDITOR")
        try:
            if editor:
                subprocess.run(shlex.split(editor) + [str(path)], check=False)
            elif sys.platform == 'win32':
                os.startfile(str(path))
            elif sys.platform == 'darwin':
                subprocess.Popen(['open', str(path)])
            else:
                subprocess.run(['xdg-open', str(path)], timeout=5, check=False)
        except (OSError, subprocess.SubprocessError) as e:
            raise RuntimeError(f"Failed to open file: {e}") from e
