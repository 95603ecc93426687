#!/usr/bin/env python3
"""
dupefinder CLI: Command line interface for duplicate file detection and removal.
Gathers the run configuration (from arguments or prompts), runs the cleanup
command and reports where the audit log was written.
Dry run is the default: nothing is deleted without --execute.
"""
from __future__ import annotations  # Enable postponed evaluation of annotations (PEP 563)
import argparse
import signal
import sys
import os
import time
from pathlib import Path
from typing import List, Optional, NoReturn
import logging

logging.basicConfig(
    level=logging.ERROR,
    format="%(levelname)-8s | %(name)-25s | %(message)s"
)

# === EARLY DEPENDENCY VALIDATION ===
_MISSING_DEPS = []
try:
    from send2trash import send2trash
except ImportError:
    _MISSING_DEPS.append("send2trash")

try:
    import xxhash
except ImportError:
    _MISSING_DEPS.append("xxhash")

if _MISSING_DEPS:
    print("❌ Missing required dependencies:", file=sys.stderr)
    print(f"   pip install {' '.join(_MISSING_DEPS)}", file=sys.stderr)
    sys.exit(1)

# === NORMAL IMPORTS (after validation) ===
from dupefinder.core.models import (
    RunParams, RunStats, PolicyMode, Action, DuplicateGroup, FileRecord, ConfigurationError,
)
from dupefinder.commands import DuplicateCleanupCommand, STAGE_HASHING
from dupefinder.services.audit_log import AuditLog
from dupefinder.services.file_service import FileService
from dupefinder.utils.convert_utils import ConvertUtils
from dupefinder.aliases import (
    ALGORITHM_ALIASES, ALGORITHM_CHOICES, ALGORITHM_HELP_TEXT,
    DELETE_FROM_HELP_TEXT, EPILOG_TEXT,
)


class CLIApplication:
    """Main CLI application controller."""

    def __init__(self):
        self.start_time: float = time.time()
        self.verbose: bool = False
        self.quiet: bool = False
        self.algorithm_name: str = ""
        self.stop_requested: bool = False

        # Fix encoding for Windows consoles to prevent UnicodeEncodeError
        for stream in (sys.stdout, sys.stderr):
            if hasattr(stream, "reconfigure"):
                stream.reconfigure(encoding='utf-8')

    @staticmethod
    def parse_args(args=None) -> argparse.Namespace:
        """Parse command-line arguments."""
        parser = argparse.ArgumentParser(
            prog="dupefinder",
            description="dupefinder: find duplicate files and delete them from selected directories",
            formatter_class=argparse.RawTextHelpFormatter,
            epilog=EPILOG_TEXT
        )

        parser.add_argument(
            "directories",
            nargs="+",
            type=str,
            help="Directories to scan for duplicates"
        )

        # Hashing options
        parser.add_argument(
            "--algorithm", "-a",
            choices=ALGORITHM_CHOICES,
            default="sha256",
            type=str,
            help=ALGORITHM_HELP_TEXT
        )
        parser.add_argument(
            "-md5",
            dest="algorithm",
            action="store_const",
            const="md5",
            help="Same as --algorithm md5"
        )
        parser.add_argument(
            "-sha256",
            dest="algorithm",
            action="store_const",
            const="sha256",
            help="Same as --algorithm sha256"
        )
        parser.add_argument(
            "--jobs", "-j",
            default=1,
            type=int,
            metavar='',
            help="Number of files hashed in parallel. Default: 1"
        )

        # Deletion options
        parser.add_argument(
            "--delete-from", "-d",
            default=None,
            type=str,
            metavar='',
            dest="delete_from",
            help=DELETE_FROM_HELP_TEXT
        )
        parser.add_argument(
            "--execute",
            action="store_true",
            help="Really delete files. Without it the run is a dry run that only logs intended actions."
        )
        parser.add_argument(
            "--manual",
            action="store_true",
            help="Choose the file to keep for every duplicate group (interactive).\n"
                 "Default is automatic: copies outside the deletion directories are kept,\n"
                 "otherwise the first file found is kept."
        )
        parser.add_argument(
            "--trash",
            action="store_true",
            help="Move deleted files to the system trash instead of removing them"
        )
        parser.add_argument(
            "--force",
            action="store_true",
            help="Skip confirmation prompt when used with --execute (for automation/scripts)"
        )

        # Output options
        parser.add_argument(
            "--log",
            default=None,
            type=str,
            metavar='',
            help="Audit log file (appended). Default: log_<YYYYMMDDHHMMSS>.txt"
        )
        parser.add_argument(
            "--open-log",
            action="store_true",
            dest="open_log",
            help="Open the audit log when done ($EDITOR or default application)"
        )
        parser.add_argument(
            "--quiet", "-q",
            action="store_true",
            help="Suppress non-essential output"
        )
        parser.add_argument(
            "--verbose", "-v",
            action="store_true",
            help="Show progress and detailed statistics"
        )

        return parser.parse_args(args)

    @staticmethod
    def is_interactive() -> bool:
        return sys.stdin.isatty() and sys.stdout.isatty()

    def validate_args(self, args: argparse.Namespace) -> None:
        """Validate command-line arguments before execution."""
        if args.force and not args.execute:
            self.error_exit("--force can only be used with --execute")

        if args.jobs < 1:
            self.error_exit("--jobs must be at least 1")

        # Prevent interactive prompts in non-TTY environments
        if not self.is_interactive():
            if args.manual:
                self.error_exit("Manual mode needs an interactive terminal.")
            if args.delete_from is None:
                self.error_exit(
                    "Cannot ask for deletion directories in non-interactive session.\n"
                    "Use --delete-from to select them."
                )
            if args.execute and not args.force:
                self.error_exit(
                    "Cannot request interactive confirmation in non-interactive session.\n"
                    "Use --force flag to proceed without confirmation when piping output or running in scripts."
                )

        found = 0
        for directory in args.directories:
            path = Path(directory)
            if not path.exists():
                self.warning(f"Directory not found: {directory}")
            elif not path.is_dir():
                self.warning(f"Path is not a directory: {directory}")
            else:
                found += 1
        if not found:
            self.error_exit("None of the specified directories exist.")

        if args.algorithm not in ALGORITHM_ALIASES:
            self.error_exit(
                f"Invalid hash algorithm: '{args.algorithm}'.\n"
                f"Valid options: {', '.join(ALGORITHM_CHOICES)}"
            )

    def select_deletion_dirs(self, directories: List[str]) -> List[int]:
        """Ask which of the scan roots duplicates may be deleted from."""
        print("Choose directories to delete duplicates from (comma separated, e.g. 1,3,4):")
        for idx, directory in enumerate(directories, 1):
            print(f"{idx}) {directory}")
        try:
            selection = input()
        except EOFError:
            selection = ""
        return RunParams.parse_indices(selection)

    def create_params(self, args: argparse.Namespace, delete_indices: List[int]) -> RunParams:
        """Create RunParams from CLI arguments."""
        for index in delete_indices:
            if not 1 <= index <= len(args.directories):
                self.warning(f"Ignoring invalid directory number: {index}")

        try:
            return RunParams(
                scan_roots=list(args.directories),
                delete_indices=delete_indices,
                algorithm=ALGORITHM_ALIASES[args.algorithm],
                mode=PolicyMode.MANUAL if args.manual else PolicyMode.AUTOMATIC,
                dry_run=not args.execute,
                use_trash=args.trash,
                jobs=args.jobs,
                log_path=args.log,
            )
        except ConfigurationError as e:
            self.error_exit(f"Configuration error: {e}")

    def confirm_deletion(self, params: RunParams) -> bool:
        """Last chance to back out of a real deletion run."""
        where = "trash" if params.use_trash else "permanently delete"
        response = input(f"You are about to {where} the files. Are you sure? [y/N]: ")
        return response.strip().lower() in ("y", "yes")

    def ask_keep_index(self, group: DuplicateGroup, candidates: List[FileRecord]) -> Optional[int]:
        """Manual mode: ask which in-scope file to keep. Returns None on invalid input."""
        print(f"\nFound duplicates with hash {group.digest} in selected directories:")
        for idx, record in enumerate(candidates, 1):
            print(f"{idx}) {record.path}")
        try:
            answer = input("Please select the file number to KEEP (others will be deleted), or 0 to skip deletion: ")
        except EOFError:
            return None
        try:
            return int(answer.strip())
        except ValueError:
            self.warning(f"Invalid input: {answer}")
            return None

    def progress_callback(self, stage: str, current: int, total: Optional[int]) -> None:
        """CLI progress callback - shows progress with elapsed and estimated time."""
        if not self.verbose:
            return

        label = f"Calculating {self.algorithm_name} hashes" if stage == STAGE_HASHING else "Processing groups"
        if total and total > 0:
            percent = (current * 100) // total
            elapsed = time.time() - self.start_time
            estimated = ConvertUtils.estimate_total(elapsed, current, total)
            sys.stderr.write(
                f"\r{label}: {current}/{total} ({percent}%) "
                f"Elapsed: {ConvertUtils.format_duration(int(elapsed))} "
                f"Estimated Total: {ConvertUtils.format_duration(int(estimated))}"
            )
        else:
            sys.stderr.write(f"\r{label}: {current} files processed...")
        sys.stderr.flush()

    def stopped_flag(self) -> bool:
        """True once the user pressed Ctrl+C during the run."""
        return self.stop_requested

    def handle_interrupt(self, signum, frame) -> None:
        """First Ctrl+C stops the run at the next file or group; a second one aborts."""
        if self.stop_requested:
            raise KeyboardInterrupt
        self.stop_requested = True
        sys.stderr.write("\n⚠️  Stopping after the current file (Ctrl+C again to abort)...\n")
        sys.stderr.flush()

    def run_cleanup(self, params: RunParams, audit: AuditLog) -> RunStats:
        """Execute the cleanup workflow, writing every decision to the audit log."""
        command = DuplicateCleanupCommand()
        previous_handler = signal.signal(signal.SIGINT, self.handle_interrupt)
        try:
            _, stats = command.execute(
                params,
                sink=audit,
                confirmation=self.ask_keep_index if params.mode == PolicyMode.MANUAL else None,
                progress_callback=self.progress_callback if self.verbose else None,
                stopped_flag=self.stopped_flag,
            )
        except ConfigurationError as e:
            self.error_exit(f"Configuration error: {e}")
        finally:
            signal.signal(signal.SIGINT, previous_handler)

        if self.verbose:
            sys.stderr.write("\n")
        return stats

    def output_results(self, stats: RunStats, params: RunParams, log_path: str) -> None:
        if self.quiet:
            return

        if stats.digest_failures:
            self.warning(f"{stats.digest_failures} file(s) could not be hashed, see log")
        if stats.actions[Action.FAILED]:
            self.warning(f"Failed to delete {stats.actions[Action.FAILED]} file(s), see log")

        if params.dry_run:
            print(f"DRY run: {stats.actions[Action.DRY_RUN]} file(s) would be deleted.")
        print(f"{stats.processed} Dup Files processed.")
        print(f"Done. Check {log_path} for details.")

        if self.verbose:
            print()
            print(stats.print_summary())

    def warning(self, message: str) -> None:
        """Print a warning message to stderr."""
        if not self.quiet:
            print(f"⚠️  {message}", file=sys.stderr)

    @staticmethod
    def error_exit(message: str, code: int = 1) -> NoReturn:
        """Print error and exit."""
        print(f"❌ Error: {message}", file=sys.stderr)
        sys.exit(code)

    def run(self, argv=None) -> None:
        """Main entry point."""
        args = self.parse_args(argv)
        self.verbose = args.verbose
        self.quiet = args.quiet
        if self.verbose:
            logging.getLogger("dupefinder").setLevel(logging.INFO)

        self.validate_args(args)

        if args.delete_from is None:
            delete_indices = self.select_deletion_dirs(args.directories)
        else:
            delete_indices = RunParams.parse_indices(args.delete_from)

        params = self.create_params(args, delete_indices)
        self.algorithm_name = params.algorithm.display_name

        if not params.deletion_roots:
            self.warning("No deletion directories selected, every duplicate will be skipped.")

        if not params.dry_run and not args.force:
            if not self.confirm_deletion(params):
                print("Aborted.")
                return

        if not self.quiet:
            print(f"Used Algo: {self.algorithm_name}")

        with AuditLog(params.log_path) as audit:
            audit.write_header(params.algorithm, params.reachable_roots)
            stats = self.run_cleanup(params, audit)

        self.output_results(stats, params, audit.path)

        if args.open_log:
            try:
                FileService.open_file(audit.path)
            except (RuntimeError, FileNotFoundError) as e:
                self.warning(str(e))

        if self.stop_requested:
            self.warning("Run stopped by user; remaining duplicates were not processed.")
            sys.exit(130)

        if self.verbose:
            print(f"\n✅ Completed in {time.time() - self.start_time:.2f} seconds")


def main() -> None:
    """Application entry point."""
    app = CLIApplication()
    try:
        app.run()
    except KeyboardInterrupt:
        print("\n⚠️  Operation cancelled by user (Ctrl+C)")
        sys.exit(130)
    except Exception as e:
        if os.environ.get("DEBUG"):
            raise
        print(f"❌ Unexpected error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
