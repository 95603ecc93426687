from dupefinder.core.models import DigestAlgorithm

ALGORITHM_ALIASES = {name: DigestAlgorithm.from_name(name) for name in ("md5", "sha256", "xxh64")}

ALGORITHM_CHOICES = list(ALGORITHM_ALIASES.keys())

ALGORITHM_HELP_TEXT = (
    "Hash algorithm used to compare file contents:\n"
    "  md5     : MD5\n"
    "  sha256  : SHA-256 (default)\n"
    "  xxh64   : xxHash64 (fastest, non-cryptographic)\n"
)

DELETE_FROM_HELP_TEXT = (
    "Numbers of the directories to delete duplicates from (comma separated).\n"
    "Directories are numbered in the order given, starting at 1.\n"
    "Example: %(prog)s ~/Photos ~/Backup ~/Downloads --delete-from 2,3\n"
    "Asked interactively when omitted."
)

EPILOG_TEXT = """
Examples:
  Dry run - log what would be deleted from ~/Backup (nothing is removed)
  %(prog)s ~/Photos ~/Backup --delete-from 2

  Delete duplicates from ~/Backup, keep copies in ~/Photos
  %(prog)s ~/Photos ~/Backup --delete-from 2 --execute

  Choose the file to keep for every duplicate group
  %(prog)s ~/Photos ~/Backup --delete-from 1,2 --execute --manual

  Same as above but move files to trash, hash with 4 threads, no prompt (for scripts)
  %(prog)s ~/Photos ~/Backup -d 2 --execute --trash -j 4 --force --log cleanup.txt

Every decision is written to the log file (log_<date>.txt by default).
"""
