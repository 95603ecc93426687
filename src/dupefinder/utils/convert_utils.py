"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

utils/convert_utils.py
"""
import time


class ConvertUtils:
    @staticmethod
    def bytes_to_human(size_bytes: int) -> str:
        """
        Convert bytes to human-readable string (e.g., 1.50KB, 3.20MB).
        """
        if size_bytes < 0:
            return "0B"

        units = ["B", "KB", "MB", "GB", "TB", "PB"]
        for unit in units:
            if size_bytes < 1024:
                return f"{size_bytes:.2f}{unit}"
            size_bytes /= 1024
        return f"{size_bytes:.2f}EB"

    @staticmethod
    def format_duration(seconds: int) -> str:
        """
        Format a duration in seconds as 'Hh,MMm,SSs' (e.g., 3725 -> '1h,02m,05s').
        """
        seconds = max(0, int(seconds))
        hours = seconds // 3600
        minutes = (seconds % 3600) // 60
        secs = seconds % 60
        return f"{hours}h,{minutes:02d}m,{secs:02d}s"

    @staticmethod
    def estimate_total(elapsed: float, current: int, total: int) -> float:
        """Linear estimate of the total run time from progress so far."""
        if current <= 0:
            return 0.0
        return elapsed * total / current

    @staticmethod
    def timestamp_to_compact(timestamp: float) -> str:
        """Unix timestamp as YYYYMMDDHHMMSS in local time (used in log names)."""
        return time.strftime("%Y%m%d%H%M%S", time.localtime(timestamp))
