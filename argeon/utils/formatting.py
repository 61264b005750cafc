"""
Helper functions for formatting data into human-readable strings.
"""

import re


def format_size(bytes_size: int) -> str:
    """Formats bytes into a human-readable size string (e.g., '145.3 MB')."""
    if bytes_size <= 0:
        return "0 B"
    units = ["B", "KB", "MB", "GB", "TB"]
    i = 0
    while bytes_size >= 1024 and i < len(units) - 1:
        bytes_size /= 1024
        i += 1
    return f"{bytes_size:.1f} {units[i]}"


def format_duration(seconds: float) -> str:
    """
    Formats a duration in seconds into a human-readable string (e.g., '2h 34m 12s').
    """
    s = int(seconds)
    hours, remainder = divmod(s, 3600)
    minutes, secs = divmod(remainder, 60)
    parts = []
    if hours > 0:
        parts.append(f"{hours}h")
    if minutes > 0:
        parts.append(f"{minutes}m")
    if secs > 0 or not parts:
        parts.append(f"{secs}s")
    return " ".join(parts)


def slugify(name: str) -> str:
    """Lower-cases a name and replaces every non [a-z0-9] character with '_'."""
    return re.sub(r"[^a-z0-9]", "_", name.lower())


def percentage(current: int, total: int) -> int:
    """Integer percentage of current/total, rounded half-up."""
    if total <= 0:
        return 100
    return (200 * current + total) // (2 * total)


def summarize_failures(failed: list[str]) -> str:
    """Builds the single-line warning shown when some files could not be fetched."""
    if len(failed) == 1:
        return f"Failed to download: {failed[0]}"
    return f"Failed to download {len(failed)} files. Check the log for details."
