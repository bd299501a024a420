"""Formatting helpers shared across skinmanager."""


def format_size(size_bytes: int) -> str:
    """Format a byte count as "1.5 MB" (up to two decimals, trailing zeros dropped)."""
    if size_bytes <= 0:
        return "0 B"
    units = ("B", "KB", "MB", "GB", "TB")
    size = float(size_bytes)
    order = 0
    while size >= 1024 and order < len(units) - 1:
        order += 1
        size /= 1024
    text = f"{size:.2f}".rstrip("0").rstrip(".")
    return f"{text} {units[order]}"
