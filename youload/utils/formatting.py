"""Human readable formatting for durations and file sizes."""


def format_duration(seconds: float) -> str:
    """Format seconds as m:ss (0:00 when unknown)."""
    if not seconds:
        return "0:00"
    mins = int(seconds // 60)
    secs = int(seconds % 60)
    return f"{mins}:{secs:02d}"


def format_file_size(value: int) -> str:
    """Format a byte count using Bytes/KB/MB/GB, with at most two decimals."""
    if value <= 0:
        return "0 Bytes"
    size = float(value)
    units = ["Bytes", "KB", "MB", "GB"]
    unit_idx = 0
    while size >= 1024.0 and unit_idx < len(units) - 1:
        size /= 1024.0
        unit_idx += 1
    rendered = f"{size:.2f}".rstrip("0").rstrip(".")
    return f"{rendered} {units[unit_idx]}"
