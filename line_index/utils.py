# utils.py

_UNITS = ("KB", "MB", "GB", "TB")


def format_bytes(num_bytes):
    """Human readable byte size, e.g. 1536 -> '1.5 KB'."""
    if num_bytes < 1024:
        return f"{num_bytes} bytes"

    size = float(num_bytes)
    unit = 0
    size /= 1024
    while size >= 1024 and unit < len(_UNITS) - 1:
        size /= 1024
        unit += 1
    return f"{round(size, 2)} {_UNITS[unit]}"
