def percentage(part: int, total: int) -> int:
    """Integer percentage rounded half up; 0 when ``total`` is not positive."""
    if total <= 0:
        return 0
    return (200 * part + total) // (2 * total)
