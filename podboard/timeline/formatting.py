def format_time(seconds: float) -> str:
    """Render a timeline position as ``m:ss``."""
    total = int(seconds)
    minutes, secs = divmod(total, 60)
    return f"{minutes}:{secs:02d}"


def format_duration(seconds: float) -> str:
    """Render a media length as ``h:mm:ss`` (or ``m:ss`` under an hour)."""
    total = int(seconds)
    hours, remainder = divmod(total, 3600)
    minutes, secs = divmod(remainder, 60)
    if hours > 0:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes}:{secs:02d}"
