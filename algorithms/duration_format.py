class DurationFormatter:
    """Render set durations given in seconds."""

    @staticmethod
    def format(seconds: int) -> str:
        """Return ``M:SS``, e.g. 90 -> ``1:30`` and 5 -> ``0:05``."""
        if seconds < 0:
            raise ValueError("seconds must be non-negative")
        mins, secs = divmod(int(seconds), 60)
        return f"{mins}:{secs:02d}"

    @classmethod
    def compact(cls, seconds: int) -> str:
        """Like :meth:`format` but keeps sub-minute values in seconds (``45sec``)."""
        if seconds < 60:
            return f"{int(seconds)}sec"
        return cls.format(seconds)
