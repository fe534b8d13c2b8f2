"""Time sources for the record lifecycle."""

from datetime import timedelta

from django.utils import timezone


class SystemClock:
    """Current UTC instant from Django's timezone utilities."""

    def now(self):
        return timezone.now()


class FixedClock:
    """A clock that only moves when told to."""

    def __init__(self, now=None):
        self.current = now or timezone.now()

    def now(self):
        return self.current

    def advance(self, **kwargs):
        """Move forward by a timedelta built from kwargs (e.g. minutes=5)."""
        self.current += timedelta(**kwargs)
        return self.current
