"""
Per-kind record caching on top of the Django cache framework.

Keys are '<kind>_<id>' for single records and '<kind>_list' for the
full default-visibility list of that kind.
"""

from django.conf import settings
from django.core.cache import cache as default_cache


class RecordCache:

    def __init__(self, kind, backend=None, timeout=None):
        self.kind = kind
        self.backend = backend if backend is not None else default_cache
        self.timeout = timeout if timeout is not None else settings.RECORDS['CACHE_TIMEOUT']

    def key(self, pk):
        return f'{self.kind}_{pk}'

    @property
    def list_key(self):
        return f'{self.kind}_list'

    def get(self, pk):
        return self.backend.get(self.key(pk))

    def set(self, pk, record):
        self.backend.set(self.key(pk), record, self.timeout)

    def get_list(self):
        return self.backend.get(self.list_key)

    def set_list(self, records):
        self.backend.set(self.list_key, records, self.timeout)

    def invalidate(self, pk=None):
        """Drop the list entry, and the record entry when a pk is given."""
        keys = [self.list_key]
        if pk is not None:
            keys.append(self.key(pk))
        self.backend.delete_many(keys)
