import copy
import threading
from collections import OrderedDict


class EventCache:
    """
    Range-read cache keyed by (user_id, window_start, window_end).

    Entries hold serialized event dicts. Any write for a user must call
    invalidate_user() so the next read goes back to the store. Each
    invalidation bumps the user's generation; a load that started under an
    older generation is returned to its caller but never stored.
    """

    def __init__(self, max_entries=256):
        self.max_entries = max(0, int(max_entries or 0))
        self._entries = OrderedDict()
        self._generations = {}
        self._lock = threading.Lock()
        self.hits = 0
        self.misses = 0

    @property
    def enabled(self):
        return self.max_entries > 0

    @staticmethod
    def make_key(user_id, start, end):
        return (user_id, start.isoformat() if start else None, end.isoformat() if end else None)

    def generation(self, user_id):
        with self._lock:
            return self._generations.get(user_id, 0)

    def get(self, key):
        with self._lock:
            if key not in self._entries:
                self.misses += 1
                return None
            self.hits += 1
            return copy.deepcopy(self._entries[key])

    def put(self, key, events, generation=None):
        """Store events; skipped when ``generation`` is stale for the key's user."""
        if not self.enabled:
            return False
        with self._lock:
            if generation is not None and self._generations.get(key[0], 0) != generation:
                return False
            self._entries[key] = copy.deepcopy(list(events))
            self._entries.move_to_end(key)
            while len(self._entries) > self.max_entries:
                self._entries.popitem(last=False)
        return True

    def get_or_load(self, user_id, start, end, loader):
        key = self.make_key(user_id, start, end)
        cached = self.get(key)
        if cached is not None:
            return cached
        generation = self.generation(user_id)
        events = loader()
        self.put(key, events, generation=generation)
        return events

    def invalidate_user(self, user_id):
        with self._lock:
            self._generations[user_id] = self._generations.get(user_id, 0) + 1
            stale = [key for key in self._entries if key[0] == user_id]
            for key in stale:
                del self._entries[key]
        return len(stale)

    def stats(self):
        with self._lock:
            return {'entries': len(self._entries), 'hits': self.hits, 'misses': self.misses}

    def clear(self):
        with self._lock:
            self._entries.clear()
            self._generations.clear()
            self.hits = 0
            self.misses = 0

    def __len__(self):
        return len(self._entries)
