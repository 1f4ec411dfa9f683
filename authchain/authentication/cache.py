import hashlib
import threading

from cachetools import TTLCache

from authchain.authentication.profile import UserProfile

DEFAULT_CACHE_MAXSIZE = 1024
DEFAULT_CACHE_TTL = 300


def fingerprint(credential: str | bytes) -> str:
    if isinstance(credential, str):
        credential = credential.encode("utf-8")
    return hashlib.sha256(credential).hexdigest()


class ProfileCache:
    """
    Bounded, time expiring map of credential fingerprints to profiles.

    Each non-redirecting plugin owns one instance, shared by every request
    that plugin serves, so all access goes through a lock.
    Raw credentials are never used as keys: callers pass the credential and
    the cache stores its SHA-256 fingerprint.
    """

    def __init__(self, maxsize: int = DEFAULT_CACHE_MAXSIZE, ttl: float = DEFAULT_CACHE_TTL):
        if maxsize < 1:
            raise ValueError("maxsize must be >= 1")
        self._cache: TTLCache[str, UserProfile] = TTLCache(maxsize=maxsize, ttl=ttl)
        self._lock = threading.Lock()

    @property
    def maxsize(self) -> float:
        return self._cache.maxsize

    def get(self, credential: str | bytes) -> UserProfile | None:
        with self._lock:
            return self._cache.get(fingerprint(credential))

    def set(self, credential: str | bytes, profile: UserProfile) -> None:
        with self._lock:
            self._cache[fingerprint(credential)] = profile

    def evict(self, credential: str | bytes) -> UserProfile | None:
        with self._lock:
            return self._cache.pop(fingerprint(credential), None)

    def clear(self) -> None:
        with self._lock:
            self._cache.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._cache)
