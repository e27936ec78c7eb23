"""Time-boxed cache of scrape results."""

import hashlib
import json
import time
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from ..core.logging import get_logger
from ..models.scrape import FieldDescriptor, ResultBundle

logger = get_logger(__name__)


class ResultCache:
    """Maps a (target, descriptor set) fingerprint to a result bundle.

    Entries expire ``ttl_seconds`` after insertion. Expiry is checked lazily
    on ``get`` and swept whenever keys or stats are listed.
    """

    def __init__(
        self,
        ttl_seconds: int = 1800,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        # key -> (target, expires_at, bundle)
        self._entries: Dict[str, Tuple[str, float, ResultBundle]] = {}
        self._hits = 0
        self._misses = 0
        logger.info("ResultCache initialized", ttl_seconds=ttl_seconds)

    @staticmethod
    def fingerprint(target: str, descriptors: Iterable[FieldDescriptor]) -> str:
        """Deterministic key for a target and its ordered descriptor list."""
        payload = json.dumps(
            [d.fingerprint_payload() for d in descriptors],
            sort_keys=True,
            separators=(",", ":"),
        )
        digest = hashlib.sha256(payload.encode("utf-8")).hexdigest()
        return f"{target.strip()}:{digest}"

    @staticmethod
    def _target_of(key: str) -> str:
        return key.rsplit(":", 1)[0]

    def get(self, key: str) -> Optional[ResultBundle]:
        """Return a live bundle or None on miss/expiry."""
        entry = self._entries.get(key)
        if entry is None:
            self._misses += 1
            return None

        _, expires_at, bundle = entry
        if self._clock() >= expires_at:
            del self._entries[key]
            self._misses += 1
            logger.debug("Cache entry expired", key=key)
            return None

        self._hits += 1
        return bundle

    def set(self, key: str, bundle: ResultBundle) -> None:
        self._entries[key] = (
            self._target_of(key),
            self._clock() + self.ttl_seconds,
            bundle,
        )

    def clear(self, target: Optional[str] = None) -> int:
        """Remove all entries, or those whose target starts with ``target``.

        Returns the number of live entries removed.
        """
        self.purge_expired()

        if target is None:
            removed = len(self._entries)
            self._entries.clear()
        else:
            doomed = [
                key for key, (entry_target, _, _) in self._entries.items()
                if entry_target.startswith(target)
            ]
            for key in doomed:
                del self._entries[key]
            removed = len(doomed)

        logger.info("Cache cleared", target=target, keys_deleted=removed)
        return removed

    def purge_expired(self) -> int:
        now = self._clock()
        expired = [key for key, (_, expires_at, _) in self._entries.items() if now >= expires_at]
        for key in expired:
            del self._entries[key]
        return len(expired)

    def keys(self) -> List[str]:
        self.purge_expired()
        return list(self._entries)

    def __len__(self) -> int:
        return len(self.keys())

    def stats(self) -> Dict[str, float]:
        """Get cache statistics."""
        lookups = self._hits + self._misses
        return {
            "keys": len(self),
            "hits": self._hits,
            "misses": self._misses,
            "hit_rate": self._hits / lookups if lookups else 0.0,
            "ttl_seconds": self.ttl_seconds,
        }
