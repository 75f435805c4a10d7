"""Cache borné (LRU) avec expiration des entrées."""

import threading
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, Callable, Dict, Hashable, List, Optional


@dataclass
class _Entry:
    value: Any
    created_at: float


class TTLCache:
    """Cache LRU borné, thread-safe, avec durée de vie optionnelle.

    Quand la capacité est atteinte, l'entrée la moins récemment
    consultée est évincée. Une entrée plus vieille que ``ttl`` secondes
    est considérée absente et supprimée à la lecture.

    Attributes:
        max_size: Nombre maximal d'entrées.
        ttl: Durée de vie en secondes (None : pas d'expiration).
    """

    def __init__(
        self,
        max_size: int = 100,
        ttl: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialise le cache.

        Args:
            max_size: Capacité maximale (au moins 1).
            ttl: Durée de vie des entrées en secondes.
            clock: Horloge injectable, ``time.monotonic`` par défaut.

        Raises:
            ValueError: Si max_size < 1 ou ttl <= 0.
        """
        if max_size < 1:
            raise ValueError(f"max_size doit être >= 1, reçu: {max_size}")
        if ttl is not None and ttl <= 0:
            raise ValueError(f"ttl doit être > 0, reçu: {ttl}")
        self.max_size = max_size
        self.ttl = ttl
        self._clock = clock
        self._data: "OrderedDict[Hashable, _Entry]" = OrderedDict()
        self._lock = threading.Lock()
        self._hits = 0
        self._misses = 0
        self._evictions = 0

    def _expired(self, entry: _Entry) -> bool:
        if self.ttl is None:
            return False
        return (self._clock() - entry.created_at) > self.ttl

    def get(self, key: Hashable, default: Any = None) -> Any:
        """Retourne la valeur associée à la clé, ou default."""
        with self._lock:
            entry = self._data.get(key)
            if entry is None:
                self._misses += 1
                return default
            if self._expired(entry):
                del self._data[key]
                self._misses += 1
                return default
            self._data.move_to_end(key)
            self._hits += 1
            return entry.value

    def set(self, key: Hashable, value: Any) -> Any:
        """Enregistre une valeur, en évinçant la plus ancienne si besoin."""
        with self._lock:
            if key in self._data:
                del self._data[key]
            while len(self._data) >= self.max_size:
                self._data.popitem(last=False)
                self._evictions += 1
            self._data[key] = _Entry(value, self._clock())
            return value

    def get_or_set(self, key: Hashable, factory: Callable[[], Any]) -> Any:
        """Retourne la valeur en cache ou la calcule via factory.

        La factory est appelée hors du verrou ; un résultat None n'est
        pas mis en cache.
        """
        sentinel = object()
        value = self.get(key, sentinel)
        if value is not sentinel:
            return value
        value = factory()
        if value is not None:
            self.set(key, value)
        return value

    def delete(self, key: Hashable) -> Any:
        with self._lock:
            entry = self._data.pop(key, None)
            return entry.value if entry else None

    def clear(self) -> None:
        with self._lock:
            self._data.clear()

    def keys(self) -> List[Hashable]:
        """Liste les clés non expirées, de la plus ancienne à la plus récente."""
        with self._lock:
            self._purge_expired()
            return list(self._data.keys())

    def _purge_expired(self) -> None:
        for key in [k for k, e in self._data.items() if self._expired(e)]:
            del self._data[key]

    def stats(self) -> Dict[str, Any]:
        """Retourne les compteurs du cache (taille, hits, misses...)."""
        with self._lock:
            return {
                "size": len(self._data),
                "max_size": self.max_size,
                "ttl": self.ttl,
                "hits": self._hits,
                "misses": self._misses,
                "evictions": self._evictions,
            }

    def __contains__(self, key: Hashable) -> bool:
        sentinel = object()
        with self._lock:
            entry = self._data.get(key, sentinel)
            if entry is sentinel:
                return False
            if self._expired(entry):
                del self._data[key]
                return False
            return True

    def __len__(self) -> int:
        with self._lock:
            return len(self._data)
