from __future__ import annotations
import logging
import threading
from typing import Callable, Generic, TypeVar
from accounts.domain.errors import RegistryKeyError

logger = logging.getLogger(__name__)

T = TypeVar("T")


### COMMENTS
# Rejestr "singleton na klucz": odpowiednik klasy Twin (dwie instancje: 0 i 1),
# uogólniony do `size` kluczy.
# - Instancja dla klucza powstaje leniwie, przy pierwszym `get(key)`, pod blokadą.
# - Klucz spoza 0..size-1 → RegistryKeyError (zamiast gołego IllegalArgumentException).


class KeyedSingletons(Generic[T]):
    """
    Rejestr leniwie tworzonych instancji, po jednej na klucz z zakresu `0..size-1`.

    :param factory: Funkcja budująca instancję; dostaje klucz.
    :param size: Liczba dozwolonych kluczy (domyślnie 2, jak "bliźniaki").
    """
    def __init__(self, factory: Callable[[int], T], size: int = 2) -> None:
        if size < 1:
            raise ValueError("size must be >= 1")
        self._factory = factory
        self._size = size
        self._instances: dict[int, T] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return self._size

    def get(self, key: int) -> T:
        """
            Zwraca instancję przypisaną do `key`, tworząc ją przy pierwszym użyciu.

            :raises RegistryKeyError: Gdy `key` nie jest liczbą całkowitą z zakresu.
        """
        if isinstance(key, bool) or not isinstance(key, int) or not 0 <= key < self._size:
            raise RegistryKeyError(key, self._size)
        with self._lock:
            if key not in self._instances:
                self._instances[key] = self._factory(key)
                logger.debug("Created instance for key %d", key)
            return self._instances[key]

    def created(self) -> list[int]:
        """Klucze, dla których instancja już powstała (rosnąco)."""
        with self._lock:
            return sorted(self._instances)
