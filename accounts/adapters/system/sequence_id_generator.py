from __future__ import annotations
import logging
import threading
from dataclasses import dataclass
from typing import ClassVar
from accounts.ports.id_provider import IdProvider
from accounts.domain.errors import ExhaustionError, GeneratorConfigError

logger = logging.getLogger(__name__)

MAX_COUNTER = 2**63 - 1


### COMMENTS
# ==========================================================
# Generator numerów kont (adapters/system/sequence_id_generator.py).
# ==========================================================
# Rola:
# - Jeden licznik na proces, startuje od 0, tylko rośnie.
# - `next()` = odczyt + inkrementacja + formatowanie w jednej sekcji krytycznej (Lock).
# - `get_instance()` = dostęp do instancji procesowej; tworzenie chronione
#   double-checked locking, więc równoległe "pierwsze" wywołania nie zbudują dwóch liczników.
#
# Zasady:
# - Licznik nie ma settera. Wartość startową można podać tylko w konstruktorze.
# - Po osiągnięciu `max_value` kolejne `next()` rzuca ExhaustionError, licznik się nie zmienia.
# - Licznik żyje tylko w pamięci procesu (brak trwałości między uruchomieniami).


@dataclass(frozen=True)
class GeneratorSettings:
    """Ustawienia formatu numeru: `PREFIX-N`.

    :param prefix: Stały prefiks numeru (domyślnie "0000").
    :param width: Szerokość części liczbowej z zerami wiodącymi; 0 = bez dopełniania.
    :param max_value: Maksymalna wartość licznika.
    """
    prefix: str = "0000"
    width: int = 0
    max_value: int = MAX_COUNTER

    def validate(self) -> None:
        if not self.prefix or not self.prefix.strip():
            raise GeneratorConfigError("prefix nie moze byc pusty")
        if self.width < 0:
            raise GeneratorConfigError("width >= 0")
        if self.max_value < 1:
            raise GeneratorConfigError("max_value >= 1")


class SequenceIdGenerator(IdProvider):
    """
    Bezpieczny wątkowo generator kolejnych numerów kont.

    :param settings: Format numeru i zakres licznika (domyślnie `GeneratorSettings()`).
    :param start: Wartość początkowa licznika; pierwszy numer to `start + 1`.
    :raises GeneratorConfigError: Gdy ustawienia lub `start` są niepoprawne.
    """

    _instance: ClassVar[SequenceIdGenerator | None] = None
    _instance_lock: ClassVar[threading.Lock] = threading.Lock()

    def __init__(self, settings: GeneratorSettings | None = None, start: int = 0) -> None:
        settings = settings or GeneratorSettings()
        settings.validate()
        if start < 0 or start > settings.max_value:
            raise GeneratorConfigError(f"start poza zakresem 0..{settings.max_value}")
        self._settings = settings
        self._counter = start
        self._lock = threading.Lock()

    @classmethod
    def get_instance(cls, settings: GeneratorSettings | None = None) -> SequenceIdGenerator:
        """
            Zwraca instancję procesową generatora (tworzy ją przy pierwszym użyciu).

            - Pierwsze wywołanie buduje generator z `settings` (lub domyślnymi).
            - Kolejne wywołania zwracają ten sam obiekt, z dowolnego wątku.
            - Podanie innych ustawień niż te, z którymi instancja powstała,
            zgłasza `GeneratorConfigError` (nie tworzymy drugiego licznika).

            :param settings: Ustawienia dla pierwszego utworzenia.
            :raises GeneratorConfigError: Przy niezgodnych ustawieniach.
            :return: Wspólny `SequenceIdGenerator`.
        """
        instance = cls._instance
        if instance is None:
            with cls._instance_lock:
                instance = cls._instance
                if instance is None:
                    instance = cls(settings)
                    cls._instance = instance
                    logger.debug("Created process-wide generator with %s", instance.settings)
                    return instance
        if settings is not None and settings != instance.settings:
            raise GeneratorConfigError(
                f"instancja procesowa juz istnieje z ustawieniami {instance.settings}"
            )
        return instance

    @property
    def settings(self) -> GeneratorSettings:
        return self._settings

    @property
    def current(self) -> int:
        """Ostatnio wydana wartość licznika (0, gdy nic nie wydano)."""
        with self._lock:
            return self._counter

    def format(self, value: int) -> str:
        number = str(value).zfill(self._settings.width)
        return f"{self._settings.prefix}-{number}"

    def next(self) -> str:
        """
            Zwraca kolejny, unikalny numer konta.

            - Inkrementacja i odczyt wykonują się atomowo pod blokadą.
            - Pierwszy numer świeżego generatora to "0000-1", potem "0000-2".

            :raises ExhaustionError: Gdy licznik osiągnął `max_value`.
            :return: Sformatowany numer.
        """
        with self._lock:
            if self._counter >= self._settings.max_value:
                logger.error("Sequence exhausted at %d", self._counter)
                raise ExhaustionError(self._settings.max_value)
            self._counter += 1
            value = self._counter
        return self.format(value)
