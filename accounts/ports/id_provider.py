from typing import Protocol

class IdProvider(Protocol):
    """Port odpowiedzialny za generowanie unikalnych numerów kont.

    Każde wywołanie `next()` zwraca identyfikator różny od wszystkich wcześniejszych
    i późniejszych w czasie życia procesu (również przy wywołaniach z wielu wątków).
    """
    def next(self) -> str:
        pass
