
### COMMENTS
# ============================================
# Konwencja użycia błędów domenowych w projekcie
# ============================================
# - Generator numerów (adapters/system):
#     * wyczerpanie licznika → ExhaustionError (nie ponawiamy, zasób jest skończony)
#     * niezgodna/niepoprawna konfiguracja → GeneratorConfigError
#
# - Repozytoria (adaptery):
#     * wykrywają duplikaty lub brak rekordów
#     * mapują błędy techniczne (np. IntegrityError, OSError) na DomainError
#
# - Serwisy:
#     * walidują dane użytkownika i rzucają AccountValidationError
#     * jeśli get() zwraca None, a operacja wymaga istniejącego konta: AccountNotFoundError
#
# - UI (CLI):
#     * łapie DomainError (lub konkretne klasy) i wyświetla przyjazny komunikat
#     * wszystko inne traktuje jako błąd techniczny


class DomainError(Exception):
    """Bazowa klasa dla błędów domenowych.
    Umożliwia odróżnienie błędów domeny (logika aplikacji) od błędów technicznych
    (np. problemów z bazą danych, I/O).
    Nie powinna być rzucana bezpośrednio poza adapterami; używaj klas pochodnych.
    """


class ExhaustionError(DomainError):
    """Rzucany, gdy licznik numerów kont osiągnął maksymalną wartość.
    Licznik nigdy się nie "zawija" do zera ani wartości ujemnych. Ponowienie nie ma sensu,
    więc błąd trafia prosto do wywołującego `next()`.
    """
    def __init__(self, max_value: int):
        self.max_value = max_value
        super().__init__(self.__str__())
    def __str__(self):
        return f"Pula numerów wyczerpana (maksimum licznika: {self.max_value})."


class GeneratorConfigError(DomainError):
    """Rzucany przy niepoprawnych ustawieniach generatora lub próbie
    ponownego skonfigurowania instancji procesowej innymi ustawieniami."""
    def __init__(self, message: str):
        self.message = message
        super().__init__(self.__str__())
    def __str__(self):
        return f"Błąd konfiguracji generatora: {self.message}"


class RegistryKeyError(DomainError):
    """Rzucany, gdy rejestr instancji (KeyedSingletons) dostaje klucz spoza zakresu 0..size-1."""
    def __init__(self, key: object, size: int):
        self.key = key
        self.size = size
        super().__init__(self.__str__())
    def __str__(self):
        return f"Klucz {self.key!r} poza zakresem 0..{self.size - 1}."


class AccountValidationError(DomainError):
    """Rzucany, gdy dane wejściowe nie spełniają reguł biznesowych dla konta.
    Przykłady:
    - pusty właściciel,
    - ujemne saldo,
    - niepoprawna paginacja.
    Zgłaszany przez serwis (`AccountService`), przed próbą zapisu w repozytorium.
    """
    def __init__(self, field: str, message: str):
        self.field = field
        self.message = message
        super().__init__(self.__str__())
    def __str__(self):
        return f"Błąd walidacji pola '{self.field}': {self.message}"


class AccountAlreadyExistsError(DomainError):
    """Rzucany, gdy numer konta koliduje z istniejącym wpisem.
    W praktyce: restart procesu (licznik startuje od zera) na trwałej bazie SQL.
    """
    def __init__(self, account_number: str):
        self.account_number = account_number
        super().__init__(self.__str__())
    def __str__(self):
        return f"Konto o numerze {self.account_number} juz istnieje."


class AccountNotFoundError(DomainError):
    """Rzucany, gdy żądane konto nie istnieje w repozytorium."""
    def __init__(self, account_number: str):
        self.account_number = account_number
        super().__init__(self.__str__())
    def __str__(self):
        return f"Konto o numerze {self.account_number} nie istnieje."
