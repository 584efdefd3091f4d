from typing import Protocol, Optional, Literal
from accounts.domain.account import Account, AccountNumber


### COMMENTS
# ==========================================================
# Kontrakt repozytorium kont (ports/account_repository.py).
# ==========================================================
# - Niezależny od technologii (pamięć, baza SQL).
# - Adaptery mapują błędy technologiczne na błędy domenowe
#   (np. UNIQUE → AccountAlreadyExistsError).
# - Repozytorium nie zawiera logiki biznesowej (walidacje są w serwisie).
# - Listowanie ma stabilną kolejność dzięki tiebreakerowi po account_number (ASC).


class AccountRepository(Protocol):
    """Interfejs repozytorium do zapisu i odczytu obiektów `Account`.

    Adaptery (implementacje) muszą:
    - być bezpieczne przy wywołaniach z wielu wątków,
    - mapować błędy technologiczne na błędy domenowe,
    - stosować stabilne sortowanie (tiebreaker po `account_number` rosnąco).
    """

    def add(self, account: Account) -> None:
        """Dodaje nowe konto.

        Wyjątki domenowe:
            AccountAlreadyExistsError: Gdy istnieje wpis o tym samym `account_number`.
        """

    def get(self, account_number: AccountNumber) -> Optional[Account]:
        """Zwraca konto o podanym numerze albo `None`, gdy nie istnieje."""

    def exists(self, account_number: AccountNumber) -> bool:
        """Szybkie sprawdzenie istnienia rekordu o `account_number`."""

    def count_all(self) -> int:
        """Zwraca liczbę wszystkich kont (do paginacji)."""

    def list_all(
        self,
        *,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
        order_by: Optional[Literal["opened_at", "owner_name"]] = None,
    ) -> list[Account]:
        """Zwraca posortowaną listę kont z paginacją.

        Sortowanie:
            - Najpierw po `order_by` (ASC, domyślnie `"opened_at"`),
            - Następnie tiebreaker po `account_number` (ASC).

        Paginacja:
            - ZAWSZE po sortowaniu: najpierw sort → potem offset/limit.
        """
