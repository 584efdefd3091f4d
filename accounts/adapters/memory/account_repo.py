from accounts.domain.account import Account, AccountNumber
from accounts.domain.errors import AccountAlreadyExistsError, AccountValidationError
from typing import Iterable, Optional, Literal
import threading

### COMMENTS
# ==========================================================
# Adapter pamięciowy dla repozytorium kont (adapters/memory/account_repo.py).
# ==========================================================
# - Dane w słowniku `_data: dict[AccountNumber, Account]`, chronionym blokadą
#   (konta mogą być otwierane z wielu wątków naraz).
# - Brak trwałości między uruchomieniami.
# - `add` → AccountAlreadyExistsError, jeśli numer istnieje,
# - `list_all` → sortuje ASC + tiebreaker po `account_number`, potem paginacja.



class InMemoryAccountRepository:
    """
        Repozytorium kont w pamięci, z opcjonalną kolekcją startowych kont.
        :param initial: Iterable z obiektami Account do wstępnego załadowania
        (przy duplikatach ostatni wygrywa; to tylko seed, nie API).
    """
    def __init__(self, initial: Iterable[Account] | None = None) -> None:
        self._data: dict[AccountNumber, Account] = {}
        self._lock = threading.Lock()
        for a in (initial or []):
            self._data[a.account_number] = a

    def add(self, account: Account) -> None:
        """
            Dodaje nowe konto. Kolizja rozpoznawana jest po `account_number`.

            :raises AccountAlreadyExistsError: Jeśli konto o tym numerze już istnieje.
        """
        with self._lock:
            if account.account_number in self._data:
                raise AccountAlreadyExistsError(account.account_number)
            self._data[account.account_number] = account

    def get(self, account_number: AccountNumber) -> Optional[Account]:
        with self._lock:
            return self._data.get(account_number)

    def exists(self, account_number: AccountNumber) -> bool:
        with self._lock:
            return account_number in self._data

    def count_all(self) -> int:
        with self._lock:
            return len(self._data)

    def list_all(
        self,
        *,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
        order_by: Optional[Literal["opened_at", "owner_name"]] = None,
    ) -> list[Account]:
        """
        Zwraca posortowaną i paginowaną listę kont.

        :raises AccountValidationError: Przy błędnych parametrach.
        """
        order_by = order_by or "opened_at"
        offset = offset or 0

        if order_by not in {"opened_at", "owner_name"}:
            raise AccountValidationError("order_by", f"Nieobsługiwane pole: {order_by}")

        if offset < 0 or (limit is not None and limit <= 0):
            raise AccountValidationError("pagination", "Offset >= 0, limit > 0")

        with self._lock:
            accounts = list(self._data.values())

        accounts.sort(key=lambda a: (getattr(a, order_by), a.account_number))

        if limit is not None:
            return accounts[offset : offset + limit]
        return accounts[offset:]
