import logging
from decimal import Decimal, InvalidOperation
from typing import Literal
from accounts.ports.account_repository import AccountRepository
from accounts.ports.id_provider import IdProvider
from accounts.ports.clock import Clock
from accounts.domain.account import Account, AccountNumber
from accounts.domain.errors import AccountValidationError, AccountNotFoundError

logger = logging.getLogger(__name__)


### COMMENTS
# ==========================================================
# Warstwa serwisowa (services/account_service.py): przypadki użycia.
# ==========================================================
# Rola:
# - Otwieranie kont: walidacja → numer z IdProvider → Account → repo.add.
# - Odczyt i listowanie kont z paginacją.
#
# Zasady:
# - Serwis korzysta wyłącznie z portów (repozytorium, IdProvider, Clock).
# - Jeden IdProvider wstrzykiwany do każdego serwisu, który potrzebuje numerów
#   (zamiast osobnego generatora w każdym module).
# - ExhaustionError z generatora przechodzi do wywołującego bez zmian.



class AccountService:
    """
    Serwis przypadków użycia dla kont bankowych.

    :param repo: Implementacja portu AccountRepository.
    :param id_provider: Źródło numerów kont (zwykle SequenceIdGenerator.get_instance()).
    :param clock: Źródło czasu otwarcia konta.
    """
    def __init__(self, repo: AccountRepository, id_provider: IdProvider, clock: Clock) -> None:
        self.repo = repo
        self.id_provider = id_provider
        self.clock = clock

    def open_account(self, owner_name: str, balance=0) -> Account:
        """
            Otwiera nowe konto i zapisuje je w repozytorium.

            - Walidacja: `owner_name` niepusty, `balance` to skończona, nieujemna kwota.
            - Numer konta pobierany jest dokładnie raz z `id_provider.next()`.

            :param owner_name: Właściciel konta (wymagany).
            :param balance: Saldo początkowe (int, str lub Decimal).
            :raises AccountValidationError: Gdy dane są niepoprawne.
            :raises ExhaustionError: Gdy pula numerów jest wyczerpana.
            :return: Utworzony obiekt `Account`.
        """
        if not owner_name or not owner_name.strip():
            raise AccountValidationError("owner_name", "Wlasciciel nie moze byc pusty")

        amount = self._parse_balance(balance)

        number = AccountNumber(self.id_provider.next())
        account = Account(
            account_number=number,
            owner_name=owner_name.strip(),
            balance=amount,
            opened_at=self.clock.now(),
        )
        self.repo.add(account)
        logger.info("Opened account %s for %s", number, account.owner_name)
        return account

    def _parse_balance(self, balance) -> Decimal:
        if isinstance(balance, float):
            balance = str(balance)
        try:
            amount = Decimal(balance)
        except (InvalidOperation, TypeError, ValueError):
            raise AccountValidationError("balance", f"Niepoprawna kwota: {balance!r}")
        if not amount.is_finite() or amount < 0:
            raise AccountValidationError("balance", "Saldo musi byc nieujemne")
        return amount

    def get_account(self, account_number: AccountNumber) -> Account:
        """
            Zwraca konto o wskazanym numerze.

            :raises AccountNotFoundError: Gdy nie znaleziono konta.
        """
        account = self.repo.get(account_number)
        if account is None:
            raise AccountNotFoundError(account_number)
        return account

    def list_accounts(
        self,
        page: int = 1,
        page_size: int = 20,
        order_by: Literal["opened_at", "owner_name"] | None = None,
        ) -> tuple[list[Account], int]:
        """
        Zwraca stronę kont oraz łączną liczbę rekordów.

        :raises AccountValidationError: Gdy paginacja jest niepoprawna.
        :return: (items, total)
        """
        if page < 1 or page_size < 1:
            raise AccountValidationError("pagination", "page >= 1, page_size >= 1")

        offset = (page - 1) * page_size
        total = self.repo.count_all()
        items = self.repo.list_all(limit=page_size, offset=offset, order_by=order_by or "opened_at")

        return items, total
