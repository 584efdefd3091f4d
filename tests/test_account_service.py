from accounts.adapters.memory.account_repo import InMemoryAccountRepository
from accounts.adapters.system.sequence_id_generator import GeneratorSettings, SequenceIdGenerator
from accounts.services.account_service import AccountService
from accounts.domain.account import AccountNumber
from accounts.domain.errors import (
    AccountAlreadyExistsError,
    AccountNotFoundError,
    AccountValidationError,
    ExhaustionError,
)
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
from decimal import Decimal
import pytest


class FakeIdProvider:
    def __init__(self):
        self.counter = 0
    def next(self) -> str:
        self.counter += 1
        return f"id-{self.counter}"

class FakeClock:
    def __init__(self, fixed: datetime | None = None):
        self.fixed = fixed or datetime(2025, 1, 1, 12, 0, 0, tzinfo=timezone.utc)
    def now(self) -> datetime:
        return self.fixed


def test_open_account():
    # Arrange
    repo = InMemoryAccountRepository()
    service = AccountService(repo, FakeIdProvider(), FakeClock())

    # Act
    account = service.open_account("Jason", 100)

    # Assert
    items, total = service.list_accounts()
    assert total == 1
    assert items == [account]
    assert account.account_number == "id-1"
    assert account.balance == Decimal("100")
    assert account.describe() == "id-1 | Jason | 100"


def test_open_uses_sequence_generator_format():
    service = AccountService(InMemoryAccountRepository(), SequenceIdGenerator(), FakeClock())

    jason = service.open_account("Jason", 100)
    james = service.open_account("James", 1000)

    assert jason.account_number == "0000-1"
    assert james.account_number == "0000-2"


def test_open_draws_exactly_one_id_per_account():
    idp = FakeIdProvider()
    service = AccountService(InMemoryAccountRepository(), idp, FakeClock())

    service.open_account("A")
    service.open_account("B")

    assert idp.counter == 2


@pytest.mark.parametrize("owner", ["", "   ", None])
def test_open_rejects_blank_owner(owner):
    idp = FakeIdProvider()
    service = AccountService(InMemoryAccountRepository(), idp, FakeClock())

    with pytest.raises(AccountValidationError) as exc:
        service.open_account(owner, 10)
    assert exc.value.field == "owner_name"
    # numer nie został zużyty
    assert idp.counter == 0


@pytest.mark.parametrize("balance", [-1, "-0.01", "abc", "NaN", "Infinity", None])
def test_open_rejects_bad_balance(balance):
    service = AccountService(InMemoryAccountRepository(), FakeIdProvider(), FakeClock())

    with pytest.raises(AccountValidationError) as exc:
        service.open_account("Jason", balance)
    assert exc.value.field == "balance"


def test_open_accepts_string_and_float_amounts():
    service = AccountService(InMemoryAccountRepository(), FakeIdProvider(), FakeClock())

    a = service.open_account("A", "12.50")
    b = service.open_account("B", 0.1)

    assert a.balance == Decimal("12.50")
    assert b.balance == Decimal("0.1")


def test_open_strips_owner_name():
    service = AccountService(InMemoryAccountRepository(), FakeIdProvider(), FakeClock())

    assert service.open_account("  Jason  ").owner_name == "Jason"


def test_open_uses_clock_time():
    clock = FakeClock(datetime(2025, 1, 2, 3, 4, 5, tzinfo=timezone.utc))
    service = AccountService(InMemoryAccountRepository(), FakeIdProvider(), clock)

    assert service.open_account("A").opened_at == clock.fixed


def test_exhaustion_propagates_and_nothing_is_saved():
    repo = InMemoryAccountRepository()
    gen = SequenceIdGenerator(GeneratorSettings(max_value=1))
    service = AccountService(repo, gen, FakeClock())

    service.open_account("A")
    with pytest.raises(ExhaustionError):
        service.open_account("B")

    assert repo.count_all() == 1


def test_duplicate_number_from_provider_is_a_collision():
    class StuckIdProvider:
        def next(self) -> str:
            return "0000-1"

    service = AccountService(InMemoryAccountRepository(), StuckIdProvider(), FakeClock())
    service.open_account("A")

    with pytest.raises(AccountAlreadyExistsError):
        service.open_account("B")


def test_concurrent_opening_yields_distinct_numbers():
    repo = InMemoryAccountRepository()
    service = AccountService(repo, SequenceIdGenerator(), FakeClock())

    with ThreadPoolExecutor(max_workers=8) as pool:
        accounts = list(pool.map(lambda i: service.open_account(f"owner-{i}"), range(1000)))

    assert len({a.account_number for a in accounts}) == 1000
    assert repo.count_all() == 1000


def test_get_returns_existing_account():
    service = AccountService(InMemoryAccountRepository(), FakeIdProvider(), FakeClock())
    a = service.open_account("A", 5)

    got = service.get_account(a.account_number)

    assert got == a


def test_get_raises_on_missing():
    service = AccountService(InMemoryAccountRepository(), FakeIdProvider(), FakeClock())

    with pytest.raises(AccountNotFoundError):
        service.get_account(AccountNumber("0000-404"))


def test_list_paginates_and_sorts_with_tiebreaker():
    service = AccountService(InMemoryAccountRepository(), FakeIdProvider(), FakeClock())
    for name in ["C", "A", "B"]:
        service.open_account(name)

    page1, total = service.list_accounts(page=1, page_size=2)
    page2, _ = service.list_accounts(page=2, page_size=2)
    by_owner, _ = service.list_accounts(order_by="owner_name")

    assert total == 3
    # równe opened_at → tiebreaker po numerze
    assert [a.account_number for a in page1] == ["id-1", "id-2"]
    assert [a.account_number for a in page2] == ["id-3"]
    assert [a.owner_name for a in by_owner] == ["A", "B", "C"]


@pytest.mark.parametrize("page, page_size", [(0, 20), (1, 0), (-1, -1)])
def test_list_rejects_bad_pagination(page, page_size):
    service = AccountService(InMemoryAccountRepository(), FakeIdProvider(), FakeClock())

    with pytest.raises(AccountValidationError):
        service.list_accounts(page=page, page_size=page_size)


def test_list_rejects_unknown_order():
    service = AccountService(InMemoryAccountRepository(), FakeIdProvider(), FakeClock())

    with pytest.raises(AccountValidationError):
        service.list_accounts(order_by="balance")
