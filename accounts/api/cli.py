from accounts.domain.errors import AccountNotFoundError, AccountValidationError, DomainError
from accounts.domain.account import Account, AccountNumber
from accounts.services.account_service import AccountService
from accounts.adapters.memory.account_repo import InMemoryAccountRepository
from accounts.adapters.sql.account_repo import SqlAccountRepository
from accounts.adapters.system.clock_system import SystemClock
from accounts.adapters.system.sequence_id_generator import GeneratorSettings, SequenceIdGenerator
from accounts.adapters.system.instance_registry import KeyedSingletons
from accounts.api.logging import configure_logging
from concurrent.futures import ThreadPoolExecutor
from typer import Exit, Option, Typer
from rich.console import Console
from rich.table import Table
from rich.panel import Panel
from math import ceil
from pathlib import Path
from typing import Optional


### COMMENTS
# ==========================================================
# CLI (Typer + Rich): interfejs użytkownika dla kont i numeratora.
# ==========================================================
# Rola:
# - Mapuje komendy na AccountService i generator numerów.
# - Wyświetla wyniki w czytelnej formie (tabele, panele, kolory).
# - Łapie DomainError, drukuje komunikat i kończy z kodem 1.
#
# Zasady:
# - Zero logiki biznesowej: deleguj do serwisu / generatora.
# - Jednorazowy bootstrap zależności w callbacku; generator to zawsze
#   instancja procesowa (SequenceIdGenerator.get_instance()).
# - Licznik nie jest trwały: z --db kolejne uruchomienie zaczyna od "0000-1"
#   i kolizję zgłosi AccountAlreadyExistsError.


app = Typer(help="Accounts CLI: numeracja kont bankowych")
console = Console()

service: AccountService | None = None  # ustawimy w callbacku
generator: SequenceIdGenerator | None = None


def build_service(db_path: Optional[Path], id_provider: SequenceIdGenerator) -> AccountService:
    """Tworzy serwis na bazie wybranego adaptera.
    - Brak pliku -> InMemory
    - Podany plik -> SQLite (trwałość kont, nie licznika)
    """
    if db_path:
        repo = SqlAccountRepository(db_path)
    else:
        repo = InMemoryAccountRepository()
    return AccountService(repo, id_provider, SystemClock())


def error_panel(e: DomainError, title: str = "Błąd domenowy", hint: str | None = None) -> None:
    body = f"❌ {e}" + (f"\n[dim]{hint}[/]" if hint else "")
    console.print(Panel.fit(body, title=title, border_style="red"))


@app.callback()
def main(
    db: Optional[Path] = Option(
        None, "--db", envvar="ACCOUNTS_DB",
        help="Ścieżka do pliku SQLite (włącza tryb trwały)",
    ),
    prefix: str = Option("0000", "--prefix", envvar="ACCOUNTS_PREFIX", help="Prefiks numeru konta"),
    width: int = Option(0, "--width", envvar="ACCOUNTS_WIDTH", min=0, help="Dopełnienie zerami części liczbowej"),
    verbose: bool = Option(False, "--verbose", "-v", help="Logi na poziomie DEBUG"),
    json_logs: bool = Option(False, "--json-logs", help="Logi w formacie JSON"),
) -> None:
    """Bootstrap zależności na starcie procesu CLI."""
    global service, generator
    if verbose or json_logs:
        configure_logging(json_output=json_logs, level="DEBUG" if verbose else "INFO")
    try:
        generator = SequenceIdGenerator.get_instance(GeneratorSettings(prefix=prefix, width=width))
    except DomainError as e:
        error_panel(e, title="Konfiguracja")
        raise Exit(code=1)
    service = build_service(db, generator)


def render_list(items: list[Account], total: int, page: int, page_size: int) -> None:
    """Renderuje tabelę Rich z kolumnami: Number, Owner, Balance, Opened + stopką paginacji."""

    table = Table(show_lines=True, header_style="bold")
    table.add_column("Number", no_wrap=True, style="cyan")
    table.add_column("Owner")
    table.add_column("Balance", justify="right", style="green")
    table.add_column("Opened At", no_wrap=True, style="dim")

    for a in items:
        table.add_row(
            a.account_number,
            a.owner_name,
            str(a.balance),
            a.opened_at.strftime("%Y-%m-%d %H:%M"),
        )

    pages = max(1, ceil(total / page_size))

    console.print(table)
    console.print(f"[dim]Strona {page}/{pages} • Razem: {total} • Page size: {page_size}[/dim]")


@app.command("open")
def open_cmd(
    owner: str,
    balance: str = Option("0", "--balance", "-b", help="Saldo początkowe"),
) -> None:
    """Otwiera nowe konto i nadaje mu kolejny numer."""
    try:
        account = service.open_account(owner, balance)
    except AccountValidationError as e:
        error_panel(e, title="Błąd walidacji", hint="Podpowiedź: accounts open 'Jason' -b 100")
        raise Exit(code=1)
    except DomainError as e:
        error_panel(e)
        raise Exit(code=1)
    console.print(Panel.fit(
        f"✅ Otwarto konto\n"
        f"[cyan]Numer:[/cyan] {account.account_number}\n"
        f"[dim]Owner:[/dim] {account.owner_name}\n"
        f"[dim]Balance:[/dim] {account.balance}",
        title="Sukces",
        border_style="green",
    ))


@app.command("list")
def list_cmd(
    page: int = Option(1, "--page", "-p", min=1),
    page_size: int = Option(20, "--page-size", "-s", min=1),
    order_by: Optional[str] = Option(None, "--order-by", "-o", help="opened_at | owner_name"),
) -> None:
    """Listuje konta z paginacją."""
    try:
        items, total = service.list_accounts(page=page, page_size=page_size, order_by=order_by)
    except DomainError as e:
        error_panel(e, title="Błąd walidacji")
        raise Exit(code=1)
    render_list(items, total, page, page_size)


@app.command("show")
def show(account_number: str) -> None:
    """Pokazuje szczegóły pojedynczego konta."""
    try:
        account = service.get_account(AccountNumber(account_number))
    except AccountNotFoundError as e:
        error_panel(e, title="Nie znaleziono", hint="Użyj 'accounts list', żeby znaleźć poprawny numer")
        raise Exit(code=1)
    except DomainError as e:
        error_panel(e)
        raise Exit(code=1)
    console.print(Panel.fit(
        "\n".join([
            f"Numer: {account.account_number}",
            f"Owner: {account.owner_name}",
            f"Balance: {account.balance}",
            f"Opened: {account.opened_at.isoformat()}",
        ]),
        title="Szczegóły konta",
        border_style="cyan",
    ))


@app.command("next-id")
def next_id(count: int = Option(1, "--count", "-n", min=1)) -> None:
    """Wydaje `count` kolejnych numerów (bez zakładania kont)."""
    try:
        for _ in range(count):
            console.print(generator.next())
    except DomainError as e:
        error_panel(e, title="Pula wyczerpana")
        raise Exit(code=1)


def _draw(n: int) -> list[str]:
    # każdy wątek sam pobiera instancję: ma dostać ten sam licznik
    gen = SequenceIdGenerator.get_instance()
    return [gen.next() for _ in range(n)]


@app.command("stress")
def stress(
    threads: int = Option(8, "--threads", "-t", min=2),
    calls: int = Option(10_000, "--calls", "-c", min=1),
) -> None:
    """Sprawdza unikalność numerów przy równoległym wywoływaniu `next()` z wielu wątków."""
    share, rest = divmod(calls, threads)
    sizes = [share + (1 if i < rest else 0) for i in range(threads)]

    try:
        with ThreadPoolExecutor(max_workers=threads) as pool:
            batches = list(pool.map(_draw, sizes))
    except DomainError as e:
        error_panel(e, title="Pula wyczerpana")
        raise Exit(code=1)

    issued = [number for batch in batches for number in batch]
    unique = len(set(issued))

    table = Table(header_style="bold")
    table.add_column("Threads", justify="right")
    table.add_column("Calls", justify="right")
    table.add_column("Unique", justify="right")
    table.add_column("Duplicates", justify="right")
    table.add_row(str(threads), str(len(issued)), str(unique), str(len(issued) - unique))
    console.print(table)

    if unique != len(issued):
        console.print(Panel.fit("❌ Wykryto duplikaty numerów", border_style="red"))
        raise Exit(code=1)
    console.print(Panel.fit("✅ Wszystkie numery unikalne", border_style="green"))


@app.command("twins")
def twins(
    size: int = Option(2, "--size", min=1, help="Liczba instancji w rejestrze"),
    key: Optional[int] = Option(None, "--key", "-k", help="Dodatkowy klucz do sprawdzenia"),
) -> None:
    """
    Pokazuje rejestr "singleton na klucz" (uogólnione Twin).

    - Każdy klucz 0..size-1 ma własny, leniwie tworzony generator z prefiksem = klucz.
    - Dwa pobrania tego samego klucza zwracają ten sam obiekt.
    - Klucz spoza zakresu → RegistryKeyError.
    """
    registry = KeyedSingletons(
        lambda k: SequenceIdGenerator(GeneratorSettings(prefix=f"{k:04d}")), size=size
    )

    table = Table(header_style="bold")
    table.add_column("Key", justify="right")
    table.add_column("Same instance")
    table.add_column("First number", style="cyan")
    for k in range(len(registry)):
        first = registry.get(k)
        table.add_row(str(k), "✅" if first is registry.get(k) else "❌", first.next())
    console.print(table)

    if key is not None:
        try:
            console.print(f"Klucz {key}: {registry.get(key).next()}")
        except DomainError as e:
            error_panel(e, title="Zły klucz")
            raise Exit(code=1)


@app.command("demo")
def demo() -> None:
    """
    Pokazowy przebieg w jednym procesie: dwa konta z kolejnymi numerami.
    """
    console.print(Panel.fit("🚀 Start demonstracji", border_style="cyan"))

    try:
        jason = service.open_account("Jason", 100)
        james = service.open_account("James", 1000)
        items, total = service.list_accounts()
    except DomainError as e:
        error_panel(e)
        raise Exit(code=1)

    for account in (jason, james):
        console.print(account.describe())

    console.print("\n📋 Lista kont:")
    render_list(items, total, page=1, page_size=20)

    console.print(Panel.fit("🏁 Demo zakończone", border_style="cyan"))


if __name__ == "__main__":
    app()
