from typing import NewType
from datetime import datetime
from decimal import Decimal
from dataclasses import dataclass

AccountNumber = NewType("AccountNumber", str)

@dataclass(frozen=True)
class Account():
    """
    Model domenowy konta bankowego; niemutowalny; numer nadawany przez IdProvider,
    czas otwarcia w UTC dostarczany przez serwis (port Clock).
    """
    account_number: AccountNumber
    owner_name: str
    balance: Decimal
    opened_at: datetime

    def describe(self) -> str:
        """Jednoliniowy opis konta (odpowiednik printAccount z wersji demonstracyjnej)."""
        return f"{self.account_number} | {self.owner_name} | {self.balance}"



### COMMENTS
# Numer konta (`account_number`) jest nieprzezroczystym stringiem.
# - Nie parsujemy go i nie odtwarzamy części liczbowej; zapisujemy dokładnie to,
#   co zwrócił generator.
# - AccountNumber to NewType: w runtime zwykły str, dla mypy/IDE osobny typ.
#
# Saldo jako Decimal (nie float), bo kwoty pieniężne muszą być dokładne:
#   Decimal("0.1") + Decimal("0.2") == Decimal("0.3")  ✅
#   0.1 + 0.2 == 0.3                                   ❌
