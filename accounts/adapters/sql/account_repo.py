from __future__ import annotations
import logging
from decimal import Decimal
from pathlib import Path
import sqlalchemy as db
from sqlalchemy.exc import IntegrityError
from accounts.ports.account_repository import AccountRepository
from accounts.domain.account import Account, AccountNumber
from datetime import datetime, timezone
from accounts.domain.errors import AccountAlreadyExistsError, AccountValidationError, DomainError

logger = logging.getLogger(__name__)


class SqlAccountRepository(AccountRepository):
    def __init__(self, url: str | Path) -> None:
        """
        url: np. 'sqlite:///data/accounts.db' lub Path do pliku (zostanie zrobiony URL)
        """
        if isinstance(url, Path):
            db_url = f"sqlite:///{url}"
        else:
            db_url = url

        self.engine = db.create_engine(db_url, future=True)
        self.meta = db.MetaData()

        self.accounts = db.Table(
            "accounts",
            self.meta,
            db.Column("account_number", db.String, primary_key=True),
            db.Column("owner_name", db.String, nullable=False),
            db.Column("balance", db.String, nullable=False),    # Decimal jako tekst, bez strat
            db.Column("opened_at", db.String, nullable=False),  # ISO8601 '...Z'
        )

        self.meta.create_all(self.engine)
        logger.debug("Using account database %s", db_url)

    def _encode_dt(self, dt: datetime) -> str:
        # stała szerokość (zawsze mikrosekundy), żeby sortowanie tekstowe = chronologiczne
        return dt.astimezone(timezone.utc).isoformat(timespec="microseconds").replace("+00:00", "Z")

    def _decode_dt(self, s: str) -> datetime:
        return datetime.fromisoformat(s.replace("Z", "+00:00")).astimezone(timezone.utc)

    def _to_row(self, account: Account) -> dict:
        return {
            "account_number": str(account.account_number),
            "owner_name": account.owner_name,
            "balance": str(account.balance),
            "opened_at": self._encode_dt(account.opened_at),
        }

    def _from_row(self, row) -> Account:
        return Account(
            account_number=AccountNumber(row["account_number"]),
            owner_name=row["owner_name"],
            balance=Decimal(row["balance"]),
            opened_at=self._decode_dt(row["opened_at"]),
        )

    def add(self, account: Account) -> None:
        stmt = db.insert(self.accounts).values(**self._to_row(account))
        try:
            with self.engine.begin() as conn:
                conn.execute(stmt)
        except IntegrityError:
            # konflikt PK
            raise AccountAlreadyExistsError(account.account_number)
        except OSError as e:
            raise DomainError(str(e))

    def get(self, account_number: AccountNumber) -> Account | None:
        stmt = db.select(self.accounts).where(self.accounts.c.account_number == str(account_number))
        try:
            with self.engine.connect() as conn:
                row = conn.execute(stmt).mappings().first()
        except OSError as e:
            raise DomainError(str(e))
        return self._from_row(row) if row is not None else None

    def exists(self, account_number: AccountNumber) -> bool:
        stmt = (
            db.select(db.literal(1))
            .select_from(self.accounts)
            .where(self.accounts.c.account_number == str(account_number))
            .limit(1)
        )
        try:
            with self.engine.connect() as conn:
                return conn.execute(stmt).first() is not None
        except OSError as e:
            raise DomainError(str(e))

    def count_all(self) -> int:
        stmt = db.select(db.func.count()).select_from(self.accounts)
        try:
            with self.engine.connect() as conn:
                return int(conn.execute(stmt).scalar_one())
        except OSError as e:
            raise DomainError(str(e))

    def list_all(
        self,
        *,
        limit: int | None = None,
        offset: int | None = None,
        order_by: str | None = None,
    ) -> list[Account]:
        order = order_by or "opened_at"
        offset = offset or 0

        if order not in {"opened_at", "owner_name"}:
            raise AccountValidationError("order_by", f"Nieobsługiwane pole: {order}")

        if offset < 0 or (limit is not None and limit <= 0):
            raise AccountValidationError("pagination", "Offset >= 0, limit > 0")

        # sortowanie stabilne: ASC + tie-breaker po account_number
        if order == "owner_name":
            ordering = (self.accounts.c.owner_name.asc(), self.accounts.c.account_number.asc())
        else:
            ordering = (self.accounts.c.opened_at.asc(), self.accounts.c.account_number.asc())

        stmt = db.select(self.accounts).order_by(*ordering)
        if offset:
            stmt = stmt.offset(int(offset))
        if limit is not None:
            stmt = stmt.limit(int(limit))

        try:
            with self.engine.connect() as conn:
                rows = conn.execute(stmt).mappings().all()
                return [self._from_row(r) for r in rows]
        except OSError as e:
            raise DomainError(str(e))
