"""
auth/store.py -- SQLAlchemy Core persistence layer for accounts.

Pattern: Repository + Data Mapper.
AccountStore is the repository; _row_to_record is the mapper. Service and
route code never touches SQL directly.

AccountStore satisfies the AccountLookup protocol consumed by
auth/service.py (get_by_id / get_by_email). create_account exists for seeding
and for the CLI; the authenticator itself never writes.

Security:
  All queries use bound parameters. No f-strings in SQL.

  email_address is lowercased on insert AND on lookup. Combined with the
  UNIQUE constraint this makes "Foo@Example.com" and "foo@example.com" the
  same account.

DB path: auth/credgate_accounts.db by default (see Settings.database_url).

Layer rule: no imports from api/ or core/.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, MetaData, String, Table, Text, create_engine, event
from sqlalchemy.engine import Engine

from auth.models import CredentialRecord

logger = logging.getLogger("credgate.store")

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

_metadata = MetaData()

_accounts = Table(
    "accounts",
    _metadata,
    Column("account_id", String(36), primary_key=True),  # UUID4 text
    Column("email_address", String(320), nullable=False, unique=True),  # always lowercase
    Column("password_hash", Text, nullable=False),  # self-describing PBKDF2 encoding
    Column("created_at", String(32), nullable=False),
)


# ---------------------------------------------------------------------------
# WAL mode
# ---------------------------------------------------------------------------


def _set_wal_mode(dbapi_conn, connection_record) -> None:
    """Enable WAL journal mode for concurrent read safety.

    Set per-connection because SQLite PRAGMAs are not inherited by new
    connections from the pool.
    """
    dbapi_conn.execute("PRAGMA journal_mode=WAL")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def normalize_email(email_address: str) -> str:
    """Return the canonical (trimmed, lowercase) form used for storage and lookup."""
    return email_address.strip().lower()


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class AccountStore:
    """Repository for CredentialRecord entities.

    Usage:
        store = AccountStore("sqlite:///accounts.db")
        account_id = store.create_account("user@example.com", hasher.hash_password("secret"))
        record = store.get_by_email("user@example.com")
        store.close()
    """

    def __init__(self, db_url: str) -> None:
        connect_args: dict = {}
        if db_url.startswith("sqlite"):
            connect_args["check_same_thread"] = False
        self.engine: Engine = create_engine(db_url, connect_args=connect_args)
        if db_url.startswith("sqlite"):
            event.listen(self.engine, "connect", _set_wal_mode)
        _metadata.create_all(self.engine)

    def has_accounts(self) -> bool:
        """Return True if at least one account exists. Used by the health check."""
        with self.engine.connect() as conn:
            row = conn.execute(_accounts.select().limit(1)).fetchone()
        return row is not None

    def create_account(self, email_address: str, password_hash: str) -> str:
        """Insert a new account and return its generated identifier.

        Raises sqlalchemy.exc.IntegrityError if the (normalized) email address
        already exists.
        """
        account_id = str(uuid.uuid4())
        with self.engine.connect() as conn:
            conn.execute(
                _accounts.insert().values(
                    account_id=account_id,
                    email_address=normalize_email(email_address),
                    password_hash=password_hash,
                    created_at=_now_iso(),
                )
            )
            conn.commit()
        logger.info("Created account %s", account_id)
        return account_id

    def get_by_id(self, account_id: str) -> CredentialRecord | None:
        """Look up an account by identifier. Returns None if not found."""
        with self.engine.connect() as conn:
            row = conn.execute(_accounts.select().where(_accounts.c.account_id == account_id)).fetchone()
        return _row_to_record(row) if row is not None else None

    def get_by_email(self, email_address: str) -> CredentialRecord | None:
        """Look up an account by email address (case-insensitive). Returns None if not found."""
        with self.engine.connect() as conn:
            row = conn.execute(
                _accounts.select().where(_accounts.c.email_address == normalize_email(email_address))
            ).fetchone()
        return _row_to_record(row) if row is not None else None

    def close(self) -> None:
        self.engine.dispose()


# ---------------------------------------------------------------------------
# Row mappers (Data Mapper pattern)
# ---------------------------------------------------------------------------


def _row_to_record(row) -> CredentialRecord:
    return CredentialRecord(
        account_id=row.account_id,
        email_address=row.email_address,
        password_hash=row.password_hash,
        created_at=row.created_at,
    )
