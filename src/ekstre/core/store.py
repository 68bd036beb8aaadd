"""
SQLite persistence for imported transactions.

Transactions are stored as JSON documents keyed by their id, so importing
the same statement twice (or overlapping statements) never duplicates a
transaction. Records are validated and migrated when they are read back.
"""

import json
import logging
import sqlite3
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Iterable, List, Optional, Union

from ekstre.parsers.bank.models import Transaction
from ekstre.parsers.bank.schema import (
    migrate_transaction,
    validate_transaction,
    validate_transaction_schema,
)

logger = logging.getLogger(__name__)

IN_MEMORY = ":memory:"


@dataclass
class StoreResult:
    """Outcome of adding a batch of transactions."""
    added: int = 0
    duplicates: int = 0
    errors: List[str] = field(default_factory=list)


class TransactionStore:
    """
    Deduplicating transaction store.

    Usage:
        with TransactionStore("ekstre.db") as store:
            outcome = store.add_transactions(result.transactions, result.bank_type)
            print(outcome.added, outcome.duplicates)
    """

    def __init__(self, db_path: Union[str, Path] = IN_MEMORY):
        self.db_path = str(db_path)
        self.conn = sqlite3.connect(self.db_path)
        self.conn.row_factory = sqlite3.Row
        self._ensure_schema()

    def _ensure_schema(self) -> None:
        self.conn.execute("""
            CREATE TABLE IF NOT EXISTS transactions (
                id TEXT PRIMARY KEY,
                iban TEXT NOT NULL,
                bank_type TEXT,
                txn_date TEXT,
                data TEXT NOT NULL,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        """)

        self.conn.execute("""
            CREATE INDEX IF NOT EXISTS idx_transactions_iban
            ON transactions(iban)
        """)

        self.conn.commit()

    def add_transactions(
        self,
        transactions: Iterable[Transaction],
        bank_type: Optional[str] = None
    ) -> StoreResult:
        """
        Store transactions, skipping ids that are already stored.

        Args:
            transactions: Parsed transactions
            bank_type: Tag applied to transactions that carry none

        Returns:
            StoreResult with added and duplicate counts and rejected records
        """
        result = StoreResult()

        # One transaction per batch: an exception rolls back every insert
        with self.conn:
            for txn in transactions:
                if bank_type and not txn.bank_type:
                    txn = replace(txn, bank_type=bank_type)

                if not validate_transaction(txn):
                    result.errors.append(f"Invalid transaction {txn.id!r} rejected")
                    continue

                cursor = self.conn.execute("""
                    INSERT OR IGNORE INTO transactions (id, iban, bank_type, txn_date, data)
                    VALUES (?, ?, ?, ?, ?)
                """, (
                    txn.id,
                    txn.iban,
                    txn.bank_type,
                    txn.date.isoformat(),
                    json.dumps(txn.to_dict(), ensure_ascii=False),
                ))

                if cursor.rowcount:
                    result.added += 1
                else:
                    result.duplicates += 1

        logger.info(
            f"Stored {result.added} transactions "
            f"({result.duplicates} duplicates, {len(result.errors)} rejected)"
        )
        return result

    def get_transactions(self, iban: Optional[str] = None) -> List[Transaction]:
        """
        Load stored transactions, oldest first.

        Records that fail validation are migrated; records that cannot be
        migrated are skipped.
        """
        if iban is None:
            cursor = self.conn.execute(
                "SELECT id, data FROM transactions ORDER BY txn_date, rowid"
            )
        else:
            cursor = self.conn.execute(
                "SELECT id, data FROM transactions WHERE iban = ? ORDER BY txn_date, rowid",
                (iban,)
            )

        transactions = []
        for row in cursor.fetchall():
            try:
                record = json.loads(row["data"])
            except ValueError as e:
                logger.warning(f"Skipping unreadable transaction {row['id']}: {e}")
                continue

            validation = validate_transaction_schema(record)
            if not validation.is_valid:
                logger.warning(f"Transaction {row['id']}: {', '.join(validation.errors)}")

            txn = migrate_transaction(record)
            if txn is None:
                logger.warning(f"Discarding transaction {row['id']}: cannot be migrated")
                continue
            transactions.append(txn)

        return transactions

    def get_ibans(self) -> List[str]:
        """Distinct account IBANs in first-import order."""
        cursor = self.conn.execute(
            "SELECT iban FROM transactions GROUP BY iban ORDER BY MIN(rowid)"
        )
        return [row["iban"] for row in cursor.fetchall()]

    def count(self) -> int:
        cursor = self.conn.execute("SELECT COUNT(*) FROM transactions")
        return cursor.fetchone()[0]

    def clear(self) -> None:
        """Delete every stored transaction."""
        self.conn.execute("DELETE FROM transactions")
        self.conn.commit()
        logger.info("Cleared transaction store")

    def close(self) -> None:
        self.conn.close()

    def __enter__(self) -> "TransactionStore":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
