"""
Grouping and summaries of parsed transactions.

Transactions are grouped per account (IBAN). Every group carries summary
statistics that are recomputed whenever the group changes.
"""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Tuple

import pandas as pd

from ekstre.parsers.bank.models import Transaction, UNKNOWN_IBAN

ZERO = Decimal("0")


@dataclass(frozen=True)
class StatsSummary:
    """Totals for a set of transactions."""
    total_income: Decimal = ZERO
    total_expense: Decimal = ZERO
    net_amount: Decimal = ZERO
    transaction_count: int = 0
    avg_transaction: Decimal = ZERO
    date_range: Tuple[Optional[date], Optional[date]] = (None, None)


@dataclass
class AccountTransactions:
    """All transactions of one account."""
    iban: str
    bank_type: str = "unknown"
    transactions: List[Transaction] = field(default_factory=list)
    stats: StatsSummary = field(default_factory=StatsSummary)


@dataclass(frozen=True)
class FilterOptions:
    """Transaction list filter; all criteria are combined."""
    type: str = "all"  # all, income, expense
    date_from: Optional[date] = None
    date_to: Optional[date] = None
    search_term: Optional[str] = None


@dataclass(frozen=True)
class MonthlyData:
    month: str  # YYYY-MM
    income: Decimal
    expense: Decimal
    net: Decimal


def calculate_stats(transactions: Iterable[Transaction]) -> StatsSummary:
    """
    Summarise transactions.

    Non-positive amounts count towards total_expense (as absolute values).
    The average is the net amount divided by the number of transactions.
    """
    total_income = ZERO
    total_expense = ZERO
    count = 0
    min_date = None
    max_date = None

    for txn in transactions:
        count += 1
        if txn.amount > 0:
            total_income += txn.amount
        else:
            total_expense += abs(txn.amount)

        if txn.date:
            if min_date is None or txn.date < min_date:
                min_date = txn.date
            if max_date is None or txn.date > max_date:
                max_date = txn.date

    net_amount = total_income - total_expense
    return StatsSummary(
        total_income=total_income,
        total_expense=total_expense,
        net_amount=net_amount,
        transaction_count=count,
        avg_transaction=net_amount / count if count else ZERO,
        date_range=(min_date, max_date),
    )


def organize_by_iban(transactions: Iterable[Transaction]) -> Dict[str, AccountTransactions]:
    """
    Group transactions by IBAN, keeping first-seen account order.

    Every transaction is kept, including repeated ids; use merge_by_iban to
    add transactions with deduplication.
    """
    result: Dict[str, AccountTransactions] = {}

    for txn in transactions:
        iban = txn.iban or UNKNOWN_IBAN
        if iban not in result:
            result[iban] = AccountTransactions(iban=iban, bank_type=txn.bank_type or "unknown")
        result[iban].transactions.append(txn)

    for account in result.values():
        account.stats = calculate_stats(account.transactions)

    return result


def merge_by_iban(
    existing: Dict[str, AccountTransactions],
    new_transactions: Iterable[Transaction]
) -> Dict[str, AccountTransactions]:
    """
    Merge new transactions into grouped accounts.

    Transactions whose id is already present in their account are skipped.
    The input mapping is not modified.

    Returns:
        New mapping with recalculated stats
    """
    result = {
        iban: AccountTransactions(account.iban, account.bank_type, list(account.transactions))
        for iban, account in existing.items()
    }
    seen = {iban: {t.id for t in account.transactions} for iban, account in result.items()}

    for txn in new_transactions:
        iban = txn.iban or UNKNOWN_IBAN
        if iban not in result:
            result[iban] = AccountTransactions(iban=iban, bank_type=txn.bank_type or "unknown")
            seen[iban] = set()

        if txn.id in seen[iban]:
            continue
        seen[iban].add(txn.id)
        result[iban].transactions.append(txn)

    for account in result.values():
        account.stats = calculate_stats(account.transactions)

    return result


def filter_transactions(
    transactions: Iterable[Transaction],
    options: Optional[FilterOptions] = None
) -> List[Transaction]:
    """Apply type, date range and case-insensitive description search."""
    options = options or FilterOptions()
    term = (options.search_term or "").strip().lower()

    selected = []
    for txn in transactions:
        if options.type == "income" and not txn.amount > 0:
            continue
        if options.type == "expense" and not txn.amount < 0:
            continue
        if options.date_from and (txn.date is None or txn.date < options.date_from):
            continue
        if options.date_to and (txn.date is None or txn.date > options.date_to):
            continue
        if term and term not in txn.description.lower():
            continue
        selected.append(txn)

    return selected


def monthly_summary(transactions: Iterable[Transaction]) -> List[MonthlyData]:
    """Income, expense and net per calendar month, oldest month first."""
    months: Dict[str, List[Decimal]] = {}

    for txn in transactions:
        if not txn.date:
            continue
        key = f"{txn.date.year}-{txn.date.month:02d}"
        totals = months.setdefault(key, [ZERO, ZERO])
        if txn.amount > 0:
            totals[0] += txn.amount
        else:
            totals[1] += abs(txn.amount)

    return [
        MonthlyData(month=key, income=income, expense=expense, net=income - expense)
        for key, (income, expense) in sorted(months.items())
    ]


def transactions_to_dataframe(transactions: Iterable[Transaction]) -> pd.DataFrame:
    """Tabular view of transactions (one row each) for analysis and export."""
    columns = ['id', 'date', 'description', 'amount', 'balance', 'type', 'iban', 'bank_type']
    rows = [
        {
            'id': t.id,
            'date': t.date,
            'description': t.description,
            'amount': t.amount,
            'balance': t.balance,
            'type': t.type.value,
            'iban': t.iban,
            'bank_type': t.bank_type,
        }
        for t in transactions
    ]
    return pd.DataFrame(rows, columns=columns)
