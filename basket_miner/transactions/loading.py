"""
Readers that turn raw retail data into transactions.

Supported layouts:

1) Basket format, one transaction per line, items separated by ``sep``:
        milk,bread
        milk,bread,butter

2) Single format, one (transaction id, item) pair per row:
        transaction_id, item
        1, milk
        1, bread

3) Tabular records, one transaction per row with one attribute per column.
   Each non-missing cell becomes the item ``"<column>=<value>"``.
"""
import logging
from pathlib import Path
from typing import FrozenSet, Hashable, List, Union

import pandas as pd

logger = logging.getLogger(__name__)

TID_COLUMNS = ['transaction_id', 'tid', 'id', 'invoice', 'invoiceno', 'order_id']
ITEM_COLUMNS = ['item', 'items', 'product', 'products', 'description', 'category']


def read_basket(path: Union[str, Path], sep: str = ',', skip_header: bool = False) -> List[FrozenSet[str]]:
    """Read a basket-format file. Blank items are dropped, blank lines become empty transactions."""
    transactions = []
    with open(path, encoding='utf-8') as f:
        for line_no, line in enumerate(f):
            if skip_header and line_no == 0:
                continue
            line = line.rstrip('\r\n')
            items = {token.strip() for token in line.split(sep)}
            items.discard('')
            transactions.append(frozenset(items))

    # trailing empty line from the final newline is not a transaction
    while transactions and not transactions[-1]:
        transactions.pop()

    logger.info("Read %d basket transactions from %s", len(transactions), path)
    return transactions


def read_table(path: Union[str, Path], sep: str = ',', **kwargs) -> pd.DataFrame:
    """Read a csv, Excel or parquet file; ``sep`` applies to csv only."""
    path = Path(path)
    if path.suffix == '.csv':
        return pd.read_csv(path, sep=sep, **kwargs)
    elif path.suffix in ['.xlsx', '.xls']:
        return pd.read_excel(path, **kwargs)
    elif path.suffix == '.parquet':
        return pd.read_parquet(path, **kwargs)
    else:
        raise ValueError(f"Unsupported file format: {path.suffix}")


def _detect_column(df: pd.DataFrame, candidates: List[str], taken: Hashable = None) -> Hashable:
    """First column named like one of ``candidates``, else the first column other than ``taken``."""
    columns = [c for c in df.columns if c != taken]
    for c in columns:
        if str(c).strip().lower() in candidates:
            return c
    return columns[0]


def transactions_from_single(
    df: pd.DataFrame,
    tid_col: str = None,
    item_col: str = None
) -> List[FrozenSet[Hashable]]:
    """
    Group a long (transaction id, item) DataFrame into transactions.

    Column names are detected when not given. Without a recognised name the
    transaction id is the first column and the item the first remaining one.
    Transactions keep the order of their first appearance.
    """
    if len(df.columns) < 2:
        raise ValueError("Single format needs a transaction id column and an item column")

    tid_col = tid_col or _detect_column(df, TID_COLUMNS)
    item_col = item_col or _detect_column(df, ITEM_COLUMNS, taken=tid_col)
    if tid_col == item_col:
        raise ValueError(f"Transaction id and item must be different columns, got '{tid_col}' for both")

    pairs = df[[tid_col, item_col]].dropna()
    items = pairs[item_col]
    if items.dtype == object or pd.api.types.is_string_dtype(items):
        items = items.astype(str).str.strip()
        pairs = pairs.assign(**{item_col: items})
        pairs = pairs[pairs[item_col] != '']

    transactions = [
        frozenset(group[item_col])
        for _, group in pairs.groupby(tid_col, sort=False)
    ]
    logger.info("Grouped %d rows into %d transactions", len(pairs), len(transactions))
    return transactions


def read_single(
    path: Union[str, Path],
    tid_col: str = None,
    item_col: str = None,
    sep: str = ',',
    **kwargs
) -> List[FrozenSet[Hashable]]:
    return transactions_from_single(read_table(path, sep=sep, **kwargs), tid_col=tid_col, item_col=item_col)


def transactions_from_records(
    df: pd.DataFrame,
    exclude_cols: List[str] = None,
    separator: str = '='
) -> List[FrozenSet[str]]:
    """
    Convert tabular records into attribute-value transactions.

    Args:
        df: One transaction per row
        exclude_cols: Columns that do not produce items
        separator: Placed between column name and value in each item
    """
    exclude_cols = set(exclude_cols or [])
    columns = [c for c in df.columns if c not in exclude_cols]

    transactions = []
    for _, row in df[columns].iterrows():
        transaction = []
        for col in columns:
            value = row[col]
            # Skip NaN values
            if pd.notna(value):
                transaction.append(f"{col}{separator}{value}")
        transactions.append(frozenset(transaction))

    return transactions


def read_transactions(
    path: Union[str, Path],
    format: str = 'basket',
    sep: str = ',',
    **kwargs
) -> List[FrozenSet[Hashable]]:
    """
    Read transactions from disk.

    Args:
        path: Input file
        format: 'basket', 'single' or 'records'
        sep: Item separator for basket files, field separator for csv tables
        **kwargs: Passed to the format-specific reader
    """
    format = format.lower()
    if format == 'basket':
        return read_basket(path, sep=sep, **kwargs)
    elif format == 'single':
        return read_single(path, sep=sep, **kwargs)
    elif format == 'records':
        exclude_cols = kwargs.pop('exclude_cols', None)
        return transactions_from_records(read_table(path, sep=sep, **kwargs), exclude_cols=exclude_cols)
    else:
        raise ValueError(f"Unknown transaction format: {format}")
