"""
Transaction store: an immutable, caller-owned view of a transaction database.

Transactions are kept as frozensets of items next to a boolean incidence
matrix (one column per item). Each column is the inverted index of one item,
so the support count of an itemset is the number of rows where all of its
columns are set.
"""
import logging
import os
from concurrent.futures import ThreadPoolExecutor
from numbers import Number
from typing import Any, Dict, FrozenSet, Hashable, Iterable, List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from basket_miner.errors import EmptyDatasetError, InvalidParameterError

logger = logging.getLogger(__name__)

Item = Hashable
Encoded = Tuple[int, ...]


def item_sort_key(item: Item) -> Tuple[int, Any, str]:
    """Total order over items: numbers first (numeric order), then everything else by text."""
    if isinstance(item, Number) and not isinstance(item, bool):
        return 0, item, ''
    return 1, 0, str(item)


def resolve_n_jobs(n_jobs: int) -> int:
    if n_jobs == -1:
        return os.cpu_count() or 1
    if n_jobs is None or n_jobs < 1:
        raise InvalidParameterError(f"n_jobs must be a positive integer or -1, got {n_jobs}")
    return n_jobs


class TransactionStore:
    """
    Immutable transaction database with support counting.

    Build it with :meth:`load` (sequence of item collections) or
    :meth:`from_frame` (one-hot encoded DataFrame).
    """

    def __init__(self, transactions: Tuple[FrozenSet[Item], ...], items: Tuple[Item, ...]):
        self._transactions = transactions
        self._items = items
        self._index: Dict[Item, int] = {item: i for i, item in enumerate(items)}

        matrix = np.zeros((len(transactions), len(items)), dtype=bool, order='F')
        for row, transaction in enumerate(transactions):
            if transaction:
                matrix[row, [self._index[item] for item in transaction]] = True
        matrix.setflags(write=False)
        self._matrix = matrix

    @classmethod
    def load(cls, transactions: Iterable[Iterable[Item]]) -> 'TransactionStore':
        """
        Build a store from a sequence of transactions.

        Args:
            transactions: Iterable of item collections (duplicates collapse)

        Raises:
            EmptyDatasetError: If there are no transactions
        """
        frozen = tuple(frozenset(t) for t in transactions)
        if not frozen:
            raise EmptyDatasetError("Cannot build a transaction store from zero transactions")

        universe = set().union(*frozen)
        items = tuple(sorted(universe, key=item_sort_key))
        store = cls(frozen, items)
        logger.debug("Loaded %d transactions over %d items", len(frozen), len(items))
        return store

    @classmethod
    def from_frame(cls, df: pd.DataFrame) -> 'TransactionStore':
        """Build a store from a one-hot encoded DataFrame (columns are items, cells truthy/falsy)."""
        if df.empty and len(df.index) == 0:
            raise EmptyDatasetError("Cannot build a transaction store from an empty DataFrame")
        values = df.fillna(False).astype(bool).to_numpy()
        columns = list(df.columns)
        transactions = [
            [columns[j] for j in np.flatnonzero(row)]
            for row in values
        ]
        return cls.load(transactions)

    # ------------------------------------------------------------------
    # Basic properties
    # ------------------------------------------------------------------

    @property
    def items(self) -> Tuple[Item, ...]:
        """All items, in the store's fixed total order."""
        return self._items

    @property
    def n_transactions(self) -> int:
        return len(self._transactions)

    @property
    def transactions(self) -> Tuple[FrozenSet[Item], ...]:
        return self._transactions

    def __len__(self) -> int:
        return len(self._transactions)

    def __iter__(self):
        return iter(self._transactions)

    def __contains__(self, item: Item) -> bool:
        return item in self._index

    # ------------------------------------------------------------------
    # Encoding between items and column indices
    # ------------------------------------------------------------------

    def encode(self, itemset: Iterable[Item]) -> Optional[Encoded]:
        """Sorted column indices of an itemset, or None if any item is unknown."""
        cols = []
        for item in itemset:
            col = self._index.get(item)
            if col is None:
                return None
            cols.append(col)
        return tuple(sorted(set(cols)))

    def decode(self, encoded: Encoded) -> FrozenSet[Item]:
        return frozenset(self._items[col] for col in encoded)

    # ------------------------------------------------------------------
    # Support counting
    # ------------------------------------------------------------------

    def support_count(self, itemset: Iterable[Item]) -> int:
        """Number of transactions containing every item of ``itemset``."""
        encoded = self.encode(itemset)
        if encoded is None:
            return 0
        return int(self._count_shard([encoded], slice(None))[0])

    def support(self, itemset: Iterable[Item]) -> float:
        return self.support_count(itemset) / self.n_transactions

    def count_candidates(self, candidates: Sequence[Iterable[Item]], n_jobs: int = 1) -> List[int]:
        """
        Support counts for several itemsets at once.

        Args:
            candidates: Itemsets to count
            n_jobs: Number of transaction shards counted in parallel (-1 for all cores)
        """
        encoded = [self.encode(c) for c in candidates]
        known = [e for e in encoded if e is not None]
        counts = iter(self.count_encoded(known, n_jobs=n_jobs))
        return [0 if e is None else int(next(counts)) for e in encoded]

    def count_encoded(self, candidates: Sequence[Encoded], n_jobs: int = 1) -> np.ndarray:
        """
        Support counts for column-encoded candidates.

        With ``n_jobs > 1`` the transaction rows are split into contiguous
        shards, each shard is counted in a worker thread and the per-shard
        counts are summed by the caller.
        """
        n_jobs = resolve_n_jobs(n_jobs)
        if not candidates:
            return np.zeros(0, dtype=np.int64)

        n_shards = min(n_jobs, self.n_transactions)
        if n_shards <= 1:
            return self._count_shard(candidates, slice(None))

        bounds = np.linspace(0, self.n_transactions, n_shards + 1, dtype=int)
        shards = [slice(start, stop) for start, stop in zip(bounds[:-1], bounds[1:]) if stop > start]

        with ThreadPoolExecutor(max_workers=len(shards)) as executor:
            partials = list(executor.map(lambda rows: self._count_shard(candidates, rows), shards))

        return np.sum(partials, axis=0)

    def _count_shard(self, candidates: Sequence[Encoded], rows: slice) -> np.ndarray:
        block = self._matrix[rows]
        counts = np.empty(len(candidates), dtype=np.int64)
        for i, cols in enumerate(candidates):
            if not cols:
                counts[i] = block.shape[0]
            elif len(cols) == 1:
                counts[i] = np.count_nonzero(block[:, cols[0]])
            else:
                counts[i] = np.count_nonzero(block[:, list(cols)].all(axis=1))
        return counts

    # ------------------------------------------------------------------
    # Tabular views
    # ------------------------------------------------------------------

    def item_frequency(self, relative: bool = True) -> pd.Series:
        """Per-item support, most frequent first (ties keep the item order)."""
        counts = self._matrix.sum(axis=0)
        freq = pd.Series(counts, index=pd.Index(self._items, dtype=object), name='frequency')
        if relative:
            freq = freq / self.n_transactions
            freq.name = 'support'
        return freq.sort_values(ascending=False, kind='mergesort')

    def to_frame(self) -> pd.DataFrame:
        """One-hot encoded view (rows are transactions, columns are items)."""
        return pd.DataFrame(np.array(self._matrix), columns=list(self._items))

    def __repr__(self):
        return f"TransactionStore(n_transactions={self.n_transactions}, n_items={len(self._items)})"


def load(transactions: Iterable[Iterable[Item]]) -> TransactionStore:
    """Build a :class:`TransactionStore`; raises EmptyDatasetError for zero transactions."""
    return TransactionStore.load(transactions)
