from itertools import combinations

import numpy as np
import pytest

from basket_miner.transactions.store import TransactionStore

GROCERIES = [
    {'milk', 'bread'},
    {'milk', 'bread', 'butter'},
    {'milk'},
    {'bread', 'butter'},
]


def make_random_transactions(n_transactions=50, n_items=8, seed=7):
    """Reproducible baskets where item i appears with a decreasing probability."""
    rng = np.random.default_rng(seed)
    probabilities = np.linspace(0.7, 0.15, n_items)
    items = [f"item{i}" for i in range(n_items)]
    transactions = []
    for _ in range(n_transactions):
        mask = rng.random(n_items) < probabilities
        transactions.append({item for item, present in zip(items, mask) if present})
    return transactions


def brute_force_itemsets(transactions, min_support, max_len=None):
    """All frequent itemsets by direct enumeration: {frozenset: count}."""
    n = len(transactions)
    universe = sorted(set().union(*transactions))
    max_len = max_len or len(universe)
    found = {}
    for size in range(1, max_len + 1):
        for combo in combinations(universe, size):
            candidate = frozenset(combo)
            count = sum(1 for t in transactions if candidate <= t)
            if count / n >= min_support:
                found[candidate] = count
    return found


@pytest.fixture
def groceries():
    return [set(t) for t in GROCERIES]


@pytest.fixture
def grocery_store(groceries):
    return TransactionStore.load(groceries)


@pytest.fixture
def random_transactions():
    return make_random_transactions()


@pytest.fixture
def random_store(random_transactions):
    return TransactionStore.load(random_transactions)
