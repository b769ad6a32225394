from .store import TransactionStore, load, item_sort_key
from .loading import (
    read_transactions,
    read_basket,
    read_single,
    transactions_from_single,
    transactions_from_records
)

__all__ = [
    'TransactionStore', 'load', 'item_sort_key',
    'read_transactions', 'read_basket', 'read_single',
    'transactions_from_single', 'transactions_from_records'
]
