"""
Association rule mining for retail transaction data.

Typical use::

    store = load(transactions)
    itemsets = mine_frequent_itemsets(store, min_support=0.01, max_len=4)
    rules = generate_rules(itemsets, store, min_confidence=0.5)
    rules, redundant = filter_redundant(rules)
    best = top_n(rules, 10, sort_key='lift')
"""
from .errors import MiningError, EmptyDatasetError, InvalidParameterError, MiningCancelledError
from .transactions import TransactionStore, load
from .rule_mining import (
    Itemset,
    Rule,
    RuleSet,
    Appearance,
    mine_frequent_itemsets,
    generate_rules,
    AprioriMiner,
    MLxtendMiner
)
from .postprocessing import filter_redundant, restrict_appearance, top_n

__version__ = '0.1.0'

__all__ = [
    'MiningError', 'EmptyDatasetError', 'InvalidParameterError', 'MiningCancelledError',
    'TransactionStore', 'load',
    'Itemset', 'Rule', 'RuleSet', 'Appearance',
    'mine_frequent_itemsets', 'generate_rules',
    'AprioriMiner', 'MLxtendMiner',
    'filter_redundant', 'restrict_appearance', 'top_n'
]
