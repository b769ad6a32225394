from .rule import (
    filter_rules,
    filter_rules_by_items,
    filter_itemsets,
    filter_redundant,
    is_redundant,
    restrict_appearance,
    top_n,
    summarize_rules
)

__all__ = [
    'filter_rules', 'filter_rules_by_items', 'filter_itemsets',
    'filter_redundant', 'is_redundant', 'restrict_appearance',
    'top_n', 'summarize_rules'
]
