"""
Rule Mining Module

Supports:
- Frequent itemset mining (native Apriori, MLxtend Apriori / FP-Growth)
- Association rule mining with appearance restrictions
"""
from .model import Itemset, Rule, RuleSet
from .itemsets import mine_frequent_itemsets, apriori_gen
from .rules import generate_rules
from .appearance import Appearance
from .apriori_miner import AprioriMiner
from .mlxtend_miner import MLxtendMiner

__all__ = [
    'Itemset', 'Rule', 'RuleSet',
    'mine_frequent_itemsets', 'apriori_gen', 'generate_rules',
    'Appearance', 'AprioriMiner', 'MLxtendMiner'
]
