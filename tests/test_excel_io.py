import pandas as pd

from basket_miner.rule_mining.itemsets import mine_frequent_itemsets
from basket_miner.rule_mining.model import RuleSet
from basket_miner.rule_mining.rules import generate_rules
from basket_miner.utils.excel_io import (
    format_rule_for_excel,
    save_experiment_results,
    save_rule_mining_results,
    save_rules_text
)


def mine(store):
    itemsets = mine_frequent_itemsets(store, min_support=0.5)
    return itemsets, generate_rules(itemsets, store, min_confidence=0.5)


def test_format_rule_for_excel(grocery_store):
    _, rules = mine(grocery_store)
    row = format_rule_for_excel(rules[0])
    assert row['antecedent'] == 'bread'
    assert row['consequent'] == 'butter'
    assert row['confidence'] == rules[0].confidence


def test_format_rule_dict_with_several_items():
    row = format_rule_for_excel({'antecedent': ['a', 'b'], 'consequent': frozenset({'c'}), 'lift': 2.0})
    assert row['antecedent'] == 'a AND b'
    assert row['consequent'] == 'c'


def test_save_rule_mining_results(grocery_store, tmp_path):
    itemsets, rules = mine(grocery_store)

    path = save_rule_mining_results(
        rules,
        {'num_rules': len(rules), 'length_distribution': {2: 4}},
        tmp_path / 'results',
        parameters={'min_support': 0.5},
        metadata={'dataset': 'groceries'},
        itemsets=itemsets
    )

    assert path.suffix == '.xlsx'
    sheets = pd.read_excel(path, sheet_name=None)
    assert list(sheets) == ['Rules', 'Itemsets', 'Summary', 'Parameters']
    assert len(sheets['Rules']) == 4
    assert len(sheets['Itemsets']) == 5
    assert 'dataset' in set(sheets['Summary']['Metric'])


def test_save_without_rules_still_writes_summary(tmp_path):
    path = save_rule_mining_results(RuleSet(), {'num_rules': 0}, tmp_path / 'empty.xlsx')
    assert list(pd.read_excel(path, sheet_name=None)) == ['Summary']


def test_save_experiment_results_skips_empty_sheets(tmp_path):
    path = save_experiment_results(tmp_path / 'exp', {
        'Rules': [{'a': 1}],
        'Nothing': [],
        'A very long sheet name that Excel would reject': {'k': 'v'},
        'Frame': pd.DataFrame({'x': [1, 2]})
    })
    names = list(pd.read_excel(path, sheet_name=None))
    assert names == ['Rules', 'A very long sheet name that Exc', 'Frame']


def test_save_rules_text(grocery_store, tmp_path):
    _, rules = mine(grocery_store)
    path = save_rules_text(rules, tmp_path / 'rules', metadata={'dataset': 'groceries'})

    text = path.read_text(encoding='utf-8')
    assert path.suffix == '.txt'
    assert 'IF milk' in text
    assert 'THEN bread' in text
    assert 'Total rules: 4' in text
    assert 'Conviction' in text


def test_save_rules_text_empty(tmp_path):
    path = save_rules_text([], tmp_path / 'none.txt')
    assert 'No rules found.' in path.read_text(encoding='utf-8')
