"""
Rule Mining Experiment: Retail Baskets

Mines association rules from a basket-format retail dataset, removes
redundant rules, and looks at the rules around a few focus items
(what leads to buying them, and what buying them leads to).
"""
import logging
from datetime import datetime
from pathlib import Path

from basket_miner.postprocessing.rule import (
    filter_redundant,
    restrict_appearance,
    summarize_rules,
    top_n
)
from basket_miner.rule_mining.apriori_miner import AprioriMiner
from basket_miner.transactions.loading import read_transactions
from basket_miner.transactions.store import TransactionStore
from basket_miner.utils.excel_io import format_rule_for_excel, save_experiment_results, save_rules_text
from basket_miner.utils.log import setup_logging

setup_logging(logging.INFO)

# =============================================================================
# CONFIGURATION
# =============================================================================

DATA_PATH = "../../data/raw/groceries.csv"
OUTPUT_DIR = "../../out/retail_rules"

# Items whose incoming / outgoing rules are inspected separately
FOCUS_ITEMS = ['whole milk', 'other vegetables', 'yogurt']

APRIORI_CONFIG = {
    'min_support': 0.001,
    'min_confidence': 0.8,
    'min_len': 2,
    'max_len': 10,
    'strategy': 'exhaustive'
}

TOP_N = 10
SORT_BY = 'lift'


# =============================================================================
# EXPERIMENT
# =============================================================================

def run_experiment():
    print("=" * 70)
    print("RETAIL RULE MINING EXPERIMENT")
    print("=" * 70)

    # Load data
    print("\n[1] Loading data...")
    store = TransactionStore.load(read_transactions(DATA_PATH, format='basket'))
    print(f"  Transactions: {store.n_transactions}")
    print(f"  Items: {len(store.items)}")

    frequency = store.item_frequency()
    print("  Most frequent items:")
    for item, support in frequency.head(TOP_N).items():
        print(f"    {item:30s} {support:.4f}")

    # Mine rules
    print("\n[2] Mining rules...")
    miner = AprioriMiner(**APRIORI_CONFIG)
    rules, stats = miner.mine_rules(store)
    print(f"  Mined: {len(rules)} rules from {stats['num_itemsets']} itemsets "
          f"in {stats['execution_time']:.2f}s")

    # Redundancy
    print("\n[3] Removing redundant rules...")
    rules, redundant = filter_redundant(rules)
    print(f"  Kept {len(rules)} rules, removed {len(redundant)} redundant")

    summary = summarize_rules(rules)
    print(f"  Rule lengths: {summary['length_distribution']}")
    print(f"  Lift range: {summary['min_lift']:.2f} - {summary['max_lift']:.2f}")

    print(f"\n  Top {TOP_N} by {SORT_BY}:")
    best = top_n(rules, TOP_N, sort_key=SORT_BY)
    for rule in best:
        print(f"    {rule}")

    # Focus items
    print("\n[4] Rules around focus items...")
    focus_results = []
    for item in FOCUS_ITEMS:
        leads_to = restrict_appearance(rules, rhs_allowed=[item])
        follows = restrict_appearance(rules, lhs_allowed=[item])
        print(f"  {item}: {len(leads_to)} rules lead to it, {len(follows)} follow from it")
        focus_results.append({
            'item': item,
            'support': float(frequency.get(item, 0.0)),
            'rules_to_item': len(leads_to),
            'rules_from_item': len(follows),
            'best_rule_to_item': str(top_n(leads_to, 1, sort_key=SORT_BY)[0]) if leads_to else '',
        })

    # Save results
    print(f"\n{'=' * 70}")
    print("SAVING RESULTS")
    print("=" * 70)

    output_path = Path(OUTPUT_DIR)
    output_path.mkdir(parents=True, exist_ok=True)

    timestamp = datetime.now().strftime('%Y%m%d_%H%M%S')
    filename = f"{timestamp}_retail_rules_experiment"

    params = {
        'data_path': DATA_PATH,
        'focus_items': str(FOCUS_ITEMS),
        'top_n': TOP_N,
        'sort_by': SORT_BY,
        **APRIORI_CONFIG,
        'timestamp': datetime.now().isoformat()
    }

    save_experiment_results(
        output_path=output_path / filename,
        sheets={
            'Rules': [format_rule_for_excel(r) for r in rules],
            'Redundant Rules': [format_rule_for_excel(r) for r in redundant],
            'Item Frequency': frequency.rename_axis('item').reset_index(),
            'Focus Items': focus_results,
            'Summary': {**summary, **{f"miner_{key}": value for key, value in stats.items()}},
            'Parameters': params
        }
    )
    save_rules_text(best, output_path / f"{filename}_top", title=f"TOP {TOP_N} RULES BY {SORT_BY.upper()}",
                    metadata={'dataset': DATA_PATH, 'transactions': store.n_transactions})

    print(f"\nTotal rules: {len(rules)}")
    print(f"Output: {output_path / filename}.xlsx")
    print("=" * 70)


if __name__ == '__main__':
    run_experiment()
