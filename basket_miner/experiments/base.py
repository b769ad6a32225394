import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Sequence, Tuple

from basket_miner.postprocessing.rule import (
    ITEMSET_METRICS,
    RULE_METRICS,
    filter_itemsets,
    filter_redundant,
    filter_rules,
    top_n
)
from basket_miner.rule_mining.apriori_miner import AprioriMiner
from basket_miner.rule_mining.mlxtend_miner import MLxtendMiner
from basket_miner.rule_mining.model import RuleSet
from basket_miner.transactions.loading import read_transactions
from basket_miner.transactions.store import TransactionStore
from basket_miner.utils.excel_io import save_rule_mining_results

from .config import DataConfig, ExperimentConfig, FilterConfig, RuleMiningConfig

logger = logging.getLogger(__name__)


def load_data(config: DataConfig) -> TransactionStore:
    transactions = read_transactions(
        config.path,
        format=config.format,
        sep=config.sep,
        **config.reader_kwargs()
    )
    store = TransactionStore.load(transactions)
    logger.info("Loaded dataset '%s': %r", config.name, store)
    return store


def create_miner(config: RuleMiningConfig):
    miner_type = config.miner_type.lower()
    cfg = config.miner_config
    appearance = config.appearance.build() if config.appearance else None

    if miner_type == 'apriori':
        return AprioriMiner(
            min_support=cfg.min_support,
            min_confidence=cfg.min_confidence,
            min_len=cfg.min_len,
            max_len=cfg.max_len,
            strategy=cfg.strategy,
            n_jobs=cfg.n_jobs,
            time_limit=cfg.time_limit,
            appearance=appearance
        )

    elif miner_type == 'mlxtend':
        return MLxtendMiner(
            algorithm=cfg.algorithm,
            min_support=cfg.min_support,
            min_confidence=cfg.min_confidence,
            min_len=cfg.min_len,
            max_len=cfg.max_len,
            appearance=appearance
        )

    else:
        raise ValueError(f"Unknown miner type: {miner_type}")


def apply_filters(data: Sequence, filters: List[FilterConfig], mode: str = 'rules'):
    if not filters:
        return data

    result = data
    for f in filters:
        if mode == 'rules':
            result = filter_rules(result, criterion=f.metric, threshold=f.threshold)
        else:
            result, _ = filter_itemsets(result, criterion=f.metric, threshold=f.threshold)

    return result


def postprocess_rules(rules: RuleSet, config: RuleMiningConfig) -> Tuple[RuleSet, Dict[str, Any]]:
    stats = {}
    # itemset-only metrics were already applied to the itemsets
    rule_filters = [f for f in config.filters if f.metric in RULE_METRICS or f.metric not in ITEMSET_METRICS]
    rules = apply_filters(rules, rule_filters, mode='rules')

    if config.remove_redundant:
        rules, redundant = filter_redundant(rules)
        stats['num_redundant'] = len(redundant)

    if config.top_n is not None:
        rules = top_n(rules, config.top_n, sort_key=config.sort_by)

    return rules, stats


def run_rule_mining(store: TransactionStore, config: RuleMiningConfig) -> Tuple[Dict[str, Any], Dict[str, Any]]:
    """
    Mine itemsets and/or rules according to ``config.mode``.

    Returns:
        Tuple of (results, stats) where results has 'itemsets' and/or 'rules'
    """
    if config.mode not in ('rules', 'itemsets', 'both'):
        raise ValueError(f"Unknown mode: {config.mode}")

    miner = create_miner(config)
    mode = config.mode

    results = {}
    stats = {}

    mined = None
    if mode in ['itemsets', 'both']:
        mined, itemset_stats = miner.mine_itemsets(store)
        itemsets = apply_filters(mined, [f for f in config.filters if f.metric in ITEMSET_METRICS],
                                 mode='itemsets')
        results['itemsets'] = itemsets
        stats['itemsets'] = itemset_stats
        stats['itemsets']['count'] = len(itemsets)

    if mode in ['rules', 'both']:
        # reuse the unfiltered itemsets instead of searching twice
        rules, rule_stats = miner.mine_rules(store, itemsets=mined)
        if mined is not None and 'stopped_early' in stats['itemsets']:
            rule_stats['stopped_early'] = stats['itemsets']['stopped_early']
        rules, post_stats = postprocess_rules(rules, config)
        results['rules'] = rules
        stats['rules'] = {**rule_stats, **post_stats}
        stats['rules']['count'] = len(rules)

    return results, stats


def generate_output_filename(
    experiment_name: str,
    miner_type: str,
    mode: str,
    dataset_name: str
) -> str:
    timestamp = datetime.now().strftime('%Y%m%d_%H%M%S')
    return f"{timestamp}_{experiment_name}_{miner_type}_{mode}_{dataset_name}"


def run_experiment(config: ExperimentConfig) -> Path:
    """Load the dataset, mine it and write the results workbook. Returns the workbook path."""
    store = load_data(config.data)
    results, stats = run_rule_mining(store, config.rule_mining)

    rules = results.get('rules', RuleSet())
    flat_stats = {}
    for section, values in stats.items():
        for key, value in values.items():
            flat_stats[f"{section}_{key}"] = value

    filename = generate_output_filename(
        config.name, config.rule_mining.miner_type, config.rule_mining.mode, config.data.name
    )
    return save_rule_mining_results(
        rules,
        flat_stats,
        config.get_output_path() / filename,
        parameters=config.rule_mining.to_dict(),
        metadata={
            'dataset': config.data.name,
            'n_transactions': store.n_transactions,
            'n_items': len(store.items),
            'timestamp': datetime.now().isoformat()
        },
        itemsets=results.get('itemsets')
    )
