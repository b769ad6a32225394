import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Sequence, Union

import pandas as pd

from basket_miner.rule_mining.model import Itemset, Rule, sorted_items

logger = logging.getLogger(__name__)

RuleLike = Union[Rule, Dict[str, Any]]


def _xlsx_path(output_path: Union[str, Path]) -> Path:
    output_path = Path(output_path)
    if output_path.suffix != '.xlsx':
        output_path = output_path.with_suffix('.xlsx')
    output_path.parent.mkdir(parents=True, exist_ok=True)
    return output_path


def save_rule_mining_results(
    rules: Sequence[RuleLike],
    stats: Dict[str, Any],
    output_path: Union[str, Path],
    parameters: Dict[str, Any] = None,
    metadata: Dict[str, Any] = None,
    itemsets: Sequence[Itemset] = None
) -> Path:
    """
    Save rule mining results to Excel with multiple sheets.

    Sheets:
        - Rules: All mined rules with metrics
        - Itemsets: Frequent itemsets (if given)
        - Summary: Aggregate statistics
        - Parameters: Algorithm parameters used

    Args:
        rules: Rules (or rule dictionaries)
        stats: Statistics dictionary from mining
        output_path: Output file path (will add .xlsx if needed)
        parameters: Algorithm parameters used
        metadata: Additional metadata (dataset name, timestamp, etc.)
        itemsets: Frequent itemsets to include
    """
    output_path = _xlsx_path(output_path)

    with pd.ExcelWriter(output_path, engine='openpyxl') as writer:
        # Sheet 1: Rules
        if rules:
            rules_df = pd.DataFrame([format_rule_for_excel(r) for r in rules])
            rules_df.to_excel(writer, sheet_name='Rules', index=False)

        # Sheet 2: Itemsets
        if itemsets:
            itemsets_df = pd.DataFrame([
                {**i.to_dict(), 'items': _format_itemset(i.items)} for i in itemsets
            ])
            itemsets_df.to_excel(writer, sheet_name='Itemsets', index=False)

        # Sheet 3: Summary
        summary_data = {
            'Metric': list(stats.keys()),
            'Value': [_cell(v) for v in stats.values()]
        }
        if metadata:
            summary_data['Metric'].extend(list(metadata.keys()))
            summary_data['Value'].extend(_cell(v) for v in metadata.values())
        summary_df = pd.DataFrame(summary_data)
        summary_df.to_excel(writer, sheet_name='Summary', index=False)

        # Sheet 4: Parameters
        if parameters:
            params_df = pd.DataFrame({
                'Parameter': list(parameters.keys()),
                'Value': [str(v) for v in parameters.values()]
            })
            params_df.to_excel(writer, sheet_name='Parameters', index=False)

    logger.info("Results saved to: %s", output_path)
    return output_path


def save_experiment_results(
    output_path: Union[str, Path],
    sheets: Dict[str, Union[pd.DataFrame, List[Dict], Dict[str, Any]]]
) -> Path:
    """
    Generic function to save experiment results with custom sheets.

    Args:
        output_path: Output file path
        sheets: Dictionary mapping sheet names to data.
                Data can be:
                - pd.DataFrame: Written directly
                - List[Dict]: Converted to DataFrame
                - Dict[str, Any]: Converted to key-value DataFrame
    """
    output_path = _xlsx_path(output_path)

    with pd.ExcelWriter(output_path, engine='openpyxl') as writer:
        for sheet_name, data in sheets.items():
            if isinstance(data, pd.DataFrame):
                df = data
            elif isinstance(data, list) and data and isinstance(data[0], dict):
                df = pd.DataFrame(data)
            elif isinstance(data, dict):
                df = pd.DataFrame({
                    'Key': list(data.keys()),
                    'Value': [str(v) for v in data.values()]
                })
            else:
                continue

            # Excel limits sheet names to 31 chars
            safe_name = sheet_name[:31]
            df.to_excel(writer, sheet_name=safe_name, index=False)

    logger.info("Results saved to: %s", output_path)
    return output_path


def format_rule_for_excel(rule: RuleLike) -> Dict[str, Any]:
    """
    Format a rule for Excel output with human-readable antecedent/consequent.

    Sides become "item1 AND item2" strings, parseable by splitting on " AND ".
    """
    formatted = rule.to_dict() if isinstance(rule, Rule) else dict(rule)

    for key in ['antecedent', 'consequent']:
        if key in formatted:
            formatted[key] = _format_itemset(formatted[key])

    return formatted


def _format_itemset(val: Any) -> str:
    if isinstance(val, str):
        return val
    if isinstance(val, (set, frozenset)):
        val = sorted_items(val)
    if isinstance(val, (list, tuple)):
        return ' AND '.join(str(item) for item in val)
    return str(val)


def _cell(value: Any) -> Any:
    if isinstance(value, (dict, list, tuple, set, frozenset)):
        return str(value)
    return value


def save_rules_text(
    rules: Sequence[RuleLike],
    output_path: Union[str, Path],
    title: str = "MINED RULES",
    metadata: Dict[str, Any] = None
) -> Path:
    """
    Save rules in human-readable text format.

    Args:
        rules: Rules (or rule dictionaries)
        output_path: Output file path (will add .txt if needed)
        title: Title for the output file header
        metadata: Optional metadata to include in header
    """
    output_path = Path(output_path)
    if output_path.suffix != '.txt':
        output_path = output_path.with_suffix('.txt')
    output_path.parent.mkdir(parents=True, exist_ok=True)

    with open(output_path, 'w', encoding='utf-8') as f:
        f.write("=" * 80 + "\n")
        f.write(f"{title}\n")
        f.write(f"Generated: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}\n")
        if metadata:
            for key, val in metadata.items():
                f.write(f"{key}: {val}\n")
        f.write("=" * 80 + "\n\n")

        if not rules:
            f.write("No rules found.\n")
        else:
            for i, rule in enumerate(rules, 1):
                _write_rule(f, format_rule_for_excel(rule), i)

            f.write("=" * 80 + "\n")
            f.write(f"Total rules: {len(rules)}\n")
            f.write("=" * 80 + "\n")

    logger.info("Rules saved to: %s", output_path)
    return output_path


def _format_metric(value, decimals=4):
    if isinstance(value, (int, float)):
        return f"{value:.{decimals}f}"
    return str(value) if value is not None else "N/A"


def _write_rule(f, rule: Dict[str, Any], rule_num: int):
    f.write(f"Rule #{rule_num}:\n")
    f.write(f"  IF {rule.get('antecedent', 'N/A')}\n")
    f.write(f"  THEN {rule.get('consequent', 'N/A')}\n\n")
    f.write("  Metrics:\n")

    metrics = [
        ('support', 'Support'),
        ('confidence', 'Confidence'),
        ('lift', 'Lift'),
        ('leverage', 'Leverage'),
        ('conviction', 'Conviction'),
        ('zhangs_metric', "Zhang's Metric"),
    ]

    for key, label in metrics:
        if key in rule:
            f.write(f"    {label:18s} {_format_metric(rule[key])}\n")

    f.write("\n")
