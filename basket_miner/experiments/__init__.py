from .config import (
    DataConfig,
    AprioriConfig,
    MLxtendConfig,
    AppearanceConfig,
    FilterConfig,
    RuleMiningConfig,
    ExperimentConfig
)
from .base import (
    load_data,
    create_miner,
    apply_filters,
    postprocess_rules,
    run_rule_mining,
    run_experiment
)

__all__ = [
    'DataConfig',
    'AprioriConfig',
    'MLxtendConfig',
    'AppearanceConfig',
    'FilterConfig',
    'RuleMiningConfig',
    'ExperimentConfig',
    'load_data',
    'create_miner',
    'apply_filters',
    'postprocess_rules',
    'run_rule_mining',
    'run_experiment'
]
