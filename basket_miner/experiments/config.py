from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from basket_miner.rule_mining.appearance import Appearance


@dataclass
class DataConfig:
    path: str
    name: str
    format: str = 'basket'  # 'basket', 'single', 'records'
    sep: str = ','
    tid_col: Optional[str] = None
    item_col: Optional[str] = None

    def reader_kwargs(self) -> Dict[str, Any]:
        if self.format == 'single':
            return {'tid_col': self.tid_col, 'item_col': self.item_col}
        return {}

    def to_dict(self) -> Dict[str, Any]:
        return {
            'path': self.path,
            'name': self.name,
            'format': self.format,
            'sep': self.sep,
            'tid_col': self.tid_col,
            'item_col': self.item_col
        }


@dataclass
class AprioriConfig:
    min_support: float = 0.1
    min_confidence: float = 0.8
    min_len: int = 1
    max_len: Optional[int] = 10
    strategy: str = 'exhaustive'  # 'exhaustive', 'pruned'
    n_jobs: int = 1
    time_limit: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'min_support': self.min_support,
            'min_confidence': self.min_confidence,
            'min_len': self.min_len,
            'max_len': self.max_len,
            'strategy': self.strategy,
            'n_jobs': self.n_jobs,
            'time_limit': self.time_limit
        }


@dataclass
class MLxtendConfig:
    algorithm: str = 'fpgrowth'
    min_support: float = 0.1
    min_confidence: float = 0.8
    min_len: int = 1
    max_len: Optional[int] = 10

    def to_dict(self) -> Dict[str, Any]:
        return {
            'algorithm': self.algorithm,
            'min_support': self.min_support,
            'min_confidence': self.min_confidence,
            'min_len': self.min_len,
            'max_len': self.max_len
        }


@dataclass
class AppearanceConfig:
    default: str = 'both'  # 'lhs', 'rhs', 'both', 'none'
    lhs: List[Any] = field(default_factory=list)
    rhs: List[Any] = field(default_factory=list)
    both: List[Any] = field(default_factory=list)
    none: List[Any] = field(default_factory=list)

    def build(self) -> Appearance:
        """Validated appearance; raises InvalidParameterError on overlapping sides."""
        return Appearance(
            default=self.default,
            lhs=frozenset(self.lhs),
            rhs=frozenset(self.rhs),
            both=frozenset(self.both),
            none=frozenset(self.none)
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'default': self.default,
            'lhs': list(self.lhs),
            'rhs': list(self.rhs),
            'both': list(self.both),
            'none': list(self.none)
        }


@dataclass
class FilterConfig:
    metric: str
    threshold: float

    def to_dict(self) -> Dict[str, Any]:
        return {'metric': self.metric, 'threshold': self.threshold}


MINER_CONFIGS = {
    'apriori': AprioriConfig,
    'mlxtend': MLxtendConfig
}


@dataclass
class RuleMiningConfig:
    miner_type: str  # 'apriori', 'mlxtend'
    miner_config: Any  # AprioriConfig or MLxtendConfig
    mode: str = 'rules'  # 'rules', 'itemsets', 'both'
    filters: List[FilterConfig] = field(default_factory=list)
    appearance: Optional[AppearanceConfig] = None
    remove_redundant: bool = False
    top_n: Optional[int] = None
    sort_by: str = 'lift'

    def to_dict(self) -> Dict[str, Any]:
        return {
            'miner_type': self.miner_type,
            'miner_config': self.miner_config.to_dict(),
            'mode': self.mode,
            'filters': [f.to_dict() for f in self.filters],
            'appearance': self.appearance.to_dict() if self.appearance else None,
            'remove_redundant': self.remove_redundant,
            'top_n': self.top_n,
            'sort_by': self.sort_by
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'RuleMiningConfig':
        miner_type = data['miner_type'].lower()
        if miner_type not in MINER_CONFIGS:
            raise ValueError(f"Unknown miner type: {miner_type}")

        appearance = data.get('appearance')
        return cls(
            miner_type=miner_type,
            miner_config=MINER_CONFIGS[miner_type](**data.get('miner_config', {})),
            mode=data.get('mode', 'rules'),
            filters=[FilterConfig(**f) for f in data.get('filters', [])],
            appearance=AppearanceConfig(**appearance) if appearance else None,
            remove_redundant=data.get('remove_redundant', False),
            top_n=data.get('top_n'),
            sort_by=data.get('sort_by', 'lift')
        )


@dataclass
class ExperimentConfig:
    name: str
    data: DataConfig
    rule_mining: RuleMiningConfig
    output_dir: str = "./out"

    def get_output_path(self) -> Path:
        path = Path(self.output_dir)
        path.mkdir(parents=True, exist_ok=True)
        return path

    def to_dict(self) -> Dict[str, Any]:
        return {
            'name': self.name,
            'data': self.data.to_dict(),
            'rule_mining': self.rule_mining.to_dict(),
            'output_dir': self.output_dir
        }
