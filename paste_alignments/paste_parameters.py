"""
Configuration for pasting runs.

PasteParameters bundles the scoring parameter set, pasting thresholds,
comparison tolerances and file names. Values can come from the dataclass
defaults, a JSON configuration file, or the command line.

Usage:
    from paste_alignments.paste_parameters import load_paste_parameters

    params = load_paste_parameters("paste_config.json")
    params = params.updated(gap_tolerance=8)
"""

import json
import logging
from dataclasses import dataclass, asdict, fields, replace
from typing import Dict, Optional

logger = logging.getLogger(__name__)


@dataclass
class PasteParameters:
    """Parameters controlling scoring, pasting and output."""
    # Pasting
    gap_tolerance: int = 4
    intermediate_pident_threshold: float = 0.0
    intermediate_score_threshold: float = 0.0
    final_pident_threshold: float = 0.0
    final_score_threshold: float = 0.0
    enforce_average_score: bool = False

    # Scoring
    reward: int = 1
    penalty: int = 2
    open_cost: int = 0
    extend_cost: int = 0
    db_size: Optional[int] = None

    # Files
    input_filename: Optional[str] = None
    output_filename: Optional[str] = None
    summary_filename: Optional[str] = None
    stats_filename: Optional[str] = None

    # Relative tolerances for float comparisons
    float_epsilon: float = 0.01
    double_epsilon: float = 0.01

    def __post_init__(self):
        if self.gap_tolerance < 0:
            raise ValueError("gap_tolerance cannot be negative")
        if self.reward <= 0 or self.penalty <= 0:
            raise ValueError("reward and penalty must be positive")
        if self.open_cost < 0 or self.extend_cost < 0:
            raise ValueError("gap costs cannot be negative")
        if self.db_size is not None and self.db_size <= 0:
            raise ValueError("db_size must be positive")
        for name in ("intermediate_pident_threshold", "final_pident_threshold"):
            value = getattr(self, name)
            if not 0.0 <= value <= 100.0:
                raise ValueError(f"{name} must be between 0 and 100, got {value}")
        if self.float_epsilon < 0 or self.double_epsilon < 0:
            raise ValueError("epsilon values cannot be negative")

    @classmethod
    def from_dict(cls, data: Dict) -> 'PasteParameters':
        """Build parameters from a mapping; unknown keys are an error."""
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValueError(f"Unknown configuration keys: {', '.join(unknown)}")
        return cls(**data)

    def to_dict(self) -> Dict:
        return asdict(self)

    def updated(self, **changes) -> 'PasteParameters':
        """Return a copy with the given fields replaced (None values are ignored)."""
        changes = {k: v for k, v in changes.items() if v is not None}
        return replace(self, **changes)


def load_paste_parameters(json_path: str) -> PasteParameters:
    """Load PasteParameters from a JSON object file."""
    with open(json_path) as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise ValueError(f"{json_path}: expected a JSON object, got {type(data).__name__}")
    logger.info("Loaded %d configuration values from %s", len(data), json_path)
    return PasteParameters.from_dict(data)
