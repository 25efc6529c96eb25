"""
Signal scoring and scanning.

Provides:
- WeightConfig and built-in weight profiles
- YAML loading of weights and profiles
- Per-indicator component scores and weighted totals
- Sequential multi-symbol scans with ranked results
"""
from .config import WeightConfig, BUILTIN_PROFILES, INDICATOR_KEYS, get_profile
from .config_loader import load_weights_from_yaml, load_profiles_from_yaml
from .scoring import ComponentScores, ScoreBreakdown, score_components, weighted_score
from .scanner import ScoredSymbol, SignalScanner, rank_results

__all__ = [
    'WeightConfig',
    'BUILTIN_PROFILES',
    'INDICATOR_KEYS',
    'get_profile',
    'load_weights_from_yaml',
    'load_profiles_from_yaml',
    'ComponentScores',
    'ScoreBreakdown',
    'score_components',
    'weighted_score',
    'ScoredSymbol',
    'SignalScanner',
    'rank_results',
]
