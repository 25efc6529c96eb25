"""
YAML configuration loader for scoring weights.

Two layouts are accepted:

    weights:
      sma: 1.0
      rsi: 0.8

or named profiles, with an optional default:

    default_profile: Balanced
    profiles:
      Balanced: {sma: 1.0, rsi: 1.0, macd: 1.0, stoch: 1.0, qqe: 1.0}
      Aggressive: {sma: 0.8, rsi: 1.2, macd: 1.4, stoch: 1.2}
"""
import logging
from pathlib import Path
from typing import Dict, Optional, Union

import yaml

from .config import WeightConfig, BUILTIN_PROFILES, get_profile


logger = logging.getLogger(__name__)


def _read_yaml(yaml_path: Path) -> dict:
    if not yaml_path.exists():
        raise FileNotFoundError(f"Config file not found: {yaml_path}")

    with open(yaml_path, 'r') as f:
        config_dict = yaml.safe_load(f)

    if not config_dict:
        raise ValueError(f"Empty config file: {yaml_path}")
    if not isinstance(config_dict, dict):
        raise ValueError(f"Config file must contain a mapping: {yaml_path}")
    return config_dict


def load_profiles_from_yaml(yaml_path: Union[str, Path]) -> Dict[str, WeightConfig]:
    """
    Load named weight profiles, merged over the built-in ones.

    Raises:
        FileNotFoundError: If YAML file doesn't exist
        ValueError: If YAML is invalid or a profile has bad weights
    """
    yaml_path = Path(yaml_path)
    config_dict = _read_yaml(yaml_path)

    file_profiles = config_dict.get('profiles') or {}
    if not isinstance(file_profiles, dict):
        raise ValueError(f"'profiles' must be a mapping of name -> weights: {yaml_path}")

    profiles = dict(BUILTIN_PROFILES)
    for name, weights in file_profiles.items():
        try:
            profiles[str(name)] = WeightConfig.from_dict(weights)
        except (TypeError, ValueError) as e:
            raise ValueError(f"Invalid profile '{name}' in {yaml_path}: {e}") from e
    return profiles


def load_weights_from_yaml(
    yaml_path: Union[str, Path],
    profile: Optional[str] = None,
) -> WeightConfig:
    """
    Load a WeightConfig from a YAML file.

    Args:
        yaml_path: Path to YAML configuration file
        profile: Profile name to select; defaults to the file's
                 default_profile, then to the top-level weights mapping

    Returns:
        WeightConfig

    Raises:
        FileNotFoundError: If YAML file doesn't exist
        ValueError: If YAML is invalid, a weight is invalid, or the profile is unknown
    """
    yaml_path = Path(yaml_path)
    config_dict = _read_yaml(yaml_path)

    profile = profile or config_dict.get('default_profile')
    if profile:
        weights = get_profile(profile, load_profiles_from_yaml(yaml_path))
        logger.debug(f"Using weight profile '{profile}' from {yaml_path}")
        return weights

    try:
        return WeightConfig.from_dict(config_dict.get('weights'))
    except (TypeError, ValueError) as e:
        raise ValueError(f"Invalid weights in {yaml_path}: {e}") from e
