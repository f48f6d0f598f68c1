"""
YAML → policy loader.

Loads policy tables from policy.yaml (bundled with the package) and
optionally merges user overrides from ~/.fitcube/policy.yaml, or from the
file named by $FITCUBE_POLICY.

Usage:
    from fitcube_analytics.core.engine.config_loader import load_policy
    policy = load_policy()
    targets = policy.volume_targets["chest"]["intermediate"]

If the bundled YAML cannot be parsed, all lookups return the Python defaults
from config.py (no crash).  If the user override file exists but has parse
errors, a warning is issued and the file is ignored.
"""

from __future__ import annotations

import importlib.resources
import logging
import os
import warnings
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml

from ..config import (
    IMBALANCE_RULES,
    VOLUME_OVER_RATIO,
    VOLUME_TARGETS,
    VOLUME_UNDER_RATIO,
)

logger = logging.getLogger(__name__)

POLICY_ENV_VAR = "FITCUBE_POLICY"

_RULE_KEYS: frozenset[str] = frozenset(
    {"numerator", "denominator", "ideal", "mild", "moderate", "severe"}
)


@dataclass(frozen=True)
class ImbalanceRule:
    """Ideal E1RM ratio for a lift pair and its severity bands."""

    name: str
    numerator: str
    denominator: str
    ideal: float
    mild: float
    moderate: float
    severe: float


@dataclass(frozen=True)
class Policy:
    """Resolved policy tables (defaults merged with YAML)."""

    volume_targets: dict[str, dict[str, int]]
    under_ratio: float
    over_ratio: float
    imbalance_rules: tuple[ImbalanceRule, ...]


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _load_yaml_file(path: Path) -> dict[str, Any]:
    """Load a single YAML file; warn and return {} on any error."""
    try:
        with open(path, "r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh)
    except (OSError, yaml.YAMLError) as exc:
        warnings.warn(f"fitcube: ignoring policy file {path} ({exc})", stacklevel=2)
        return {}
    return data if isinstance(data, dict) else {}


def _deep_merge(base: dict, override: dict) -> dict:
    """Recursively merge *override* into *base* (non-destructive to base)."""
    result = dict(base)
    for k, v in override.items():
        if isinstance(v, dict) and isinstance(result.get(k), dict):
            result[k] = _deep_merge(result[k], v)
        else:
            result[k] = v
    return result


def _rule_from_dict(name: str, raw: dict[str, Any]) -> ImbalanceRule:
    missing = _RULE_KEYS - set(raw)
    if missing:
        raise ValueError(f"imbalance rule {name!r} missing keys: {sorted(missing)}")
    rule = ImbalanceRule(
        name=name,
        numerator=str(raw["numerator"]),
        denominator=str(raw["denominator"]),
        ideal=float(raw["ideal"]),
        mild=float(raw["mild"]),
        moderate=float(raw["moderate"]),
        severe=float(raw["severe"]),
    )
    if rule.ideal <= 0:
        raise ValueError(f"imbalance rule {name!r}: ideal must be positive")
    if not (0 <= rule.mild <= rule.moderate <= rule.severe):
        raise ValueError(f"imbalance rule {name!r}: bands must be ascending")
    return rule


def _defaults() -> dict[str, Any]:
    return {
        "volume_targets": {m: dict(t) for m, t in VOLUME_TARGETS.items()},
        "volume_bands": {"under_ratio": VOLUME_UNDER_RATIO, "over_ratio": VOLUME_OVER_RATIO},
        "imbalance_rules": {n: dict(r) for n, r in IMBALANCE_RULES.items()},
    }


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def get_bundled_yaml_path() -> Path | None:
    """Return the path to the bundled policy.yaml, or None if not found."""
    candidate = Path(__file__).parent.parent.parent / "policy.yaml"
    if candidate.exists():
        return candidate
    ref = importlib.resources.files("fitcube_analytics").joinpath("policy.yaml")
    return Path(str(ref)) if ref.is_file() else None


def get_user_yaml_path() -> Path | None:
    """Return the user override file if it exists, else None."""
    explicit = os.environ.get(POLICY_ENV_VAR)
    if explicit:
        p = Path(explicit).expanduser()
        return p if p.exists() else None
    home = Path(os.environ.get("HOME", "~")).expanduser()
    p = home / ".fitcube" / "policy.yaml"
    return p if p.exists() else None


def build_policy(raw: dict[str, Any]) -> Policy:
    """
    Turn a merged config dict into a typed Policy.

    Args:
        raw: Dict with volume_targets / volume_bands / imbalance_rules sections

    Returns:
        Policy

    Raises:
        ValueError: If a section is malformed
    """
    targets: dict[str, dict[str, int]] = {}
    for muscle, levels in raw.get("volume_targets", {}).items():
        if not isinstance(levels, dict):
            raise ValueError(f"volume_targets[{muscle!r}] must be a mapping")
        targets[muscle] = {lvl: int(v) for lvl, v in levels.items()}

    bands = raw.get("volume_bands", {})
    under = float(bands.get("under_ratio", VOLUME_UNDER_RATIO))
    over = float(bands.get("over_ratio", VOLUME_OVER_RATIO))
    if not (0 < under <= 1.0 <= over):
        raise ValueError("volume_bands must satisfy 0 < under_ratio <= 1 <= over_ratio")

    rules = tuple(
        _rule_from_dict(name, rule)
        for name, rule in raw.get("imbalance_rules", {}).items()
    )
    return Policy(
        volume_targets=targets,
        under_ratio=under,
        over_ratio=over,
        imbalance_rules=rules,
    )


def default_policy() -> Policy:
    """Policy built from config.py constants only (no YAML)."""
    return build_policy(_defaults())


@lru_cache(maxsize=1)
def load_policy() -> Policy:
    """
    Load and merge policy from YAML sources.

    Load order (later overrides earlier):
    1. Python defaults in core/config.py
    2. Bundled src/fitcube_analytics/policy.yaml
    3. User override ($FITCUBE_POLICY or ~/.fitcube/policy.yaml)

    The result is cached; call ``load_policy.cache_clear()`` after editing
    the override file.

    Returns:
        Policy
    """
    config = _defaults()

    bundled = get_bundled_yaml_path()
    if bundled is not None:
        config = _deep_merge(config, _load_yaml_file(bundled))

    user = get_user_yaml_path()
    logger.debug("policy sources: bundled=%s user=%s", bundled, user)
    if user is not None:
        user_cfg = _load_yaml_file(user)
        if user_cfg:
            merged = _deep_merge(config, user_cfg)
            try:
                return build_policy(merged)
            except (ValueError, TypeError) as exc:
                warnings.warn(
                    f"fitcube: ignoring user policy {user} ({exc})",
                    stacklevel=2,
                )

    try:
        return build_policy(config)
    except (ValueError, TypeError) as exc:
        warnings.warn(
            f"fitcube: bundled policy invalid ({exc}); using Python defaults.",
            stacklevel=2,
        )
        return default_policy()
