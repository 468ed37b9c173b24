"""
Central Configuration Module for Pick Risk.

=== PURPOSE ===
This module is the single source of truth for every tunable constant,
threshold, column alias and display marker used across the Pick Risk
engine.  Every other module imports from here rather than defining its own
magic numbers.

=== DATA FLOW ===
  1. DEFAULT_* constants describe the factory configuration of the tool
     (the values the reference spreadsheet was tuned with).
  2. ``RiskConfig`` bundles those values into an immutable object that is
     passed explicitly into every computation call.  Nothing in the engine
     reads ambient global settings.
  3. ``ConfigStore`` persists the configuration as JSON between runs.  The
     caller loads before computing and saves after the user edits a value.
  4. COLUMN_ALIASES abstract away the raw export header names so that a
     schema change only needs an update here.

=== KEY DESIGN DECISIONS ===
- Thresholds are ratio cut points (capacity / derived pick-list need) and
  must satisfy safe > low > high.
- User edits are coerced explicitly: a value that does not parse as a
  positive number falls back to the previous value, never to zero.
"""

import json
import logging
import math
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)

# ==========================================
# FACTORY DEFAULTS
# ==========================================
# Average minutes one associate needs to pick one pick-list.  This is the
# pace divisor in both the capacity and the headcount-need formulas.
DEFAULT_AVG_PL_MIN = 13.5

# Informational only: shown in the summary, never used in the math.
DEFAULT_SHIFT_END = "11:50"

# Ratio cut points: Safe / Low Risk / High Risk / Proj Miss
DEFAULT_SAFE_THRESHOLD = 1.35
DEFAULT_LOW_THRESHOLD = 1.25
DEFAULT_HIGH_THRESHOLD = 1.00

# Presentation filter: Safe waves are hidden unless the user asks for them
DEFAULT_SHOW_SAFE = False

# ==========================================
# COLUMN ALIASES
# ==========================================
# Matched against the lower-cased, trimmed export header.  Exact matches are
# tried first (in alias order), then substring matches (in column order).
COLUMN_ALIASES = {
    'stage_by': ['stage by time', 'stage by', 'stageby', 'stage_time', 'stage time'],
    'status': ['status', 'state'],
    'assoc': ['associate', 'employee', 'picker', 'user'],
    'plcode': ['picklist code', 'picklist', 'pl code'],
}

# Sentinel for a logical field with no matching header column
COLUMN_NOT_FOUND = -1

# ==========================================
# DISPLAY MARKERS
# ==========================================
PAST_MARKER = "PAST"

# (background, foreground) chip colours per risk tier label
TIER_COLORS = {
    'Safe': ('DCFCE7', '166534'),
    'Low Risk': ('DBEAFE', '0C4A6E'),
    'High Risk': ('FECACA', '7F1D1D'),
    'Proj Miss': ('FECACA', '7F1D1D'),
}
DEFAULT_TIER_COLOR = ('E5E7EB', '374151')

REPORT_TITLE = "Pick Risk Waves"
INSTRUCTIONS_TEXT = (
    'Instructions: Click "Refresh" above then download the picklists by clicking '
    '"Export to CSV". Ensure Filters are off.'
)

# ==========================================
# PERSISTENCE
# ==========================================
CONFIG_FILE = Path.home() / ".pick_risk" / "config.json"


class ConfigError(ValueError):
    """Raised when a configuration cannot drive a risk computation."""


# ==========================================
# CONFIGURATION OBJECTS
# ==========================================

@dataclass(frozen=True)
class Thresholds:
    """Ratio cut points separating the four risk tiers.

    Attributes:
        safe: ratio at or above which a wave is Safe.  Also used as the
            safety margin that inflates headcount need.
        low: ratio at or above which a wave is Low Risk.
        high: ratio at or above which a wave is High Risk; below it the wave
            is a projected miss.
    """
    safe: float = DEFAULT_SAFE_THRESHOLD
    low: float = DEFAULT_LOW_THRESHOLD
    high: float = DEFAULT_HIGH_THRESHOLD

    def to_dict(self) -> Dict[str, float]:
        return {'safe': self.safe, 'low': self.low, 'high': self.high}


@dataclass(frozen=True)
class RiskConfig:
    """Immutable configuration for one risk computation.

    Attributes:
        avg_pick_list_minutes: Observed average minutes per pick-list.
        thresholds: Tier cut points (see ``Thresholds``).
        shift_end_display: Free text shown in the summary (e.g. ``"11:50"``).
        show_safe_rows: Presentation filter; the engine ignores it.
    """
    avg_pick_list_minutes: float = DEFAULT_AVG_PL_MIN
    thresholds: Thresholds = field(default_factory=Thresholds)
    shift_end_display: str = DEFAULT_SHIFT_END
    show_safe_rows: bool = DEFAULT_SHOW_SAFE

    def with_updates(self, **changes) -> "RiskConfig":
        """Return a copy with the given fields replaced."""
        return replace(self, **changes)

    def to_dict(self) -> Dict[str, Any]:
        """Serialise using the external option names of the config store."""
        return {
            'avgPLMin': self.avg_pick_list_minutes,
            'thresholds': self.thresholds.to_dict(),
            'shiftEndDisplay': self.shift_end_display,
            'showSafeRows': self.show_safe_rows,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any], base: Optional["RiskConfig"] = None) -> "RiskConfig":
        """Build a config from stored options, falling back field by field to ``base``.

        Unknown keys are ignored.  Values that do not coerce to the expected
        type keep the ``base`` value.
        """
        base = base or cls()
        raw_thresholds = data.get('thresholds') or {}
        if not isinstance(raw_thresholds, dict):
            raw_thresholds = {}
        thresholds = Thresholds(
            safe=coerce_float(raw_thresholds.get('safe'), base.thresholds.safe),
            low=coerce_float(raw_thresholds.get('low'), base.thresholds.low),
            high=coerce_float(raw_thresholds.get('high'), base.thresholds.high),
        )
        shift_end = data.get('shiftEndDisplay', base.shift_end_display)
        return cls(
            avg_pick_list_minutes=coerce_positive_float(data.get('avgPLMin'), base.avg_pick_list_minutes),
            thresholds=thresholds,
            shift_end_display=str(shift_end) if shift_end else base.shift_end_display,
            show_safe_rows=coerce_bool(data.get('showSafeRows'), base.show_safe_rows),
        )


# ==========================================
# COERCION HELPERS
# ==========================================

def coerce_float(value: Any, fallback: float) -> float:
    """Parse ``value`` as a finite float, returning ``fallback`` on failure."""
    if value is None or isinstance(value, bool):
        return fallback
    try:
        number = float(str(value).strip()) if isinstance(value, str) else float(value)
    except (TypeError, ValueError):
        return fallback
    if not math.isfinite(number):
        return fallback
    return number


def coerce_positive_float(value: Any, fallback: float) -> float:
    """Like ``coerce_float`` but also rejects zero and negative numbers."""
    number = coerce_float(value, fallback)
    return number if number > 0 else fallback


def coerce_bool(value: Any, fallback: bool) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in ('true', '1', 'yes', 'on'):
            return True
        if lowered in ('false', '0', 'no', 'off'):
            return False
    return fallback


# ==========================================
# VALIDATION
# ==========================================

def validate_config(config: RiskConfig) -> List[str]:
    """Return a list of human-readable problems (empty when valid)."""
    problems = []
    avg = config.avg_pick_list_minutes
    if not isinstance(avg, (int, float)) or not math.isfinite(avg) or avg <= 0:
        problems.append(f"avgPLMin must be a positive number, got {avg!r}")

    t = config.thresholds
    values = {'safe': t.safe, 'low': t.low, 'high': t.high}
    finite = True
    for name, value in values.items():
        if not isinstance(value, (int, float)) or not math.isfinite(value):
            problems.append(f"thresholds.{name} must be a finite number, got {value!r}")
            finite = False
    if finite and not (t.safe > t.low > t.high):
        problems.append(
            f"thresholds must satisfy safe > low > high, got {t.safe} / {t.low} / {t.high}"
        )
    return problems


def ensure_valid(config: RiskConfig) -> RiskConfig:
    """Raise ``ConfigError`` if ``config`` cannot drive a computation."""
    problems = validate_config(config)
    if problems:
        raise ConfigError("; ".join(problems))
    return config


# ==========================================
# CONFIG STORE (JSON)
# ==========================================

class ConfigStore:
    """
    JSON-file persistence for ``RiskConfig``.

    The store is the only place configuration outlives a run.  Stored
    values are merged over the factory defaults, so a file written by an
    older version with fewer keys still loads.

    Usage:
        >>> store = ConfigStore()
        >>> config = store.load()
        >>> config = store.apply_user_edits(avg_pl_min="14")
    """

    def __init__(self, path: Optional[Path] = None):
        self.path = Path(path) if path else CONFIG_FILE

    def load(self) -> RiskConfig:
        """Load the stored configuration, or the defaults if there is none."""
        if not self.path.exists():
            logger.debug(f"No config at {self.path}, using defaults")
            return RiskConfig()
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (json.JSONDecodeError, IOError) as e:
            logger.warning(f"Could not read config {self.path}: {e}. Using defaults.")
            return RiskConfig()
        if not isinstance(data, dict):
            logger.warning(f"Config {self.path} is not a JSON object. Using defaults.")
            return RiskConfig()
        return RiskConfig.from_dict(data)

    def save(self, config: RiskConfig) -> None:
        """Write ``config`` to disk."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, 'w', encoding='utf-8') as f:
            json.dump(config.to_dict(), f, indent=2)
        logger.debug(f"Saved config to {self.path}")

    def apply_user_edits(self, avg_pl_min: Any = None, shift_end: Any = None,
                         show_safe: Optional[bool] = None,
                         current: Optional[RiskConfig] = None) -> RiskConfig:
        """Coerce user-entered values against the current config, then persist.

        ``None`` means "not edited".  An unparseable or non-positive average
        keeps the current average; a blank shift end keeps the current one.
        """
        config = current or self.load()
        changes = {}
        if avg_pl_min is not None:
            changes['avg_pick_list_minutes'] = coerce_positive_float(
                avg_pl_min, config.avg_pick_list_minutes
            )
        if shift_end is not None:
            text = str(shift_end).strip()
            changes['shift_end_display'] = text or config.shift_end_display
        if show_safe is not None:
            changes['show_safe_rows'] = bool(show_safe)
        updated = config.with_updates(**changes) if changes else config
        self.save(updated)
        return updated
