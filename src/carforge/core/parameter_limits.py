"""Slider ranges for drag-derived parameter updates."""

import logging
from typing import Any, Optional

from carforge.core.config_loader import load_config
from carforge.core.state import resolve_key

logger = logging.getLogger(__name__)

ROW_PREFIXES = ("mid_row", "passenger")


class ParameterLimits:
    """Clamp parameter values to their configured [min, max] ranges."""

    def __init__(self):
        self._limits: dict[str, tuple[float, float]] = {}

    def load(self, name: str = "parameter_limits.json") -> None:
        """Load ranges from config.  Graceful no-op on failure."""
        try:
            data = load_config(name)
        except (FileNotFoundError, ValueError) as e:
            logger.warning("Parameter limits config not found, limits disabled: %s", e)
            return

        raw = data.get("limits", {})
        for key, bounds in raw.items():
            lo = float(bounds.get("min", float("-inf")))
            hi = float(bounds.get("max", float("inf")))
            if "{row}" in key:
                # Expand the per-row template for every passenger row
                for prefix in ROW_PREFIXES:
                    self._limits[key.replace("{row}", prefix)] = (lo, hi)
            else:
                self._limits[key] = (lo, hi)

    def bounds(self, key: str) -> Optional[tuple[float, float]]:
        name = resolve_key(key) or key
        return self._limits.get(name)

    def clamp(self, key: str, value: float) -> float:
        """Clamp *value* for *key*; unknown keys pass through unchanged."""
        limits = self.bounds(key)
        if limits is None:
            return value
        lo, hi = limits
        return max(lo, min(hi, value))

    def clamp_updates(self, updates: dict[str, Any]) -> dict[str, Any]:
        return {
            key: self.clamp(key, value) if isinstance(value, (int, float)) and not isinstance(value, bool) else value
            for key, value in updates.items()
        }

    def __contains__(self, key: str) -> bool:
        return self.bounds(key) is not None

    def __len__(self) -> int:
        return len(self._limits)
