"""Persist and load CLI valuation profiles."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict

from puckvalue.config.tuning import ValuationConfig


def _freeze(value: Any) -> Any:
    if isinstance(value, list):
        return tuple(_freeze(item) for item in value)
    if isinstance(value, dict):
        return {key: _freeze(item) for key, item in value.items()}
    return value


@dataclass
class ConfigProfile:
    stats_mapping: Dict[str, str] = field(default_factory=dict)
    valuation: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def load(cls, path: Path) -> "ConfigProfile":
        data = json.loads(path.read_text(encoding="utf-8"))
        return cls(
            stats_mapping=data.get("stats_mapping", {}),
            valuation=data.get("valuation", {}),
        )

    def save(self, path: Path) -> None:
        payload = {
            "stats_mapping": self.stats_mapping,
            "valuation": self.valuation,
        }
        path.write_text(json.dumps(payload, indent=2), encoding="utf-8")

    def apply(self, config: ValuationConfig) -> ValuationConfig:
        """Return ``config`` with this profile's overrides; unknown keys raise KeyError."""

        if not self.valuation:
            return config
        return config.with_overrides(**{key: _freeze(value) for key, value in self.valuation.items()})
