"""Persist and load CLI mapping profiles."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict


@dataclass
class MappingProfile:
    stats_mapping: Dict[str, str]
    registry_mapping: Dict[str, str]
    policy_overrides: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def load(cls, path: Path) -> "MappingProfile":
        data = json.loads(path.read_text(encoding="utf-8"))
        return cls(
            stats_mapping=data.get("stats_mapping", {}),
            registry_mapping=data.get("registry_mapping", {}),
            policy_overrides=data.get("policy_overrides", {}),
        )

    def save(self, path: Path) -> None:
        payload = {
            "stats_mapping": self.stats_mapping,
            "registry_mapping": self.registry_mapping,
            "policy_overrides": self.policy_overrides,
        }
        path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
