"""Explanation output model."""

from dataclasses import dataclass
from typing import Dict


@dataclass(frozen=True)
class Explanation:
    full_description: str
    short_description: str

    def to_dict(self) -> Dict[str, str]:
        return {
            "full_description": self.full_description,
            "short_description": self.short_description,
        }
