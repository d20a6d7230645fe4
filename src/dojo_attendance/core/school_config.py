"""School-wide option lists (student categories, belt levels).

Built once from the settings module and handed to the services that validate
against it.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Mapping, Optional, Union


@dataclass(frozen=True)
class CategoryOption:
    value: str
    label: str
    order: int = 0


@dataclass(frozen=True)
class BeltLevel:
    value: str
    label: str
    rank: int = 0
    color: str = ""


def _options(items: Iterable[Union[str, Mapping]], kind: str) -> list[dict]:
    out = []
    for index, item in enumerate(items or ()):
        if isinstance(item, str):
            item = {"value": item, "label": item.title()}
        if not item.get("value"):
            raise ValueError(f"{kind} at index {index} has no value")
        out.append(dict(item))
    if not out:
        raise ValueError(f"configuration has no {kind} entries")
    values = [o["value"] for o in out]
    if len(values) != len(set(values)):
        raise ValueError(f"duplicate {kind} values in configuration")
    return out


@dataclass(frozen=True)
class SchoolConfig:
    categories: tuple[CategoryOption, ...]
    belt_levels: tuple[BeltLevel, ...]

    @classmethod
    def from_settings(cls, categories, belt_levels) -> "SchoolConfig":
        cats = _options(categories, "category")
        belts = _options(belt_levels, "belt level")
        return cls(
            categories=tuple(
                CategoryOption(value=c["value"], label=c.get("label", c["value"]), order=int(c.get("order", i)))
                for i, c in enumerate(cats)
            ),
            belt_levels=tuple(
                BeltLevel(
                    value=b["value"],
                    label=b.get("label", b["value"]),
                    rank=int(b.get("rank", i)),
                    color=str(b.get("color", "")),
                )
                for i, b in enumerate(belts)
            ),
        )

    def category_values(self) -> list[str]:
        return [c.value for c in sorted(self.categories, key=lambda c: c.order)]

    def belt_level_values(self) -> list[str]:
        return [b.value for b in sorted(self.belt_levels, key=lambda b: b.rank)]

    def is_valid_category(self, value: str) -> bool:
        return any(c.value == value for c in self.categories)

    def is_valid_belt_level(self, value: str) -> bool:
        return any(b.value == value for b in self.belt_levels)

    def belt_level(self, value: str) -> Optional[BeltLevel]:
        return next((b for b in self.belt_levels if b.value == value), None)

    def to_dict(self) -> dict:
        return {
            "categories": [{"value": c.value, "label": c.label, "order": c.order} for c in self.categories],
            "beltLevels": [
                {"value": b.value, "label": b.label, "rank": b.rank, "color": b.color} for b in self.belt_levels
            ],
        }
