"""Weighted split of a fixed prompt capacity across optional text sources."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, Mapping, Tuple, Union

CHARS_PER_TOKEN = 3


@dataclass(frozen=True)
class SourceSpec:
    """One candidate input with its configured weight."""

    name: str
    weight: float
    present: bool


@dataclass
class AllocationPlan:
    """Per-source budgets for the sources that are present."""

    capacity: int
    budgets: Dict[str, int] = field(default_factory=dict)

    def __contains__(self, name: object) -> bool:
        return name in self.budgets

    def __len__(self) -> int:
        return len(self.budgets)

    def budget(self, name: str) -> int:
        return self.budgets.get(name, 0)

    def char_budget(self, name: str) -> int:
        """Character truncation length for a source budgeted in tokens."""
        return self.budget(name) * CHARS_PER_TOKEN

    @property
    def total(self) -> int:
        return sum(self.budgets.values())


SourceInput = Union[SourceSpec, Tuple[str, float, bool]]


def allocate(capacity: int, sources: Iterable[SourceInput]) -> AllocationPlan:
    """Split ``capacity`` across present sources proportionally to their weights.

    Absent sources, and sources with a non-positive weight, receive nothing and
    do not count toward the weight total. With no present source the plan is
    empty.
    """
    capacity = max(0, int(capacity))
    specs = [_as_spec(source) for source in sources]
    active = [spec for spec in specs if spec.present and spec.weight > 0]
    active_weight = sum(spec.weight for spec in active)
    plan = AllocationPlan(capacity=capacity)
    if active_weight <= 0:
        return plan
    for spec in active:
        plan.budgets[spec.name] = int(capacity * spec.weight // active_weight)
    return plan


def allocate_texts(
    capacity: int,
    weights: Mapping[str, float],
    texts: Mapping[str, str | None],
) -> AllocationPlan:
    """Allocate for named texts; empty or missing texts count as absent."""
    return allocate(
        capacity,
        (
            SourceSpec(name=name, weight=weight, present=bool((texts.get(name) or "").strip()))
            for name, weight in weights.items()
        ),
    )


def _as_spec(source: SourceInput) -> SourceSpec:
    if isinstance(source, SourceSpec):
        return source
    name, weight, present = source
    return SourceSpec(name=str(name), weight=float(weight), present=bool(present))


__all__ = ["AllocationPlan", "CHARS_PER_TOKEN", "SourceSpec", "allocate", "allocate_texts"]
