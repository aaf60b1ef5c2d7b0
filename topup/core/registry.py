"""Ordered table of the steps considered for one run."""

import logging
from dataclasses import dataclass
from typing import Iterable, Iterator, List

from .errors import RegistryError, StepError
from .steps.base import Category, Step

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RegistryEntry:
    step: Step
    applicable: bool

    @property
    def name(self) -> str:
        return self.step.name


class StepRegistry:
    """Steps in execution order with their applicability evaluated once.

    Ordering is by ``Category``; within a category the registration order is
    kept. Build it with ``StepRegistry.build``.
    """

    def __init__(self, entries: List[RegistryEntry]):
        self._entries = list(entries)

    @classmethod
    def build(cls, steps: Iterable[Step], ctx) -> "StepRegistry":
        """Validate ``steps``, check applicability and order them.

        Raises:
            RegistryError: duplicate or empty names, unknown categories
        """
        steps = list(steps)
        validate(steps)

        entries = []
        for step in sorted(steps, key=lambda s: s.category):
            entries.append(RegistryEntry(step, _check_applicable(step, ctx)))
        return cls(entries)

    def __iter__(self) -> Iterator[RegistryEntry]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def names(self) -> List[str]:
        return [entry.name for entry in self._entries]

    def applicable(self) -> List[RegistryEntry]:
        return [entry for entry in self._entries if entry.applicable]


def validate(steps: List[Step]) -> None:
    seen = set()
    for step in steps:
        if not isinstance(step, Step):
            raise RegistryError(f"{step!r} is not a Step")
        if not step.name:
            raise RegistryError(f"{step.__class__.__name__} has no name")
        if not isinstance(step.category, Category):
            raise RegistryError(f"Step {step.name!r} has unknown category {step.category!r}")
        if step.name in seen:
            raise RegistryError(f"Duplicate step name {step.name!r}")
        seen.add(step.name)


def _check_applicable(step: Step, ctx) -> bool:
    try:
        found = bool(step.applicable(ctx))
    except StepError as e:
        logger.debug("Applicability check for %s failed: %s", step.name, e)
        return False
    if not found:
        logger.debug("Step %s is not applicable", step.name)
    return found
