"""Ordered sets of changes applied to one module in one pass."""

from __future__ import annotations

import xml.etree.ElementTree as ET
from collections.abc import Iterator

from pydantic import BaseModel, Field

from .changes import Change
from .models import ChangeResult, ModuleInfo


class ChangesetResult(BaseModel):
    """What a changeset did to one module.

    Attributes:
        module: Key of the module the changeset was applied to.
        results: One ChangeResult per applied change, in changeset order.
    """

    module: str
    results: list[ChangeResult] = Field(default_factory=list)

    @property
    def modified(self) -> bool:
        return any(r.modified for r in self.results)

    def descriptions(self) -> list[str]:
        """Per-change descriptions for debug logging."""
        return [r.describe() for r in self.results]


class Changeset:
    """Fluent, ordered accumulation of changes.

    Example:
        changes = (
            Changeset()
            .with_change(ParentVersionChange(original, target))
            .with_change(SelfVersionChange(target))
        )
    """

    def __init__(self) -> None:
        self._changes: list[Change] = []

    def with_change(self, change: Change) -> Changeset:
        self._changes.append(change)
        return self

    @property
    def changes(self) -> tuple[Change, ...]:
        return tuple(self._changes)

    def __iter__(self) -> Iterator[Change]:
        return iter(self._changes)

    def __len__(self) -> int:
        return len(self._changes)

    def apply(self, module: ModuleInfo, root: ET.Element) -> ChangesetResult:
        """Apply every change in order.

        The first failing change aborts the pass: its exception propagates
        and the remaining changes are not applied.
        """
        outcome = ChangesetResult(module=module.key)
        for change in self._changes:
            outcome.results.append(change.apply(module, root))
        return outcome
