"""Apply changesets to module documents.

rewrite_modules() is the in-memory engine: it walks modules in the order the
caller gives and stops at the first failing change. Modules processed before
the failure stay mutated; staging across the batch is the caller's concern.

apply_changes() is the on-disk counterpart used by the pipeline: load one
pom.xml, rewrite it, and write it back only when something changed.
"""

from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from collections.abc import Callable, Iterable, Mapping
from pathlib import Path

from .changeset import Changeset, ChangesetResult
from .errors import RewriteError
from .models import ModuleInfo
from .pom import load_pom, save_pom

logger = logging.getLogger(__name__)


def rewrite_document(
    module: ModuleInfo, root: ET.Element, changeset: Changeset
) -> ChangesetResult:
    """Apply a changeset to one module's document tree."""
    return changeset.apply(module, root)


def rewrite_modules(
    modules: Iterable[ModuleInfo],
    documents: Mapping[str, ET.Element],
    changeset_factory: Callable[[ModuleInfo], Changeset],
) -> list[ChangesetResult]:
    """Rewrite the document of every module with a fresh changeset.

    Args:
        modules: Modules to process, in processing order.
        documents: Module key → <project> root element.
        changeset_factory: Builds the changeset for one module.

    Returns:
        One ChangesetResult per module, in processing order.

    Raises:
        RewriteError: From the first change that fails; later modules are
            not processed.
    """
    outcomes: list[ChangesetResult] = []
    for module in modules:
        root = documents.get(module.key)
        if root is None:
            raise RewriteError(f"No document loaded for {module.key}")
        outcomes.append(rewrite_document(module, root, changeset_factory(module)))
    return outcomes


def apply_changes(module: ModuleInfo, changeset: Changeset) -> ChangesetResult:
    """Rewrite a module's pom.xml on disk.

    The file is written only when at least one change reports a
    modification, and never when a change fails.
    """
    path = Path(module.path)
    tree = load_pom(path)
    outcome = rewrite_document(module, tree.getroot(), changeset)
    if outcome.modified:
        save_pom(path, tree)
    else:
        logger.debug("%s unchanged, not writing %s", module.key, path)
    return outcome
