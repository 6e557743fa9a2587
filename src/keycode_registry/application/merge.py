"""Application-layer layering policy.

Purpose
-------
Convert the per-category, per-version keycode layers read from the firmware
tree into a single table mapping hex code to the winning definition. The
module is free of I/O so it can be driven by in-memory corpora in tests.

Contents
    - ``merge_corpus``: public entry point, one pass per category.
    - ``fold_category``: pure reduction of one category's ordered layers.
    - ``ordered_layers``: version ordering and absent-layer filtering.
    - ``_apply_layer``: the two-state step (``accumulating`` / ``just-reset``).

System Role
-----------
Receives a :data:`SourceCorpus` from the source loader and hands the merged
table to :mod:`keycode_registry.application.reconcile`.

Precedence
----------
Versions apply in ascending plain string order inside a category. A layer
carrying the reset directive discards everything the category accumulated
before it, then contributes its own definitions. Finished categories are laid
onto the shared table in ascending name order, later categories winning.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from functools import reduce
from types import MappingProxyType
from typing import Iterable, Optional

from ..domain.keycodes import KeycodeDefinition, VersionLayer
from ..observability import log_debug, log_info, log_warning, make_event

SourceCorpus = Mapping[str, Mapping[str, Optional[VersionLayer]]]
MergedTable = dict[str, KeycodeDefinition]

_VERSION = re.compile(r"^(\d+)\.(\d+)\.(\d+)$")


class FoldState(Enum):
    """Where a category's fold stands after the most recent layer."""

    ACCUMULATING = "accumulating"
    JUST_RESET = "just-reset"


@dataclass(frozen=True, slots=True)
class CategoryFold:
    """Immutable accumulator threaded through :func:`fold_category`."""

    definitions: Mapping[str, KeycodeDefinition]
    state: FoldState = FoldState.ACCUMULATING


_EMPTY_FOLD = CategoryFold(definitions=MappingProxyType({}))


def merge_corpus(corpus: SourceCorpus) -> MergedTable:
    """Layer every category of *corpus* into one table keyed by hex code.

    Parameters
    ----------
    corpus:
        ``category -> version -> layer`` mapping; a ``None`` layer stands for a
        version file without a ``keycodes`` section.

    Returns
    -------
    dict[str, KeycodeDefinition]
        One entry per hex code after all overrides and resets.

    Examples
    --------
    >>> from keycode_registry.domain.keycodes import VersionLayer
    >>> corpus = {"_": {
    ...     "0.1.0": VersionLayer.from_mapping({"0x01": {"key": "KC_A"}}),
    ...     "0.2.0": VersionLayer.from_mapping({"!reset!": {}, "0x02": {"key": "KC_B"}}),
    ... }}
    >>> {code: d.key for code, d in merge_corpus(corpus).items()}
    {'0x02': 'KC_B'}
    """

    merged: MergedTable = {}
    for category in sorted(corpus):
        layers = ordered_layers(category, corpus[category])
        finished = fold_category(category, layers)
        merged.update(finished.definitions)
        log_debug("category_merged", **make_event(category, None, {"keys": len(finished.definitions)}))
    log_info("corpus_merged", categories=len(corpus), keys=len(merged))
    return merged


def ordered_layers(category: str, versions: Mapping[str, Optional[VersionLayer]]) -> list[tuple[str, VersionLayer]]:
    """Return the present layers of *category* in application order.

    Versions sort by plain string comparison. Absent layers are dropped here,
    so they never touch the reset state of the fold.
    """

    names = sorted(versions)
    _warn_on_ambiguous_order(category, names)
    ordered: list[tuple[str, VersionLayer]] = []
    for version in names:
        layer = versions[version]
        if layer is None:
            log_debug("version_without_keycodes", **make_event(category, version))
            continue
        ordered.append((version, layer))
    return ordered


def fold_category(category: str, layers: Iterable[tuple[str, VersionLayer]]) -> CategoryFold:
    """Reduce the ordered *layers* of one category into its finished fold."""

    return reduce(lambda fold, entry: _apply_layer(category, fold, entry), layers, _EMPTY_FOLD)


def _apply_layer(category: str, fold: CategoryFold, entry: tuple[str, VersionLayer]) -> CategoryFold:
    """Apply one version layer, starting from empty when it carries a reset."""

    version, layer = entry
    if layer.reset:
        log_info("category_reset", **make_event(category, version, {"discarded": len(fold.definitions)}))
        return CategoryFold(definitions=MappingProxyType(dict(layer.definitions)), state=FoldState.JUST_RESET)
    definitions = {**fold.definitions, **layer.definitions}
    return CategoryFold(definitions=MappingProxyType(definitions), state=FoldState.ACCUMULATING)


def _warn_on_ambiguous_order(category: str, versions: list[str]) -> None:
    """Flag categories whose string order differs from numeric version order."""

    parsed = [_VERSION.match(version) for version in versions]
    if not all(parsed):
        return
    numeric = sorted(versions, key=lambda version: tuple(int(part) for part in version.split(".")))
    if numeric != versions:
        log_warning("version_order_ambiguous", **make_event(category, None, {"applied": versions, "numeric": numeric}))
