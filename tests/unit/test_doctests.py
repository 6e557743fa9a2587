from __future__ import annotations

import doctest
import importlib

import pytest

MODULES_WITH_EXAMPLES = [
    "keycode_registry.observability",
    "keycode_registry.settings",
    "keycode_registry.core",
    "keycode_registry.domain.keycodes",
    "keycode_registry.application.merge",
    "keycode_registry.application.reconcile",
    "keycode_registry.adapters.source.hjson_loader",
    "keycode_registry.adapters.overrides.tsv",
    "keycode_registry.adapters.registry.structured",
]


@pytest.mark.parametrize("dotted", MODULES_WITH_EXAMPLES)
def test_docstring_examples(dotted: str) -> None:
    results = doctest.testmod(importlib.import_module(dotted), optionflags=doctest.ELLIPSIS)
    assert results.attempted > 0
    assert results.failed == 0
