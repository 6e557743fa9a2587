from __future__ import annotations

import logging

import pytest
from hypothesis import given
from hypothesis import strategies as st

from keycode_registry.application.merge import FoldState, fold_category, merge_corpus, ordered_layers
from keycode_registry.domain.keycodes import KeycodeDefinition, VersionLayer


def layer(entries: dict[str, str], *, reset: bool = False) -> VersionLayer:
    return VersionLayer(definitions={code: KeycodeDefinition(key=name) for code, name in entries.items()}, reset=reset)


def names(table: dict[str, KeycodeDefinition]) -> dict[str, str]:
    return {code: definition.key for code, definition in table.items()}


CODES = st.sampled_from([f"0x{value:04X}" for value in range(8)])
NAMES = st.sampled_from(["KC_A", "KC_B", "KC_C", "QK_BOOT"])
LAYER = st.builds(
    lambda entries, reset: layer(entries, reset=reset),
    st.dictionaries(CODES, NAMES, max_size=4),
    st.booleans(),
)
VERSIONS = st.lists(LAYER, max_size=5).map(lambda layers: {f"0.0.{index}": item for index, item in enumerate(layers)})


def test_reset_discards_earlier_versions() -> None:
    corpus = {
        "_": {
            "0.1.0": VersionLayer.from_mapping({"0x01": {"key": "KC_A"}}),
            "0.2.0": VersionLayer.from_mapping({"!reset!": {}, "0x02": {"key": "KC_B"}}),
        }
    }
    assert names(merge_corpus(corpus)) == {"0x02": "KC_B"}


def test_later_version_overrides_same_code() -> None:
    corpus = {"_": {"0.0.1": layer({"0x01": "KC_OLD", "0x02": "KC_KEEP"}), "0.0.2": layer({"0x01": "KC_NEW"})}}
    assert names(merge_corpus(corpus)) == {"0x01": "KC_NEW", "0x02": "KC_KEEP"}


def test_reset_is_scoped_to_its_category() -> None:
    corpus = {
        "_": {"0.0.1": layer({"0x04": "KC_A"})},
        "quantum": {
            "0.0.1": layer({"0x7C00": "QK_BOOT"}),
            "0.0.2": layer({"0x7C01": "QK_REBOOT"}, reset=True),
        },
    }
    assert names(merge_corpus(corpus)) == {"0x04": "KC_A", "0x7C01": "QK_REBOOT"}


def test_absent_layer_is_skipped_without_touching_reset_state() -> None:
    corpus = {
        "_": {
            "0.0.1": layer({"0x01": "KC_A"}),
            "0.0.2": None,
            "0.0.3": layer({"0x02": "KC_B"}),
        }
    }
    assert names(merge_corpus(corpus)) == {"0x01": "KC_A", "0x02": "KC_B"}


def test_later_category_wins_on_collision() -> None:
    corpus = {
        "zeta": {"0.0.1": layer({"0x10": "KC_ZETA"})},
        "alpha": {"0.0.1": layer({"0x10": "KC_ALPHA"})},
    }
    assert names(merge_corpus(corpus)) == {"0x10": "KC_ZETA"}


def test_default_category_sorts_before_lowercase_names() -> None:
    corpus = {
        "_": {"0.0.1": layer({"0x10": "KC_DEFAULT"})},
        "quantum": {"0.0.1": layer({"0x10": "KC_QUANTUM"})},
    }
    assert names(merge_corpus(corpus)) == {"0x10": "KC_QUANTUM"}


def test_empty_corpus_yields_empty_table() -> None:
    assert merge_corpus({}) == {}


def test_versions_apply_in_string_order() -> None:
    corpus = {"_": {"0.9.0": layer({"0x01": "KC_NINE"}), "0.10.0": layer({"0x01": "KC_TEN"})}}
    assert names(merge_corpus(corpus)) == {"0x01": "KC_NINE"}


def test_ambiguous_version_order_is_reported(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.WARNING, logger="keycode_registry")
    ordered_layers("_", {"0.9.0": layer({}), "0.10.0": layer({})})
    record = next(record for record in caplog.records if record.getMessage() == "version_order_ambiguous")
    assert record.context["applied"] == ["0.10.0", "0.9.0"]
    assert record.context["numeric"] == ["0.9.0", "0.10.0"]


def test_fold_state_tracks_most_recent_reset() -> None:
    after_reset = fold_category("_", [("0.0.1", layer({"0x01": "KC_A"})), ("0.0.2", layer({}, reset=True))])
    assert after_reset.state is FoldState.JUST_RESET
    assert dict(after_reset.definitions) == {}
    resumed = fold_category("_", [("0.0.1", layer({}, reset=True)), ("0.0.2", layer({"0x02": "KC_B"}))])
    assert resumed.state is FoldState.ACCUMULATING


def test_merge_does_not_mutate_layers() -> None:
    first = layer({"0x01": "KC_A"})
    corpus = {"_": {"0.0.1": first, "0.0.2": layer({"0x01": "KC_B"})}}
    merge_corpus(corpus)
    assert names(dict(first.definitions)) == {"0x01": "KC_A"}


@given(st.dictionaries(st.sampled_from(["_", "quantum", "midi"]), VERSIONS, max_size=3))
def test_merge_is_deterministic(corpus) -> None:
    assert merge_corpus(corpus) == merge_corpus(corpus)


@given(VERSIONS)
def test_nothing_before_the_last_reset_survives(versions) -> None:
    merged = merge_corpus({"_": versions})
    ordered = [versions[name] for name in sorted(versions)]
    resets = [index for index, item in enumerate(ordered) if item.reset]
    if not resets:
        return
    surviving_sources = ordered[resets[-1] :]
    allowed = {code for item in surviving_sources for code in item.definitions}
    assert set(merged) == allowed


@given(VERSIONS, VERSIONS)
def test_last_category_wins(first, second) -> None:
    merged = merge_corpus({"a": first, "b": second})
    later = merge_corpus({"b": second})
    for code, definition in later.items():
        assert merged[code] == definition
