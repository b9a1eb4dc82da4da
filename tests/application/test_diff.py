from __future__ import annotations

from hypothesis import given
from hypothesis import strategies as st

from lib_live_config.application.diff import compute_diff
from lib_live_config.domain.values import values_equal

VALUES = st.one_of(st.booleans(), st.integers(min_value=-3, max_value=3), st.sampled_from(["x", "y"]))
MAPPINGS = st.dictionaries(st.sampled_from(["a", "b", "c", "d", "e"]), VALUES, max_size=5)


def test_new_and_changed_sets() -> None:
    diff = compute_diff({"a": 1, "b": 2}, {"a": 1, "b": 3, "c": 4})
    assert dict(diff.new) == {"c": 4}
    assert dict(diff.changed_or_gone) == {"b": 3}


def test_removed_names_pair_with_none() -> None:
    diff = compute_diff({"a": 1}, {})
    assert diff.new == ()
    assert diff.changed_or_gone == (("a", None),)


def test_bool_int_swap_is_a_change() -> None:
    assert compute_diff({"flag": 1}, {"flag": True}).changed_or_gone == (("flag", True),)


def test_identical_mappings_produce_empty_diff() -> None:
    diff = compute_diff({"a": (1, 2)}, {"a": (1, 2)})
    assert not diff
    assert diff.names() == []


@given(MAPPINGS, MAPPINGS)
def test_diff_accounts_for_every_difference(old, new) -> None:
    diff = compute_diff(old, new)
    added = dict(diff.new)
    changed = dict(diff.changed_or_gone)
    assert set(added) == set(new) - set(old)
    assert not set(added) & set(changed)
    for name in old:
        if name not in new:
            assert changed[name] is None
        elif values_equal(old[name], new[name]):
            assert name not in changed
        else:
            assert values_equal(changed[name], new[name])
    rebuilt = {name: value for name, value in old.items() if name not in changed}
    rebuilt.update({name: value for name, value in changed.items() if value is not None})
    rebuilt.update(added)
    assert rebuilt == new
