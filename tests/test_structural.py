"""Tests for deep_clone, deep_equal, deep_merge and is_plain_object."""

import threading

from gridstore import UNSET, deep_clone, deep_equal, deep_merge, is_plain_object


class TestDeepClone:
    def test_clone_is_equal_and_independent(self):
        source = {"a": [1, {"b": 2}], "c": {"d": (3, 4)}}
        clone = deep_clone(source)
        assert deep_equal(source, clone)
        clone["a"][1]["b"] = 99
        clone["c"]["e"] = 1
        assert source == {"a": [1, {"b": 2}], "c": {"d": (3, 4)}}

    def test_scalars_pass_through(self):
        assert deep_clone(5) == 5
        assert deep_clone("x") == "x"
        assert deep_clone(None) is None

    def test_callables_kept_by_reference(self):
        fn = lambda: 1  # noqa: E731
        clone = deep_clone({"fn": fn})
        assert clone["fn"] is fn

    def test_falls_back_when_deepcopy_refuses(self):
        """A lock cannot be deep-copied; the containers around it still are."""
        lock = threading.Lock()
        source = {"lock": lock, "items": [1, 2]}
        clone = deep_clone(source)
        assert clone["lock"] is lock
        assert clone["items"] == [1, 2]
        assert clone["items"] is not source["items"]

    def test_tuple_type_preserved_on_fallback(self):
        lock = threading.Lock()
        clone = deep_clone({"pair": (lock, [1])})
        assert isinstance(clone["pair"], tuple)
        assert clone["pair"][0] is lock


class TestDeepEqual:
    def test_key_order_irrelevant(self):
        assert deep_equal({"a": 1, "b": 2}, {"b": 2, "a": 1})

    def test_sequence_order_matters(self):
        assert not deep_equal([1, 2], [2, 1])

    def test_different_lengths(self):
        assert not deep_equal([1], [1, 1])
        assert not deep_equal({"a": 1}, {"a": 1, "b": 2})

    def test_different_keys_same_size(self):
        assert not deep_equal({"a": 1}, {"b": 1})

    def test_nested(self):
        assert deep_equal({"a": [{"b": [1]}]}, {"a": [{"b": [1]}]})
        assert not deep_equal({"a": [{"b": [1]}]}, {"a": [{"b": [2]}]})

    def test_record_vs_sequence(self):
        assert not deep_equal({}, [])
        assert not deep_equal([], None)

    def test_none_vs_value(self):
        assert not deep_equal(None, 0)
        assert deep_equal(None, None)

    def test_bool_is_not_int(self):
        assert not deep_equal(True, 1)
        assert not deep_equal({"x": False}, {"x": 0})

    def test_list_and_tuple_compare_as_sequences(self):
        assert deep_equal([1, 2], (1, 2))


class TestDeepMerge:
    def test_preserves_untouched_keys(self):
        merged = deep_merge({"a": 1, "b": 2}, {"b": 3})
        assert merged == {"a": 1, "b": 3}

    def test_merges_nested_records(self):
        merged = deep_merge({"v": {"id": True, "name": True}}, {"v": {"id": False}})
        assert merged == {"v": {"id": False, "name": True}}

    def test_scalar_replaces_record(self):
        assert deep_merge({"v": {"id": True}}, {"v": 0}) == {"v": 0}

    def test_list_replaces_not_concatenates(self):
        assert deep_merge({"v": [1, 2, 3]}, {"v": [9]}) == {"v": [9]}

    def test_unset_keys_skipped(self):
        assert deep_merge({"a": 1}, {"a": UNSET, "b": 2}) == {"a": 1, "b": 2}

    def test_none_overrides(self):
        assert deep_merge({"a": 1}, {"a": None}) == {"a": None}

    def test_none_partial_returns_target(self):
        target = {"a": 1}
        assert deep_merge(target, None) is target

    def test_does_not_mutate_inputs(self):
        target = {"v": {"id": True}}
        partial = {"v": {"name": False}}
        merged = deep_merge(target, partial)
        merged["v"]["id"] = "changed"
        assert target == {"v": {"id": True}}
        assert partial == {"v": {"name": False}}


class TestIsPlainObject:
    def test_records(self):
        assert is_plain_object({})
        assert is_plain_object({"a": 1})

    def test_non_records(self):
        for value in ([], (), None, 1, "x", object()):
            assert not is_plain_object(value)

    def test_unset_is_falsy(self):
        assert not UNSET
        assert deep_clone(UNSET) is UNSET
