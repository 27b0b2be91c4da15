"""Tests for merge_deep."""

from asistente.merge import merge_deep


class TestMergeDeep:
    def test_source_wins_leaf_conflicts(self):
        assert merge_deep({"a": 1, "b": 2}, {"b": 3}) == {"a": 1, "b": 3}

    def test_nested_mappings_merge(self):
        target = {"income": {"salary": 1, "rental": 2}, "name": "x"}
        source = {"income": {"rental": 5, "business": 7}}
        assert merge_deep(target, source) == {
            "income": {"salary": 1, "rental": 5, "business": 7},
            "name": "x",
        }

    def test_new_nested_key_is_copied(self):
        nested = {"x": 1}
        result = merge_deep({}, {"extra": nested})
        assert result == {"extra": {"x": 1}}
        assert result["extra"] is not nested

    def test_lists_are_leaves(self):
        assert merge_deep({"l": [1, 2]}, {"l": [3]}) == {"l": [3]}

    def test_mapping_replaces_scalar(self):
        assert merge_deep({"a": 1}, {"a": {"b": 2}}) == {"a": {"b": 2}}

    def test_inputs_not_mutated(self):
        target = {"income": {"salary": 1}}
        source = {"income": {"salary": 2}}
        merge_deep(target, source)
        assert target == {"income": {"salary": 1}}
        assert source == {"income": {"salary": 2}}
