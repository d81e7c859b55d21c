import numpy as np
import pytest  # type: ignore[import-not-found]

from map_join import (
    AxisConflictError,
    InvalidAxisNameError,
    LabeledArray,
    UnmarkedScalarError,
    build_registry,
    no_join,
    normalize_inputs,
    vector_as_named_array,
    with_axis_names,
)


def _registry(*arrays, policy="fail"):
    return build_registry(normalize_inputs(arrays), policy)


def test_disjoint_axes_are_concatenated_in_first_seen_order():
    registry = _registry(
        vector_as_named_array([1, 2], "X", ["a", "b"]),
        vector_as_named_array([1, 2, 3], "Y", [1, 2, 3]),
    )
    assert registry.names == ("X", "Y")
    assert registry.lengths == (2, 3)
    assert registry.labels("Y") == ("1", "2", "3")
    assert registry.size == 6


def test_shared_axis_with_identical_labels_is_kept_once():
    registry = _registry(
        LabeledArray(np.zeros((2, 3)), ["A", "B"], [["s1", "s2"], None]),
        vector_as_named_array([1, 2], "A", ["s1", "s2"]),
    )
    assert registry.names == ("A", "B")
    assert registry.labels("A") == ("s1", "s2")
    assert registry.labels("B") == ("", "", "")


def test_real_labels_replace_trivial_ones():
    registry = _registry(
        with_axis_names([1, 2], ["X"]),
        vector_as_named_array([3, 4], "X", ["p", "q"]),
    )
    assert registry.labels("X") == ("p", "q")


def test_trivial_labels_do_not_override_real_ones():
    registry = _registry(
        vector_as_named_array([3, 4], "X", ["p", "q"]),
        with_axis_names([1, 2], ["X"]),
    )
    assert registry.labels("X") == ("p", "q")


def test_label_mismatch_fails_by_default():
    with pytest.raises(AxisConflictError) as excinfo:
        _registry(
            vector_as_named_array([1, 2, 3], "S", ["a", "b", "c"]),
            vector_as_named_array([1, 2, 3], "S", ["b", "c", "d"]),
        )
    err = excinfo.value
    assert err.axis_name == "S"
    assert err.input_label == "#1"
    assert err.labels == ("b", "c", "d")
    assert err.existing_labels == ("a", "b", "c")
    assert "do not match" in str(err)


def test_label_mismatch_intersects_in_first_seen_order():
    registry = _registry(
        vector_as_named_array([1, 2, 3], "S", ["a", "b", "c"]),
        vector_as_named_array([1, 2, 3], "S", ["b", "c", "d"]),
        policy="intersect",
    )
    assert registry.labels("S") == ("b", "c")


def test_intersect_follows_first_input_order():
    registry = _registry(
        vector_as_named_array([1, 2, 3], "S", ["c", "a", "b"]),
        vector_as_named_array([1, 2, 3], "S", ["a", "b", "c"]),
        policy="intersect",
    )
    assert registry.labels("S") == ("c", "a", "b")


def test_length_mismatch_fails_under_fail_policy():
    with pytest.raises(AxisConflictError, match="inconsistent lengths"):
        _registry(
            vector_as_named_array([1, 2, 3], "S", ["a", "b", "c"]),
            vector_as_named_array([1, 2], "S", ["c", "a"]),
        )


def test_length_mismatch_with_labels_fails_under_intersect():
    with pytest.raises(AxisConflictError, match="inconsistent lengths") as excinfo:
        _registry(
            vector_as_named_array([1, 2, 3], "S", ["a", "b", "c"]),
            vector_as_named_array([1, 2], "S", ["c", "a"]),
            policy="intersect",
        )
    assert excinfo.value.labels == ("c", "a")
    assert excinfo.value.existing_labels == ("a", "b", "c")


@pytest.mark.parametrize("first_trivial", [True, False])
def test_length_mismatch_with_trivial_labels_fails_under_intersect(first_trivial):
    trivial = with_axis_names([1, 2], ["S"])
    labelled = vector_as_named_array([1, 2, 3], "S", ["a", "b", "c"])
    arrays = (trivial, labelled) if first_trivial else (labelled, trivial)
    with pytest.raises(AxisConflictError):
        _registry(*arrays, policy="intersect")


def test_empty_intersection_warns():
    with pytest.warns(UserWarning, match="empty"):
        registry = _registry(
            vector_as_named_array([1, 2], "S", ["a", "b"]),
            vector_as_named_array([1, 2], "S", ["c", "d"]),
            policy="intersect",
        )
    assert registry.labels("S") == ()


def test_duplicate_axis_name_within_input():
    duplicated = LabeledArray(
        np.arange(4).reshape(2, 2), ["DA", "DA"], [["S1", "S2"], ["S1", "S2"]]
    )
    with pytest.raises(InvalidAxisNameError) as excinfo:
        build_registry(normalize_inputs({"C": duplicated}))
    assert excinfo.value.input_label == "'C'"
    assert excinfo.value.axis_position == 1
    assert "repeats the name 'DA'" in str(excinfo.value)


def test_unnamed_axis():
    with pytest.raises(InvalidAxisNameError, match="unnamed"):
        _registry(LabeledArray([1, 2], [""]))


def test_same_axis_in_different_inputs_is_not_a_duplicate():
    registry = _registry(
        vector_as_named_array([1, 2], "X"),
        vector_as_named_array([3, 4], "X"),
    )
    assert registry.names == ("X",)


def test_unknown_policy():
    with pytest.raises(ValueError, match="mismatch_policy"):
        _registry(vector_as_named_array([1], "X"), policy="union")


def test_scalar_inputs_contribute_no_axes():
    inputs = normalize_inputs([no_join(142), no_join(vector_as_named_array([1], "X"))])
    registry = build_registry(inputs)
    assert registry.is_empty()
    assert registry.size == 1
    assert all(join_input.is_scalar for join_input in inputs)


def test_unmarked_scalar_is_rejected():
    with pytest.raises(UnmarkedScalarError) as excinfo:
        normalize_inputs({"D": 142})
    assert excinfo.value.input_label == "'D'"
    assert "no_join" in str(excinfo.value)


def test_zero_axis_array_is_rejected():
    with pytest.raises(UnmarkedScalarError):
        normalize_inputs([LabeledArray(np.float64(1.5), [])])


def test_unmarked_scalar_is_wrapped_when_not_strict():
    with pytest.warns(UserWarning, match="no_join"):
        inputs = normalize_inputs([142], strict_scalars=False)
    assert inputs[0].is_scalar
    assert inputs[0].value.value == 142


def test_named_inputs_follow_positional_ones():
    inputs = normalize_inputs(
        [vector_as_named_array([1], "X")], {"b": vector_as_named_array([1], "Y")}
    )
    assert [join_input.label for join_input in inputs] == ["#0", "'b'"]


def test_duplicate_input_names():
    with pytest.raises(ValueError, match="more than once"):
        normalize_inputs({"a": no_join(1)}, {"a": no_join(2)})
