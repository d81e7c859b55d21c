import pytest  # type: ignore[import-not-found]

from map_join import AxisRegistry, LabeledArray, assemble


def test_empty_registry_unwraps_single_output():
    output = [1, 2, 3]
    assert assemble(AxisRegistry(), [output]) is output


def test_outputs_fill_row_major():
    registry = AxisRegistry({"X": ("a", "b"), "Y": ("1", "2", "3")})
    result = assemble(registry, list("uvwxyz"))
    assert isinstance(result, LabeledArray)
    assert result.values.dtype == object
    assert result.values.tolist() == [["u", "v", "w"], ["x", "y", "z"]]
    assert result.sel(X="b", Y="1") == "x"


def test_list_outputs_stay_whole():
    registry = AxisRegistry({"X": ("a", "b")})
    result = assemble(registry, [[1, 2], [3, 4]])
    assert result.shape == (2,)
    assert result.sel(X="b") == [3, 4]


def test_output_count_must_match():
    with pytest.raises(ValueError, match="Expected 2 outputs"):
        assemble(AxisRegistry({"X": ("a", "b")}), [1])
    with pytest.raises(ValueError, match="Expected one output"):
        assemble(AxisRegistry(), [1, 2])
