"""Array-like capability protocol, the no-join marker and a labeled array."""

from __future__ import annotations

import dataclasses
from typing import Any, Mapping, Protocol, Sequence, Tuple, runtime_checkable

import numpy as np

AxisSpec = Tuple[Tuple[str, Tuple[str, ...]], ...]


@runtime_checkable
class ArrayLike(Protocol):
    """Capabilities the join engine needs from an input.

    ``axes`` lists (name, labels) pairs in axis order, where an empty label
    marks an unnamed element. ``select`` returns the element at one position
    per axis.
    """

    @property
    def axes(self) -> AxisSpec: ...

    def select(self, positions: Tuple[int, ...]) -> Any: ...


@dataclasses.dataclass(frozen=True, eq=False)
class NoJoin:
    """Marks a value as a constant passed unchanged to every call."""

    value: Any


def no_join(value: Any) -> NoJoin:
    return NoJoin(value)


def is_trivial_axis(labels: Sequence[str]) -> bool:
    return all(label == "" for label in labels)


def _as_label(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    return str(value)


class LabeledArray:
    """Numpy array whose axes carry names and string labels."""

    def __init__(
        self,
        values: Any,
        dims: Sequence[str],
        labels: Sequence[Sequence[Any] | None] | None = None,
        *,
        dtype: Any = None,
    ) -> None:
        array = np.asarray(values, dtype=dtype)
        dims = tuple(dims)
        if array.ndim != len(dims):
            raise ValueError(
                f"Got {len(dims)} dims {dims!r} for an array with {array.ndim} axes"
            )
        if labels is None:
            labels = [None] * len(dims)
        if len(labels) != len(dims):
            raise ValueError(
                f"Got {len(labels)} label sequences for {len(dims)} dims"
            )
        normalized: list[Tuple[str, ...]] = []
        for dim, size, axis_labels in zip(dims, array.shape, labels):
            if axis_labels is None:
                normalized.append(("",) * size)
                continue
            axis_tuple = tuple(_as_label(label) for label in axis_labels)
            if len(axis_tuple) != size:
                raise ValueError(
                    f"Axis {dim!r} has length {size} but {len(axis_tuple)} labels"
                )
            normalized.append(axis_tuple)
        self.values = array
        self.dims = dims
        self.labels = tuple(normalized)

    @property
    def axes(self) -> AxisSpec:
        return tuple(zip(self.dims, self.labels))

    @property
    def shape(self) -> Tuple[int, ...]:
        return self.values.shape

    @property
    def ndim(self) -> int:
        return self.values.ndim

    def select(self, positions: Tuple[int, ...]) -> Any:
        return self.values[tuple(positions)]

    def isel(self, **positions: int) -> Any:
        """Index by position on named axes; unnamed axes are kept whole."""
        self._check_dims(positions)
        index = tuple(positions.get(dim, slice(None)) for dim in self.dims)
        kept = [i for i, dim in enumerate(self.dims) if dim not in positions]
        selected = self.values[index]
        if not kept:
            return selected
        return LabeledArray(
            selected,
            [self.dims[i] for i in kept],
            [self.labels[i] for i in kept],
        )

    def sel(self, **labels: Any) -> Any:
        """Index by label on named axes; unnamed axes are kept whole."""
        self._check_dims(labels)
        positions: dict[str, int] = {}
        for dim, label in labels.items():
            axis_labels = self.labels[self.dims.index(dim)]
            key = _as_label(label)
            try:
                positions[dim] = axis_labels.index(key)
            except ValueError:
                raise KeyError(f"Label {key!r} not found on axis {dim!r}") from None
        return self.isel(**positions)

    def astype(self, dtype: Any) -> "LabeledArray":
        return LabeledArray(self.values.astype(dtype), self.dims, self.labels)

    def to_dict(self) -> dict[Tuple[str, ...], Any]:
        """Map each label combination to its element."""
        result: dict[Tuple[str, ...], Any] = {}
        for index in np.ndindex(*self.shape):
            key = tuple(self.labels[axis][i] for axis, i in enumerate(index))
            result[key] = self.values[index]
        return result

    def _check_dims(self, requested: Mapping[str, Any]) -> None:
        if len(set(self.dims)) != len(self.dims):
            raise ValueError(f"Cannot index by name with repeated dims {self.dims!r}")
        unknown = [dim for dim in requested if dim not in self.dims]
        if unknown:
            raise KeyError(f"Unknown dims {unknown!r}; available: {self.dims!r}")

    def __repr__(self) -> str:
        axes = ", ".join(f"{dim}={len(labels)}" for dim, labels in self.axes)
        return f"LabeledArray({axes}, dtype={self.values.dtype})"


def vector_as_named_array(
    values: Sequence[Any], dim: str, labels: Sequence[Any] | None = None
) -> LabeledArray:
    """One-axis array named ``dim``; the axis is trivial when ``labels`` is None."""
    return LabeledArray(values, [dim], [labels])


def with_axis_names(values: Any, dims: Sequence[str]) -> LabeledArray:
    """Name the axes of ``values`` without labelling their elements."""
    return LabeledArray(values, dims)
