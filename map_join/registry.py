"""Input normalization and the axis registry."""

from __future__ import annotations

import dataclasses
import math
import warnings
from typing import Any, Literal, Mapping, Sequence, Tuple

from .arraylike import ArrayLike, AxisSpec, NoJoin, is_trivial_axis
from .errors import AxisConflictError, InvalidAxisNameError, UnmarkedScalarError

MismatchPolicy = Literal["fail", "intersect"]
MISMATCH_POLICIES: Tuple[str, ...] = ("fail", "intersect")


@dataclasses.dataclass(frozen=True)
class JoinInput:
    """One argument of a join, with its axes read once."""

    position: int
    name: str | None
    value: Any
    axes: AxisSpec

    @property
    def label(self) -> str:
        if self.name is None:
            return f"#{self.position}"
        return repr(self.name)

    @property
    def is_scalar(self) -> bool:
        return isinstance(self.value, NoJoin)


@dataclasses.dataclass
class AxisRegistry:
    """Ordered mapping from axis name to merged labels."""

    axis_labels: dict[str, Tuple[str, ...]] = dataclasses.field(default_factory=dict)

    @property
    def names(self) -> Tuple[str, ...]:
        return tuple(self.axis_labels)

    @property
    def lengths(self) -> Tuple[int, ...]:
        return tuple(len(labels) for labels in self.axis_labels.values())

    @property
    def size(self) -> int:
        return math.prod(self.lengths)

    def is_empty(self) -> bool:
        return not self.axis_labels

    def position(self, name: str) -> int:
        return self.names.index(name)

    def labels(self, name: str) -> Tuple[str, ...]:
        return self.axis_labels[name]


def normalize_inputs(
    arraylike_args: Mapping[str, Any] | Sequence[Any],
    named_args: Mapping[str, Any] | None = None,
    *,
    strict_scalars: bool = True,
) -> list[JoinInput]:
    """Read the axes of every input.

    A mapping gives named inputs and a sequence unnamed ones; ``named_args``
    appends named inputs after unnamed ones.
    """
    entries: list[Tuple[str | None, Any]] = []
    if isinstance(arraylike_args, Mapping):
        entries.extend(arraylike_args.items())
    else:
        entries.extend((None, value) for value in arraylike_args)
    if named_args:
        entries.extend(named_args.items())
    inputs: list[JoinInput] = []
    seen_names: set[str] = set()
    for position, (name, value) in enumerate(entries):
        if name is not None:
            if not isinstance(name, str) or not name.isidentifier():
                raise ValueError(
                    f"Input names must be valid identifiers, got {name!r}"
                )
            if name in seen_names:
                raise ValueError(f"Input name {name!r} given more than once")
            seen_names.add(name)
        if isinstance(value, NoJoin):
            inputs.append(JoinInput(position, name, value, ()))
            continue
        axes = _read_axes(value)
        if not axes:
            join_input = JoinInput(position, name, NoJoin(value), ())
            if strict_scalars:
                raise UnmarkedScalarError(join_input.label, value)
            warnings.warn(
                f"Input {join_input.label} has no axes but was not marked "
                "no_join; treating it as a scalar",
                stacklevel=3,
            )
            inputs.append(join_input)
            continue
        inputs.append(JoinInput(position, name, value, axes))
    return inputs


def build_registry(
    inputs: Sequence[JoinInput], mismatch_policy: MismatchPolicy = "fail"
) -> AxisRegistry:
    if mismatch_policy not in MISMATCH_POLICIES:
        raise ValueError(
            f"Unknown mismatch_policy {mismatch_policy!r}; "
            f"expected one of {MISMATCH_POLICIES!r}"
        )
    registry = AxisRegistry()
    for join_input in inputs:
        _validate_axis_names(join_input)
        for axis_name, labels in join_input.axes:
            existing = registry.axis_labels.get(axis_name)
            if existing is None:
                registry.axis_labels[axis_name] = labels
                continue
            merged = _merge_labels(
                axis_name, join_input, existing, labels, mismatch_policy
            )
            if merged is not existing:
                registry.axis_labels[axis_name] = merged
    return registry


def _read_axes(value: Any) -> AxisSpec:
    if not isinstance(value, ArrayLike):
        return ()
    return tuple(
        (name, tuple(labels)) for name, labels in value.axes
    )


def _validate_axis_names(join_input: JoinInput) -> None:
    seen: set[str] = set()
    for axis_position, (axis_name, _) in enumerate(join_input.axes):
        if not isinstance(axis_name, str) or not axis_name or axis_name in seen:
            raise InvalidAxisNameError(join_input.label, axis_position, axis_name)
        seen.add(axis_name)


def _merge_labels(
    axis_name: str,
    join_input: JoinInput,
    existing: Tuple[str, ...],
    labels: Tuple[str, ...],
    mismatch_policy: MismatchPolicy,
) -> Tuple[str, ...]:
    existing_trivial = is_trivial_axis(existing)
    labels_trivial = is_trivial_axis(labels)
    # Lengths must agree under every policy; intersect only resolves labels.
    if len(existing) != len(labels):
        raise AxisConflictError(
            axis_name,
            join_input.label,
            labels,
            existing,
            reason="inconsistent lengths",
        )
    if existing == labels or labels_trivial:
        return existing
    if existing_trivial:
        return labels
    if mismatch_policy == "fail":
        raise AxisConflictError(
            axis_name,
            join_input.label,
            labels,
            existing,
            reason="labels do not match",
        )
    return _intersect(axis_name, existing, labels)


def _intersect(
    axis_name: str, existing: Tuple[str, ...], labels: Tuple[str, ...]
) -> Tuple[str, ...]:
    available = set(labels)
    seen: set[str] = set()
    merged: list[str] = []
    for label in existing:
        if label and label in available and label not in seen:
            merged.append(label)
            seen.add(label)
    if not merged:
        warnings.warn(
            f"Label intersection for axis {axis_name!r} is empty",
            stacklevel=4,
        )
    return tuple(merged)
