"""Errors raised while joining array-like inputs."""

from __future__ import annotations

from typing import Sequence


class MapJoinError(ValueError):
    """Base class for join errors."""


class InvalidAxisNameError(MapJoinError):
    """An input has an unnamed axis or repeats an axis name."""

    def __init__(self, input_label: str, axis_position: int, axis_name: object):
        self.input_label = input_label
        self.axis_position = axis_position
        self.axis_name = axis_name
        if axis_name is None or axis_name == "":
            problem = "is unnamed"
        elif not isinstance(axis_name, str):
            problem = f"has a non-string name {axis_name!r}"
        else:
            problem = f"repeats the name {axis_name!r}"
        super().__init__(
            "All axes must be named uniquely within an input. "
            f"Axis {axis_position} of input {input_label} {problem}."
        )


class AxisConflictError(MapJoinError):
    """Two inputs disagree on an axis in a way the mismatch policy cannot fix."""

    def __init__(
        self,
        axis_name: str,
        input_label: str,
        labels: Sequence[str],
        existing_labels: Sequence[str],
        *,
        reason: str,
    ):
        self.axis_name = axis_name
        self.input_label = input_label
        self.labels = tuple(labels)
        self.existing_labels = tuple(existing_labels)
        self.reason = reason
        super().__init__(
            f"Axis {axis_name!r}: {reason}. "
            f"Labels in input {input_label}: {_summarize(self.labels)} "
            f"(length {len(self.labels)}). "
            f"Previous labels: {_summarize(self.existing_labels)} "
            f"(length {len(self.existing_labels)})."
        )


class UnmarkedScalarError(MapJoinError):
    """A zero-axis input was not wrapped with ``no_join``."""

    def __init__(self, input_label: str, value: object):
        self.input_label = input_label
        self.value_type = type(value).__name__
        super().__init__(
            f"Input {input_label} ({self.value_type}) has no axes but is not "
            "marked as a scalar. Wrap it with no_join(...) or pass "
            "strict_scalars=False."
        )


def _summarize(labels: Sequence[str]) -> str:
    if len(labels) <= 6:
        return repr(list(labels))
    head = ", ".join(repr(label) for label in labels[:3])
    tail = ", ".join(repr(label) for label in labels[-2:])
    return f"[{head}, ..., {tail}]"
