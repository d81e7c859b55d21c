"""Index space enumeration and per-input projection maps."""

from __future__ import annotations

import dataclasses
import itertools
from typing import Sequence, Tuple

from .arraylike import is_trivial_axis
from .errors import AxisConflictError
from .registry import AxisRegistry, JoinInput

Cell = Tuple[int, ...]
CellKey = Tuple[Tuple[str, str, int], ...]


@dataclasses.dataclass(frozen=True)
class AxisProjection:
    """Where one input axis reads its position from in a cell.

    ``lookup`` maps registry positions to input positions; None means the
    two coincide.
    """

    registry_position: int
    lookup: Tuple[int, ...] | None = None

    def position(self, cell: Cell) -> int:
        index = cell[self.registry_position]
        if self.lookup is None:
            return index
        return self.lookup[index]


ProjectionMap = Tuple[AxisProjection, ...]


def enumerate_cells(registry: AxisRegistry) -> list[Cell]:
    return list(itertools.product(*(range(n) for n in registry.lengths)))


def build_projection_maps(
    registry: AxisRegistry, inputs: Sequence[JoinInput]
) -> list[ProjectionMap]:
    return [_projection_map(registry, join_input) for join_input in inputs]


def project_cell(projection_map: ProjectionMap, cell: Cell) -> Tuple[int, ...]:
    return tuple(axis.position(cell) for axis in projection_map)


def cell_key(registry: AxisRegistry, cell: Cell) -> CellKey:
    return tuple(
        (name, labels[index], index)
        for (name, labels), index in zip(registry.axis_labels.items(), cell)
    )


def _projection_map(registry: AxisRegistry, join_input: JoinInput) -> ProjectionMap:
    projections: list[AxisProjection] = []
    for axis_name, labels in join_input.axes:
        registry_labels = registry.labels(axis_name)
        registry_position = registry.position(axis_name)
        if labels == registry_labels or (
            is_trivial_axis(labels) and len(labels) == len(registry_labels)
        ):
            projections.append(AxisProjection(registry_position))
            continue
        if is_trivial_axis(labels):
            raise AxisConflictError(
                axis_name,
                join_input.label,
                labels,
                registry_labels,
                reason="unlabeled axis cannot be aligned after intersection",
            )
        first_position: dict[str, int] = {}
        for position, label in enumerate(labels):
            first_position.setdefault(label, position)
        lookup = tuple(first_position[label] for label in registry_labels)
        projections.append(AxisProjection(registry_position, lookup))
    return tuple(projections)
