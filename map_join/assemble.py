from __future__ import annotations

from typing import Any, Sequence

import numpy as np

from .arraylike import LabeledArray
from .registry import AxisRegistry


def assemble(registry: AxisRegistry, outputs: Sequence[Any]) -> Any:
    """Shape per-cell outputs by the registry axes.

    With no axes the single output is returned as is.
    """
    if registry.is_empty():
        if len(outputs) != 1:
            raise ValueError(f"Expected one output without axes, got {len(outputs)}")
        return outputs[0]
    if len(outputs) != registry.size:
        raise ValueError(
            f"Expected {registry.size} outputs for shape {registry.lengths}, "
            f"got {len(outputs)}"
        )
    flat = np.empty(len(outputs), dtype=object)
    for index, output in enumerate(outputs):
        flat[index] = output
    return LabeledArray(
        flat.reshape(registry.lengths),
        registry.names,
        list(registry.axis_labels.values()),
    )
