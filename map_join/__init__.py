from importlib.metadata import PackageNotFoundError, version

from .arraylike import (
    ArrayLike,
    LabeledArray,
    NoJoin,
    no_join,
    vector_as_named_array,
    with_axis_names,
)
from .assemble import assemble
from .cache import CacheStore
from .errors import (
    AxisConflictError,
    InvalidAxisNameError,
    MapJoinError,
    UnmarkedScalarError,
)
from .identity import cell_cache_key
from .index_space import build_projection_maps, enumerate_cells
from .join import JoinPlan, MapJoin, map_join, map_join_
from .registry import AxisRegistry, build_registry, normalize_inputs
from .runner_protocol import CacheStatus, WorkUnit
from .runners import map_process_pool, map_sequential, map_thread_pool
from .scheduler import Diagnostics, run_cells

try:
    __version__ = version("map-join")
except PackageNotFoundError:
    __version__ = "unknown"

__all__ = [
    "ArrayLike",
    "AxisConflictError",
    "AxisRegistry",
    "CacheStatus",
    "CacheStore",
    "Diagnostics",
    "InvalidAxisNameError",
    "JoinPlan",
    "LabeledArray",
    "MapJoin",
    "MapJoinError",
    "NoJoin",
    "UnmarkedScalarError",
    "WorkUnit",
    "__version__",
    "assemble",
    "build_projection_maps",
    "build_registry",
    "cell_cache_key",
    "enumerate_cells",
    "map_join",
    "map_join_",
    "map_process_pool",
    "map_sequential",
    "map_thread_pool",
    "no_join",
    "normalize_inputs",
    "run_cells",
    "vector_as_named_array",
    "with_axis_names",
]
