"""Planning module: voxel indexing, reachability maps and path helpers."""

from src.planning.path_utils import path_length, point_on_path
from src.planning.reachability_map import (
    GeometryMismatchError,
    ReachabilityMap,
    ReachabilityMapError,
)
from src.planning.voxel_indexer import VoxelIndexer

__all__ = [
    "GeometryMismatchError",
    "ReachabilityMap",
    "ReachabilityMapError",
    "VoxelIndexer",
    "path_length",
    "point_on_path",
]
