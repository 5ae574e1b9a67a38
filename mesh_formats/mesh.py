"""
Decoded mesh value handed to the scene assembly stage.
"""

from dataclasses import dataclass, field
from typing import Tuple

import numpy as np

from .constants import DEFAULT_COLOR


def _frozen_array(values, dtype, columns: int) -> np.ndarray:
    array = np.array(values, dtype=dtype).reshape(-1, columns)
    array.flags.writeable = False
    return array


@dataclass(frozen=True, eq=False)
class MeshData:
    """
    One decoded triangle mesh.

    Attributes:
        name: Display name for the owning node
        vertices: (N, 3) float32 positions
        normals: (N, 3) float32 normals, parallel to ``vertices``
        faces: (M, 3) int32 vertex index triples
        color: RGBA default color for the material
        has_custom_color: True when ``color`` came from the file itself
    """
    name: str
    vertices: np.ndarray
    normals: np.ndarray
    faces: np.ndarray
    color: Tuple[float, float, float, float] = DEFAULT_COLOR
    has_custom_color: bool = False
    metadata: dict = field(default_factory=dict)

    def __post_init__(self):
        # Copies are taken so the caller's arrays can't mutate a decoded mesh
        object.__setattr__(self, "vertices", _frozen_array(self.vertices, np.float32, 3))
        object.__setattr__(self, "normals", _frozen_array(self.normals, np.float32, 3))
        object.__setattr__(self, "faces", _frozen_array(self.faces, np.int32, 3))
        object.__setattr__(self, "color", tuple(float(c) for c in self.color))
        if len(self.normals) != len(self.vertices):
            raise ValueError(
                f"normals ({len(self.normals)}) and vertices ({len(self.vertices)}) must be parallel"
            )

    @property
    def num_vertices(self) -> int:
        return len(self.vertices)

    @property
    def num_faces(self) -> int:
        return len(self.faces)

    def bounds(self) -> Tuple[np.ndarray, np.ndarray]:
        """Axis-aligned bounding box as (min, max)."""
        if not len(self.vertices):
            zero = np.zeros(3, dtype=np.float32)
            return zero, zero
        return self.vertices.min(axis=0), self.vertices.max(axis=0)

    def summary(self) -> dict:
        bbox_min, bbox_max = self.bounds()
        return {
            "name": self.name,
            "vertices": self.num_vertices,
            "faces": self.num_faces,
            "color": self.color,
            "has_custom_color": self.has_custom_color,
            "bbox_min": [float(v) for v in bbox_min],
            "bbox_max": [float(v) for v in bbox_max],
        }


def sequential_faces(face_count: int) -> np.ndarray:
    """Index triples (0, 1, 2), (3, 4, 5), ... for unshared vertex lists."""
    return np.arange(face_count * 3, dtype=np.int32).reshape(face_count, 3)
