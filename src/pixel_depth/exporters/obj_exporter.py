"""
Wavefront OBJ Format Exporter

OBJ is a universal text-based format supported by virtually all 3D software.
Each voxel becomes a cuboid of 8 vertices and 10 triangles; the bottom face
rests on the ground plane and is never visible, so it is not emitted.

Layout of the generated document:
    # header comment
    v x y z        (8 per voxel)
    <blank line>
    f i j k        (10 per voxel, 1-based indices)

Optionally vertex colors can be appended (v x y z r g b), which Blender,
MeshLab and most viewers understand.
"""

from pathlib import Path
from typing import Iterable, List, Sequence, Tuple, Union

from ..voxelizer import Voxel

HEADER = "# Generated by pixel-depth"

VERTICES_PER_VOXEL = 8
FACES_PER_VOXEL = 10

# Triangles of one cuboid as offsets from its first vertex.
# Vertex order: 0-3 bottom quad, 4-7 top quad (same xy order).
CUBOID_TRIANGLES: Tuple[Tuple[int, int, int], ...] = (
    # Top
    (4, 5, 6), (4, 6, 7),
    # Front
    (0, 1, 5), (0, 5, 4),
    # Back
    (2, 3, 7), (2, 7, 6),
    # Left
    (0, 3, 7), (0, 7, 4),
    # Right
    (1, 2, 6), (1, 6, 5),
)


def cuboid_vertices(voxel: Voxel) -> List[Tuple[float, float, float]]:
    """
    The 8 corners of a voxel.

    Returns:
        Bottom quad (z) followed by the top quad (z + height)
    """
    x, y, z = voxel.position
    w, d, h = voxel.size
    return [
        (x, y, z),
        (x + w, y, z),
        (x + w, y + d, z),
        (x, y + d, z),
        (x, y, z + h),
        (x + w, y, z + h),
        (x + w, y + d, z + h),
        (x, y + d, z + h),
    ]


class OBJExporter:
    """
    Export voxel lists to Wavefront OBJ text.

    Supports:
    - Plain geometry (v x y z / f i j k)
    - Extended vertex colors (v x y z r g b)
    """

    def __init__(self, include_colors: bool = False, precision: int = 6):
        """
        Initialize the exporter.

        Args:
            include_colors: Append normalized vertex colors to each vertex line
            precision: Decimal places for vertex coordinates
        """
        self.include_colors = include_colors
        self.precision = precision

    def _format_vertex(self, v: Sequence[float], color: Sequence[int]) -> str:
        p = self.precision
        line = f"v {v[0]:.{p}f} {v[1]:.{p}f} {v[2]:.{p}f}"
        if self.include_colors:
            r, g, b = color[0] / 255.0, color[1] / 255.0, color[2] / 255.0
            line += f" {r:.4f} {g:.4f} {b:.4f}"
        return line

    def build(self, voxels: Iterable[Voxel]) -> Tuple[List[str], List[Tuple[int, int, int]]]:
        """
        Generate vertex lines and face index triples.

        Args:
            voxels: Voxels in output order

        Returns:
            (vertex_lines, faces) where faces hold 1-based vertex indices
        """
        vertex_lines = []
        faces = []
        vertex_index = 1  # OBJ indices start from 1

        for voxel in voxels:
            for v in cuboid_vertices(voxel):
                vertex_lines.append(self._format_vertex(v, voxel.color))

            for a, b, c in CUBOID_TRIANGLES:
                faces.append((vertex_index + a, vertex_index + b, vertex_index + c))

            vertex_index += VERTICES_PER_VOXEL

        return vertex_lines, faces

    def to_string(self, voxels: Iterable[Voxel]) -> str:
        """
        Serialize voxels to OBJ text.

        Args:
            voxels: Voxels in output order

        Returns:
            OBJ document
        """
        vertex_lines, faces = self.build(voxels)

        lines = [HEADER]
        lines.extend(vertex_lines)
        lines.append("")
        lines.extend(f"f {i} {j} {k}" for i, j, k in faces)

        return "\n".join(lines) + "\n"

    def export(self, voxels: Iterable[Voxel], output_path: Union[str, Path]):
        """
        Write voxels to an OBJ file.

        Args:
            voxels: Voxels in output order
            output_path: Output file path (.obj)
        """
        output_path = Path(output_path)
        with open(output_path, "w") as f:
            f.write(self.to_string(voxels))
