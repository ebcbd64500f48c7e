"""
Export modules for mesh output.

Supported formats:
- Wavefront (.obj) - Universal text mesh, optional vertex colors
"""

from .obj_exporter import OBJExporter

__all__ = ["OBJExporter"]
