"""
Unit tests for Pixel Depth.
"""

import sys
from io import BytesIO
from pathlib import Path
import tempfile
import numpy as np
import unittest
from unittest import mock

from PIL import Image

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from pixel_depth import (
    BatchProcessor,
    DepthConverter,
    InvalidImageError,
    build_mesh,
    convert_to_mesh,
)
from pixel_depth.background import BackgroundColorSet, BackgroundDetector
from pixel_depth.color import brightness, darken, hex_to_rgb, lighten, rgb_to_hex
from pixel_depth.config import ElevationConfig, Region, RenderConfig
from pixel_depth.elevation import ElevationMapper
from pixel_depth.exporters import OBJExporter
from pixel_depth.ingestion import PixelBuffer
from pixel_depth.projection import SideViewProjection
from pixel_depth.voxelizer import Voxel, VoxelModelBuilder

RED = (255, 0, 0)
NEAR_BLACK = (10, 10, 10)


def solid_image(width, height, color, alpha=255):
    """RGBA array filled with one color."""
    rgba = np.zeros((height, width, 4), dtype=np.uint8)
    rgba[:, :, :3] = color
    rgba[:, :, 3] = alpha
    return rgba


def encode_png(array):
    buffer = BytesIO()
    Image.fromarray(array).save(buffer, format="PNG")
    return buffer.getvalue()


def parse_obj(text):
    """Split OBJ text into vertex tuples and face tuples."""
    vertices, faces = [], []
    for line in text.splitlines():
        if line.startswith("v "):
            vertices.append(tuple(float(v) for v in line.split()[1:]))
        elif line.startswith("f "):
            faces.append(tuple(int(i) for i in line.split()[1:]))
    return vertices, faces


class TestColorMath(unittest.TestCase):
    """Tests for hex conversion and shading."""

    def test_hex_roundtrip(self):
        assert hex_to_rgb("#C8640A") == (200, 100, 10)
        assert hex_to_rgb("c8640a") == (200, 100, 10)
        assert hex_to_rgb("#fff") == (255, 255, 255)
        assert rgb_to_hex(200, 100, 10) == "#c8640a"

    def test_invalid_hex(self):
        with self.assertRaises(ValueError):
            hex_to_rgb("#12345")
        with self.assertRaises(ValueError):
            hex_to_rgb("#zzzzzz")

    def test_darken(self):
        """darken(c, p) = floor(c * (100 - p) / 100) per channel."""
        assert darken("#C8640A", 20) == "#a05008"
        assert darken("#C8640A", 35) == "#824106"
        assert darken("#C8640A", 100) == "#000000"

    def test_lighten(self):
        """lighten(c, p) = min(255, floor(c * (100 + p) / 100)) per channel."""
        assert lighten("#C8640A", 15) == "#e6730b"
        assert lighten("#F0F0F0", 15) == "#ffffff"
        assert lighten("#000000", 15) == "#000000"

    def test_brightness(self):
        assert brightness(0, 0, 0) == 0.0
        assert np.isclose(brightness(255, 255, 255), 1.0)
        assert np.isclose(brightness(200, 10, 10), (0.299 * 200 + 0.587 * 10 + 0.114 * 10) / 255)


class TestPixelBuffer(unittest.TestCase):
    """Tests for image ingestion."""

    def test_from_array_rgba(self):
        pixels = PixelBuffer.from_array(solid_image(4, 3, RED))
        assert pixels.size == (4, 3)
        assert pixels.channels == 4
        assert pixels.sample(3, 2, 0) == 255
        assert pixels.sample(3, 2, 3) == 255

    def test_from_bytes_rgb_has_no_alpha(self):
        rgb = np.full((5, 6, 3), 100, dtype=np.uint8)
        pixels = PixelBuffer.from_bytes(encode_png(rgb))
        assert pixels.channels == 3
        assert pixels.alpha is None
        assert np.all(pixels.opacity() == 255)

    def test_palette_with_transparency_becomes_rgba(self):
        img = Image.new("P", (4, 4), 0)
        img.putpalette([0, 0, 0, 255, 0, 0] + [0] * 762)
        img.info["transparency"] = 0
        buffer = BytesIO()
        img.save(buffer, format="PNG", transparency=0)

        pixels = PixelBuffer.from_bytes(buffer.getvalue())
        assert pixels.channels == 4
        assert pixels.sample(0, 0, 3) == 0

    def test_buffer_is_read_only(self):
        pixels = PixelBuffer.from_array(solid_image(2, 2, RED))
        with self.assertRaises(ValueError):
            pixels.samples[0, 0, 0] = 1

    def test_zero_size_rejected(self):
        with self.assertRaises(InvalidImageError):
            PixelBuffer.from_array(np.zeros((0, 5, 4), dtype=np.uint8))

    def test_bad_channel_count_rejected(self):
        with self.assertRaises(InvalidImageError):
            PixelBuffer.from_array(np.zeros((2, 2, 2), dtype=np.uint8))

    def test_undecodable_bytes_rejected(self):
        with self.assertRaises(InvalidImageError):
            PixelBuffer.from_bytes(b"definitely not an image")
        with self.assertRaises(InvalidImageError):
            PixelBuffer.from_bytes(b"")

    def test_missing_file_rejected(self):
        with self.assertRaises(InvalidImageError):
            PixelBuffer.from_path("/nonexistent/sprite.png")

    def test_oversized_image_rejected(self):
        data = encode_png(solid_image(8, 8, RED))
        with mock.patch.object(Image, "MAX_IMAGE_PIXELS", 10):
            with self.assertRaises(InvalidImageError):
                PixelBuffer.from_bytes(data)

    def test_out_of_range_samples_rejected(self):
        rgb = np.full((2, 2, 3), 100, dtype=np.int32)
        rgb[0, 0, 0] = 300
        with self.assertRaises(InvalidImageError):
            PixelBuffer.from_array(rgb)
        with self.assertRaises(InvalidImageError):
            PixelBuffer.from_array(np.full((2, 2), -1.0))

    def test_wide_dtype_in_range_accepted(self):
        rgb = np.full((2, 2, 3), 255, dtype=np.int64)
        pixels = PixelBuffer.from_array(rgb)
        assert pixels.sample(1, 1, 2) == 255

    def test_sample_out_of_range(self):
        pixels = PixelBuffer.from_array(solid_image(2, 2, RED))
        with self.assertRaises(IndexError):
            pixels.sample(2, 0, 0)


class TestBackgroundDetector(unittest.TestCase):
    """Tests for border-vote background detection."""

    def test_uniform_image(self):
        pixels = PixelBuffer.from_array(solid_image(3, 3, (200, 100, 10)))
        background = BackgroundDetector().detect(pixels)
        assert background == {(200, 100, 10)}

    def test_single_side_color_is_not_background(self):
        rgba = solid_image(5, 5, RED)
        rgba[0, 2, :3] = (0, 255, 0)  # Top edge only
        background = BackgroundDetector().detect(PixelBuffer.from_array(rgba))

        assert (0, 255, 0) not in background
        assert RED in background

    def test_corner_counts_for_two_sides(self):
        rgba = solid_image(5, 5, RED)
        rgba[0, 0, :3] = (0, 0, 255)  # Top-left corner only
        background = BackgroundDetector().detect(PixelBuffer.from_array(rgba))

        assert (0, 0, 255) in background

    def test_exact_match_only(self):
        rgba = solid_image(5, 5, RED)
        rgba[2, 2, :3] = (254, 0, 0)
        pixels = PixelBuffer.from_array(rgba)
        background = BackgroundDetector().detect(pixels)
        mask = background.mask(pixels)

        assert (254, 0, 0) not in background
        assert not mask[2, 2]
        assert mask[0, 0]

    def test_alpha_ignored(self):
        rgba = solid_image(4, 4, RED, alpha=0)
        background = BackgroundDetector().detect(PixelBuffer.from_array(rgba))
        assert RED in background

    def test_empty_set_mask(self):
        pixels = PixelBuffer.from_array(solid_image(3, 3, RED))
        mask = BackgroundColorSet().mask(pixels)
        assert mask.shape == (3, 3)
        assert not mask.any()


class TestElevationMapper(unittest.TestCase):
    """Tests for tier assignment."""

    def red_with_pixel(self, x, y, color, alpha=255):
        rgba = solid_image(10, 10, RED)
        rgba[y, x] = (*color, alpha)
        return PixelBuffer.from_array(rgba)

    def test_dark_pixel_in_focus_region(self):
        pixels = self.red_with_pixel(5, 6, NEAR_BLACK)
        elevation = ElevationMapper().map(pixels)

        assert elevation.tier(5, 6) == 15
        grid = elevation.grid.copy()
        grid[6, 5] = 0
        assert not grid.any()

    def test_region_bounds(self):
        assert Region().to_pixels(10, 10) == (3, 6, 4, 8)

    def test_uniform_image_is_flat(self):
        pixels = PixelBuffer.from_array(solid_image(3, 3, (20, 20, 20)))
        elevation = ElevationMapper().map(pixels)
        assert not elevation.grid.any()

    def test_transparent_pixel_is_flat(self):
        pixels = self.red_with_pixel(5, 6, NEAR_BLACK, alpha=0)
        assert ElevationMapper().map(pixels).tier(5, 6) == 0

    def test_background_dominates_regions(self):
        rgba = solid_image(10, 10, NEAR_BLACK)
        elevation = ElevationMapper().map(PixelBuffer.from_array(rgba))
        assert elevation.tier(5, 6) == 0

    def test_dark_outside_regions(self):
        pixels = self.red_with_pixel(1, 1, NEAR_BLACK)
        assert ElevationMapper().map(pixels).tier(1, 1) == 7

    def test_bright_pixel(self):
        pixels = self.red_with_pixel(5, 6, (255, 255, 255))
        assert ElevationMapper().map(pixels).tier(5, 6) == 10

    def test_center_region_when_focus_moved(self):
        config = ElevationConfig(focus=Region(0.0, 0.1, 0.0, 0.1))
        pixels = self.red_with_pixel(5, 6, NEAR_BLACK)
        assert ElevationMapper(config).map(pixels).tier(5, 6) == 10

    def test_focus_checked_before_center(self):
        config = ElevationConfig(low=1, mid=2, peak=3)
        pixels = self.red_with_pixel(5, 6, NEAR_BLACK)
        assert ElevationMapper(config).map(pixels).tier(5, 6) == 3

    def test_three_channel_image(self):
        rgb = np.zeros((10, 10, 3), dtype=np.uint8)
        rgb[:, :] = RED
        rgb[6, 5] = NEAR_BLACK
        elevation = ElevationMapper().map(PixelBuffer.from_array(rgb))
        assert elevation.tier(5, 6) == 15

    def test_deterministic(self):
        rng = np.random.default_rng(7)
        rgba = rng.integers(0, 256, size=(16, 12, 4), dtype=np.uint8)
        pixels = PixelBuffer.from_array(rgba)

        first = ElevationMapper().map(pixels)
        second = ElevationMapper().map(pixels)
        assert first.tobytes() == second.tobytes()

    def test_explicit_background_set(self):
        pixels = self.red_with_pixel(5, 6, NEAR_BLACK)
        background = BackgroundColorSet([NEAR_BLACK])
        elevation = ElevationMapper().map(pixels, background)

        assert elevation.tier(5, 6) == 0
        assert elevation.tier(0, 0) == 10  # Red is bright and not background here

    def test_invalid_config(self):
        with self.assertRaises(ValueError):
            Region(0.5, 0.2, 0.0, 1.0)
        with self.assertRaises(ValueError):
            ElevationConfig(brightness_threshold=1.5)


class TestVoxelModelBuilder(unittest.TestCase):
    """Tests for brightness voxelization."""

    def test_single_pixel(self):
        rgba = solid_image(1, 1, (200, 10, 10))
        voxels = VoxelModelBuilder().build(PixelBuffer.from_array(rgba))

        assert len(voxels) == 1
        voxel = voxels[0]
        assert voxel.position == (0, 0, 0)
        assert voxel.size[:2] == (1, 1)
        assert np.isclose(voxel.height, brightness(200, 10, 10))
        assert np.isclose(voxel.height, 0.262, atol=0.001)
        assert voxel.color == (200, 10, 10)

    def test_minimum_height(self):
        voxels = VoxelModelBuilder().build(PixelBuffer.from_array(solid_image(2, 2, (0, 0, 0))))
        assert all(v.height == 0.1 for v in voxels)

    def test_transparent_pixels_skipped(self):
        rgba = solid_image(3, 2, RED)
        rgba[1, 1, 3] = 0
        voxels = VoxelModelBuilder().build(PixelBuffer.from_array(rgba))

        assert len(voxels) == 5
        assert all(v.position[:2] != (1, 1) for v in voxels)

    def test_column_major_order(self):
        voxels = VoxelModelBuilder().build(PixelBuffer.from_array(solid_image(2, 2, RED)))
        assert [v.position[:2] for v in voxels] == [(0, 0), (0, 1), (1, 0), (1, 1)]

    def test_no_background_suppression(self):
        voxels = VoxelModelBuilder().build(PixelBuffer.from_array(solid_image(3, 3, RED)))
        assert len(voxels) == 9


class TestOBJExporter(unittest.TestCase):
    """Tests for mesh serialization."""

    def test_counts_and_index_range(self):
        voxels = [Voxel((x, 0, 0), (1, 1, 0.5), RED) for x in range(4)]
        vertices, faces = parse_obj(OBJExporter().to_string(voxels))

        assert len(vertices) == 32
        assert len(faces) == 40
        assert all(1 <= i <= 32 for face in faces for i in face)

    def test_indices_never_reused(self):
        voxels = [Voxel((x, 0, 0), (1, 1, 1), RED) for x in range(3)]
        _, faces = parse_obj(OBJExporter().to_string(voxels))

        for ordinal in range(3):
            used = {i for face in faces[ordinal * 10:(ordinal + 1) * 10] for i in face}
            first = 1 + 8 * ordinal
            assert used == set(range(first, first + 8))

    def test_document_layout(self):
        text = OBJExporter().to_string([Voxel((2, 3, 0), (1, 1, 0.25), RED)])
        lines = text.splitlines()

        assert lines[0].startswith("#")
        assert lines[1] == "v 2.000000 3.000000 0.000000"
        assert lines[7] == "v 3.000000 4.000000 0.250000"
        assert lines[8] == "v 2.000000 4.000000 0.250000"
        assert lines[9] == ""
        assert lines[10] == "f 5 6 7"
        assert len(lines) == 20
        assert "vn" not in text and "vt" not in text

    def test_bottom_face_omitted(self):
        _, faces = parse_obj(OBJExporter().to_string([Voxel((0, 0, 0), (1, 1, 1), RED)]))
        bottom = {1, 2, 3, 4}
        assert not any(set(face) <= bottom for face in faces)

    def test_vertex_colors(self):
        text = OBJExporter(include_colors=True).to_string([Voxel((0, 0, 0), (1, 1, 1), RED)])
        vertices, _ = parse_obj(text)
        assert vertices[0] == (0.0, 0.0, 0.0, 1.0, 0.0, 0.0)

    def test_empty(self):
        vertices, faces = parse_obj(OBJExporter().to_string([]))
        assert vertices == [] and faces == []

    def test_export_file(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "model.obj"
            OBJExporter().export([Voxel((0, 0, 0), (1, 1, 1), RED)], path)
            assert path.read_text().count("\nf ") == 10


class TestProjection(unittest.TestCase):
    """Tests for the side-view projection."""

    def test_ground_points_unchanged(self):
        proj = SideViewProjection(angle=45)
        assert proj.project(3, 4, 0) == (3, 4)

    def test_elevation_moves_up_and_right(self):
        proj = SideViewProjection(angle=30)
        sx, sy = proj.project(0, 0, 10)
        assert np.isclose(sx, 10 * np.cos(np.radians(30)))
        assert np.isclose(sy, -10 * np.sin(np.radians(30)))

    def test_face_winding(self):
        proj = SideViewProjection(angle=45)
        corners = proj.cell_corners(2, 3, 10)

        assert proj.top_face(corners)[0] == proj.project(2, 3, 10)
        assert proj.right_face(corners) == [
            proj.project(2, 4, 0), proj.project(2, 4, 10),
            proj.project(3, 4, 10), proj.project(3, 4, 0),
        ]
        assert proj.base_face(corners) == [(2, 3), (3, 3), (3, 4), (2, 4)]


class TestMeshMode(unittest.TestCase):
    """Integration tests for mode A."""

    def test_build_mesh_from_bytes(self):
        text = build_mesh(encode_png(solid_image(3, 2, RED)))
        vertices, faces = parse_obj(text)
        assert len(vertices) == 48
        assert len(faces) == 60

    def test_convert_to_mesh(self):
        result = convert_to_mesh(solid_image(2, 3, RED))
        assert result.format == "obj"
        assert result.dimensions == {"width": 2, "height": 3}
        assert len(result.preview) == 6
        assert result.preview[0]["position"] == [0, 0, 0]
        assert result.to_dict()["previewData"] == result.preview

    def test_empty_image_rejected(self):
        with self.assertRaises(InvalidImageError):
            build_mesh(np.zeros((0, 0, 4), dtype=np.uint8))


class TestDepthConverter(unittest.TestCase):
    """Integration tests for the converter facade."""

    def test_requires_image(self):
        with self.assertRaises(RuntimeError):
            DepthConverter().to_mesh()

    def test_exports(self):
        rgba = solid_image(10, 10, RED)
        rgba[6, 5, :3] = NEAR_BLACK

        with tempfile.TemporaryDirectory() as tmp:
            converter = DepthConverter().load_array(rgba)
            rendered = converter.export_png(Path(tmp) / "out.png", "7", "alice.eth")
            converter.export_obj(Path(tmp) / "out.obj")

            assert rendered.to_image().size == (130, 184)
            assert (Path(tmp) / "out.obj").exists()

        info = converter.preview()
        assert info["image_size"] == (10, 10)
        assert info["tier_histogram"] == {0: 99, 15: 1}
        assert info["voxel_count"] == 100

    def test_render_config_changes_canvas(self):
        converter = DepthConverter(render_config=RenderConfig(padding=0, extrusion_depth=1))
        converter.load_array(solid_image(4, 4, RED))
        rendered = converter.to_depth_image()
        # slack = ceil(15 * 1 * sin(45deg)) = 11
        assert (rendered.width, rendered.height) == (4, 15)


class TestBatchProcessor(unittest.TestCase):
    """Tests for directory conversion."""

    def test_process_directory(self):
        with tempfile.TemporaryDirectory() as tmp:
            src = Path(tmp) / "in"
            src.mkdir()
            for name in ("a", "b"):
                (src / f"{name}.png").write_bytes(encode_png(solid_image(4, 4, RED)))

            meshes = BatchProcessor().process_directory(src, Path(tmp) / "mesh", mode="mesh")
            images = BatchProcessor().process_directory(src, Path(tmp) / "depth", mode="depth")

            assert [Path(p).name for p in meshes] == ["a.obj", "b.obj"]
            assert [Path(p).name for p in images] == ["a-depth.png", "b-depth.png"]
            assert all(Path(p).exists() for p in meshes + images)

    def test_unknown_mode(self):
        with tempfile.TemporaryDirectory() as tmp:
            with self.assertRaises(ValueError):
                BatchProcessor().process_directory(tmp, tmp, mode="gltf")


if __name__ == "__main__":
    unittest.main(verbosity=2)
