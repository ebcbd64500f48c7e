#!/usr/bin/env python3
"""
Pixel Depth Demo Script

This script demonstrates both conversion modes by:
1. Creating synthetic test sprites (no external images needed)
2. Rendering depth images with identifier and owner overlays
3. Exporting brightness voxel meshes
4. Printing background, tier and mesh statistics

Run with: python examples/demo.py
"""

import sys
from pathlib import Path
import numpy as np
import time

# Add src to path for development
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from pixel_depth import DepthConverter


def create_test_sprite_punk(size: int = 24) -> np.ndarray:
    """
    Create a small portrait on a flat backdrop.

    Returns:
        RGBA array
    """
    rgba = np.zeros((size, size, 4), dtype=np.uint8)
    rgba[:, :] = [99, 133, 150, 255]  # Backdrop

    # Face
    for y in range(size // 4, size - 2):
        for x in range(size // 3, size - size // 4):
            rgba[y, x] = [219, 177, 128, 255]

    # Eyes and mouth (dark, land in the focus region)
    rgba[size // 2, size // 2 - 1] = [20, 20, 20, 255]
    rgba[size // 2, size // 2 + 2] = [20, 20, 20, 255]
    rgba[2 * size // 3, size // 2:size // 2 + 3] = [40, 10, 10, 255]

    # Hair
    rgba[size // 4 - 2:size // 4, size // 3:size - size // 4] = [30, 20, 10, 255]

    return rgba


def create_test_sprite_gem(size: int = 32) -> np.ndarray:
    """
    Create a diamond shape on a transparent background.

    Returns:
        RGBA array
    """
    rgba = np.zeros((size, size, 4), dtype=np.uint8)
    center = size // 2

    for y in range(size):
        for x in range(size):
            if abs(x - center) + abs(y - center) < size // 2 - 2:
                shade = 120 + 4 * (center - abs(x - center))
                rgba[y, x] = [40, min(255, shade), 200, 255]

    return rgba


def run_demo():
    """Run the demonstration."""
    print("=" * 60)
    print("Pixel Depth - Demo")
    print("=" * 60)

    output_dir = Path(__file__).parent / "output"
    output_dir.mkdir(exist_ok=True)

    test_sprites = [
        ("punk", create_test_sprite_punk(24)),
        ("gem", create_test_sprite_gem(32)),
    ]

    total_start = time.time()

    for index, (name, rgba) in enumerate(test_sprites):
        print(f"\n--- Processing: {name} ---")
        print(f"Input size: {rgba.shape[1]}x{rgba.shape[0]} pixels")

        converter = DepthConverter()
        converter.load_array(rgba)

        start = time.time()
        rendered = converter.export_png(
            output_dir / f"{name}-depth.png",
            identifier=str(index),
            owner_label="demo.eth",
        )
        print(f"  Background colors: {sorted(converter.background.colors)}")
        print(f"  Tiers: {converter.elevation.histogram()}")
        print(f"  Canvas: {rendered.width}x{rendered.height} "
              f"({(time.time() - start) * 1000:.1f}ms)")

        start = time.time()
        converter.export_obj(output_dir / f"{name}.obj", include_colors=True)
        print(f"  Voxels: {len(converter.voxels)} "
              f"({(time.time() - start) * 1000:.1f}ms)")

    print("\n" + "=" * 60)
    print(f"Demo complete! Total time: {time.time() - total_start:.2f}s")
    print(f"Output files in: {output_dir}")
    print("=" * 60)

    return 0


if __name__ == "__main__":
    run_demo()
