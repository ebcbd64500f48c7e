#!/usr/bin/env python3
"""
Pixel Depth Web Interface

A simple Gradio-based web UI for converting pixel art into depth images
or OBJ meshes.

Run with: python app.py
Then open http://localhost:7860 in your browser
"""

import sys
from pathlib import Path
import tempfile
import numpy as np

# Add src to path
sys.path.insert(0, str(Path(__file__).parent / "src"))

import gradio as gr
from pixel_depth import DepthConverter, InvalidImageError, ZERO_ADDRESS, find_logo
from pixel_depth.config import DEFAULT_IDENTIFIER

LOGO_CANDIDATES = [
    Path(__file__).parent / "assets" / "logo.png",
    Path(__file__).parent / "logo.png",
]


def process_image(image, mode: str, token_id: str, owner: str, include_colors: bool):
    """
    Convert an uploaded image.

    Returns the depth preview, a status text, and the downloadable file.
    """
    if image is None:
        return None, "Please upload an image first.", None

    if not isinstance(image, np.ndarray):
        return None, "Invalid image format.", None

    converter = DepthConverter()
    try:
        converter.load_array(image)
    except InvalidImageError as e:
        return None, f"Invalid image: {e}", None

    export_dir = Path(tempfile.mkdtemp(prefix="pixel_depth_"))
    width, height = converter.pixels.size

    if mode == "Mesh (OBJ)":
        obj_path = export_dir / "model.obj"
        converter.export_obj(obj_path, include_colors=include_colors)
        status = f"""## Mesh Complete!

| Metric | Value |
|--------|-------|
| Input Size | {width} x {height} pixels |
| Voxels | {len(converter.voxels):,} |
| Vertices | {len(converter.voxels) * 8:,} |
| Triangles | {len(converter.voxels) * 10:,} |
"""
        return None, status, str(obj_path)

    png_path = export_dir / "depth-image.png"
    rendered = converter.export_png(
        png_path,
        identifier=token_id or DEFAULT_IDENTIFIER,
        owner_label=owner or ZERO_ADDRESS,
        logo=find_logo(LOGO_CANDIDATES),
    )

    tiers = ", ".join(f"{tier}: {count}" for tier, count in converter.elevation.histogram().items())
    status = f"""## Depth Image Complete!

| Metric | Value |
|--------|-------|
| Input Size | {width} x {height} pixels |
| Canvas Size | {rendered.width} x {rendered.height} pixels |
| Background Colors | {len(converter.background)} |
| Tiers | {tiers} |
"""
    if rendered.warnings:
        status += "\n**Warnings:** " + "; ".join(rendered.warnings)

    return str(png_path), status, str(png_path)


with gr.Blocks(title="Pixel Depth") as app:

    gr.Markdown("""
    # Pixel Depth
    ### Turn pixel art into an extruded depth image or a 3D mesh
    """)

    with gr.Row():
        with gr.Column(scale=1):
            image_input = gr.Image(
                label="Upload Image (PNG recommended)",
                type="numpy",
                image_mode="RGBA"
            )

            mode = gr.Radio(
                choices=["Depth Image", "Mesh (OBJ)"],
                value="Depth Image",
                label="Mode"
            )

            token_id = gr.Textbox(label="Token ID", value=DEFAULT_IDENTIFIER)
            owner = gr.Textbox(label="Owner", value=ZERO_ADDRESS)
            include_colors = gr.Checkbox(value=False, label="OBJ vertex colors")

            generate_btn = gr.Button("Convert", variant="primary")

        with gr.Column(scale=2):
            preview = gr.Image(label="Depth Preview", type="filepath")
            status_output = gr.Markdown(
                value="Upload an image and click 'Convert' to see results."
            )
            download = gr.File(label="Download")

    generate_btn.click(
        fn=process_image,
        inputs=[image_input, mode, token_id, owner, include_colors],
        outputs=[preview, status_output, download]
    )


if __name__ == "__main__":
    app.launch(
        server_name="0.0.0.0",
        server_port=7860,
        share=False
    )
