"""
Photosaic — Studio Edition

Run with:
    streamlit run streamlit_app.py
"""

from __future__ import annotations

import io

import streamlit as st
from PIL import Image

from photosaic.config import ALGORITHMS, PhotosaicConfig
from photosaic.errors import PhotosaicError
from photosaic.image_io import BytesSource
from photosaic.progress import CallbackObserver
from photosaic.session import Photosaic

# -- Page config -------------------------------------------------------
st.set_page_config(
    page_title="Photosaic",
    page_icon=None,
    layout="wide",
    initial_sidebar_state="collapsed",
)

_DEFAULTS = PhotosaicConfig(algorithm="closest_color")
_IMAGE_TYPES = ["jpg", "jpeg", "png", "webp", "bmp", "jfif"]

# -- CSS ---------------------------------------------------------------
st.markdown("""
<style>
    .stApp {
        background-color: #faf9f6;
        color: #2a2a2a;
        font-family: 'Inter', 'Helvetica Neue', sans-serif;
    }
    .block-container {
        max-width: 1000px;
        padding-top: 3.5rem;
        padding-bottom: 4rem;
    }
    .gallery-title {
        font-family: 'Cormorant Garamond', 'Georgia', serif;
        font-size: 2.8rem;
        font-weight: 300;
        text-align: center;
        letter-spacing: 0.02em;
    }
    .gallery-subtitle {
        text-align: center;
        color: #6b6b6b;
        font-weight: 300;
        max-width: 720px;
        margin: 0 auto 2.5rem auto;
        line-height: 1.7;
    }
</style>
""", unsafe_allow_html=True)

# -- Title -------------------------------------------------------------
st.markdown('<div class="gallery-title">Photosaic</div>', unsafe_allow_html=True)
st.markdown(
    '<div class="gallery-subtitle">'
    "Upload a photograph and a handful of tile pictures. The photograph is cut "
    "into a grid and every cell is replaced by one of your tiles, tinted toward "
    "the cell's average colour. Pick tiles by nearest brightness for a faithful "
    "likeness, or at random for a looser collage."
    "</div>",
    unsafe_allow_html=True,
)

# -- Controls ----------------------------------------------------------
ctrl1, ctrl2 = st.columns(2)
with ctrl1:
    grid_num = st.slider("Tiles per side", 2, 60, _DEFAULTS.grid_num)
    output_width = st.slider("Output width (px)", 100, 2000, _DEFAULTS.output_width, step=50)
with ctrl2:
    intensity = st.slider("Tint intensity", 0.0, 1.0, _DEFAULTS.intensity, step=0.05)
    algorithm = st.selectbox("Tile selection", ALGORITHMS, index=ALGORITHMS.index("closest_color"))

st.markdown("---")

# -- Upload ------------------------------------------------------------
source_file = st.file_uploader("Source image", type=_IMAGE_TYPES)
tile_files = st.file_uploader("Tile images", type=_IMAGE_TYPES, accept_multiple_files=True)

if source_file is not None and tile_files:
    cfg = PhotosaicConfig(
        algorithm=algorithm,
        grid_num=grid_num,
        intensity=intensity,
        output_width=output_width,
    )

    if st.button("COMPOSE", type="primary", use_container_width=True):
        bar = st.progress(0.0, text="Sampling colours ...")
        expected = 2 * grid_num * grid_num

        def _on_processing(iteration: int) -> None:
            bar.progress(min(iteration / expected, 1.0), text=f"Step {iteration}")

        try:
            buffer = Photosaic(cfg).build_sync(
                BytesSource(source_file.getvalue()),
                [BytesSource(f.getvalue()) for f in tile_files],
                observers=[CallbackObserver(on_processing=_on_processing)],
            )
        except PhotosaicError as exc:
            bar.empty()
            st.error(str(exc))
        else:
            bar.empty()
            st.session_state.mosaic_png = buffer

    if st.session_state.get("mosaic_png"):
        result = Image.open(io.BytesIO(st.session_state.mosaic_png))
        col1, col2 = st.columns(2)
        with col1:
            st.image(source_file.getvalue(), caption="Original", use_container_width=True)
        with col2:
            st.image(result, caption=f"Mosaic {result.width}x{result.height}", use_container_width=True)

        _, dl_col, _ = st.columns([1, 2, 1])
        with dl_col:
            st.download_button(
                "DOWNLOAD PNG",
                data=st.session_state.mosaic_png,
                file_name="photosaic.png",
                mime="image/png",
                use_container_width=True,
            )
