import logging

import streamlit as st

from image_studio import config
from image_studio.filters import describe_preset, get_preset, preset_names
from image_studio.imaging import ImageDecodeError, decode_image, encode_png, process_image

# =============================================================================
# CONFIGURATION & CONSTANTS
# =============================================================================

st.set_page_config(layout="centered", page_title="AI Image Processing Studio")

config.configure_logging()
logger = logging.getLogger("image_studio.app")

UPLOAD_TYPES = ["jpg", "jpeg", "png", "webp"]

STATUS_EMPTY = "Upload an image to begin."
STATUS_LOADED = "Image loaded. Choose a style and apply AI enhancement."
STATUS_DONE = "AI enhancement complete. Download or refine."
STATUS_RESET = "Reset complete. Try a different AI style."

# =============================================================================
# SESSION STATE INITIALIZATION
# =============================================================================

def initialize_session_state():
    """Initialize canvas, prompt and preset values in session state."""
    defaults = {
        "prompt": config.DEFAULT_PROMPT,
        "preset_name": preset_names()[0],
        "status_message": STATUS_EMPTY,
        "upload_id": None,
        "original": None,
        "canvas": None,
        "processed_png": None,
    }
    for key, value in defaults.items():
        if key not in st.session_state:
            st.session_state[key] = value


def clear_canvas():
    """Forget the loaded image once the upload is removed."""
    st.session_state.update({
        "upload_id": None,
        "original": None,
        "canvas": None,
        "processed_png": None,
        "status_message": STATUS_EMPTY,
    })


def load_upload(uploaded_file):
    """Decode a newly uploaded file onto the canvas."""
    upload_id = uploaded_file.file_id
    if upload_id == st.session_state.upload_id:
        return

    try:
        pixels = decode_image(uploaded_file.getvalue())
    except ImageDecodeError as exc:
        logger.warning("Rejected upload %s: %s", uploaded_file.name, exc)
        st.error(f"Could not read {uploaded_file.name}. Please upload a JPG, PNG or WebP image.")
        return

    st.session_state.update({
        "upload_id": upload_id,
        "original": pixels,
        "canvas": pixels.copy(),
        "processed_png": None,
        "status_message": STATUS_LOADED,
    })

# =============================================================================
# ACTIONS
# =============================================================================

def run_enhancement():
    """Apply the selected preset to whatever is currently on the canvas."""
    canvas = st.session_state.canvas
    if canvas is None:
        return

    preset = get_preset(st.session_state.preset_name)
    processed = process_image(canvas, preset)
    st.session_state.update({
        "canvas": processed,
        "processed_png": encode_png(processed),
        "status_message": STATUS_DONE,
    })


def reset_canvas():
    """Restore the uploaded original onto the canvas."""
    original = st.session_state.original
    if original is None:
        return

    st.session_state.update({
        "canvas": original.copy(),
        "processed_png": None,
        "status_message": STATUS_RESET,
    })

# =============================================================================
# UI COMPONENTS
# =============================================================================

def render_header():
    """Render the app header with badge, title and pitch."""
    st.markdown("""
        <style>
            .badge {
                display: inline-block;
                padding: 0.15rem 0.6rem;
                border-radius: 999px;
                background: #eef2ff;
                color: #4338ca;
                font-size: 0.8rem;
                font-weight: 600;
            }
        </style>
        <span class="badge">Streamlit + AI</span>
        <h1>AI Image Processing Studio</h1>
        <p>
            Upload a photo, describe the visual vibe you want, and let our AI-inspired pipeline apply
            cinematic adjustments. Everything runs instantly, nothing leaves this session.
        </p>
        """,
        unsafe_allow_html=True
    )


def render_sidebar_controls():
    """Render the creative direction panel and return the selected preset."""
    has_image = st.session_state.canvas is not None

    st.sidebar.header("Creative Direction")
    st.sidebar.caption("Define the AI intent, select a preset, and process your image instantly.")

    st.sidebar.text_area("AI Prompt", key="prompt", height=120)
    st.sidebar.selectbox("AI Style Preset", preset_names(), key="preset_name")
    preset = get_preset(st.session_state.preset_name)
    st.sidebar.caption(preset.description)

    col1, col2 = st.sidebar.columns(2)
    col1.button(
        "Apply AI Enhancement", key="apply", on_click=run_enhancement,
        disabled=not has_image, width="stretch"
    )
    col2.button(
        "Reset", key="reset", on_click=reset_canvas,
        disabled=not has_image, width="stretch"
    )
    return preset


def render_preview():
    """Render the current canvas with its caption."""
    st.subheader("Preview")
    canvas = st.session_state.canvas
    if canvas is None:
        st.caption("Upload an image to see the AI preview here.")
        return

    caption = "Processed output" if st.session_state.processed_png else "Original upload"
    st.image(canvas, caption=caption, width="stretch")


def render_download_button():
    """Render centered download button for the processed image."""
    col1, col2, col3 = st.columns([1, 2, 1])
    with col2:
        st.download_button(
            label="Download",
            data=st.session_state.processed_png or b"",
            file_name=config.DOWNLOAD_NAME,
            mime="image/png",
            disabled=st.session_state.processed_png is None,
            width="stretch"
        )


def render_summary(preset):
    """Render the processing summary card."""
    st.subheader("AI Processing Summary")
    st.markdown(
        f"- **Intent:** {st.session_state.prompt}\n"
        f"- **Preset:** {preset.name}\n"
        f"- **Enhancements:** {describe_preset(preset)}"
    )

# =============================================================================
# MAIN APPLICATION
# =============================================================================

def main():
    """Main application function."""
    initialize_session_state()
    render_header()

    uploaded_file = st.file_uploader("Upload Image", type=UPLOAD_TYPES)
    if uploaded_file is not None:
        load_upload(uploaded_file)
    elif st.session_state.upload_id is not None:
        clear_canvas()

    preset = render_sidebar_controls()

    st.info(st.session_state.status_message)
    render_preview()
    render_download_button()

    st.markdown("---")
    render_summary(preset)


if __name__ == "__main__":
    main()
