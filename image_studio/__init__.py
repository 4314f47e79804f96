"""AI Image Processing Studio: preset color adjustments for uploaded photos."""

__version__ = "0.1.0"

from .filters import (
    FILTER_PRESETS,
    FilterPreset,
    InvalidPixelBuffer,
    apply_filters,
    apply_filters_parallel,
    describe_preset,
    get_preset,
    preset_names,
)
from .imaging import ImageDecodeError, decode_image, encode_png, process_image
