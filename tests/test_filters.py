import dataclasses

import numpy as np
import pytest

from image_studio import filters
from image_studio.filters import (
    FILTER_PRESETS,
    FilterPreset,
    InvalidPixelBuffer,
    apply_filters,
    apply_filters_parallel,
    channel_gains,
    contrast_factor,
    describe_preset,
    get_preset,
    preset_names,
)

NEUTRAL = FilterPreset("Neutral", "", brightness=1.0, contrast=0.0, warmth=0.0, saturation=1.0)


def pixel(r, g, b, a=255):
    return np.array([r, g, b, a], dtype=np.uint8)


def random_canvas(height=13, width=37, seed=7):
    rng = np.random.default_rng(seed)
    return rng.integers(0, 256, size=(height, width, 4), dtype=np.uint8)


# Catalog -------------------------------------------------------------------

def test_catalog_order_and_values():
    assert preset_names() == ["Auto Enhance", "Golden Hour", "Cool Studio", "Vintage Film"]
    golden = FILTER_PRESETS[1]
    assert golden.description == "Warm cinematic tones with soft highlights."
    assert (golden.brightness, golden.contrast, golden.warmth, golden.saturation) == (1.08, 1.05, 0.08, 1.12)
    vintage = FILTER_PRESETS[3]
    assert (vintage.brightness, vintage.contrast, vintage.warmth, vintage.saturation) == (1.03, 0.92, 0.03, 0.90)


def test_get_preset_by_name_and_fallback():
    assert get_preset("Cool Studio").warmth == -0.06
    assert get_preset("Does Not Exist") is FILTER_PRESETS[0]
    assert get_preset(None) is FILTER_PRESETS[0]


def test_presets_are_immutable():
    with pytest.raises(dataclasses.FrozenInstanceError):
        FILTER_PRESETS[0].brightness = 2.0


def test_describe_preset():
    assert describe_preset(get_preset("Auto Enhance")) == (
        "Brightness x1.05, Contrast x1.1, Warmth +0.02, Saturation x1.08"
    )
    assert "Warmth -0.06" in describe_preset(get_preset("Cool Studio"))
    assert describe_preset(get_preset("Vintage Film")).endswith("Saturation x0.9")


# Pixel math ----------------------------------------------------------------

def test_contrast_factor_is_not_identity_at_one():
    assert contrast_factor(1.0) == pytest.approx(129.5)
    assert contrast_factor(0.0) == 1.0
    assert contrast_factor(1.1) < 0


def test_golden_pixels():
    data = pixel(200, 150, 100)
    apply_filters(data, get_preset("Auto Enhance"))
    assert data.tolist() == [0, 0, 255, 255]

    data = pixel(200, 150, 100)
    apply_filters(data, get_preset("Vintage Film"))
    assert data.tolist() == [255, 255, 0, 255]


def test_mid_gray_survives_contrast_and_picks_up_warmth():
    data = pixel(128, 128, 128)
    apply_filters(data, get_preset("Auto Enhance"))
    assert data.tolist() == [137, 134, 132, 255]


def test_neutral_preset_keeps_gray_pixels():
    values = np.arange(256, dtype=np.uint8)
    data = np.stack([values, values, values, np.full(256, 255, np.uint8)], axis=1)
    expected = data.copy()
    apply_filters(data, NEUTRAL)
    np.testing.assert_array_equal(data, expected)


def test_output_is_clamped_not_wrapped():
    bright = FilterPreset("Bright", "", brightness=2.0, contrast=0.0, warmth=0.0, saturation=1.0)
    data = pixel(255, 200, 130)
    apply_filters(data, bright)
    assert data.tolist() == [255, 255, 255, 255]

    dark = FilterPreset("Dark", "", brightness=-1.0, contrast=0.0, warmth=0.0, saturation=1.0)
    data = pixel(10, 200, 255)
    apply_filters(data, dark)
    assert data.tolist() == [0, 0, 0, 255]


def test_saturation_zero_gives_gray():
    canvas = random_canvas()
    mono = FilterPreset("Mono", "", brightness=1.05, contrast=0.5, warmth=0.2, saturation=0.0)
    apply_filters(canvas, mono)
    assert np.array_equal(canvas[..., 0], canvas[..., 1])
    assert np.array_equal(canvas[..., 1], canvas[..., 2])


def test_warmth_sign_swaps_red_and_blue():
    warm = dataclasses.replace(NEUTRAL, warmth=0.1)
    cool = dataclasses.replace(NEUTRAL, warmth=-0.1)
    warm_gains = channel_gains(warm)
    cool_gains = channel_gains(cool)
    assert warm_gains[0] == cool_gains[2]
    assert warm_gains[2] == cool_gains[0]

    data = pixel(100, 100, 100)
    apply_filters(data, warm)
    assert data.tolist() == [110, 100, 90, 255]
    data = pixel(100, 100, 100)
    apply_filters(data, cool)
    assert data.tolist() == [90, 100, 110, 255]


def test_alpha_is_untouched():
    canvas = random_canvas()
    alpha = canvas[..., 3].copy()
    for preset in FILTER_PRESETS:
        apply_filters(canvas, preset)
        np.testing.assert_array_equal(canvas[..., 3], alpha)


def test_deterministic():
    first = random_canvas()
    second = random_canvas()
    preset = get_preset("Golden Hour")
    apply_filters(first, preset)
    apply_filters(second, preset)
    assert first.tobytes() == second.tobytes()


# Buffer handling -----------------------------------------------------------

def test_bytearray_is_mutated_in_place():
    buf = bytearray([200, 150, 100, 42])
    result = apply_filters(buf, get_preset("Auto Enhance"))
    assert result is buf
    assert list(buf) == [0, 0, 255, 42]


def test_bytes_return_new_bytes():
    result = apply_filters(bytes([200, 150, 100, 42]), get_preset("Auto Enhance"))
    assert result == bytes([0, 0, 255, 42])


def test_empty_buffer():
    data = np.zeros(0, dtype=np.uint8)
    assert apply_filters(data, NEUTRAL).size == 0


@pytest.mark.parametrize(
    "buffer",
    [
        bytearray(6),
        np.zeros(8, dtype=np.float32),
        [1, 2, 3, 4],
    ],
)
def test_malformed_buffers_are_rejected(buffer):
    with pytest.raises(InvalidPixelBuffer):
        apply_filters(buffer, NEUTRAL)


def test_read_only_array_rejected():
    data = np.zeros(8, dtype=np.uint8)
    data.flags.writeable = False
    with pytest.raises(InvalidPixelBuffer):
        apply_filters(data, NEUTRAL)


# Worker pool ---------------------------------------------------------------

def test_parallel_matches_serial():
    serial = random_canvas(height=41, width=9)
    parallel = serial.copy()
    preset = get_preset("Cool Studio")

    apply_filters(serial, preset)
    result = apply_filters_parallel(parallel, preset, workers=3, chunk_rows=5)

    assert result is parallel
    np.testing.assert_array_equal(parallel, serial)


def test_parallel_single_worker_falls_back_to_serial():
    serial = random_canvas()
    parallel = serial.copy()
    preset = get_preset("Vintage Film")
    apply_filters(serial, preset)
    apply_filters_parallel(parallel, preset, workers=1, chunk_rows=1)
    np.testing.assert_array_equal(parallel, serial)


def test_parallel_failure_leaves_buffer_untouched(monkeypatch):
    canvas = random_canvas(height=10, width=4)
    before = canvas.copy()

    def explode(pixels, preset):
        raise RuntimeError("worker failed")

    monkeypatch.setattr(filters, "apply_filters", explode)
    with pytest.raises(RuntimeError, match="worker failed"):
        filters.apply_filters_parallel(canvas, NEUTRAL, workers=2, chunk_rows=2)
    np.testing.assert_array_equal(canvas, before)
