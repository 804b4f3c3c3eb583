import sys
from pathlib import Path

import numpy as np
import pytest

ROOT = Path(__file__).resolve().parents[2]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from services.ionosonde.filters import ImageFilter, apply_filter, brightness, contrast, grayscale, invert


@pytest.mark.parametrize(
    "name,expected",
    [
        (None, ImageFilter.NONE),
        ("", ImageFilter.NONE),
        ("none", ImageFilter.NONE),
        ("N/A", ImageFilter.NONE),
        ("nil", ImageFilter.NONE),
        ("invert", ImageFilter.INVERT),
        ("Grayscale", ImageFilter.GRAYSCALE),
        ("blackAndWhite", ImageFilter.BLACK_AND_WHITE),
        ("black-and-white", ImageFilter.BLACK_AND_WHITE),
        ("invertAndGrayscale", ImageFilter.INVERT_GRAYSCALE),
        (" invertAndBlackAndWhite ", ImageFilter.INVERT_BLACK_AND_WHITE),
        ("invert+grayscale", ImageFilter.INVERT_GRAYSCALE),
        ("invert + black-and-white", ImageFilter.INVERT_BLACK_AND_WHITE),
        ("sepia", ImageFilter.UNRECOGNIZED),
        ("unrecognized", ImageFilter.UNRECOGNIZED),
    ],
)
def test_parse_filter_names(name, expected):
    assert ImageFilter.parse(name) is expected


def test_each_variant_has_an_explicit_chain():
    assert ImageFilter.NONE.operations == ()
    assert ImageFilter.UNRECOGNIZED.operations == ()
    assert ImageFilter.INVERT_GRAYSCALE.operations == (invert, grayscale)
    assert len(ImageFilter.INVERT_BLACK_AND_WHITE.operations) == 3


def _sample() -> np.ndarray:
    img = np.zeros((4, 4, 3), dtype=np.uint8)
    img[:, :, 2] = 200  # red in BGR
    img[0, 0] = (10, 20, 30)
    return img


def test_invert():
    out = apply_filter(_sample(), "invert", "RA041")
    assert out[1, 1].tolist() == [255, 255, 55]


def test_grayscale_keeps_three_equal_channels():
    out = apply_filter(_sample(), "grayscale", "RA041")
    assert out.shape == (4, 4, 3)
    assert np.all(out[:, :, 0] == out[:, :, 1])
    assert np.all(out[:, :, 1] == out[:, :, 2])


def test_black_and_white_stays_in_byte_range():
    out = apply_filter(_sample(), "invertAndBlackAndWhite", "RA041")
    assert out.dtype == np.uint8
    assert out.shape == (4, 4, 3)


def test_brightness_and_contrast_clip():
    img = np.array([[0, 128, 255]], dtype=np.uint8)
    assert brightness(img, -40).tolist() == [[0, 26, 153]]
    c = contrast(img, 80)
    assert c[0, 0] == 0 and c[0, 2] == 255


def test_unknown_filter_leaves_image_untouched(caplog):
    img = _sample()
    assert apply_filter(img, "sepia", "RA041") is img
    assert "unknown filter" in caplog.text


def test_none_filter_is_identity():
    img = _sample()
    assert apply_filter(img, "none") is img
