from io import BytesIO

import pytest
from PIL import Image

from app.core.errors import RequestValidationFailed
from app.modules.receipts.imaging import (
    compress_image, scaled_size, split_data_url
)


def image_bytes(size, mode="RGB", fmt="PNG") -> bytes:
    buf = BytesIO()
    Image.new(mode, size).save(buf, format=fmt)
    return buf.getvalue()


@pytest.mark.parametrize("size, expected", [
    ((4000, 3000), (1024, 768)),
    ((3000, 4000), (768, 1024)),
    ((1024, 1024), (1024, 1024)),
    ((800, 600), (800, 600)),
    ((5000, 2), (1024, 1)),
])
def test_scaled_size(size, expected):
    assert scaled_size(*size, 1024) == expected


def test_split_data_url():
    assert split_data_url("data:image/png;base64,AAAA") == ("image/png", "AAAA")
    assert split_data_url("AAAA") == ("image/jpeg", "AAAA")
    assert split_data_url("data:;base64,AAAA") == ("image/jpeg", "AAAA")


def test_compress_downscales_and_reencodes():
    out = compress_image(image_bytes((3000, 1500)), max_dim=1024)
    with Image.open(BytesIO(out)) as img:
        assert img.format == "JPEG"
        assert img.size == (1024, 512)


def test_small_image_is_not_upscaled():
    out = compress_image(image_bytes((200, 100)), max_dim=1024)
    with Image.open(BytesIO(out)) as img:
        assert img.size == (200, 100)


def test_transparency_flattened_to_rgb():
    out = compress_image(image_bytes((50, 50), mode="RGBA"))
    with Image.open(BytesIO(out)) as img:
        assert img.mode == "RGB"


def test_garbage_is_rejected():
    with pytest.raises(RequestValidationFailed):
        compress_image(b"definitely not an image")

