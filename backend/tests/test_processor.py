"""Tests for content sniffing, decoding, orientation, and WebP encoding."""

import io

import pytest
from PIL import Image as PILImage

from imagehost.services.image.processor import (
    DEFAULT_QUALITY,
    DecodeError,
    EncodeError,
    ImageProcessor,
    ProcessingError,
    detect_mime_type,
    mime_type_to_format,
)


def _is_webp(data: bytes) -> bool:
    return data[:4] == b"RIFF" and data[8:12] == b"WEBP"


class TestDetectMimeType:
    @pytest.mark.parametrize(
        "fmt, expected",
        [("JPEG", "image/jpeg"), ("PNG", "image/png"), ("WEBP", "image/webp")],
    )
    def test_supported_formats(self, make_image, fmt, expected):
        assert detect_mime_type(make_image(fmt)) == expected

    def test_gif_is_octet_stream(self, make_image):
        assert detect_mime_type(make_image("GIF")) == "application/octet-stream"

    def test_short_input(self):
        assert detect_mime_type(b"\xff\xd8") == "application/octet-stream"

    def test_riff_without_webp_marker(self):
        assert detect_mime_type(b"RIFF\x00\x00\x00\x00WAVEfmt ") == "application/octet-stream"

    def test_format_names(self):
        assert mime_type_to_format("image/jpeg") == "jpeg"
        assert mime_type_to_format("image/png") == "png"
        assert mime_type_to_format("image/webp") == "webp"
        assert mime_type_to_format("image/gif") == "unknown"


class TestQuality:
    @pytest.mark.parametrize("quality", [0, -5, 101, 1000])
    def test_out_of_range_uses_default(self, quality):
        assert ImageProcessor(quality).quality == DEFAULT_QUALITY

    @pytest.mark.parametrize("quality", [1, 50, 100])
    def test_in_range_kept(self, quality):
        assert ImageProcessor(quality).quality == quality


class TestProcess:
    @pytest.mark.parametrize(
        "fmt, mime_type",
        [("JPEG", "image/jpeg"), ("PNG", "image/png"), ("WEBP", "image/webp")],
    )
    def test_outputs_webp_with_dimensions(self, processor, make_image, fmt, mime_type):
        result = processor.process(make_image(fmt, size=(40, 24)), mime_type)

        assert _is_webp(result.data)
        assert result.format == "webp"
        assert (result.width, result.height) == (40, 24)
        with PILImage.open(io.BytesIO(result.data)) as img:
            assert img.format == "WEBP"
            assert img.size == (40, 24)

    def test_png_with_alpha_keeps_alpha(self, processor, make_image):
        data = make_image("PNG", mode="RGBA", color=(10, 20, 30, 128))
        result = processor.process(data, "image/png")

        with PILImage.open(io.BytesIO(result.data)) as img:
            assert img.mode == "RGBA"

    def test_palette_png(self, processor):
        buf = io.BytesIO()
        PILImage.new("RGB", (16, 16), (0, 128, 255)).convert("P").save(buf, format="PNG")
        result = processor.process(buf.getvalue(), "image/png")
        assert _is_webp(result.data)

    def test_converted_copy_is_closed(self, processor, make_image, monkeypatch):
        data = make_image("JPEG", mode="L", color=128)
        converted = []
        closed = []
        original_convert = PILImage.Image.convert
        original_close = PILImage.Image.close

        def tracking_convert(self, *args, **kwargs):
            img = original_convert(self, *args, **kwargs)
            converted.append(img)
            return img

        def tracking_close(self):
            closed.append(self)
            original_close(self)

        monkeypatch.setattr(PILImage.Image, "convert", tracking_convert)
        monkeypatch.setattr(PILImage.Image, "close", tracking_close)

        processor.process(data, "image/jpeg")

        assert converted
        assert all(any(img is c for c in closed) for img in converted)

    def test_grayscale_jpeg(self, processor, make_image):
        result = processor.process(make_image("JPEG", mode="L", color=128), "image/jpeg")
        assert (result.width, result.height) == (64, 32)

    def test_decode_dispatches_on_declared_type(self, processor, make_image):
        # PNG bytes handed to the JPEG decoder must fail
        with pytest.raises(DecodeError):
            processor.process(make_image("PNG"), "image/jpeg")

    def test_unsupported_type(self, processor, make_image):
        with pytest.raises(DecodeError):
            processor.process(make_image("GIF"), "image/gif")

    def test_truncated_jpeg(self, processor, make_image):
        data = make_image("JPEG", size=(256, 256))
        with pytest.raises(DecodeError):
            processor.process(data[:200], "image/jpeg")

    def test_garbage_after_magic(self, processor):
        with pytest.raises(DecodeError):
            processor.process(b"\x89PNG\r\n\x1a\n" + b"\x00" * 64, "image/png")

    def test_encode_failure(self, processor, make_image, monkeypatch):
        data = make_image("PNG")

        def broken_save(self, *args, **kwargs):
            raise OSError("encoder unavailable")

        monkeypatch.setattr(PILImage.Image, "save", broken_save)

        with pytest.raises(EncodeError) as exc_info:
            processor.process(data, "image/png")

        assert not isinstance(exc_info.value, DecodeError)
        assert isinstance(exc_info.value, ProcessingError)


class TestOrientation:
    # Quadrant colors after each EXIF orientation transform, for a source
    # laid out as red/green over blue/yellow.
    EXPECTED = {
        1: ({"tl": "red", "tr": "green", "bl": "blue", "br": "yellow"}, (128, 64)),
        2: ({"tl": "green", "tr": "red", "bl": "yellow", "br": "blue"}, (128, 64)),
        3: ({"tl": "yellow", "tr": "blue", "bl": "green", "br": "red"}, (128, 64)),
        4: ({"tl": "blue", "tr": "yellow", "bl": "red", "br": "green"}, (128, 64)),
        5: ({"tl": "red", "tr": "blue", "bl": "green", "br": "yellow"}, (64, 128)),
        6: ({"tl": "blue", "tr": "red", "bl": "yellow", "br": "green"}, (64, 128)),
        7: ({"tl": "yellow", "tr": "green", "bl": "blue", "br": "red"}, (64, 128)),
        8: ({"tl": "green", "tr": "yellow", "bl": "red", "br": "blue"}, (64, 128)),
    }

    @pytest.mark.parametrize("orientation", range(1, 9))
    def test_jpeg_orientation(self, processor, make_quadrant_image, quadrant_colors, orientation):
        expected_colors, expected_size = self.EXPECTED[orientation]

        result = processor.process(make_quadrant_image("JPEG", orientation), "image/jpeg")

        assert (result.width, result.height) == expected_size
        assert quadrant_colors(result.data) == expected_colors

    def test_jpeg_without_exif(self, processor, make_quadrant_image, quadrant_colors):
        result = processor.process(make_quadrant_image("JPEG"), "image/jpeg")

        assert (result.width, result.height) == (128, 64)
        assert quadrant_colors(result.data) == self.EXPECTED[1][0]

    def test_unknown_orientation_value(self, processor, make_quadrant_image, quadrant_colors):
        result = processor.process(make_quadrant_image("JPEG", 9), "image/jpeg")

        assert (result.width, result.height) == (128, 64)
        assert quadrant_colors(result.data) == self.EXPECTED[1][0]

    @pytest.mark.parametrize("fmt, mime_type", [("PNG", "image/png"), ("WEBP", "image/webp")])
    def test_non_jpeg_ignores_exif(
        self, processor, make_quadrant_image, quadrant_colors, fmt, mime_type
    ):
        result = processor.process(make_quadrant_image(fmt, 6), mime_type)

        assert (result.width, result.height) == (128, 64)
        assert quadrant_colors(result.data) == self.EXPECTED[1][0]

    def test_output_has_no_exif(self, processor, make_quadrant_image):
        result = processor.process(make_quadrant_image("JPEG", 6), "image/jpeg")

        with PILImage.open(io.BytesIO(result.data)) as img:
            assert img.getexif().get(0x0112) is None
