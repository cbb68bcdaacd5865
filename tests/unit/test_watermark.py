"""
Unit Tests for Obscura Invisible Watermarks

Covers plain and password protected records, signature detection, legacy
payloads and the errors raised for images without a watermark.
"""

from datetime import datetime

import numpy as np
import pytest

from obscura_core.errors import (
    DecryptionFailedError,
    InvalidHeaderError,
    NoWatermarkFoundError,
    PasswordRequiredError,
)
from obscura_core.stego import (
    ExtractedWatermark,
    FrameCodec,
    ImageStego,
    PixelBuffer,
    WatermarkCodec,
    WatermarkRecord,
)
from obscura_core.stego import bits


@pytest.fixture
def codec(fast_packer):
    return WatermarkCodec(fast_packer)


def _embed_raw(pixels, text):
    return FrameCodec().embed(pixels, bits.encode(text))


class TestWatermarkRoundTrip:
    """Test cases for adding and extracting records."""

    def test_plain_watermark(self, codec, cover):
        marked = codec.add(cover, "(c) Jane Doe", timestamp=1700000000000)
        result = codec.extract(marked)

        assert result.watermark == "(c) Jane Doe"
        assert result.timestamp == 1700000000000
        assert result.version == "1.0"
        assert result.is_protected is False

    def test_protected_watermark(self, codec, cover):
        marked = codec.add(cover, "owner-42", password="pw")
        result = codec.extract(marked, password="pw")

        assert result.watermark == "owner-42"
        assert result.is_protected is True
        assert result.version == "1.0"

    def test_default_timestamp_is_now(self, codec, cover):
        before = int(datetime.now().timestamp() * 1000)
        result = codec.extract(codec.add(cover, "x"))
        assert result.timestamp >= before - 1000

    def test_payload_layout(self, codec, cover):
        marked = codec.add(cover, "ACME", timestamp=5)
        text = bits.decode(FrameCodec().unframe(marked))

        assert text == 'OBSCURA_WM||{"watermark":"ACME","timestamp":5,"version":"1.0"}'

    def test_unicode_owner(self, codec, cover):
        marked = codec.add(cover, "© Zoë 🌍", password="pw")
        assert codec.extract(marked, password="pw").watermark == "© Zoë 🌍"

    def test_alpha_forced_opaque(self, codec, cover):
        translucent = cover.copy()
        translucent.data[3::4] = 10

        marked = codec.add(translucent, "owner")

        assert np.all(marked.data[3::4] == 255)
        assert np.all(translucent.data[3::4] == 10)
        assert codec.extract(marked).watermark == "owner"

    def test_file_roundtrip(self, codec, cover_png, tmp_path):
        output = tmp_path / "marked.png"
        codec.add_to_file(cover_png, output, "file owner", password="pw")

        assert codec.extract_from_file(output, password="pw").watermark == "file owner"


class TestWatermarkErrors:
    """Test cases for failed extraction."""

    def test_password_required(self, codec, cover):
        marked = codec.add(cover, "owner", password="pw")
        with pytest.raises(PasswordRequiredError) as exc_info:
            codec.extract(marked)
        assert exc_info.value.code == 1031

    def test_wrong_password(self, codec, cover):
        marked = codec.add(cover, "owner", password="pw")
        with pytest.raises(DecryptionFailedError):
            codec.extract(marked, password="wrong")

    def test_password_on_plain_watermark_fails(self, codec, cover):
        marked = codec.add(cover, "owner")
        with pytest.raises(DecryptionFailedError):
            codec.extract(marked, password="pw")

    def test_plain_stego_message_is_not_a_watermark(self, codec, fast_packer):
        hidden = ImageStego(fast_packer).encode(PixelBuffer.blank(50, 50), "just a message")
        with pytest.raises(NoWatermarkFoundError):
            codec.extract(hidden)

    def test_clean_image(self, codec):
        with pytest.raises(InvalidHeaderError):
            codec.extract(PixelBuffer.blank(50, 50))

    @pytest.mark.parametrize("seed", [0, 1, 2, 3, 4])
    def test_random_noise(self, codec, seed):
        data = np.random.default_rng(seed).integers(0, 256, size=64 * 64 * 4, dtype=np.uint8)
        noise = PixelBuffer(data, 64, 64)

        with pytest.raises((NoWatermarkFoundError, InvalidHeaderError)):
            codec.extract(noise)

    def test_encrypted_non_json_record(self, codec, fast_packer, cover):
        packet = fast_packer.encrypt("not a record", "pw")
        marked = _embed_raw(cover, codec.prefix + packet)

        with pytest.raises(DecryptionFailedError):
            codec.extract(marked, password="pw")


class TestLegacyWatermark:
    """Test cases for payloads that are not JSON records."""

    def test_unparseable_json(self, codec, cover):
        marked = _embed_raw(cover, codec.prefix + "{not json")
        result = codec.extract(marked)

        assert result.watermark == "{not json"
        assert result.timestamp is None
        assert result.version == "Legacy"
        assert result.is_protected is False
        assert result.timestamp_readable == "Unknown"

    def test_bare_string_reads_as_protected(self, codec, cover):
        # no leading "{" means the payload is treated as a cipher packet
        marked = _embed_raw(cover, codec.prefix + "plain owner")
        with pytest.raises(PasswordRequiredError):
            codec.extract(marked)

    @pytest.mark.parametrize("constant", ["Infinity", "-Infinity", "NaN"])
    def test_non_json_constants_are_legacy(self, codec, cover, constant):
        payload = '{"watermark":"x","timestamp":%s}' % constant
        result = codec.extract(_embed_raw(cover, codec.prefix + payload))

        assert result.version == "Legacy"
        assert result.watermark == payload
        assert result.timestamp is None

    def test_overflowing_timestamp_is_dropped(self, codec, cover):
        marked = _embed_raw(cover, codec.prefix + '{"watermark":"x","timestamp":1e400}')
        result = codec.extract(marked)

        assert result.watermark == "x"
        assert result.timestamp is None

    def test_out_of_range_timestamp_reads_unknown(self, codec, cover):
        marked = _embed_raw(cover, codec.prefix + '{"watermark":"x","timestamp":1e20}')
        result = codec.extract(marked)

        assert result.timestamp == 10 ** 20
        assert result.timestamp_readable == "Unknown"

    @pytest.mark.parametrize("value,expected", [
        ("123", "123"),
        ("true", "true"),
        ('["a"]', '["a"]'),
        ("null", ""),
    ])
    def test_non_string_owner_is_text(self, codec, cover, value, expected):
        marked = _embed_raw(cover, codec.prefix + '{"watermark":%s,"timestamp":1}' % value)
        assert codec.extract(marked).watermark == expected

    def test_missing_fields(self, codec, cover):
        marked = _embed_raw(cover, codec.prefix + '{"watermark": "old"}')
        result = codec.extract(marked)

        assert result.watermark == "old"
        assert result.timestamp is None
        assert result.version == "1.0"


class TestHasWatermark:
    """Test cases for signature detection."""

    def test_detects_plain_and_protected(self, codec, cover):
        assert codec.has_watermark(codec.add(cover, "a"))
        assert codec.has_watermark(codec.add(cover, "a", password="pw"))

    def test_rejects_unmarked(self, codec, cover, fast_packer):
        assert not codec.has_watermark(PixelBuffer.blank(20, 20))
        assert not codec.has_watermark(ImageStego(fast_packer).encode(cover, "hi"))


class TestRecords:
    """Test cases for the record dataclasses."""

    def test_record_json_is_compact(self):
        record = WatermarkRecord("ü", 1, "1.0")
        assert record.to_json() == '{"watermark":"ü","timestamp":1,"version":"1.0"}'

    def test_timestamp_readable(self):
        ts = 1700000000000
        result = ExtractedWatermark("x", ts, "1.0", False)
        expected = datetime.fromtimestamp(ts / 1000).strftime("%Y-%m-%d %H:%M:%S")
        assert result.timestamp_readable == expected

    @pytest.mark.parametrize("ts", [10 ** 20, -(10 ** 20)])
    def test_timestamp_readable_out_of_range(self, ts):
        assert ExtractedWatermark("x", ts, "1.0", False).timestamp_readable == "Unknown"
