"""Tests for PixelBuffer validation, conversion and image file loading."""

import cv2
import numpy as np
import pytest

from core.image.pixel_buffer import PixelBuffer, InvalidImageError, loadImageFile


def test_validate_rejects_zero_area():
    buffer = PixelBuffer(0, 5, np.zeros((5, 0, 4), dtype=np.uint8))
    with pytest.raises(InvalidImageError):
        buffer.validate()


def test_validate_rejects_sample_count_mismatch():
    buffer = PixelBuffer(4, 4, np.zeros((4, 4, 3), dtype=np.uint8))
    with pytest.raises(InvalidImageError):
        buffer.validate()


def test_validate_rejects_non_byte_samples():
    buffer = PixelBuffer(2, 2, np.zeros((2, 2, 4), dtype=np.float32))
    with pytest.raises(InvalidImageError):
        buffer.validate()


def test_blank_is_opaque():
    buffer = PixelBuffer.blank(3, 2, value=40)
    assert buffer.samples.shape == (2, 3, 4)
    assert np.all(buffer.samples[:, :, :3] == 40)
    assert np.all(buffer.samples[:, :, 3] == 255)


def test_from_bgr_reorders_channels():
    bgr = np.zeros((1, 1, 3), dtype=np.uint8)
    bgr[0, 0] = (10, 20, 30)
    buffer = PixelBuffer.fromBgr(bgr)
    assert tuple(buffer.samples[0, 0]) == (30, 20, 10, 255)


def test_from_bgr_accepts_grayscale_and_16_bit():
    gray = np.array([[0, 128], [200, 255]], dtype=np.uint8)
    buffer = PixelBuffer.fromBgr(gray)
    assert np.array_equal(buffer.samples[:, :, 0], gray)
    assert np.array_equal(buffer.samples[:, :, 1], gray)
    assert np.array_equal(buffer.samples[:, :, 2], gray)

    deep = np.array([[0xFF00, 0x0100]], dtype=np.uint16)
    assert list(PixelBuffer.fromBgr(deep).samples[0, :, 0]) == [255, 1]


def test_from_bgr_rejects_empty_input():
    with pytest.raises(InvalidImageError):
        PixelBuffer.fromBgr(None)
    with pytest.raises(InvalidImageError):
        PixelBuffer.fromBgr(np.zeros((0, 0, 3), dtype=np.uint8))


def test_to_gray_uses_red_channel_for_gray_buffers(makeGrayBuffer):
    gray = np.arange(12, dtype=np.uint8).reshape(3, 4) * 20
    assert np.array_equal(makeGrayBuffer(gray).toGray(), gray)


def test_to_gray_converts_color_buffers():
    rgba = np.zeros((2, 2, 4), dtype=np.uint8)
    rgba[:, :, 0] = 255
    rgba[:, :, 3] = 255
    gray = PixelBuffer.fromRgba(rgba).toGray()
    assert gray.shape == (2, 2)
    assert 70 <= int(gray[0, 0]) <= 80


def test_copy_is_independent(makeGrayBuffer):
    original = makeGrayBuffer(np.full((2, 2), 9))
    clone = original.copy()
    clone.samples[0, 0, 0] = 200
    assert original.samples[0, 0, 0] == 9


def test_load_image_file(tmp_path):
    bgr = np.zeros((6, 8, 3), dtype=np.uint8)
    bgr[:, :, 2] = 255
    path = tmp_path / "red.png"
    cv2.imwrite(str(path), bgr)

    buffer = loadImageFile(path)
    assert (buffer.width, buffer.height) == (8, 6)
    assert tuple(buffer.samples[0, 0]) == (255, 0, 0, 255)


def test_load_image_file_errors(tmp_path):
    with pytest.raises(InvalidImageError):
        loadImageFile(tmp_path / "missing.png")

    garbage = tmp_path / "garbage.png"
    garbage.write_bytes(b"not an image")
    with pytest.raises(InvalidImageError):
        loadImageFile(garbage)
