"""Shared fixtures: synthetic buffers, scripted decoders and generated QR symbols."""

import sys
from pathlib import Path
from typing import Callable, List, Optional

import numpy as np
import pytest

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from core.image.pixel_buffer import PixelBuffer
from core.interfaces.qr_decoder_interface import IQrDecoder, QrDetectionResult


def grayBuffer(gray: np.ndarray) -> PixelBuffer:
    """Opaque grayscale buffer (R == G == B) from a 2-D uint8 array."""
    gray = np.asarray(gray, dtype=np.uint8)
    height, width = gray.shape
    samples = np.empty((height, width, 4), dtype=np.uint8)
    samples[:, :, 0] = gray
    samples[:, :, 1] = gray
    samples[:, :, 2] = gray
    samples[:, :, 3] = 255
    return PixelBuffer(width, height, samples)


class ScriptedDecoder(IQrDecoder):
    """
    Decoder double: succeeds when `accept(buffer)` is true.

    Records every buffer it was asked to decode.
    """

    def __init__(self, accept: Callable[[PixelBuffer], bool], text: str = "HELLO", name: str = "scripted"):
        self._accept = accept
        self._text = text
        self._name = name
        self.calls: List[PixelBuffer] = []

    @property
    def backendName(self) -> str:
        return self._name

    def decode(self, buffer: PixelBuffer) -> Optional[QrDetectionResult]:
        self.calls.append(buffer)
        if self._accept(buffer):
            return QrDetectionResult(text=self._text, backend=self._name)
        return None


class RaisingDecoder(IQrDecoder):
    """Decoder double that fails on every call."""

    def __init__(self):
        self.calls = 0

    @property
    def backendName(self) -> str:
        return "raising"

    def decode(self, buffer: PixelBuffer) -> Optional[QrDetectionResult]:
        self.calls += 1
        raise RuntimeError("engine crashed")


def renderQr(text: str, moduleSize: int = 8, border: int = 4) -> np.ndarray:
    """Render a QR symbol as a 2-D uint8 array (black modules on white)."""
    qrcode = pytest.importorskip("qrcode")
    qr = qrcode.QRCode(border=border, error_correction=qrcode.constants.ERROR_CORRECT_M)
    qr.add_data(text)
    qr.make(fit=True)
    matrix = np.array(qr.get_matrix(), dtype=bool)
    modules = np.where(matrix, 0, 255).astype(np.uint8)
    return np.kron(modules, np.ones((moduleSize, moduleSize), dtype=np.uint8))


@pytest.fixture
def makeGrayBuffer():
    return grayBuffer


@pytest.fixture
def qrImage():
    """Crisp grayscale QR symbol encoding 'https://example.com/menu'."""
    return renderQr("https://example.com/menu")


@pytest.fixture
def neverDecoder():
    return ScriptedDecoder(lambda buffer: False, name="never")


@pytest.fixture
def alwaysDecoder():
    return ScriptedDecoder(lambda buffer: True, name="always")


@pytest.fixture
def noiseBuffer():
    """Seeded random RGB noise, 64x48."""
    rng = np.random.default_rng(1234)
    samples = rng.integers(0, 256, size=(48, 64, 4), dtype=np.uint8)
    samples[:, :, 3] = 255
    return PixelBuffer(64, 48, samples)


@pytest.fixture
def scriptedDecoder():
    """Factory for ScriptedDecoder(accept, text, name)."""
    return ScriptedDecoder


@pytest.fixture
def raisingDecoder():
    return RaisingDecoder()


@pytest.fixture
def renderQrImage():
    """Factory for renderQr(text, moduleSize, border)."""
    return renderQr
