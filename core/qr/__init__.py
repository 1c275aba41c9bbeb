"""QR Decoding module."""

from core.qr.qr_decoder_factory import (
    createQrDecoder,
    getSupportedQrBackends,
    isQrBackendAvailable
)

__all__ = [
    'createQrDecoder',
    'getSupportedQrBackends',
    'isQrBackendAvailable',
]
