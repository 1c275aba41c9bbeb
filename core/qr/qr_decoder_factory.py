"""
QR Decoder Factory Module.

Factory function for creating QR decoder instances based on backend selection.
Supports pyzbar and OpenCV (fast engines) and zxing-cpp (robust engine).

Follows:
- OCP (Open/Closed Principle): Easy to extend with new backends
- DIP (Dependency Inversion): Returns IQrDecoder interface
- Factory Pattern: Encapsulates object creation logic
"""

import logging
from typing import List, Union

from core.interfaces.qr_decoder_interface import IQrDecoder, InvertPolicy


logger = logging.getLogger(__name__)


def createQrDecoder(
    backend: str = "pyzbar",
    invertPolicy: Union[InvertPolicy, str] = InvertPolicy.ATTEMPT_BOTH,
    # ZXing params (prefixed with 'zxing')
    zxingTryHarder: bool = True
) -> IQrDecoder:
    """
    Factory function to create QR decoder based on backend.

    Supports:
    - "pyzbar": ZBar backend (fast engine)
    - "opencv": OpenCV QRCodeDetector backend (fast engine, no native deps)
    - "zxing": ZXing-cpp backend (robust engine, try-harder)

    Args:
        backend: Backend name ("pyzbar", "opencv" or "zxing").
        invertPolicy: (fast engines) Polarity search, enum or its value
            ("dontInvert", "onlyInvert", "attemptBoth", "invertFirst").
        zxingTryHarder: (zxing) Enable exhaustive search.

    Returns:
        IQrDecoder: QR decoder instance implementing IQrDecoder interface.

    Raises:
        ValueError: If backend or invert policy is invalid.
        ImportError: If required library is not installed.

    Examples:
        >>> # Fast engine for live scanning
        >>> decoder = createQrDecoder(backend="pyzbar", invertPolicy="dontInvert")

        >>> # Robust engine for still images
        >>> decoder = createQrDecoder(backend="zxing", zxingTryHarder=True)
    """
    # Normalize backend name
    backend = backend.lower().strip()

    # Validate backend
    supportedBackends = getSupportedQrBackends()
    if backend not in supportedBackends:
        errorMsg = (
            f"Invalid QR backend: '{backend}'. "
            f"Supported backends: {supportedBackends}"
        )
        logger.error(errorMsg)
        raise ValueError(errorMsg)

    if not isinstance(invertPolicy, InvertPolicy):
        invertPolicy = InvertPolicy(invertPolicy)

    if backend == "pyzbar":
        return _createPyzbarDecoder(invertPolicy)

    elif backend == "opencv":
        from core.qr.opencv_qr_decoder import OpencvQrDecoder

        logger.info(f"Creating OpenCV QR decoder (invertPolicy={invertPolicy.value})")
        return OpencvQrDecoder(invertPolicy=invertPolicy)

    elif backend == "zxing":
        return _createZxingDecoder(zxingTryHarder)

    # Should never reach here due to validation above
    raise ValueError(f"Unsupported QR backend: {backend}")


def _createPyzbarDecoder(invertPolicy: InvertPolicy) -> IQrDecoder:
    """
    Create pyzbar QR decoder instance.

    Raises:
        ImportError: If pyzbar or the zbar shared library is not installed.
    """
    try:
        from core.qr.pyzbar_qr_decoder import PyzbarQrDecoder

        logger.info(f"Creating pyzbar QR decoder (invertPolicy={invertPolicy.value})")
        return PyzbarQrDecoder(invertPolicy=invertPolicy)

    except ImportError as e:
        errorMsg = (
            "pyzbar is not installed or the zbar library is missing. "
            "Install with: pip install pyzbar (and libzbar0 on Linux)"
        )
        logger.error(errorMsg)
        logger.error(f"Import error details: {e}")
        raise ImportError(errorMsg) from e


def _createZxingDecoder(zxingTryHarder: bool) -> IQrDecoder:
    """
    Create ZXing QR decoder instance.

    zxing-cpp itself is imported lazily on first decode; its presence is
    checked here so configuration errors surface at startup.

    Raises:
        ImportError: If zxing-cpp is not installed.
    """
    if not isQrBackendAvailable("zxing"):
        errorMsg = (
            "ZXing-cpp is not installed. "
            "Install with: pip install zxing-cpp"
        )
        logger.error(errorMsg)
        raise ImportError(errorMsg)

    from core.qr.zxing_qr_decoder import ZxingQrDecoder

    logger.info(f"Creating ZXing QR decoder (tryHarder={zxingTryHarder})")
    return ZxingQrDecoder(tryHarder=zxingTryHarder)


def getSupportedQrBackends() -> List[str]:
    """
    Get list of supported QR backend names.

    Returns:
        List[str]: List of backend names ["pyzbar", "opencv", "zxing"].
    """
    return ["pyzbar", "opencv", "zxing"]


def isQrBackendAvailable(backend: str) -> bool:
    """
    Check if a QR backend is available (library installed).

    Args:
        backend: Backend name ("pyzbar", "opencv" or "zxing").

    Returns:
        bool: True if backend library is installed and available.
    """
    backend = backend.lower().strip()

    if backend == "zxing":
        try:
            import zxingcpp
            return True
        except ImportError:
            return False

    elif backend == "pyzbar":
        try:
            # Raises ImportError when the zbar shared library is missing
            from pyzbar import pyzbar
            return True
        except ImportError:
            return False

    elif backend == "opencv":
        try:
            import cv2
            _ = cv2.QRCodeDetector
            return True
        except (ImportError, AttributeError):
            return False

    return False
