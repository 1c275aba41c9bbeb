# Core module for QR Salvage
# Contains pixel buffers, filter kernels, decoders, strategies and camera capture

from core.interfaces.camera_interface import ICameraCapture, CameraError, CameraErrorReason
from core.interfaces.qr_decoder_interface import IQrDecoder, QrDetectionResult, InvertPolicy
from core.image import PixelBuffer, InvalidImageError, GeometricResampler, InvalidScaleError
from core.camera.opencv_camera import OpenCVCamera
from core.strategy import StrategyOrchestrator, Strategy, DEFAULT_STRATEGIES

__all__ = [
    "ICameraCapture",
    "CameraError",
    "CameraErrorReason",
    "IQrDecoder",
    "QrDetectionResult",
    "InvertPolicy",
    "PixelBuffer",
    "InvalidImageError",
    "GeometricResampler",
    "InvalidScaleError",
    "OpenCVCamera",
    "StrategyOrchestrator",
    "Strategy",
    "DEFAULT_STRATEGIES",
]
