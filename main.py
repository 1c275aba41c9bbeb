"""
QR Salvage Application

Main entry point: live camera scanning, or the multi-strategy rescue on
a single still image.
Uses ScanController to initialize all services following SOLID principles.

Architecture:
- ScanController: Reads config and creates all services with parameters
- Services: Receive parameters, create core components internally

Usage:
    python main.py                      # live scan until a code is found
    python main.py --image photo.jpg    # still image scan
"""

import sys
import os
import argparse
import logging

# Add project root to path
PROJECT_ROOT = os.path.dirname(os.path.abspath(__file__))
sys.path.insert(0, PROJECT_ROOT)

from core.image.pixel_buffer import InvalidImageError
from core.interfaces.camera_interface import CameraError
from services.scan_controller import ScanController


def setupLogging(debugMode: bool = False) -> None:
    """
    Setup application logging.

    Args:
        debugMode: If True, set log level to DEBUG.
    """
    level = logging.DEBUG if debugMode else logging.INFO
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.StreamHandler(sys.stdout)
        ]
    )


def parseArgs(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="QR Salvage - rescue hard-to-read QR codes")
    parser.add_argument(
        "--image", "-i",
        type=str,
        default=None,
        help="Scan this image file instead of the camera"
    )
    parser.add_argument(
        "--config", "-c",
        type=str,
        default="config/application_config.json",
        help="Path to configuration file"
    )
    parser.add_argument(
        "--max-frames",
        type=int,
        default=None,
        help="Stop live scanning after this many frames"
    )
    return parser.parse_args(argv)


def runStillScan(controller: ScanController, imagePath: str, maxFrames=None) -> int:
    """Scan one image; on NOT_FOUND print guidance and fall back to live scanning."""
    report = controller.scanImage(imagePath)
    print(report.message)

    if report.found:
        return 0
    if report.liveRestarted:
        return runLiveScan(controller, maxFrames, alreadyStarted=True)
    return 1


def runLiveScan(controller: ScanController, maxFrames=None, alreadyStarted: bool = False) -> int:
    """Scan camera frames until a code is found."""
    if not alreadyStarted:
        controller.startLiveScan()
    text = controller.liveScanService.run(maxFrames=maxFrames)
    if text is None:
        return 1
    print(text)
    return 0


def main():
    """Main entry point."""
    setupLogging(debugMode=os.environ.get("DEBUG", "").lower() == "true")
    args = parseArgs()

    logger = logging.getLogger(__name__)
    logger.info("Starting QR Salvage v1.0.0")

    controller = None
    try:
        controller = ScanController(args.config)

        if args.image:
            exitCode = runStillScan(controller, args.image, args.max_frames)
        else:
            exitCode = runLiveScan(controller, args.max_frames)

    except CameraError as e:
        logger.error(f"Camera unavailable ({e.reason.value}): {e.detail}")
        print(e.userMessage)
        exitCode = 2
    except InvalidImageError as e:
        logger.error(f"Invalid image: {e}")
        exitCode = 2
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        exitCode = 130
    except Exception as e:
        logger.error(f"Application failed: {e}")
        exitCode = 1
    finally:
        if controller is not None:
            controller.shutdown()

    logger.info("Application terminated")
    sys.exit(exitCode)


if __name__ == "__main__":
    main()
