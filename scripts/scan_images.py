#!/usr/bin/env python3
"""
Batch Scan Script.

Run the still image QR rescue on every image in a directory and report
which strategy decoded each one.

Usage:
    python scripts/scan_images.py
    python scripts/scan_images.py --input samples/ --debug
    python scripts/scan_images.py --debug --limit 10

Output:
    When --debug is enabled, every preprocessed decoder input and the
    outcome JSON are saved to output/debug/still_scan/, and a batch
    summary to output/debug/batch/.

Follows:
    - SRP: Single responsibility for batch processing
    - DIP: Depends on abstractions via ScanController
"""

import sys
import argparse
import logging
import time
import json
from collections import Counter
from datetime import datetime
from pathlib import Path
from typing import List, Optional

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from core.image.pixel_buffer import InvalidImageError
from services.scan_controller import ScanController


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Image Loading
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

SUPPORTED_EXTENSIONS = {'.jpg', '.jpeg', '.png', '.bmp', '.tiff', '.webp'}


def loadImages(inputDir: str) -> List[Path]:
    """
    Load list of image files from directory (recursive).

    Args:
        inputDir: Path to input directory containing images.

    Returns:
        List of image file paths, sorted by name.
    """
    logger = logging.getLogger(__name__)
    inputPath = Path(inputDir)

    if not inputPath.is_dir():
        logger.error(f"Input path is not a directory: {inputDir}")
        return []

    imageFiles = []
    for ext in SUPPORTED_EXTENSIONS:
        imageFiles.extend(inputPath.rglob(f"*{ext}"))
        imageFiles.extend(inputPath.rglob(f"*{ext.upper()}"))

    imageFiles = sorted(set(imageFiles), key=lambda p: str(p).lower())

    logger.info(f"Found {len(imageFiles)} images in {inputDir} (recursive)")
    return imageFiles


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Batch Processing
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

def scanAll(
    controller: ScanController,
    inputDir: str,
    limit: Optional[int] = None
) -> List[dict]:
    """
    Scan all images in a directory.

    Args:
        controller: Scan controller with all services.
        inputDir: Input directory containing images.
        limit: Maximum number of images to process (None = all).

    Returns:
        List of result dictionaries for each processed image.
    """
    logger = logging.getLogger(__name__)

    imageFiles = loadImages(inputDir)
    if not imageFiles:
        logger.warning("No images found to process")
        return []

    if limit is not None and limit > 0:
        imageFiles = imageFiles[:limit]
        logger.info(f"Processing limited to {limit} images")

    scanService = controller.stillImageScanService
    results = []
    totalCount = len(imageFiles)

    logger.info(f"Starting batch scan of {totalCount} images...")
    batchStartTime = time.time()

    for idx, imagePath in enumerate(imageFiles, 1):
        try:
            displayPath = str(imagePath.relative_to(inputDir))
        except ValueError:
            displayPath = imagePath.name

        logger.info(f"[{idx}/{totalCount}] Scanning: {displayPath}")

        try:
            outcome = scanService.scanImage(imagePath)
        except InvalidImageError as e:
            logger.error(f"  ✗ {e}")
            results.append({"image": displayPath, "status": "invalid_image", "error": str(e)})
            continue

        result = outcome.toDict()
        result["image"] = displayPath
        results.append(result)

        if outcome.found:
            logger.info(f"  ✓ '{outcome.strategyName}': {outcome.text}")
        else:
            logger.warning(f"  ✗ {outcome.status.value} after {len(outcome.attempts)} attempts")
        logger.info(f"  Time: {outcome.processingTimeMs:.1f}ms")

    batchTotalTime = (time.time() - batchStartTime) * 1000
    successCount = sum(1 for r in results if r.get("status") == "success")
    winners = Counter(r["strategyName"] for r in results if r.get("status") == "success")

    logger.info("=" * 60)
    logger.info("BATCH SCAN COMPLETE")
    logger.info("=" * 60)
    logger.info(f"Total images:  {totalCount}")
    logger.info(f"Decoded:       {successCount} ({successCount/totalCount*100:.1f}%)")
    logger.info(f"Not decoded:   {totalCount - successCount}")
    logger.info(f"Total time:    {batchTotalTime:.1f}ms")
    logger.info(f"Avg time:      {batchTotalTime/totalCount:.1f}ms per image")
    for name, count in winners.most_common():
        logger.info(f"  {count:4d} × {name}")

    if controller.isDebugEnabled():
        saveBatchSummary(controller, results, batchTotalTime, inputDir)

    return results


def saveBatchSummary(
    controller: ScanController,
    results: List[dict],
    batchTotalTime: float,
    inputDir: str
) -> Optional[str]:
    """
    Save batch summary with per-strategy win counts.

    Returns:
        Path to saved summary file, or None on failure.
    """
    logger = logging.getLogger(__name__)

    try:
        summaryPath = Path(controller.getDebugBasePath()) / "batch"
        summaryPath.mkdir(parents=True, exist_ok=True)

        totalCount = len(results)
        successCount = sum(1 for r in results if r.get("status") == "success")
        winners = Counter(r["strategyName"] for r in results if r.get("status") == "success")

        summaryData = {
            "batch_info": {
                "input_directory": inputDir,
                "timestamp": datetime.now().isoformat(),
                "total_images": totalCount,
                "decoded": successCount,
                "success_rate": round(successCount / totalCount * 100, 2) if totalCount > 0 else 0
            },
            "batch_total_ms": round(batchTotalTime, 2),
            "strategy_wins": dict(winners),
            "individual_results": results
        }

        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        filepath = summaryPath / f"batch_summary_{timestamp}.json"

        with open(filepath, 'w', encoding='utf-8') as f:
            json.dump(summaryData, f, indent=2, ensure_ascii=False)

        logger.info(f"Batch summary saved: {filepath}")
        return str(filepath)

    except OSError as e:
        logger.error(f"Failed to save batch summary: {e}")
        return None


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# CLI Interface
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

def setupLogging(debugMode: bool = False) -> None:
    level = logging.DEBUG if debugMode else logging.INFO
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(levelname)s - %(message)s',
        handlers=[
            logging.StreamHandler(sys.stdout)
        ]
    )


def parseArgs() -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Batch scan script - decode QR codes in a directory of images",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python scripts/scan_images.py
  python scripts/scan_images.py --input samples/ --debug
  python scripts/scan_images.py --debug --limit 10
        """
    )

    parser.add_argument(
        "--input", "-i",
        type=str,
        default="samples",
        help="Input directory containing images (default: samples)"
    )

    parser.add_argument(
        "--config", "-c",
        type=str,
        default="config/application_config.json",
        help="Path to configuration file"
    )

    parser.add_argument(
        "--limit", "-n",
        type=int,
        default=None,
        help="Maximum number of images to process"
    )

    parser.add_argument(
        "--debug", "-d",
        action="store_true",
        help="Enable debug mode (saves output to output/debug/)"
    )

    return parser.parse_args()


def main():
    """Main entry point."""
    args = parseArgs()

    setupLogging(debugMode=args.debug)
    logger = logging.getLogger(__name__)

    logger.info("=" * 60)
    logger.info("BATCH SCAN SCRIPT")
    logger.info("=" * 60)
    logger.info(f"Input:  {args.input}")
    logger.info(f"Config: {args.config}")
    logger.info(f"Debug:  {args.debug}")
    if args.limit:
        logger.info(f"Limit:  {args.limit}")
    logger.info("=" * 60)

    if not Path(args.input).exists():
        logger.error(f"Input directory not found: {args.input}")
        logger.info(f"Please create '{args.input}' directory and add images.")
        sys.exit(1)

    try:
        controller = ScanController(args.config)

        if args.debug:
            controller.setDebugEnabled(True)
            logger.info(f"Debug output will be saved to: {controller.getDebugBasePath()}")

        results = scanAll(
            controller=controller,
            inputDir=args.input,
            limit=args.limit
        )

        controller.shutdown()

        if not results:
            sys.exit(1)

        successCount = sum(1 for r in results if r.get("status") == "success")
        sys.exit(0 if successCount > 0 else 1)

    except KeyboardInterrupt:
        logger.info("\nInterrupted by user")
        sys.exit(130)
    except Exception as e:
        logger.exception(f"Fatal error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
