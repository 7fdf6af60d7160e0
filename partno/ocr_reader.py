"""
OCR Reader for purchase-order table photos.

Runs PaddleOCR over an image and rebuilds the table as plain text, one
visual row per line, cells joined by spaces. Text files skip OCR entirely.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Union

# OCR
try:
    from paddleocr import PaddleOCR
    PADDLEOCR_AVAILABLE = True
except ImportError:
    PADDLEOCR_AVAILABLE = False

# Image handling
try:
    from PIL import Image
    import numpy as np
    PIL_AVAILABLE = True
except ImportError:
    PIL_AVAILABLE = False

logger = logging.getLogger(__name__)

IMAGE_SUFFIXES = {'.png', '.jpg', '.jpeg', '.bmp', '.tif', '.tiff', '.webp'}
TEXT_SUFFIXES = {'.txt'}


@dataclass
class OCRBox:
    text: str
    confidence: float
    x_center: float
    y_center: float


def boxes_to_text(boxes: List[OCRBox], row_tolerance: float = 12.0) -> str:
    """
    Group recognized boxes into text rows.

    Boxes whose vertical centers are within row_tolerance pixels of the
    previous box belong to the same row; each row reads left to right.
    """
    if not boxes:
        return ""

    ordered = sorted(boxes, key=lambda b: (b.y_center, b.x_center))
    rows: List[List[OCRBox]] = []
    last_y: Optional[float] = None

    for box in ordered:
        if last_y is None or abs(box.y_center - last_y) >= row_tolerance:
            rows.append([])
        rows[-1].append(box)
        last_y = box.y_center

    return "\n".join(
        " ".join(b.text for b in sorted(row, key=lambda b: b.x_center))
        for row in rows
    )


class OCRReader:
    """
    Extracts raw text from a table image with PaddleOCR.

    The recognizer is created lazily on first use.
    """

    def __init__(self, lang: str = 'korean', min_confidence: float = 0.5, row_tolerance: float = 12.0):
        """
        Args:
            lang: PaddleOCR language pack ('korean' also covers Latin text)
            min_confidence: Boxes below this recognition score are dropped
            row_tolerance: Max vertical distance (px) between boxes of one row
        """
        self.lang = lang
        self.min_confidence = min_confidence
        self.row_tolerance = row_tolerance
        self._ocr = None

    @property
    def available(self) -> bool:
        return PADDLEOCR_AVAILABLE and PIL_AVAILABLE

    def _get_ocr(self):
        if not self.available:
            raise RuntimeError(
                "PaddleOCR not available. Install with: pip install paddlepaddle paddleocr pillow numpy"
            )
        if self._ocr is None:
            logger.info(f"Initializing PaddleOCR (lang={self.lang})")
            self._ocr = PaddleOCR(use_angle_cls=True, lang=self.lang)
        return self._ocr

    def _collect_boxes(self, result) -> List[OCRBox]:
        """Flatten PaddleOCR output (classic list or predict-style dict)."""
        boxes: List[OCRBox] = []
        if not result:
            return boxes

        page = result[0]
        if not page:
            return boxes

        if isinstance(page, dict) or hasattr(page, 'get'):
            texts = page.get('rec_texts', [])
            scores = page.get('rec_scores', [])
            polys = page.get('rec_polys', page.get('dt_polys', []))
            for text, conf, poly in zip(texts, scores, polys):
                boxes.append(self._make_box(text, conf, poly))
        else:
            for line in page:
                if line and len(line) >= 2:
                    bbox, (text, conf) = line[0], line[1]
                    boxes.append(self._make_box(text, conf, bbox))

        return [b for b in boxes if b.text.strip() and b.confidence >= self.min_confidence]

    @staticmethod
    def _make_box(text: str, conf: float, bbox) -> OCRBox:
        return OCRBox(
            text=str(text),
            confidence=float(conf),
            x_center=(float(bbox[0][0]) + float(bbox[2][0])) / 2,
            y_center=(float(bbox[0][1]) + float(bbox[2][1])) / 2,
        )

    def read_image(self, image_path: Union[str, Path]) -> str:
        """Run OCR on one image and return its text rows."""
        ocr = self._get_ocr()
        img = Image.open(image_path).convert('RGB')
        result = ocr.ocr(np.array(img))
        boxes = self._collect_boxes(result)
        stats = summarize_boxes(boxes)
        logger.info(
            f"OCR found {stats['boxes']} text boxes in {Path(image_path).name} "
            f"(avg confidence {stats['avg_confidence']:.2f})"
        )
        return boxes_to_text(boxes, self.row_tolerance)

    def read(self, path: Union[str, Path]) -> str:
        """
        Read raw text from an image or a plain-text OCR dump.

        Raises:
            ValueError: unsupported file type
            RuntimeError: image given but PaddleOCR is not installed
        """
        path = Path(path)
        suffix = path.suffix.lower()
        if suffix in TEXT_SUFFIXES:
            return path.read_text(encoding='utf-8')
        if suffix in IMAGE_SUFFIXES:
            return self.read_image(path)
        raise ValueError(f"Unsupported input type: {path.suffix}")


def is_supported_input(path: Path) -> bool:
    return path.suffix.lower() in IMAGE_SUFFIXES | TEXT_SUFFIXES


def summarize_boxes(boxes: List[OCRBox]) -> Dict[str, float]:
    """Box count and average confidence, for logging."""
    if not boxes:
        return {'boxes': 0, 'avg_confidence': 0.0}
    return {
        'boxes': len(boxes),
        'avg_confidence': sum(b.confidence for b in boxes) / len(boxes),
    }
