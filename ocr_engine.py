"""
OCR Engine Adapter

Wraps Tesseract (through pytesseract) behind a small interface:

* ``TesseractEngine`` - the recognition engine itself.
* ``OcrEngineHandle`` - builds the engine once, on first use, and hands the same
  instance to every caller. Construction is guarded by a lock so concurrent
  first calls never build two engines.
* ``OcrReader`` - recognizes text from an image file, reports coarse progress
  and turns engine failures into an empty string.
"""

import logging
import threading
from pathlib import Path
from typing import Callable, Optional, Sequence, Union

import pytesseract
from PIL import Image, ImageOps

from settings import ExtractionSettings, load_settings

# Configure logging
logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int], None]


class TesseractEngine:
    """Tesseract OCR engine."""

    # Each pytesseract call runs its own tesseract process
    supports_concurrent_recognition = True

    def __init__(self, lang: str = "eng", config: str = "--oem 3 --psm 6"):
        """
        Initialize the engine, verifying that the tesseract binary is available.

        Args:
            lang: Tesseract language code
            config: Extra tesseract command-line options

        Raises:
            pytesseract.TesseractNotFoundError: If tesseract is not on PATH
        """
        self.lang = lang
        self.config = config
        self.version = pytesseract.get_tesseract_version()
        logger.info(f"[OCR] Tesseract {self.version} initialized (lang={lang})")

    def recognize(self, image: Image.Image) -> str:
        return pytesseract.image_to_string(image, lang=self.lang, config=self.config)


class OcrEngineHandle:
    """
    Lazily constructed, shared OCR engine.

    Pass one handle to every component that needs OCR; the engine behind it is
    built at most once, the first time ``get`` is called.
    """

    def __init__(
        self,
        factory: Optional[Callable[[], object]] = None,
        settings: Optional[ExtractionSettings] = None,
    ):
        settings = settings or load_settings()
        self._factory = factory or (
            lambda: TesseractEngine(lang=settings.tesseract_lang, config=settings.tesseract_config)
        )
        self._engine = None
        self._init_lock = threading.Lock()
        self._recognize_lock = threading.Lock()

    @property
    def initialized(self) -> bool:
        return self._engine is not None

    def get(self):
        """Return the engine, constructing it on first use."""
        if self._engine is None:
            with self._init_lock:
                if self._engine is None:
                    logger.info("[OCR] Initializing OCR engine...")
                    self._engine = self._factory()
        return self._engine

    def recognize(self, image: Image.Image) -> str:
        """Run recognition, serializing calls when the engine is not thread-safe."""
        engine = self.get()
        if getattr(engine, "supports_concurrent_recognition", False):
            return engine.recognize(image)
        with self._recognize_lock:
            return engine.recognize(image)


class OcrReader:
    """Recognizes text from raster images using a shared engine handle."""

    def __init__(
        self,
        handle: Optional[OcrEngineHandle] = None,
        settings: Optional[ExtractionSettings] = None,
    ):
        self.settings = settings or load_settings()
        self.handle = handle or OcrEngineHandle(settings=self.settings)
        self.milestones: Sequence[int] = tuple(self.settings.ocr_progress_milestones)

    def _report(self, stage: int, progress_callback: Optional[ProgressCallback]) -> None:
        if stage >= len(self.milestones):
            return
        percent = self.milestones[stage]
        logger.info(f"[OCR] Progress: {percent}%")
        if progress_callback is None:
            return
        try:
            progress_callback(percent)
        except Exception:
            logger.debug("[OCR] Progress callback raised", exc_info=True)

    def recognize(
        self,
        image_path: Union[str, Path],
        progress_callback: Optional[ProgressCallback] = None,
    ) -> str:
        """
        Recognize text from an image file.

        Args:
            image_path: Path to a raster image
            progress_callback: Optional callable receiving milestone percentages

        Returns:
            Recognized text, or an empty string when the engine fails
        """
        try:
            self.handle.get()
            with Image.open(image_path) as img:
                img.load()
                self._report(0, progress_callback)
                prepared = ImageOps.grayscale(img)
            self._report(1, progress_callback)
            # Last milestone marks the start of recognition; completion is logged below
            self._report(2, progress_callback)
            text = self.handle.recognize(prepared)
        except Exception as e:
            logger.warning(f"[OCR] Recognition failed for {image_path}: {e}")
            return ""

        text = text or ""
        logger.info(f"[OCR] Extraction complete. Text length: {len(text)}")
        return text
