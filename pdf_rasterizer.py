"""
First-Page PDF Rasterization

Converts page one of a PDF into a PNG suitable for OCR. Several external tools
can do this; they are modelled as interchangeable rasterizers tried in order,
each bounded by its own timeout. A missing tool or a malformed PDF is an
expected failure: it is logged and the next rasterizer is tried.
"""

import logging
import os
import subprocess
import tempfile
import uuid
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, List, Optional, Sequence, Union

from pdf2image import convert_from_path

from settings import ExtractionSettings, load_settings

# Configure logging
logger = logging.getLogger(__name__)

PathLike = Union[str, os.PathLike]


class Rasterizer:
    """Base class for a page-one rasterizer."""

    name = "rasterizer"

    def __init__(self, settings: Optional[ExtractionSettings] = None):
        self.settings = settings or load_settings()

    def rasterize(self, pdf_path: Path, output_path: Path) -> None:
        """
        Write page one of ``pdf_path`` as a PNG to ``output_path``.

        Raises on failure; the caller decides whether to try another tool.
        """
        raise NotImplementedError


class PopplerRasterizer(Rasterizer):
    """Rasterizes through Poppler (``pdftoppm`` or ``pdftocairo``) via pdf2image."""

    def __init__(self, settings: Optional[ExtractionSettings] = None, use_pdftocairo: bool = False):
        super().__init__(settings)
        self.use_pdftocairo = use_pdftocairo
        self.name = "pdftocairo" if use_pdftocairo else "pdftoppm"

    def rasterize(self, pdf_path: Path, output_path: Path) -> None:
        convert_from_path(
            str(pdf_path),
            dpi=self.settings.raster_density,
            first_page=1,
            last_page=1,
            fmt="png",
            size=(self.settings.raster_width, self.settings.raster_height),
            output_folder=str(output_path.parent),
            output_file=output_path.stem,
            single_file=True,
            paths_only=True,
            use_pdftocairo=self.use_pdftocairo,
            timeout=self.settings.raster_timeout_seconds,
        )


class MagickRasterizer(Rasterizer):
    """Rasterizes through a GraphicsMagick or ImageMagick ``convert`` command."""

    def __init__(self, command: Sequence[str], name: str, settings: Optional[ExtractionSettings] = None):
        super().__init__(settings)
        self.command = list(command)
        self.name = name

    def build_command(self, pdf_path: Path, output_path: Path) -> List[str]:
        """Command line converting page one (``[0]``) at the configured density."""
        return self.command + [
            "-density", str(self.settings.raster_density),
            f"{pdf_path}[0]",
            "-resize", f"{self.settings.raster_width}x{self.settings.raster_height}",
            str(output_path),
        ]

    def rasterize(self, pdf_path: Path, output_path: Path) -> None:
        cmd = self.build_command(pdf_path, output_path)
        logger.info(f"[OCR] Running: {' '.join(cmd)}")
        # subprocess.run kills the child when the timeout expires
        subprocess.run(
            cmd,
            check=True,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            timeout=self.settings.raster_timeout_seconds,
        )


def build_rasterizers(settings: Optional[ExtractionSettings] = None) -> List[Rasterizer]:
    """
    Build the rasterizer chain named in the settings.

    Args:
        settings: Extraction settings (loaded from config when omitted)

    Returns:
        Ordered list of rasterizers
    """
    settings = settings or load_settings()
    factories = {
        "pdftoppm": lambda: PopplerRasterizer(settings),
        "pdftocairo": lambda: PopplerRasterizer(settings, use_pdftocairo=True),
        "graphicsmagick": lambda: MagickRasterizer(["gm", "convert"], "graphicsmagick", settings),
        "imagemagick": lambda: MagickRasterizer(["convert"], "imagemagick", settings),
    }
    rasterizers = []
    for name in settings.rasterizers:
        factory = factories.get(name.lower())
        if factory is None:
            logger.warning(f"Unknown rasterizer '{name}' in settings; skipping")
            continue
        rasterizers.append(factory())
    return rasterizers


def _remove_quietly(path: Path) -> None:
    try:
        if path.exists():
            path.unlink()
    except OSError as e:
        logger.warning(f"Could not delete temporary image {path}: {e}")


def rasterize_first_page(
    pdf_path: PathLike,
    rasterizers: Optional[Sequence[Rasterizer]] = None,
    settings: Optional[ExtractionSettings] = None,
) -> Optional[Path]:
    """
    Convert page one of a PDF to a temporary PNG.

    Args:
        pdf_path: Path to the PDF file
        rasterizers: Ordered rasterizers to try (built from settings when omitted)
        settings: Extraction settings

    Returns:
        Path to the temporary image, or None when every rasterizer failed.
        The caller owns the returned file and must delete it.

    Raises:
        TypeError: If ``pdf_path`` is not a path
    """
    if not isinstance(pdf_path, (str, os.PathLike)):
        raise TypeError(f"pdf_path must be a str or path, got {type(pdf_path).__name__}")

    pdf_path = Path(pdf_path)
    if rasterizers is None:
        rasterizers = build_rasterizers(settings)

    output_path = Path(tempfile.gettempdir()) / f"ocr-{uuid.uuid4().hex}.png"

    for rasterizer in rasterizers:
        try:
            rasterizer.rasterize(pdf_path, output_path)
        except Exception as e:
            logger.warning(f"[OCR] {rasterizer.name} failed for {pdf_path.name}: {e}")
            _remove_quietly(output_path)
            continue

        if output_path.exists():
            logger.info(f"[OCR] PDF converted to image with {rasterizer.name}: {output_path}")
            return output_path

        logger.warning(f"[OCR] {rasterizer.name} produced no output file for {pdf_path.name}")

    logger.error(f"[OCR] All rasterizers failed for {pdf_path.name}")
    return None


@contextmanager
def rasterized_first_page(
    pdf_path: PathLike,
    rasterizers: Optional[Sequence[Rasterizer]] = None,
    settings: Optional[ExtractionSettings] = None,
) -> Iterator[Optional[Path]]:
    """
    Context manager yielding a temporary page-one image (or None).

    The image is deleted on exit, whether the body succeeded or raised.
    Deletion failures are logged, never raised.
    """
    image_path = rasterize_first_page(pdf_path, rasterizers=rasterizers, settings=settings)
    try:
        yield image_path
    finally:
        if image_path is not None:
            _remove_quietly(image_path)
