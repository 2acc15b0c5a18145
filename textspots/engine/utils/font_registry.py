"""Custom TrueType fonts for text measurement.

Fonts registered here become measurable by ``ReportLabTextMetrics`` under the
name they were registered with; the font stack resolution in ``font_utils``
prefers them over the standard PDF fonts.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Set, Union

from reportlab.pdfbase import pdfmetrics  # type: ignore
from reportlab.pdfbase.ttfonts import TTFError, TTFont  # type: ignore

from ...exceptions import MediaError

logger = logging.getLogger(__name__)

_REGISTERED: Set[str] = set()


def register_font_file(font_name: str, font_path: Union[str, Path]) -> str:
    """
    Registers a TrueType font with ReportLab so it can be measured.

    Args:
        font_name: Name the font is measured under (e.g. "Brand-Bold")
        font_path: Path to the *.ttf file

    Returns:
        The registered font name

    Raises:
        MediaError: If the file is missing or is not a usable TrueType font
    """
    if font_name in _REGISTERED:
        return font_name

    path = Path(font_path)
    if not path.is_file():
        raise MediaError("Font file not found", str(path))

    try:
        pdfmetrics.registerFont(TTFont(font_name, str(path)))
    except TTFError as exc:
        raise MediaError(f"Could not register font {font_name}", str(exc)) from exc

    _REGISTERED.add(font_name)
    logger.debug("Registered font %s (%s)", font_name, path)
    return font_name


def register_font_directory(directory: Union[str, Path]) -> List[str]:
    """
    Register every ``*.ttf`` below ``directory`` under its file stem.

    Files ReportLab cannot load are skipped with a warning.

    Returns:
        Names registered by this call
    """
    root = Path(directory)
    if not root.is_dir():
        raise MediaError("Font directory not found", str(root))

    registered: List[str] = []
    for font_path in sorted(root.rglob("*.ttf")):
        try:
            registered.append(register_font_file(font_path.stem, font_path))
        except MediaError as exc:
            logger.warning("Skipping font %s: %s", font_path, exc)
    return registered


def registered_font_names() -> List[str]:
    """Names of every font ReportLab can currently measure."""
    return list(pdfmetrics.getRegisteredFontNames()) + list(pdfmetrics.standardFonts)
