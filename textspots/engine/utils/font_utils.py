from __future__ import annotations

from typing import Iterable, List, Optional

STANDARD_FONT_VARIANTS = {
    "Helvetica",
    "Helvetica-Bold",
    "Helvetica-Oblique",
    "Helvetica-BoldOblique",
    "Times-Roman",
    "Times-Bold",
    "Times-Italic",
    "Times-BoldItalic",
    "Courier",
    "Courier-Bold",
    "Courier-Oblique",
    "Courier-BoldOblique",
}

FONT_FALLBACKS = {
    "arial": "Helvetica",
    "arial mt": "Helvetica",
    "arialmt": "Helvetica",
    "calibri": "Helvetica",
    "helvetica": "Helvetica",
    "helvetica neue": "Helvetica",
    "inter": "Helvetica",
    "roboto": "Helvetica",
    "sans-serif": "Helvetica",
    "segoe ui": "Helvetica",
    "system-ui": "Helvetica",
    "tahoma": "Helvetica",
    "verdana": "Helvetica",
    "wix madefor display": "Helvetica",
    "wix madefor text": "Helvetica",
    "cambria": "Times-Roman",
    "georgia": "Times-Roman",
    "serif": "Times-Roman",
    "times": "Times-Roman",
    "times new roman": "Times-Roman",
    "consolas": "Courier",
    "courier": "Courier",
    "courier new": "Courier",
    "lucida console": "Courier",
    "monospace": "Courier",
}

# Suffixes per base family: (bold, italic) -> suffix
_VARIANT_SUFFIXES = {
    "Helvetica": {(False, False): "", (True, False): "-Bold", (False, True): "-Oblique", (True, True): "-BoldOblique"},
    "Courier": {(False, False): "", (True, False): "-Bold", (False, True): "-Oblique", (True, True): "-BoldOblique"},
}


def split_font_stack(family: Optional[str]) -> List[str]:
    """Split a CSS-style font stack (``"Wix Madefor", Arial, sans-serif``) into names."""
    if not family:
        return []
    names = []
    for part in family.split(","):
        cleaned = part.strip().strip("\"'").strip()
        if cleaned:
            names.append(cleaned)
    return names


def _normalize_base_font(font_name: Optional[str]) -> Optional[str]:
    if not font_name:
        return None

    cleaned = font_name.strip()
    if not cleaned:
        return None

    if cleaned in STANDARD_FONT_VARIANTS:
        return cleaned

    return FONT_FALLBACKS.get(cleaned.lower())


def _apply_variant(base: str, bold: bool, italic: bool) -> str:
    if base in STANDARD_FONT_VARIANTS and base not in {"Helvetica", "Times-Roman", "Courier"}:
        # Name already encodes weight/style (e.g. Helvetica-Bold)
        return base

    if base == "Times-Roman":
        if bold and italic:
            return "Times-BoldItalic"
        if bold:
            return "Times-Bold"
        if italic:
            return "Times-Italic"
        return "Times-Roman"

    return base + _VARIANT_SUFFIXES[base][(bold, italic)]


def resolve_font_variant(
    font_family: Optional[str],
    bold: bool,
    italic: bool,
    registered: Iterable[str] = (),
) -> str:
    """Resolve a font family (or CSS font stack) to a ReportLab font name.

    Families registered with ReportLab (custom TTF uploads) win over the
    standard-font fallbacks; the first resolvable name of the stack is used and
    Helvetica is the final fallback.
    """
    registered = set(registered)
    for name in split_font_stack(font_family):
        for candidate in _registered_candidates(name, bold, italic):
            if candidate in registered:
                return candidate
        base = _normalize_base_font(name)
        if base is not None:
            return _apply_variant(base, bold, italic)
    return _apply_variant("Helvetica", bold, italic)


def _registered_candidates(name: str, bold: bool, italic: bool) -> List[str]:
    if bold and italic:
        return [f"{name}-BoldItalic", f"{name}-BoldOblique", name]
    if bold:
        return [f"{name}-Bold", name]
    if italic:
        return [f"{name}-Italic", f"{name}-Oblique", name]
    return [name]
