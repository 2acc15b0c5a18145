"""
Layout engine: text layout, spot detection, restoration and the pipeline that
drives them.

Submodules are imported directly (``textspots.engine.text_layout`` etc.); this
package only exposes the geometry primitives everything else builds on.
"""

from .geometry import Padding, Point, Rect, Size

__all__ = ["Point", "Size", "Rect", "Padding"]
