"""
Visual-novel script to slide-deck compiler.

Classifies Ren'Py-style script lines into statements, walks them from the
entry label to a linear list of slides, and renders the slides as a LaTeX
Beamer document with hyperlinked menus and jumps.
"""

from __future__ import annotations

__all__ = [
    "load_script",
    "build_slides",
    "SlidePipeline",
]

from .script_loader import load_script
from .traversal import build_slides
from .pipeline import SlidePipeline
