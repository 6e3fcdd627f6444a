"""
CompositionLib - Layer stack, export and undo history

The Composition controller owns the template overlay, the text-fill layer
and user layers; HistoryStack keeps by-value snapshots for undo/redo.
"""

from WS_Libs.CompositionLib.history import HistoryStack
from WS_Libs.CompositionLib.layer import Layer
from WS_Libs.CompositionLib.composition import Composition

__all__ = [
    "Composition",
    "HistoryStack",
    "Layer",
]
