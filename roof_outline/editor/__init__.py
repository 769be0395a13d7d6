"""Operator-facing drawing tools.

- ``snap_endpoint``: angle snapping for hand-drawn edges.
- ``EditorSession``: drawing state machine with undo/redo.
- ``AlignmentController``: base imagery offset/rotation.
- ``PixelFrame``: pixel <-> WGS 84 conversion over an image's bounds.
"""

from roof_outline.editor.alignment import AlignmentController
from roof_outline.editor.frame import PixelFrame
from roof_outline.editor.session import EditorSession, EditorState, InProgressLine
from roof_outline.editor.snapping import snap_endpoint

__all__ = [
    "AlignmentController",
    "EditorSession",
    "EditorState",
    "InProgressLine",
    "PixelFrame",
    "snap_endpoint",
]
