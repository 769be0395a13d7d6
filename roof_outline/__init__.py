"""Roof Outline Acquisition.

Captures the outline of a building roof from aerial imagery: an automated
detection pipeline that turns an aerial image into validated polygons, and
an interactive editor for drawing or correcting roof edges by hand when
detection cannot produce a confident result.
"""

__version__ = "0.1.0"
