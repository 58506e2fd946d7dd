"""In-memory canvases with a 2D drawing context."""

# ruff: noqa: F401

from ._context2d import Canvas, Context2D
