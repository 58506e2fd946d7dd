"""Cameras."""

# ruff: noqa: F401

from ._camera2d import Camera2D
