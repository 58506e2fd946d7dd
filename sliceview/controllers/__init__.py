"""Interaction with slice renderers: pointer, wheel and keyboard input."""

# ruff: noqa: F401

from ._interactor import Interactor
