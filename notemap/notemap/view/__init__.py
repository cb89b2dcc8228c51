"""Viewport and interaction state."""
