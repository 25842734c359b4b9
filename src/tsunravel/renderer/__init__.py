"""Renderers for generated index modules."""
