"""Revisional calculation engine for contested financing contracts."""
