"""Placeholder XYZ tile server that renders labeled debug tiles."""
