"""
Sparkline module.
Draws short trend lines onto a pluggable drawing surface.
"""

from .renderer import DrawingSurface, SvgSurface, compute_points, render_sparkline, sparkline_svg

__all__ = [
    "DrawingSurface",
    "SvgSurface",
    "compute_points",
    "render_sparkline",
    "sparkline_svg",
]
