"""Image-to-stipple pipeline for the hanging plotter.

AIDEV-NOTE: Organised leaves first:
- density: ink density model and DensityField
- sampler: rejection sampling into per-channel point sets
- relaxer: weighted Voronoi (Lloyd) relaxation
- tour: nearest-neighbour tours and 2-opt improvement
- processor: StippleProcessor orchestrating the stages
- interchange / svg_export: JSON and SVG collaborators
"""

from .density import DensityField
from .processor import StippleProcessor
from .svg_export import path_to_svg, points_to_svg

__all__ = ["DensityField", "StippleProcessor", "path_to_svg", "points_to_svg"]
