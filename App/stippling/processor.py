"""Pipeline orchestrating sampling, relaxation and tour building.

AIDEV-NOTE: Channels never share mutable state. Each stage fans out one
task per channel on a thread pool and joins before the next stage starts.
A channel's relaxation iterations run in order inside its own task.
Results are collected by channel index, never by completion order.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Callable, TypeVar

from PIL import Image

from models import PipelineConfig, Point, SamplingConfig, StippleResult

from .density import DensityField
from .relaxer import relax_iterations
from .sampler import sample_points
from .tour import make_nn_tour, optimize, total_distance

logger = logging.getLogger(__name__)

T = TypeVar("T")


class StippleProcessor:
    """Turns an image into per-channel point sets or tours."""

    def __init__(
        self,
        sampling_config: SamplingConfig | None = None,
        pipeline_config: PipelineConfig | None = None,
    ):
        self.sampling_config = sampling_config or SamplingConfig()
        self.pipeline_config = pipeline_config or PipelineConfig()

    def load_image(self, file_path: str | Path) -> Image.Image:
        """Load an image file as RGB.

        Raises:
            ValueError: If file cannot be loaded or is invalid
        """
        try:
            image = Image.open(file_path)
            if image.mode != "RGB":
                image = image.convert("RGB")
            return image
        except Exception as e:
            raise ValueError(f"Failed to load image: {e}") from e

    def density_field(self, image: Image.Image) -> DensityField:
        return DensityField.from_image(
            image,
            gamma=self.sampling_config.gamma,
            mode=self.sampling_config.mode,
        )

    def _map_channels(
        self, task: "Callable[[int, list[Point]], T]", channels: "list[list[Point]]"
    ) -> "list[T]":
        """Run ``task(index, channel)`` for every channel in parallel."""
        workers = self.pipeline_config.max_workers or max(len(channels), 1)
        with ThreadPoolExecutor(max_workers=workers) as executor:
            futures = [executor.submit(task, i, c) for i, c in enumerate(channels)]
            # result() re-raises a worker's exception here
            return [future.result() for future in futures]

    def relax_channels(
        self, channels: "list[list[Point]]", field: DensityField, iterations: int
    ) -> "list[list[Point]]":
        """Run ``iterations`` relaxation steps on every channel."""
        channels = self._map_channels(
            lambda index, points: relax_iterations(points, field, iterations, index), channels
        )
        logger.info("Relaxation done (%d iterations)", iterations)
        return channels

    def make_tours(self, channels: "list[list[Point]]") -> "list[list[Point]]":
        """Nearest-neighbour tours, improved by 2-opt if configured."""
        threshold = self.pipeline_config.tsp_improvement

        def build(index: int, points: "list[Point]") -> "list[Point]":
            tour = make_nn_tour(points)
            # A threshold of 0 means no 2-opt at all
            if threshold != 0.0:
                tour = optimize(tour, threshold)
            logger.debug("Channel %d: tour of %d points", index, len(tour))
            return tour

        return self._map_channels(build, channels)

    def process(self, image: Image.Image) -> StippleResult:
        """Run the full pipeline on a loaded image."""
        field = self.density_field(image)
        mode = self.sampling_config.mode

        logger.info("Sample points")
        channels = sample_points(field, self.sampling_config)

        iterations = self.pipeline_config.voronoi_iterations
        if iterations > 0:
            logger.info("Move points")
            channels = self.relax_channels(channels, field, iterations)

        result = StippleResult(
            channels=channels, mode=mode, width=field.width, height=field.height
        )

        if not self.pipeline_config.draw_points:
            logger.info("Make NN tours")
            result.channels = self.make_tours(channels)
            result.is_tour = True
            result.lengths = [total_distance(tour) for tour in result.channels]

        return result

    def process_file(self, file_path: str | Path) -> StippleResult:
        return self.process(self.load_image(file_path))
