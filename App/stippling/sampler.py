"""Density-weighted rejection sampling of an image into point sets."""

import logging

import numpy as np

from models import Point, SamplingConfig

from .density import DensityField

logger = logging.getLogger(__name__)

# Draws evaluated per numpy batch (minimum)
BATCH_SIZE = 4096


def sample_points(
    field: DensityField,
    config: SamplingConfig,
    rng: "np.random.Generator | None" = None,
) -> "list[list[Point]]":
    """Sample ``config.num_points`` points spread over the field's channels.

    Each draw picks a uniform position inside the image and a uniform
    threshold in [0, 1). The position joins every channel whose threshold
    at that pixel is <= the drawn threshold, so in CMYK mode one draw can
    land in several channels (or none).

    Args:
        field: Density field built with the same gamma/mode as ``config``
        config: Sampling configuration
        rng: Random generator; defaults to one seeded with ``config.seed``

    Returns:
        One list of points per channel, in sampling order. The channel
        sizes add up to exactly ``config.num_points``.

    AIDEV-NOTE: There is no cap on the number of draws. A near-white image
    can take a long time; callers wanting a timeout must wrap this call.
    """
    if rng is None:
        rng = np.random.default_rng(config.seed)

    channel_count = field.channel_count
    channels: "list[list[Point]]" = [[] for _ in range(channel_count)]
    remaining = config.num_points
    width, height = field.width, field.height
    draws = 0

    while remaining > 0:
        batch = max(BATCH_SIZE, 2 * remaining)
        xs = rng.random(batch) * width
        ys = rng.random(batch) * height
        samples = rng.random(batch)
        draws += batch

        # Float rounding can land exactly on the far edge
        px = np.minimum(xs.astype(np.int64), width - 1)
        py = np.minimum(ys.astype(np.int64), height - 1)

        # (batch, channels) acceptance mask
        accepted = samples[:, np.newaxis] >= field.thresholds[:, py, px].T

        # Keep draws in order until the budget is spent
        counts = np.cumsum(accepted.sum(axis=1))
        last = int(np.searchsorted(counts, remaining))
        if last < batch:
            accepted = accepted[: last + 1].copy()
            # Trim the final draw so the total lands exactly on the target
            overshoot = int(counts[last]) - remaining
            if overshoot > 0:
                hits = np.flatnonzero(accepted[last])
                accepted[last, hits[len(hits) - overshoot :]] = False

        for channel_index in range(channel_count):
            rows = np.flatnonzero(accepted[:, channel_index])
            channels[channel_index].extend(
                Point(float(xs[i]), float(ys[i])) for i in rows
            )
            remaining -= len(rows)

    logger.debug(
        "Sampled %s points in %d draws (%s)",
        [len(c) for c in channels],
        draws,
        config.mode.value,
    )
    return channels
