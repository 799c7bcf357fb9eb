"""JSON interchange of point sets and tours.

A channel is a list of ``{"x": .., "y": ..}`` objects. A document is either
one channel or a list of channels; both shapes are accepted when reading.
"""

import json
from pathlib import Path

from models import ChannelFormatError, Point


def channels_to_data(channels: "list[list[Point]]") -> "list[list[dict[str, float]]]":
    return [[{"x": p.x, "y": p.y} for p in channel] for channel in channels]


def _parse_point(item: object) -> Point:
    if not isinstance(item, dict) or "x" not in item or "y" not in item:
        raise ChannelFormatError(f"Expected an object with x and y, got {item!r}")
    try:
        return Point(float(item["x"]), float(item["y"]))
    except (TypeError, ValueError) as e:
        raise ChannelFormatError(f"Invalid coordinates in {item!r}") from e


def channels_from_data(data: object) -> "list[list[Point]]":
    """Parse a decoded JSON document into a list of channels.

    Raises:
        ChannelFormatError: If the document is neither a channel nor a
            list of channels
    """
    if not isinstance(data, list):
        raise ChannelFormatError(f"Expected a list, got {type(data).__name__}")

    # An empty list or a list of point objects is a single channel
    if not data or isinstance(data[0], dict):
        return [[_parse_point(item) for item in data]]

    channels = []
    for channel in data:
        if not isinstance(channel, list):
            raise ChannelFormatError(f"Expected a channel list, got {type(channel).__name__}")
        channels.append([_parse_point(item) for item in channel])
    return channels


def save_channels(path: "str | Path", channels: "list[list[Point]]") -> None:
    with open(path, "w") as f:
        json.dump(channels_to_data(channels), f, indent=2)


def load_channels(path: "str | Path") -> "list[list[Point]]":
    """Load channels from a JSON file.

    Raises:
        ChannelFormatError: If the file is not valid JSON or has the wrong shape
    """
    try:
        with open(path, "r") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ChannelFormatError(f"Invalid JSON in {path}: {e}") from e
    return channels_from_data(data)
