"""Drawing-plane normalisation, hanging-plotter kinematics and motion programs.

AIDEV-NOTE: Two motors hang the pen on two cords. A drawing-plane point
becomes the pair of cord lengths (a, b) from the point to the left and
right motor shafts, relative to the lengths at the home position (the
centre of the drawing plane).
"""

import math

from models import Calibration, DegenerateGeometryError, Point

PEN_DOWN = "M3"
PEN_UP = "M5"


class Calibrator:
    """Maps channels onto a calibrated machine."""

    def __init__(self, calibration: Calibration):
        self.calibration = calibration

    def translate_origin(self, channels: "list[list[Point]]") -> "list[list[Point]]":
        """Centre all channels on the origin and scale them to the drawing area.

        One bounding box covers every channel and one scale factor keeps the
        aspect ratio. Applying this to its own output changes nothing.

        Raises:
            DegenerateGeometryError: If there are no points, or the bounding
                box has zero width or height
        """
        points = [p for channel in channels for p in channel]
        if not points:
            raise DegenerateGeometryError("translate_origin", "no points to normalise")

        min_x = min(p.x for p in points)
        max_x = max(p.x for p in points)
        min_y = min(p.y for p in points)
        max_y = max(p.y for p in points)

        dx = max_x - min_x
        dy = max_y - min_y
        if dx == 0.0 or dy == 0.0:
            raise DegenerateGeometryError(
                "translate_origin", f"bounding box has zero extent ({dx} x {dy})"
            )

        ratio = min(self.calibration.drawing_width / dx, self.calibration.drawing_height / dy)
        offset = Point(-0.5 * (min_x + max_x), -0.5 * (min_y + max_y))

        return [[(p + offset) * ratio for p in channel] for channel in channels]

    def apply(self, point: Point) -> Point:
        """Cord lengths (a, b) to the left and right motor for a drawing point.

        Drawing-plane y grows downwards, motor space grows upwards.
        """
        half_width = 0.5 * self.calibration.base_width
        x, y = point.x, -point.y
        drop = self.calibration.base_height - y

        a = math.sqrt((half_width + x) ** 2 + drop**2)
        b = math.sqrt((half_width - x) ** 2 + drop**2)
        return Point(a, b)

    def home(self) -> Point:
        """Cord lengths at the centre of the drawing plane."""
        return self.apply(Point.origin())

    def transform_single_channel(self, channel: "list[Point]") -> "list[Point]":
        home = self.home()
        return [self.apply(p) - home for p in channel]

    def transform_coordinates(self, channels: "list[list[Point]]") -> "list[list[Point]]":
        return [self.transform_single_channel(c) for c in channels]

    def channel_to_commands(self, channel: "list[Point]", draw_points: bool = False) -> "list[str]":
        """Movement commands for one machine-space channel.

        Args:
            channel: Cord-length pairs relative to home
            draw_points: Lift the pen between points (one dot each) instead
                of drawing one continuous stroke

        Returns:
            Command lines, without header or footer
        """
        commands = []
        if not channel:
            return commands

        if draw_points:
            for p in channel:
                commands.append(f"G0 X{p.x:.3f} Y{p.y:.3f}")
                commands.append(PEN_DOWN)
                commands.append(PEN_UP)
            return commands

        first = channel[0]
        commands.append(f"G0 X{first.x:.3f} Y{first.y:.3f}")
        commands.append(PEN_DOWN)
        commands.extend(f"G1 X{p.x:.3f} Y{p.y:.3f}" for p in channel[1:])
        commands.append(PEN_UP)
        return commands

    def render_program(self, channel: "list[Point]", draw_points: bool = False) -> str:
        """Complete motion program text for one machine-space channel."""
        calib = self.calibration
        lines = [
            "; hanging plotter motion program",
            f"; base_width={calib.base_width} base_height={calib.base_height}",
            f"; drawing_width={calib.drawing_width} drawing_height={calib.drawing_height}",
            f"; points={len(channel)}",
            "G21",
            "G90",
            # Pen starts at home; coordinates are relative to it
            "G92 X0 Y0",
            PEN_UP,
        ]
        lines.extend(self.channel_to_commands(channel, draw_points=draw_points))
        lines.append("G0 X0 Y0")
        lines.append("M2")
        return "\n".join(lines) + "\n"

    def estimate_travel(self, channel: "list[Point]") -> float:
        """Total cord-space travel from home through the channel and back."""
        if not channel:
            return 0.0
        origin = Point.origin()
        total = origin.distance(channel[0]) + channel[-1].distance(origin)
        total += sum(channel[i - 1].distance(channel[i]) for i in range(1, len(channel)))
        return total
