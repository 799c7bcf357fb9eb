"""Calibration persistence for the hanging plotter.

This module loads and validates the machine calibration from JSON files.
"""

import json
import logging
import math
from dataclasses import fields
from pathlib import Path

from models import Calibration, CalibrationError

logger = logging.getLogger(__name__)

CALIBRATION_FIELDS = tuple(f.name for f in fields(Calibration))


def calibration_from_dict(data: object) -> Calibration:
    """Build a Calibration from a decoded JSON object.

    Raises:
        CalibrationError: If a field is missing, not a number, or not positive
    """
    if not isinstance(data, dict):
        raise CalibrationError(f"Expected a JSON object, got {type(data).__name__}")

    missing = [name for name in CALIBRATION_FIELDS if name not in data]
    if missing:
        raise CalibrationError(f"Missing calibration fields: {', '.join(missing)}")

    values = {}
    for name in CALIBRATION_FIELDS:
        value = data[name]
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise CalibrationError(f"{name} must be a number, got {value!r}")
        if not math.isfinite(value) or value <= 0:
            raise CalibrationError(f"{name} must be positive, got {value!r}")
        values[name] = float(value)

    return Calibration(**values)


class ConfigManager:
    """Loads the machine calibration."""

    def __init__(self, config_path: Path):
        """Initialize config manager.

        Args:
            config_path: Path to the calibration JSON file
        """
        self.config_path = Path(config_path)

    def load(self) -> Calibration:
        """Load the calibration from file.

        Raises:
            CalibrationError: If the file is unreadable or invalid
        """
        try:
            with open(self.config_path, "r") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise CalibrationError(f"Could not load calibration file {self.config_path}: {e}") from e

        calibration = calibration_from_dict(data)
        logger.info("Loaded calibration from %s", self.config_path)
        return calibration
