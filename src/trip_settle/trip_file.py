"""Loading trips from JSON files."""

import logging
from pathlib import Path

from pydantic import ValidationError

from .exceptions import TripFileError
from .models import Trip

logger = logging.getLogger(__name__)


def load_trip(path: Path) -> Trip:
    """
    Load a trip from a JSON file.

    Args:
        path: Path to a JSON document with `participants` and `expenses`

    Returns:
        The parsed Trip

    Raises:
        TripFileError: If the file is missing, unreadable or malformed
    """
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise TripFileError(f"Cannot read trip file {path}: {e}") from e

    try:
        trip = Trip.model_validate_json(raw)
    except ValidationError as e:
        raise TripFileError(f"Invalid trip file {path}:\n{e}") from e

    logger.info(
        f"Loaded trip {trip.title or path.name!r} with "
        f"{len(trip.participants)} participants and {len(trip.expenses)} expenses"
    )
    return trip
