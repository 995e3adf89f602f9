"""
Visit Normalizer Service

Turns raw visit entries from the visit sheet into validated VisitRecord objects.

Raw entries are loosely typed: depending on which sheet export produced them, the
same attribute can arrive under different field names (shopName vs shop_name,
latitude vs submitterLatitude, ...) and coordinates can be numbers or numeric
strings. Each logical attribute therefore has an ordered list of candidate field
names in VISIT_FIELD_ALIASES; the first candidate holding a value wins.

Exclusion Rules:
- No shop name and no shop id: dropped (no shop group is created from it)
- Latitude or longitude missing, unparsable, NaN, infinite or exactly 0: dropped
- Latitude outside [-90, 90] or longitude outside [-180, 180]: dropped
- Entry is not a mapping: dropped

A missing or unparsable visit date is not a reason to drop a visit.
Normalization never raises; dropped entries are only logged at DEBUG level.
"""

import io
import logging
import math
from collections.abc import Mapping
from datetime import datetime
from typing import Any, BinaryIO, Dict, Iterable, List, Optional, Tuple, Union

import pandas as pd

from salesops.models.schemas import VisitRecord

# Configure module logger
logger = logging.getLogger(__name__)

# =============================================================================
# CONSTANTS - Field aliases in precedence order
# =============================================================================

VISIT_FIELD_ALIASES: Dict[str, Tuple[str, ...]] = {
    'shop_name': ('shopName', 'shop_name', 'Shop Name', 'name'),
    'shop_id': ('shopId', 'shop_id', 'Shop ID', 'shopCode', 'shop_code'),
    'visit_id': ('visitId', 'visit_id', 'id'),
    'visit_date': ('visitDate', 'checkInDateTime', 'check_in_date_time', 'date', 'Date'),
    'salesman': ('salesmanName', 'salesman', 'salesman_name', 'Salesman'),
    # Submitter coordinates are the device fix; plain latitude/longitude is the fallback
    'latitude': ('submitterLatitude', 'latitude', 'lat', 'actualLatitude', 'Latitude'),
    'longitude': (
        'submitterLongitude', 'longitude', 'lng', 'lon', 'actualLongitude', 'Longitude',
    ),
}

DEFAULT_SALESMAN_NAME: str = 'Unknown'

# Absolute bounds for a coordinate in degrees
LATITUDE_LIMIT: float = 90.0
LONGITUDE_LIMIT: float = 180.0


# =============================================================================
# FIELD RESOLUTION
# =============================================================================

def _is_missing(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, float):
        return math.isnan(value)
    return False


def _as_text(value: Any) -> str:
    # Sheet ids read as floats ("1023.0") must group with their string form
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


def resolve_field(raw: Mapping, attribute: str) -> Any:
    """
    Return the value of the first present alias for a logical attribute.

    Args:
        raw: Raw visit entry
        attribute: Key of VISIT_FIELD_ALIASES (e.g. 'latitude')

    Returns:
        The first value that is not None, NaN or a blank string, else None
    """
    for field_name in VISIT_FIELD_ALIASES[attribute]:
        value = raw.get(field_name)
        if not _is_missing(value):
            return value
    return None


def parse_coordinate(value: Any) -> float:
    """
    Parse a coordinate from a number or numeric string.

    Returns NaN when the value cannot be read as a number. Booleans are not
    coordinates and also give NaN.
    """
    if value is None or isinstance(value, bool):
        return math.nan
    if isinstance(value, str):
        value = value.strip()
    try:
        return float(value)
    except (TypeError, ValueError, OverflowError):
        return math.nan


def is_valid_coordinate(value: float, limit: float = LONGITUDE_LIMIT) -> bool:
    """
    A coordinate is usable when it is finite, not exactly zero and within
    [-limit, limit] (90 for latitude, 180 for longitude).
    """
    return math.isfinite(value) and value != 0.0 and abs(value) <= limit


def parse_visit_date(value: Any) -> Optional[datetime]:
    """
    Parse a check-in timestamp, returning None when it cannot be read.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value
    if not isinstance(value, (str, int, float)) or isinstance(value, bool):
        return None
    try:
        parsed = pd.to_datetime(value, errors='coerce')
    except (TypeError, ValueError, OverflowError):
        return None
    if pd.isna(parsed):
        return None
    return parsed.to_pydatetime()


# =============================================================================
# NORMALIZATION
# =============================================================================

def normalize_visit(raw: Any, index: int) -> Optional[VisitRecord]:
    """
    Normalize one raw visit entry.

    The shop grouping key is the shop name, falling back to the shop id. The
    visit id falls back to a synthesized "{shop}_{date}_{index}" identifier,
    which is unique because index is the entry's position in the input.

    Args:
        raw: Raw visit entry (normally a dict)
        index: Position of the entry in the input collection

    Returns:
        VisitRecord, or None if the entry must be excluded
    """
    if not isinstance(raw, Mapping):
        logger.debug(f"Dropping visit #{index}: entry is not a mapping")
        return None

    shop_name = resolve_field(raw, 'shop_name')
    shop_code = resolve_field(raw, 'shop_id')
    if shop_name is None and shop_code is None:
        logger.debug(f"Dropping visit #{index}: no shop name or shop id")
        return None
    shop_key = _as_text(shop_name if shop_name is not None else shop_code)

    latitude = parse_coordinate(resolve_field(raw, 'latitude'))
    longitude = parse_coordinate(resolve_field(raw, 'longitude'))
    if not (
        is_valid_coordinate(latitude, LATITUDE_LIMIT)
        and is_valid_coordinate(longitude, LONGITUDE_LIMIT)
    ):
        logger.debug(
            f"Dropping visit #{index} for shop {shop_key!r}: "
            f"invalid coordinates ({latitude}, {longitude})"
        )
        return None

    raw_date = resolve_field(raw, 'visit_date')
    visit_id = resolve_field(raw, 'visit_id')
    if visit_id is None:
        date_part = _as_text(raw_date) if raw_date is not None else ''
        visit_id = f"{shop_key}_{date_part}_{index}"

    salesman = resolve_field(raw, 'salesman')

    return VisitRecord(
        visitId=_as_text(visit_id),
        visitDate=parse_visit_date(raw_date),
        salesmanName=_as_text(salesman) if salesman is not None else DEFAULT_SALESMAN_NAME,
        shopId=shop_key,
        shopName=shop_key,
        shopCode=_as_text(shop_code) if shop_code is not None else None,
        latitude=latitude,
        longitude=longitude,
    )


def materialize_raw_visits(raw_visits: Any) -> List[Any]:
    """
    Turn whatever the data-fetch layer handed over into a list of entries.

    None, a single mapping, a string and non-iterables all count as "no visits".
    """
    if raw_visits is None or isinstance(raw_visits, (str, bytes, Mapping)):
        return []
    try:
        return list(raw_visits)
    except TypeError:
        return []


def normalize_visits(raw_visits: Optional[Iterable[Any]]) -> List[VisitRecord]:
    """
    Normalize a collection of raw visits, keeping input order.

    Args:
        raw_visits: Raw visit entries; None or empty yields an empty list

    Returns:
        Valid VisitRecords in input order
    """
    entries = materialize_raw_visits(raw_visits)
    records: List[VisitRecord] = []
    for index, raw in enumerate(entries):
        record = normalize_visit(raw, index)
        if record is not None:
            records.append(record)

    dropped = len(entries) - len(records)
    if dropped:
        logger.info(f"Normalized {len(records)} visits, excluded {dropped} invalid entries")
    return records


# =============================================================================
# SHEET INGESTION
# =============================================================================

def read_visit_sheet(file: Union[BinaryIO, io.StringIO, str]) -> List[Dict[str, Any]]:
    """
    Read a CSV export of the visit sheet into raw visit entries.

    Every cell is read as text so ids keep their exact spelling; coordinates are
    parsed later by the normalizer. Blank cells come back as empty strings,
    which the normalizer treats as missing.

    Args:
        file: File object (binary or text) or a path to a CSV file

    Returns:
        List of row dicts keyed by column header; empty when the file is
        empty or cannot be parsed
    """
    if hasattr(file, 'read'):
        content = file.read()
        file_like = io.BytesIO(content) if isinstance(content, bytes) else io.StringIO(content)
    else:
        file_like = file

    try:
        df = pd.read_csv(file_like, dtype=str, keep_default_na=False)
    except (pd.errors.EmptyDataError, pd.errors.ParserError, UnicodeDecodeError) as e:
        logger.warning(f"Failed to parse visit sheet: {e}")
        return []

    logger.info(f"Parsed visit sheet with {len(df)} rows and {len(df.columns)} columns")
    return df.to_dict(orient='records')
