"""
Static JSON loader for the commune and wildfire collections
"""
import json
import logging
from pathlib import Path
from typing import Any, Dict, List

import requests

logger = logging.getLogger(__name__)


class DataSourceError(RuntimeError):
    """Raised when a static data source cannot be fetched or parsed"""


def is_remote(source: str) -> bool:
    return str(source).lower().startswith(("http://", "https://"))


def load_json_records(source: str, timeout: int = 60) -> List[Dict[str, Any]]:
    """
    Load a collection of records from a local JSON file or a URL

    Args:
        source: Path or http(s) URL of the JSON document
        timeout: Request timeout in seconds (remote sources only)

    Returns:
        List of flat record dictionaries

    Raises:
        FileNotFoundError: If a local source does not exist
        DataSourceError: If fetching or parsing fails
    """
    logger.info(f"Loading records from: {source}")

    if is_remote(source):
        payload = _fetch_remote(source, timeout)
    else:
        path = Path(source)
        if not path.exists():
            logger.error(f"Data file not found: {path}")
            raise FileNotFoundError(f"Missing data file: {path}")
        try:
            with path.open(encoding="utf-8") as handle:
                payload = json.load(handle)
        except json.JSONDecodeError as e:
            logger.error(f"JSON parsing error in {path}: {e}")
            raise DataSourceError(f"Invalid JSON format: {str(e)}") from e

    records = records_from_payload(payload)
    logger.info(f"Loaded {len(records)} records")
    return records


def _fetch_remote(url: str, timeout: int) -> Any:
    try:
        response = requests.get(url, timeout=timeout)
        response.raise_for_status()

        content_length = response.headers.get('content-length')
        if content_length:
            size_kb = int(content_length) / 1024
            logger.info(f"File size: {size_kb:.1f} KB")

        return response.json()

    except requests.exceptions.Timeout as e:
        logger.error(f"Timeout loading {url}")
        raise DataSourceError(f"Request timed out after {timeout} seconds") from e

    except requests.exceptions.RequestException as e:
        logger.error(f"Request error: {e}")
        raise DataSourceError(f"Failed to fetch {url}: {str(e)}") from e

    except ValueError as e:
        logger.error(f"JSON parsing error: {e}")
        raise DataSourceError(f"Invalid JSON format: {str(e)}") from e


def records_from_payload(payload: Any) -> List[Dict[str, Any]]:
    """
    Flatten a decoded JSON document into a list of records.

    Accepts either a plain array of objects or a GeoJSON FeatureCollection
    of points; for the latter, feature properties become the record and the
    point coordinates fill in ``lng``/``lat`` when the properties lack them.
    """
    if isinstance(payload, list):
        if not all(isinstance(item, dict) for item in payload):
            raise DataSourceError("Invalid data: every record must be an object")
        return list(payload)

    if isinstance(payload, dict) and payload.get('type') == 'FeatureCollection':
        records = []
        for feature in payload.get('features', []):
            record = dict(feature.get('properties') or {})
            geometry = feature.get('geometry') or {}
            coords = geometry.get('coordinates')
            if geometry.get('type') == 'Point' and coords and len(coords) >= 2:
                record.setdefault('lng', coords[0])
                record.setdefault('lat', coords[1])
            records.append(record)
        return records

    raise DataSourceError("Invalid data: root must be an array or a FeatureCollection")
