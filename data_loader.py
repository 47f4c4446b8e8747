"""
Data loader module for caching the normalized dashboard dataset.
The static sources are read and normalized once per process.
"""

import logging
import os
from dataclasses import dataclass
from typing import Optional

import pandas as pd

from json_loader import load_json_records
from normalizer import normalize_communes, normalize_fires

logger = logging.getLogger(__name__)

COMMUNES_SOURCE = os.environ.get("CORSE_COMMUNES_SOURCE", "data/communes.json")
FIRES_SOURCE = os.environ.get("CORSE_FIRES_SOURCE", "data/fires.json")
FIRE_JITTER_SALT = os.environ.get("CORSE_FIRE_JITTER_SALT", "")


@dataclass(frozen=True)
class Dataset:
    """Normalized, read-only collections shared by every render pass"""
    communes: pd.DataFrame
    fires: pd.DataFrame

    @classmethod
    def from_records(cls, commune_records, fire_records, salt: str = "") -> "Dataset":
        return cls(
            communes=normalize_communes(commune_records),
            fires=normalize_fires(fire_records, salt=salt),
        )


# Global cache for the dataset instance
_dataset_cache: Optional[Dataset] = None


def load_dataset(communes_source: str = COMMUNES_SOURCE,
                 fires_source: str = FIRES_SOURCE,
                 salt: str = FIRE_JITTER_SALT) -> Dataset:
    """Read both static sources and normalize them (no caching)"""
    commune_records = load_json_records(communes_source)
    fire_records = load_json_records(fires_source)
    return Dataset.from_records(commune_records, fire_records, salt=salt)


def get_dataset(communes_source: str = COMMUNES_SOURCE,
                fires_source: str = FIRES_SOURCE) -> Dataset:
    """
    Returns the cached Dataset.

    On first call, loads and normalizes the commune and fire collections.
    Subsequent calls return the cached instance.

    Args:
        communes_source: Path or URL of the commune records
        fires_source: Path or URL of the fire records

    Returns:
        Dataset with normalized communes and fires
    """
    global _dataset_cache

    if _dataset_cache is None:
        logger.info("=" * 60)
        logger.info("Loading dashboard dataset (first load)")
        logger.info(f"Communes: {communes_source}")
        logger.info(f"Fires: {fires_source}")
        logger.info("=" * 60)

        try:
            _dataset_cache = load_dataset(communes_source, fires_source)
            logger.info(f"✓ {len(_dataset_cache.communes)} communes, "
                        f"{len(_dataset_cache.fires)} fire events ready")
        except FileNotFoundError:
            logger.error("ERROR: Data file not found")
            logger.error("Please ensure the commune and fire JSON files exist at the configured paths")
            raise
        except Exception as e:
            logger.error(f"ERROR: Failed to load dataset: {e}", exc_info=True)
            raise

    return _dataset_cache


def set_dataset(dataset: Dataset) -> None:
    """Install an already-built dataset as the cached instance"""
    global _dataset_cache
    _dataset_cache = dataset
    logger.info(f"Dataset cached ({len(dataset.communes)} communes, {len(dataset.fires)} fires)")


def reset_dataset_cache():
    """
    Reset the cached dataset.

    Useful for testing or to reload the files from disk.
    """
    global _dataset_cache
    _dataset_cache = None
    logger.info("Dataset cache cleared")


def is_dataset_cached() -> bool:
    return _dataset_cache is not None
