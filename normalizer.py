"""
Normalization of the raw commune and wildfire records.

Both passes are permissive: a missing or malformed numeric degrades to 0
instead of failing the whole view. Communes without coordinates are dropped;
fire events are all kept and receive a small, repeatable positional offset so
that events from the same commune do not sit exactly on top of each other.
"""
import hashlib
import logging

import numpy as np
import pandas as pd

logger = logging.getLogger(__name__)

COMMUNE_COUNT_FIELDS = ['population_15_29', 'nb_equipements']
COMMUNE_FLOAT_FIELDS = ['consototale']
SHARE_FIELDS = ['part_residentiel', 'part_tertiaire', 'part_industrie', 'part_agriculture']

JITTER_DEGREES = 0.01


def round_half_up(value) -> int:
    """Round like the browser's Math.round (ties go up, not to even)"""
    return int(np.floor(float(value) + 0.5))


def _as_frame(raw) -> pd.DataFrame:
    if isinstance(raw, pd.DataFrame):
        return raw.copy()
    return pd.DataFrame(list(raw or []))


def _numeric(df: pd.DataFrame, column: str, default: float = 0.0) -> pd.Series:
    if column not in df.columns:
        return pd.Series(default, index=df.index, dtype=float)
    return pd.to_numeric(df[column], errors='coerce').fillna(default).astype(float)


def normalize_communes(raw) -> pd.DataFrame:
    """
    Clean the commune table.

    Args:
        raw: List of record dicts or a DataFrame

    Returns:
        DataFrame with non-negative counts, float consumption and share
        columns, a ``z_sport`` copy of the youth population, and only rows
        that carry both coordinates.
    """
    df = _as_frame(raw)
    total = len(df)

    if 'nom' not in df.columns:
        df['nom'] = ''
    df['nom'] = df['nom'].fillna('').astype(str)

    df['population_15_29'] = _numeric(df, 'population_15_29').clip(lower=0).map(round_half_up).astype(int)
    df['nb_equipements'] = _numeric(df, 'nb_equipements').clip(lower=0).map(round_half_up).astype(int)
    for col in COMMUNE_FLOAT_FIELDS:
        df[col] = _numeric(df, col).clip(lower=0)
    for col in SHARE_FIELDS:
        df[col] = _numeric(df, col).clip(0, 100)
    df['z_sport'] = df['population_15_29']

    for col in ['lat', 'lng']:
        if col not in df.columns:
            df[col] = np.nan
        df[col] = pd.to_numeric(df[col], errors='coerce')
    df = df.dropna(subset=['lat', 'lng']).reset_index(drop=True)

    dropped = total - len(df)
    if dropped:
        logger.info(f"Dropped {dropped} communes without coordinates")
    logger.info(f"Normalized {len(df)} communes")
    return df


def normalize_year(value):
    """Return numeric years as int (2003, "2003", 2003.0 -> 2003); other values untouched"""
    if value is None:
        return value
    if isinstance(value, (int, np.integer)) and not isinstance(value, bool):
        return int(value)
    try:
        as_float = float(str(value).strip())
    except ValueError:
        return value
    if np.isfinite(as_float) and as_float == int(as_float):
        return int(as_float)
    return value


def fire_jitter(commune, date, surface_ha, salt: str = ''):
    """
    Deterministic (lat, lng) offset for one fire event.

    The offset is drawn from a generator seeded with a hash of the event's
    identifying fields, so the same event always lands on the same spot.
    Both components lie in [-0.01, 0.01).
    """
    key = f"{commune}|{date}|{surface_ha}|{salt}".encode('utf-8')
    seed = int.from_bytes(hashlib.sha256(key).digest()[:8], 'big')
    rng = np.random.default_rng(seed)
    d_lat, d_lng = rng.uniform(-JITTER_DEGREES, JITTER_DEGREES, size=2)
    return float(d_lat), float(d_lng)


def normalize_fires(raw, salt: str = '') -> pd.DataFrame:
    """
    Clean the wildfire table and apply the positional jitter once.

    No rows are dropped; events without coordinates keep NaN coordinates
    and are simply left off the map.
    """
    df = _as_frame(raw)

    for col in ['commune', 'date']:
        if col not in df.columns:
            df[col] = ''
        df[col] = df[col].fillna('').astype(str)

    if 'annee' not in df.columns:
        df['annee'] = None
    df['annee'] = df['annee'].map(normalize_year).astype(object)
    df['surface_ha'] = _numeric(df, 'surface_ha').clip(lower=0)

    for col in ['lat', 'lng']:
        if col not in df.columns:
            df[col] = np.nan
        df[col] = pd.to_numeric(df[col], errors='coerce').astype(float)

    if len(df):
        offsets = [
            fire_jitter(commune, date, surface, salt)
            for commune, date, surface in zip(df['commune'], df['date'], df['surface_ha'])
        ]
        df['lat'] = df['lat'] + np.array([o[0] for o in offsets])
        df['lng'] = df['lng'] + np.array([o[1] for o in offsets])

    logger.info(f"Normalized {len(df)} fire events")
    return df.reset_index(drop=True)
