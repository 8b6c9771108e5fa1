"""
Chart aggregation helpers.

Pure functions that turn grouped-count rows ``(value, count)`` coming from the
ORM into chart series ``[{'name': ..., 'value': ...}]``. Free-text dimensions
(states, LGAs, crops) are normalized before re-aggregation so that variants
such as "kano", "KANO " and "Kano" land in one bucket.
"""

import re
from datetime import date
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from dateutil.relativedelta import relativedelta

from core.text_utils import clean_text, format_location, to_title_case

STATE_SUFFIX = re.compile(r'\s+state$', re.IGNORECASE)

TOP_STATES = 10
TOP_CROPS = 5

AGE_BUCKETS = ['18-25', '26-35', '36-50', '51-65', '65+', 'Unknown']

FARM_SIZE_SMALL = 'Small (<2 Ha)'
FARM_SIZE_MEDIUM = 'Medium (2-10 Ha)'
FARM_SIZE_LARGE = 'Large (>10 Ha)'
FARM_SIZE_UNKNOWN = 'Unknown'
FARM_SIZE_BUCKETS = [FARM_SIZE_SMALL, FARM_SIZE_MEDIUM, FARM_SIZE_LARGE, FARM_SIZE_UNKNOWN]

# A normalizer returns (grouping key, display name) or None to drop the value
Normalizer = Callable[[Optional[str]], Optional[Tuple[str, str]]]


# =============================================================================
# DIMENSION NORMALIZERS
# =============================================================================

def normalize_state(value):
    """'  kano state ' -> ('KANO', 'Kano')"""
    text = clean_text(value)
    if not text:
        return None
    text = STATE_SUFFIX.sub('', text).strip()
    if not text:
        return None
    return text.upper(), format_location(text)


def normalize_lga(value):
    text = clean_text(value)
    if not text:
        return None
    return text.upper(), format_location(text)


def normalize_crop(value):
    text = clean_text(value)
    if not text:
        return None
    return text.lower(), to_title_case(text)


def normalize_gender(value):
    """Only male/female are charted; 'm' / 'f' abbreviations are accepted."""
    text = clean_text(value).lower()
    if text in ('m', 'male'):
        return 'male', 'Male'
    if text in ('f', 'female'):
        return 'female', 'Female'
    return None


# =============================================================================
# AGGREGATION
# =============================================================================

def aggregate_counts(rows: Iterable[Tuple[Optional[str], int]], normalizer: Normalizer) -> List[Dict]:
    """
    Re-aggregate grouped rows under normalized keys.

    Empty or unrecognised values are dropped. The result is sorted by
    descending count; ties keep the order in which groups first appeared.
    """
    buckets: Dict[str, Dict] = {}
    for value, count in rows:
        normalized = normalizer(value)
        if normalized is None:
            continue
        key, display = normalized
        if key not in buckets:
            buckets[key] = {'name': display, 'value': 0}
        buckets[key]['value'] += int(count or 0)

    return sorted(buckets.values(), key=lambda item: item['value'], reverse=True)


def top_n(series: List[Dict], n: int) -> List[Dict]:
    return series[:n]


def age_in_years(date_of_birth: date, today: date) -> int:
    return relativedelta(today, date_of_birth).years


def age_bucket(date_of_birth: Optional[date], today: date) -> str:
    if date_of_birth is None:
        return 'Unknown'
    age = age_in_years(date_of_birth, today)
    if 18 <= age <= 25:
        return '18-25'
    if 26 <= age <= 35:
        return '26-35'
    if 36 <= age <= 50:
        return '36-50'
    if 51 <= age <= 65:
        return '51-65'
    if age > 65:
        return '65+'
    return 'Unknown'


def farm_size_bucket(size: Optional[float]) -> str:
    if size is None:
        return FARM_SIZE_UNKNOWN
    if size < 2:
        return FARM_SIZE_SMALL
    if size <= 10:
        return FARM_SIZE_MEDIUM
    return FARM_SIZE_LARGE


def bucket_counts(rows: Iterable[Tuple], bucket_fn: Callable, order: List[str]) -> List[Dict]:
    """
    Count grouped rows into fixed buckets, emitted in ``order``.

    Buckets with no rows are omitted.
    """
    counts = {name: 0 for name in order}
    for value, count in rows:
        counts[bucket_fn(value)] += int(count or 0)
    return [{'name': name, 'value': counts[name]} for name in order if counts[name]]


def age_distribution(rows: Iterable[Tuple[Optional[date], int]], today: date) -> List[Dict]:
    return bucket_counts(rows, lambda dob: age_bucket(dob, today), AGE_BUCKETS)


def farm_size_distribution(rows: Iterable[Tuple[Optional[float], int]]) -> List[Dict]:
    return bucket_counts(rows, farm_size_bucket, FARM_SIZE_BUCKETS)


def monthly_registrations(rows: Iterable[Tuple[date, int]]) -> List[Dict]:
    """[(month_start, count)] -> [{'month': 'YYYY-MM', 'count': n}] ascending."""
    counts: Dict[str, int] = {}
    for month, count in rows:
        if month is None:
            continue
        key = month.strftime('%Y-%m')
        counts[key] = counts.get(key, 0) + int(count or 0)
    return [{'month': month, 'count': counts[month]} for month in sorted(counts)]


def merge_crop_counts(primary_rows, secondary_lists, limit: int = 10) -> Dict:
    """
    Merge primary-crop counts with secondary-crop lists.

    Args:
        primary_rows: [(crop, count)] grouped by primary crop
        secondary_lists: iterable of per-farm secondary crop lists
    """
    crops: Dict[str, Dict] = {}
    primary_keys = set()
    secondary_keys = set()

    def _add(value, count, kind):
        normalized = normalize_crop(value)
        if normalized is None:
            return None
        key, display = normalized
        entry = crops.setdefault(key, {'crop': display, 'count': 0, 'primary': 0, 'secondary': 0})
        entry['count'] += count
        entry[kind] += count
        return key

    for crop, count in primary_rows:
        key = _add(crop, int(count or 0), 'primary')
        if key:
            primary_keys.add(key)

    for crop_list in secondary_lists:
        if not isinstance(crop_list, list):
            continue
        for crop in crop_list:
            if not isinstance(crop, str):
                continue
            key = _add(crop.replace('{', '').replace('}', ''), 1, 'secondary')
            if key:
                secondary_keys.add(key)

    top = sorted(crops.values(), key=lambda entry: entry['count'], reverse=True)[:limit]
    return {
        'topCrops': top,
        'totalCrops': len(crops),
        'primaryCropsCount': len(primary_keys),
        'secondaryCropsCount': len(secondary_keys),
    }


def percentage(part, whole) -> float:
    if not whole:
        return 0.0
    return round(part / whole * 100, 2)
