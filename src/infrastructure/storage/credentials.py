"""
Remote tier credential screening and region normalisation.
"""

from typing import Optional

from .client import DEFAULT_REGION

# Fragments found in example .env files that were never filled in
_PLACEHOLDER_FRAGMENTS = ("placeholder", "your_aws", "your_access")
_PLACEHOLDER_VALUES = {"changeme"}

# Legacy location constraints S3 still reports for older buckets
_LEGACY_LOCATIONS = {
    "US": "us-east-1",
    "EU": "eu-west-1",
}


def is_blank_or_placeholder(value: Optional[str]) -> bool:
    """
    True for values that cannot be real credentials.

    Template values are rejected without a connection attempt so that an
    unedited .env does not produce auth errors at startup.
    """
    if value is None:
        return True
    stripped = value.strip()
    if not stripped:
        return True
    lower = stripped.lower()
    if lower in _PLACEHOLDER_VALUES:
        return True
    return any(fragment in lower for fragment in _PLACEHOLDER_FRAGMENTS)


def resolve_region(region: Optional[str]) -> str:
    if region is None or not region.strip():
        return DEFAULT_REGION
    return region.strip()


def normalize_bucket_region(location: Optional[str]) -> str:
    """
    Map a GetBucketLocation answer to a region name.

    S3 reports no location constraint for us-east-1.
    """
    if location is None or not location.strip():
        return DEFAULT_REGION
    stripped = location.strip()
    return _LEGACY_LOCATIONS.get(stripped.upper(), stripped)
