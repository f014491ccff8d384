"""
Summary extraction - the small structured subset of a payload used for
diffs and post-restore validation.

The same extractor object must be used at capture time and by the
validator; SnapshotManager owns one and hands it to both.
"""

import json
from typing import Any, Callable, Dict, Optional

from ..errors import ValidationError
from .models import SummaryFields

SummaryExtractor = Callable[[bytes], SummaryFields]

_SCALAR_TYPES = (str, int, float, bool, type(None))


def _load_object(payload: bytes) -> Dict[str, Any]:
    try:
        document = json.loads(payload)
    except (ValueError, UnicodeDecodeError) as e:
        raise ValidationError(f"Configuration payload is not valid JSON: {e}") from e
    if not isinstance(document, dict):
        raise ValidationError("Configuration payload is not a JSON object")
    return document


def scalar_summary(payload: bytes) -> SummaryFields:
    """Every top-level scalar field of a JSON object payload."""
    document = _load_object(payload)
    return {
        key: value
        for key, value in sorted(document.items())
        if isinstance(value, _SCALAR_TYPES)
    }


def _quantity(section: Optional[Dict[str, Any]]) -> int:
    if not isinstance(section, dict):
        return 0
    return int(section.get("Quantity") or 0)


def cloudfront_summary(payload: bytes) -> SummaryFields:
    """Key counts and flags of a CloudFront DistributionConfig."""
    config = _load_object(payload)
    default_behavior = config.get("DefaultCacheBehavior") or {}
    return {
        "defaultRootObject": config.get("DefaultRootObject") or None,
        "functionAssociations": _quantity(default_behavior.get("FunctionAssociations")),
        "origins": _quantity(config.get("Origins")),
        "cacheBehaviors": _quantity(config.get("CacheBehaviors")),
        "enabled": bool(config.get("Enabled", False)),
    }


SUMMARY_PROFILES: Dict[str, SummaryExtractor] = {
    "scalars": scalar_summary,
    "cloudfront": cloudfront_summary,
}


def get_extractor(profile: str) -> SummaryExtractor:
    """Look up a built-in extractor by profile name."""
    try:
        return SUMMARY_PROFILES[profile]
    except KeyError:
        known = ", ".join(sorted(SUMMARY_PROFILES))
        raise ValueError(f"Unknown summary profile '{profile}' (known: {known})") from None


def profile_name(extractor: SummaryExtractor) -> Optional[str]:
    """Profile name of a built-in extractor, None for custom ones."""
    for name, known in SUMMARY_PROFILES.items():
        if known is extractor:
            return name
    return None
