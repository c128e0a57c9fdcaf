"""Per-feature usage enrichment."""

from collections import Counter
from typing import Iterable, Optional

from lmreport.models import FeatureRecord, FeatureUsageDetail, UsageEntry


def find_feature(
    records: Iterable[FeatureRecord], tool: str, feature: str
) -> Optional[FeatureRecord]:
    wanted_tool = tool.lower()
    return next(
        (r for r in records if r.feature == feature and r.tool.lower() == wanted_tool),
        None,
    )


def feature_usage_detail(
    records: Iterable[FeatureRecord], tool: str, feature: str
) -> Optional[FeatureUsageDetail]:
    """Annotate each checkout of one feature with its user's checkout count.

    Returns None when no record matches ``(tool, feature)``.
    """
    record = find_feature(records, tool, feature)
    if record is None:
        return None

    counts = Counter(c.username for c in record.user_details)

    return FeatureUsageDetail(
        feature=record.feature,
        tool=record.tool,
        version=record.version,
        expiry=record.expiry,
        total_licenses=record.total_licenses,
        in_use=record.in_use,
        available=record.available,
        process_id=record.process_id,
        start_date=record.start_date,
        user_details=[
            UsageEntry(checkout=c, usage_count=counts[c.username])
            for c in record.user_details
        ],
        user_usage_count=dict(counts),
    )
