"""JSON interchange form of parsed license records."""

import dataclasses
import json
from enum import Enum
from pathlib import Path
from typing import Iterable

from lmreport.models import FeatureRecord, FeatureUsageDetail, UsageEntry


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.title() for part in rest)


def to_jsonable(obj):
    """Convert models to plain JSON types with camelCase keys."""
    if isinstance(obj, UsageEntry):
        # checkout fields flattened next to the count
        result = to_jsonable(obj.checkout)
        result["usageCount"] = obj.usage_count
        return result
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return {
            _camel(f.name): to_jsonable(getattr(obj, f.name))
            for f in dataclasses.fields(obj)
        }
    if isinstance(obj, (list, tuple)):
        return [to_jsonable(item) for item in obj]
    if isinstance(obj, dict):
        return {str(k): to_jsonable(v) for k, v in obj.items()}
    if isinstance(obj, (set, frozenset)):
        return sorted(obj)
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, Path):
        return str(obj)
    return obj


def record_to_dict(record: FeatureRecord) -> dict:
    return to_jsonable(record)


def records_to_dicts(records: Iterable[FeatureRecord]) -> list[dict]:
    return [to_jsonable(r) for r in records]


def detail_to_dict(detail: FeatureUsageDetail) -> dict:
    return to_jsonable(detail)


def write_json_report(data, filepath: Path):
    """Write records (or a usage detail) as a JSON file."""
    with open(filepath, "w", encoding="utf-8") as f:
        json.dump(to_jsonable(data), f, indent=2, ensure_ascii=False)
