"""Data models for license-manager usage reports."""

from dataclasses import dataclass, field
from typing import Optional

NOT_AVAILABLE = "N/A"


@dataclass(frozen=True)
class UserCheckout:
    username: str = ""
    host: str = ""
    port: str = ""
    version: str = ""
    details: str = ""
    timestamp: str = ""       # wall-clock time of the parse, not from the report
    process_id: str = NOT_AVAILABLE
    start_date: str = NOT_AVAILABLE


@dataclass(frozen=True)
class FeatureRecord:
    feature: str = ""
    total_licenses: int = 0
    in_use: int = 0
    available: int = 0        # total_licenses - in_use, may be negative
    version: Optional[str] = None
    expiry: Optional[str] = None
    tool: str = ""
    source_file: str = ""
    process_id: Optional[str] = None
    start_date: Optional[str] = None
    users: frozenset[str] = frozenset()
    user_details: tuple[UserCheckout, ...] = ()


@dataclass
class UsageEntry:
    checkout: UserCheckout = field(default_factory=UserCheckout)
    usage_count: int = 0


@dataclass
class FeatureUsageDetail:
    feature: str = ""
    tool: str = ""
    version: Optional[str] = None
    expiry: Optional[str] = None
    total_licenses: int = 0
    in_use: int = 0
    available: int = 0
    process_id: Optional[str] = None
    start_date: Optional[str] = None
    user_details: list[UsageEntry] = field(default_factory=list)
    user_usage_count: dict[str, int] = field(default_factory=dict)


@dataclass(frozen=True)
class FileState:
    mtime: float = 0.0
    size: int = 0


@dataclass
class FileChanges:
    added: list[str] = field(default_factory=list)
    removed: list[str] = field(default_factory=list)
    modified: list[str] = field(default_factory=list)

    @property
    def has_changes(self) -> bool:
        return bool(self.added or self.removed or self.modified)
