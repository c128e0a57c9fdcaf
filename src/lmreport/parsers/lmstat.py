"""Parser for lmstat-style license manager status reports.

The report is read in a single forward pass. A ``Users of <feature>:`` header
opens a feature; the lines that follow it are checkout rows until the next
``Users of`` line. Anything that matches none of the patterns below is vendor
boilerplate and is skipped without touching the parse state.
"""

import re
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Optional

from loguru import logger

from lmreport.models import NOT_AVAILABLE, FeatureRecord, UserCheckout


RE_FEATURE_HEADER = re.compile(
    r'Users of ([^:]+):\s*\(Total of (\d+) licenses issued;'
    r'\s*Total of (\d+) licenses in use\)',
    re.IGNORECASE,
)
RE_VERSION_EXPIRY = re.compile(
    r'"[^"]+" v([\d.]+), vendor: [^,]+,\s*expiry:\s*([^\s,]+)',
    re.IGNORECASE,
)

# --- Feature-level process info ---
RE_PROCESS_ID = re.compile(r'(?:PID|Process ID|Port)\s*[:=]?\s*(\d+)', re.IGNORECASE)
RE_START_DATE = re.compile(
    r'(?:ISSUED|Start Date|Started)\s*[:=]?\s*('
    r'\d{1,2}[/\-][a-zA-Z]{3}[/\-]\d{4}'     # 06-Aug-2025, 06/Aug/2025
    r'|[a-zA-Z]{3}\s+\d{1,2}\s+\d{4}'        # Aug 6 2025
    r'|[a-zA-Z]{3}\s+\d{1,2}\s+\d{2}:\d{2}'  # Aug 6 16:12
    r')',
    re.IGNORECASE,
)

# --- Checkout rows ---
# alice narmada:18 (v6.180) (narmada/5280 6701), start Thu 6/26 16:12
RE_CHECKOUT = re.compile(
    r'^\s*(\S+)\s+((?:[^\s:]+\s+)*[^\s:]+)(?:\s*:(\d+))?\s*'
    r'\(v([\d.]+)\)\s*\(([^)]+)\)'
    r'(?:,\s*start\s+([A-Za-z]{3}\s+\d{1,2}/\d{1,2}\s+\d{2}:\d{2}))?'
)
RE_DETAILS_PID = re.compile(r'\s+(\d+)$')
RE_HOST_SUFFIX = re.compile(r'_\d+$')

SECTION_PREFIX = "Users of "
SKIPPED_LINES = ("", "floating license")


class ParseState(Enum):
    SCANNING = "SCANNING"
    IN_FEATURE_BODY = "IN_FEATURE_BODY"


class _FeatureBuilder:
    """Mutable accumulator for the feature currently being read."""

    def __init__(self, feature: str, total: int, in_use: int, tool: str, source_file: str):
        self.feature = feature
        self.total = total
        self.in_use = in_use
        self.tool = tool
        self.source_file = source_file
        self.version: Optional[str] = None
        self.expiry: Optional[str] = None
        self.process_id: Optional[str] = None
        self.start_date: Optional[str] = None
        self.users: dict[str, None] = {}  # insertion-ordered set
        self.user_details: list[UserCheckout] = []

    def build(self) -> FeatureRecord:
        return FeatureRecord(
            feature=self.feature,
            total_licenses=self.total,
            in_use=self.in_use,
            available=self.total - self.in_use,
            version=self.version,
            expiry=self.expiry,
            tool=self.tool,
            source_file=self.source_file,
            process_id=self.process_id,
            start_date=self.start_date,
            users=frozenset(self.users),
            user_details=tuple(self.user_details),
        )


class LmstatParser:
    """Two-state line parser producing one FeatureRecord per feature header.

    One instance handles one report; create a new parser for each file.
    """

    def __init__(self, tool: str, source_file: str):
        self.tool = tool
        self.source_file = source_file
        self.state = ParseState.SCANNING
        self.current: Optional[_FeatureBuilder] = None
        self.records: list[FeatureRecord] = []

    def parse(self, content: str) -> list[FeatureRecord]:
        for raw_line in content.splitlines():
            self.feed(raw_line)
        return self.finish()

    def feed(self, raw_line: str) -> None:
        line = raw_line.strip()

        m = RE_FEATURE_HEADER.search(line)
        if m:
            self._flush()
            self.current = _FeatureBuilder(
                feature=m.group(1).strip(),
                total=int(m.group(2)),
                in_use=int(m.group(3)),
                tool=self.tool,
                source_file=self.source_file,
            )
            self.state = ParseState.IN_FEATURE_BODY
            return

        if self.current is None:
            return

        # Only the first version line of a feature counts
        if self.current.version is None:
            m = RE_VERSION_EXPIRY.search(line)
            if m:
                self.current.version = m.group(1)
                self.current.expiry = m.group(2)
                return

        self._scan_process_info(line)

        if self.state is ParseState.IN_FEATURE_BODY:
            if line in SKIPPED_LINES or line.startswith("vendor_string:"):
                return
            self._scan_checkout(raw_line)

        if line.startswith(SECTION_PREFIX):
            self.state = ParseState.SCANNING

    def finish(self) -> list[FeatureRecord]:
        self._flush()
        self.state = ParseState.SCANNING
        return self.records

    def _flush(self):
        if self.current is not None:
            self.records.append(self.current.build())
            self.current = None

    def _scan_process_info(self, line: str):
        m = RE_PROCESS_ID.search(line)
        if m:
            self.current.process_id = m.group(1)
            logger.debug(f"Found process ID {m.group(1)} for {self.current.feature}: {line!r}")

        m = RE_START_DATE.search(line)
        if m:
            self.current.start_date = m.group(1)
            logger.debug(f"Found start date {m.group(1)} for {self.current.feature}: {line!r}")

    def _scan_checkout(self, raw_line: str):
        m = RE_CHECKOUT.match(raw_line)
        if not m:
            return

        username = m.group(1)
        host = m.group(2)
        port = m.group(3) or ""
        if not port and ":" in host:
            host, _, port = host.partition(":")

        # "corp lab narmada" -> "narmada"
        components = host.split()
        if len(components) > 1:
            host = components[-1]
        host = RE_HOST_SUFFIX.sub("", host).strip()

        details = m.group(5)
        pid_match = RE_DETAILS_PID.search(details)
        checkout_pid = pid_match.group(1) if pid_match else None

        feature = self.current
        feature.users.setdefault(username)
        feature.user_details.append(UserCheckout(
            username=username,
            host=host,
            port=port,
            version=m.group(4),
            details=details,
            timestamp=datetime.now(timezone.utc).isoformat(),
            process_id=checkout_pid or feature.process_id or NOT_AVAILABLE,
            start_date=m.group(6) or feature.start_date or NOT_AVAILABLE,
        ))


def parse_report(content: str, tool: str, source_file: str) -> list[FeatureRecord]:
    """Parse report text into feature records, in header order."""
    records = LmstatParser(tool, source_file).parse(content)
    logger.debug(f"Parsed {len(records)} features from {source_file}")
    return records


def parse_report_file(filepath: Path, tool: Optional[str] = None) -> list[FeatureRecord]:
    """Parse a report file; an unreadable file yields no records.

    ``tool`` defaults to the name derived from the file name.
    """
    filepath = Path(filepath)
    if tool is None:
        from lmreport.catalog import tool_name_for
        tool = tool_name_for(filepath.name)

    try:
        with open(filepath, "r", encoding="utf-8", errors="replace") as f:
            content = f.read()
    except OSError as e:
        logger.warning(f"Could not read report {filepath}: {e}")
        return []

    if "\x00" in content:
        logger.warning(f"Skipping {filepath}: not a text report")
        return []

    return parse_report(content, tool, filepath.name)
