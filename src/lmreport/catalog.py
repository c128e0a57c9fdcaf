"""Tool catalog and batch loading of report directories."""

import re
from pathlib import Path
from typing import Iterable, Optional

from loguru import logger

from lmreport.models import FeatureRecord
from lmreport.parsers.lmstat import parse_report_file

RE_COPY_SUFFIX = re.compile(r'_\d+$')
ALL_TOOLS = "all"


def tool_name_for(filename: str) -> str:
    """Derive the tool a report belongs to from its file name.

    ``synopsys_2.txt`` -> ``synopsys``, ``Cadence.txt`` -> ``cadence``.
    """
    stem = Path(filename).stem
    return RE_COPY_SUFFIX.sub("", stem).lower()


def discover_report_files(directory: Path) -> list[Path]:
    """Regular, non-hidden files directly inside ``directory``."""
    directory = Path(directory)
    if not directory.is_dir():
        return []
    return sorted(
        p for p in directory.iterdir()
        if p.is_file() and not p.name.startswith(".")
    )


def available_tools(directory: Path) -> list[str]:
    directory = Path(directory)
    if not directory.is_dir():
        return []
    return sorted({tool_name_for(p.name) for p in directory.iterdir() if p.is_file()})


def _is_tool_dir_report(path: Path) -> bool:
    return path.suffix == ".txt" or "." not in path.name


def load_directory(directory: Path, by_tool_dir: bool = False) -> list[FeatureRecord]:
    """Parse every report in ``directory``.

    With ``by_tool_dir`` each subdirectory is one tool and its ``.txt`` (or
    extension-less) files are attributed to it. A file that cannot be parsed
    is logged and skipped.
    """
    directory = Path(directory)
    if not directory.is_dir():
        logger.warning(f"Report directory not found: {directory}")
        return []

    if by_tool_dir:
        jobs = [
            (path, tool_dir.name)
            for tool_dir in sorted(p for p in directory.iterdir() if p.is_dir())
            for path in discover_report_files(tool_dir)
            if _is_tool_dir_report(path)
        ]
    else:
        jobs = [(path, tool_name_for(path.name)) for path in discover_report_files(directory)]

    logger.info(f"Loading {len(jobs)} report files from {directory}")
    records: list[FeatureRecord] = []
    for path, tool in jobs:
        try:
            features = parse_report_file(path, tool)
        except Exception as e:
            logger.error(f"Error processing {path.name}: {e}")
            continue
        if features:
            logger.info(f"{path.name}: {len(features)} features (tool {tool})")
        else:
            logger.info(f"{path.name}: no license features found")
        records.extend(features)

    logger.info(f"Total features loaded: {len(records)}")
    return records


def filter_by_tool(records: Iterable[FeatureRecord], tool: Optional[str]) -> list[FeatureRecord]:
    """Records of one tool (case-insensitive); ``None``/``"all"`` keeps everything."""
    if not tool or tool.lower() == ALL_TOOLS:
        return list(records)
    wanted = tool.lower()
    return [r for r in records if r.tool.lower() == wanted]
