"""Tests for tool naming and directory loading."""

import pytest

import lmreport.catalog as catalog
from lmreport.catalog import (
    available_tools,
    discover_report_files,
    filter_by_tool,
    load_directory,
    tool_name_for,
)


@pytest.mark.parametrize("filename, tool", [
    ("synopsys_2.txt", "synopsys"),
    ("Cadence.txt", "cadence"),
    ("mentor", "mentor"),
    ("ansys_v2_10.log", "ansys_v2"),
    ("tool_a.txt", "tool_a"),
])
def test_tool_name_for(filename, tool):
    assert tool_name_for(filename) == tool


def test_available_tools_deduplicated(incoming_dir):
    (incoming_dir / "nested").mkdir()
    assert available_tools(incoming_dir) == ["cadence", "synopsys"]


def test_available_tools_missing_directory(tmp_path):
    assert available_tools(tmp_path / "nope") == []


def test_discover_skips_hidden_and_directories(incoming_dir):
    (incoming_dir / ".hidden.txt").write_text("x", encoding="utf-8")
    (incoming_dir / "sub").mkdir()
    names = [p.name for p in discover_report_files(incoming_dir)]
    assert names == ["Cadence.txt", "synopsys_1.txt", "synopsys_2.txt"]


def test_load_directory_attributes_tools(incoming_dir):
    records = load_directory(incoming_dir)
    assert [(r.tool, r.feature) for r in records] == [
        ("cadence", "Virtuoso"),
        ("synopsys", "RTL_Compiler"),
        ("synopsys", "Genus_Synthesis"),
        ("synopsys", "Voltus"),
        ("synopsys", "DC_Ultra"),
    ]


def test_load_directory_continues_after_a_failing_file(incoming_dir, monkeypatch):
    real_parse = catalog.parse_report_file

    def flaky_parse(path, tool=None):
        if path.name == "Cadence.txt":
            raise RuntimeError("boom")
        return real_parse(path, tool)

    monkeypatch.setattr(catalog, "parse_report_file", flaky_parse)
    records = load_directory(incoming_dir)
    assert {r.tool for r in records} == {"synopsys"}
    assert len(records) == 4


def test_load_directory_skips_binary_files(incoming_dir):
    (incoming_dir / "junk.bin").write_bytes(b"\x00\xff\x00")
    assert len(load_directory(incoming_dir)) == 5


def test_load_directory_missing(tmp_path):
    assert load_directory(tmp_path / "missing") == []


def test_load_directory_by_tool_dir(tmp_path, sample_report):
    root = tmp_path / "incoming"
    tool_dir = root / "Synopsys"
    tool_dir.mkdir(parents=True)
    (tool_dir / "status.txt").write_text(sample_report, encoding="utf-8")
    (tool_dir / "lmstat").write_text(sample_report, encoding="utf-8")
    (tool_dir / "notes.json").write_text(sample_report, encoding="utf-8")
    (root / "loose.txt").write_text(sample_report, encoding="utf-8")

    records = load_directory(root, by_tool_dir=True)
    assert len(records) == 6
    assert {r.tool for r in records} == {"Synopsys"}
    assert {r.source_file for r in records} == {"status.txt", "lmstat"}


def test_filter_by_tool(incoming_dir):
    records = load_directory(incoming_dir)
    assert len(filter_by_tool(records, None)) == 5
    assert len(filter_by_tool(records, "all")) == 5
    assert [r.feature for r in filter_by_tool(records, "CADENCE")] == ["Virtuoso"]
    assert filter_by_tool(records, "unknown") == []
