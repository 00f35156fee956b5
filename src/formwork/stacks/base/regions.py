"""
Custom-code regions and the region-preserving writer.

A region is a span of generated output that the author owns:

    # formwork:begin resolve_user_full_name
    return f"{obj.first_name} {obj.last_name}"
    # formwork:end resolve_user_full_name

Markers may use any comment syntax; only the `formwork:begin <id>` and
`formwork:end <id>` text on the line matters. On regeneration the body of
each region in the existing file replaces the freshly rendered body, and
everything outside regions is regenerated.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from formwork.core.errors import RegionError

logger = logging.getLogger(__name__)

BEGIN_MARKER = re.compile(r"formwork:begin\s+([\w.\-]+)")
END_MARKER = re.compile(r"formwork:end\s+([\w.\-]+)")


@dataclass
class _Region:
    id: str
    begin_line: int
    body: list[str] = field(default_factory=list)


def _scan(text: str, path: str, generator: str) -> tuple[list[tuple[str, _Region | None]], list[_Region]]:
    """
    Split text into lines, tagging each with the region it sits in.

    Marker lines themselves are tagged None. Also returns every region in
    file order, including empty ones.
    """
    tagged: list[tuple[str, _Region | None]] = []
    regions: list[_Region] = []
    seen: set[str] = set()
    current: _Region | None = None

    for lineno, line in enumerate(text.splitlines(keepends=True), start=1):
        begin = BEGIN_MARKER.search(line)
        end = END_MARKER.search(line)
        if begin:
            region_id = begin.group(1)
            if current is not None:
                raise RegionError(
                    generator,
                    f"{path}:{lineno}: region '{region_id}' begins inside region "
                    f"'{current.id}' (opened at line {current.begin_line})",
                )
            if region_id in seen:
                raise RegionError(generator, f"{path}:{lineno}: duplicate region '{region_id}'")
            seen.add(region_id)
            current = _Region(region_id, lineno)
            regions.append(current)
            tagged.append((line, None))
        elif end:
            region_id = end.group(1)
            if current is None or current.id != region_id:
                raise RegionError(generator, f"{path}:{lineno}: unmatched end of region '{region_id}'")
            tagged.append((line, None))
            current = None
        else:
            tagged.append((line, current))
            if current is not None:
                current.body.append(line)

    if current is not None:
        raise RegionError(
            generator, f"{path}:{current.begin_line}: region '{current.id}' is never closed"
        )
    return tagged, regions


def extract_regions(text: str, path: str = "<text>", generator: str = "regions") -> dict[str, str]:
    """
    Collect region bodies by id. An emptied region maps to "".

    Raises:
        RegionError: On nested, duplicate, unmatched or unclosed markers
    """
    _tagged, regions = _scan(text, path, generator)
    return {region.id: "".join(region.body) for region in regions}


def merge_regions(
    rendered: str,
    existing: str,
    path: str = "<text>",
    generator: str = "regions",
) -> tuple[str, list[str]]:
    """
    Carry region bodies from an existing file into freshly rendered text.

    Returns:
        (merged text, ids of existing regions the new render no longer has)
    """
    kept = extract_regions(existing, path, generator)
    out: list[str] = []
    emitted: set[str] = set()

    tagged, _regions = _scan(rendered, path, generator)
    for line, region in tagged:
        if region is not None:
            if region.id not in kept:
                out.append(line)
            continue
        out.append(line)
        begin = BEGIN_MARKER.search(line)
        if begin and begin.group(1) in kept:
            out.append(kept[begin.group(1)])
            emitted.add(begin.group(1))

    dropped = sorted(set(kept) - emitted)
    return "".join(out), dropped


@dataclass
class WriteResult:
    """Files written and skipped by write_tree()."""

    written: list[Path] = field(default_factory=list)
    unchanged: list[Path] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


def write_tree(tree: Mapping[str, str], root: Path, generator: str) -> WriteResult:
    """
    Write a FileTree under root, preserving custom regions.

    Every file is merged before any is written, so malformed markers in one
    existing file leave the whole tree untouched. Files are written in
    sorted path order; a file whose merged content equals what is already
    on disk is not rewritten.

    Raises:
        RegionError: If an existing file has malformed region markers
    """
    result = WriteResult()
    pending: list[tuple[Path, str]] = []

    for rel in sorted(tree):
        target = root / rel
        content = tree[rel]

        if target.exists():
            existing = target.read_text(encoding="utf-8")
            content, dropped = merge_regions(content, existing, rel, generator)
            for region_id in dropped:
                result.warnings.append(f"{rel}: custom region '{region_id}' no longer exists and was dropped")
            if content == existing:
                result.unchanged.append(target)
                continue
        pending.append((target, content))

    for message in result.warnings:
        logger.warning("[%s] %s", generator, message)
    for target, content in pending:
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content, encoding="utf-8", newline="\n")
        result.written.append(target)

    logger.debug(
        "[%s] wrote %d file(s), %d unchanged", generator, len(result.written), len(result.unchanged)
    )
    return result
