"""
Playlist rewriting and chunk-reference checks.

The rewriter swaps local chunk file names for externally resolvable locators
(typically object-storage URLs). It fails closed: a local chunk reference with
no locator would ship a dangling relative path to remote players.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from pathlib import Path

from hlsmask.domain.segments import CHUNK_NAME_RE
from hlsmask.infra.exceptions import ConfigurationError, RewriteError

logger = logging.getLogger(__name__)


def iter_chunk_references(text: str) -> Iterator[tuple[int, str]]:
    """Yield (1-based line number, file name) for every local chunk reference."""
    for line_no, line in enumerate(text.split("\n"), 1):
        stripped = line.strip()
        if stripped and not stripped.startswith("#") and CHUNK_NAME_RE.match(stripped):
            yield line_no, stripped


def rewrite_playlist(text: str, locators: Mapping[str, str], strict: bool = True) -> str:
    """
    Replace chunk file names in a playlist with their locators.

    Args:
        text: Playlist text
        locators: File name -> locator mapping
        strict: If True (default), raise when a local chunk reference has no locator;
            if False, leave it untouched and log a warning

    Returns:
        New playlist text with the same number of lines

    Raises:
        RewriteError: In strict mode, listing every unresolved reference
        ConfigurationError: If a locator contains a line break

    Example:
        >>> rewrite_playlist("#EXTINF:3.000000,\\nsegment_000.ts", {"segment_000.ts": "https://cdn/a.ts"})
        '#EXTINF:3.000000,\\nhttps://cdn/a.ts'
    """
    broken = sorted(name for name, locator in locators.items() if "\n" in locator or "\r" in locator)
    if broken:
        raise ConfigurationError(f"Locators must be single-line; line break in locator for {', '.join(broken)}")

    out: list[str] = []
    missing: list[tuple[int, str]] = []

    for line_no, line in enumerate(text.split("\n"), 1):
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            out.append(line)
            continue
        locator = locators.get(stripped)
        if locator is not None:
            out.append(locator + ("\r" if line.endswith("\r") else ""))
            continue
        if CHUNK_NAME_RE.match(stripped):
            missing.append((line_no, stripped))
        out.append(line)

    if missing:
        if strict:
            raise RewriteError(missing)
        for line_no, name in missing:
            logger.warning("No locator for %s (line %d); leaving local reference", name, line_no)

    return "\n".join(out)


def rewrite_playlist_file(
    path: Path,
    locators: Mapping[str, str],
    strict: bool = True,
    output: Path | None = None,
) -> Path:
    """Rewrite a playlist on disk; writes to ``output`` or back to ``path``."""
    text = path.read_text(encoding="utf-8")
    rewritten = rewrite_playlist(text, locators, strict=strict)
    target = output or path
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(rewritten, encoding="utf-8")
    logger.info("Rewrote %s -> %s", path, target)
    return target


@dataclass
class ChunkCheck:
    """Result of checking a playlist's local chunk references against a directory."""

    found: list[str] = field(default_factory=list)
    missing: list[str] = field(default_factory=list)
    empty: list[str] = field(default_factory=list)

    @property
    def valid(self) -> bool:
        return not self.missing and not self.empty

    def to_dict(self) -> dict:
        return {
            "valid": self.valid,
            "found": self.found,
            "missing": self.missing,
            "empty": self.empty,
        }


def verify_chunks(text: str, work_dir: Path) -> ChunkCheck:
    """Check that every local chunk a playlist references exists and has content."""
    result = ChunkCheck()
    for _, name in iter_chunk_references(text):
        chunk_path = work_dir / name
        if not chunk_path.is_file():
            result.missing.append(name)
        elif chunk_path.stat().st_size == 0:
            result.empty.append(name)
        else:
            result.found.append(name)
    return result
