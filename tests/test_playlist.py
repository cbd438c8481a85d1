"""
Playlist builder tests: exact wire format and normal/masked synchronization.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from hlsmask.domain.segments import BlackoutInterval
from hlsmask.planning.partitioner import partition
from hlsmask.streaming.playlist import (
    PlaylistVariant,
    build_playlist,
    build_playlists,
    content_type_for,
    target_duration,
    write_playlists,
)

EXPECTED_NORMAL = "\n".join(
    [
        "#EXTM3U",
        "#EXT-X-VERSION:3",
        "#EXT-X-TARGETDURATION:5",
        "#EXT-X-MEDIA-SEQUENCE:0",
        "#EXT-X-PLAYLIST-TYPE:VOD",
        "#EXTINF:3.000000,",
        "segment_000.ts",
        "#EXTINF:2.000000,",
        "segment_001.ts",
        "#EXTINF:5.000000,",
        "segment_002.ts",
        "#EXT-X-ENDLIST",
    ]
)


@pytest.fixture
def sequence():
    return partition(10.0, [BlackoutInterval(3, 5)])


def _references(text: str) -> list[str]:
    return [line for line in text.split("\n") if line and not line.startswith("#")]


def test_normal_playlist_exact_text(sequence):
    assert build_playlist(sequence, PlaylistVariant.NORMAL) == EXPECTED_NORMAL


def test_masked_playlist_substitutes_blackout_chunk(sequence):
    masked = build_playlist(sequence, PlaylistVariant.MASKED)
    assert _references(masked) == ["segment_000.ts", "blackout_001.ts", "segment_002.ts"]
    assert masked == EXPECTED_NORMAL.replace("segment_001.ts", "blackout_001.ts")


def test_both_variants_reference_same_index_on_same_line():
    sequence = partition(
        60.0,
        [BlackoutInterval(0, 4), BlackoutInterval(4, 9), BlackoutInterval(30.5, 31.25), BlackoutInterval(58, 70)],
    )
    playlists = build_playlists(sequence)
    normal_lines = playlists.normal.split("\n")
    masked_lines = playlists.masked.split("\n")
    assert len(normal_lines) == len(masked_lines)
    for normal, masked in zip(normal_lines, masked_lines):
        if normal.startswith("#"):
            assert normal == masked
        else:
            assert normal[-6:] == masked[-6:]  # "NNN.ts"
    assert _references(playlists.normal) == [s.passthrough_name for s in sequence]


def test_target_duration_is_ceiling_of_longest_segment():
    sequence = partition(10.25, [BlackoutInterval(1.5, 2.0)])
    assert target_duration(sequence) == 9
    text = build_playlist(sequence, PlaylistVariant.MASKED)
    assert "#EXT-X-TARGETDURATION:9" in text.split("\n")
    assert "#EXTINF:8.250000," in text.split("\n")


def test_extinf_uses_six_decimals():
    sequence = partition(1.0 / 3.0, [])
    assert "#EXTINF:0.333333," in build_playlist(sequence, PlaylistVariant.NORMAL)


def test_playlist_has_no_trailing_newline(sequence):
    text = build_playlist(sequence, PlaylistVariant.NORMAL)
    assert text.endswith("#EXT-X-ENDLIST")


def test_write_playlists(tmp_path: Path, sequence):
    playlists = build_playlists(sequence)
    normal_path, masked_path = write_playlists(playlists, tmp_path / "out")
    assert normal_path.name == "output.m3u8"
    assert masked_path.name == "blackout.m3u8"
    assert normal_path.read_text(encoding="utf-8") == playlists.normal
    assert masked_path.read_text(encoding="utf-8") == playlists.masked
    assert playlists.get(PlaylistVariant.MASKED) == playlists.masked


def test_write_playlists_rejects_same_name(tmp_path: Path, sequence):
    with pytest.raises(ValueError):
        write_playlists(build_playlists(sequence), tmp_path, normal_name="a.m3u8", masked_name="a.m3u8")


@pytest.mark.parametrize(
    "name,expected",
    [
        ("segment_000.ts", "video/MP2T"),
        ("output.m3u8", "application/vnd.apple.mpegurl"),
        ("notes.txt", "application/octet-stream"),
    ],
)
def test_content_type_for(name, expected):
    assert content_type_for(name) == expected
