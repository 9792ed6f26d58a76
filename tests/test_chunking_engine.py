from semseg.chunking import ChunkingEngine, DedupCache
from semseg.settings import ChunkingLimits


def _compute_total_lines() -> list[str]:
    # 41 lines of 70 chars plus one of 89: 3000 chars once joined
    lines = [f"{index:02d}".ljust(70, "x") for index in range(41)]
    lines.append("y" * 89)
    return lines


def _chunk(engine, lines, seen=None, **kwargs):
    params = {
        "file": "src/app/totals.js",
        "module_path": "app/totals",
        "base_type": "function_chunk",
        "start_line": 1,
        "seen": seen if seen is not None else DedupCache(),
    }
    params.update(kwargs)
    return engine.chunk_lines(lines, **params)


def test_oversized_function_splits_into_named_parts(limits):
    lines = _compute_total_lines()
    text = "\n".join(lines)
    assert len(lines) == 42 and len(text) == 3000

    blocks = _chunk(
        ChunkingEngine(limits),
        lines,
        start_line=10,
        name="computeTotal",
        doc="// sums the cart",
        signature="function computeTotal(items)",
    )

    assert [block.name for block in blocks] == [
        "computeTotal (part 1)",
        "computeTotal (part 2)",
        "computeTotal (part 3)",
    ]
    assert [(block.start_line, block.end_line) for block in blocks] == [(10, 25), (26, 41), (42, 51)]
    assert sum(block.end_line - block.start_line + 1 for block in blocks) == 42
    assert "\n".join(block.code for block in blocks) == text
    assert sum(len(block.code) for block in blocks) + len(blocks) - 1 == 3000
    assert blocks[0].doc == "// sums the cart"
    assert blocks[0].signature == "function computeTotal(items)"
    assert all(block.doc is None and block.signature is None for block in blocks[1:])
    assert all(len(block.code) <= limits.oversized_threshold for block in blocks)
    assert {block.type for block in blocks} == {"function_chunk"}


def test_oversized_line_is_cut_into_segments(limits):
    lines = ["h" * 60, "z" * 2500, "tail"]
    blocks = _chunk(ChunkingEngine(limits), lines, base_type="fallback_chunk")

    assert blocks[0].type == "fallback_chunk"
    assert (blocks[0].start_line, blocks[0].end_line) == (1, 1)

    segments = [block for block in blocks if block.type == "fallback_chunk_line_segment"]
    assert [len(segment.code) for segment in segments] == [1000, 1000, 500]
    assert all(segment.start_line == segment.end_line == 2 for segment in segments)
    assert segments[0].name == "(line 2 segment 1)"

    # the forced final remainder survives even below the minimum size
    assert blocks[-1].code == "tail"
    assert blocks[-1].start_line == 3


def test_named_segments_carry_owner_name(limits):
    blocks = _chunk(ChunkingEngine(limits), ["q" * 1300], start_line=7, name="blob")
    assert [block.name for block in blocks] == [
        "blob (line 7 segment 1)",
        "blob (line 7 segment 2)",
    ]


def test_repetitive_line_segments_rejoin_to_the_full_line(limits):
    line = "a" * 3000
    seen = DedupCache()
    blocks = _chunk(ChunkingEngine(limits), [line], seen=seen)

    assert [block.name for block in blocks] == [
        "(line 1 segment 1)",
        "(line 1 segment 2)",
        "(line 1 segment 3)",
    ]
    assert "".join(block.code for block in blocks) == line
    assert len(seen) == 3

    # the same line chunked again in one call is still suppressed
    assert _chunk(ChunkingEngine(limits), [line], seen=seen) == []


def test_undersized_intermediate_chunk_is_dropped():
    limits = ChunkingLimits(
        max_block_chars=100,
        min_block_chars=50,
        min_chunk_remainder_chars=1,
        max_chars_tolerance_factor=1.0,
    )
    lines = ["a" * 30, "b" * 80, "c" * 10]
    blocks = _chunk(ChunkingEngine(limits), lines)

    assert len(blocks) == 1
    assert (blocks[0].start_line, blocks[0].end_line) == (2, 3)
    assert blocks[0].code == "\n".join(lines[1:])


def test_short_remainder_pulls_trailing_lines_forward():
    limits = ChunkingLimits(
        max_block_chars=100,
        min_block_chars=20,
        min_chunk_remainder_chars=50,
        max_chars_tolerance_factor=1.0,
    )
    lines = ["1" * 30, "2" * 30, "3" * 30, "4" * 10]
    blocks = _chunk(ChunkingEngine(limits), lines)

    assert [(block.start_line, block.end_line) for block in blocks] == [(1, 1), (2, 4)]
    assert "\n".join(block.code for block in blocks) == "\n".join(lines)
    assert all(len(block.code) <= 100 for block in blocks)


def test_chunk_sizes_stay_within_bounds(limits):
    lines = [("k" * ((index * 37) % 180)) for index in range(200)]
    lines[50] = "w" * 4321
    blocks = _chunk(ChunkingEngine(limits), lines, base_type="class_chunk")

    for block in blocks:
        assert block.start_line <= block.end_line
        if block.type.endswith("_line_segment"):
            assert len(block.code) <= limits.max_block_chars
        else:
            assert len(block.code) <= limits.oversized_threshold
            expected = "\n".join(lines[block.start_line - 1 : block.end_line])
            assert block.code == expected


def test_dedup_cache_suppresses_repeats_within_one_call(limits):
    engine = ChunkingEngine(limits)
    lines = _compute_total_lines()
    seen = DedupCache()

    first = _chunk(engine, lines, seen=seen, name="computeTotal")
    second = _chunk(engine, lines, seen=seen, name="computeTotal")
    fresh = _chunk(engine, lines, seen=DedupCache(), name="computeTotal")

    assert len(first) == 3
    assert second == []
    assert fresh == first
    assert len(seen) == 3
    assert first[0] in seen


def test_fallback_respects_minimum_content_length(limits):
    engine = ChunkingEngine(limits)
    assert engine.chunk_fallback("x = 1", file="a.js", module_path="a", seen=DedupCache()) == []

    content = "\n".join(f"line {index} of plain text" for index in range(10))
    blocks = engine.chunk_fallback(content, file="a.js", module_path="a", seen=DedupCache())
    assert len(blocks) == 1
    assert blocks[0].type == "fallback_chunk"
    assert blocks[0].name is None
    assert (blocks[0].start_line, blocks[0].end_line) == (1, 10)
    assert blocks[0].code == content


def test_fingerprint_uses_location_and_prefix():
    base = DedupCache.fingerprint("a.js", 1, 2, "x" * 60)
    assert base == DedupCache.fingerprint("a.js", 1, 2, "x" * 50 + "y" * 10)
    assert base != DedupCache.fingerprint("a.js", 1, 3, "x" * 60)
    assert base != DedupCache.fingerprint("b.js", 1, 2, "x" * 60)
