"""
Tests for the transcript chunker module.
"""

import pytest

from tubechat.core.chunker import TranscriptChunker
from tubechat.models.schemas import ChunkingConfig
from tests.conftest import make_captions


def chunker_for(size: int, overlap: int) -> TranscriptChunker:
    """Chunker with budgets given directly in characters."""
    return TranscriptChunker(ChunkingConfig(chunk_size_tokens=size, chunk_overlap_tokens=overlap, chars_per_token=1))


def caption_range(chunk, texts):
    """Return (first, last) caption index of a chunk built from space-free captions."""
    tokens = chunk.text.split(" ")
    first = texts.index(tokens[0])
    assert tokens == texts[first:first + len(tokens)], "chunk must hold contiguous captions"
    return first, first + len(tokens) - 1


@pytest.fixture
def long_texts():
    """50 distinct 200-character captions without spaces."""
    return [f"c{i:03d}" + "-" * 196 for i in range(50)]


def test_empty_captions():
    """Test that an empty caption list gives no chunks."""
    assert chunker_for(100, 10).chunk([]) == []


def test_short_transcript_single_chunk():
    """Test that captions under the budget form one chunk spanning them all."""
    captions = make_captions(["Hello", "world"])
    chunks = chunker_for(100, 10).chunk(captions)

    assert len(chunks) == 1
    assert chunks[0].text == "Hello world"
    assert chunks[0].index == 0
    assert chunks[0].start_time == 0.0
    assert chunks[0].end_time == 4.0


def test_long_transcript_overlapping_chunks(long_texts):
    """Test chunking 50 long captions with a 1000/300 character budget."""
    captions = make_captions(long_texts)
    chunks = chunker_for(1000, 300).chunk(captions)

    assert len(chunks) > 1
    assert [c.index for c in chunks] == list(range(len(chunks)))

    ranges = [caption_range(c, long_texts) for c in chunks]
    assert ranges[0][0] == 0
    assert ranges[-1][1] == len(captions) - 1
    for (prev_first, prev_last), (first, last) in zip(ranges, ranges[1:]):
        # Each chunk starts inside the previous one and moves forward
        assert prev_first < first <= prev_last
        assert last > prev_last


def test_chunk_times_follow_captions(long_texts):
    """Test that chunk times come from the first caption and the next chunk boundary."""
    captions = make_captions(long_texts)
    chunks = chunker_for(1000, 300).chunk(captions)

    for chunk in chunks[:-1]:
        first, last = caption_range(chunk, long_texts)
        assert chunk.start_time == captions[first].start
        assert chunk.end_time == captions[last + 1].start

    assert chunks[-1].end_time == captions[-1].start + captions[-1].duration


def test_chunks_respect_budget(long_texts):
    """Test that no chunk exceeds the budget by more than one caption and separator."""
    captions = make_captions(long_texts)
    chunks = chunker_for(1000, 300).chunk(captions)

    longest_caption = max(len(t) for t in long_texts)
    for chunk in chunks:
        assert len(chunk.text) <= 1000 + longest_caption + 1


def test_first_chunk_boundary(long_texts):
    """Test the exact split of the first two chunks."""
    captions = make_captions(long_texts)
    chunks = chunker_for(1000, 300).chunk(captions)

    # Four captions use 804 chars; a fifth would reach 1005
    assert caption_range(chunks[0], long_texts) == (0, 3)
    # Overlap walks back two captions (201 + 201 >= 300)
    assert caption_range(chunks[1], long_texts) == (2, 5)


def test_zero_overlap_reconstructs_transcript(long_texts):
    """Test that without overlap the chunks partition the transcript."""
    captions = make_captions(long_texts)
    chunks = chunker_for(1000, 0).chunk(captions)

    assert len(chunks) > 1
    assert " ".join(c.text for c in chunks) == " ".join(long_texts)


def test_oversized_caption_is_not_split():
    """Test that a caption longer than the budget stays whole."""
    big = "x" * 120
    texts = ["short", big, "tail"]
    chunks = chunker_for(50, 10).chunk(make_captions(texts))

    assert any(big in c.text for c in chunks)
    for chunk in chunks:
        for token in chunk.text.split(" "):
            assert token in texts


def test_empty_captions_cost_a_separator():
    """Test that empty caption text still counts one character."""
    texts = ["abc", "", "", "de"]
    chunks = chunker_for(7, 0).chunk(make_captions(texts))

    # 4 + 1 + 1 + 3 = 9 > 7, so "de" starts a new chunk
    assert [c.text for c in chunks] == ["abc", "de"]


def test_chunking_is_deterministic(long_texts):
    """Test that the same captions always give the same chunks."""
    captions = make_captions(long_texts)
    chunker = chunker_for(1000, 300)

    assert chunker.chunk(captions) == chunker.chunk(captions)


def test_default_budgets():
    """Test the default 2000/200 token budgets at 4 characters per token."""
    chunker = TranscriptChunker(ChunkingConfig(chunk_size_tokens=2000, chunk_overlap_tokens=200, chars_per_token=4))

    assert chunker.chunk_size == 8000
    assert chunker.chunk_overlap == 800


def test_invalid_config():
    """Test that a non-positive chunk size is rejected."""
    with pytest.raises(ValueError):
        ChunkingConfig(chunk_size_tokens=0)
