"""
Module for splitting caption streams into overlapping transcript chunks.
"""

from typing import List, Optional, Sequence

from tubechat.models.schemas import CaptionCue, ChunkingConfig, TranscriptChunk
from tubechat.utils.logger import logging


class TranscriptChunker:
    """Class to turn ordered captions into chunks sized for an LLM context window."""

    def __init__(self, config: Optional[ChunkingConfig] = None):
        """
        Initialize the chunker.

        Args:
            config: Chunk size and overlap budgets (defaults from application config)
        """
        self.config = config or ChunkingConfig()

    @property
    def chunk_size(self) -> int:
        return self.config.chunk_size_chars

    @property
    def chunk_overlap(self) -> int:
        return self.config.chunk_overlap_chars

    def chunk(self, captions: Sequence[CaptionCue]) -> List[TranscriptChunk]:
        """
        Split captions into overlapping chunks.

        Chunk boundaries always fall between captions; a caption is never
        split, so a chunk holding one oversized caption may exceed the budget.
        Each new chunk starts with the trailing captions of the previous one,
        up to roughly ``chunk_overlap`` characters.

        Args:
            captions: Captions in playback order

        Returns:
            Chunks in order, indexed from 0
        """
        if not captions:
            return []

        chunks: List[TranscriptChunk] = []
        texts: List[str] = []
        char_count = 0
        start_index = 0
        start_time = captions[0].start

        for i, caption in enumerate(captions):
            # +1 for the separating space
            length = len(caption.text) + 1

            if char_count + length > self.chunk_size and char_count > 0:
                chunks.append(TranscriptChunk(
                    text=" ".join(texts).strip(),
                    start_time=start_time,
                    end_time=caption.start,
                    index=len(chunks),
                ))

                overlap_start = max(start_index, i - self._overlap_caption_count(captions, i))
                window = captions[overlap_start:i + 1]

                start_index = overlap_start
                start_time = captions[overlap_start].start
                texts = [c.text for c in window]
                char_count = sum(len(c.text) + 1 for c in window)
            else:
                texts.append(caption.text)
                char_count += length

        if texts:
            chunks.append(TranscriptChunk(
                text=" ".join(texts).strip(),
                start_time=start_time,
                end_time=captions[-1].end,
                index=len(chunks),
            ))

        logging.info(
            f"Chunked transcript into {len(chunks)} chunks "
            f"(avg {sum(len(c.text) for c in chunks) / len(chunks):.0f} chars per chunk)"
        )
        return chunks

    def _overlap_caption_count(self, captions: Sequence[CaptionCue], current: int) -> int:
        """Count the captions before ``current`` needed to cover the overlap budget."""
        overlap_chars = 0
        count = 0
        i = current - 1
        while i >= 0 and overlap_chars < self.chunk_overlap:
            overlap_chars += len(captions[i].text) + 1
            count += 1
            i -= 1
        return count

