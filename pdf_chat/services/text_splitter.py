"""
Boundary-aware text splitter used to chunk extracted PDF pages.
"""

from typing import Any, List, Sequence, Tuple

from langchain_text_splitters import TextSplitter


# Boundary types in order of preference. Within a type the cut closest to
# the window end is used.
BOUNDARY_SEPARATORS: Tuple[Tuple[str, ...], ...] = (
    ("\n\n",),
    (". ", "! ", "? ", "\n"),
    (" ",),
)


class BoundaryTextSplitter(TextSplitter):
    """
    Split text into windows of at most ``chunk_size`` characters.

    Each window ends at the last paragraph break before the size limit,
    failing that the last sentence end, failing that the last space, and
    otherwise at a hard cut. The next window starts exactly
    ``chunk_overlap`` characters before the previous one ended, so every
    chunk is an exact substring of the input.
    """

    def __init__(
        self,
        chunk_size: int = 1000,
        chunk_overlap: int = 200,
        separators: Sequence[Sequence[str]] = BOUNDARY_SEPARATORS,
        **kwargs: Any,
    ) -> None:
        if chunk_size <= 0:
            raise ValueError(f"chunk_size must be positive, got {chunk_size}")
        if not 0 <= chunk_overlap < chunk_size:
            raise ValueError(
                f"chunk_overlap must be in [0, chunk_size), got {chunk_overlap} "
                f"with chunk_size {chunk_size}"
            )
        kwargs.setdefault("add_start_index", True)
        kwargs.setdefault("strip_whitespace", False)
        super().__init__(chunk_size=chunk_size, chunk_overlap=chunk_overlap, **kwargs)
        self._separators = tuple(tuple(group) for group in separators)

    def split_text(self, text: str) -> List[str]:
        if not text.strip():
            return []

        chunks: List[str] = []
        start = 0
        while len(text) - start > self._chunk_size:
            end = self._find_cut(text, start)
            chunks.append(text[start:end])
            start = end - self._chunk_overlap
        chunks.append(text[start:])
        return chunks

    def _find_cut(self, text: str, start: int) -> int:
        """Return the absolute end offset of the window starting at ``start``."""
        limit = start + self._chunk_size
        # A cut inside the overlap region would not move the window forward.
        floor = start + self._chunk_overlap

        for group in self._separators:
            best = -1
            for separator in group:
                pos = text.rfind(separator, start, limit)
                if pos != -1:
                    best = max(best, pos + len(separator))
            if best > floor:
                return best

        return limit
