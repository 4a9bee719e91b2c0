"""Corpus reading and preparation utilities."""

import os
import random
import re
from typing import BinaryIO, Iterable, Iterator, List, Optional

from datasets import load_dataset

from classic_word2vec.config import BOUNDARY_TOKEN


# Bytes read per call when streaming a corpus
READ_CHUNK_SIZE = 1 << 16

_TOKEN_OR_NEWLINE = re.compile(rb"[^\s]+|\n")
_WHITESPACE = b" \t\n\r\x0b\x0c"


def _last_whitespace(data: bytes) -> int:
    return max(data.rfind(byte) for byte in _WHITESPACE)


def iter_words(stream: BinaryIO, chunk_size: int = READ_CHUNK_SIZE) -> Iterator[str]:
    """Yield whitespace-delimited tokens from a binary stream.

    Reading starts at the stream's current position, which may fall in the
    middle of a token or a multi-byte character when the stream was seeked
    to a shard offset; undecodable bytes are dropped. Each line end yields
    the boundary token, as does end of stream after an unterminated line.

    The stream is read ``chunk_size`` bytes at a time. A token cut by a
    chunk edge is held back until the rest of it arrives, so memory stays
    bounded by the chunk size and the longest token even on corpora without
    line breaks.

    Args:
        stream: File object opened in binary mode
        chunk_size: Bytes per read

    Yields:
        Tokens and boundary markers in stream order
    """
    pending = b""
    line_has_tokens = False
    while True:
        chunk = stream.read(chunk_size)
        if not chunk:
            break
        data = pending + chunk
        cut = _last_whitespace(data) + 1
        pending = data[cut:]
        for match in _TOKEN_OR_NEWLINE.finditer(data, 0, cut):
            piece = match.group()
            if piece == b"\n":
                line_has_tokens = False
                yield BOUNDARY_TOKEN
                continue
            word = piece.decode("utf-8", errors="ignore")
            if word:
                line_has_tokens = True
                yield word

    word = pending.decode("utf-8", errors="ignore")
    if word:
        line_has_tokens = True
        yield word
    if line_has_tokens:
        yield BOUNDARY_TOKEN


def require_file(path: str, kind: str) -> None:
    """Raise if ``path`` is not a readable file.

    Args:
        path: File path
        kind: Human readable name used in the error message

    Raises:
        FileNotFoundError: If the file does not exist
    """
    if not path or not os.path.isfile(path):
        raise FileNotFoundError(f"{kind} file not found: {path}")


def shard_offsets(file_size: int, num_shards: int) -> List[int]:
    """Byte offsets at which each worker starts reading.

    Args:
        file_size: Corpus size in bytes
        num_shards: Number of workers

    Returns:
        One start offset per worker
    """
    shard = file_size // num_shards
    return [shard * worker_id for worker_id in range(num_shards)]


def write_corpus(texts: Iterable[str], path: str) -> int:
    """Write texts one per line as a training corpus.

    Args:
        texts: Text documents or sentences
        path: Destination file

    Returns:
        Number of lines written
    """
    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)

    lines = 0
    with open(path, "w", encoding="utf-8") as f:
        for text in texts:
            text = " ".join(text.split())
            if not text:
                continue
            f.write(text + "\n")
            lines += 1
    return lines


def load_texts_from_hf(dataset: str, config: Optional[str], split: str) -> List[str]:
    """Load texts from Hugging Face datasets.

    Args:
        dataset: Dataset name
        config: Dataset configuration
        split: Dataset split

    Returns:
        List of text strings

    Raises:
        ValueError: If no suitable text column is found
    """
    ds = load_dataset(dataset, config, split=split)

    # Search for text column
    text_columns = ["text", "content", "sentence", "document", "raw"]
    text_col = next((col for col in text_columns if col in ds.column_names), None)

    if text_col is None:
        raise ValueError(
            f"Could not find a text column in dataset {dataset}. "
            f"Available columns: {ds.column_names}"
        )

    return [text for text in ds[text_col] if isinstance(text, str) and text.strip()]


def generate_synthetic_texts(
    n_sentences: int, vocab_size: int, rng: random.Random
) -> List[str]:
    """Generate synthetic sentences for benchmarking.

    Args:
        n_sentences: Number of sentences to generate
        vocab_size: Size of vocabulary to use
        rng: Random number generator

    Returns:
        List of synthetic sentences
    """
    words = [f"tok{i}" for i in range(vocab_size)]
    return [
        " ".join(rng.choice(words) for _ in range(rng.randint(5, 20)))
        for _ in range(n_sentences)
    ]
