"""Read-only embedding store loaded from a trained model file."""

from typing import Dict, List, Optional, Tuple

import numpy as np

from classic_word2vec.corpus import require_file


def _parse_header(line: bytes) -> Tuple[int, int]:
    parts = line.split()
    if len(parts) != 2:
        raise ValueError(f"Invalid model header: {line!r}")
    try:
        num_words, dim = int(parts[0]), int(parts[1])
    except ValueError:
        raise ValueError(f"Invalid model header: {line!r}") from None
    if num_words < 0 or dim <= 0:
        raise ValueError(f"Invalid model header: {line!r}")
    return num_words, dim


def normalize_rows(matrix: np.ndarray) -> np.ndarray:
    """L2-normalize every row in place; all-zero rows stay zero."""
    norms = np.linalg.norm(matrix, axis=1, keepdims=True)
    np.divide(matrix, norms, out=matrix, where=norms > 0)
    return matrix


class EmbeddingStore:
    """Unit-length word vectors with their tokens, in file order.

    The matrix is marked read-only after loading, so one store can back any
    number of concurrent queries.
    """

    def __init__(self, words: List[str], matrix: np.ndarray):
        """Wrap already-normalized vectors.

        Args:
            words: Tokens in row order
            matrix: Float32 matrix of shape (len(words), dim)
        """
        if matrix.ndim != 2 or matrix.shape[0] != len(words):
            raise ValueError(
                f"Expected {len(words)} rows, got matrix of shape {matrix.shape}"
            )
        self.words = list(words)
        self.matrix = matrix
        self.matrix.setflags(write=False)

    @property
    def vocab_size(self) -> int:
        return self.matrix.shape[0]

    @property
    def dim(self) -> int:
        return self.matrix.shape[1]

    def __len__(self) -> int:
        return self.vocab_size

    def __contains__(self, word: str) -> bool:
        return self.index_of(word) is not None

    def index_of(self, word: str) -> Optional[int]:
        """Position of the first row holding ``word``, by linear scan."""
        for index, token in enumerate(self.words):
            if token == word:
                return index
        return None

    def vector(self, word: str) -> Optional[np.ndarray]:
        index = self.index_of(word)
        return None if index is None else self.matrix[index]

    @property
    def word_to_index(self) -> Dict[str, int]:
        """Token to row mapping; the first occurrence wins for duplicates."""
        mapping: Dict[str, int] = {}
        for index, token in enumerate(self.words):
            mapping.setdefault(token, index)
        return mapping

    @classmethod
    def load(cls, path: str, binary: Optional[bool] = None) -> "EmbeddingStore":
        """Load a model file and normalize its rows.

        Args:
            path: Model file written by the trainer
            binary: Vectors stored as float32 bytes rather than decimal text;
                detected from the first entry when None

        Returns:
            Loaded store

        Raises:
            FileNotFoundError: If the file does not exist
            ValueError: If the header or an entry is malformed
        """
        require_file(path, "Model")
        with open(path, "rb") as f:
            data = f.read()

        header_end = data.find(b"\n")
        if header_end < 0:
            raise ValueError(f"Invalid model header in {path}")
        num_words, dim = _parse_header(data[:header_end])

        looks_like_text = _first_entry_is_text(data, header_end + 1, dim)
        if binary is None:
            binary = not looks_like_text
        elif binary and looks_like_text:
            raise ValueError(f"{path} holds text vectors, not binary")

        if binary:
            words, matrix = _read_binary_entries(data, header_end + 1, num_words, dim)
        else:
            words, matrix = _read_text_entries(data, header_end + 1, num_words, dim)
        return cls(words, normalize_rows(matrix))


def _read_binary_entries(
    data: bytes, pos: int, num_words: int, dim: int
) -> Tuple[List[str], np.ndarray]:
    row_bytes = dim * 4
    words: List[str] = []
    matrix = np.zeros((num_words, dim), dtype=np.float32)

    for row in range(num_words):
        # Newlines left over from the previous entry
        while pos < len(data) and data[pos : pos + 1] == b"\n":
            pos += 1
        if pos >= len(data):
            raise ValueError(f"Model file truncated at entry {row} of {num_words}")
        end = data.find(b" ", pos)
        if end < 0:
            end = len(data)
        if end == pos:
            raise ValueError(f"Entry {row} of {num_words} has an empty token")
        words.append(data[pos:end].decode("utf-8", errors="replace"))
        pos = end + 1

        if pos + row_bytes > len(data):
            raise ValueError(
                f"Model file truncated at entry {row} of {num_words}"
            )
        matrix[row] = np.frombuffer(data, dtype="<f4", count=dim, offset=pos)
        if not np.all(np.isfinite(matrix[row])):
            raise ValueError(f"Entry {row} ({words[-1]!r}) holds non-finite values")
        pos += row_bytes

    return words, matrix


def _read_text_entries(
    data: bytes, pos: int, num_words: int, dim: int
) -> Tuple[List[str], np.ndarray]:
    lines = [line for line in data[pos:].split(b"\n") if line.strip()]
    if len(lines) < num_words:
        raise ValueError(f"Model file truncated: {len(lines)} of {num_words} entries")

    words: List[str] = []
    matrix = np.zeros((num_words, dim), dtype=np.float32)
    for row, line in enumerate(lines[:num_words]):
        parts = line.split()
        if len(parts) < dim + 1:
            raise ValueError(f"Entry {row} has {len(parts) - 1} values, expected {dim}")
        words.append(parts[0].decode("utf-8", errors="replace"))
        matrix[row] = np.asarray(parts[1 : dim + 1], dtype=np.float32)
    return words, matrix


def _first_entry_is_text(data: bytes, pos: int, dim: int) -> bool:
    while data[pos : pos + 1] == b"\n":
        pos += 1
    end = data.find(b"\n", pos)
    parts = data[pos : end if end >= 0 else len(data)].split()
    if len(parts) != dim + 1:
        return False
    try:
        for value in parts[1:]:
            float(value)
    except ValueError:
        return False
    return True
