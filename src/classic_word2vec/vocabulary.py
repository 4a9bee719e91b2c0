"""Vocabulary construction with an open-addressed token hash."""

from dataclasses import dataclass, field
from typing import BinaryIO, Iterable, List, Optional

import numpy as np

from classic_word2vec.config import (
    BOUNDARY_TOKEN,
    DEFAULT_MIN_COUNT,
    VOCAB_HASH_SIZE,
)
from classic_word2vec.corpus import iter_words, require_file

_HASH_MASK = (1 << 64) - 1

# Pruning starts once the table holds this share of the hash capacity
MAX_LOAD_FACTOR = 0.7


@dataclass
class VocabWord:
    """A vocabulary entry with its Huffman code and internal-node path."""

    word: str
    count: int = 0
    code: List[int] = field(default_factory=list)
    point: List[int] = field(default_factory=list)

    @property
    def code_length(self) -> int:
        return len(self.code)


def word_hash(word: str, hash_size: int) -> int:
    """Polynomial hash (base 257) over the UTF-8 bytes of ``word``."""
    h = 0
    for byte in word.encode("utf-8"):
        h = (h * 257 + byte) & _HASH_MASK
    return h % hash_size


class Vocabulary:
    """Index-addressed vocabulary backed by a linear-probing hash table.

    Entries live in ``words``; the hash table stores only indices into it.
    Index 0 is always the boundary token. After :meth:`finalize` the entries
    are sorted by descending count (index 0 pinned) and anything below
    ``min_count`` has been dropped.
    """

    def __init__(
        self, min_count: int = DEFAULT_MIN_COUNT, hash_size: int = VOCAB_HASH_SIZE
    ):
        """Initialize an empty vocabulary.

        Args:
            min_count: Entries counted fewer times are dropped on finalize
            hash_size: Capacity of the open-addressed hash table
        """
        self.min_count = min_count
        self.hash_size = hash_size
        self.words: List[VocabWord] = []
        self.train_words = 0
        self.min_reduce = 1
        self._hash = np.full(hash_size, -1, dtype=np.int32)

    def __len__(self) -> int:
        return len(self.words)

    def __getitem__(self, index: int) -> VocabWord:
        return self.words[index]

    def __contains__(self, word: str) -> bool:
        return self.search(word) is not None

    def __iter__(self):
        return iter(self.words)

    @property
    def counts(self) -> np.ndarray:
        return np.array([w.count for w in self.words], dtype=np.int64)

    def search(self, word: str) -> Optional[int]:
        """Find the index of ``word``.

        Args:
            word: Token to look up

        Returns:
            Vocabulary index, or None if the token is unknown
        """
        h = word_hash(word, self.hash_size)
        while True:
            index = int(self._hash[h])
            if index == -1:
                return None
            if self.words[index].word == word:
                return index
            h = (h + 1) % self.hash_size

    def add(self, word: str) -> int:
        """Append ``word`` with a zero count and index it.

        Args:
            word: Token to add

        Returns:
            Index of the new entry
        """
        # One slot always stays empty so probing terminates
        if len(self.words) >= self.hash_size - 1:
            raise ValueError(f"Vocabulary hash table is full ({self.hash_size} slots)")
        index = len(self.words)
        self.words.append(VocabWord(word))
        self._insert(word, index)
        return index

    def _insert(self, word: str, index: int) -> None:
        h = word_hash(word, self.hash_size)
        while self._hash[h] != -1:
            h = (h + 1) % self.hash_size
        self._hash[h] = index

    def _rehash(self) -> None:
        self._hash.fill(-1)
        for index, entry in enumerate(self.words):
            self._insert(entry.word, index)

    def count_word(self, word: str) -> None:
        """Increment the count of ``word``, adding it if unseen.

        Prunes rare entries whenever the table exceeds its load factor.
        """
        index = self.search(word)
        if index is None:
            index = self.add(word)
        self.words[index].count += 1
        if len(self.words) > self.hash_size * MAX_LOAD_FACTOR:
            self.reduce()

    def reduce(self) -> None:
        """Drop entries counted ``min_reduce`` times or fewer and rebuild the hash.

        The discard threshold rises by one on every call. The boundary token
        at index 0 is always kept.
        """
        self.words = [
            entry
            for index, entry in enumerate(self.words)
            if index == 0 or entry.count > self.min_reduce
        ]
        self._rehash()
        self.min_reduce += 1

    def finalize(self) -> None:
        """Sort by descending count, apply ``min_count`` and rebuild the hash.

        The sort is stable and leaves index 0 in place. ``train_words`` is
        recomputed from the surviving counts.
        """
        if not self.words:
            return
        head, rest = self.words[0], self.words[1:]
        rest.sort(key=lambda entry: entry.count, reverse=True)
        self.words = [head] + [entry for entry in rest if entry.count >= self.min_count]
        for entry in self.words:
            entry.code = []
            entry.point = []
        self.train_words = sum(entry.count for entry in self.words)
        self._rehash()

    def build_from_words(self, words: Iterable[str], debug_mode: int = 0) -> None:
        """Count tokens from an iterable and finalize.

        Args:
            words: Token stream, boundary markers included
            debug_mode: Print progress when > 1 and a summary when > 0
        """
        self.words = []
        self._hash.fill(-1)
        self.min_reduce = 1
        self.add(BOUNDARY_TOKEN)

        seen = 0
        for word in words:
            seen += 1
            if debug_mode > 1 and seen % 100000 == 0:
                print(f"{seen // 1000}K", end="\r", flush=True)
            self.count_word(word)

        self.finalize()
        if debug_mode > 0:
            print(f"Vocab size: {len(self)}")
            print(f"Words in train file: {self.train_words}")

    def build_from_stream(self, stream: BinaryIO, debug_mode: int = 0) -> None:
        """Count every token of a binary corpus stream and finalize."""
        self.build_from_words(iter_words(stream), debug_mode)

    def build_from_corpus(self, path: str, debug_mode: int = 0) -> None:
        """Count every token of a corpus file and finalize.

        Args:
            path: Training corpus path
            debug_mode: Verbosity

        Raises:
            FileNotFoundError: If the corpus does not exist
        """
        require_file(path, "Training data")
        with open(path, "rb") as f:
            self.build_from_stream(f, debug_mode)

    def save_to_file(self, path: str) -> None:
        """Write one ``"<token> <count>"`` line per entry in index order."""
        with open(path, "w", encoding="utf-8") as f:
            for entry in self.words:
                f.write(f"{entry.word} {entry.count}\n")

    def load_from_file(self, path: str, debug_mode: int = 0) -> None:
        """Read a saved vocabulary and finalize it.

        Lines that do not hold exactly a token and a count are ignored. A
        token listed more than once keeps one entry with the summed count.

        Args:
            path: Vocabulary file path
            debug_mode: Print a summary when > 0

        Raises:
            FileNotFoundError: If the file does not exist
        """
        require_file(path, "Vocabulary")
        self.words = []
        self._hash.fill(-1)
        with open(path, "r", encoding="utf-8") as f:
            for line in f:
                parts = line.split()
                if len(parts) != 2:
                    continue
                index = self.search(parts[0])
                if index is None:
                    index = self.add(parts[0])
                self.words[index].count += int(parts[1])

        if not self.words or self.words[0].word != BOUNDARY_TOKEN:
            index = self.search(BOUNDARY_TOKEN)
            if index is None:
                self.words.insert(0, VocabWord(BOUNDARY_TOKEN))
            else:
                self.words.insert(0, self.words.pop(index))
            self._rehash()

        self.finalize()
        if debug_mode > 0:
            print(f"Vocab size: {len(self)}")
            print(f"Words in train file: {self.train_words}")

    @classmethod
    def from_corpus(
        cls,
        path: str,
        min_count: int = DEFAULT_MIN_COUNT,
        hash_size: int = VOCAB_HASH_SIZE,
        debug_mode: int = 0,
    ) -> "Vocabulary":
        vocab = cls(min_count, hash_size)
        vocab.build_from_corpus(path, debug_mode)
        return vocab

    @classmethod
    def from_file(
        cls,
        path: str,
        min_count: int = DEFAULT_MIN_COUNT,
        hash_size: int = VOCAB_HASH_SIZE,
        debug_mode: int = 0,
    ) -> "Vocabulary":
        vocab = cls(min_count, hash_size)
        vocab.load_from_file(path, debug_mode)
        return vocab
