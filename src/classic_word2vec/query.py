"""Nearest-neighbor and analogy queries over an embedding store."""

from typing import List, Sequence, Tuple

import numpy as np

from classic_word2vec.config import DEFAULT_TOP_N
from classic_word2vec.store import EmbeddingStore

Neighbors = List[Tuple[str, float]]


class OutOfVocabularyError(KeyError):
    """A query word is not in the store."""

    def __init__(self, word: str):
        super().__init__(word)
        self.word = word

    def __str__(self) -> str:
        return f"Out of dictionary word: {self.word}"


class NeedThreeWordsError(ValueError):
    """An analogy query was given fewer than three words."""

    def __init__(self, count: int):
        super().__init__(f"Analogy needs three words, got {count}")
        self.count = count


class QueryEngine:
    """Ranks store rows by cosine similarity to a query vector.

    Queries only read the store and keep no state between calls.
    """

    def __init__(self, store: EmbeddingStore):
        self.store = store

    def _resolve(self, word: str) -> int:
        index = self.store.index_of(word)
        if index is None:
            raise OutOfVocabularyError(word)
        return index

    def _top(self, target: np.ndarray, exclude: Sequence[int], top_n: int) -> Neighbors:
        similarities = self.store.matrix @ target
        # Stable sort keeps equal scores in row order
        order = np.argsort(-similarities, kind="stable")

        skip = set(exclude)
        result: Neighbors = []
        for idx in order:
            if len(result) >= top_n:
                break
            idx = int(idx)
            if idx in skip:
                continue
            result.append((self.store.words[idx], float(similarities[idx])))
        return result

    def distance(self, word: str, top_n: int = DEFAULT_TOP_N) -> Neighbors:
        """Words closest to ``word``, most similar first.

        Args:
            word: Query token
            top_n: Maximum number of results

        Returns:
            ``(token, similarity)`` pairs, never including ``word`` itself

        Raises:
            OutOfVocabularyError: If ``word`` is not in the store
        """
        index = self._resolve(word)
        return self._top(self.store.matrix[index], [index], top_n)

    def analogy(
        self, word_a: str, word_b: str, word_c: str, top_n: int = DEFAULT_TOP_N
    ) -> Neighbors:
        """Answer "a is to b as c is to ?".

        The target is ``vec(b) - vec(a) + vec(c)``, normalized; the three
        query words are excluded from the results.

        Raises:
            OutOfVocabularyError: If any of the words is not in the store
        """
        indices = [self._resolve(word) for word in (word_a, word_b, word_c)]
        matrix = self.store.matrix
        target = matrix[indices[1]] - matrix[indices[0]] + matrix[indices[2]]
        norm = np.linalg.norm(target)
        if norm > 0:
            target = target / norm
        return self._top(target, indices, top_n)

    def analogy_from_text(self, text: str, top_n: int = DEFAULT_TOP_N) -> Neighbors:
        """Run :meth:`analogy` on a whitespace-separated line of words.

        Words after the third are ignored.

        Raises:
            NeedThreeWordsError: If the line holds fewer than three words
            OutOfVocabularyError: If any of the words is not in the store
        """
        words = text.split()
        if len(words) < 3:
            raise NeedThreeWordsError(len(words))
        return self.analogy(words[0], words[1], words[2], top_n)


__all__ = ["QueryEngine", "OutOfVocabularyError", "NeedThreeWordsError", "Neighbors"]
