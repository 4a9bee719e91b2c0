"""Common test fixtures and utilities for testing."""

import numpy as np
import pytest

from classic_word2vec.config import TrainConfig
from classic_word2vec.store import EmbeddingStore, normalize_rows
from classic_word2vec.vocabulary import Vocabulary


@pytest.fixture
def small_counts():
    """Descending word counts for a five-word vocabulary."""
    return [100, 80, 60, 40, 20]


@pytest.fixture
def medium_counts():
    """Descending counts for fifty words with varied frequencies."""
    import random

    random.seed(42)  # For reproducible tests
    return sorted((random.randint(1, 1000) for _ in range(50)), reverse=True)


@pytest.fixture
def small_vocab():
    """Finalized vocabulary built from a short token stream."""
    vocab = Vocabulary(min_count=1, hash_size=1000)
    tokens = "the cat sat on the mat </s> the dog sat on the log </s>".split()
    vocab.build_from_words(tokens)
    return vocab


@pytest.fixture
def corpus_file(tmp_path):
    """Small newline-delimited training corpus."""
    lines = [
        "the quick brown fox jumps over the lazy dog",
        "the dog sleeps while the fox runs",
        "a quick brown dog jumps over a lazy fox",
    ]
    path = tmp_path / "corpus.txt"
    path.write_text("\n".join(lines * 20) + "\n", encoding="utf-8")
    return path


@pytest.fixture
def make_config(tmp_path, corpus_file):
    """Factory for small, quiet training configurations."""

    def _make(**overrides):
        options = dict(
            train_file=str(corpus_file),
            output_file=str(tmp_path / "vectors.bin"),
            size=10,
            debug_mode=0,
            binary=True,
            sample=0.0,
            negative=3,
            threads=1,
            iterations=2,
            min_count=1,
            window=3,
            vocab_hash_size=1000,
            unigram_table_size=10000,
        )
        options.update(overrides)
        return TrainConfig(**options)

    return _make


@pytest.fixture
def analogy_store():
    """Store where man:king is woman:queen along the third axis."""
    words = ["man", "woman", "king", "queen", "apple"]
    matrix = np.array(
        [
            [1.0, 0.0, 0.0],
            [0.0, 1.0, 0.0],
            [1.0, 0.0, 1.0],
            [0.0, 1.0, 1.0],
            [0.5, 0.5, -1.0],
        ],
        dtype=np.float32,
    )
    return EmbeddingStore(words, normalize_rows(matrix))

