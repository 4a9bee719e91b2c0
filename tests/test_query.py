"""Tests for the nearest-neighbor query engine."""

import threading

import numpy as np
import pytest

from classic_word2vec.query import NeedThreeWordsError, OutOfVocabularyError, QueryEngine
from classic_word2vec.store import EmbeddingStore, normalize_rows


@pytest.fixture
def tie_store():
    """Store where rows 1 and 4 are identical."""
    words = ["a", "b", "c", "d", "e"]
    matrix = np.array(
        [[1.0, 0.0], [0.9, 0.1], [0.0, 1.0], [-1.0, 0.0], [0.9, 0.1]],
        dtype=np.float32,
    )
    return EmbeddingStore(words, normalize_rows(matrix))


class TestDistance:
    """Test cases for QueryEngine.distance."""

    def test_ranking(self, tie_store):
        """Test results are ordered by similarity with ties in row order."""
        result = QueryEngine(tie_store).distance("a", 3)

        assert [word for word, _ in result] == ["b", "e", "c"]
        assert result[0][1] == pytest.approx(result[1][1])
        assert result[2][1] == pytest.approx(0.0, abs=1e-6)

    def test_excludes_query_word(self, tie_store):
        """Test the query word never appears in its own results."""
        engine = QueryEngine(tie_store)
        for word in tie_store.words:
            assert word not in [w for w, _ in engine.distance(word, 10)]

    def test_sorted_and_bounded(self, tie_store):
        """Test similarities are non-increasing and at most top_n are returned."""
        engine = QueryEngine(tie_store)
        for top_n in [0, 1, 2, 10]:
            result = engine.distance("c", top_n)
            sims = [sim for _, sim in result]
            assert len(result) <= top_n
            assert sims == sorted(sims, reverse=True)
        assert len(engine.distance("c", 10)) == 4

    def test_result_types(self, tie_store):
        """Test results are plain (str, float) pairs."""
        word, sim = QueryEngine(tie_store).distance("a", 1)[0]
        assert isinstance(word, str)
        assert isinstance(sim, float)

    def test_out_of_vocabulary(self, tie_store):
        """Test unknown words raise an error that carries the word."""
        with pytest.raises(OutOfVocabularyError) as exc_info:
            QueryEngine(tie_store).distance("zebra")

        assert exc_info.value.word == "zebra"
        assert isinstance(exc_info.value, KeyError)
        assert "zebra" in str(exc_info.value)


class TestAnalogy:
    """Test cases for QueryEngine.analogy."""

    def test_known_analogy(self, analogy_store):
        """Test man:king :: woman:queen."""
        result = QueryEngine(analogy_store).analogy("man", "king", "woman", 2)
        assert result[0][0] == "queen"

    def test_excludes_inputs(self, analogy_store):
        """Test the three input words are never returned."""
        result = QueryEngine(analogy_store).analogy("man", "king", "woman", 10)
        words = [word for word, _ in result]
        assert set(words) == {"queen", "apple"}

    def test_analogy_from_text(self, analogy_store):
        """Test a whitespace line runs the same query and ignores extra words."""
        engine = QueryEngine(analogy_store)
        assert engine.analogy_from_text("man king woman apple", 2) == engine.analogy(
            "man", "king", "woman", 2
        )

    def test_need_three_words(self, analogy_store):
        """Test fewer than three words is reported and the engine stays usable."""
        engine = QueryEngine(analogy_store)
        with pytest.raises(NeedThreeWordsError) as exc_info:
            engine.analogy_from_text("man king")

        assert exc_info.value.count == 2
        assert isinstance(exc_info.value, ValueError)
        assert engine.distance("man", 1)

    def test_out_of_vocabulary(self, analogy_store):
        """Test any unknown word aborts only that query."""
        engine = QueryEngine(analogy_store)
        with pytest.raises(OutOfVocabularyError) as exc_info:
            engine.analogy("man", "prince", "woman")

        assert exc_info.value.word == "prince"
        assert engine.analogy("man", "king", "woman", 1)[0][0] == "queen"


class TestConcurrentQueries:
    """Test cases for sharing one engine across threads."""

    def test_parallel_queries_agree(self, analogy_store):
        """Test concurrent callers get the same answers as serial calls."""
        engine = QueryEngine(analogy_store)
        expected = engine.distance("king", 4)
        results = []

        def worker():
            for _ in range(20):
                results.append(engine.distance("king", 4))

        threads = [threading.Thread(target=worker) for _ in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(results) == 80
        assert all(result == expected for result in results)
