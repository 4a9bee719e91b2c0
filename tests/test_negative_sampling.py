"""Tests for the unigram table and the negative-sampling update."""

import numpy as np
import pytest

from classic_word2vec.models import SigmoidTable
from classic_word2vec.negative_sampling import UnigramTable, negative_sampling_update
from classic_word2vec.utils import LinearCongruentialGenerator


class TestUnigramTable:
    """Test cases for UnigramTable."""

    def test_size(self):
        """Test the table has exactly table_size slots."""
        table = UnigramTable([10, 5, 1], table_size=1000)
        assert len(table) == 1000
        assert table.table.shape == (1000,)

    def test_slot_shares_follow_power(self):
        """Test slot shares match count**0.75 normalized."""
        counts = [0, 50, 30, 15, 5]
        table = UnigramTable(counts, table_size=100000)

        powered = np.array(counts, dtype=np.float64) ** 0.75
        expected = powered / powered.sum()
        np.testing.assert_allclose(table.probabilities(), expected, atol=1e-3)

    def test_custom_power(self):
        """Test power 1 gives raw frequencies."""
        table = UnigramTable([0, 3, 1], table_size=10000, power=1.0)
        np.testing.assert_allclose(table.probabilities(), [0.0, 0.75, 0.25], atol=1e-3)

    def test_empirical_draws_converge(self):
        """Test draws from the generator converge to the smoothed distribution."""
        counts = [0, 50, 30, 15, 5]
        table = UnigramTable(counts, table_size=100000)
        rng = LinearCongruentialGenerator(7)

        draws = np.array([table.sample(rng.next()) for _ in range(100000)])
        observed = np.bincount(draws, minlength=len(counts)) / len(draws)

        powered = np.array(counts, dtype=np.float64) ** 0.75
        expected = powered / powered.sum()
        np.testing.assert_allclose(observed, expected, atol=0.01)

    def test_boundary_draw_remapped(self):
        """Test a draw landing on index 0 maps to a non-zero index."""
        table = UnigramTable([1000, 1, 1], table_size=10)
        assert table.table[0] == 0

        assert table.sample(0) == 1
        assert table.sample(1) == 2

        rng = LinearCongruentialGenerator(3)
        for _ in range(1000):
            assert table.sample(rng.next()) in (1, 2)

    def test_single_word(self):
        """Test a one-word vocabulary always samples index 0."""
        table = UnigramTable([5], table_size=100)
        assert table.sample(123456789) == 0


class TestNegativeSamplingUpdate:
    """Test cases for negative_sampling_update."""

    @pytest.fixture
    def sigmoid(self):
        return SigmoidTable()

    def test_target_and_negatives(self, sigmoid):
        """Test the target is pulled toward hidden and negatives pushed away."""
        table = UnigramTable([0, 0, 1], table_size=100000)
        hidden = np.array([1.0, 0.0], dtype=np.float32)
        hidden_error = np.zeros(2, dtype=np.float32)
        syn1neg = np.zeros((3, 2), dtype=np.float32)

        negative_sampling_update(
            hidden, hidden_error, syn1neg, 1, 2, 0.1, sigmoid, table,
            LinearCongruentialGenerator(1),
        )

        g = (1 - sigmoid(0.0)) * 0.1
        assert syn1neg[1, 0] == pytest.approx(g, rel=1e-5)
        assert syn1neg[2, 0] < 0
        np.testing.assert_array_equal(syn1neg[0], [0.0, 0.0])
        # Second draw of word 2 saw the first update
        assert hidden_error[0] > 0

    def test_collision_skipped(self, sigmoid):
        """Test negatives equal to the target are dropped, not redrawn."""
        table = UnigramTable([0, 1], table_size=100)
        hidden = np.array([1.0, 0.0], dtype=np.float32)
        hidden_error = np.zeros(2, dtype=np.float32)
        syn1neg = np.zeros((2, 2), dtype=np.float32)
        rng = LinearCongruentialGenerator(5)

        negative_sampling_update(
            hidden, hidden_error, syn1neg, 1, 3, 0.1, sigmoid, table, rng
        )

        reference = LinearCongruentialGenerator(5)
        for _ in range(3):
            reference.next()
        assert rng.state == reference.state
        g = (1 - sigmoid(0.0)) * 0.1
        assert syn1neg[1, 0] == pytest.approx(g, rel=1e-5)

    def test_saturated_terms_skipped(self, sigmoid):
        """Test terms outside the sigmoid table leave the weights untouched."""
        table = UnigramTable([0, 0, 1], table_size=100)
        hidden = np.array([10.0, 0.0], dtype=np.float32)
        hidden_error = np.zeros(2, dtype=np.float32)
        syn1neg = np.array([[0.0, 0.0], [1.0, 0.0], [-1.0, 0.0]], dtype=np.float32)

        negative_sampling_update(
            hidden, hidden_error, syn1neg, 1, 1, 0.1, sigmoid, table,
            LinearCongruentialGenerator(1),
        )

        np.testing.assert_array_equal(syn1neg, [[0.0, 0.0], [1.0, 0.0], [-1.0, 0.0]])
        np.testing.assert_array_equal(hidden_error, [0.0, 0.0])
