"""Tests for the multi-threaded trainer."""

import threading

import numpy as np
import pytest

from classic_word2vec.config import BOUNDARY_TOKEN
from classic_word2vec.models import CBOWModel
from classic_word2vec.store import EmbeddingStore
from classic_word2vec.training import (
    SharedCounter,
    Trainer,
    TrainingError,
    TrainingWorker,
    keep_probability,
)
from classic_word2vec.vocabulary import Vocabulary


class TestKeepProbability:
    """Test cases for frequent-word subsampling."""

    def test_disabled(self):
        """Test sample=0 keeps every word."""
        assert keep_probability(10**6, 0.0, 10**6) == 1.0

    def test_threshold_frequency_kept(self):
        """Test a word at exactly sample * total words is always kept."""
        assert keep_probability(1000, 1e-3, 10**6) == pytest.approx(1.0)

    def test_known_value(self):
        """Test the closed form for a frequent word."""
        # threshold 1000, count 4000: (sqrt(4) + 1) * 1000 / 4000
        assert keep_probability(4000, 1e-3, 10**6) == pytest.approx(0.75)

    def test_monotonic(self):
        """Test keep probability never rises with frequency."""
        values = [keep_probability(c, 1e-3, 10**6) for c in range(1, 20000, 37)]
        assert all(a >= b for a, b in zip(values, values[1:]))
        assert all(0.0 < v <= 1.0 for v in values)


class TestSharedCounter:
    """Test cases for SharedCounter."""

    def test_concurrent_adds(self):
        """Test increments from many threads are not lost."""
        counter = SharedCounter()

        def worker():
            for _ in range(1000):
                counter.add(1)

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert counter.value == 8000


class TestTrainingContext:
    """Test cases for learning-rate decay."""

    def test_alpha_decay_and_floor(self, make_config):
        """Test alpha decays linearly and never drops below its floor."""
        trainer = Trainer(make_config(alpha=0.1))
        trainer.build_vocabulary()
        ctx = trainer._init_net()
        total = ctx.total_words

        assert ctx.alpha == 0.1
        ctx.report_progress(total // 2)
        assert ctx.alpha == pytest.approx(0.1 * (1 - (total // 2) / (total + 1)))

        ctx.report_progress(10 * total)
        assert ctx.alpha == pytest.approx(0.1 * 1e-4)

    def test_default_alpha_by_architecture(self, make_config):
        """Test CBOW and skip-gram start from different rates."""
        assert make_config(cbow=True).starting_alpha == 0.05
        assert make_config(cbow=False).starting_alpha == 0.025

    def test_worker_shards(self, make_config, corpus_file):
        """Test each worker starts at its byte offset with an equal word budget."""
        trainer = Trainer(make_config(threads=2))
        vocab = trainer.build_vocabulary()
        ctx = trainer._init_net()

        size = corpus_file.stat().st_size
        worker = TrainingWorker(ctx, 1)
        assert worker.start == size // 2
        assert worker.word_budget == vocab.train_words / 2


class TestTrainer:
    """Test cases for Trainer."""

    def test_writes_binary_model(self, make_config):
        """Test training writes one unit-normalizable row per vocabulary word."""
        config = make_config()
        trainer = Trainer(config)
        stats = trainer.train()

        store = EmbeddingStore.load(config.output_file, binary=True)
        assert store.words == [entry.word for entry in trainer.vocab]
        assert store.words[0] == BOUNDARY_TOKEN
        assert store.dim == 10
        assert stats["vocab_size"] == len(trainer.vocab)

    def test_stats(self, make_config):
        """Test one thread processes every corpus word in every iteration."""
        trainer = Trainer(make_config(iterations=2))
        stats = trainer.train()

        assert stats["words_processed"] == 2 * trainer.vocab.train_words
        assert stats["time_sec"] >= 0
        assert stats["words_per_sec"] > 0
        assert 0 < stats["final_alpha"] < 0.05

    def test_parameters_change(self, make_config):
        """Test training moves the input embeddings away from their start."""
        from classic_word2vec.models import ParameterMatrices

        config = make_config()
        trainer = Trainer(config)
        trainer.train()

        initial = ParameterMatrices(len(trainer.vocab), config.size, seed=config.seed)
        assert not np.allclose(trainer.params.syn0, initial.syn0)

    def test_text_output(self, make_config, tmp_path):
        """Test text vectors can be loaded back."""
        config = make_config(binary=False, output_file=str(tmp_path / "vectors.txt"))
        Trainer(config).train()

        store = EmbeddingStore.load(config.output_file, binary=False)
        assert store.words[0] == BOUNDARY_TOKEN

    def test_single_thread_deterministic(self, make_config, tmp_path):
        """Test identical single-thread runs give bit-identical vectors."""
        first = make_config(output_file=str(tmp_path / "a.bin"), sample=1e-2)
        second = make_config(output_file=str(tmp_path / "b.bin"), sample=1e-2)
        Trainer(first).train()
        Trainer(second).train()

        assert (tmp_path / "a.bin").read_bytes() == (tmp_path / "b.bin").read_bytes()

    def test_seed_changes_vectors(self, make_config, tmp_path):
        """Test a different seed gives different vectors."""
        Trainer(make_config(output_file=str(tmp_path / "a.bin"), seed=1)).train()
        Trainer(make_config(output_file=str(tmp_path / "b.bin"), seed=2)).train()

        assert (tmp_path / "a.bin").read_bytes() != (tmp_path / "b.bin").read_bytes()

    @pytest.mark.parametrize(
        "overrides",
        [
            {"cbow": False},
            {"hs": True, "negative": 0},
            {"hs": True, "negative": 2, "cbow": False},
            {"threads": 3},
            {"sample": 1e-3},
        ],
    )
    def test_configurations(self, make_config, overrides):
        """Test every architecture and output layer combination trains."""
        config = make_config(**overrides)
        stats = Trainer(config).train()
        store = EmbeddingStore.load(config.output_file)
        assert store.vocab_size == stats["vocab_size"]

    def test_word_classes(self, make_config, tmp_path):
        """Test classes > 0 writes class ids instead of vectors."""
        config = make_config(classes=3, output_file=str(tmp_path / "classes.txt"))
        trainer = Trainer(config)
        trainer.train()

        lines = (tmp_path / "classes.txt").read_text(encoding="utf-8").splitlines()
        assert len(lines) == len(trainer.vocab)
        for line in lines:
            word, class_id = line.split()
            assert 0 <= int(class_id) < 3

    def test_vocabulary_only(self, make_config, tmp_path):
        """Test no output file stops after saving the vocabulary."""
        vocab_path = tmp_path / "vocab.txt"
        config = make_config(output_file="", save_vocab_file=str(vocab_path))
        trainer = Trainer(config)
        stats = trainer.train()

        assert trainer.params is None
        assert stats["vocab_size"] == len(trainer.vocab)
        assert vocab_path.exists()
        assert not (tmp_path / "vectors.bin").exists()

    def test_read_vocabulary(self, make_config, tmp_path):
        """Test a saved vocabulary replaces counting the corpus."""
        vocab_path = tmp_path / "vocab.txt"
        Trainer(make_config(output_file="", save_vocab_file=str(vocab_path))).train()

        trainer = Trainer(make_config(read_vocab_file=str(vocab_path)))
        trainer.train()

        expected = Vocabulary.from_file(str(vocab_path), min_count=1, hash_size=1000)
        assert [e.word for e in trainer.vocab] == [e.word for e in expected]

    def test_missing_corpus(self, make_config, tmp_path):
        """Test a missing corpus aborts before any work."""
        config = make_config(train_file=str(tmp_path / "missing.txt"))
        with pytest.raises(FileNotFoundError):
            Trainer(config).train()
        assert not (tmp_path / "vectors.bin").exists()

    def test_invalid_config(self, make_config):
        """Test invalid options are rejected up front."""
        with pytest.raises(ValueError):
            Trainer(make_config(hs=False, negative=0))
        with pytest.raises(ValueError):
            Trainer(make_config(window=0))

    def test_worker_failure_is_fatal(self, make_config, monkeypatch, tmp_path):
        """Test a failing worker aborts the run without writing output."""

        def boom(self, sentence, position, reduced, alpha, rng):
            raise RuntimeError("boom")

        monkeypatch.setattr(CBOWModel, "train_position", boom)
        config = make_config(threads=2)

        with pytest.raises(TrainingError, match="boom") as exc_info:
            Trainer(config).train()

        assert isinstance(exc_info.value.__cause__, RuntimeError)
        assert not (tmp_path / "vectors.bin").exists()

    def test_tensorboard_logging(self, make_config, tmp_path):
        """Test TensorBoard event files are written when enabled."""
        log_dir = tmp_path / "tb"
        config = make_config(tensorboard=True, tensorboard_dir=str(log_dir))
        Trainer(config).train()

        event_files = list(log_dir.rglob("events.out.tfevents.*"))
        assert event_files
