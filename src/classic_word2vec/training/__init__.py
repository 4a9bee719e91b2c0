"""Multi-threaded Hogwild trainer."""

import math
import os
import threading
import time
from typing import Dict, List, Optional

import numpy as np
from tqdm import tqdm

from classic_word2vec.config import MAX_SENTENCE_LENGTH, TrainConfig
from classic_word2vec.corpus import iter_words, require_file, shard_offsets
from classic_word2vec.hierarchical_softmax import HuffmanTree
from classic_word2vec.models import (
    CBOWModel,
    ParameterMatrices,
    SigmoidTable,
    SkipGramModel,
    Word2VecBase,
)
from classic_word2vec.negative_sampling import UnigramTable
from classic_word2vec.utils import LinearCongruentialGenerator, export_model
from classic_word2vec.vocabulary import Vocabulary

# Words a worker processes between publishing progress
PROGRESS_INTERVAL = 10000

# Learning rate never decays below this share of the starting rate
MIN_ALPHA_RATIO = 1e-4


class TrainingError(RuntimeError):
    """Raised when any training worker fails."""


def keep_probability(count: int, sample: float, train_words: int) -> float:
    """Probability that subsampling keeps one occurrence of a word.

    Args:
        count: Corpus frequency of the word
        sample: Subsampling threshold (0 disables subsampling)
        train_words: Total words in the corpus

    Returns:
        Keep probability, capped at 1
    """
    if sample <= 0 or count <= 0:
        return 1.0
    threshold = sample * train_words
    return min(1.0, (math.sqrt(count / threshold) + 1) * threshold / count)


class SharedCounter:
    """Processed-word counter shared by all workers."""

    def __init__(self):
        self._value = 0
        self._lock = threading.Lock()

    def add(self, amount: int) -> int:
        with self._lock:
            self._value += amount
            return self._value

    @property
    def value(self) -> int:
        return self._value


class TrainingContext:
    """State shared by every worker of one training run.

    ``alpha`` is rewritten by whichever worker last published progress and
    read by all of them without synchronization, so a worker may briefly
    train with a stale rate.
    """

    def __init__(
        self,
        config: TrainConfig,
        vocab: Vocabulary,
        params: ParameterMatrices,
        sigmoid: SigmoidTable,
        table: Optional[UnigramTable],
        file_size: int,
    ):
        self.config = config
        self.vocab = vocab
        self.params = params
        self.sigmoid = sigmoid
        self.table = table
        self.file_size = file_size
        self.starting_alpha = config.starting_alpha
        self.alpha = self.starting_alpha
        self.word_count_actual = SharedCounter()
        self.total_words = config.iterations * vocab.train_words
        self.keep = np.array(
            [
                keep_probability(entry.count, config.sample, vocab.train_words)
                for entry in vocab.words
            ]
        )

    def report_progress(self, words: int) -> None:
        """Publish processed words and decay the learning rate."""
        processed = self.word_count_actual.add(words)
        alpha = self.starting_alpha * (1 - processed / (self.total_words + 1))
        self.alpha = max(alpha, self.starting_alpha * MIN_ALPHA_RATIO)

    @property
    def progress(self) -> float:
        return self.word_count_actual.value / (self.total_words + 1)


class TrainingWorker:
    """Trains on one contiguous byte range of the corpus."""

    def __init__(self, ctx: TrainingContext, worker_id: int):
        config = ctx.config
        self.ctx = ctx
        self.worker_id = worker_id
        self.start = shard_offsets(ctx.file_size, config.threads)[worker_id]
        self.word_budget = ctx.vocab.train_words / config.threads
        self.rng = LinearCongruentialGenerator(config.seed + worker_id)
        model_cls = CBOWModel if config.cbow else SkipGramModel
        self.model: Word2VecBase = model_cls(
            ctx.params,
            ctx.vocab,
            config.window,
            config.negative,
            ctx.sigmoid,
            ctx.table,
        )
        self.error: Optional[BaseException] = None

    def run(self) -> None:
        """Repeat the shard for the configured number of iterations."""
        with open(self.ctx.config.train_file, "rb") as f:
            for _ in range(self.ctx.config.iterations):
                self._train_pass(f)

    def run_captured(self) -> None:
        """Thread target; keeps the failure for the coordinator to raise."""
        try:
            self.run()
        except Exception as e:
            self.error = e

    def _train_pass(self, f) -> None:
        ctx = self.ctx
        vocab = ctx.vocab
        subsample = ctx.config.sample > 0

        f.seek(self.start)
        word_count = 0
        last_word_count = 0
        sentence: List[int] = []

        for token in iter_words(f):
            if word_count - last_word_count > PROGRESS_INTERVAL:
                ctx.report_progress(word_count - last_word_count)
                last_word_count = word_count

            index = vocab.search(token)
            if index is None:
                continue
            word_count += 1

            if index != 0:
                # Subsampling randomly discards frequent words
                if subsample and ctx.keep[index] < self.rng.uniform():
                    continue
                sentence.append(index)
                if len(sentence) < MAX_SENTENCE_LENGTH:
                    continue

            self._train_sentence(sentence)
            sentence = []
            if word_count > self.word_budget:
                break
        else:
            self._train_sentence(sentence)

        ctx.report_progress(word_count - last_word_count)

    def _train_sentence(self, sentence: List[int]) -> None:
        window = self.ctx.config.window
        for position in range(len(sentence)):
            reduced = self.rng.next() % window
            self.model.train_position(sentence, position, reduced, self.ctx.alpha, self.rng)


class Trainer:
    """Builds the vocabulary, runs the workers and writes the model."""

    def __init__(self, config: TrainConfig):
        """Initialize trainer.

        Args:
            config: Training configuration

        Raises:
            ValueError: If the configuration is invalid
        """
        config.validate()
        self.config = config
        self.vocab: Optional[Vocabulary] = None
        self.params: Optional[ParameterMatrices] = None
        self.tree: Optional[HuffmanTree] = None
        self.table: Optional[UnigramTable] = None

        self.tb_logger = None
        if config.tensorboard:
            from classic_word2vec.utils.tensorboard_logger import TensorBoardLogger

            experiment_name = (
                f"{config.model_type}_d{config.size}_w{config.window}"
                f"_hs{int(config.hs)}_neg{config.negative}"
            )
            self.tb_logger = TensorBoardLogger(
                log_dir=config.tensorboard_dir,
                log_system_stats=config.log_system_stats,
                experiment_name=experiment_name,
            )

    def build_vocabulary(self) -> Vocabulary:
        """Read or learn the vocabulary and save it if requested."""
        config = self.config
        if config.read_vocab_file:
            vocab = Vocabulary.from_file(
                config.read_vocab_file,
                config.min_count,
                config.vocab_hash_size,
                config.debug_mode,
            )
        else:
            vocab = Vocabulary.from_corpus(
                config.train_file,
                config.min_count,
                config.vocab_hash_size,
                config.debug_mode,
            )
        if config.save_vocab_file:
            vocab.save_to_file(config.save_vocab_file)
        self.vocab = vocab
        return vocab

    def _init_net(self) -> TrainingContext:
        config = self.config
        vocab = self.vocab
        self.params = ParameterMatrices(
            len(vocab), config.size, config.hs, config.negative, config.seed
        )
        self.tree = HuffmanTree.from_vocabulary(vocab)
        if config.negative > 0:
            self.table = UnigramTable(
                [entry.count for entry in vocab.words], config.unigram_table_size
            )
        return TrainingContext(
            config,
            vocab,
            self.params,
            SigmoidTable(),
            self.table,
            os.path.getsize(config.train_file),
        )

    def _run_workers(self, ctx: TrainingContext) -> None:
        config = self.config
        workers = [TrainingWorker(ctx, worker_id) for worker_id in range(config.threads)]
        threads = [
            threading.Thread(target=worker.run_captured, name=f"word2vec-{worker.worker_id}")
            for worker in workers
        ]

        start_time = time.perf_counter()
        for thread in threads:
            thread.start()

        pbar = tqdm(
            total=ctx.total_words,
            desc="Training",
            unit="word",
            disable=config.debug_mode < 2,
        )
        while any(thread.is_alive() for thread in threads):
            for thread in threads:
                thread.join(timeout=0.1)
            processed = ctx.word_count_actual.value
            elapsed = max(time.perf_counter() - start_time, 1e-9)
            pbar.update(processed - pbar.n)
            pbar.set_postfix(
                {
                    "alpha": f"{ctx.alpha:.6f}",
                    "words/thread/sec": f"{processed / elapsed / config.threads / 1000:.2f}K",
                }
            )
            if self.tb_logger is not None:
                self.tb_logger.log_training_metrics(
                    processed, ctx.alpha, ctx.progress, processed / elapsed
                )
                self.tb_logger.log_system_stats(processed)
        pbar.close()

        failures = [worker for worker in workers if worker.error is not None]
        if failures:
            first = failures[0]
            raise TrainingError(
                f"{len(failures)} of {len(workers)} training workers failed; "
                f"worker {first.worker_id}: {first.error!r}"
            ) from first.error

    def train(self) -> Dict[str, float]:
        """Run the full pipeline.

        Returns:
            Dictionary with training statistics

        Raises:
            FileNotFoundError: If the corpus or vocabulary file is missing
            TrainingError: If any worker fails
        """
        config = self.config
        if config.debug_mode > 0:
            print(f"Starting training using file {config.train_file}")
        if not config.read_vocab_file or config.output_file:
            require_file(config.train_file, "Training data")

        vocab = self.build_vocabulary()
        if not config.output_file:
            return {"vocab_size": len(vocab), "train_words": vocab.train_words}

        ctx = self._init_net()
        start_time = time.perf_counter()
        self._run_workers(ctx)
        total_time = time.perf_counter() - start_time

        export_model(
            config.output_file,
            [entry.word for entry in vocab.words],
            self.params.syn0,
            binary=config.binary,
            classes=config.classes,
        )

        processed = ctx.word_count_actual.value
        final_metrics = {
            "vocab_size": len(vocab),
            "train_words": vocab.train_words,
            "words_processed": processed,
            "time_sec": total_time,
            "words_per_sec": processed / max(total_time, 1e-9),
            "final_alpha": ctx.alpha,
        }

        if self.tb_logger is not None:
            self.tb_logger.log_embedding_analysis(self.params.in_embeddings, processed)
            hparams = {
                "model_type": config.model_type,
                "size": config.size,
                "window": config.window,
                "alpha": ctx.starting_alpha,
                "sample": config.sample,
                "hs": config.hs,
                "negative": config.negative,
                "threads": config.threads,
                "iterations": config.iterations,
                "min_count": config.min_count,
            }
            self.tb_logger.log_hyperparameters(
                hparams, {"final/words_per_sec": final_metrics["words_per_sec"]}
            )
            self.tb_logger.close()

        return final_metrics


__all__ = [
    "Trainer",
    "TrainingContext",
    "TrainingWorker",
    "TrainingError",
    "SharedCounter",
    "keep_probability",
]
