"""Command line argument parsing utilities."""

import argparse
from typing import Optional, List

from classic_word2vec.config import (
    DEFAULT_DEBUG_MODE,
    DEFAULT_EMBEDDING_DIM,
    DEFAULT_ITERATIONS,
    DEFAULT_MIN_COUNT,
    DEFAULT_NEGATIVE,
    DEFAULT_SAMPLE,
    DEFAULT_SEED,
    DEFAULT_THREADS,
    DEFAULT_TOP_N,
    DEFAULT_WINDOW_SIZE,
)


class ArgumentParser:
    """Centralized argument parser for word2vec CLI tools."""

    @staticmethod
    def create_train_parser() -> argparse.ArgumentParser:
        """Create argument parser for training CLI.

        Returns:
            Configured argument parser
        """
        parser = argparse.ArgumentParser(
            description="Train word vectors with CBOW or skip-gram"
        )

        ArgumentParser._add_data_args(parser)
        ArgumentParser._add_model_args(parser)
        ArgumentParser._add_training_args(parser)
        ArgumentParser._add_output_args(parser)

        return parser

    @staticmethod
    def create_query_parser() -> argparse.ArgumentParser:
        """Create argument parser for query CLI.

        Returns:
            Configured argument parser
        """
        parser = argparse.ArgumentParser(
            description="Query trained word vectors for nearest neighbors and analogies"
        )

        parser.add_argument(
            "--model",
            type=str,
            required=True,
            help="Path to a model file written by classic-word2vec-train",
        )
        parser.add_argument(
            "--binary",
            type=int,
            default=None,
            choices=[0, 1],
            help="Model vectors are stored as float32 bytes (1) or text (0); detected when omitted",
        )

        query_group = parser.add_mutually_exclusive_group(required=True)
        query_group.add_argument("--word", type=str, help="Query word")
        query_group.add_argument(
            "--analogy",
            type=str,
            help='Three words "A B C": find D such that A is to B as C is to D',
        )

        parser.add_argument(
            "--topn",
            type=int,
            default=DEFAULT_TOP_N,
            help="Number of closest words to return",
        )

        return parser

    @staticmethod
    def _add_data_args(parser: argparse.ArgumentParser) -> None:
        """Add data-related arguments."""
        data_group = parser.add_argument_group("Data Options")

        data_group.add_argument(
            "--train",
            type=str,
            help="Text corpus to train on; also the destination for --dataset "
            "or --synthetic-sentences text",
        )
        data_group.add_argument(
            "--dataset",
            type=str,
            help="HF dataset name to export as the training corpus",
        )
        data_group.add_argument(
            "--dataset-config",
            type=str,
            help="HF dataset config",
        )
        data_group.add_argument(
            "--split", type=str, default="train", help="HF dataset split slice"
        )
        data_group.add_argument(
            "--synthetic-sentences",
            type=int,
            default=0,
            help="Generate N synthetic sentences for benchmarking",
        )
        data_group.add_argument(
            "--synthetic-vocab",
            type=int,
            default=1000,
            help="Synthetic vocab size",
        )
        data_group.add_argument(
            "--read-vocab",
            type=str,
            default="",
            help="Read the vocabulary from this file instead of the corpus",
        )

    @staticmethod
    def _add_model_args(parser: argparse.ArgumentParser) -> None:
        """Add model-related arguments."""
        model_group = parser.add_argument_group("Model Configuration")

        model_group.add_argument(
            "--size",
            type=int,
            default=DEFAULT_EMBEDDING_DIM,
            help="Dimension of the word vectors",
        )
        model_group.add_argument(
            "--window",
            type=int,
            default=DEFAULT_WINDOW_SIZE,
            help="Max skip length between words",
        )
        model_group.add_argument(
            "--cbow",
            type=int,
            default=1,
            choices=[0, 1],
            help="Use continuous bag of words (1) or skip-gram (0)",
        )
        model_group.add_argument(
            "--hs",
            type=int,
            default=0,
            choices=[0, 1],
            help="Use hierarchical softmax",
        )
        model_group.add_argument(
            "--negative",
            type=int,
            default=DEFAULT_NEGATIVE,
            help="Number of negative examples (0 disables negative sampling)",
        )
        model_group.add_argument(
            "--sample",
            type=float,
            default=DEFAULT_SAMPLE,
            help="Threshold for downsampling frequent words (0 disables)",
        )
        model_group.add_argument(
            "--min-count",
            type=int,
            default=DEFAULT_MIN_COUNT,
            help="Discard words that appear less than this many times",
        )

    @staticmethod
    def _add_training_args(parser: argparse.ArgumentParser) -> None:
        """Add training-related arguments."""
        train_group = parser.add_argument_group("Training Configuration")

        train_group.add_argument(
            "--alpha",
            type=float,
            help="Starting learning rate (default 0.05 for CBOW, 0.025 for skip-gram)",
        )
        train_group.add_argument(
            "--threads",
            type=int,
            default=DEFAULT_THREADS,
            help="Number of worker threads",
        )
        train_group.add_argument(
            "--iter",
            type=int,
            default=DEFAULT_ITERATIONS,
            dest="iterations",
            help="Training iterations over the corpus",
        )
        train_group.add_argument(
            "--seed",
            type=int,
            default=DEFAULT_SEED,
            help="Random seed for reproducibility",
        )

        # TensorBoard logging options
        tensorboard_group = parser.add_argument_group("TensorBoard Logging")
        tensorboard_group.add_argument(
            "--tensorboard", action="store_true", help="Enable TensorBoard logging"
        )
        tensorboard_group.add_argument(
            "--tensorboard-dir",
            type=str,
            default="runs/tensorboard",
            help="TensorBoard log directory",
        )
        tensorboard_group.add_argument(
            "--log-system-stats",
            action="store_true",
            help="Log system statistics (CPU, memory) to TensorBoard",
        )

    @staticmethod
    def _add_output_args(parser: argparse.ArgumentParser) -> None:
        """Add output-related arguments."""
        output_group = parser.add_argument_group("Output Options")

        output_group.add_argument(
            "--output",
            type=str,
            default="",
            help="File for the word vectors or classes; omit to only build the vocabulary",
        )
        output_group.add_argument(
            "--save-vocab",
            type=str,
            default="",
            help="Save the vocabulary to this file",
        )
        output_group.add_argument(
            "--binary",
            type=int,
            default=0,
            choices=[0, 1],
            help="Save vectors as float32 bytes (1) or text (0)",
        )
        output_group.add_argument(
            "--classes",
            type=int,
            default=0,
            help="Output k-means word classes instead of vectors",
        )
        output_group.add_argument(
            "--debug",
            type=int,
            default=DEFAULT_DEBUG_MODE,
            help="Verbosity (0 silent, 1 summary, 2 progress)",
        )


def parse_train_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse training command line arguments.

    Args:
        argv: Optional command line arguments

    Returns:
        Parsed arguments namespace
    """
    parser = ArgumentParser.create_train_parser()
    args = parser.parse_args(argv)
    if not args.train and not args.read_vocab:
        parser.error("--train or --read-vocab is required")
    if (args.dataset or args.synthetic_sentences > 0) and not args.train:
        parser.error("--train is required as the destination for generated text")
    return args


def parse_query_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse query command line arguments.

    Args:
        argv: Optional command line arguments

    Returns:
        Parsed arguments namespace
    """
    parser = ArgumentParser.create_query_parser()
    return parser.parse_args(argv)
