"""Training CLI for word2vec."""

import json
import random
from typing import List, Optional

from classic_word2vec.cli_args import parse_train_args
from classic_word2vec.config import TrainConfig
from classic_word2vec.corpus import (
    generate_synthetic_texts,
    load_texts_from_hf,
    write_corpus,
)
from classic_word2vec.training import Trainer
from classic_word2vec.utils import set_seed


def create_train_config(args) -> TrainConfig:
    """Create training configuration from parsed arguments.

    Args:
        args: Parsed command line arguments

    Returns:
        Training configuration object
    """
    return TrainConfig(
        train_file=args.train or "",
        output_file=args.output,
        save_vocab_file=args.save_vocab,
        read_vocab_file=args.read_vocab,
        size=args.size,
        debug_mode=args.debug,
        binary=bool(args.binary),
        cbow=bool(args.cbow),
        alpha=args.alpha,
        sample=args.sample,
        hs=bool(args.hs),
        negative=args.negative,
        threads=args.threads,
        iterations=args.iterations,
        min_count=args.min_count,
        classes=args.classes,
        window=args.window,
        seed=args.seed,
        tensorboard=args.tensorboard,
        tensorboard_dir=args.tensorboard_dir,
        log_system_stats=args.log_system_stats,
    )


def prepare_corpus(args) -> None:
    """Write generated or downloaded text to ``args.train`` when requested.

    Args:
        args: Parsed command line arguments
    """
    if args.synthetic_sentences > 0:
        rng = random.Random(args.seed)
        texts = generate_synthetic_texts(
            args.synthetic_sentences, args.synthetic_vocab, rng
        )
        write_corpus(texts, args.train)
        print(f"Generated {len(texts)} synthetic sentences (vocab={args.synthetic_vocab}).")
        return

    if args.dataset:
        print("Loading dataset from Hugging Face...")
        texts = load_texts_from_hf(args.dataset, args.dataset_config, args.split)
        lines = write_corpus(texts, args.train)
        print(f"Wrote {lines} lines from HF dataset to {args.train}.")


def main(argv: Optional[List[str]] = None) -> None:
    """Main training function.

    Args:
        argv: Optional command line arguments
    """
    args = parse_train_args(argv)
    train_config = create_train_config(args)

    set_seed(args.seed)
    prepare_corpus(args)

    trainer = Trainer(train_config)
    train_stats = trainer.train()
    print(json.dumps(train_stats, indent=2))

    if train_config.output_file:
        print(f"Model saved to {train_config.output_file}")


if __name__ == "__main__":
    main()
