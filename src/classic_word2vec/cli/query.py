"""Query CLI for trained word vectors."""

import json
from typing import List, Optional

from classic_word2vec.cli_args import parse_query_args
from classic_word2vec.query import NeedThreeWordsError, OutOfVocabularyError, QueryEngine
from classic_word2vec.store import EmbeddingStore


def run_query(engine: QueryEngine, args) -> dict:
    """Run the query selected on the command line.

    Args:
        engine: Query engine over the loaded store
        args: Parsed command line arguments

    Returns:
        Dictionary with query results or error information
    """
    try:
        if args.word is not None:
            neighbors = engine.distance(args.word, args.topn)
            return {"word": args.word, "neighbors": neighbors}
        neighbors = engine.analogy_from_text(args.analogy, args.topn)
        return {"analogy": args.analogy.split()[:3], "neighbors": neighbors}
    except (OutOfVocabularyError, NeedThreeWordsError) as e:
        return {"error": str(e)}


def main(argv: Optional[List[str]] = None) -> None:
    """Main query function.

    Args:
        argv: Optional command line arguments
    """
    args = parse_query_args(argv)

    try:
        binary = None if args.binary is None else bool(args.binary)
        store = EmbeddingStore.load(args.model, binary=binary)
    except (FileNotFoundError, ValueError) as e:
        print(json.dumps({"error": str(e)}))
        return

    result = run_query(QueryEngine(store), args)
    print(json.dumps(result, indent=2))


if __name__ == "__main__":
    main()
