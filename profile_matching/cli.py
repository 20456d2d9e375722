import argparse
import asyncio
import json
import logging
import os
import sys
from pathlib import Path

from dotenv import load_dotenv

PROJECT_ROOT = Path(__file__).resolve().parent.parent


def local_dev():
    os.chdir(PROJECT_ROOT)
    os.environ.setdefault("DAGSTER_HOME", str(PROJECT_ROOT))
    os.execvp(
        sys.executable,
        [sys.executable, "-m", "dagster", "dev", "-m", "profile_matching.definitions"]
        + sys.argv[1:],
    )


def match():
    """Print diversified matches for one profile as JSON, without going through Dagster."""
    from profile_matching.matching import MatchEngine, ProfileNotFoundError
    from profile_matching.resources import (
        EmbeddingResource,
        OpenRouterResource,
        ProfileStoreResource,
    )

    parser = argparse.ArgumentParser(description="Rank matches for a profile")
    parser.add_argument("profile_id")
    parser.add_argument("--topk", type=int, default=10)
    parser.add_argument("--offline", action="store_true", help="Use hash embeddings only")
    args = parser.parse_args()

    load_dotenv()
    logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")

    engine = MatchEngine(
        repository=ProfileStoreResource(),
        embedder=EmbeddingResource(
            openrouter=OpenRouterResource(track_costs=False),
            remote_enabled=not args.offline,
        ),
    )
    try:
        matches = asyncio.run(engine.get_matches(args.profile_id, args.topk))
    except ProfileNotFoundError as exc:
        print(json.dumps({"message": str(exc)}), file=sys.stderr)
        sys.exit(1)

    print(json.dumps({"query": args.profile_id, "results": [m.to_dict() for m in matches]}, indent=2))
