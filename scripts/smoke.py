# scripts/smoke.py
"""
Smoke Test Script for the FOSS Glossary pipeline.

Usage
-----
1. Run against the bundled sample source:
    $ uv run python scripts/smoke.py

2. Run against a local glossary:
    $ uv run python scripts/smoke.py --file terms.yaml

The artifact is written to a temporary directory, never over `docs/terms.json`.
"""

import argparse
import json
import logging
import sys
import tempfile
from pathlib import Path

from dotenv import load_dotenv

from fossglossary.core.scoring import rank_terms
from fossglossary.core.vcs import get_revision
from fossglossary.pipelines.glossary import run_pipeline

# --------------------------------------------------------------------------- #
# Environment Setup
# --------------------------------------------------------------------------- #
env_path = Path(".env")
if env_path.exists():
    load_dotenv(env_path)
    print("✅ Loaded .env file")

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)

DEFAULT_SOURCE = Path(__file__).resolve().parent.parent / "samples" / "terms.yaml"


def main() -> None:
    """Execute the smoke test workflow."""
    parser = argparse.ArgumentParser(description="Run FOSS Glossary Smoke Test")
    parser.add_argument("--file", "-f", type=str, help="Path to a terms.yaml source")
    args = parser.parse_args()

    # 1. Prepare Input Data
    source = Path(args.file) if args.file else DEFAULT_SOURCE
    if not source.exists():
        print(f"❌ File not found: {source}")
        return
    print(f"\n📂 Using source: {source}")

    # 2. Execution Phase
    with tempfile.TemporaryDirectory() as tmp:
        out_path = Path(tmp) / "terms.json"
        print("... Invoking run_pipeline() ...")
        result = run_pipeline(source, out_path, version=get_revision(), pretty=True)

        if result.is_err():
            failure = result.unwrap_err()
            print(f"\n❌ Pipeline failed: {failure.kind}")
            for line in failure.render():
                print(f"  - {line}")
            return

        # 3. Inspection Phase
        print("\n" + "=" * 60)
        print("✅ Pipeline Finished Successfully!")
        print("=" * 60)

        payload = result.unwrap()
        outcome = payload["export"]
        artifact = json.loads(out_path.read_text(encoding="utf-8"))
        print(f"\n📦 Version: {artifact['version']} ({artifact['generated_at']})")
        print(f"📄 Terms exported: {artifact['terms_count']} ({outcome.size_bytes} bytes)")

        print("\n🏆 Leaderboard:")
        for entry in rank_terms(payload["snapshot"].terms):
            badges = ", ".join(entry.card.badges) or "-"
            print(f"  {entry.rank}. {entry.term.term}: {entry.card.total} [{badges}]")

        redirects = payload["snapshot"].redirects
        if redirects:
            print("\n↪️  Redirects:")
            for old, new in redirects.items():
                print(f"  - {old} → {payload['index'].resolve_slug(new)}")


if __name__ == "__main__":
    main()
