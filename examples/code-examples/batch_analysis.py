#!/usr/bin/env python3
"""
Analyze a batch of saved answers with a shared gazetteer cache.

This script demonstrates how to:
- Load the engine configuration
- Reuse one built gazetteer per catalog version across many answers
- Analyze answers concurrently (the engine is stateless)
- Collect newly observed competitor names for the catalog owner

Usage:
    python examples/code-examples/batch_analysis.py answers/ "best help desk software"
"""

import json
import sys
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

from brand_visibility import GazetteerCache, InputError, analyze_response
from brand_visibility.config.loader import load_config

CONFIG_PATH = Path(__file__).resolve().parent.parent / "engine.config.yaml"

# Bump whenever the stored catalog changes
CATALOG_VERSION = 1


def main(answers_dir: str, prompt_text: str) -> int:
    config = load_config(CONFIG_PATH)
    known = config.settings.classifier.resolved_known_competitors()

    cache = GazetteerCache()
    gazetteer = cache.get_or_build(
        config.org_name, CATALOG_VERSION, config.brand_catalog, config.org_name, known
    )

    answer_files = sorted(Path(answers_dir).glob("*.txt"))
    if not answer_files:
        print(f"No .txt answers found in {answers_dir}")
        return 1

    def analyze(path: Path) -> dict:
        try:
            result = analyze_response(
                path.read_text(encoding="utf-8"),
                prompt_text,
                config.org_name,
                config.brand_catalog,
                settings=config.settings,
                gazetteer=gazetteer,
                analysis_id=path.stem,
            )
        except InputError as e:
            return {"file": path.name, "skipped": str(e)}
        return {"file": path.name, **result.to_dict()}

    with ThreadPoolExecutor(max_workers=4) as pool:
        rows = list(pool.map(analyze, answer_files))

    new_names = sorted({name for row in rows for name in row.get("new_names", [])})
    scores = [row["score"] for row in rows if "score" in row]

    print(json.dumps(rows, indent=2))
    print(f"\nAnalyzed {len(scores)} answers, average score {sum(scores) / max(len(scores), 1):.2f}")
    if new_names:
        print(f"New competitor names to review: {', '.join(new_names)}")

    return 0


if __name__ == "__main__":
    if len(sys.argv) != 3:
        print(__doc__)
        sys.exit(2)
    sys.exit(main(sys.argv[1], sys.argv[2]))
