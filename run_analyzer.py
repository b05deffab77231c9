"""Convenience script for analysing web pages from the command line."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Sequence

# Ensure the src directory is on the Python path so the webanalyzer package can be imported
SRC_PATH = Path(__file__).resolve().parent / "src"
if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))

from webanalyzer.config import AnalyzerConfig  # noqa: E402  (import after path setup)
from webanalyzer.errors import AnalysisError  # noqa: E402
from webanalyzer.services.analyzer import WebsiteAnalyzer  # noqa: E402
from webanalyzer.storage import create_store  # noqa: E402


def _parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Summarise web pages and print the results as JSON.")
    parser.add_argument("urls", nargs="+", metavar="URL", help="Page(s) to analyse")
    parser.add_argument("--config", type=Path, default=None, help="Path to a JSON configuration file")
    parser.add_argument(
        "--store",
        type=Path,
        default=None,
        help="JSON file used to cache analyses between runs (overrides the configuration)",
    )
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> int:
    """Analyse each URL given on the command line and print the results."""

    logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")
    args = _parse_args(argv)

    try:
        base = AnalyzerConfig.from_file(args.config) if args.config else None
        config = AnalyzerConfig.from_env(base)
    except (FileNotFoundError, ValueError) as exc:
        logging.error("Could not load configuration: %s", exc)
        return 1

    if args.store is not None:
        config = config.model_copy(update={"store_path": args.store})

    analyzer = WebsiteAnalyzer(config, create_store(config))

    results: List[dict] = []
    failed = False
    try:
        for url in args.urls:
            try:
                response = analyzer.analyze(url)
            except AnalysisError as exc:
                logging.error("Failed to analyse %s: %s", url, exc.message)
                results.append({"url": url, **exc.to_dict()})
                failed = True
                continue
            results.append(response.model_dump(mode="json", by_alias=True, exclude_none=True))
    finally:
        analyzer.close()

    print(json.dumps(results, indent=2, ensure_ascii=False))
    return 1 if failed else 0


if __name__ == "__main__":
    sys.exit(main())
