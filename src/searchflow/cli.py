# cli.py
from __future__ import annotations

import argparse
import json
import sys
from typing import List, Optional

import yaml

from searchflow.config import default_config, load_config
from searchflow.core.errors import ConfigError
from searchflow.tools.search_tool import WebSearchTool
from searchflow.utils.log_util import get_logger, log_config


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser("searchflow", description="Search the web through SearxNG and optionally summarize each result page")
    p.add_argument("query", type=str, help="Search query, e.g. 'rust ownership site:doc.rust-lang.org'")
    p.add_argument("--config", type=str, default=None, help="Path to a JSON/YAML config file")
    p.add_argument("--searxng-url", type=str, default=None, help="Base URL of the SearxNG instance (overrides search.base_url)")
    p.add_argument("--limit", type=int, default=None, help="Maximum number of results (default: search.default_limit)")
    p.add_argument("--summary", action="store_true", help="Summarize each result page with the configured LLM")
    p.add_argument("--max-summary-tokens", type=int, default=None, help="Target summary length in tokens")
    p.add_argument("--debug", action="store_true", help="Enable debug output with timing information")
    return p.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    try:
        config = load_config(args.config) if args.config else default_config()
    except (OSError, ValueError, yaml.YAMLError) as e:
        print(f"error: failed to load config {args.config}: {e}", file=sys.stderr)
        return 1
    if args.searxng_url:
        config["search"]["base_url"] = args.searxng_url
    if args.debug:
        config["logging"]["level"] = "DEBUG"
    if not config["search"]["base_url"]:
        print("error: --searxng-url (or search.base_url in the config) is required", file=sys.stderr)
        return 1

    logger = get_logger(config, "searchflow")
    if args.debug:
        log_config(logger, config)
    try:
        tool = WebSearchTool(config, logger=logger)
    except ConfigError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1

    payload = tool.call({
        "query": args.query,
        "limit": args.limit,
        "summary": True if args.summary else None,
        "maxSummaryTokens": args.max_summary_tokens,
    })
    if payload["is_error"]:
        print(f"error: {payload['message']}", file=sys.stderr)
        return 1
    print(json.dumps(payload["results"], ensure_ascii=False, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
