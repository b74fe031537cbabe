"""Command-line helper for generating listing copy without the web server.

This utility mirrors the HTTP workflow:

1. Normalise the listing JSON (same defaults as ``POST /api/ai/describe``).
2. Show the prompt that would be sent to the provider (``--show-prompt``).
3. Ask the provider for copy, falling back to template text when it is
   unavailable, and print the resulting payload.

Example usage::

    python describe_workflow.py --input listing.json
    python describe_workflow.py --input listing.json --output out/copy.json --show-prompt
"""
from __future__ import annotations

import argparse
import json
from pathlib import Path
from typing import Any, Dict

from app.config import get_settings
from app.services.composer import describe_listing
from app.services.normalizer import normalise_listing
from app.services.prompts import build_system_prompt, build_user_prompt


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Generate marketing copy for a property listing")
    parser.add_argument(
        "--input",
        type=Path,
        required=True,
        help="Path to the JSON file containing the listing (same shape as the HTTP body)",
    )
    parser.add_argument(
        "--output",
        type=Path,
        help="Write the generated payload to this JSON file as well",
    )
    parser.add_argument(
        "--show-prompt",
        action="store_true",
        help="Print the system and user prompt before generating",
    )
    return parser.parse_args(argv)


def load_configuration(path: Path) -> Dict[str, Any]:
    if not path.exists():
        raise FileNotFoundError(f"Listing file not found: {path}")
    with path.open("r", encoding="utf-8") as handle:
        data = json.load(handle)
    return data if isinstance(data, dict) else {}


def main(argv: list[str] | None = None) -> Dict[str, Any]:
    args = parse_args(argv)
    settings = get_settings()
    raw = load_configuration(args.input)

    if args.show_prompt:
        listing = normalise_listing(raw, settings)
        print("=== System prompt ===")
        print(build_system_prompt(listing))
        print("\n=== User prompt ===")
        print(build_user_prompt(listing))
        print()

    payload = describe_listing(raw, settings).model_dump(exclude_none=True)
    rendered = json.dumps(payload, ensure_ascii=False, indent=2)
    print(rendered)

    if args.output:
        args.output.parent.mkdir(parents=True, exist_ok=True)
        args.output.write_text(rendered, encoding="utf-8")
        print(f"\nSaved to: {args.output.resolve()}")
    return payload


if __name__ == "__main__":
    main()
