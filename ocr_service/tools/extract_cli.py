#!/usr/bin/env python3
"""Run the OCR pipeline on a local image and print the JSON envelope.

Same output shape as POST /image/extract, without starting the server.

Examples:
  ocr-extract menu.jpg
  ocr-extract sign.png --type store          # needs OPENAI_API_KEY
  LOG_LEVEL=DEBUG ocr-extract receipt.jpg --indent 2
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import os
import sys
from typing import List, Optional

from ..config import Settings, resolve_engine_paths
from ..errors import ConfigurationError, ImageDecodeError, SemanticServiceError
from ..llm_client import ChatCompletionClient
from ..ocr import TextElement, make_pipeline
from ..ocr.engines import make_engine
from ..semantic import filter_elements


async def _filter(settings: Settings, kind: str, items: List[TextElement]) -> List[TextElement]:
    client = ChatCompletionClient.from_settings(settings)
    try:
        return await filter_elements(client, kind, items, settings.reconcile)
    finally:
        await client.aclose()


def main(argv: Optional[List[str]] = None) -> int:
    p = argparse.ArgumentParser(prog="ocr-extract")
    p.add_argument("image", help="Path to a PNG/JPEG/... image")
    p.add_argument("--type", dest="kind", choices=("store", "food"), default=None,
                   help="Narrow the result to store or food names via the language model")
    p.add_argument("--engine", default="tesseract", help="Recognition engine (default: tesseract)")
    p.add_argument("--indent", type=int, default=None, help="Pretty-print JSON with this indent")
    args = p.parse_args(argv)

    logging.basicConfig(level=(os.getenv("LOG_LEVEL") or "WARNING").upper())

    try:
        with open(args.image, "rb") as f:
            data = f.read()
    except OSError as e:
        print(f"Cannot read {args.image}: {e}", file=sys.stderr)
        return 2

    try:
        settings = resolve_engine_paths(Settings.from_env())
        pipeline = make_pipeline(settings, make_engine(settings, args.engine))
    except (ConfigurationError, ValueError) as e:
        print(str(e), file=sys.stderr)
        return 2

    try:
        items = pipeline.extract_text(data)
        if args.kind:
            items = asyncio.run(_filter(settings, args.kind, items))
    except ImageDecodeError as e:
        print(f"Invalid image: {e}", file=sys.stderr)
        return 1
    except SemanticServiceError as e:
        print(f"Category filtering failed: {e}", file=sys.stderr)
        return 1

    out = {
        "success": True,
        "text_list": [el.to_dict() for el in items],
        "total_count": len(items),
    }
    print(json.dumps(out, ensure_ascii=False, indent=args.indent))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
