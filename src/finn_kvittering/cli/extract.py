from __future__ import annotations

import argparse
import json
from pathlib import Path
from typing import Optional, Sequence

from finn_kvittering.errors import InvalidUrlError
from finn_kvittering.models import ParseUrlResponse
from finn_kvittering.services.extraction import DebugSink, extract_listing
from finn_kvittering.services.fetcher import validate_url
from finn_kvittering.utils.log import setup_logging


def file_sink(path: Path) -> DebugSink:
    """Debug sink writing the fetched markup to ``path``."""

    def write(url: str, html: str) -> None:
        path.write_text(html, encoding="utf-8")

    return write


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Extract voucher fields from a Finn.no listing")
    parser.add_argument("url", help="Listing URL on finn.no")
    parser.add_argument("--timeout", type=float, default=None, help="Fetch timeout in seconds")
    parser.add_argument("--dump-html", type=Path, default=None, help="Write the fetched HTML to this file")
    args = parser.parse_args(argv)

    setup_logging()
    try:
        validate_url(args.url)
    except InvalidUrlError as e:
        print(json.dumps(ParseUrlResponse(success=False, error=str(e)).body(), ensure_ascii=False))
        return 2

    sink = file_sink(args.dump_html) if args.dump_html else None
    outcome = extract_listing(args.url, timeout=args.timeout, debug_sink=sink)
    response = ParseUrlResponse(success=True, data=outcome.result, warnings=outcome.warnings)
    print(json.dumps(response.body(), ensure_ascii=False, indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
