#!/usr/bin/env python3
"""Download a single docket document part, buying it from PACER only when --buy is given."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

from pacerfetch.clients import HttpCourtApiClient
from pacerfetch.config import Settings
from pacerfetch.errors import CourtApiError
from pacerfetch.output import DownloadSink
from pacerfetch.types import DocketBinder
from pacerfetch.workflow import DocumentResolver

logger = logging.getLogger("download_document_part")


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("court", help="PACER court code, e.g. txnb")
    parser.add_argument("case_number", help="Case number, e.g. 21-12345")
    parser.add_argument("docket_seq", help="Docket entry sequence number")
    parser.add_argument("part_number", help="Document part number within the docket entry")
    parser.add_argument(
        "--buy",
        action="store_true",
        help="Purchase the part from PACER if CourtAPI does not have it yet (charges the PACER account)",
    )
    parser.add_argument(
        "--dest",
        type=Path,
        default=None,
        help="Download directory (defaults to COURTAPI_DOWNLOAD_DIR)",
    )
    parser.add_argument(
        "--base-url",
        dest="base_url",
        default=None,
        help="Override CourtAPI base URL",
    )
    return parser.parse_args()


async def download(args: argparse.Namespace, settings: Settings) -> int:
    binder = DocketBinder(args.court, args.case_number, args.docket_seq)
    sink = DownloadSink(args.dest or settings.download_dir)

    async with HttpCourtApiClient(
        args.base_url or settings.api_base_url,
        settings.api_key,
        settings.api_secret,
        timeout=settings.api_timeout,
        user_agent=settings.user_agent,
    ) as client:
        part = await client.get_part(binder, args.part_number)
        if part.stored is None and not args.buy:
            print("Document part has not been purchased; rerun with --buy", file=sys.stderr)
            print(json.dumps(dict(part.metadata), indent=2), file=sys.stderr)
            return 1

        resolved = part if part.downloadable else await DocumentResolver(client).resolve(binder, part)
        if not resolved.downloadable:
            print("Document part has no stored file", file=sys.stderr)
            return 1

        path = await sink.save(client.iter_download(resolved.stored.download_url), resolved.stored.filename)

    print(f"Saved {path}")
    return 0


def main() -> int:
    args = parse_args()
    settings = Settings()
    logging.basicConfig(
        level=settings.log_level.upper(), format="%(asctime)s %(levelname)s %(name)s %(message)s"
    )
    if not settings.api_key or not settings.api_secret:
        print("ERROR: COURTAPI_API_KEY and COURTAPI_API_SECRET are required", file=sys.stderr)
        return 2

    try:
        return asyncio.run(download(args, settings))
    except CourtApiError as exc:
        print(f"ERROR: {exc.status_code}", file=sys.stderr)
        print(exc.body_json(), file=sys.stderr)
        return 1
    except Exception:
        logger.exception("Document part download failed")
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
