"""JSONL result files: download and line-by-line decoding."""

from __future__ import annotations

import json
import logging

import httpx

from relay.bulk.models import ParsedRecord
from relay.errors import Failure, Ok, Result

logger = logging.getLogger(__name__)


def parse_jsonl(text: str) -> list[ParsedRecord]:
    """Decode newline-delimited JSON, dropping lines that fail to decode.

    Empty objects are kept; they are placeholder rows the export emits and
    are filtered out later. Non-object values are dropped like bad lines.
    """
    records: list[ParsedRecord] = []
    for lineno, raw in enumerate(text.strip().split("\n"), start=1):
        line = raw.strip()
        if not line:
            continue
        try:
            value = json.loads(line)
        except json.JSONDecodeError as e:
            logger.warning("Skipping malformed JSONL line %d: %s (%s)", lineno, line[:200], e)
            continue
        if not isinstance(value, dict):
            logger.warning("Skipping non-object JSONL line %d: %s", lineno, line[:200])
            continue
        records.append(value)
    return records


async def download_jsonl(http: httpx.AsyncClient, url: str) -> Result[list[ParsedRecord]]:
    """Fetch a bulk operation result file and parse it.

    A non-2xx response is a Failure carrying the status code and reason.
    Transport exceptions propagate.
    """
    response = await http.get(url)
    if not response.is_success:
        return Failure(
            f"Failed to download JSONL file: {response.status_code} {response.reason_phrase}"
        )
    return Ok(parse_jsonl(response.text))
