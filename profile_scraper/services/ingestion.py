"""Profile list ingestion from uploaded files.

Supported formats, chosen by file extension:

- ``.json``: an array of records, or an object holding one under
  ``profiles`` or ``data``
- ``.csv``: header row plus data rows; short rows are padded with ``""``
- anything else: one identifier per line, each becoming ``{"profileId": line}``
"""

from __future__ import annotations

import csv
import io
import json
from typing import Any

from profile_scraper.middleware.error_handler import MalformedProfileInputError


def coerce_profile_list(data: Any) -> list[dict]:
    """Validate a decoded profile document and return its records.

    Raises
    ------
    MalformedProfileInputError
        If *data* is neither a list nor an object with a ``profiles`` /
        ``data`` list, or if any entry is not an object.
    """
    if isinstance(data, list):
        profiles = data
    elif isinstance(data, dict) and isinstance(data.get("profiles"), list):
        profiles = data["profiles"]
    elif isinstance(data, dict) and isinstance(data.get("data"), list):
        profiles = data["data"]
    else:
        raise MalformedProfileInputError()

    if not all(isinstance(p, dict) for p in profiles):
        raise MalformedProfileInputError("Every profile entry must be an object")
    return list(profiles)


def parse_json_profiles(text: str) -> list[dict]:
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise MalformedProfileInputError(f"Invalid JSON profile file: {exc.msg}") from exc
    return coerce_profile_list(data)


def parse_csv_profiles(text: str) -> list[dict]:
    lines = [line for line in text.splitlines() if line.strip()]
    if not lines:
        return []

    reader = csv.reader(io.StringIO("\n".join(lines)))
    headers = [h.strip() for h in next(reader)]
    profiles: list[dict] = []
    for row in reader:
        values = [v.strip() for v in row]
        profiles.append({
            header: values[i] if i < len(values) else ""
            for i, header in enumerate(headers)
        })
    return profiles


def parse_text_profiles(text: str) -> list[dict]:
    return [{"profileId": line.strip()} for line in text.splitlines() if line.strip()]


def parse_profiles(text: str, filename: str) -> list[dict]:
    """Parse an uploaded profile file based on its extension."""
    name = filename.lower()
    if name.endswith(".json"):
        return parse_json_profiles(text)
    if name.endswith(".csv"):
        return parse_csv_profiles(text)
    return parse_text_profiles(text)
