"""Results export to a downloadable JSON file."""

from __future__ import annotations

import json
import logging
from pathlib import Path

logger = logging.getLogger(__name__)

EXPORT_FILENAME_TEMPLATE = "universal_profile_scraping_results_{timestamp}.json"


class JsonResultExporter:
    """Writes the results list as pretty-printed JSON into *export_dir*."""

    def __init__(self, export_dir: str | Path) -> None:
        self._export_dir = Path(export_dir)

    def export(self, results: list[dict], timestamp: int) -> Path:
        self._export_dir.mkdir(parents=True, exist_ok=True)
        path = self._export_dir / EXPORT_FILENAME_TEMPLATE.format(timestamp=timestamp)
        path.write_text(json.dumps(results, indent=2, default=str), encoding="utf-8")
        logger.info("Exported %d results to %s", len(results), path)
        return path
