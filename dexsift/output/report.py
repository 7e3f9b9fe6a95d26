"""
dexsift Report Generator
=========================

Writes discovery results to disk:

* a plain-text test list, one identifier per line, sorted -- the input
  format expected by test sharding and instrumentation runners;
* a structured JSON report for machine consumption.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from dexsift.core.models import DiscoveryResult


class SiftReportGenerator:
    """Serialises a :class:`DiscoveryResult`."""

    def write_test_list(self, result: DiscoveryResult, output_path: str | Path) -> str:
        """Write the test identifiers, one per line.

        Returns:
            The absolute path of the written file.
        """
        path = Path(output_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        lines = "".join(f"{test}\n" for test in sorted(result.tests))
        path.write_text(lines, encoding="utf-8")
        return str(path.resolve())

    def build_json(self, result: DiscoveryResult) -> dict[str, Any]:
        return {
            "report_type": "dexsift_junit3_discovery",
            "version": "1.0.0",
            "generated_at": datetime.now(timezone.utc).isoformat(),
            "test_count": result.test_count,
            "tests_by_class": result.tests_by_class(),
            **result.model_dump(mode="json"),
        }

    def generate_json(self, result: DiscoveryResult, output_path: str | Path) -> str:
        """Write the JSON report.

        Returns:
            The absolute path of the written file.
        """
        path = Path(output_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as fh:
            json.dump(self.build_json(result), fh, indent=2, ensure_ascii=False)
        return str(path.resolve())
