"""
Score report writer: structured JSON for one scored page.

All functions are pure I/O: no DB access.  They consume an in-memory
``ScoreResult`` plus its recommendations and write a machine-readable file.

Output files (written by the ``score`` CLI command)
---------------------------------------------------
  data/outputs/reports/
    report_{domain}_{timestamp}.json
"""

from __future__ import annotations

import json
import logging
import re
from pathlib import Path
from typing import Optional

from visibility_scorer.models.page_data import PageInfo
from visibility_scorer.models.score import Recommendation, ScoreResult
from visibility_scorer.scoring.aggregation import (
    category_summary,
    critical_issues,
    improvement_potential,
)
from visibility_scorer.scoring.weights import DEFAULT_WEIGHTS, WeightConfig
from visibility_scorer.utils.time_utils import file_stamp, isoformat_z

logger = logging.getLogger(__name__)

REPORT_SCHEMA_VERSION = "v1.0.0"

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


def build_report_payload(
    result: ScoreResult,
    recommendations: list[Recommendation],
    page_info: Optional[PageInfo] = None,
    weights: WeightConfig = DEFAULT_WEIGHTS,
) -> dict:
    """Assemble the JSON-serialisable report document.

    ``weights`` must be the table the result was scored with; its grade
    bands decide ``points_to_next``.
    """
    page_info = page_info or PageInfo()
    potential = improvement_potential(result.total_score, result.grade, weights)

    return {
        "schema_version": REPORT_SCHEMA_VERSION,
        "generated_at":   isoformat_z(result.timestamp),
        "page":           page_info.model_dump(mode="json"),
        "score":          result.model_dump(mode="json"),
        "summary": [s.model_dump(mode="json") for s in category_summary(result)],
        "critical_issues": [i.model_dump(mode="json") for i in critical_issues(result)],
        "improvement": {
            "has_room":       potential.has_room,
            "next_grade":     potential.next_grade,
            "points_to_next": potential.points_to_next,
            "message":        potential.message,
        },
        "recommendations": [r.model_dump(mode="json") for r in recommendations],
    }


def report_filename(result: ScoreResult, page_info: Optional[PageInfo] = None) -> str:
    label = (page_info.domain if page_info else None) or "page"
    label = _UNSAFE_CHARS.sub("_", label).strip("_") or "page"
    return f"report_{label}_{file_stamp(result.timestamp)}.json"


def write_report_json(
    result: ScoreResult,
    recommendations: list[Recommendation],
    output_dir: Path,
    page_info: Optional[PageInfo] = None,
    weights: WeightConfig = DEFAULT_WEIGHTS,
) -> Path:
    """Write a full score report to a JSON file.

    Args:
        result:          The scored page.
        recommendations: Output of ``build_recommendations(result)``.
        output_dir:      Directory to write the file (created if missing).
        page_info:       URL / title / domain of the page (used in the filename).
        weights:         Weight tables the result was scored with.

    Returns:
        Path to the written JSON file.
    """
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    json_path = output_dir / report_filename(result, page_info)

    payload = build_report_payload(result, recommendations, page_info, weights)
    json_path.write_text(json.dumps(payload, indent=2, default=str), encoding="utf-8")
    logger.info(
        "Score report written: %s (score=%d, %d recommendations)",
        json_path, result.total_score, len(recommendations),
    )
    return json_path
