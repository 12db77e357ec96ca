"""
Score history entry: the persisted summary of one scoring run.

Only totals, the grade, per-category rounded scores and recommendation
counts are kept; the factor list is never stored.
"""

from __future__ import annotations

import math
from datetime import datetime
from typing import Optional
from urllib.parse import urlsplit
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, field_validator

from visibility_scorer.models.page_data import PageInfo
from visibility_scorer.models.score import Recommendation, ScoreResult
from visibility_scorer.taxonomy.scoring_taxonomy import CategoryKey, Context, Grade, Impact
from visibility_scorer.utils.time_utils import utcnow


class HistoryCategoryScore(BaseModel):
    """Rounded score and display name of one category."""

    model_config = ConfigDict(frozen=True)

    score: int
    name: str


class HistoryEntry(BaseModel):
    """One row of ``score_history``.

    Attributes:
        entry_id: Opaque id (uuid4 hex).
        url: Page URL, if known.
        title: Page title, if known.
        domain: Page domain, if known.
        total_score: Total score (0–100).
        grade: Letter grade.
        context: Context the page was scored under.
        category_scores: Category key -> rounded score + name.
        recommendation_count: Number of recommendations produced.
        critical_count: Number of high-impact recommendations.
        created_at: UTC time the entry was created.
    """

    model_config = ConfigDict(frozen=True)

    entry_id: str
    url: Optional[str] = None
    title: Optional[str] = None
    domain: Optional[str] = None
    total_score: int
    grade: Grade
    context: Context
    category_scores: dict[CategoryKey, HistoryCategoryScore]
    recommendation_count: int = 0
    critical_count: int = 0
    created_at: datetime

    @field_validator("total_score")
    @classmethod
    def validate_total_range(cls, v: int) -> int:
        if not 0 <= v <= 100:
            raise ValueError(f"total_score must be in [0, 100], got {v}.")
        return v


class HistoryStats(BaseModel):
    """Size and age of the history store.

    Attributes:
        entry_count: Number of stored entries.
        oldest_at: Creation time of the oldest entry, if any.
        newest_at: Creation time of the newest entry, if any.
        db_bytes: Database size on disk (page_count x page_size).
    """

    model_config = ConfigDict(frozen=True)

    entry_count: int = 0
    oldest_at: Optional[datetime] = None
    newest_at: Optional[datetime] = None
    db_bytes: int = 0


def entry_domain(page_info: PageInfo) -> Optional[str]:
    """Reported domain, else the URL hostname; lower-cased."""
    domain = page_info.domain
    if not domain and page_info.url:
        try:
            domain = urlsplit(page_info.url).hostname
        except ValueError:
            domain = None
    return domain.lower() if domain else None


def build_history_entry(
    result: ScoreResult,
    recommendations: list[Recommendation],
    page_info: Optional[PageInfo] = None,
) -> HistoryEntry:
    """Summarise a scored page for the history store."""
    page_info = page_info or PageInfo()
    return HistoryEntry(
        entry_id=uuid4().hex,
        url=page_info.url,
        title=page_info.title,
        domain=entry_domain(page_info),
        total_score=result.total_score,
        grade=result.grade,
        context=result.context,
        category_scores={
            key: HistoryCategoryScore(
                score=int(math.floor(cs.score + 0.5)),
                name=cs.category_name,
            )
            for key, cs in result.category_scores.items()
        },
        recommendation_count=len(recommendations),
        critical_count=sum(1 for r in recommendations if r.impact == Impact.HIGH),
        created_at=utcnow(),
    )
