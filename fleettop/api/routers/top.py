# fleettop/api/routers/top.py
from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from ...aggregator import RankingQuery, get_ranking
from ...schemas import ProcessInfo

router = APIRouter()


@router.get("/top", response_model=List[ProcessInfo])
def top(
    metric: str = Query("", alias="type"),
    duration: str = Query(""),
    server_id: int = Query(..., alias="serverId"),
    limit: Optional[int] = Query(None, ge=1, le=1000),
    ranking: RankingQuery = Depends(get_ranking),
):
    return ranking.top(metric, duration, server_id, limit=limit)
