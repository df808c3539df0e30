"""
History Routes

Endpoints:
    GET /api/history - The caller's archived searches, newest first
"""

import asyncio
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from src.common.repositories import SearchHistoryRepositoryInterface

from ..auth import get_user_id, verify_token
from ..config import get_settings
from ..dependencies import get_history_store

router = APIRouter(prefix="/api", tags=["history"])


class HistoryResponse(BaseModel):
    success: bool = True
    history: List[dict]
    total: int


@router.get("/history", response_model=HistoryResponse, dependencies=[Depends(verify_token)])
async def get_history(
    limit: Optional[int] = Query(default=None, ge=1, le=100),
    user_id: str = Depends(get_user_id),
    history: SearchHistoryRepositoryInterface = Depends(get_history_store),
):
    """Archived searches (mission, matches, recommendation, created_at)."""
    effective_limit = limit or get_settings().history_limit
    entries = await asyncio.to_thread(history.get_history, user_id, effective_limit)
    return HistoryResponse(history=entries, total=len(entries))
