# matchup/routers/matching_routers.py
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException, Request, status
from fastapi.responses import JSONResponse, Response

from matchup.config.settings import settings
from matchup.services.matching_service import MatchingService
from matchup.services.runner import get_matching_service
from matchup.telegram.bot import process_update

logger = logging.getLogger(__name__)

router = APIRouter()


def require_process_key(x_process_key: Optional[str] = Header(default=None)):
    if not settings.PROCESS_NOW_KEY or x_process_key != settings.PROCESS_NOW_KEY:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Invalid process key")

# ---------- Telegram Webhook ----------
@router.post("/webhook/{token}")
async def telegram_webhook(token: str, request: Request):
    if not settings.bot_token or token != settings.bot_token:
        raise HTTPException(status_code=403, detail="Invalid token")

    data = await request.json()
    await process_update(data)
    # Telegram expects EMPTY 200 response
    return Response(status_code=200)

# ---------- Matching ----------
@router.post("/run", dependencies=[Depends(require_process_key)])
async def run_matching(service: MatchingService = Depends(get_matching_service)):
    """Group every installed team and send the notifications now."""
    summary = await service.make_groups_and_notify()
    if not summary.succeeded:
        return JSONResponse(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, content=summary.model_dump())
    return summary.model_dump()
