"""
Health Router - Health checks and system status endpoints
"""

import logging
from fastapi import APIRouter, Depends
from typing import Dict, Any

from api.dependencies import get_app_state, AppState

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/ready")
def health_check_ready(state: AppState = Depends(get_app_state)) -> Dict[str, Any]:
    """
    Readiness probe.

    Returns ready=True when the repository is initialized and its store answers.
    """
    status = state.get_status()

    reachable = False
    if state.is_ready():
        try:
            reachable = state.repository.ping()
        except Exception as e:
            logger.warning(f"Storage ping failed: {e}")

    return {
        "ready": state.is_ready() and reachable,
        "details": {**status, "storage_reachable": reachable}
    }
