from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends

from lms.api.dependencies import StoreDep, require_role
from lms.models.principal import Principal
from lms.schemas.base import CamelModel
from lms.services import analytics_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"])


class PlatformStatsOut(CamelModel):
    courses: int
    enrollments: int
    certificates: int
    progress_by_status: dict[str, int]


@router.get("/stats", response_model=PlatformStatsOut)
async def platform_stats(
    principal: Annotated[Principal, Depends(require_role("admin"))],
    store: StoreDep,
) -> PlatformStatsOut:
    logger.info("Platform stats requested by user=%s", principal.user_id)
    stats = await analytics_service.platform_stats(store)
    return PlatformStatsOut(
        courses=stats.courses,
        enrollments=stats.enrollments,
        certificates=stats.certificates,
        progress_by_status=stats.progress_by_status,
    )
