"""健康检查 API"""

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.dependencies import get_db_session
from app.core.logging import get_logger

router = APIRouter(prefix="/health", tags=["health"])
logger = get_logger("api.health")


@router.get("")
async def health_check(request: Request, db: AsyncSession = Depends(get_db_session)):
    """基础健康检查（用于负载均衡探针）

    数据库不可用时返回 503；Gemini 只报告是否已配置，不发起调用。
    """
    try:
        await db.execute(text("SELECT 1"))
        database = "healthy"
    except Exception as e:
        logger.warning("数据库健康检查失败", error=str(e))
        database = "unhealthy"

    body = {
        "status": "ok" if database == "healthy" else "unhealthy",
        "version": settings.APP_VERSION,
        "database": database,
        "gemini": "configured" if request.app.state.llm_client.api_key else "disabled",
    }
    return JSONResponse(status_code=200 if database == "healthy" else 503, content=body)
