from __future__ import annotations

from fastapi import APIRouter, HTTPException
from sqlalchemy import text
from sqlalchemy.orm import Session

from app.api.dependencies import DbDep
from app.db.redis_client import get_redis_client, redis_configured

router = APIRouter(tags=["health"])


def _check_db(db: Session) -> bool:
    db.execute(text("SELECT 1"))
    return True


def _check_redis() -> bool | None:
    if not redis_configured():
        return None
    try:
        return bool(get_redis_client().ping())
    except Exception:  # noqa: BLE001
        return False


@router.get("/healthz")
async def healthz(db: DbDep) -> dict[str, str]:
    """Basic liveness probe (cheap)."""
    try:
        _check_db(db)
    except Exception as exc:  # noqa: BLE001
        raise HTTPException(status_code=503, detail="Database connectivity check failed") from exc
    return {"status": "ok"}


@router.get("/readyz")
async def readyz(db: DbDep) -> dict[str, object]:
    """Readiness probe: database plus the Redis run lock when configured."""
    try:
        db_ok = _check_db(db)
    except Exception:  # noqa: BLE001
        db_ok = False
    redis_ok = _check_redis()
    ready = db_ok and redis_ok is not False
    if not ready:
        raise HTTPException(status_code=503, detail={"database": db_ok, "redis": redis_ok})
    return {"status": "ready", "database": db_ok, "redis": redis_ok}
