"""Set builder HTTP service."""

import redis
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import SQLAlchemyError

from setbuilder import __version__
from setbuilder.api.v1 import api_router
from setbuilder.config import settings
from setbuilder.database import SessionLocal
from setbuilder.services.aggregation import eligible_job_ids
from setbuilder.services.barcode_pool import count_unused_barcodes

app = FastAPI(
    title="Set Builder Service",
    description="Compose component variants into merchandised set products",
    version=__version__,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router, prefix="/v1")


@app.get("/health")
def health_check():
    """
    Readiness of the batch pipeline.

    Degraded when the database or the Celery broker is unreachable, or when
    the barcode pool is empty (every aggregation would fail).
    """
    result = {"db": "connected", "broker": "connected", "open_jobs": None, "unused_barcodes": None}

    db = SessionLocal()
    try:
        result["open_jobs"] = len(eligible_job_ids(db))
        result["unused_barcodes"] = count_unused_barcodes(db)
    except SQLAlchemyError as e:
        result["db"] = f"error: {e}"
    finally:
        db.close()

    try:
        redis.from_url(settings.celery_broker_url, socket_connect_timeout=2).ping()
    except redis.RedisError as e:
        result["broker"] = f"error: {e}"

    healthy = (
        result["db"] == "connected"
        and result["broker"] == "connected"
        and bool(result["unused_barcodes"])
    )
    result["status"] = "ok" if healthy else "degraded"
    return result


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "setbuilder.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.api_reload,
    )
