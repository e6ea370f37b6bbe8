# src/week_planner/api/app.py
import logging
import uuid

from fastapi import FastAPI, Request

from ..config import LOG_LEVEL
from ..db import init_db, set_request_id
from .routers import planning

logging.basicConfig(level=getattr(logging, LOG_LEVEL, logging.INFO))

# ================== App ==================
app = FastAPI(title="Week Planner API")

app.include_router(planning.router)


@app.on_event("startup")
def _startup() -> None:
    init_db()


# Attach per-request id for DB logs
@app.middleware("http")
async def add_request_id(request: Request, call_next):
    rid = request.headers.get("X-Request-ID") or uuid.uuid4().hex[:8]
    set_request_id(rid)
    response = await call_next(request)
    response.headers["X-Request-ID"] = rid
    return response


@app.get("/health")
def health():
    return {"status": "ok"}
