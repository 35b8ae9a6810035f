# src/person_tasks/api/app.py

"""
REST front end.

Routes:
- GET  /               health check, plain "OK"
- GET  /person/get     formatted "<id> : <name> " lines as a JSON array
- POST /person/update  add a person from {"name": ...}; echoes the body back
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, FastAPI, Query, Request
from fastapi.responses import JSONResponse, PlainTextResponse
from pydantic import BaseModel

from ..core.errors import StoreError, UserInputError
from ..store.formatter import format_records
from ..store.record_store import RecordStore

logger = logging.getLogger(__name__)

router = APIRouter()


class Person(BaseModel):
    name: str
    # Accepted and echoed, never used: ids come from the store, done from mark_done.
    id: Optional[int] = None
    done: Optional[bool] = None


def get_record_store(request: Request) -> RecordStore:
    return request.app.state.store


@router.get("/", response_class=PlainTextResponse)
async def health_check() -> str:
    return "OK"


@router.get("/person/get", response_model=list[str])
def get_person(
    name: str = Query(default="Unknown"),
    store: RecordStore = Depends(get_record_store),
) -> list[str]:
    """List every person. The name parameter is accepted but ignored."""
    persons = format_records(store.list_records())
    logger.info("found persons : %d", len(persons))
    logger.info("Person ID : Name")
    logger.info("---------------------")
    for person in persons:
        logger.info(person)
    return persons


@router.post("/person/update", response_model=Person, response_model_exclude_unset=True)
def update_person(person: Person, store: RecordStore = Depends(get_record_store)) -> Person:
    store.add(person.name)
    return person


def _error_body(kind: str, message: str) -> dict:
    return {
        "error": kind,
        "message": message,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


async def user_input_error_handler(request: Request, exc: UserInputError) -> JSONResponse:
    logger.info("Rejected %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=400, content=_error_body("invalid_request", str(exc)))


async def store_error_handler(request: Request, exc: StoreError) -> JSONResponse:
    logger.error("Store failure on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=503, content=_error_body("store_unavailable", str(exc)))


def create_app(store: RecordStore, *, title: str = "person-tasks") -> FastAPI:
    app = FastAPI(
        title=title,
        description="Person/Task records backed by a document store",
        version="0.1.0",
    )
    app.state.store = store

    app.add_exception_handler(UserInputError, user_input_error_handler)
    app.add_exception_handler(StoreError, store_error_handler)

    app.include_router(router, tags=["Person"])
    return app
