import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, File, Form, HTTPException, Query, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from sqlmodel import Session

from auth import MANAGER_ROLE, CurrentUser, get_current_user, require_role
from csv_import import CsvImportError, import_csv
from db import create_db_and_tables, get_session
from filters import SCOPES, available_modalities, filter_hearings, group_by_date, resolve_scope
from hearings import create_hearing, update_hearing
from models import Hearing
from schemas import (
    CurrentUserResponse,
    DayGroup,
    HearingCreate,
    HearingListResponse,
    HearingResponse,
    HearingUpdate,
    ImportResponse,
)
from store import DEFAULT_PAGE_SIZE, HearingStore

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

manager_required = require_role(MANAGER_ROLE)


def to_response(hearing: Hearing) -> HearingResponse:
    return HearingResponse.model_validate(hearing)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize database on startup."""
    create_db_and_tables()
    logger.info("Database initialized")
    yield


# Create FastAPI app
app = FastAPI(title="Agenda de Audiências API", version="1.0.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Allow all origins in development
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.post("/hearings", response_model=HearingResponse, status_code=201)
def create_hearing_endpoint(
    request: HearingCreate,
    session: Session = Depends(get_session),
    user: CurrentUser = Depends(manager_required),
):
    """Create a single hearing from the form fields."""
    logger.info(f"Create hearing request by {user.email} for {request.date} {request.time}")

    try:
        hearing = create_hearing(HearingStore(session), request, created_by=user.email)
        return to_response(hearing)
    except Exception as e:
        logger.error(f"Error creating hearing: {str(e)}")
        raise HTTPException(status_code=500, detail=str(e)) from e


@app.get("/hearings", response_model=HearingListResponse)
def list_hearings(
    scope: str = Query("all", description=f"One of: {', '.join(SCOPES)}"),
    year: int | None = Query(None, description="Year for the 'month' scope"),
    month: int | None = Query(None, ge=1, le=12, description="Month (1-12) for the 'month' scope"),
    cursor: str | None = Query(None, description="Cursor from the previous page ('all' scope)"),
    page_size: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=100),
    q: str | None = Query(None, description="Free-text search"),
    modality: list[str] | None = Query(None, description="Modalities to keep (repeatable)"),
    session: Session = Depends(get_session),
    user: CurrentUser = Depends(get_current_user),
):
    """List hearings in a scope, filtered by text and modality, grouped by day."""
    logger.info(f"List request - scope: {scope}, year: {year}, month: {month}, q: {q!r}")

    try:
        scope_range = resolve_scope(scope, year=year, month=month)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e

    try:
        store = HearingStore(session)
        next_cursor = None
        has_more = False
        if scope_range is None:
            page = store.query_page(page_size=page_size, cursor=cursor)
            hearings = page.hearings
            next_cursor = page.next_cursor
            has_more = page.has_more
        else:
            hearings = store.query_range(scope_range.start, scope_range.end)

        filtered = filter_hearings(hearings, query=q, modalities=modality)
        days = [
            DayGroup(date_key=date_key, hearings=[to_response(h) for h in day_hearings])
            for date_key, day_hearings in group_by_date(filtered).items()
        ]

        logger.info(f"Found {len(hearings)} hearings in scope {scope}, {len(filtered)} after filters")
        return HearingListResponse(
            scope=scope,
            total=len(filtered),
            days=days,
            modalities=available_modalities(hearings),
            next_cursor=next_cursor,
            has_more=has_more,
        )
    except Exception as e:
        logger.error(f"Error listing hearings: {str(e)}")
        raise HTTPException(status_code=500, detail=str(e)) from e


@app.post("/hearings/import", response_model=ImportResponse)
def import_hearings(
    file: UploadFile = File(...),
    delimiter: str | None = Form(None),
    session: Session = Depends(get_session),
    user: CurrentUser = Depends(manager_required),
):
    """Bulk create hearings from a CSV upload. Bad rows are counted, not fatal."""
    logger.info(f"CSV import request by {user.email}: {file.filename}")

    if delimiter is not None and len(delimiter) != 1:
        raise HTTPException(status_code=400, detail="Delimiter must be a single character")

    try:
        text = file.file.read().decode("utf-8-sig")
    except UnicodeDecodeError as e:
        raise HTTPException(status_code=400, detail="CSV must be UTF-8 encoded") from e

    try:
        result = import_csv(text, HearingStore(session), created_by=user.email, delimiter=delimiter)
    except CsvImportError as e:
        logger.error(f"CSV import rejected: {str(e)}")
        raise HTTPException(status_code=400, detail=str(e)) from e

    return ImportResponse(
        ok=result.failed == 0,
        created=result.created,
        failed=result.failed,
        message=result.message,
        errors=result.errors,
    )


@app.get("/hearings/{hearing_id}", response_model=HearingResponse)
def get_hearing(
    hearing_id: int,
    session: Session = Depends(get_session),
    user: CurrentUser = Depends(get_current_user),
):
    hearing = HearingStore(session).get(hearing_id)
    if not hearing:
        raise HTTPException(status_code=404, detail="Hearing not found")
    return to_response(hearing)


@app.patch("/hearings/{hearing_id}", response_model=HearingResponse)
def update_hearing_endpoint(
    hearing_id: int,
    request: HearingUpdate,
    session: Session = Depends(get_session),
    user: CurrentUser = Depends(manager_required),
):
    """Partially update a hearing; omitted fields keep their current values."""
    logger.info(f"Update hearing request for ID: {hearing_id} by {user.email}")

    try:
        hearing = update_hearing(HearingStore(session), hearing_id, request)
    except Exception as e:
        logger.error(f"Error updating hearing: {str(e)}")
        raise HTTPException(status_code=500, detail=str(e)) from e

    if hearing is None:
        raise HTTPException(status_code=404, detail="Hearing not found")
    return to_response(hearing)


@app.delete("/hearings/{hearing_id}")
def delete_hearing(
    hearing_id: int,
    session: Session = Depends(get_session),
    user: CurrentUser = Depends(manager_required),
):
    """Delete a specific hearing by ID."""
    logger.info(f"Delete hearing request for ID: {hearing_id} by {user.email}")

    try:
        deleted = HearingStore(session).delete(hearing_id)
    except Exception as e:
        logger.error(f"Error deleting hearing: {str(e)}")
        raise HTTPException(status_code=500, detail=str(e)) from e

    if not deleted:
        raise HTTPException(status_code=404, detail="Hearing not found")

    logger.info(f"Successfully deleted hearing {hearing_id}")
    return {"ok": True, "message": "Hearing deleted successfully"}


@app.get("/me", response_model=CurrentUserResponse)
def get_me(user: CurrentUser = Depends(get_current_user)):
    return CurrentUserResponse(email=user.email, role=user.role)


@app.get("/")
def root():
    """Root endpoint."""
    return {"message": "Agenda de Audiências API", "docs": "/docs"}
