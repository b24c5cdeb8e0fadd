"""HTTP route handlers for listings, regeneration, the log, and downloads."""

import hmac
from pathlib import Path

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from fastapi.responses import FileResponse
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import BaseModel

from permazip.core.delivery import ForbiddenError, NotFoundError
from permazip.core.update_log import LogEntry
from permazip.services.archive_service import ArchiveService, InvalidRequestError, ListingItem

router = APIRouter(tags=["archives"])

_bearer = HTTPBearer(auto_error=False)


class ItemResponse(BaseModel):
    """A plugin or theme with its permanent download URL."""

    name: str
    slug: str
    version: str
    url: str
    zip_exists: bool

    @classmethod
    def from_item(cls, item: ListingItem) -> "ItemResponse":
        return cls(
            name=item.name,
            slug=item.slug,
            version=item.version,
            url=item.url,
            zip_exists=item.zip_exists,
        )


class ItemsResponse(BaseModel):
    plugins: list[ItemResponse]
    themes: list[ItemResponse]


class RegenerateResponse(BaseModel):
    success: bool
    built: int
    failed: int


class LogEntryResponse(BaseModel):
    type: str
    slug: str
    name: str
    old_version: str
    new_version: str
    timestamp: str
    unix_timestamp: int

    @classmethod
    def from_entry(cls, entry: LogEntry) -> "LogEntryResponse":
        return cls(**entry.to_dict())


class LogResponse(BaseModel):
    log: list[LogEntryResponse]


def get_archive_service(request: Request) -> ArchiveService:
    """Get ArchiveService from app state."""
    return request.app.state.service


def require_admin(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer),
) -> None:
    """Reject the request unless it carries the configured admin token.

    No check is made when no admin token is configured.
    """
    expected = get_archive_service(request).config.admin_token
    if expected is None:
        return
    if credentials is None or not hmac.compare_digest(
        credentials.credentials.encode("utf-8", "surrogatepass"), expected.encode()
    ):
        raise HTTPException(
            status_code=401,
            detail="Unauthorized",
            headers={"WWW-Authenticate": "Bearer"},
        )


def _archive_response(path: Path) -> FileResponse:
    return FileResponse(
        path,
        media_type="application/zip",
        filename=path.name,
        headers={
            "Cache-Control": "must-revalidate",
            "Expires": "0",
            "Pragma": "public",
        },
    )


@router.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@router.get("/api/v1/items", response_model=ItemsResponse, dependencies=[Depends(require_admin)])
def list_items(request: Request) -> ItemsResponse:
    """List installed plugins and themes with their download URLs."""
    listing = get_archive_service(request).list_items()
    return ItemsResponse(
        plugins=[ItemResponse.from_item(item) for item in listing.plugins],
        themes=[ItemResponse.from_item(item) for item in listing.themes],
    )


@router.post(
    "/api/v1/regenerate",
    response_model=RegenerateResponse,
    dependencies=[Depends(require_admin)],
)
def regenerate(request: Request) -> RegenerateResponse:
    """Rebuild every archive."""
    summary = get_archive_service(request).regenerate_all()
    return RegenerateResponse(
        success=True,
        built=len(summary.built),
        failed=len(summary.failed),
    )


@router.get("/api/v1/log", response_model=LogResponse, dependencies=[Depends(require_admin)])
def read_log(request: Request) -> LogResponse:
    """Return the update log, most recent first."""
    entries = get_archive_service(request).read_log()
    return LogResponse(log=[LogEntryResponse.from_entry(entry) for entry in entries])


@router.get("/api/v1/download")
def download(
    request: Request,
    filename: str = Query(""),
    token: str = Query(""),
) -> FileResponse:
    """Stream an archive after verifying its token."""
    service = get_archive_service(request)
    try:
        path = service.resolve_download(filename, token)
    except ForbiddenError as err:
        raise HTTPException(status_code=403, detail="Forbidden") from err
    except NotFoundError as err:
        raise HTTPException(status_code=404, detail="Not Found") from err
    return _archive_response(path)


@router.get("/download")
def download_by_slug(
    request: Request,
    type: str = Query(""),
    slug: str = Query(""),
) -> FileResponse:
    """Stream an archive by `(type, slug)` without a token."""
    service = get_archive_service(request)
    try:
        path = service.resolve_slug_download(type, slug)
    except InvalidRequestError as err:
        raise HTTPException(status_code=400, detail="Invalid parameters") from err
    except NotFoundError as err:
        raise HTTPException(status_code=404, detail="Not Found") from err
    return _archive_response(path)
