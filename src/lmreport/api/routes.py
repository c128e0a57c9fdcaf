"""License report API routes."""

from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Query, Request, UploadFile
from fastapi.concurrency import run_in_threadpool
from loguru import logger

from lmreport.analysis.usage import feature_usage_detail
from lmreport.api.schemas import APIResponse
from lmreport.catalog import available_tools, filter_by_tool, load_directory
from lmreport.config import Settings
from lmreport.exceptions import ReportNotFoundError
from lmreport.incoming import IncomingStore
from lmreport.parsers.lmstat import parse_report_file
from lmreport.report.json_report import detail_to_dict, records_to_dicts
from lmreport.watcher import ChangeWatcher

router = APIRouter(prefix="/api", tags=["Licenses"])


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_store(request: Request) -> IncomingStore:
    return request.app.state.store


def get_watcher(request: Request) -> ChangeWatcher:
    return request.app.state.watcher


@router.get("/health", response_model=APIResponse)
def health() -> APIResponse:
    return APIResponse.ok({
        "status": "ok",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    })


@router.post("/upload", response_model=APIResponse)
async def upload_report(
    file: UploadFile = File(...),
    tool: Optional[str] = Form(default=None),
    store: IncomingStore = Depends(get_store),
) -> APIResponse:
    """Store an uploaded report in the incoming directory and parse it."""
    # one byte over the limit is enough to reject it
    content = await file.read(store.max_upload_bytes + 1)
    path, tool_name = await run_in_threadpool(
        store.save_upload, file.filename or "", content, file.content_type, tool
    )

    features = await run_in_threadpool(parse_report_file, path, tool_name)
    logger.info(f"Upload {path.name}: {len(features)} features")
    return APIResponse.ok({
        "tool": tool_name,
        "fileName": path.name,
        "features": records_to_dicts(features),
    })


@router.get("/tools", response_model=APIResponse)
def list_tools(settings: Settings = Depends(get_settings)) -> APIResponse:
    return APIResponse.ok(available_tools(settings.INCOMING_DIR))


@router.get("/licenses", response_model=APIResponse)
def list_licenses(
    tool: Optional[str] = Query(default=None, description="Tool filter; omit or 'all' for every tool"),
    settings: Settings = Depends(get_settings),
) -> APIResponse:
    records = load_directory(settings.INCOMING_DIR)
    return APIResponse.ok(records_to_dicts(filter_by_tool(records, tool)))


@router.get("/licenses/{tool}", response_model=APIResponse)
def list_tool_licenses(tool: str, settings: Settings = Depends(get_settings)) -> APIResponse:
    records = load_directory(settings.INCOMING_DIR)
    return APIResponse.ok(records_to_dicts(filter_by_tool(records, tool)))


@router.get("/feature/{tool}/{feature}", response_model=APIResponse)
def get_feature(tool: str, feature: str, settings: Settings = Depends(get_settings)) -> APIResponse:
    detail = feature_usage_detail(load_directory(settings.INCOMING_DIR), tool, feature)
    if detail is None:
        raise ReportNotFoundError("Feature not found")
    return APIResponse.ok(detail_to_dict(detail))


@router.get("/files/{tool}", response_model=APIResponse)
def list_tool_files(tool: str, store: IncomingStore = Depends(get_store)) -> APIResponse:
    return APIResponse.ok(store.files_for_tool(tool))


@router.delete("/tool/{tool}", response_model=APIResponse)
def delete_tool(
    tool: str,
    store: IncomingStore = Depends(get_store),
    watcher: ChangeWatcher = Depends(get_watcher),
) -> APIResponse:
    deleted = store.delete_tool(tool)
    watcher.check()
    return APIResponse.ok({
        "message": f"Successfully deleted {len(deleted)} files for tool: {tool}",
        "files": deleted,
    })


@router.delete("/file/{file_name}", response_model=APIResponse)
def delete_file(
    file_name: str,
    store: IncomingStore = Depends(get_store),
    watcher: ChangeWatcher = Depends(get_watcher),
) -> APIResponse:
    store.delete_file(file_name)
    watcher.check()
    return APIResponse.ok({"message": f"Successfully deleted file: {file_name}"})


@router.get("/check-changes", response_model=APIResponse)
def check_changes(watcher: ChangeWatcher = Depends(get_watcher)) -> APIResponse:
    changes = watcher.check()
    return APIResponse.ok({
        "hasChanges": changes.has_changes,
        "added": changes.added,
        "removed": changes.removed,
        "modified": changes.modified,
    })
