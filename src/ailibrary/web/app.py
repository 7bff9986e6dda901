from __future__ import annotations

import logging
from dataclasses import asdict, is_dataclass
from typing import Any

from fastapi import FastAPI, File, HTTPException, Query, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import Response
from pydantic import BaseModel

from ailibrary.application.services.catalog_service import CatalogService, ResourceFilter
from ailibrary.core.config import AppSettings
from ailibrary.core.errors import (
    CsvImportError,
    DatastoreError,
    EmptyCsvError,
    ResourceNotFoundError,
    ValidationError,
)
from ailibrary.core.taxonomy import ENUM_OPTIONS
from ailibrary.domain.models.resource import Resource
from ailibrary.infrastructure.db.store import ResourceStore, open_store
from ailibrary.infrastructure.importers.csv_resource_importer import EXPORT_FILENAME, TEMPLATE_FILENAME

logger = logging.getLogger(__name__)

DATASTORE_FAILURE_DETAIL = "Datastore request failed. Check the server log for details."


class ResourceFields(BaseModel):
    title: str | None = None
    link: str | None = None
    content_type: str | None = None
    primary_topic: str | None = None
    skill_level: str | None = None
    tools_covered: str | None = None
    learning_modality: str | None = None
    time_investment: str | None = None
    quality_rating: int | None = None
    relevance_score: int | None = None
    status_priority: str | None = None
    use_case_tags: str | None = None
    your_notes: str | None = None
    week_suggested: str | None = None


class CsvPreviewRequest(BaseModel):
    csv_text: str


def _jsonable(value: Any) -> Any:
    if isinstance(value, Resource):
        return value.to_dict()
    if is_dataclass(value):
        return asdict(value)
    if isinstance(value, list):
        return [_jsonable(v) for v in value]
    if isinstance(value, dict):
        return {str(k): _jsonable(v) for k, v in value.items()}
    return value


def _csv_response(text: str, filename: str) -> Response:
    return Response(
        content=text,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


def create_app(settings: AppSettings, store: ResourceStore | None = None) -> FastAPI:
    app = FastAPI(title="AI Training Library", version="0.1.0")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    catalog = CatalogService(store if store is not None else open_store(settings))
    loaded = False

    def get_catalog() -> CatalogService:
        nonlocal loaded
        if not loaded:
            try:
                catalog.load()
            except DatastoreError as exc:
                logger.error("Error loading data: %s", exc)
                raise HTTPException(status_code=502, detail=DATASTORE_FAILURE_DETAIL) from exc
            loaded = True
        return catalog

    def run_mutation(action: str, func, *args):
        try:
            return func(*args)
        except ValidationError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        except ResourceNotFoundError as exc:
            raise HTTPException(status_code=404, detail=str(exc)) from exc
        except DatastoreError as exc:
            logger.error("Error %s: %s", action, exc)
            raise HTTPException(status_code=502, detail=DATASTORE_FAILURE_DETAIL) from exc

    def preview_payload(csv_text: str) -> dict[str, Any]:
        service = get_catalog()
        try:
            parsed = service.preview_import(csv_text)
        except CsvImportError as exc:
            reason = "empty" if isinstance(exc, EmptyCsvError) else "no_valid_rows"
            raise HTTPException(status_code=400, detail={"reason": reason, "message": str(exc)}) from exc
        return {"ok": True, "count": len(parsed), "preview": _jsonable(parsed)}

    @app.get("/api/options")
    def api_options() -> dict[str, Any]:
        return {"ok": True, "options": {name: list(values) for name, values in ENUM_OPTIONS.items()}}

    @app.get("/api/resources")
    def api_resources(
        search: str = Query(default=""),
        content_type: str = Query(default=""),
        primary_topic: str = Query(default=""),
        skill_level: str = Query(default=""),
        week_suggested: str = Query(default=""),
        status_priority: str = Query(default=""),
    ) -> dict[str, Any]:
        criteria = ResourceFilter(
            search=search,
            content_type=content_type,
            primary_topic=primary_topic,
            skill_level=skill_level,
            week_suggested=week_suggested,
            status_priority=status_priority,
        )
        resources = get_catalog().filter(criteria)
        return {"ok": True, "count": len(resources), "resources": _jsonable(resources)}

    @app.get("/api/resources/{resource_id}")
    def api_resource_detail(resource_id: int) -> dict[str, Any]:
        resource = run_mutation("reading resource", get_catalog().get, resource_id)
        return {"ok": True, "resource": _jsonable(resource)}

    @app.post("/api/resources")
    def api_add_resource(req: ResourceFields) -> dict[str, Any]:
        fields = req.model_dump(exclude_unset=True)
        resource = run_mutation("adding resource", get_catalog().add, fields)
        return {"ok": True, "resource": _jsonable(resource)}

    @app.put("/api/resources/{resource_id}")
    def api_edit_resource(resource_id: int, req: ResourceFields) -> dict[str, Any]:
        fields = req.model_dump(exclude_unset=True)
        resource = run_mutation("updating resource", get_catalog().edit, resource_id, fields)
        return {"ok": True, "resource": _jsonable(resource)}

    @app.delete("/api/resources/{resource_id}")
    def api_delete_resource(resource_id: int) -> dict[str, Any]:
        run_mutation("deleting resource", get_catalog().delete, resource_id)
        return {"ok": True, "deleted": resource_id}

    @app.get("/api/weekly")
    def api_weekly() -> dict[str, Any]:
        weekly = get_catalog().weekly()
        return {
            "ok": True,
            "weeks": [
                {"week": week, "count": len(items), "resources": _jsonable(items)}
                for week, items in weekly.items()
            ],
        }

    @app.get("/api/stats")
    def api_stats() -> dict[str, Any]:
        return {"ok": True, "stats": _jsonable(get_catalog().stats())}

    @app.get("/api/export")
    def api_export() -> Response:
        return _csv_response(get_catalog().export_csv(), EXPORT_FILENAME)

    @app.get("/api/template")
    def api_template() -> Response:
        return _csv_response(CatalogService.template_csv(), TEMPLATE_FILENAME)

    @app.post("/api/import/preview")
    def api_import_preview(req: CsvPreviewRequest) -> dict[str, Any]:
        if not req.csv_text.strip():
            raise HTTPException(status_code=400, detail={"reason": "empty", "message": "Please paste CSV data first"})
        return preview_payload(req.csv_text)

    @app.post("/api/import/preview/upload")
    async def api_import_preview_upload(file: UploadFile = File(...)) -> dict[str, Any]:
        content = await file.read()
        try:
            text = content.decode("utf-8-sig")
        except UnicodeDecodeError as exc:
            raise HTTPException(status_code=400, detail="CSV upload must be UTF-8 text") from exc
        payload = preview_payload(text)
        payload["uploaded_filename"] = file.filename
        return payload

    @app.get("/api/import/pending")
    def api_import_pending() -> dict[str, Any]:
        pending = get_catalog().pending_import
        return {"ok": True, "count": len(pending), "preview": _jsonable(pending)}

    @app.post("/api/import/confirm")
    def api_import_confirm() -> dict[str, Any]:
        inserted = run_mutation("importing", get_catalog().confirm_import)
        return {"ok": True, "count": len(inserted), "resources": _jsonable(inserted)}

    @app.post("/api/import/cancel")
    def api_import_cancel() -> dict[str, Any]:
        get_catalog().cancel_import()
        return {"ok": True}

    return app
