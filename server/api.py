"""FastAPI server exposing the wardrobe inventory."""

import base64
import binascii
from typing import Dict, List, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from wardrobe_app.app import SmartWardrobeApp
from wardrobe_app.logging_config import CORRELATION_HEADER, configure_logging, correlation_context
from logic.errors import (
    DuplicateError,
    InvalidInput,
    InventoryError,
    NotEmptyError,
    NotFoundError,
    OperationAbandoned,
    PersistenceError,
    RenameCascadeError,
    UnknownLocationError,
    UploadFailed,
    ValidationError,
)
from logic.filtering import visible
from models.section import Section
from models.taxonomy import ALL_ITEMS_TAB, tab_options, validate_tab
from models.wardrobe_item import ItemDraft
from tools.asset_upload import ImageFile

_STATUS_CODES: List[tuple] = [
    (InvalidInput, 400),
    (ValidationError, 400),
    (UnknownLocationError, 400),
    (NotFoundError, 404),
    (DuplicateError, 409),
    (NotEmptyError, 409),
    (OperationAbandoned, 409),
    (UploadFailed, 502),
    (PersistenceError, 502),
]


def status_for(error: InventoryError) -> int:
    for error_type, status in _STATUS_CODES:
        if isinstance(error, error_type):
            return status
    return 500


class SectionRequest(BaseModel):
    """Request payload for creating or renaming a section."""

    name: str = Field(..., description="Display name, unique ignoring case")


class ImagePayload(BaseModel):
    """Image selected by the user, sent inline as base64."""

    filename: str
    content_type: str
    data_base64: str

    def to_image_file(self) -> ImageFile:
        try:
            data = base64.b64decode(self.data_base64, validate=True)
        except (binascii.Error, ValueError) as exc:
            raise ValidationError(f"'{self.filename}' is not valid base64 data") from exc
        return ImageFile(filename=self.filename, content_type=self.content_type, data=data)


class ItemCreateRequest(BaseModel):
    """Request payload for adding a garment."""

    name: str = ""
    location: str = ""
    category: Optional[str] = None
    type: Optional[str] = None
    color: Optional[str] = None
    style: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    image: Optional[ImagePayload] = None


class ItemUpdateRequest(BaseModel):
    """Partial edit; only the fields that are sent are changed."""

    name: Optional[str] = None
    location: Optional[str] = None
    category: Optional[str] = None
    type: Optional[str] = None
    color: Optional[str] = None
    style: Optional[str] = None
    tags: Optional[List[str]] = None
    image: Optional[ImagePayload] = None


class FavoriteRequest(BaseModel):
    is_favorite: bool


class ViewRequest(BaseModel):
    """Browse selection change; omitted fields are left as they are."""

    active_tab: Optional[str] = None
    section_id: Optional[str] = None
    search_text: Optional[str] = None


def _section_payload(section: Section, count: int) -> Dict[str, object]:
    return {**section.to_dict(), "item_count": count, "item_count_label": Section.describe_count(count)}


def create_app(wardrobe: SmartWardrobeApp | None = None) -> FastAPI:
    """Build the API around ``wardrobe`` (a default app loaded from the environment)."""

    if wardrobe is None:
        configure_logging()
        wardrobe = SmartWardrobeApp()
        wardrobe.load()

    api = FastAPI(title="Smart Wardrobe", version="0.1.0")
    api.state.wardrobe = wardrobe

    @api.middleware("http")
    async def correlation_middleware(request: Request, call_next):
        """Tag every log line of a request with the caller's correlation id."""

        with correlation_context(request.headers.get(CORRELATION_HEADER)) as correlation_id:
            response = await call_next(request)
        response.headers[CORRELATION_HEADER] = correlation_id
        return response

    @api.exception_handler(InventoryError)
    async def inventory_error_handler(_: Request, exc: InventoryError) -> JSONResponse:
        if not exc.reported:
            wardrobe.notifier.report_error(exc)
            exc.reported = True
        body: Dict[str, object] = {"error": exc.kind, "title": exc.title, "message": exc.message}
        if isinstance(exc, InvalidInput):
            body["reason"] = exc.reason
        if isinstance(exc, NotEmptyError):
            body["item_count"] = exc.item_count
        if isinstance(exc, RenameCascadeError):
            body["section_id"] = exc.section_id
            body["failed_item_ids"] = exc.failed_item_ids
        return JSONResponse(status_code=status_for(exc), content=body)

    @api.get("/healthz")
    async def healthcheck() -> dict:
        """Lightweight readiness check."""

        return {
            "status": "ok",
            "service": "smart-wardrobe",
            "environment": wardrobe.config.environment or "local",
            "record_store": wardrobe.config.record_store_backend,
        }

    @api.get("/categories")
    async def categories() -> List[Dict[str, str]]:
        return tab_options()

    @api.get("/sections")
    def list_sections() -> List[Dict[str, object]]:
        snapshot = wardrobe.snapshot()
        return [_section_payload(s, snapshot.item_count(s.name)) for s in snapshot.sections]

    @api.post("/sections", status_code=201)
    def create_section(request: SectionRequest) -> Dict[str, object]:
        section = wardrobe.sections.create(request.name)
        return _section_payload(section, 0)

    @api.patch("/sections/{section_id}")
    def rename_section(section_id: str, request: SectionRequest) -> Dict[str, object]:
        section = wardrobe.sections.rename(section_id, request.name)
        return _section_payload(section, wardrobe.sections.item_count(section.id))

    @api.post("/sections/{section_id}/repair")
    def repair_section(section_id: str) -> Dict[str, object]:
        section = wardrobe.sections.repair(section_id)
        return _section_payload(section, wardrobe.sections.item_count(section.id))

    @api.delete("/sections/{section_id}", status_code=204)
    def delete_section(section_id: str) -> None:
        wardrobe.sections.delete(section_id)

    @api.get("/items")
    def list_items(
        category: str = ALL_ITEMS_TAB,
        section_id: Optional[str] = None,
        q: str = "",
    ) -> List[Dict[str, object]]:
        """Filter the catalogue without touching the shared browse selection."""

        try:
            tab = validate_tab(category)
        except ValueError as exc:
            raise ValidationError(str(exc)) from exc
        snapshot = wardrobe.snapshot()
        section = snapshot.section(section_id) if tab == ALL_ITEMS_TAB else None
        return [item.to_dict() for item in visible(snapshot.items, tab, section, q)]

    @api.post("/items", status_code=201)
    def create_item(request: ItemCreateRequest) -> Dict[str, object]:
        image = request.image.to_image_file() if request.image else None
        draft = ItemDraft(
            name=request.name,
            location=request.location,
            category=request.category,
            type=request.type,
            color=request.color,
            style=request.style,
            tags=request.tags,
        )
        return wardrobe.items.create(draft, image=image).to_dict()

    @api.patch("/items/{item_id}")
    def update_item(item_id: str, request: ItemUpdateRequest) -> Dict[str, object]:
        image = request.image.to_image_file() if request.image else None
        patch = request.model_dump(exclude_unset=True, exclude={"image"})
        return wardrobe.items.update(item_id, patch, image=image).to_dict()

    @api.delete("/items/{item_id}", status_code=204)
    def delete_item(item_id: str) -> None:
        wardrobe.items.delete(item_id)

    @api.put("/items/{item_id}/favorite")
    def set_favorite(item_id: str, request: FavoriteRequest) -> Dict[str, object]:
        return wardrobe.items.set_favorite(item_id, request.is_favorite).to_dict()

    @api.post("/items/{item_id}/favorite/toggle")
    def toggle_favorite(item_id: str) -> Dict[str, object]:
        return wardrobe.items.toggle_favorite(item_id).to_dict()

    def _view_payload() -> Dict[str, object]:
        snapshot = wardrobe.snapshot()
        return {
            **wardrobe.view.to_dict(snapshot),
            "items": [item.to_dict() for item in wardrobe.view.visible(snapshot)],
        }

    @api.get("/view")
    def get_view() -> Dict[str, object]:
        return _view_payload()

    @api.put("/view")
    def update_view(request: ViewRequest) -> Dict[str, object]:
        """Apply a browse selection change: tab first, then section, then search."""

        fields = request.model_dump(exclude_unset=True)
        if "active_tab" in fields and fields["active_tab"] is not None:
            try:
                wardrobe.view.select_category(fields["active_tab"])
            except ValueError as exc:
                raise ValidationError(str(exc)) from exc
        if "section_id" in fields:
            if fields["section_id"] is not None:
                wardrobe.sections.get(fields["section_id"])
            wardrobe.view.select_section(fields["section_id"])
        if "search_text" in fields:
            wardrobe.view.set_search(fields["search_text"])
        return _view_payload()

    @api.post("/view/reset")
    def reset_view() -> Dict[str, object]:
        wardrobe.view.reset()
        return _view_payload()

    @api.get("/notifications")
    def notifications() -> List[Dict[str, object]]:
        return wardrobe.notifier.notices()

    @api.delete("/notifications", status_code=204)
    def dismiss_notifications(notice_id: Optional[int] = None) -> None:
        wardrobe.notifier.dismiss(notice_id)

    @api.get("/inconsistencies")
    def inconsistencies() -> List[Dict[str, object]]:
        return [entry.to_dict() for entry in wardrobe.state.inconsistencies()]

    @api.get("/assistant")
    async def assistant() -> Dict[str, object]:
        """Location of the external style assistant widget, if one is configured."""

        return {"enabled": bool(wardrobe.config.assistant_url), "url": wardrobe.config.assistant_url}

    return api


def get_app() -> FastAPI:
    """Expose a FastAPI instance for ASGI servers."""

    return create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("server.api:get_app", factory=True, host="0.0.0.0", port=8080, reload=False)
