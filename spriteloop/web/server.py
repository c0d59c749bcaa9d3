"""FastAPI surface for interactive chroma-key previews and sheet layouts."""

from __future__ import annotations

import hashlib
import json
import logging
import os
from typing import Literal, Optional

from fastapi import FastAPI, File, Form, HTTPException, Request, Response, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field, field_validator
from starlette.concurrency import run_in_threadpool

from ..core import ChromaKeySettings, CropInsets, KeyColor, PixelBuffer
from ..core.chroma_key import MAX_TOLERANCE
from ..core.errors import InvalidFrameError, ProcessingError, ValidationError
from ..core.frame_cache import ProcessedFrameCache
from ..core.separable_filter import MAX_RADIUS
from ..core.spritesheet_packer import calculate_layout, resolve_grid
from ..utils import image_tools, validators

logger = logging.getLogger(__name__)

MAX_UPLOAD_BYTES = int(os.environ.get("SPRITELOOP_MAX_UPLOAD_MB", "50")) * 1024 * 1024
ALLOWED_ORIGINS = [
    origin.strip()
    for origin in os.environ.get("SPRITELOOP_ALLOWED_ORIGINS", "http://localhost:8000").split(",")
    if origin.strip()
]


class ChromaKeyRequest(BaseModel):
    """Incoming chroma key settings for a preview."""

    colors: list[tuple[int, int, int]] = Field(default_factory=list)
    tolerance: float = Field(40.0, ge=0, le=MAX_TOLERANCE)
    feather: float = Field(4.0, ge=0, le=MAX_RADIUS)
    choke: float = Field(0.0, ge=0, le=MAX_RADIUS)
    smoothing: float = Field(0.0, ge=0, le=MAX_RADIUS)
    feather_direction: Literal["background", "subject"] = "background"
    crop_top: int = Field(0, ge=0)
    crop_right: int = Field(0, ge=0)
    crop_bottom: int = Field(0, ge=0)
    crop_left: int = Field(0, ge=0)
    background_color: Optional[tuple[int, int, int, int]] = None
    show_mask: bool = False

    @field_validator("colors", mode="before")
    @classmethod
    def _parse_colors(cls, value):
        if value in (None, ""):
            return []
        if not isinstance(value, list):
            raise ValueError("colors must be a list")
        parsed = []
        for item in value:
            if isinstance(item, str):
                item = validators.parse_key_color(item).as_tuple()
            elif isinstance(item, (list, tuple)) and len(item) == 4:
                item = tuple(item[:3])
            parsed.append(item)
        return parsed

    @field_validator("colors")
    @classmethod
    def _check_channels(cls, value):
        for color in value:
            KeyColor.coerce(color)
        return value

    @field_validator("background_color", mode="before")
    @classmethod
    def _parse_color(cls, value):
        if value in (None, "", "null"):
            return None
        if isinstance(value, (list, tuple)):
            return validators.parse_color_tuple(",".join(str(v) for v in value))
        if isinstance(value, str):
            return validators.parse_color_tuple(value)
        raise ValueError("Color must be R,G,B[,A]")

    def to_settings(self) -> ChromaKeySettings:
        return ChromaKeySettings(
            colors=tuple(self.colors),
            tolerance=self.tolerance,
            feather=self.feather,
            choke=self.choke,
            smoothing=self.smoothing,
            feather_direction=self.feather_direction,
        )

    def to_crop(self) -> CropInsets:
        return CropInsets(self.crop_top, self.crop_right, self.crop_bottom, self.crop_left)


class LayoutRequest(BaseModel):
    """Sprite sheet grid request."""

    frame_width: int = Field(..., ge=1)
    frame_height: int = Field(..., ge=1)
    frame_count: int = Field(..., ge=0)
    columns: int = Field(0, ge=0)
    rows: int = Field(0, ge=0)
    padding: int = Field(0, ge=0, le=256)


class CellModel(BaseModel):
    x: int
    y: int
    width: int
    height: int


class LayoutResponse(BaseModel):
    """Computed sheet size and frame placements."""

    sheet_width: int
    sheet_height: int
    columns: int
    rows: int
    cells: list[CellModel]


def create_app(cache: Optional[ProcessedFrameCache] = None) -> FastAPI:
    app = FastAPI(title="SpriteLoop", version="0.1.0")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=ALLOWED_ORIGINS,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    frame_cache = cache if cache is not None else ProcessedFrameCache()
    app.state.frame_cache = frame_cache

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.post("/api/key-preview")
    async def key_preview(
        request: Request,
        image: UploadFile = File(...),
        settings: str = Form("{}"),
        background: UploadFile | None = File(None),
    ) -> Response:
        _enforce_size_limit(request)
        try:
            payload = json.loads(settings) if settings else {}
        except json.JSONDecodeError as exc:
            raise HTTPException(status_code=400, detail=f"Invalid settings JSON: {exc}") from exc
        try:
            request_settings = ChromaKeyRequest.model_validate(payload)
        except Exception as exc:
            raise HTTPException(status_code=422, detail=str(exc)) from exc

        data = await _read_upload(image)
        background_data = await _read_upload(background) if background else None
        frame_id = hashlib.sha256(data).hexdigest()

        try:
            png = await run_in_threadpool(
                _render_preview, frame_cache, frame_id, data, background_data, request_settings
            )
        except (InvalidFrameError, ValidationError) as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        except ProcessingError as exc:
            raise HTTPException(status_code=500, detail=str(exc)) from exc
        return Response(content=png, media_type="image/png", headers={"X-Frame-Id": frame_id})

    @app.post("/api/spritesheet/layout", response_model=LayoutResponse)
    async def spritesheet_layout(payload: LayoutRequest) -> LayoutResponse:
        columns, rows = resolve_grid(payload.frame_count, payload.columns, payload.rows)
        layout = calculate_layout(
            payload.frame_width, payload.frame_height, payload.frame_count, columns, rows, payload.padding
        )
        return LayoutResponse(
            sheet_width=layout.sheet_width,
            sheet_height=layout.sheet_height,
            columns=layout.columns,
            rows=layout.rows,
            cells=[CellModel(x=c.x, y=c.y, width=c.width, height=c.height) for c in layout.cells],
        )

    @app.delete("/api/cache/{frame_id}")
    async def evict_frame(frame_id: str) -> dict[str, int]:
        return {"evicted": frame_cache.evict(frame_id)}

    return app


def _render_preview(
    cache: ProcessedFrameCache,
    frame_id: str,
    data: bytes,
    background_data: Optional[bytes],
    request: ChromaKeyRequest,
) -> bytes:
    """Key (or reuse) the frame, crop it and draw it over the chosen background."""

    processed: PixelBuffer = cache.get_or_process(
        frame_id, request.to_settings(), lambda: image_tools.decode_buffer(data)
    )
    cropped = image_tools.crop_buffer(processed, request.to_crop())
    if request.show_mask:
        return image_tools.encode_png(image_tools.to_mask(cropped))
    background = None
    if background_data:
        background = image_tools.to_image(image_tools.decode_buffer(background_data, "<background>"))
    return image_tools.encode_png(image_tools.composite_over(cropped, background, request.background_color))


async def _read_upload(file: UploadFile) -> bytes:
    data = await file.read()
    if len(data) > MAX_UPLOAD_BYTES:
        raise HTTPException(status_code=413, detail="File too large")
    return data


def _enforce_size_limit(request: Request) -> None:
    """Simple guardrail on upload size based on Content-Length."""

    content_length = request.headers.get("content-length")
    if not content_length:
        return
    try:
        size = int(content_length)
    except ValueError:
        return
    if size > MAX_UPLOAD_BYTES:
        raise HTTPException(status_code=413, detail="Upload exceeds limit")


app = create_app()
