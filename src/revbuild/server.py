"""FastAPI web service for rendering chapters.

Endpoints::

    GET  /health    Health check.
    GET  /builders  List available backends.
    POST /render    Render one chapter's commands with a backend.

Run::

    uvicorn revbuild.server:app --host 0.0.0.0 --port 8000
"""

from __future__ import annotations

from typing import Any, Optional

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, Field

from revbuild import __version__
from revbuild.book import BookConfig
from revbuild.converter import Converter, load_document
from revbuild.exceptions import ApplicationError

app = FastAPI(
    title="revbuild",
    description="Re:VIEW block command rendering service",
    version=__version__,
)


class ChapterModel(BaseModel):
    id: str
    number: Optional[int] = None
    title: Optional[str] = None


class CommandModel(BaseModel):
    name: str
    lines: list[str] = Field(default_factory=list)
    id: Optional[str] = None
    caption: Optional[str] = None
    level: int = 1
    metric: Optional[str] = None
    lineno: Optional[int] = None


class RenderRequest(BaseModel):
    builder: str = "html"
    config: dict[str, Any] = Field(default_factory=dict)
    strict: bool = False
    chapter: ChapterModel
    images: dict[str, list[str]] = Field(default_factory=dict)
    image_entries: list[str] = Field(default_factory=list)
    commands: list[CommandModel] = Field(default_factory=list)


class RenderResponse(BaseModel):
    builder: str
    output: str
    warnings: list[str]
    errors: list[str]


@app.get("/health")
async def health() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "ok", "version": __version__}


@app.get("/builders")
async def list_builders() -> dict[str, list[str]]:
    """List available backends."""
    return {"builders": list(Converter.BUILDERS)}


@app.post("/render", response_model=RenderResponse)
async def render(request: RenderRequest) -> RenderResponse:
    """Render a chapter and return the text with its diagnostics.

    - **builder**: Backend name (html, latex, top)
    - **config**: Book parameters such as ``secnolevel``
    - **chapter**: Chapter id, number and title
    - **commands**: Block commands in document order
    """
    try:
        config = BookConfig.from_mapping(request.config)
        converter = Converter(builder=request.builder, config=config, strict=request.strict)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc

    chapter, commands = load_document(
        {
            "chapter": request.chapter.model_dump(),
            "images": request.images,
            "image_entries": request.image_entries,
            "commands": [c.model_dump() for c in request.commands],
        },
        config,
    )
    try:
        output = converter.convert(chapter, commands)
    except ApplicationError as exc:
        raise HTTPException(status_code=500, detail=str(exc)) from exc

    return RenderResponse(
        builder=request.builder,
        output=output,
        warnings=converter.warnings,
        errors=converter.errors,
    )
