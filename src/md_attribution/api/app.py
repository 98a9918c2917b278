"""Minimal FastAPI application for the Markdown Attribution Alignment Engine.

Exposes the reconcile and align passes to a chat front-end that renders
its answers from a hast-like tree.

Usage (after installing fastapi and uvicorn):

    uvicorn md_attribution.api.app:app --reload

Then POST JSON with ``text``, ``segments`` (or the analyzer's raw reply as
``analyzer_text``) and, for /api/align and /api/render, the ``tree``.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, HTTPException
from fastapi.responses import HTMLResponse, JSONResponse
from pydantic import BaseModel, Field

from ..config import ConfigurationManager
from ..errors import AlignmentDiagnostics, AttributionError
from ..models.render import RenderNode
from ..pipeline import AttributionPipeline, AttributionResult
from ..reconciliation.payload import segments_from_analyzer_text
from ..review.view_renderer import AnnotatedViewRenderer
from ..serialization import StreamSerializer, TreeSerializer

logger = logging.getLogger(__name__)

app = FastAPI(title="Markdown Attribution API", version="0.1.0")


class ReconcileRequest(BaseModel):
    text: str = Field(default="")
    segments: List[Dict[str, Any]] = Field(default_factory=list)
    analyzer_text: Optional[str] = None


class AlignRequest(ReconcileRequest):
    tree: Dict[str, Any]


def _build_pipeline() -> AttributionPipeline:
    """Create a pipeline using configuration from the environment."""
    manager = ConfigurationManager()
    try:
        manager.load_from_env()
    except AttributionError as exc:
        raise HTTPException(status_code=500, detail=exc.to_dict()) from exc
    return AttributionPipeline(config=manager.configuration)


def _decode_tree(data: Dict[str, Any]) -> RenderNode:
    try:
        return TreeSerializer.from_dict(data)
    except AttributionError as exc:
        raise HTTPException(status_code=400, detail=exc.to_dict()) from exc


def _attribute(request: AlignRequest) -> AttributionResult:
    """Run the pipeline for an align/render request."""
    tree = _decode_tree(request.tree)
    pipeline = _build_pipeline()

    if request.analyzer_text is not None:
        result = pipeline.run_from_analyzer_text(request.text, request.analyzer_text, tree)
    else:
        result = pipeline.run(request.text, request.segments, tree)

    if not result.success:
        raise HTTPException(status_code=400, detail={"errors": result.errors})
    return result


@app.post("/api/reconcile")
async def reconcile(request: ReconcileRequest) -> JSONResponse:
    """Reconcile analyzer segments into a gapless segment stream."""
    diagnostics = AlignmentDiagnostics()
    pipeline = _build_pipeline()
    try:
        if request.analyzer_text is not None:
            stream = segments_from_analyzer_text(
                request.text, request.analyzer_text, diagnostics=diagnostics
            )
        else:
            stream = pipeline.reconcile(request.text, request.segments, diagnostics)
    except AttributionError as exc:
        raise HTTPException(status_code=400, detail=exc.to_dict()) from exc

    return JSONResponse(content={
        "segments": StreamSerializer.to_list(stream),
        "has_attribution": stream.has_attribution,
        "diagnostics": diagnostics.get_summary(),
    })


@app.post("/api/align")
async def align(request: AlignRequest) -> JSONResponse:
    """Annotate a render tree with source spans."""
    result = _attribute(request)
    return JSONResponse(content={
        "tree": TreeSerializer.to_dict(result.tree),
        "segments": StreamSerializer.to_list(result.stream),
        "summary": result.to_summary(),
    })


@app.post("/api/render", response_class=HTMLResponse)
async def render(request: AlignRequest) -> HTMLResponse:
    """Annotate a render tree and return it as HTML."""
    result = _attribute(request)
    html = AnnotatedViewRenderer().render(result.tree)
    logger.debug(f"Rendered annotated answer ({result.span_count} spans)")
    return HTMLResponse(content=html)
