# api_main.py
# FastAPI service for the OCR text extraction API
# - /image/extract: positioned text from an uploaded image, optional store/food filter
# - /text/extract: single store name / number / food item from a stuttered transcript
# - /health: liveness plus engine availability

from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, File, Query, Request, UploadFile
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ValidationError

from .config import Settings, resolve_engine_paths
from .errors import ConfigurationError, ImageDecodeError, SemanticServiceError
from .llm_client import ChatCompletionClient
from .ocr import ConsolidationPipeline, TextElement, make_pipeline
from .semantic import Category, extract_from_text, filter_elements
from .semantic.models import IMAGE_FILTER_CATEGORIES, TEXT_EXTRACT_CATEGORIES
from .semantic.selftest import run_consolidation_selftest

logger = logging.getLogger("ocr_service")


# ---------- models ----------
class TextRequest(BaseModel):
    text: str


_FILTER_FAILURE = {
    Category.STORE: "Store name filtering failed",
    Category.FOOD: "Food name filtering failed",
}


# ---------- utils ----------
def _envelope(items: List[TextElement], status_code: int = 200, message: str = "") -> JSONResponse:
    body: Dict[str, Any] = {
        "success": status_code == 200,
        "text_list": [el.to_dict() for el in items],
        "total_count": len(items),
    }
    if message:
        body["message"] = message
    return JSONResponse(body, status_code=status_code)


def _image_error(status_code: int, message: str) -> JSONResponse:
    logger.warning("Image extract rejected (%d): %s", status_code, message)
    return _envelope([], status_code=status_code, message=message)


def _text_error(status_code: int, message: str) -> JSONResponse:
    logger.warning("Text extract rejected (%d): %s", status_code, message)
    return JSONResponse({"error": message}, status_code=status_code)


def _lookup_category(raw: Optional[str], allowed) -> Optional[Category]:
    for cat in allowed:
        if cat.value == raw:
            return cat
    return None


# ---------- app ----------
def create_app(
    settings: Optional[Settings] = None,
    *,
    pipeline: Optional[ConsolidationPipeline] = None,
    llm: Optional[ChatCompletionClient] = None,
) -> FastAPI:
    """
    Build the application. Anything not injected is created from the
    environment when the lifespan starts; a missing Tesseract binary or
    tessdata directory aborts startup with ConfigurationError.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        s = settings or Settings.from_env()
        p = pipeline
        if p is None:
            try:
                s = resolve_engine_paths(s)
            except ConfigurationError:
                logger.error("OCR engine is not installed; refusing to serve")
                raise
            p = make_pipeline(s)
        if s.selftest_on_startup:
            run_consolidation_selftest()

        client = llm or ChatCompletionClient.from_settings(s)
        if not client.configured:
            logger.warning("OPENAI_API_KEY not set; category filtering and /text/extract will fail")

        app.state.settings = s
        app.state.pipeline = p
        app.state.llm = client
        logger.info("OCR service ready (env=%s, languages=%s)", s.environment, "+".join(s.languages))
        try:
            yield
        finally:
            if llm is None:
                await client.aclose()

    app = FastAPI(title="OCR Text Extraction API", version="1.0.0", lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ---------- routes ----------
    @app.get("/")
    async def root(request: Request):
        return {"service": "ocr-service", "env": request.app.state.settings.environment, "ok": True}

    @app.get("/health")
    async def health(request: Request):
        p: Optional[ConsolidationPipeline] = getattr(request.app.state, "pipeline", None)
        return {"status": "ok", "ocr": p is not None and p.engine.is_available()}

    @app.post("/image/extract")
    async def image_extract(
        request: Request,
        image: Optional[UploadFile] = File(None),
        kind: Optional[str] = Query(None, alias="type"),
    ):
        category: Optional[Category] = None
        if kind:
            category = _lookup_category(kind, IMAGE_FILTER_CATEGORIES)
            if category is None:
                return _image_error(400, "type parameter must be 'store' or 'food'")
        if image is None:
            return _image_error(400, "Image file required")

        data = await image.read()
        state = request.app.state
        try:
            items = await run_in_threadpool(state.pipeline.extract_text, data)
        except ImageDecodeError as e:
            return _image_error(400, f"Invalid image: {e}")
        except Exception:
            logger.exception("OCR failed for upload %r", image.filename)
            return _image_error(500, "OCR failed")

        if category is not None:
            try:
                items = await filter_elements(state.llm, category, items, state.settings.reconcile)
            except SemanticServiceError as e:
                logger.error("%s: %s", _FILTER_FAILURE[category], e)
                return _image_error(500, _FILTER_FAILURE[category])

        return _envelope(items)

    @app.post("/text/extract")
    async def text_extract(request: Request, kind: Optional[str] = Query(None, alias="type")):
        if not kind:
            return _text_error(400, "type query parameter is required")
        category = _lookup_category(kind, TEXT_EXTRACT_CATEGORIES)
        if category is None:
            return _text_error(400, "type must be 'store', 'number', or 'food'")

        try:
            body = await request.json()
        except ValueError:
            return _text_error(400, "request body must be JSON")
        if not isinstance(body, dict):
            return _text_error(400, "request body must be a JSON object")
        try:
            req = TextRequest(**body)
        except ValidationError:
            return _text_error(400, "text field is required")
        if not req.text:
            return _text_error(400, "text field is required")

        try:
            result = await extract_from_text(request.app.state.llm, category, req.text)
        except SemanticServiceError as e:
            logger.error("Text extraction (%s) failed: %s", category.value, e)
            return _text_error(500, str(e))
        return {"result": result}

    return app


app = create_app()


def main() -> None:
    import uvicorn

    logging.basicConfig(
        level=(os.getenv("LOG_LEVEL") or "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    port = Settings.from_env().port
    uvicorn.run("ocr_service.api_main:app", host="0.0.0.0", port=port, reload=False)


# ---------- uvicorn entry ----------
if __name__ == "__main__":
    main()
