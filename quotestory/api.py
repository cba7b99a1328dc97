"""HTTP surface for the story renderer.

Routes:
  POST /generate : multipart (quote, cover, aspectRatio) -> image/png
  GET  /health   : liveness probe, reports the resolved serif font
  /              : static files from PUBLIC_DIR when it exists
"""

from typing import Optional

from fastapi import FastAPI, File, Form, HTTPException, Request, UploadFile
from fastapi.responses import JSONResponse, Response
from fastapi.staticfiles import StaticFiles

from . import __version__
from .config import settings
from .errors import StoryGenerationError
from .pipeline import StoryRenderer
from .text_layout import FontLoader
from .utils import get_logger

logger = get_logger(__name__)


def create_app(renderer: Optional[StoryRenderer] = None) -> FastAPI:
    """Build the FastAPI application around a story renderer."""
    renderer = renderer or StoryRenderer()

    app = FastAPI(
        title="Quote Story Renderer",
        version=__version__,
        description="Turns a book cover and a quote into a story-format PNG.",
    )

    @app.exception_handler(StoryGenerationError)
    async def _story_error(_request: Request, exc: StoryGenerationError):
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

    @app.get("/health")
    def health():
        return {"status": "ok", "font": FontLoader().name}

    @app.post("/generate")
    def generate(
        quote: Optional[str] = Form(None),
        cover: Optional[UploadFile] = File(None),
        aspect_ratio: Optional[str] = Form(None, alias="aspectRatio"),
    ):
        """Render a story PNG from an uploaded cover and a quote."""
        image_bytes = b""
        if cover is not None:
            image_bytes = cover.file.read(settings.max_upload_bytes + 1)
            if len(image_bytes) > settings.max_upload_bytes:
                raise HTTPException(status_code=413, detail="File too large")

        png = renderer.render(image_bytes, quote, aspect_ratio or settings.default_aspect_ratio)
        return Response(content=png, media_type="image/png")

    # Mounted last so API routes win over static paths
    if settings.public_dir.is_dir():
        app.mount("/", StaticFiles(directory=str(settings.public_dir), html=True), name="public")
    else:
        logger.debug(f"Static directory {settings.public_dir} not found, not serving static files")

    return app
