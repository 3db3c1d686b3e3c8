# uvicorn rfp_slides.api:app --reload --host 0.0.0.0 --port 5000

import logging
from contextlib import asynccontextmanager
from typing import Any, List, Optional

from fastapi import Depends, FastAPI, File, Form, Request, UploadFile
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response

from rfp_slides.core.config import setup_logging
from rfp_slides.core.errors import SlideServiceError
from rfp_slides.core.ingestion import check_upload_size
from rfp_slides.core.prompts import DEFAULT_SLIDE_COUNT
from rfp_slides.core.rendering import PPTX_MEDIA_TYPE
from rfp_slides.orchestrator import SlideDeckOrchestrator
from rfp_slides.utils.schemas import BrandColors, CamelModel, DocumentType, utcnow

logger = logging.getLogger(__name__)


class GenerateSlidesRequest(CamelModel):
    rfp_filename: Optional[str] = None
    brand_guide_filename: Optional[str] = None
    slide_count: int = DEFAULT_SLIDE_COUNT


class RenderDeckRequest(CamelModel):
    slides: Optional[List[Any]] = None
    rfp_filename: Optional[str] = None
    brand_colors: Optional[BrandColors] = None


def get_orchestrator(request: Request) -> SlideDeckOrchestrator:
    return request.app.state.orchestrator


async def read_upload(pdf: UploadFile, max_upload_bytes: int) -> bytes:
    """Read an upload, stopping one byte past the size limit."""
    if pdf.size is not None:
        check_upload_size(pdf.size, max_upload_bytes)
    return await pdf.read(max_upload_bytes + 1)


def _unexpected(e: Exception, error: Optional[str] = None) -> SlideServiceError:
    logger.exception("Unexpected error handling request")
    if error:
        return SlideServiceError(error, str(e))
    return SlideServiceError(str(e) or e.__class__.__name__)


def create_app(orchestrator: Optional[SlideDeckOrchestrator] = None) -> FastAPI:
    """
    Build the API application.

    Args:
        orchestrator: Orchestrator to serve (if None, one is built from settings)
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        setup_logging()
        # Store collections/indexes and the upload archive are prepared at startup
        await app.state.orchestrator._ensure_initialized()  # noqa: SLF001
        yield
        await app.state.orchestrator.close()

    app = FastAPI(title="RFP to Slide Generator API", version="0.1.0", lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.state.orchestrator = orchestrator or SlideDeckOrchestrator()

    @app.exception_handler(SlideServiceError)
    async def slide_service_error_handler(request: Request, exc: SlideServiceError):
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc}")
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(RequestValidationError)
    async def request_validation_error_handler(request: Request, exc: RequestValidationError):
        details = "; ".join(
            f"{'.'.join(str(part) for part in err.get('loc', ()))}: {err.get('msg')}"
            for err in exc.errors()
        )
        return JSONResponse(
            status_code=400,
            content={"success": False, "error": "Invalid request", "details": details},
        )

    @app.get("/check")
    async def check():
        return {
            "success": True,
            "message": "RFP to Slide Generator API is running",
            "timestamp": utcnow().isoformat(),
        }

    @app.post("/upload")
    async def upload(
        pdf: Optional[UploadFile] = File(None),
        document_type: Optional[str] = Form(None, alias="documentType"),
        orchestrator: SlideDeckOrchestrator = Depends(get_orchestrator),
    ):
        try:
            result = await orchestrator.execute(
                mode="upload",
                filename=pdf.filename if pdf else None,
                content_type=pdf.content_type if pdf else None,
                data=await read_upload(pdf, orchestrator.settings.max_upload_bytes) if pdf else None,
                document_type=document_type,
            )
        except SlideServiceError:
            raise
        except Exception as e:
            raise _unexpected(e) from e

        label = "Brand guide" if result.document_type is DocumentType.BRAND_GUIDE else "RFP"
        return {
            "success": True,
            "message": f"{label} uploaded successfully",
            "data": result.to_document(),
        }

    @app.post("/generate-slides")
    async def generate_slides(
        payload: GenerateSlidesRequest,
        orchestrator: SlideDeckOrchestrator = Depends(get_orchestrator),
    ):
        try:
            result = await orchestrator.execute(
                mode="generate",
                rfp_filename=payload.rfp_filename,
                brand_guide_filename=payload.brand_guide_filename,
                slide_count=payload.slide_count,
            )
        except SlideServiceError:
            raise
        except Exception as e:
            raise _unexpected(e, "Failed to generate slides") from e

        return {"success": True, "data": result.to_document()}

    @app.get("/files")
    async def list_files(orchestrator: SlideDeckOrchestrator = Depends(get_orchestrator)):
        try:
            files = await orchestrator.execute(mode="files")
        except SlideServiceError:
            raise
        except Exception as e:
            raise _unexpected(e) from e

        return {
            "success": True,
            "data": {
                "rfpDocuments": [doc.to_document() for doc in files["rfp_documents"]],
                "brandGuides": [guide.to_document() for guide in files["brand_guides"]],
            },
        }

    @app.get("/slide-history")
    async def slide_history(orchestrator: SlideDeckOrchestrator = Depends(get_orchestrator)):
        try:
            generations = await orchestrator.execute(mode="history")
        except SlideServiceError:
            raise
        except Exception as e:
            raise _unexpected(e) from e

        return {
            "success": True,
            "data": {"generations": [generation.to_document() for generation in generations]},
        }

    @app.post("/render-deck")
    async def render_deck(
        payload: RenderDeckRequest,
        orchestrator: SlideDeckOrchestrator = Depends(get_orchestrator),
    ):
        try:
            deck = await orchestrator.execute(
                mode="render",
                slides=payload.slides,
                rfp_filename=payload.rfp_filename,
                brand_colors=payload.brand_colors,
            )
        except SlideServiceError:
            raise
        except Exception as e:
            raise _unexpected(e) from e

        return Response(
            content=deck.data,
            media_type=PPTX_MEDIA_TYPE,
            headers={"Content-Disposition": f'attachment; filename="{deck.filename}"'},
        )

    return app


app = create_app()
