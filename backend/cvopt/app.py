import os
import uuid
from datetime import datetime
from typing import Any, Optional

from fastapi import FastAPI, File, Form, HTTPException, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import Response

from .core.generator import ResumeGenerator
from .factories.prompt_factory import PromptFactory
from .rendering.renderer import PDFRenderer
from .spec.models import ServerConfig
from .spec.output_models import OptimizeResult
from .storage.store import DocumentStore, LocalDocumentStore
from .utils.errors import DocumentNotFoundError, OptimizationError
from .utils.logger import JSONLLogger
from .workflows.executor import OptimizationPipeline

def create_app(
    config: Optional[ServerConfig] = None,
    generator: Any = None,
    store: Optional[DocumentStore] = None,
    logger: Optional[JSONLLogger] = None,
) -> FastAPI:
    """
    Build the API. Collaborators default to the chat model, the local output
    directory and a timestamped JSONL log; tests inject their own.
    """
    config = config or ServerConfig()

    if store is None:
        # Created once at startup, never cleaned
        store = LocalDocumentStore(output_dir=config.output_dir)
    if logger is None:
        stamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        logger = JSONLLogger(log_path=os.path.join(config.log_dir, f"server_log_{stamp}.jsonl"))
    if generator is None:
        prompt_factory = PromptFactory(
            marker=config.marker,
            default_job_description=config.default_job_description,
        )
        generator = ResumeGenerator(prompt_factory=prompt_factory, config=config.generator)

    renderer = PDFRenderer(store=store, config=config.renderer)
    pipeline = OptimizationPipeline(
        generator=generator,
        renderer=renderer,
        marker=config.marker,
        logger=logger,
    )

    app = FastAPI(title="CV Optimizer")
    app.state.config = config
    app.state.store = store
    app.state.logger = logger
    app.state.pipeline = pipeline

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.allowed_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # =====================================================================
    # API ROUTES
    # =====================================================================

    @app.post("/api/optimize", response_model=OptimizeResult)
    async def optimize(
        cv: Optional[UploadFile] = File(None),
        job: Optional[str] = Form(None),
    ):
        request_id = uuid.uuid4().hex

        if cv is None:
            raise HTTPException(status_code=400, detail="No PDF file uploaded.")

        if cv.size is not None and cv.size > config.max_upload_bytes:
            logger.log_error(request_id, "upload", f"Upload of {cv.size} bytes exceeds limit")
            raise HTTPException(status_code=413, detail="Uploaded file is too large.")

        document = await cv.read()
        if not document:
            raise HTTPException(status_code=400, detail="No PDF file uploaded.")
        if len(document) > config.max_upload_bytes:
            logger.log_error(request_id, "upload", f"Upload of {len(document)} bytes exceeds limit")
            raise HTTPException(status_code=413, detail="Uploaded file is too large.")

        job_description = (job or "").strip() or config.default_job_description
        logger.log_event(
            request_id,
            "request_received",
            upload_filename=cv.filename,
            upload_bytes=len(document),
            job_description_chars=len(job_description),
        )

        try:
            return await pipeline.run(
                document=document,
                job_description=job_description,
                mime_type="application/pdf",
                filename=cv.filename or "cv.pdf",
                request_id=request_id,
            )
        except OptimizationError as e:
            logger.log_error(request_id, e.stage, e.message)
            raise HTTPException(status_code=500, detail="Server error during optimization.")
        except Exception as e:
            logger.log_error(request_id, "unexpected", f"{type(e).__name__}: {e}")
            raise HTTPException(status_code=500, detail="Server error during optimization.")

    @app.get("/api/download/{filename}")
    async def download(filename: str):
        try:
            content = store.load(filename)
        except DocumentNotFoundError:
            raise HTTPException(status_code=404, detail="File not found.")
        except OptimizationError as e:
            logger.log_error("download", e.stage, e.message)
            raise HTTPException(status_code=500, detail="Server error while reading file.")

        logger.log_event("download", "download", filename=filename, size=len(content))
        return Response(
            content=content,
            media_type="application/pdf",
            headers={"Content-Disposition": f'attachment; filename="{filename}"'},
        )

    @app.get("/logs")
    async def get_logs():
        """Return the contents of the server log file"""
        log_content = logger.read()
        if not log_content:
            return {"logs": "Log file not found. No requests processed yet."}
        return {"logs": log_content}

    @app.get("/")
    async def root():
        return {"message": "CV optimizer API running."}

    return app
