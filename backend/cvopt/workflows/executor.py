import uuid
from typing import Any, Optional

from starlette.concurrency import run_in_threadpool

from ..core.generator import LatencyMonitorCallback
from ..rendering.renderer import PDFRenderer
from ..spec.output_models import OptimizeResult
from ..utils.errors import GenerationError, OptimizationError, StorageError
from ..utils.logger import JSONLLogger
from .processor import partition_response, split_lines

class OptimizationPipeline:
    """Runs one request: generate, partition, render, respond. Strictly in that order."""

    def __init__(
        self,
        generator: Any,
        renderer: PDFRenderer,
        marker: str,
        logger: Optional[JSONLLogger] = None,
    ) -> None:
        self.generator = generator
        self.renderer = renderer
        self.marker = marker
        self.logger = logger

    def _log(self, request_id: str, event: str, **fields: Any) -> None:
        if self.logger:
            self.logger.log_event(request_id, event, **fields)

    async def run(
        self,
        document: bytes,
        job_description: str | None,
        mime_type: str = "application/pdf",
        filename: str = "cv.pdf",
        request_id: Optional[str] = None,
    ) -> OptimizeResult:
        request_id = request_id or uuid.uuid4().hex

        monitor = LatencyMonitorCallback()
        raw = await self.generator.agenerate(
            job_description,
            document,
            mime_type=mime_type,
            filename=filename,
            callbacks=[monitor],
        )
        if raw is None:
            raise GenerationError("Model returned no content")
        self._log(request_id, "generation_complete", response_chars=len(raw), metrics=monitor.metrics)

        partitioned = partition_response(raw, self.marker)
        self._log(
            request_id,
            "partitioned",
            primary_chars=len(partitioned.primary),
            secondary_chars=len(partitioned.secondary),
            marker_found=bool(partitioned.secondary),
        )

        lines = split_lines(partitioned.primary)
        try:
            handle = await run_in_threadpool(self.renderer.render, lines)
        except OptimizationError:
            raise
        except OSError as e:
            raise StorageError(f"Failed to render document: {e}") from e
        self._log(request_id, "document_rendered", filename=handle, line_count=len(lines))

        return OptimizeResult(filename=handle, frontendContent=partitioned.secondary)
