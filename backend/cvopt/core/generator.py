import time
from typing import Any, Dict, List, Optional

from langchain_core.callbacks import BaseCallbackHandler
from langchain_core.output_parsers import StrOutputParser
from langchain_core.outputs import LLMResult
from langchain_openai import ChatOpenAI

from ..factories.prompt_factory import PromptFactory
from ..spec.models import GeneratorConfig
from ..utils.errors import GenerationError

class LatencyMonitorCallback(BaseCallbackHandler):
    def __init__(self):
        self.start_time = 0.0
        self.metrics: Dict[str, Any] = {}

    def on_chat_model_start(self, serialized, messages, **kwargs):
        self.start_time = time.time()

    def on_llm_start(self, serialized, prompts, **kwargs):
        self.start_time = time.time()

    def on_llm_end(self, response: LLMResult, **kwargs):
        self.metrics["total_time"] = time.time() - self.start_time

        usage = (response.llm_output or {}).get("token_usage") or {}
        if usage:
            self.metrics["token_usage"] = usage

class ResumeGenerator:
    """Sends the CV and job description to the chat model and returns its raw text."""

    def __init__(
        self,
        prompt_factory: PromptFactory,
        config: Optional[GeneratorConfig] = None,
    ) -> None:
        self.prompt_factory = prompt_factory
        self.config = config or GeneratorConfig()
        self._chain = None

    @property
    def chain(self):
        # Built on first use so the app can start without credentials
        if self._chain is None:
            llm = ChatOpenAI(
                model=self.config.model_name,
                temperature=self.config.temperature,
                timeout=self.config.timeout,
                max_retries=self.config.max_retries,
            )
            self._chain = llm | StrOutputParser()
        return self._chain

    async def agenerate(
        self,
        job_description: str | None,
        document: bytes,
        mime_type: str = "application/pdf",
        filename: str = "cv.pdf",
        callbacks: Optional[List[BaseCallbackHandler]] = None,
    ) -> str:
        messages = self.prompt_factory.create_messages(
            job_description=job_description,
            document=document,
            mime_type=mime_type,
            filename=filename,
        )

        config = {"callbacks": callbacks} if callbacks else {}
        try:
            text = await self.chain.ainvoke(messages, config=config)
        except Exception as e:
            raise GenerationError(f"{type(e).__name__}: {e}") from e

        return text
