import base64
from typing import List

from langchain_core.messages import BaseMessage, HumanMessage, SystemMessage

from ..workflows.prompts.optimize_prompts import OptimizerSystemPrompt, OptimizerTaskPrompt

DEFAULT_JOB_DESCRIPTION = "Optimize this CV for general use."

class PromptFactory:
    def __init__(self, marker: str, default_job_description: str = DEFAULT_JOB_DESCRIPTION):
        self.marker = marker
        self.default_job_description = default_job_description

    def create_prompt(self, job_description: str | None) -> str:
        job_description = (job_description or "").strip() or self.default_job_description
        return OptimizerTaskPrompt.format(
            job_description=job_description,
            marker=self.marker,
        )

    def create_messages(
        self,
        job_description: str | None,
        document: bytes,
        mime_type: str = "application/pdf",
        filename: str = "cv.pdf",
    ) -> List[BaseMessage]:
        """Build the chat messages: instructions, job description and the attached CV."""
        return [
            SystemMessage(content=OptimizerSystemPrompt.strip()),
            HumanMessage(content=[
                {"type": "text", "text": self.create_prompt(job_description)},
                {
                    "type": "file",
                    "source_type": "base64",
                    "mime_type": mime_type,
                    "data": base64.b64encode(document).decode("ascii"),
                    "filename": filename,
                },
            ]),
        ]
