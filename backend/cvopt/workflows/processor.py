from typing import Optional

from ..spec.output_models import PartitionedResponse

def partition_response(raw: Optional[str], marker: str) -> PartitionedResponse:
    """
    Split a raw model response into the CV text and the evaluation text.

    Only the first occurrence of ``marker`` is a boundary: everything from it
    onward, later occurrences included, belongs to the evaluation. A response
    without the marker has no evaluation section.
    """
    if not marker:
        raise ValueError("marker must be a non-empty string")

    raw = raw or ""
    index = raw.find(marker)
    if index == -1:
        return PartitionedResponse(primary=raw.strip(), secondary="")

    return PartitionedResponse(
        primary=raw[:index].strip(),
        secondary=raw[index:].strip(),
    )

def split_lines(text: str) -> list[str]:
    """Break primary content into the lines the renderer lays out."""
    return text.splitlines()
