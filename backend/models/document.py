"""Document data models."""
import base64
from dataclasses import dataclass, field
from typing import List


@dataclass
class PagePreview:
    """Rasterized thumbnail of a single page."""
    page_number: int  # 1-indexed original page number
    image: bytes  # PNG
    width: int
    height: int

    def data_url(self) -> str:
        return "data:image/png;base64," + base64.b64encode(self.image).decode("ascii")


@dataclass
class SourceDocument:
    """Represents an uploaded PDF and its parsed properties."""
    filename: str
    data: bytes
    page_count: int
    previews: List[PagePreview] = field(default_factory=list)
