"""Output artifact data models."""
from dataclasses import dataclass

PDF_MEDIA_TYPE = "application/pdf"
ZIP_MEDIA_TYPE = "application/zip"


@dataclass(frozen=True)
class OutputArtifact:
    """One produced document ready for download."""
    name: str
    content: bytes
    media_type: str = PDF_MEDIA_TYPE


@dataclass(frozen=True)
class Download:
    """Packaged result handed to the client: a single artifact or an archive."""
    filename: str
    content: bytes
    media_type: str
