"""Client for the server-assisted PDF reorder endpoint."""
import json
import logging
import re
from typing import List, Optional, Tuple
import httpx

from config import REORDER_API_URL, REORDER_TIMEOUT
from services.document_assembler import reorder_filename
from services.errors import EmptySelectionError, UpstreamError

logger = logging.getLogger(__name__)

_FILENAME = re.compile(r'filename="?([^";]+)"?')


class ReorderClient:
    """Uploads a PDF plus a page order and receives the recombined PDF."""

    def __init__(self, api_url: str = REORDER_API_URL, timeout: float = REORDER_TIMEOUT):
        self.api_url = api_url
        self.timeout = timeout

    def reorder(self, data: bytes, filename: str, pages_order: List[int]) -> Tuple[str, bytes]:
        """
        Ask the server to rebuild the document in `pages_order`.

        Args:
            data: Original PDF bytes
            filename: Original filename
            pages_order: Original 1-based page numbers in the new order

        Returns:
            (download filename, PDF bytes)

        Raises:
            UpstreamError: Non-2xx response or network failure
        """
        if not pages_order:
            raise EmptySelectionError("Page order cannot be empty")

        files = {"file": (filename, data, "application/pdf")}
        form = {"pagesOrder": json.dumps(list(pages_order))}

        try:
            with httpx.Client(timeout=self.timeout) as client:
                response = client.post(self.api_url, files=files, data=form)
        except httpx.RequestError as e:
            logger.error(f"Reorder request failed: {str(e)}")
            raise UpstreamError("Failed to create the PDF on the server") from e

        if not 200 <= response.status_code < 300:
            logger.error(f"Reorder endpoint returned status {response.status_code}")
            raise UpstreamError("Failed to create the PDF on the server", {"status": response.status_code})

        return self._filename(response.headers.get("content-disposition")), response.content

    @staticmethod
    def _filename(disposition: Optional[str]) -> str:
        match = _FILENAME.search(disposition or "")
        return match.group(1) if match else reorder_filename()
