"""Packs a sequence of images into a PDF, one image per page."""
import io
import logging
from typing import Optional, Sequence, Tuple
import fitz  # PyMuPDF
from PIL import Image

from config import DEFAULT_IMAGE_QUALITY
from models.artifact import OutputArtifact
from models.progress import Progress
from services.errors import AssemblyError, ConversionError, InvalidInputError
from services.image_converter import encode_image

logger = logging.getLogger(__name__)

PAGE_SIZES = {
    "A4": fitz.paper_size("a4"),
    "LETTER": fitz.paper_size("letter"),
}


class ImagePdfBuilder:
    """Builds a PDF from uploaded images."""

    def build(
        self,
        files: Sequence[Tuple[str, bytes]],
        page_size: str = "auto",
        quality: int = DEFAULT_IMAGE_QUALITY,
        resize_ratio: int = 100,
        filename: Optional[str] = None,
        progress: Optional[Progress] = None,
    ) -> OutputArtifact:
        """
        Create a PDF with one page per image, in the given order.

        Args:
            files: (filename, bytes) pairs
            page_size: "auto" (page matches the image), "A4" or "Letter"
            quality: JPEG quality used when embedding images (1-100)
            resize_ratio: Image width as a percentage of the page width (1-100)
            filename: Output name without extension (default "converted")
            progress: Updated after each image

        Returns:
            OutputArtifact named `{filename}.pdf`
        """
        if not files:
            raise InvalidInputError("Select at least one image")
        size_key = (page_size or "auto").strip().upper()
        if size_key != "AUTO" and size_key not in PAGE_SIZES:
            raise InvalidInputError(f"Unknown page size: {page_size}", {"supported": ["auto", "A4", "Letter"]})
        if not 1 <= quality <= 100:
            raise InvalidInputError("Quality must be between 1 and 100")
        if not 1 <= resize_ratio <= 100:
            raise InvalidInputError("Resize ratio must be between 1 and 100")

        scale = resize_ratio / 100
        name = f"{(filename or '').strip() or 'converted'}.pdf"

        if progress:
            progress.reset()

        with fitz.open() as pdf:
            for done, (image_name, data) in enumerate(files, start=1):
                width, height = self._image_size(data, image_name)
                jpeg = encode_image(data, "JPEG", quality)

                if size_key == "AUTO":
                    page = pdf.new_page(width=width * scale, height=height * scale)
                    rect = page.rect
                else:
                    page_width, page_height = PAGE_SIZES[size_key]
                    page = pdf.new_page(width=page_width, height=page_height)
                    draw_width = page_width * scale
                    draw_height = height * draw_width / width
                    if draw_height > page_height:
                        draw_width, draw_height = draw_width * page_height / draw_height, page_height
                    rect = fitz.Rect(0, 0, draw_width, draw_height)

                page.insert_image(rect, stream=jpeg)
                if progress:
                    progress.update(done, len(files))
                logger.debug(f"Added {image_name} as page {done}/{len(files)}")

            try:
                content = pdf.tobytes(garbage=3, deflate=True)
            except Exception as e:
                logger.error(f"Failed to save {name}: {str(e)}", exc_info=True)
                raise AssemblyError("Failed to create the PDF", {"output": name}) from e

        logger.info(f"Packed {len(files)} images into {name}", extra={"tool": "image-to-pdf"})
        return OutputArtifact(name=name, content=content)

    @staticmethod
    def _image_size(data: bytes, image_name: str) -> Tuple[int, int]:
        try:
            with Image.open(io.BytesIO(data)) as img:
                return img.size
        except Exception as e:
            raise ConversionError(f"Could not read image {image_name}", {"filename": image_name}) from e
