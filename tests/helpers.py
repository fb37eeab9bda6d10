"""Builders for test PDFs and images."""
import io

import fitz  # PyMuPDF
from PIL import Image


def make_pdf(page_count: int) -> bytes:
    """PDF whose page N carries the text 'Page N'."""
    with fitz.open() as doc:
        for number in range(1, page_count + 1):
            page = doc.new_page()
            page.insert_text((72, 72), f"Page {number}")
        return doc.tobytes()


def page_texts(data: bytes) -> list:
    with fitz.open(stream=data, filetype="pdf") as doc:
        return [page.get_text().strip() for page in doc]


def make_image(size=(200, 100), mode="RGB", fmt="PNG", color=(255, 0, 0)) -> bytes:
    if mode == "RGBA" and len(color) == 3:
        color = color + (128,)
    buf = io.BytesIO()
    Image.new(mode, size, color).save(buf, format=fmt)
    return buf.getvalue()
