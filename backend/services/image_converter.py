"""Image format conversion with Pillow."""
import io
import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple
from PIL import Image

from config import CONVERTED_ARCHIVE_NAME, DEFAULT_IMAGE_QUALITY
from models.artifact import Download, OutputArtifact
from models.progress import Progress
from services.errors import ConversionError, InvalidInputError
from services.output_packager import OutputPackager

logger = logging.getLogger(__name__)

SUPPORTED_FORMATS = ("PNG", "JPEG", "WEBP", "GIF", "BMP", "TIFF")
FORMAT_ALIASES = {"JPG": "JPEG", "TIF": "TIFF"}
MEDIA_TYPES = {
    "PNG": "image/png",
    "JPEG": "image/jpeg",
    "WEBP": "image/webp",
    "GIF": "image/gif",
    "BMP": "image/bmp",
    "TIFF": "image/tiff",
}
# Formats that cannot carry an alpha channel
_NO_ALPHA = ("JPEG", "BMP")


def normalize_format(name: str) -> str:
    """Map user input like 'jpg' or 'Png' to a Pillow format name."""
    fmt = (name or "").strip().upper()
    fmt = FORMAT_ALIASES.get(fmt, fmt)
    if fmt not in SUPPORTED_FORMATS:
        raise InvalidInputError(
            f"Unsupported output format: {name}",
            {"supported": list(SUPPORTED_FORMATS)},
        )
    return fmt


def output_name(filename: str, fmt: str) -> str:
    """Replace the extension of `filename` with the target format."""
    stem, dot, _ = filename.rpartition(".")
    base = stem if dot and stem else filename
    return f"{base}.{fmt.lower()}"


def prepare_for_format(img: Image.Image, fmt: str) -> Image.Image:
    """Ensure image mode is compatible with the output format."""
    if img.mode == "CMYK":
        img = img.convert("RGB")
    if fmt in _NO_ALPHA and img.mode in ("RGBA", "P", "LA", "PA"):
        if img.mode in ("P", "PA"):
            img = img.convert("RGBA")
        background = Image.new("RGB", img.size, (255, 255, 255))
        background.paste(img, mask=img.split()[-1])
        return background
    if fmt in _NO_ALPHA and img.mode not in ("RGB", "L"):
        return img.convert("RGB")
    return img


def encode_image(data: bytes, fmt: str, quality: int = DEFAULT_IMAGE_QUALITY) -> bytes:
    """Decode `data` and re-encode it as `fmt`."""
    try:
        with Image.open(io.BytesIO(data)) as img:
            img.load()
            img = prepare_for_format(img, fmt)
            buf = io.BytesIO()
            save_kwargs: dict = {"format": fmt}
            if fmt in ("JPEG", "WEBP"):
                save_kwargs["quality"] = quality
            img.save(buf, **save_kwargs)
            return buf.getvalue()
    except Exception as e:
        raise ConversionError(f"Could not convert image: {str(e)}") from e


@dataclass
class ConversionItem:
    """One file in a batch conversion."""
    filename: str
    data: bytes
    status: str = "pending"  # pending | converting | done | error
    artifact: Optional[OutputArtifact] = None
    error: Optional[str] = None


class ImageConverter:
    """Converts uploaded images to a target raster format."""

    def __init__(self, packager: Optional[OutputPackager] = None, quality: int = DEFAULT_IMAGE_QUALITY):
        self.packager = packager or OutputPackager()
        self.quality = quality

    def convert(self, data: bytes, filename: str, target_format: str) -> OutputArtifact:
        """Convert a single image; errors propagate."""
        fmt = normalize_format(target_format)
        content = encode_image(data, fmt, self.quality)
        return OutputArtifact(name=output_name(filename, fmt), content=content, media_type=MEDIA_TYPES[fmt])

    def convert_batch(
        self,
        files: Sequence[Tuple[str, bytes]],
        target_format: str,
        progress: Optional[Progress] = None,
    ) -> List[ConversionItem]:
        """
        Convert every file in order. A failing file is marked `error` and
        the batch moves on.
        """
        fmt = normalize_format(target_format)
        items = [ConversionItem(filename=name, data=data) for name, data in files]
        if not items:
            raise InvalidInputError("Select at least one image")

        if progress:
            progress.reset()

        for done, item in enumerate(items, start=1):
            item.status = "converting"
            try:
                item.artifact = self.convert(item.data, item.filename, fmt)
                item.status = "done"
            except ConversionError as e:
                logger.warning(f"Conversion failed for {item.filename}: {e}")
                item.status = "error"
                item.error = str(e)
            if progress:
                progress.update(done, len(items))

        converted = sum(1 for item in items if item.status == "done")
        logger.info(
            f"Converted {converted}/{len(items)} images to {fmt}",
            extra={"tool": "image-convert"},
        )
        return items

    def download(self, items: Sequence[ConversionItem]) -> Download:
        """Package the successful conversions of a batch."""
        artifacts = [item.artifact for item in items if item.status == "done"]
        if not artifacts:
            raise ConversionError(
                "None of the images could be converted",
                {"failed": [item.filename for item in items]},
            )
        return self.packager.package(artifacts, CONVERTED_ARCHIVE_NAME)
