"""Output packager: single artifact download or zip bundle."""
import io
import logging
import zipfile
from typing import Sequence

from models.artifact import Download, OutputArtifact, ZIP_MEDIA_TYPE
from services.errors import EmptySelectionError

logger = logging.getLogger(__name__)


class OutputPackager:
    """Turns the artifacts of a run into one downloadable file."""

    def package(self, artifacts: Sequence[OutputArtifact], archive_name: str) -> Download:
        """
        Package artifacts for download.

        Args:
            artifacts: Files produced by a run
            archive_name: Name of the zip used when there is more than one file

        Returns:
            The artifact itself when there is exactly one, otherwise a zip archive.
            Repeated names keep a single entry holding the last artifact.
        """
        if not artifacts:
            raise EmptySelectionError("There is nothing to download")

        if len(artifacts) == 1:
            artifact = artifacts[0]
            return Download(filename=artifact.name, content=artifact.content, media_type=artifact.media_type)

        entries = {}
        for artifact in artifacts:
            entries[artifact.name] = artifact.content

        buffer = io.BytesIO()
        with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as archive:
            for name, content in entries.items():
                archive.writestr(name, content)

        logger.info(f"Bundled {len(entries)} files into {archive_name}")
        return Download(filename=archive_name, content=buffer.getvalue(), media_type=ZIP_MEDIA_TYPE)
