"""Services for the Toolverse utility API."""
from .errors import (
    ToolError,
    ToolServiceError,
    InvalidInputError,
    RangeExpressionError,
    EmptySelectionError,
    DocumentLoadError,
    ConversionError,
    UpstreamError,
    AssemblyError,
    LoadCancelledError,
)
from .document_loader import DocumentLoader
from .page_selection import PageSelectionResolver, parse_range_groups
from .document_assembler import DocumentAssembler
from .output_packager import OutputPackager
from .page_session import PageSession
from .image_converter import ImageConverter
from .image_pdf_builder import ImagePdfBuilder
from .date_calculator import DateCalculator
from .ip_lookup import IPLookupClient
from .reorder_client import ReorderClient

__all__ = [
    'ToolError', 'ToolServiceError', 'InvalidInputError', 'RangeExpressionError', 'EmptySelectionError',
    'DocumentLoadError', 'ConversionError', 'UpstreamError', 'AssemblyError', 'LoadCancelledError',
    'DocumentLoader', 'PageSelectionResolver', 'parse_range_groups', 'DocumentAssembler', 'OutputPackager',
    'PageSession', 'ImageConverter', 'ImagePdfBuilder', 'DateCalculator', 'IPLookupClient', 'ReorderClient',
]
