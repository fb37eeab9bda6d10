"""Configuration management for the Toolverse utility service."""
import os
import logging
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

# API Keys
IPINFO_TOKEN = os.getenv("IPINFO_TOKEN")

# Upstream Services
IPINFO_BASE_URL = os.getenv("IPINFO_BASE_URL", "https://ipinfo.io")
IP_LOOKUP_TIMEOUT = float(os.getenv("IP_LOOKUP_TIMEOUT", "10"))
REORDER_API_URL = os.getenv("REORDER_API_URL", "http://localhost:8000/api/pdf/reorder")
REORDER_TIMEOUT = float(os.getenv("REORDER_TIMEOUT", "60"))

# Server Configuration
PORT = int(os.getenv("PORT", "8000"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FORMAT = os.getenv("LOG_FORMAT", "text")  # "text" or "json"

# CORS Configuration
CORS_ORIGINS = os.getenv(
    "CORS_ORIGINS",
    "http://localhost:3000,http://localhost:3001"
).split(",")

# Upload Limits
MAX_UPLOAD_MB = int(os.getenv("MAX_UPLOAD_MB", "50"))
MAX_UPLOAD_BYTES = MAX_UPLOAD_MB * 1024 * 1024

# PDF Configuration
PREVIEW_SCALE = 0.5  # thumbnail render scale
SPLIT_ARCHIVE_NAME = "split-pages.zip"
REORDER_FILE_PREFIX = "toolverse-reordered"

# Image Configuration
DEFAULT_IMAGE_QUALITY = 90
CONVERTED_ARCHIVE_NAME = "converted_images.zip"

# Logging Configuration
logging.basicConfig(
    level=getattr(logging, LOG_LEVEL),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
