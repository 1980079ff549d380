# path: route-metadata-api/route_metadata/config.py
"""Service configuration, loaded from environment variables."""

import os
from pathlib import Path

from dotenv import load_dotenv

REPO_ROOT = Path(__file__).resolve().parent.parent

load_dotenv(REPO_ROOT / ".env")

LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

# "overpass" queries OpenStreetMap; "fallback" classifies everything by mode default
CLASSIFIER_BACKEND = os.environ.get("CLASSIFIER_BACKEND", "overpass")

OVERPASS_URL = os.environ.get("OVERPASS_URL", "https://overpass-api.de/api/interpreter")
OVERPASS_RADIUS_M = float(os.environ.get("OVERPASS_RADIUS_M", "25"))
OVERPASS_TIMEOUT_SECONDS = float(os.environ.get("OVERPASS_TIMEOUT_SECONDS", "5"))

# Whole-route classification budget; past it the route gets fallback segments
CLASSIFICATION_TIMEOUT_SECONDS = float(os.environ.get("CLASSIFICATION_TIMEOUT_SECONDS", "8"))
CLASSIFIER_CONCURRENCY = int(os.environ.get("CLASSIFIER_CONCURRENCY", "8"))

# Lookup cache
CLASSIFIER_CACHE_SIZE = int(os.environ.get("CLASSIFIER_CACHE_SIZE", "10000"))
CACHE_QUANTIZE_PLACES = int(os.environ.get("CACHE_QUANTIZE_PLACES", "5"))

# Server
HOST = os.environ.get("HOST", "0.0.0.0")
PORT = int(os.environ.get("PORT", "8000"))
