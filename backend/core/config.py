"""
Configuration constants and global environment states for the application.
"""

import os
import tempfile

from dotenv import load_dotenv

load_dotenv()

VERSION = "1.0.0"

# Server
HOST = os.environ.get("HOST", "0.0.0.0")
PORT = int(os.environ.get("PORT", "3000"))
LOG_LEVEL = os.environ.get("LOG_LEVEL", "info")
VERBOSE = os.environ.get("VERBOSE") == "true"

# Storage
DB_FILE = os.environ.get("DB_FILE", "db.json")
UPLOAD_DIR = os.environ.get("UPLOAD_DIR", "uploads")
BACKUPS_DIR = os.environ.get("BACKUPS_DIR", "backups")

UPLOAD_FOLDERS = ("profiles", "photos", "stickers")
MAX_UPLOAD_BYTES = 10 * 1024 * 1024
ALLOWED_IMAGE_TYPES = {"image/jpeg", "image/png", "image/jpg", "image/heic"}

# Gemini (emotion analysis, sticker images)
GEMINI_API_BASE_URL = os.environ.get("GEMINI_API_BASE_URL", "https://generativelanguage.googleapis.com/v1beta")
GEMINI_MODEL = os.environ.get("GEMINI_MODEL", "gemini-2.5-flash-image")
GEMINI_IMAGE_MODEL = os.environ.get("GEMINI_IMAGE_MODEL", "gemini-2.5-flash-image")
GEMINI_API_KEY = os.environ.get("GEMINI_API_KEY", "")

# ARK (diary text, Seedream images)
ARK_API_BASE_URL = os.environ.get("ARK_API_BASE_URL", "https://ark.cn-beijing.volces.com/api/v3")
ARK_VISION_MODEL = os.environ.get("ARK_VISION_MODEL", "doubao-1-5-vision-pro-32k-250115")
ARK_IMAGE_MODEL = os.environ.get("ARK_IMAGE_MODEL", "doubao-seedream-4-0-250828")
ARK_API_KEY = os.environ.get("ARK_API_KEY", "")

STICKER_PROVIDER = os.environ.get("STICKER_PROVIDER", "gemini")
DIARY_LANGUAGE = os.environ.get("DIARY_LANGUAGE", "Chinese")
AI_REQUEST_TIMEOUT = float(os.environ.get("AI_REQUEST_TIMEOUT", "120"))

# LLM Constants (local animal recognition)
OLLAMA_HOST = os.environ.get("OLLAMA_HOST", "127.0.0.1")
OLLAMA_PORT = os.environ.get("OLLAMA_PORT", "11434")
OLLAMA_URL = f"http://{OLLAMA_HOST}:{OLLAMA_PORT}/api/generate"
ACTIVE_OLLAMA_MODEL = os.environ.get("ACTIVE_OLLAMA_MODEL", "llama3.2-vision:latest")

# Photo scanner
PHOTO_LIBRARY_DIR = os.environ.get("PHOTO_LIBRARY_DIR", "photo_library")
SCAN_EXPORT_DIR = os.environ.get("SCAN_EXPORT_DIR", tempfile.gettempdir())
PROCESSED_STORE_FILE = os.environ.get("PROCESSED_STORE_FILE", "processed_photos.json")

BACKGROUND_SCAN_INTERVAL = 15 * 60  # earliest begin of the next background run, seconds
BACKGROUND_SCAN_BUDGET = float(os.environ.get("BACKGROUND_SCAN_BUDGET", "30"))
BACKGROUND_SCAN_LIMIT = 30
MANUAL_SCAN_LIMIT = 50
