# app/config.py
import os
from dotenv import load_dotenv

load_dotenv()  # Load environment variables from .env

# Completion collaborator
LLM_PROVIDER = os.getenv("LLM_PROVIDER", "gemini").strip().lower()
GEMINI_API_KEY = os.getenv("GEMINI_API_KEY", "")
GEMINI_MODEL = os.getenv("GEMINI_MODEL", "gemini-2.5-flash")
OPENAI_API_KEY = os.getenv("OPENAI_API_KEY", "")
OPENAI_MODEL = os.getenv("OPENAI_MODEL", "gpt-4o")

# Low temperature keeps the fenced JSON well formed
PROTOCOL_TEMPERATURE = float(os.getenv("PROTOCOL_TEMPERATURE", "0.3"))
IMPROVE_TEXT_TEMPERATURE = float(os.getenv("IMPROVE_TEXT_TEMPERATURE", "0.7"))
IMPROVE_TEXT_MAX_TOKENS = int(os.getenv("IMPROVE_TEXT_MAX_TOKENS", "512"))

# Hosted database REST endpoint used when a protocol is confirmed
PROTOCOLS_API_URL = os.getenv("PROTOCOLS_API_URL", "").rstrip("/")
PROTOCOLS_API_KEY = os.getenv("PROTOCOLS_API_KEY", "")
PROTOCOLS_API_TIMEOUT = float(os.getenv("PROTOCOLS_API_TIMEOUT", "10"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
