"""
Configuration, constants, and provider client initialization.
"""

import os
import logging

from dotenv import load_dotenv
import google.generativeai as genai

# --- LOAD ENV ---
load_dotenv()

# --- LOGGING ---
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
logging.basicConfig(
    level=getattr(logging, LOG_LEVEL, logging.INFO),
    format="%(asctime)s [%(levelname)s] %(message)s",
)
logger = logging.getLogger("voice_chat")


def log_event(level: int, message: str, **data):
    """Lightweight structured logging helper."""
    try:
        serialized = " | ".join(f"{k}={v}" for k, v in data.items())
        logger.log(level, f"{message}{' | ' + serialized if serialized else ''}")
    except Exception:
        logger.log(level, message)


def env_flag(name: str, default: bool = False) -> bool:
    """Read a boolean flag from the environment."""
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


# --- SERVER ---
PORT = int(os.getenv("PORT", "5050"))

# --- CONSTANTS ---
SYSTEM_PROMPT = """You are a helpful assistant. Follow these rules:
1. Respond concisely.
2. Avoid markdown formatting (like * or #).
3. If you create a numbered or bulleted list, start each item on a new line. For example:
   1. First item.
   2. Second item.
   - Bullet one.
   - Bullet two.
4. Keep responses under 500 tokens."""

MAX_TOKENS = 500
TEMPERATURE = 0.7
TRANSCRIPTION_LANGUAGE = os.getenv("TRANSCRIPTION_LANGUAGE", "en")

# Smallest upload accepted as real audio
MIN_AUDIO_BYTES = 100

# Whisper endpoints reject files over 25 MB
MAX_UPLOAD_BYTES = int(os.getenv("MAX_UPLOAD_BYTES", str(25 * 1024 * 1024)))

# --- HISTORY ---
CHAT_HISTORY_ENABLED = env_flag("CHAT_HISTORY_ENABLED", False)
MAX_CONVERSATIONS = int(os.getenv("MAX_CONVERSATIONS", "50"))
TITLE_MAX_CHARS = 40

# --- AUDIO UPLOADS ---
SAVE_AUDIO_UPLOADS = env_flag("SAVE_AUDIO_UPLOADS", False)
AUDIO_UPLOAD_DIRNAME = "chatbot-audio-uploads"

# --- API KEYS ---
GROQ_API_KEY = os.getenv("GROQ_API_KEY")
GEMINI_API_KEY = os.getenv("GEMINI_API_KEY")
OPENAI_API_KEY = os.getenv("OPENAI_API_KEY")
DEEPSEEK_API_KEY = os.getenv("DEEPSEEK_API_KEY")
DEEPSEEK_BASE_URL = os.getenv("DEEPSEEK_BASE_URL", "https://api.deepseek.com")

# --- MODELS ---
GEMINI_CHAT_MODEL = os.getenv("GEMINI_CHAT_MODEL", "gemini-2.5-flash")
DEEPSEEK_CHAT_MODEL = os.getenv("DEEPSEEK_CHAT_MODEL", "deepseek-chat")
OPENAI_CHAT_MODEL = os.getenv("OPENAI_CHAT_MODEL", "gpt-3.5-turbo")
GROQ_CHAT_MODEL = os.getenv("GROQ_CHAT_MODEL", "llama-3.3-70b-versatile")
GROQ_WHISPER_MODEL = os.getenv("GROQ_WHISPER_MODEL", "whisper-large-v3")
OPENAI_WHISPER_MODEL = os.getenv("OPENAI_WHISPER_MODEL", "whisper-1")

# --- INITIALIZE SERVICES ---

# Groq client for Whisper transcription (and optional chat)
groq_client = None
if GROQ_API_KEY:
    from groq import Groq
    groq_client = Groq(api_key=GROQ_API_KEY)

# Gemini for chat
gemini_model = None
if GEMINI_API_KEY:
    genai.configure(api_key=GEMINI_API_KEY)
    gemini_model = genai.GenerativeModel(GEMINI_CHAT_MODEL, system_instruction=SYSTEM_PROMPT)

# OpenAI for Whisper transcription and chat
openai_client = None
if OPENAI_API_KEY:
    from openai import OpenAI
    openai_client = OpenAI(api_key=OPENAI_API_KEY)

# DeepSeek speaks the OpenAI wire protocol
deepseek_client = None
if DEEPSEEK_API_KEY:
    from openai import OpenAI
    deepseek_client = OpenAI(base_url=DEEPSEEK_BASE_URL, api_key=DEEPSEEK_API_KEY)


# --- PROVIDER SELECTION ---

CHAT_PROVIDERS = ("gemini", "deepseek", "openai", "groq")
TRANSCRIPTION_PROVIDERS = ("groq", "openai")

CHAT_PROVIDER = os.getenv("CHAT_PROVIDER", "auto").strip().lower()
TRANSCRIPTION_PROVIDER = os.getenv("TRANSCRIPTION_PROVIDER", "auto").strip().lower()

