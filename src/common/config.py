"""
Configuration module for the tax return reader.

This module centralizes the loading and validation of all configuration
parameters from environment variables. It provides a single `Settings`
class that acts as a container for all configurable values. The object is
passed explicitly into every component, so nothing reads API keys from
ambient process state after start-up.
"""

import os
from typing import Literal

from PIL import Image


def _parse_bool(value: str, var_name: str) -> bool:
    normalized = value.strip().lower()
    if normalized in ("1", "true", "yes", "on"):
        return True
    if normalized in ("0", "false", "no", "off", ""):
        return False
    raise ValueError(f"{var_name} must be a boolean (true/false).")


class Settings:
    """
    A container for all configuration settings, loaded from environment variables.

    This class centralizes configuration, providing default values for optional
    settings and raising errors for missing or invalid settings.
    """

    # --- LLM Provider Configuration ---
    LLM_PROVIDER: Literal["openai", "ollama"]
    OLLAMA_BASE_URL: str | None
    OPENAI_API_KEY: str | None

    # --- Classification ---
    CLASSIFY_MODEL: str
    CLASSIFY_INPUT_MODE: Literal["pdf", "images"]
    CLASSIFY_CHUNK_SIZE: int
    CLASSIFY_SKIP_THRESHOLD: int
    CLASSIFY_WORKERS: int
    CLASSIFY_TIMEOUT: int
    CLASSIFY_MAX_TOKENS: int
    CLASSIFY_STRICT_FORM_TYPES: bool

    # --- Image mode ---
    CLASSIFY_DPI: int
    CLASSIFY_MAX_SIDE: int

    # --- Requests ---
    REQUEST_TIMEOUT: int

    # --- Storage ---
    RETURNS_FILE: str

    # --- Logging ---
    LOG_LEVEL: str
    LOG_FORMAT: Literal["console", "json"]

    def __init__(self):
        """
        Loads settings from environment variables and performs validation.
        """
        # --- LLM Provider Configuration ---
        self.LLM_PROVIDER = os.getenv("LLM_PROVIDER", "openai").strip().lower()
        if self.LLM_PROVIDER not in ("openai", "ollama"):
            raise ValueError("LLM_PROVIDER must be 'openai' or 'ollama'")

        if self.LLM_PROVIDER == "ollama":
            self.OLLAMA_BASE_URL = os.getenv(
                "OLLAMA_BASE_URL", "http://localhost:11434/v1/"
            )
            self.OPENAI_API_KEY = None  # Not used for Ollama
            default_model = "gemma3:27b"
            default_input_mode = "images"
        else:  # openai
            self.OLLAMA_BASE_URL = None
            # Required only once an OpenAI client is built
            self.OPENAI_API_KEY = os.getenv("OPENAI_API_KEY")
            default_model = "gpt-5-mini"
            default_input_mode = "pdf"

        # --- Classification ---
        self.CLASSIFY_MODEL = os.getenv("CLASSIFY_MODEL", default_model).strip()
        if not self.CLASSIFY_MODEL:
            raise ValueError("CLASSIFY_MODEL must not be empty.")

        self.CLASSIFY_INPUT_MODE = (
            os.getenv("CLASSIFY_INPUT_MODE", default_input_mode).strip().lower()
        )
        if self.CLASSIFY_INPUT_MODE not in ("pdf", "images"):
            raise ValueError("CLASSIFY_INPUT_MODE must be 'pdf' or 'images'")

        self.CLASSIFY_CHUNK_SIZE = self._get_int("CLASSIFY_CHUNK_SIZE", 15, minimum=1)
        self.CLASSIFY_SKIP_THRESHOLD = self._get_int(
            "CLASSIFY_SKIP_THRESHOLD", 20, minimum=0
        )
        self.CLASSIFY_WORKERS = self._get_int("CLASSIFY_WORKERS", 8, minimum=1)
        self.CLASSIFY_TIMEOUT = self._get_int("CLASSIFY_TIMEOUT", 600, minimum=0)
        self.CLASSIFY_MAX_TOKENS = self._get_int(
            "CLASSIFY_MAX_TOKENS", 4096, minimum=1
        )
        self.CLASSIFY_STRICT_FORM_TYPES = _parse_bool(
            os.getenv("CLASSIFY_STRICT_FORM_TYPES", "false"),
            "CLASSIFY_STRICT_FORM_TYPES",
        )

        # --- Image mode ---
        self.CLASSIFY_DPI = self._get_int("CLASSIFY_DPI", 150, minimum=1)
        self.CLASSIFY_MAX_SIDE = self._get_int("CLASSIFY_MAX_SIDE", 1600, minimum=1)

        # --- Requests ---
        self.REQUEST_TIMEOUT = self._get_int("REQUEST_TIMEOUT", 180, minimum=1)

        # --- Storage ---
        self.RETURNS_FILE = os.getenv("RETURNS_FILE", ".tax-returns.json")

        # --- Logging ---
        self.LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").strip().upper()
        self.LOG_FORMAT = os.getenv("LOG_FORMAT", "console").strip().lower()
        if self.LOG_FORMAT not in ("console", "json"):
            raise ValueError("LOG_FORMAT must be 'console' or 'json'")

    def _get_int(self, var_name: str, default: int, minimum: int) -> int:
        """Read an integer environment variable with a lower bound."""
        raw = os.getenv(var_name)
        if raw is None or not raw.strip():
            return default
        try:
            value = int(raw)
        except ValueError as e:
            raise ValueError(f"{var_name} must be an integer, got {raw!r}.") from e
        if value < minimum:
            raise ValueError(f"{var_name} must be >= {minimum}, got {value}.")
        return value


def setup_libraries(settings: Settings) -> None:
    """
    Configures third-party libraries based on the application settings.
    """
    if settings.CLASSIFY_INPUT_MODE == "images":
        # Tax forms rasterised at high DPI can trip Pillow's decompression guard
        Image.MAX_IMAGE_PIXELS = None
