"""Configuration management for the stovetop recipe core.

Loads environment variables from system environment and .env file.
Priority order: system environment > .env file > hardcoded defaults
"""

import os

from dotenv import load_dotenv


# Load .env file (if exists, silently continues if missing)
load_dotenv()


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in ("true", "1", "yes")


class Config:
    """Application configuration loaded from environment variables."""

    def __init__(self) -> None:
        """Initialize configuration from environment variables."""
        # Voice channel for guided cooking. When disabled the timer starts as soon as a step is entered
        self.VOICE_ENABLED: bool = _env_bool("VOICE_ENABLED", "true")
        # Language hint passed to the speech device with every utterance
        self.SPEECH_LANGUAGE: str = os.getenv("SPEECH_LANGUAGE", "en-US")
        # Rate/pitch hints for step announcements, hints and alerts (1.0 = device default)
        self.SPEECH_RATE: float = float(os.getenv("SPEECH_RATE", "0.9"))
        self.SPEECH_PITCH: float = float(os.getenv("SPEECH_PITCH", "1.05"))
        # Final 5-second countdown is spoken faster and slightly higher
        self.COUNTDOWN_SPEECH_RATE: float = float(os.getenv("COUNTDOWN_SPEECH_RATE", "1.2"))
        self.COUNTDOWN_SPEECH_PITCH: float = float(os.getenv("COUNTDOWN_SPEECH_PITCH", "1.1"))
        # Period of the single tick source driving the guided session
        self.TICK_INTERVAL_SECONDS: float = float(os.getenv("TICK_INTERVAL_SECONDS", "1.0"))
        # Ticks to wait after a timer expires before moving to the next step
        self.AUTO_ADVANCE_SECONDS: int = int(os.getenv("AUTO_ADVANCE_SECONDS", "10"))
        # Delay before the first step is announced when a session starts
        self.ANNOUNCE_DELAY_SECONDS: float = float(os.getenv("ANNOUNCE_DELAY_SECONDS", "0.5"))
        # Upper bound on pasted recipe text
        self.MAX_INPUT_CHARS: int = int(os.getenv("MAX_INPUT_CHARS", "20000"))

    def validate(self) -> None:
        """Validate configuration values.

        Raises:
            ValueError: If a value is out of its allowed range.
        """
        if not self.SPEECH_LANGUAGE.strip():
            raise ValueError("SPEECH_LANGUAGE must not be empty")
        for name in ("SPEECH_RATE", "SPEECH_PITCH", "COUNTDOWN_SPEECH_RATE", "COUNTDOWN_SPEECH_PITCH"):
            value = getattr(self, name)
            if not (0.0 < value <= 2.0):
                raise ValueError(f"{name} must be between 0.0 (exclusive) and 2.0, got: {value}")
        if self.TICK_INTERVAL_SECONDS <= 0:
            raise ValueError(
                f"TICK_INTERVAL_SECONDS must be positive, got: {self.TICK_INTERVAL_SECONDS}"
            )
        if self.AUTO_ADVANCE_SECONDS < 1:
            raise ValueError(
                f"AUTO_ADVANCE_SECONDS must be at least 1, got: {self.AUTO_ADVANCE_SECONDS}"
            )
        if self.ANNOUNCE_DELAY_SECONDS < 0:
            raise ValueError(
                f"ANNOUNCE_DELAY_SECONDS must not be negative, got: {self.ANNOUNCE_DELAY_SECONDS}"
            )
        if self.MAX_INPUT_CHARS < 100:
            raise ValueError(
                f"MAX_INPUT_CHARS must be at least 100, got: {self.MAX_INPUT_CHARS}"
            )


# Create module-level config instance and validate immediately
config = Config()
config.validate()
