"""Settings read from the environment (or a local .env file)."""

import os

from dotenv import load_dotenv

load_dotenv()

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./boardly.db")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# Multiplier for the bot "thinking" pauses. 0 makes bots play instantly.
BOT_THINK_SCALE = float(os.getenv("BOT_THINK_SCALE", "1.0"))

# "permissive" or "strict", see src.core.shared_types.CastlingMode
CASTLING_MODE = os.getenv("CASTLING_MODE", "permissive").lower()
