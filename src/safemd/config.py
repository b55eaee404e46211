"""Local configuration for safemd."""

from __future__ import annotations

import os
from pathlib import Path


DEFAULT_EMOJI_DATA_PATH = Path(__file__).resolve().parent / "data" / "emoji.json"
DEFAULT_SPRITESHEET_URL = "/resource/emoji/twitter-sheets-256-64.png"
DEFAULT_INLINE_EMOJI_PX = 18
DEFAULT_MAX_TOKENS = 16384
DEFAULT_HIGHLIGHT_MAX_DEPTH = 64

# Emoji metadata in emoji-mart's data layout; point at a full twitter.json to replace the bundled table.
SAFEMD_EMOJI_DATA_PATH = Path(os.getenv("SAFEMD_EMOJI_DATA_PATH", str(DEFAULT_EMOJI_DATA_PATH))).expanduser().resolve()
# Static address of the sprite sheet, resolved once at import.
SAFEMD_SPRITESHEET_URL = os.getenv("SAFEMD_SPRITESHEET_URL", DEFAULT_SPRITESHEET_URL)
SAFEMD_INLINE_EMOJI_PX = int(os.getenv("SAFEMD_INLINE_EMOJI_PX", str(DEFAULT_INLINE_EMOJI_PX)))
SAFEMD_MAX_TOKENS = int(os.getenv("SAFEMD_MAX_TOKENS", str(DEFAULT_MAX_TOKENS)))
SAFEMD_HIGHLIGHT_MAX_DEPTH = int(os.getenv("SAFEMD_HIGHLIGHT_MAX_DEPTH", str(DEFAULT_HIGHLIGHT_MAX_DEPTH)))
