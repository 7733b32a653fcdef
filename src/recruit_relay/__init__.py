from __future__ import annotations

from dotenv import load_dotenv

# Pick up a local .env before any settings are read.
load_dotenv()
