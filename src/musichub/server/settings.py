import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

BASE_DIR = Path(os.getcwd())
DATA_DIR = Path(os.getenv("MUSICHUB_DATA_DIR", BASE_DIR / "data"))
MEDIA_DIR = Path(os.getenv("MUSICHUB_MEDIA_DIR", BASE_DIR / "media"))

HOST = os.getenv("HOST", "127.0.0.1")
PORT = int(os.getenv("PORT", 5000))

DEFAULT_COVER = os.getenv(
    "MUSICHUB_DEFAULT_COVER",
    "https://images.unsplash.com/photo-1614613535308-eb5fbd3d2c17?w=500&auto=format&fit=crop&q=60",
)
DEFAULT_PLAYLIST_DESCRIPTION = "New playlist"

LOG_LEVEL = os.getenv("MUSICHUB_LOG_LEVEL", "INFO")
