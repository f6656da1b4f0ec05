import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

BASE_DIR = Path(__file__).resolve().parent.parent

# Seed data (patients, doctors, credentials). Loaded once at startup; failure is fatal.
SEED_PATH = os.getenv("SEED_PATH", str(BASE_DIR / "data" / "seed.json"))

# Snapshot of patient -> doctor selections. Defaults to a file beside the seed.
SELECTIONS_PATH = (
    os.getenv("SELECTIONS_PATH", "").strip()
    or str(Path(SEED_PATH).resolve().parent / "selections.json")
)

# Browser client assets, served at "/" when the directory exists
STATIC_DIR = os.getenv("STATIC_DIR", str(BASE_DIR / "web"))

# Idle interval before a doctor stream emits a keep-alive ping
HEARTBEAT_SECONDS = float(os.getenv("HEARTBEAT_SECONDS", "25"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", "8080"))
