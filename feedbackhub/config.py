# feedbackhub/config.py
"""
Runtime settings, read once from the environment.

Env vars:
- DATABASE_URL (default: sqlite:///./feedback.db, created on first use)
- HOST (default: 0.0.0.0)
- PORT (default: 3000)
- PUBLIC_HOST (default: localhost:<PORT>), share-link host when a request has no Host header
- WORKER_THREADS (default: 40), size of the request worker pool
- DB_POOL_SIZE (default: 5)
"""
import os

# Load .env BEFORE reading settings
from dotenv import load_dotenv
load_dotenv()

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./feedback.db")
HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", "3000"))
PUBLIC_HOST = os.getenv("PUBLIC_HOST", f"localhost:{PORT}")
WORKER_THREADS = int(os.getenv("WORKER_THREADS", "40"))
DB_POOL_SIZE = int(os.getenv("DB_POOL_SIZE", "5"))
