"""
Serverless Function Entry Point for the Code Migration backend

REST routes work as-is. The /ws change-event stream needs a long-running
server (backend/main.py under uvicorn); serverless hosts close it per request.
"""
import sys
from pathlib import Path

# Add backend to Python path
backend_path = Path(__file__).resolve().parent.parent / "backend"
if str(backend_path) not in sys.path:
    sys.path.insert(0, str(backend_path))

from main import app  # noqa: E402

handler = app
