"""
asgi.py -- Application assembly for the car rental backend.

Mounts the uploaded-image directory on top of the API app so stored image
references (/uploads/<name>) resolve to files. Kept out of api/main.py so the
API can be tested without a real upload directory on disk.

Run with:  uvicorn asgi:app --reload
           python main.py
"""

from fastapi.staticfiles import StaticFiles

from api.main import app
from core.config import get_settings
from media.store import URL_PREFIX

_settings = get_settings()
_settings.upload_dir.mkdir(parents=True, exist_ok=True)

app.mount(URL_PREFIX.rstrip("/"), StaticFiles(directory=str(_settings.upload_dir)), name="uploads")
