"""
asgi.py -- ASGI entry point for DevConnector.

Run with:  uvicorn asgi:app --reload
           python asgi.py            (listens on Settings.port, default 5000)
"""

import uvicorn

from api.main import create_app
from core.config import get_settings

settings = get_settings()
app = create_app(settings)

if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=settings.port)  # noqa: S104 # nosec B104 -- container entry point
