"""
Uvicorn Startup Script
----------------------
FastAPI application startup script.
"""

import uvicorn

from trustgate.core.config_manager import load_settings


if __name__ == "__main__":
    settings = load_settings()

    uvicorn.run(
        app="trustgate.app:create_app",  # factory: uvicorn calls create_app() to build the app
        factory=True,
        host=settings.fastapi_host,
        port=settings.fastapi_port,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
    )
