#!/usr/bin/env python3
"""
Start script - runs the gateway with uvicorn using APP_HOST / APP_PORT
"""
import os

if __name__ == "__main__":
    from core.config import settings

    port = int(os.getenv("PORT", settings.app_port))

    import uvicorn

    uvicorn.run(
        "app.main:app",
        host=settings.app_host,
        port=port,
        log_level=settings.log_level.lower()
    )
