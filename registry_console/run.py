#!/usr/bin/env python3
"""Run the Registry Console: python -m registry_console.run"""
import uvicorn

from registry_console.core.config import settings

if __name__ == "__main__":
    uvicorn.run(
        "registry_console.main:get_app",
        factory=True,
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEV_MODE,
        log_level="debug" if settings.DEV_MODE else "info",
    )
