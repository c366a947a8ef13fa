#!/usr/bin/env python3
"""Run script for taskcadence."""

import uvicorn

from taskcadence.config import configure_logging, get_settings

if __name__ == "__main__":
    settings = get_settings()
    configure_logging(settings.log_level)
    uvicorn.run(
        "taskcadence.api.app:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=True
    )
