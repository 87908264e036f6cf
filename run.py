#!/usr/bin/env python3
"""
Run script for the Cohort Desk backend
"""
import uvicorn

from cohortdesk.config.settings import settings
from cohortdesk.main import app

if __name__ == "__main__":
    uvicorn.run(app, host=settings.host, port=settings.port, reload=settings.debug)
