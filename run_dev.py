#!/usr/bin/env python3
"""
Development runner script for the Flowchart Graph API.
"""

import sys
from pathlib import Path

import uvicorn
from dotenv import load_dotenv

PROJECT_ROOT = Path(__file__).parent
sys.path.insert(0, str(PROJECT_ROOT))

load_dotenv()

from config.settings import get_settings


def main():
    settings = get_settings()

    print(f"""
Flowchart Graph API

   API Server:  http://localhost:{settings.api_port}
   API Docs:    http://localhost:{settings.api_port}/docs
   Store:       {settings.store_backend}

   Press Ctrl+C to stop
    """)

    uvicorn.run(
        "src.api.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.debug,
        app_dir=str(PROJECT_ROOT),
    )


if __name__ == "__main__":
    main()
