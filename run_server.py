#!/usr/bin/env python3
"""
Server startup script for the AgentSwaps trading floor.

Loads ``.env`` before the application settings are read and starts uvicorn.
"""

import os

from dotenv import load_dotenv

env_path = os.path.join(os.path.dirname(os.path.abspath(__file__)), ".env")
if os.path.exists(env_path):
    load_dotenv(env_path)

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "src.main:app",
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", 8800)),
        reload=os.getenv("DEBUG", "false").lower() == "true",
    )
