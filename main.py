#!/usr/bin/env python3
"""
Main entry point for the Shelf Taught FastAPI application
"""

import logging

import uvicorn
from shelftaught import create_app
from shelftaught.config import Config

logging.basicConfig(level=logging.INFO)

# Create FastAPI application instance
app = create_app()

if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host=Config.HOST,
        port=Config.PORT,
        reload=Config.RELOAD
    )
