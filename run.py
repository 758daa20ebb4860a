#!/usr/bin/env python
"""
startup script for running the checkout service.
"""
import uvicorn
import os
import logging
from dotenv import load_dotenv

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("kagg-stripe")

# Load environment variables
load_dotenv()

if __name__ == "__main__":
    # Set default port or get from environment
    port = int(os.getenv("PORT", "8000"))

    debug_mode = os.getenv("DEBUG", "false").lower() in ("true", "1", "yes")
    if debug_mode:
        logger.info("Running in debug mode with auto-reload")

    logger.info(f"Starting KAGG Stripe Payments on port {port}")
    uvicorn.run(
        "app.main:app",
        host="0.0.0.0",
        port=port,
        reload=debug_mode,
        log_level="debug" if debug_mode else "info",
    )
