"""
API Server Entry Point

Configures logging and starts the FastAPI server with uvicorn
"""

import logging

import uvicorn

from patchbay.api.server import create_app
from patchbay.config.settings import get_settings


def main():
    """Start API server"""
    settings = get_settings()

    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    # Create FastAPI app (orchestrator will be initialized on startup event)
    app = create_app()

    print(f"\n🚀 Starting Patchbay API on {settings.api_host}:{settings.api_port}")
    print(f"📖 API docs: http://{settings.api_host}:{settings.api_port}/docs")
    print(f"🔀 Vendor proxy: {settings.proxy_base_url}\n")

    uvicorn.run(
        app,
        host=settings.api_host,
        port=settings.api_port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
