"""Start the FastAPI server."""
import os

import uvicorn

if __name__ == "__main__":
    from stylist.utils.config import settings

    # Get configuration from settings
    host = os.getenv("API_HOST", settings.api_host)
    port = int(os.getenv("API_PORT", settings.api_port))
    reload = os.getenv("ENVIRONMENT", settings.environment).lower() != "production"
    log_level = os.getenv("LOG_LEVEL", "info").lower()

    print("=" * 60)
    print("Starting Omnichannel Stylist Server")
    print("=" * 60)
    print(f"Server will be available at: http://{host}:{port}")
    print(f"Environment: {settings.environment}")
    print(f"Reload enabled: {reload}")
    print("Press Ctrl+C to stop the server")
    print("=" * 60)

    uvicorn.run(
        "stylist.api.main:app",
        host=host,
        port=port,
        reload=reload,
        log_level=log_level
    )
