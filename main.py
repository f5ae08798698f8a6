"""
Main entrypoint: FastAPI server for the address risk detection API.

Env: SOLANA_RPC_URL or HELIUS_API_KEY, BIRDEYE_API_KEY, OPENROUTER_API_KEY[_2.._5],
ENABLE_AI_ANALYSIS, API_HOST, API_PORT, LOG_LEVEL, etc. (see backend_sivic.config).

Equivalent: uvicorn backend_sivic.api_server.app:app --host 0.0.0.0 --port 8000
"""

# Configure structured JSON logging before other imports that may log
from backend_sivic.config.env import env_int, env_str, load_sivic_env
from backend_sivic.sivic_logging import get_logger

logger = get_logger("main")


def main() -> None:
    """Resolve host/port from env and run the API in the main thread."""
    load_sivic_env()
    api_host = env_str("API_HOST", "0.0.0.0")
    api_port = env_int("API_PORT", 8000)

    from backend_sivic.api_server.app import app
    import uvicorn

    logger.info("main_server_starting", host=api_host, port=api_port)
    uvicorn.run(app, host=api_host, port=api_port, log_level=env_str("LOG_LEVEL", "info").lower())


if __name__ == "__main__":
    main()
