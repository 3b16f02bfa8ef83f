"""Jira proxy web server - FastAPI façade in front of Jira."""

import os

import uvicorn
from dotenv import load_dotenv

from ..logging import setup_logging
from ..models import ProxyConfig


def run(config: ProxyConfig, reload: bool = False) -> None:
    """Serve the proxy with uvicorn."""
    if reload:
        # Reload needs an import string; the factory re-reads the environment.
        uvicorn.run(
            "jira_proxy.web.app:create_app",
            factory=True,
            host=config.host,
            port=config.port,
            reload=True,
        )
        return

    from .app import create_app

    uvicorn.run(create_app(config), host=config.host, port=config.port)


def main():
    """Entry point for jira-proxy-web command."""
    load_dotenv()
    config = ProxyConfig.from_env()
    setup_logging(config.log_level, config.log_dir)
    run(config, reload=os.environ.get("JIRA_PROXY_RELOAD", "").lower() == "true")


if __name__ == "__main__":
    main()
