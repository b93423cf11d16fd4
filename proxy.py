"""Run the DuckDuckGo chat gateway with uvicorn.

Host and port come from the config file (``DUCKPROXY_CONFIG``), overridable
with ``DUCKPROXY_HOST`` and ``DUCKPROXY_PORT``.
"""

import uvicorn

from duckproxy.config_loader import load_config, load_settings


def main() -> None:
    settings = load_settings(load_config())
    uvicorn.run(
        "duckproxy.main:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
