"""
Run the blog API on Flask's development server: `python -m api`.

APP_ENV picks the config class; BLOG_HOST / BLOG_PORT pick the bind address.
Production deployments import `api:create_app` into a WSGI server instead.
"""
import logging
import os

from . import create_app

logger = logging.getLogger("api")


def main() -> None:
    app = create_app(os.getenv("APP_ENV"))
    host = os.getenv("BLOG_HOST", "127.0.0.1")
    port = int(os.getenv("BLOG_PORT", "8000"))
    logger.info("Serving %s config on %s:%d", app.config.get("APP_ENV"), host, port)
    app.run(host=host, port=port, debug=app.config.get("DEBUG", False))


if __name__ == "__main__":
    main()
