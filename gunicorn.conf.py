"""Gunicorn config for container deployment."""
import os

# Bind to the platform's PORT or default 8000
bind = f"0.0.0.0:{os.environ.get('PORT', '8000')}"

# The analysis session lives in process memory, so a second worker would
# hold a different session. Keep a single uvicorn worker.
worker_class = "uvicorn.workers.UvicornWorker"
workers = 1

# Large workbooks can take a while to decode
timeout = 120

graceful_timeout = 30

# Keep-alive must exceed the proxy keep-alive (commonly 60s)
keepalive = 65

# Logging
accesslog = "-"
errorlog = "-"
loglevel = "info"
