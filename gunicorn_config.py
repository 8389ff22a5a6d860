import os

# Server Socket
bind = os.environ.get("GUNICORN_BIND", "127.0.0.1:8000")  # NGINX proxies to this address

# Worker Settings
workers = int(os.environ.get("GUNICORN_WORKERS", 3))
threads = 2  # Each request is handled on its own thread
worker_class = "gthread"

# Security & Performance
timeout = 60
graceful_timeout = 30  # Allow workers to finish before restarting
keepalive = 5
max_requests = 1000  # Restart workers after processing 1000 requests (memory leak protection)
max_requests_jitter = 50  # Staggered restarts to avoid downtime

# Logging
accesslog = "-"
errorlog = "-"
loglevel = "info"

# Process Name
proc_name = "school_visits_gunicorn"

wsgi_app = "wsgi:app"
