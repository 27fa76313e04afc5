# Bind & workers
bind = "0.0.0.0:5680"
workers = 2  # override with env GUNICORN_WORKERS
threads = 1
timeout = 120  # large uploads stream through a single worker
graceful_timeout = 30
keepalive = 5

wsgi_app = "filevault:create_app()"

# Logs to stdout/stderr (collected by Docker)
accesslog = "-"
errorlog = "-"
loglevel = "info"  # override with env LOG_LEVEL

# Honour proxy headers
forwarded_allow_ips = "*"
proxy_protocol = False
