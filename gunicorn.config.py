import os

# run with: gunicorn -c gunicorn.config.py "app:create_app()"
worker_class = "gevent"
workers = int(os.getenv("WEB_CONCURRENCY", "4"))
worker_connections = 1000
# stays above REQUEST_TIMEOUT_SECONDS so a slow upstream call fails before the worker is killed
timeout = 120
bind = "0.0.0.0:{}".format(os.getenv("PORT", "10000"))

loglevel = "info"
accesslog = "-"
errorlog = "-"
