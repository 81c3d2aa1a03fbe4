import multiprocessing
import os

# Production entry point: gunicorn -c gunicorn.conf.py
# Reads the same HOST/PORT/LOG_LEVEL variables as catalog.config.Settings
wsgi_app = "catalog.main:app"
bind = f"{os.getenv('HOST', '0.0.0.0')}:{os.getenv('PORT', '5000')}"

workers = int(os.getenv("WORKERS", max(2, multiprocessing.cpu_count() + 1)))
worker_class = "uvicorn.workers.UvicornWorker"
timeout = 60
graceful_timeout = 30
keepalive = 5

# Recycle workers now and then; uploads are buffered in memory
max_requests = 2000
max_requests_jitter = 100

proc_name = "catalog-api"

loglevel = os.getenv("LOG_LEVEL", "info").lower()
accesslog = "-"
errorlog = "-"
access_log_format = '%(h)s "%(r)s" %(s)s %(b)s %(D)sus'

# Same line format as logging.basicConfig in catalog.main
logconfig_dict = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "catalog": {
            "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        },
    },
    "handlers": {
        "stdout": {
            "class": "logging.StreamHandler",
            "formatter": "catalog",
            "stream": "ext://sys.stdout",
        },
    },
    "root": {"level": loglevel.upper(), "handlers": ["stdout"]},
    "loggers": {
        "gunicorn.error": {"level": loglevel.upper(), "handlers": ["stdout"], "propagate": False},
        "gunicorn.access": {"level": "INFO", "handlers": ["stdout"], "propagate": False},
    },
}
