"""Flask-facing infrastructure: config, extensions, logging, errors, CORS, proxy."""
