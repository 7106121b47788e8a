import os


os.environ.setdefault("FLASK_ENV", "testing")
os.environ.setdefault("FORM_CONFIG_BACKEND", "memory")
os.environ.setdefault("LOG_LEVEL", "WARNING")
