# eventhire/core/logging.py
import logging

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str = "INFO") -> None:
    root = logging.getLogger()
    # uvicorn --reload imports the app twice
    if any(getattr(h, "_eventhire", False) for h in root.handlers):
        return
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler._eventhire = True
    root.addHandler(handler)
    root.setLevel(level.upper())
