import logging
import sys


def get_logger(name: str, prefix: str = None, level: int = logging.INFO) -> logging.Logger:
    """
    Return a named logger writing to stdout with a bracketed prefix, e.g.
    ``[STORE] Loaded 3 products``. Handlers are only attached once so
    repeated imports (tests, reloads) don't duplicate output.
    """
    log = logging.getLogger(name)
    log.setLevel(level)
    if not log.handlers:
        h = logging.StreamHandler(sys.stdout)
        h.setFormatter(logging.Formatter(f"[{prefix or name.upper()}] %(levelname)s %(message)s"))
        log.addHandler(h)
    return log
