import logging


"""Logging setup for the relay. - observability"""

HANDLER_NAME = "mapping-relay"


def setup_logging(level: str = "INFO") -> None:
    """Attach a stream handler to the root logger and set its level. - setup_logging"""
    root = logging.getLogger()
    if not any(h.get_name() == HANDLER_NAME for h in root.handlers):
        handler = logging.StreamHandler()
        handler.set_name(HANDLER_NAME)
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
        root.addHandler(handler)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
