import logging

LOG_FORMAT = "%(asctime)s  %(levelname)-8s  %(name)s: %(message)s"
DATE_FORMAT = "%H:%M:%S"


def setup_logging(level: int = logging.INFO) -> logging.Logger:
    """Attach a console handler to the package logger (idempotent) and set its level."""
    logger = logging.getLogger('basket_miner')
    if not any(getattr(h, '_basket_miner', False) for h in logger.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
        handler._basket_miner = True
        logger.addHandler(handler)
    logger.setLevel(level)
    return logger
