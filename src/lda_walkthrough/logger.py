import logging

LOGGER_NAME = "lda_walkthrough"


def get_logger(name=LOGGER_NAME, level=logging.INFO):
    """
    Return a logger with a single stream handler attached.

    Calling it twice does not duplicate handlers.
    """
    logger = logging.getLogger(name)
    logger.setLevel(level)
    if not logger.handlers:
        ch = logging.StreamHandler()
        ch.setLevel(logging.DEBUG)
        ch.setFormatter(logging.Formatter("[%(levelname)s] %(name)s: %(message)s"))
        logger.addHandler(ch)
    return logger
