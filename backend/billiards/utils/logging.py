import logging


def create_logger(level: int) -> logging.Logger:
    log_formatter = logging.Formatter(
        fmt="[%(asctime)s] [%(name)s] [%(process)d] [%(levelname)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S %z",
    )
    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(log_formatter)

    _logger = logging.getLogger("billiards")
    _logger.setLevel(level)
    _logger.addHandler(stream_handler)
    return _logger


logger = create_logger(logging.INFO)
