import logging

# third-party loggers that are chatty at INFO
_QUIET_LOGGERS = ("sqlalchemy.engine", "httpx")


def setup_logging(level: str = "INFO", quiet_libraries: bool = True) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="[%(asctime)s] [%(levelname)s] [%(name)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    if quiet_libraries:
        for name in _QUIET_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
