"""
Legislator Lens - internal logging
Module loggers plus a dedicated rotating log of raw model prompts and responses.
"""
import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

# LLM interaction logger state
llm_logger = None
llm_logging_enabled = True

def setup_llm_logger(config: dict = None):
    """Configure the LLM interaction logger from config"""
    global llm_logger, llm_logging_enabled

    if config:
        llm_logging_enabled = config.get("llm_log_enabled", True)
        max_size_mb = config.get("llm_log_max_size_mb", 1)
        log_dir = Path(config.get("llm_log_dir") or Path(__file__).parent.parent / "logs")
    else:
        max_size_mb = 1
        log_dir = Path(__file__).parent.parent / "logs"

    if not llm_logging_enabled:
        llm_logger = None
        return

    llm_logger = logging.getLogger('llm_interactions')
    llm_logger.setLevel(logging.INFO)
    # keep model transcripts out of the root logger
    llm_logger.propagate = False

    for handler in list(llm_logger.handlers):
        handler.close()
    llm_logger.handlers.clear()

    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / "llm_interactions.log"

    handler = RotatingFileHandler(
        log_file,
        maxBytes=max_size_mb * 1024 * 1024,
        backupCount=1,
        encoding='utf-8'
    )
    handler.setFormatter(logging.Formatter('%(asctime)s - %(message)s'))
    llm_logger.addHandler(handler)

def log_llm_interaction(source: str, prompt: str, response: str):
    """Record one complete model exchange."""
    if not llm_logging_enabled or llm_logger is None:
        return

    log_message = (
        f"--- LLM Request ({source}) ---\n"
        f"{prompt}\n"
        f"--- LLM Response ---\n"
        f"{response}\n"
        f"---------------------\n"
    )
    llm_logger.info(log_message)


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance.

    Loggers created here carry a stream handler so modules can be run and
    tested standalone without any logging setup by the host application.

    Args:
        name (str): Logger name, usually __name__.

    Returns:
        logging.Logger: the configured logger.
    """
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler()
        formatter = logging.Formatter(
            fmt='%(asctime)s [%(levelname)s] %(name)s: %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
        handler.setFormatter(formatter)
        logger.addHandler(handler)
        logger.setLevel(logging.DEBUG)
    return logger
