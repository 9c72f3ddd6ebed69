import logging
import sys


def setup_logging(level: str = "INFO") -> None:
    """Configure root logging once at startup. Output goes to stdout."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )
