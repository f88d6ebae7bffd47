import logging
import sys


class ContextFormatter(logging.Formatter):
    """Custom formatter that handles optional stage and entity fields."""
    def format(self, record):
        # Add default values for stage and entity if not present
        if not hasattr(record, 'stage'):
            record.stage = '-'
        if not hasattr(record, 'entity'):
            record.entity = '-'
        return super().format(record)


def configure_logging(level: str | int = logging.INFO) -> None:
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(ContextFormatter(
        "%(asctime)s %(levelname)s %(name)s [stage=%(stage)s entity=%(entity)s] - %(message)s"
    ))
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO
    logging.basicConfig(
        level=level,
        handlers=[handler],
        force=True,
    )
