# backend/config/logging_config.py
import logging

LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """הגדרת לוגים בסיסית לכל האפליקציה (פעם אחת בעליית השרת)"""
    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(level=level, format=LOG_FORMAT)
    else:
        root.setLevel(level)

    # SQLAlchemy רועש מאוד ב-INFO
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
