# core/config.py

"""
Environment-driven configuration.

Values are read from the process environment after loading an optional `.env` file.
"""

import os

from dotenv import load_dotenv

load_dotenv()


class Config:
    DEFAULT_DATA_DIR = os.path.join(
        os.path.expanduser("~"), "Documents", "Gradebooks", "grades"
    )
    DEFAULT_LOG_LEVEL = "INFO"

    @staticmethod
    def data_dir() -> str:
        return os.path.expanduser(
            os.environ.get("GRADES_DATA_DIR") or Config.DEFAULT_DATA_DIR
        )

    @staticmethod
    def log_level() -> str:
        return os.environ.get("GRADES_LOG_LEVEL", Config.DEFAULT_LOG_LEVEL).upper()
