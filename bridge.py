#!/usr/bin/env python3
"""
Serial -> SQLite bridge: stores every line the board prints as a raw reading.
Runs until the process is killed.
"""

import sys
import threading
from sqlalchemy.exc import SQLAlchemyError
from config import load_config
from models import setup_database
from serial_worker import start_worker


def start(cfg):
    try:
        session_factory = setup_database(cfg.db_path)
    except SQLAlchemyError as e:
        print("[bridge] Database setup failed:", e)
        sys.exit(1)
    return start_worker(cfg, session_factory)


def main():
    start(load_config())
    # serial errors are reported by the worker; the process stays up either way
    threading.Event().wait()


if __name__ == "__main__":
    main()
