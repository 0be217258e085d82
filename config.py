# Configuration constants for serial port and database
from dataclasses import dataclass

SERIAL_PORT = "/dev/ttyUSB0"   # e.g. "COM3" on Windows
BAUDRATE    = 115200           # must match Serial.begin() on the board
DB_PATH     = "arduino_buffer.db"


@dataclass(frozen=True)
class Config:
    serial_port: str = SERIAL_PORT
    baudrate: int = BAUDRATE
    db_path: str = DB_PATH


def load_config():
    """Build the runtime configuration once, at process start."""
    return Config()
