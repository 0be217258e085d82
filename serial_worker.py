import threading
import serial
from sqlalchemy.exc import SQLAlchemyError
from models import RawReading

READ_TIMEOUT = 0.1     # seconds, lets the reader notice stop() quickly


class LineSplitter:
    """Incremental splitter turning a raw byte stream into text lines.

    Bytes after the last delimiter stay buffered until the next chunk
    completes the line.
    """

    def __init__(self, delimiter=b"\n", encoding="utf-8"):
        self.delimiter = delimiter
        self.encoding = encoding
        self._buf = bytearray()

    def feed(self, data):
        self._buf.extend(data)
        lines = []
        while True:
            idx = self._buf.find(self.delimiter)
            if idx < 0:
                break
            raw = bytes(self._buf[:idx])
            del self._buf[:idx + len(self.delimiter)]
            lines.append(raw.decode(self.encoding, errors="replace"))
        return lines

    @property
    def pending(self):
        return bytes(self._buf)


class LineSource:
    """Something that produces text lines and reports open/error events.

    Handlers: on_open(name), on_error(exc), on_line(line).
    """

    def __init__(self, name):
        self.name = name
        self._open_handlers = []
        self._error_handlers = []
        self._line_handlers = []

    def on_open(self, handler):
        self._open_handlers.append(handler)
        return handler

    def on_error(self, handler):
        self._error_handlers.append(handler)
        return handler

    def on_line(self, handler):
        self._line_handlers.append(handler)
        return handler

    def _emit_open(self):
        for handler in self._open_handlers:
            handler(self.name)

    def _emit_error(self, exc):
        for handler in self._error_handlers:
            handler(exc)

    def _emit_line(self, line):
        for handler in self._line_handlers:
            handler(line)


class SerialLineSource(LineSource):
    """Reads a serial port on a daemon thread and emits one event per line.

    Every line handler runs to completion on the reader thread before the
    next line is split out, so lines are handled strictly in arrival order.
    There is no reconnect: after an open or read error, or an exception
    escaping a line handler, the error handlers run and the thread ends.
    """

    def __init__(self, port, baudrate, serial_factory=serial.Serial):
        super().__init__(port)
        self.port = port
        self.baudrate = baudrate
        self._serial_factory = serial_factory
        self._running = threading.Event()
        self._thread = None

    @property
    def running(self):
        return self._running.is_set()

    def start(self):
        if self.running:
            print("[serial_worker] Reader already running, not starting again.")
            return
        self._running.set()
        self._thread = threading.Thread(target=self._run, name="serial-reader", daemon=True)
        self._thread.start()

    def stop(self, timeout=2):
        self._running.clear()
        if self._thread:
            self._thread.join(timeout=timeout)
            if self._thread.is_alive():
                print(f"[serial_worker] Warning: reader still running after {timeout} s timeout.")
            self._thread = None

    def join(self, timeout=None):
        if self._thread:
            self._thread.join(timeout=timeout)

    def _run(self):
        try:
            ser = self._serial_factory(self.port, self.baudrate, timeout=READ_TIMEOUT)
        except (serial.SerialException, OSError, ValueError) as e:
            self._running.clear()
            self._emit_error(e)
            return

        self._emit_open()
        splitter = LineSplitter()
        try:
            while self._running.is_set():
                chunk = ser.read(ser.in_waiting or 1)
                if not chunk:
                    continue
                for line in splitter.feed(chunk):
                    self._emit_line(line)
        except Exception as e:
            # serial I/O errors and failing line handlers both end the reader
            self._emit_error(e)
        finally:
            self._running.clear()
            ser.close()


class Ingester:
    """Stores every non-empty trimmed line as a RawReading."""

    def __init__(self, session_factory):
        self._session_factory = session_factory

    def attach(self, source):
        source.on_open(self.handle_open)
        source.on_error(self.handle_error)
        source.on_line(self.handle_line)
        return source

    def handle_open(self, name):
        print(f"[serial_worker] Port '{name}' open. Monitoring and saving messages...")

    def handle_error(self, exc):
        print("[serial_worker] Serial port error:", exc)

    def handle_line(self, line):
        text = line.strip()
        if not text:
            return None

        try:
            with self._session_factory() as sess:
                reading = RawReading(raw_message=text)
                sess.add(reading)
                sess.flush()
                reading_id = reading.id
                sess.commit()
        except SQLAlchemyError as e:
            print("[DB ERROR] Insert failed:", e)
            return None

        print(f"[SAVED] {text}")
        return reading_id


def start_worker(cfg, session_factory, serial_factory=serial.Serial):
    print("[start_worker] Opening serial reader:", cfg.serial_port)
    source = SerialLineSource(cfg.serial_port, cfg.baudrate, serial_factory=serial_factory)
    Ingester(session_factory).attach(source)
    source.start()
    return source


def stop_worker(source):
    print("[stop_worker] Closing serial reader...")
    if source is None or not source.running:
        print("[stop_worker] Reader not running.")
        return
    source.stop()
    print("[stop_worker] Reader closed.")
