"""Raw serial port access for the referee-system link."""

from __future__ import annotations

import fcntl
import logging
import os
import subprocess
import termios
import time

logger = logging.getLogger("RadarLogger")

BAUD_RATE = termios.B115200


class SerialPort:
    """A non-blocking 115200 8N1 serial port opened from a device path."""

    def __init__(self, retry_delay: float = 1.0) -> None:
        self.fd: int | None = None
        self.retry_delay = retry_delay
        self.last_read = 0
        self.last_written = 0

    def __enter__(self) -> SerialPort:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _fail(self, message: str, level: int = logging.ERROR) -> bool:
        logger.log(level, message)
        if self.retry_delay > 0:
            time.sleep(self.retry_delay)
        return False

    @staticmethod
    def _grant_permission(port_name: str, password: str) -> bool:
        try:
            result = subprocess.run(
                ["sudo", "-S", "chmod", "a+rw", port_name],
                input=password + "\n",
                text=True,
                capture_output=True,
                check=False,
            )
        except OSError:
            return False
        return result.returncode == 0

    def open(self, port_name: str, password: str | None = None) -> bool:
        """Open and configure ``port_name``; return whether the port is open.

        When ``password`` is given, read/write permission on the device is
        first granted through sudo.
        """
        if self.fd is not None:
            return True
        if not os.path.exists(port_name):
            return self._fail("Serial :Serial Port Not Found !", logging.WARNING)
        if password is not None and not self._grant_permission(port_name, password):
            return self._fail("Serial :Failed to get permission!")
        try:
            fd = os.open(port_name, os.O_RDWR | os.O_NONBLOCK | os.O_NOCTTY)
        except OSError:
            return self._fail("Serial init failed")
        try:
            fcntl.fcntl(fd, fcntl.F_SETFL, os.O_NONBLOCK)
        except OSError:
            logger.error("fcntl failed")
        self.fd = fd
        self._configure(fd)
        return True

    @staticmethod
    def _configure(fd: int) -> None:
        try:
            iflag, oflag, cflag, lflag, _ispeed, _ospeed, cc = termios.tcgetattr(fd)
        except termios.error:
            logger.warning("Serial :device is not a terminal, settings left unchanged")
            return
        cflag |= termios.CLOCAL | termios.CREAD
        cflag &= ~termios.PARENB
        cflag &= ~termios.CSTOPB
        cflag &= ~termios.CSIZE
        cflag |= termios.CS8
        cc = list(cc)
        cc[termios.VTIME] = 150
        cc[termios.VMIN] = 0
        lflag &= ~(termios.ICANON | termios.ECHO | termios.ECHOE | termios.ISIG)
        iflag &= ~(termios.BRKINT | termios.ICRNL | termios.INPCK | termios.ISTRIP | termios.IXON)
        iflag &= ~(termios.ICRNL | termios.IGNCR)
        oflag &= ~termios.OPOST
        attrs = [iflag, oflag, cflag, lflag, BAUD_RATE, BAUD_RATE, cc]
        try:
            termios.tcflush(fd, termios.TCIOFLUSH)
            termios.tcsetattr(fd, termios.TCSANOW, attrs)
        except termios.error:
            logger.error("Serial :failed to apply terminal settings")

    def is_open(self) -> bool:
        """Return whether the port is open."""
        return self.fd is not None

    def read(self, size: int) -> bytes:
        """Read up to ``size`` bytes without blocking; empty when nothing is ready."""
        if self.fd is None:
            return b""
        try:
            data = os.read(self.fd, size)
        except (BlockingIOError, InterruptedError):
            data = b""
        self.last_read = len(data)
        return data

    def write(self, data: bytes) -> int:
        """Write ``data``; return the number of bytes written."""
        if self.fd is None:
            return 0
        try:
            written = os.write(self.fd, bytes(data))
        except (BlockingIOError, InterruptedError):
            written = 0
        self.last_written = written
        return written

    def close(self) -> None:
        """Close the port if it is open."""
        if self.fd is not None:
            try:
                os.close(self.fd)
            finally:
                self.fd = None