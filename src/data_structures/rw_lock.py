import threading
from contextlib import contextmanager


class ReadWriteLock:
    """Reader/writer lock: many concurrent readers or one writer.

    Writers waiting for the lock block new readers from entering, so a steady
    stream of readers cannot starve a writer. The lock is not re-entrant; a
    thread already holding it in either mode must not acquire it again.

    Example:
        >>> lock = ReadWriteLock()
        >>> with lock.read_locked():
        ...     pass  # shared section
        >>> with lock.write_locked():
        ...     pass  # exclusive section

    """
    def __init__(self):
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False
        self._writers_waiting = 0

    def acquire_read(self):
        with self._cond:
            while self._writer or self._writers_waiting:
                self._cond.wait()
            self._readers += 1

    def release_read(self):
        with self._cond:
            if self._readers == 0:
                raise RuntimeError("release_read without matching acquire_read")
            self._readers -= 1
            if self._readers == 0:
                self._cond.notify_all()

    def acquire_write(self):
        with self._cond:
            self._writers_waiting += 1
            try:
                while self._writer or self._readers:
                    self._cond.wait()
            except BaseException:
                # readers may be parked behind this writer
                self._writers_waiting -= 1
                self._cond.notify_all()
                raise
            self._writers_waiting -= 1
            self._writer = True

    def release_write(self):
        with self._cond:
            if not self._writer:
                raise RuntimeError("release_write without matching acquire_write")
            self._writer = False
            self._cond.notify_all()

    @contextmanager
    def read_locked(self):
        """Hold the lock in shared mode for the body of a with block"""
        self.acquire_read()
        try:
            yield
        finally:
            self.release_read()

    @contextmanager
    def write_locked(self):
        """Hold the lock in exclusive mode for the body of a with block"""
        self.acquire_write()
        try:
            yield
        finally:
            self.release_write()
