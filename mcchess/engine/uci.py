"""Connector for an external UCI chess engine running as a child process.

Only the handful of commands needed to get a best move are used:
``uci``, ``isready``, ``ucinewgame``, ``setoption``, ``position startpos
moves ...``, ``go movetime <ms>`` and ``quit``. The engine's search itself
is opaque.
"""

from __future__ import annotations

import logging
import queue
import subprocess
import threading
import time
from typing import Callable, Optional, Sequence

logger = logging.getLogger("mcchess.uci")

_EOF = object()


class EngineError(RuntimeError):
    """The engine could not be started, exited, or did not answer in time."""


def parse_bestmove(line: str) -> Optional[str]:
    """Extract the move from a 'bestmove <move> [ponder <move>]' line.

    Returns None if the line is not a bestmove line or carries no move.
    """
    parts = line.split()
    if not parts or parts[0] != "bestmove" or len(parts) < 2:
        return None
    if parts[1] in ("(none)", "0000"):
        return None
    return parts[1]


def parse_score_cp(line: str) -> Optional[float]:
    """Extract a 'cp <value>' score from an info line, in pawns."""
    parts = line.split()
    for i, token in enumerate(parts[:-1]):
        if token == "cp":
            try:
                return int(parts[i + 1]) / 100.0
            except ValueError:
                return None
    return None


class UCIEngine:
    """A UCI engine process driven over stdin/stdout.

    Output is read on a background thread into a queue so every read can
    time out instead of blocking forever on a silent engine.
    """

    def __init__(self, path: str, args: Sequence[str] = (),
                 read_timeout: float = 10.0):
        self.path = path
        self.args = list(args)
        self.read_timeout = read_timeout
        self.last_score: Optional[float] = None  # pawns, side-to-move perspective
        self.name: Optional[str] = None
        self._proc: Optional[subprocess.Popen] = None
        self._lines: queue.Queue = queue.Queue()
        self._reader: Optional[threading.Thread] = None

    @property
    def running(self) -> bool:
        return self._proc is not None and self._proc.poll() is None

    def start(self) -> UCIEngine:
        """Launch the engine and complete the uci/isready handshake."""
        if self.running:
            return self
        try:
            self._proc = subprocess.Popen(
                [self.path, *self.args],
                stdin=subprocess.PIPE, stdout=subprocess.PIPE,
                stderr=subprocess.DEVNULL, text=True, bufsize=1,
            )
        except OSError as e:
            raise EngineError(f"Failed to start engine {self.path!r}: {e}") from e

        self._lines = queue.Queue()
        self._reader = threading.Thread(target=self._read_output, daemon=True,
                                        name="uci-reader")
        self._reader.start()
        logger.info(f"Started engine {self.path} (pid {self._proc.pid})")
        self.handshake()
        return self

    def _read_output(self):
        proc = self._proc
        for line in proc.stdout:
            self._lines.put(line.rstrip("\r\n"))
        self._lines.put(_EOF)

    def send(self, command: str):
        """Write one command line to the engine."""
        if not self.running:
            raise EngineError("Engine is not running")
        logger.debug(f">> {command}")
        try:
            self._proc.stdin.write(command + "\n")
            self._proc.stdin.flush()
        except (BrokenPipeError, OSError) as e:
            raise EngineError(f"Engine pipe closed: {e}") from e

    def read_line(self, timeout: Optional[float] = None) -> str:
        """Read one output line, raising EngineError on timeout or exit."""
        timeout = self.read_timeout if timeout is None else timeout
        try:
            line = self._lines.get(timeout=timeout)
        except queue.Empty:
            raise EngineError(f"Engine did not answer within {timeout:.1f}s") from None
        if line is _EOF:
            raise EngineError("Engine exited unexpectedly")
        logger.debug(f"<< {line}")
        return line

    def read_until(self, predicate: Callable[[str], bool],
                   timeout: Optional[float] = None) -> list[str]:
        """Read lines until predicate matches one; return all lines read."""
        timeout = self.read_timeout if timeout is None else timeout
        deadline = time.monotonic() + timeout
        lines = []
        while True:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                raise EngineError(f"Engine did not answer within {timeout:.1f}s")
            line = self.read_line(remaining)
            lines.append(line)
            if predicate(line):
                return lines

    def handshake(self):
        self.send("uci")
        for line in self.read_until(lambda l: l == "uciok"):
            if line.startswith("id name "):
                self.name = line[len("id name "):]
        if not self.is_ready():
            raise EngineError("Engine did not report readyok")

    def is_ready(self) -> bool:
        self.send("isready")
        return self.read_until(lambda l: l == "readyok")[-1] == "readyok"

    def set_option(self, name: str, value):
        self.send(f"setoption name {name} value {value}")

    def new_game(self):
        self.send("ucinewgame")
        self.is_ready()

    def set_position(self, moves: Sequence[str] = ()):
        """Send the position as the start position plus a move history."""
        if moves:
            self.send("position startpos moves " + " ".join(moves))
        else:
            self.send("position startpos")

    def go_movetime(self, movetime_ms: int) -> Optional[str]:
        """Search for movetime_ms and return the engine's best move, or None.

        Any 'cp' score seen along the way is stored in last_score, which is
        cleared first so a search reporting no cp score leaves it as None.
        """
        self.last_score = None
        self.send(f"go movetime {movetime_ms}")
        timeout = movetime_ms / 1000.0 + self.read_timeout
        for line in self.read_until(lambda l: l.startswith("bestmove"), timeout=timeout):
            if line.startswith("bestmove"):
                return parse_bestmove(line)
            score = parse_score_cp(line)
            if score is not None:
                self.last_score = score
        return None

    def best_move(self, moves: Sequence[str], movetime_ms: int = 1000) -> Optional[str]:
        """Best move for the position reached by playing moves from the start."""
        self.set_position(moves)
        return self.go_movetime(movetime_ms)

    def stop(self, timeout: float = 2.0):
        """Ask the engine to quit, killing it if it does not exit in time."""
        if self._proc is None:
            return
        if self.running:
            try:
                self.send("quit")
            except EngineError as e:
                logger.debug(f"quit not delivered: {e}")
            try:
                self._proc.wait(timeout=timeout)
            except subprocess.TimeoutExpired:
                logger.warning(f"Engine {self.path} did not quit, killing it")
                self._proc.kill()
                self._proc.wait()
        if self._reader is not None:
            self._reader.join(timeout=timeout)
            self._reader = None
        for stream in (self._proc.stdin, self._proc.stdout):
            if stream is not None:
                stream.close()
        logger.info(f"Stopped engine {self.path}")
        self._proc = None

    def __enter__(self) -> UCIEngine:
        return self.start()

    def __exit__(self, exc_type, exc, tb):
        self.stop()
