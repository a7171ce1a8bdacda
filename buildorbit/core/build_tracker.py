"""Build event tracker — follows a running build through its output streams.

The build is launched with both output streams captured:

- **stderr** carries human-readable progress.  A line starting with the
  compile prefix (``Compiling serde v1.0.130``) means that component has
  started building.
- **stdout** carries newline-delimited JSON messages when the build runs
  with ``--message-format=json``.  A record whose ``reason`` is
  ``compiler-artifact`` means that component has finished.

Both pipes are drained by their own reader thread; draining them one
after the other could stall the build on a full pipe buffer.  Readers
only put ``BuildEvent`` objects on a queue.  The consumer calls
``BuildHandle.poll()`` from its own loop, which is the only place the
``BuildEventSets`` are mutated.
"""

from __future__ import annotations

import json
import logging
import queue
import subprocess
import threading
from collections.abc import Sequence
from pathlib import Path
from typing import IO

from rich.console import Console

from buildorbit.core.tree_parser import parse_identity
from buildorbit.models.events import BuildEvent, BuildEventSets

logger = logging.getLogger(__name__)

DEFAULT_COMPILE_PREFIX = "Compiling"
DEFAULT_ARTIFACT_REASON = "compiler-artifact"

_PUT_INTERVAL = 0.1
_TERMINATE_GRACE = 5.0
_EXIT_GRACE = 1.0
_JOIN_TIMEOUT = 5.0


class SubprocessSpawnError(RuntimeError):
    """Raised when the build command cannot be launched."""


# ---------------------------------------------------------------------------
# Line classification
# ---------------------------------------------------------------------------


def classify_diagnostic_line(
    line: str, prefix: str = DEFAULT_COMPILE_PREFIX
) -> BuildEvent | None:
    """Return ``Started(identity)`` for a compile-progress line, else ``None``."""
    text = line.strip()
    if not prefix or not text.startswith(prefix):
        return None
    identity = parse_identity(text[len(prefix):])
    if not identity:
        return None
    return BuildEvent.started(identity)


def classify_message_line(
    line: str, reason: str = DEFAULT_ARTIFACT_REASON
) -> BuildEvent | None:
    """Return ``Finished(identity)`` for an artifact record, else ``None``."""
    text = line.strip()
    if not text.startswith("{"):
        return None
    try:
        record = json.loads(text)
    except json.JSONDecodeError:
        return None
    if not isinstance(record, dict) or record.get("reason") != reason:
        return None

    package_id = record.get("package_id")
    if not isinstance(package_id, str):
        return None
    identity = parse_identity(package_id)
    if not identity:
        return None
    return BuildEvent.finished(identity)


# ---------------------------------------------------------------------------
# Handle
# ---------------------------------------------------------------------------


class BuildHandle:
    """A launched build and the live state derived from its output.

    Parameters
    ----------
    process:
        The build process, with ``stdout`` and ``stderr`` piped in text mode.
    events:
        Channel shared by the reader threads (producers) and ``poll``.
    """

    def __init__(
        self,
        process: subprocess.Popen,
        events: queue.Queue,
        *,
        prefix: str = DEFAULT_COMPILE_PREFIX,
        artifact_reason: str = DEFAULT_ARTIFACT_REASON,
        echo: Console | None = None,
    ) -> None:
        self.sets = BuildEventSets()
        self._process = process
        self._events = events
        self._prefix = prefix
        self._artifact_reason = artifact_reason
        self._echo = echo
        self._closed = threading.Event()
        self._readers = [
            threading.Thread(
                target=self._read_diagnostics,
                name="buildorbit-diagnostics",
                daemon=True,
            ),
            threading.Thread(
                target=self._read_messages,
                name="buildorbit-messages",
                daemon=True,
            ),
        ]

    def _start_readers(self) -> None:
        for reader in self._readers:
            reader.start()

    # ------------------------------------------------------------------
    # Reader side
    # ------------------------------------------------------------------

    def _forward(self, event: BuildEvent) -> None:
        """Put *event* on the channel unless the consumer has gone away."""
        while not self._closed.is_set():
            try:
                self._events.put(event, timeout=_PUT_INTERVAL)
                return
            except queue.Full:
                continue

    def _pass_through(self, line: str) -> None:
        if self._echo is None:
            return
        self._echo.print(
            line.rstrip("\n"),
            markup=False,
            highlight=False,
            emoji=False,
            soft_wrap=True,
        )

    def _drain(self, stream: IO[str] | None, classify, passthrough=None) -> None:
        if stream is None:
            return
        with stream:
            for line in stream:
                event = classify(line)
                if event is None:
                    if passthrough is None or passthrough(line):
                        self._pass_through(line)
                    continue
                logger.debug("Build event: %s %s", event.kind.value, event.name)
                self._forward(event)

    def _read_diagnostics(self) -> None:
        self._drain(
            self._process.stderr,
            lambda line: classify_diagnostic_line(line, self._prefix),
        )

    def _read_messages(self) -> None:
        self._drain(
            self._process.stdout,
            lambda line: classify_message_line(line, self._artifact_reason),
            # JSON records are machine output; only stray text is echoed.
            lambda line: not line.lstrip().startswith("{"),
        )

    # ------------------------------------------------------------------
    # Consumer side
    # ------------------------------------------------------------------

    def poll(self) -> BuildEvent | None:
        """Take at most one event off the channel without blocking.

        The event, if any, is folded into ``self.sets`` before returning.
        """
        try:
            event = self._events.get_nowait()
        except queue.Empty:
            return None
        self.sets.apply(event)
        return event

    def drain(self, limit: int) -> list[BuildEvent]:
        """Poll up to *limit* times, stopping at the first empty poll."""
        drained: list[BuildEvent] = []
        for _ in range(limit):
            event = self.poll()
            if event is None:
                break
            drained.append(event)
        return drained

    @property
    def pending(self) -> int:
        """Approximate number of events not yet polled."""
        return self._events.qsize()

    @property
    def running(self) -> bool:
        """Whether the build process has not exited yet."""
        return self._process.poll() is None

    @property
    def readers_alive(self) -> bool:
        return any(reader.is_alive() for reader in self._readers)

    @property
    def returncode(self) -> int | None:
        return self._process.poll()

    def join(self, timeout: float | None = None) -> int | None:
        """Wait for both readers to reach end-of-stream and reap the process.

        Returns the exit status, or ``None`` if *timeout* expired first.
        """
        for reader in self._readers:
            reader.join(timeout)
        if self.readers_alive:
            return None
        try:
            return self._process.wait(timeout)
        except subprocess.TimeoutExpired:
            return None

    def close(self) -> int | None:
        """Stop forwarding events, stop the build if needed and join readers."""
        self._closed.set()
        if not self.readers_alive:
            # Both streams are at end-of-file, so the build is exiting by itself.
            try:
                self._process.wait(_EXIT_GRACE)
            except subprocess.TimeoutExpired:
                logger.debug("Build process %d still running after closing its output", self._process.pid)
        if self.running:
            logger.info("Terminating build process %d", self._process.pid)
            self._process.terminate()
            try:
                self._process.wait(_TERMINATE_GRACE)
            except subprocess.TimeoutExpired:
                logger.warning("Build process %d ignored SIGTERM; killing", self._process.pid)
                self._process.kill()
        status = self.join(_JOIN_TIMEOUT)
        if self.readers_alive:
            # A grandchild may still hold the pipes open.
            logger.warning(
                "Build output readers still running %.1fs after shutdown",
                _JOIN_TIMEOUT,
            )
            return self.returncode
        return status


# ---------------------------------------------------------------------------
# Tracker
# ---------------------------------------------------------------------------


class BuildTracker:
    """Launches builds and wires their output to a ``BuildHandle``.

    Parameters
    ----------
    prefix:
        Marker that opens a compile-progress line on stderr.
    artifact_reason:
        ``reason`` tag of the JSON record announcing a finished component.
    echo:
        Optional console receiving every diagnostic line that is not a
        compile-progress line and every non-JSON message line, so build
        diagnostics stay visible.  Pass the console a ``Live`` display
        manages so echoed lines print above the frame.
    """

    def __init__(
        self,
        prefix: str = DEFAULT_COMPILE_PREFIX,
        artifact_reason: str = DEFAULT_ARTIFACT_REASON,
        echo: Console | None = None,
    ) -> None:
        self.prefix = prefix
        self.artifact_reason = artifact_reason
        self.echo = echo

    def start(
        self,
        command: Sequence[str],
        cwd: Path | None = None,
        events: queue.Queue | None = None,
    ) -> BuildHandle:
        """Launch *command* and start both reader threads.

        Raises
        ------
        SubprocessSpawnError
            If the command is empty or cannot be executed.
        """
        if not command:
            raise SubprocessSpawnError("Build command is empty")

        logger.info("Launching build: %s", " ".join(command))
        try:
            process = subprocess.Popen(
                list(command),
                cwd=cwd,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                encoding="utf-8",
                errors="replace",
                bufsize=1,
            )
        except (OSError, ValueError) as exc:
            raise SubprocessSpawnError(
                f"Could not launch {command[0]!r}: {exc}"
            ) from exc

        handle = BuildHandle(
            process,
            events if events is not None else queue.Queue(),
            prefix=self.prefix,
            artifact_reason=self.artifact_reason,
            echo=self.echo,
        )
        handle._start_readers()
        return handle
