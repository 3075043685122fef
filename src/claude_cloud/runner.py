"""Claude CLI をサブプロセスとして起動し、終了まで面倒を見る。

状態遷移:
    NOT_STARTED -> SPAWNING -> RUNNING -> {SUCCEEDED, FAILED, SPAWN_ERROR} -> CLEANED

- show_logs=True: 端末に直結（ログファイルは作らない）
- show_logs=False: stdout/stderr をパイプで受け、届いた順にログファイルへそのまま書く
  （端末には何も出さない。両方同時にはやらない）
- 終了コードに関わらず一時ファイルは必ず消す。ログは flush して閉じる
- タイムアウト / キャンセルは扱わない（終了まで待つ）

環境変数は子プロセスにだけ注入する。親の os.environ は触らない。
"""

from __future__ import annotations

import enum
import logging
import os
import subprocess
import threading
from collections.abc import Iterable
from dataclasses import dataclass, field
from functools import partial
from pathlib import Path
from typing import BinaryIO, IO

CLAUDE_COMMAND = ["claude", "--dangerously-skip-permissions"]

_CHUNK_SIZE = 8192


class RunState(str, enum.Enum):
    NOT_STARTED = "not_started"
    SPAWNING = "spawning"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    SPAWN_ERROR = "spawn_error"
    CLEANED = "cleaned"


@dataclass
class ExitOutcome:
    state: RunState
    returncode: int | None = None
    log_path: Path | None = None
    error: str = ""

    @property
    def ok(self) -> bool:
        return self.state == RunState.SUCCEEDED


def cleanup_files(paths: Iterable[Path]) -> None:
    for p in paths:
        p.unlink(missing_ok=True)


def _pump(stream: IO[bytes], sink: BinaryIO, lock: threading.Lock) -> None:
    try:
        for chunk in iter(partial(stream.read1, _CHUNK_SIZE), b""):  # type: ignore[attr-defined]
            with lock:
                sink.write(chunk)
                sink.flush()
    finally:
        stream.close()


@dataclass
class TaskProcess:
    """子プロセス1本と、そのログ転送スレッドを持つ。

    start() で起動し、wait() が唯一の完了通知（ExitOutcome）を返す。
    """

    command: list[str]
    cwd: Path
    env: dict[str, str] = field(default_factory=dict)
    show_logs: bool = False
    log_path: Path | None = None
    temp_files: list[Path] = field(default_factory=list)

    state: RunState = RunState.NOT_STARTED
    _proc: subprocess.Popen | None = field(default=None, init=False, repr=False)
    _log: BinaryIO | None = field(default=None, init=False, repr=False)
    _pumps: list[threading.Thread] = field(default_factory=list, init=False, repr=False)
    _error: str = field(default="", init=False, repr=False)

    def start(self) -> None:
        log = logging.getLogger(__name__)
        self.state = RunState.SPAWNING

        child_env = dict(os.environ)
        child_env.update(self.env)

        capture = not self.show_logs and self.log_path is not None
        try:
            if capture:
                assert self.log_path is not None
                self.log_path.parent.mkdir(parents=True, exist_ok=True)
                self._log = self.log_path.open("wb")
            self._proc = subprocess.Popen(
                self.command,
                cwd=self.cwd,
                env=child_env,
                stdin=subprocess.DEVNULL if capture else None,
                stdout=subprocess.PIPE if capture else None,
                stderr=subprocess.PIPE if capture else None,
            )
        except (OSError, ValueError) as e:
            # ValueError: 引数に NUL が含まれる等
            self.state = RunState.SPAWN_ERROR
            self._error = str(e)
            log.error("failed to spawn %s: %s", self.command[0], e)
            if self._log is not None:
                self._log.write(f"Error: {e}\n".encode())
            return

        self.state = RunState.RUNNING
        log.info("spawned %s (pid=%s) in %s", self.command[0], self._proc.pid, self.cwd)

        if capture:
            assert self._log is not None
            lock = threading.Lock()
            for stream in (self._proc.stdout, self._proc.stderr):
                t = threading.Thread(target=_pump, args=(stream, self._log, lock), daemon=True)
                t.start()
                self._pumps.append(t)

    def wait(self) -> ExitOutcome:
        if self.state == RunState.NOT_STARTED:
            raise RuntimeError("task process has not been started")

        returncode: int | None = None
        try:
            if self._proc is not None:
                returncode = self._proc.wait()
                for t in self._pumps:
                    t.join()
                self.state = RunState.SUCCEEDED if returncode == 0 else RunState.FAILED
        finally:
            final = self.state
            self.close()

        logging.getLogger(__name__).info("task finished: state=%s returncode=%s", final.value, returncode)
        return ExitOutcome(
            state=final,
            returncode=returncode,
            log_path=self.log_path if self._log is not None else None,
            error=self._error,
        )

    def close(self) -> None:
        """一時ファイルを消してログを閉じる。何度呼んでもよい。"""
        if self.state == RunState.CLEANED:
            return
        try:
            cleanup_files(self.temp_files)
        finally:
            if self._log is not None:
                self._log.flush()
                self._log.close()
            self.state = RunState.CLEANED


@dataclass
class TaskRunner:
    command: list[str] | None = None

    def build_command(self, prompt: str) -> list[str]:
        return [*(self.command or CLAUDE_COMMAND), prompt]

    def run(
        self,
        prompt: str,
        *,
        cwd: Path,
        env: dict[str, str] | None = None,
        show_logs: bool = False,
        log_path: Path | None = None,
        temp_files: Iterable[Path] = (),
    ) -> ExitOutcome:
        task = TaskProcess(
            command=self.build_command(prompt),
            cwd=cwd,
            env=dict(env or {}),
            show_logs=show_logs,
            log_path=log_path,
            temp_files=list(temp_files),
        )
        try:
            task.start()
        except BaseException:
            task.close()
            raise
        return task.wait()
