# lc3vm/debugger/controller.py
"""
実行コントローラ。

インタプリタが各サイクルでデバッガ入力を待つかどうかを決める3状態
（OFF / SINGLE_STEP / TURBO）を管理します。
"""
from collections import deque
from contextlib import contextmanager
from enum import IntEnum
from typing import Iterator

# @intent:responsibility 実行モードを定義します。OFFは終端状態です。
class ExecutionState(IntEnum):
    OFF = 0
    SINGLE_STEP = 1  # single-step/debugging mode
    TURBO = 2        # full speed

# @intent:responsibility 実行モードの状態遷移を管理します。
# @intent:rationale 停止シグナルはキューに積むだけにし、状態の減算はインタプリタの
#                  安全点（フェッチ直前とコマンド読み込み直後）でのみ行います。
class ExecutionController:
    """
    実行モードの状態機械。
    状態を書き換えるのはインタプリタのスレッドだけで、シグナルハンドラは
    request_stop()で停止要求を積むだけです。
    """
    def __init__(self, initial: ExecutionState = ExecutionState.SINGLE_STEP):
        self._state = initial
        self._stop_requests: deque = deque()
        self._awaiting_command = False
        self._awaiting_key = False

    @property
    def state(self) -> ExecutionState:
        return self._state

    @property
    def is_running(self) -> bool:
        return self._state != ExecutionState.OFF

    @property
    def awaiting_command(self) -> bool:
        return self._awaiting_command

    @property
    def awaiting_key(self) -> bool:
        return self._awaiting_key

    # @intent:responsibility デバッガの"continue"コマンド: SINGLE_STEP → TURBO。
    def resume(self) -> None:
        if self._state == ExecutionState.SINGLE_STEP:
            self._state = ExecutionState.TURBO

    # @intent:responsibility HALT・不正命令・入力終端でOFFへ直接遷移します。
    def power_off(self) -> None:
        self._state = ExecutionState.OFF

    # @intent:responsibility 停止要求を積みます。シグナルハンドラから呼ばれても安全です。
    def request_stop(self) -> None:
        self._stop_requests.append(None)

    @property
    def pending_stops(self) -> int:
        return len(self._stop_requests)

    # @intent:responsibility 積まれた停止要求を全て反映するとOFFに達するかどうかを返します。
    @property
    def stops_reach_off(self) -> bool:
        return self._state - len(self._stop_requests) <= ExecutionState.OFF

    # @intent:responsibility 積まれた停止要求を1つにつき1段階ずつ状態へ反映します。
    # @intent:return 反映した要求の数。
    def apply_pending_stops(self) -> int:
        applied = 0
        while True:
            try:
                self._stop_requests.popleft()
            except IndexError:
                break
            applied += 1
            if self._state > ExecutionState.OFF:
                self._state = ExecutionState(self._state - 1)
        return applied

    # @intent:responsibility ブロッキングなコマンド読み込み中であることを示します。
    @contextmanager
    def awaiting_command_input(self) -> Iterator[None]:
        self._awaiting_command = True
        try:
            yield
        finally:
            self._awaiting_command = False

    # @intent:responsibility プログラムの文字入力（GETC/IN）でブロックしていることを示します。
    @contextmanager
    def awaiting_key_input(self) -> Iterator[None]:
        self._awaiting_key = True
        try:
            yield
        finally:
            self._awaiting_key = False
