# lc3vm/debugger/debugger.py
"""
デバッガモジュール。

フェッチ・デコード・実行のメインループを駆動し、単一ステップモードでは
各命令の実行前に操作者のコマンドを受け付けます。
"""
import logging
from enum import Enum
from typing import Callable, Dict, Optional

from lc3vm.common.types import ExecOutcome
from lc3vm.core.cpu import AbstractCpu
from lc3vm.core.snapshot import FetchedWord, Snapshot
from lc3vm.host.console import DebugConsole
from lc3vm.transport.bus import BusAccessType
from lc3vm.debugger.commands import (
    HELP_TEXT, Command, Continue, Help, ShowMemory, ShowRegisters, Step, Unknown, parse_command,
)
from lc3vm.debugger.controller import ExecutionController, ExecutionState

log = logging.getLogger(__name__)

DEFAULT_PROMPT = "(lc3vm) "
DROPPED_MESSAGE = "Dropped into single-step mode. Press ^C again to quit."

# @intent:responsibility メインループが終了した理由を表します。
class StopReason(Enum):
    HALTED = "HALTED"
    ILLEGAL_OPCODE = "ILLEGAL_OPCODE"
    CANCELLED = "CANCELLED"      # フロントエンドの入力終端・中断
    INTERRUPTED = "INTERRUPTED"  # 停止要求でOFFに達した

# @intent:responsibility CPUの実行を制御し、単一ステップモードのコマンドループを提供します。
class Debugger:
    """
    インタプリタのメインループ。実行コントローラの状態を各フェッチの直前に確認し、
    SINGLE_STEPであればフェッチ済みの命令を実行する前にコマンドループへ入ります。
    """
    def __init__(self, cpu: AbstractCpu, controller: ExecutionController, console: DebugConsole,
                 prompt: str = DEFAULT_PROMPT, trace: bool = True):
        self._cpu = cpu
        self._controller = controller
        self._console = console
        self._prompt = prompt
        self._trace = trace
        self._stop_reason: Optional[StopReason] = None
        self._last_snapshot: Optional[Snapshot] = None
        # @intent:map コマンドの型から処理関数へのマッピング。Trueを返した場合はコマンドループを抜けて命令を実行する。
        self._handlers: Dict[type, Callable[[Command], bool]] = {
            Help: self._cmd_help,
            Continue: self._cmd_continue,
            Step: self._cmd_step,
            ShowRegisters: self._cmd_registers,
            ShowMemory: self._cmd_memory,
            Unknown: self._cmd_unknown,
        }

    @property
    def stop_reason(self) -> Optional[StopReason]:
        return self._stop_reason

    def get_last_snapshot(self) -> Optional[Snapshot]:
        return self._last_snapshot

    # @intent:responsibility OFFに達するまで命令を実行し続けます。
    def run(self) -> StopReason:
        while True:
            self._apply_stops()
            if not self._controller.is_running:
                break

            fetched = self._cpu.fetch()

            if self._controller.state == ExecutionState.SINGLE_STEP:
                self._console.write_line(
                    f"Fetched instruction from 0x{fetched.address:04X}, containing 0x{fetched.word:04X}.")
                if not self._command_loop():
                    break

            if self._execute(fetched) is None:
                break

        if self._stop_reason is None:
            self._stop_reason = StopReason.INTERRUPTED
        return self._stop_reason

    # @intent:return 実行した命令のスナップショット。文字入力の待機中にOFFへ達した場合はNone。
    def _execute(self, fetched: FetchedWord) -> Optional[Snapshot]:
        stepping = self._controller.state == ExecutionState.SINGLE_STEP
        try:
            snapshot = self._cpu.execute(fetched)
        except KeyboardInterrupt:
            # 停止要求でOFFに達したときだけハンドラが送出する
            self._apply_stops()
            if self._controller.is_running:
                raise
            return None
        self._last_snapshot = snapshot

        if snapshot.outcome == ExecOutcome.HALT:
            self._finish(StopReason.HALTED)
        elif snapshot.outcome == ExecOutcome.ILLEGAL_OPCODE:
            log.error("illegal opcode: 0x%X", snapshot.operation.word >> 12)
            self._finish(StopReason.ILLEGAL_OPCODE)

        if self._trace and stepping:
            self._trace_snapshot(snapshot)
        return snapshot

    def _finish(self, reason: StopReason) -> None:
        self._controller.power_off()
        if self._stop_reason is None:
            self._stop_reason = reason

    # @intent:responsibility 積まれた停止要求を反映します。メインループの安全点でのみ呼ばれます。
    def _apply_stops(self) -> None:
        before = self._controller.state
        if not self._controller.apply_pending_stops():
            return
        after = self._controller.state
        log.debug("stop requested: %s -> %s", before.name, after.name)
        if before == ExecutionState.TURBO:
            self._console.write_line(DROPPED_MESSAGE)
        if after == ExecutionState.OFF and self._stop_reason is None:
            self._stop_reason = StopReason.INTERRUPTED

    # @intent:responsibility 単一ステップモードのコマンドループ。
    # @intent:return 命令を実行してよい場合True、OFFに遷移した場合False。
    def _command_loop(self) -> bool:
        while True:
            try:
                with self._controller.awaiting_command_input():
                    line = self._console.read_line(self._prompt)
            except KeyboardInterrupt:
                line = None

            self._apply_stops()
            if line is None:
                self._finish(StopReason.CANCELLED)
                return False

            self._console.add_history(line)
            if not self._controller.is_running:
                return False

            command = parse_command(line)
            if self._handlers[type(command)](command):
                return True

    def _cmd_help(self, command: Help) -> bool:
        self._console.write(HELP_TEXT)
        return False

    def _cmd_continue(self, command: Continue) -> bool:
        self._controller.resume()
        return True

    def _cmd_step(self, command: Step) -> bool:
        return True

    def _cmd_registers(self, command: ShowRegisters) -> bool:
        for name, value in self._cpu.describe_registers():
            self._console.write_line(f"{name}:\t 0x{value:04X}")
        return False

    # TODO: display `count` words starting at `address` once the output format is settled
    def _cmd_memory(self, command: ShowMemory) -> bool:
        return False

    def _cmd_unknown(self, command: Unknown) -> bool:
        self._console.write_line(f"Unrecognized command: {command.text} (type 'help' for help)")
        return False

    def _trace_snapshot(self, snapshot: Snapshot) -> None:
        self._console.write_line(f"Executed 0x{snapshot.address:04X}: {snapshot.metadata.symbol_info}")
        for access in snapshot.bus_activity:
            if access.access_type == BusAccessType.WRITE:
                self._console.write_line(f"Wrote 0x{access.data:04X} to 0x{access.address:04X}.")
        if snapshot.metadata.flags_updated:
            cond = self._cpu.get_register_map()["COND"]
            self._console.write_line(f"Set R_COND to 0x{cond:04X}.")
