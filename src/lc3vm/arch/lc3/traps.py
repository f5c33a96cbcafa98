# lc3vm/arch/lc3/traps.py
"""
TRAPサービスルーチンの実装。

TRAP命令の下位8ビット（トラップベクタ）に応じて、ホストとの文字入出力を行います。
"""
import logging
from typing import Callable, Dict

from lc3vm.common.types import ExecOutcome
from lc3vm.host.io import EOF_WORD, HostIO
from lc3vm.transport.bus import Bus
from lc3vm.arch.lc3.state import Lc3CpuState

log = logging.getLogger(__name__)

# trap codes
TRAP_GETC = 0x20   # get character from keyboard, don't echo to terminal
TRAP_OUT = 0x21    # output a character
TRAP_PUTS = 0x22   # output a word string
TRAP_IN = 0x23     # get character from keyboard, do echo to terminal
TRAP_PUTSP = 0x24  # output a byte string
TRAP_HALT = 0x25   # halt the machine

TRAP_NAMES = {
    TRAP_GETC: "GETC",
    TRAP_OUT: "OUT",
    TRAP_PUTS: "PUTS",
    TRAP_IN: "IN",
    TRAP_PUTSP: "PUTSP",
    TRAP_HALT: "HALT",
}

IN_PROMPT = b"Enter a character: "
HALT_NOTICE = b"HALT\n"

# @intent:responsibility トラップベクタを各サービスルーチンへ振り分けます。
# @intent:rationale 未知のベクタは警告を出して実行を継続します（フラグも変更しません）。
class TrapDispatcher:
    """
    TRAP命令のサービスルーチン群。R7への戻りアドレス保存はTRAP命令側で済んでいます。
    """
    def __init__(self, host: HostIO):
        self._host = host
        self._routines: Dict[int, Callable[[Lc3CpuState, Bus], ExecOutcome]] = {
            TRAP_GETC: self._getc,
            TRAP_OUT: self._out,
            TRAP_PUTS: self._puts,
            TRAP_IN: self._in,
            TRAP_PUTSP: self._putsp,
            TRAP_HALT: self._halt,
        }

    @property
    def host(self) -> HostIO:
        return self._host

    def dispatch(self, vector: int, state: Lc3CpuState, bus: Bus) -> ExecOutcome:
        routine = self._routines.get(vector)
        if routine is None:
            log.warning("invalid trap vector: 0x%04X", vector)
            return ExecOutcome.INVALID_TRAP
        return routine(state, bus)

    # --- GETC ---
    def _getc(self, state: Lc3CpuState, bus: Bus) -> ExecOutcome:
        # read a single ASCII char, no echo
        state.write_register(0, self._host.read_char())
        return ExecOutcome.CONTINUE

    # --- OUT ---
    def _out(self, state: Lc3CpuState, bus: Bus) -> ExecOutcome:
        self._host.write(bytes([state.registers[0] & 0xFF]))
        self._host.flush()
        return ExecOutcome.CONTINUE

    # --- PUTS ---
    # @intent:responsibility 1ワード1文字の0終端文字列を出力します。長さの上限はありません。
    def _puts(self, state: Lc3CpuState, bus: Bus) -> ExecOutcome:
        out = bytearray()
        address = state.registers[0]
        word = bus.peek(address)
        while word:
            out.append(word & 0xFF)
            address = (address + 1) & 0xFFFF
            word = bus.peek(address)
        self._host.write(bytes(out))
        self._host.flush()
        return ExecOutcome.CONTINUE

    # --- IN ---
    def _in(self, state: Lc3CpuState, bus: Bus) -> ExecOutcome:
        self._host.write(IN_PROMPT)
        self._host.flush()
        c = self._host.read_char()
        if c != EOF_WORD:
            self._host.write(bytes([c & 0xFF]))
        self._host.flush()
        state.write_register(0, c)
        return ExecOutcome.CONTINUE

    # --- PUTSP ---
    # @intent:responsibility 1ワード2文字（下位バイト→上位バイト）の0終端文字列を出力します。
    def _putsp(self, state: Lc3CpuState, bus: Bus) -> ExecOutcome:
        out = bytearray()
        address = state.registers[0]
        word = bus.peek(address)
        while word:
            out.append(word & 0xFF)
            high = word >> 8
            if high:
                out.append(high)
            address = (address + 1) & 0xFFFF
            word = bus.peek(address)
        self._host.write(bytes(out))
        self._host.flush()
        return ExecOutcome.CONTINUE

    # --- HALT ---
    def _halt(self, state: Lc3CpuState, bus: Bus) -> ExecOutcome:
        self._host.write(HALT_NOTICE)
        self._host.flush()
        return ExecOutcome.HALT
