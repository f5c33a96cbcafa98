# lc3vm/arch/lc3/instructions/control.py
"""
制御命令（分岐、ジャンプ、サブルーチン、TRAP）と不正命令の実装。
"""
from dataclasses import dataclass
from typing import List, Optional

from lc3vm.common.types import ExecOutcome
from lc3vm.core.snapshot import Operation
from lc3vm.transport.bus import Bus
from lc3vm.arch.lc3.state import ConditionFlag, Lc3CpuState
from lc3vm.arch.lc3.traps import TrapDispatcher, TRAP_NAMES
from .base import Opcode, bits, opcode_of, pc_relative, reg_name, sign_extend, signed_str

# @intent:constant リターン慣用句（JMP R7）で使われるリンクレジスタ。
LINK_REGISTER = 7

@dataclass(frozen=True)
class BrOp(Operation):
    mask: int    # n/z/p
    offset: int  # SEXT(PCoffset9)

    @property
    def mnemonic(self) -> str:
        if self.mask == 0:
            return "NOP"
        flags = ""
        if self.mask & ConditionFlag.NEG: flags += "n"
        if self.mask & ConditionFlag.ZRO: flags += "z"
        if self.mask & ConditionFlag.POS: flags += "p"
        return "BR" + flags

    @property
    def operands(self) -> List[str]:
        return [signed_str(self.offset)] if self.mask else []

@dataclass(frozen=True)
class JmpOp(Operation):
    base_r: int

    @property
    def mnemonic(self) -> str:
        return "RET" if self.base_r == LINK_REGISTER else "JMP"

    @property
    def operands(self) -> List[str]:
        return [] if self.base_r == LINK_REGISTER else [reg_name(self.base_r)]

# @intent:invariant offset（JSR）とbase_r（JSRR）はどちらか一方だけがNoneでない。
@dataclass(frozen=True)
class JsrOp(Operation):
    offset: Optional[int]  # SEXT(PCoffset11)
    base_r: Optional[int]

    @property
    def mnemonic(self) -> str:
        return "JSR" if self.offset is not None else "JSRR"

    @property
    def operands(self) -> List[str]:
        if self.offset is not None:
            return [signed_str(self.offset)]
        return [reg_name(self.base_r)]

@dataclass(frozen=True)
class TrapOp(Operation):
    vector: int

    @property
    def mnemonic(self) -> str:
        return TRAP_NAMES.get(self.vector, "TRAP")

    @property
    def operands(self) -> List[str]:
        return [] if self.vector in TRAP_NAMES else [f"x{self.vector:02X}"]

# @intent:responsibility RTI/RESなど実行を許可しない命令語を表します。
@dataclass(frozen=True)
class IllegalOp(Operation):
    @property
    def opcode(self) -> Opcode:
        return opcode_of(self.word)

    @property
    def mnemonic(self) -> str:
        return self.opcode.name

# --- BR ---
def decode_br(word: int) -> BrOp:
    return BrOp(word, mask=bits(word, 9, 3), offset=sign_extend(bits(word, 0, 9), 9))

# @intent:responsibility マスクと現在のcondに共通するビットがあれば分岐します。
def execute_br(state: Lc3CpuState, bus: Bus, op: BrOp, traps: TrapDispatcher) -> ExecOutcome:
    if op.mask & state.cond:
        state.pc = pc_relative(state.pc, op.offset)
    return ExecOutcome.CONTINUE

# --- JMP / RET ---
def decode_jmp(word: int) -> JmpOp:
    return JmpOp(word, base_r=bits(word, 6, 3))

def execute_jmp(state: Lc3CpuState, bus: Bus, op: JmpOp, traps: TrapDispatcher) -> ExecOutcome:
    state.pc = state.registers[op.base_r]
    return ExecOutcome.CONTINUE

# --- JSR / JSRR ---
def decode_jsr(word: int) -> JsrOp:
    if bits(word, 11, 1):
        return JsrOp(word, offset=sign_extend(bits(word, 0, 11), 11), base_r=None)
    return JsrOp(word, offset=None, base_r=bits(word, 6, 3))

# @intent:responsibility 戻りアドレス（ジャンプ前のPC）をR7に保存してからジャンプします。
def execute_jsr(state: Lc3CpuState, bus: Bus, op: JsrOp, traps: TrapDispatcher) -> ExecOutcome:
    state.registers[LINK_REGISTER] = state.pc
    if op.offset is not None:
        state.pc = pc_relative(state.pc, op.offset)
    else:
        # JSRR R7 はR7を書き換えた後の値（＝次の命令）へ飛ぶ
        state.pc = state.registers[op.base_r]
    return ExecOutcome.CONTINUE

# --- TRAP ---
def decode_trap(word: int) -> TrapOp:
    return TrapOp(word, vector=bits(word, 0, 8))

def execute_trap(state: Lc3CpuState, bus: Bus, op: TrapOp, traps: TrapDispatcher) -> ExecOutcome:
    state.registers[LINK_REGISTER] = state.pc
    return traps.dispatch(op.vector, state, bus)

# --- RTI / RES ---
def decode_illegal(word: int) -> IllegalOp:
    return IllegalOp(word)

# @intent:responsibility 状態を一切変更せず、不正命令であることだけを報告します。
def execute_illegal(state: Lc3CpuState, bus: Bus, op: IllegalOp, traps: TrapDispatcher) -> ExecOutcome:
    return ExecOutcome.ILLEGAL_OPCODE
