# lc3vm/arch/lc3/instructions/alu.py
"""
演算命令（ADD, AND, NOT）の実装。
"""
from dataclasses import dataclass
from typing import List, Optional

from lc3vm.common.types import ExecOutcome
from lc3vm.core.snapshot import Operation
from lc3vm.transport.bus import Bus
from lc3vm.arch.lc3.state import Lc3CpuState
from lc3vm.arch.lc3.traps import TrapDispatcher
from .base import bits, reg_name, sign_extend, signed_str

# @intent:responsibility ADD/ANDに共通のオペランド（DR, SR1, SR2またはimm5）を保持します。
# @intent:invariant sr2とimm5はどちらか一方だけがNoneでない。
@dataclass(frozen=True)
class _BinaryOp(Operation):
    dr: int
    sr1: int
    sr2: Optional[int]
    imm5: Optional[int]  # 符号拡張済み

    @property
    def operands(self) -> List[str]:
        second = reg_name(self.sr2) if self.imm5 is None else signed_str(self.imm5)
        return [reg_name(self.dr), reg_name(self.sr1), second]

    def second_operand(self, state: Lc3CpuState) -> int:
        if self.imm5 is None:
            return state.registers[self.sr2]
        return self.imm5

@dataclass(frozen=True)
class AddOp(_BinaryOp):
    @property
    def mnemonic(self) -> str:
        return "ADD"

@dataclass(frozen=True)
class AndOp(_BinaryOp):
    @property
    def mnemonic(self) -> str:
        return "AND"

@dataclass(frozen=True)
class NotOp(Operation):
    dr: int
    sr: int

    @property
    def mnemonic(self) -> str:
        return "NOT"

    @property
    def operands(self) -> List[str]:
        return [reg_name(self.dr), reg_name(self.sr)]

def _decode_binary_fields(word: int):
    dr = bits(word, 9, 3)
    sr1 = bits(word, 6, 3)
    if bits(word, 5, 1):  # immediate mode
        return dr, sr1, None, sign_extend(bits(word, 0, 5), 5)
    return dr, sr1, bits(word, 0, 3), None

# --- ADD ---
def decode_add(word: int) -> AddOp:
    return AddOp(word, *_decode_binary_fields(word))

# @intent:responsibility DR ← SR1 + (SR2 または SEXT(imm5))。結果は16ビットで折り返します。
def execute_add(state: Lc3CpuState, bus: Bus, op: AddOp, traps: TrapDispatcher) -> ExecOutcome:
    state.write_register(op.dr, state.registers[op.sr1] + op.second_operand(state))
    return ExecOutcome.CONTINUE

# --- AND ---
def decode_and(word: int) -> AndOp:
    return AndOp(word, *_decode_binary_fields(word))

def execute_and(state: Lc3CpuState, bus: Bus, op: AndOp, traps: TrapDispatcher) -> ExecOutcome:
    state.write_register(op.dr, state.registers[op.sr1] & op.second_operand(state))
    return ExecOutcome.CONTINUE

# --- NOT ---
def decode_not(word: int) -> NotOp:
    return NotOp(word, dr=bits(word, 9, 3), sr=bits(word, 6, 3))

def execute_not(state: Lc3CpuState, bus: Bus, op: NotOp, traps: TrapDispatcher) -> ExecOutcome:
    state.write_register(op.dr, ~state.registers[op.sr])
    return ExecOutcome.CONTINUE
