# lc3vm/arch/lc3/instructions/load.py
"""
ロード/ストア命令（LD, LDI, LDR, LEA, ST, STI, STR）の実装。
PC相対のアドレスは、既に次の命令を指しているPCを基準に計算します。
"""
from dataclasses import dataclass
from typing import List

from lc3vm.common.types import ExecOutcome
from lc3vm.core.snapshot import Operation
from lc3vm.transport.bus import Bus
from lc3vm.arch.lc3.state import Lc3CpuState
from lc3vm.arch.lc3.traps import TrapDispatcher
from .base import bits, pc_relative, reg_name, sign_extend, signed_str

# @intent:responsibility PCoffset9を持つ命令の共通レコード。regはLD系ではDR、ST系ではSR。
@dataclass(frozen=True)
class _PcRelativeOp(Operation):
    reg: int
    offset: int  # SEXT(PCoffset9)

    @property
    def operands(self) -> List[str]:
        return [reg_name(self.reg), signed_str(self.offset)]

# @intent:responsibility BaseR + offset6 を持つ命令の共通レコード。
@dataclass(frozen=True)
class _BaseOffsetOp(Operation):
    reg: int
    base_r: int
    offset: int  # SEXT(offset6)

    @property
    def operands(self) -> List[str]:
        return [reg_name(self.reg), reg_name(self.base_r), signed_str(self.offset)]

@dataclass(frozen=True)
class LdOp(_PcRelativeOp):
    @property
    def mnemonic(self) -> str:
        return "LD"

@dataclass(frozen=True)
class LdiOp(_PcRelativeOp):
    @property
    def mnemonic(self) -> str:
        return "LDI"

@dataclass(frozen=True)
class LeaOp(_PcRelativeOp):
    @property
    def mnemonic(self) -> str:
        return "LEA"

@dataclass(frozen=True)
class StOp(_PcRelativeOp):
    @property
    def mnemonic(self) -> str:
        return "ST"

@dataclass(frozen=True)
class StiOp(_PcRelativeOp):
    @property
    def mnemonic(self) -> str:
        return "STI"

@dataclass(frozen=True)
class LdrOp(_BaseOffsetOp):
    @property
    def mnemonic(self) -> str:
        return "LDR"

@dataclass(frozen=True)
class StrOp(_BaseOffsetOp):
    @property
    def mnemonic(self) -> str:
        return "STR"

def _pc_relative_fields(word: int):
    return bits(word, 9, 3), sign_extend(bits(word, 0, 9), 9)

def _base_offset_fields(word: int):
    return bits(word, 9, 3), bits(word, 6, 3), sign_extend(bits(word, 0, 6), 6)

# --- LD ---
def decode_ld(word: int) -> LdOp:
    return LdOp(word, *_pc_relative_fields(word))

def execute_ld(state: Lc3CpuState, bus: Bus, op: LdOp, traps: TrapDispatcher) -> ExecOutcome:
    state.write_register(op.reg, bus.read(pc_relative(state.pc, op.offset)))
    return ExecOutcome.CONTINUE

# --- LDI ---
def decode_ldi(word: int) -> LdiOp:
    return LdiOp(word, *_pc_relative_fields(word))

# @intent:responsibility PC+offsetの内容をアドレスとして、もう一段メモリを参照します。
def execute_ldi(state: Lc3CpuState, bus: Bus, op: LdiOp, traps: TrapDispatcher) -> ExecOutcome:
    pointer = bus.read(pc_relative(state.pc, op.offset))
    state.write_register(op.reg, bus.read(pointer))
    return ExecOutcome.CONTINUE

# --- LDR ---
def decode_ldr(word: int) -> LdrOp:
    return LdrOp(word, *_base_offset_fields(word))

def execute_ldr(state: Lc3CpuState, bus: Bus, op: LdrOp, traps: TrapDispatcher) -> ExecOutcome:
    address = pc_relative(state.registers[op.base_r], op.offset)
    state.write_register(op.reg, bus.read(address))
    return ExecOutcome.CONTINUE

# --- LEA ---
def decode_lea(word: int) -> LeaOp:
    return LeaOp(word, *_pc_relative_fields(word))

# @intent:responsibility アドレスそのもの（内容ではない）をDRへ格納します。
def execute_lea(state: Lc3CpuState, bus: Bus, op: LeaOp, traps: TrapDispatcher) -> ExecOutcome:
    state.write_register(op.reg, pc_relative(state.pc, op.offset))
    return ExecOutcome.CONTINUE

# --- ST ---
def decode_st(word: int) -> StOp:
    return StOp(word, *_pc_relative_fields(word))

def execute_st(state: Lc3CpuState, bus: Bus, op: StOp, traps: TrapDispatcher) -> ExecOutcome:
    bus.write(pc_relative(state.pc, op.offset), state.registers[op.reg])
    return ExecOutcome.CONTINUE

# --- STI ---
def decode_sti(word: int) -> StiOp:
    return StiOp(word, *_pc_relative_fields(word))

def execute_sti(state: Lc3CpuState, bus: Bus, op: StiOp, traps: TrapDispatcher) -> ExecOutcome:
    bus.write(bus.read(pc_relative(state.pc, op.offset)), state.registers[op.reg])
    return ExecOutcome.CONTINUE

# --- STR ---
def decode_str(word: int) -> StrOp:
    return StrOp(word, *_base_offset_fields(word))

def execute_str(state: Lc3CpuState, bus: Bus, op: StrOp, traps: TrapDispatcher) -> ExecOutcome:
    bus.write(pc_relative(state.registers[op.base_r], op.offset), state.registers[op.reg])
    return ExecOutcome.CONTINUE
