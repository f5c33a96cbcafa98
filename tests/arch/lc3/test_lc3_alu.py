# tests/arch/lc3/test_lc3_alu.py
"""
演算命令（ADD, AND, NOT）と条件フラグ更新の単体テスト。
"""
import pytest

from lc3vm.arch.lc3.cpu import Lc3Cpu
from lc3vm.arch.lc3.instructions import decode_opcode, sign_extend
from lc3vm.arch.lc3.instructions.alu import AddOp, AndOp, NotOp
from lc3vm.arch.lc3.state import ConditionFlag
from lc3vm.arch.lc3.traps import TrapDispatcher
from lc3vm.host.io import BufferedHostIO
from lc3vm.transport.bus import RAM, Bus

# @intent:test_suite 演算命令の結果、16ビットの折り返し、フラグ更新を検証します。

class TestLc3Alu:
    @pytest.fixture
    def cpu(self):
        bus = Bus()
        bus.register_device(0x0000, 0xFFFF, RAM(0x10000))
        return Lc3Cpu(bus, TrapDispatcher(BufferedHostIO()))

    def _run(self, cpu, word, pc=0x3000):
        cpu.get_bus().write(pc, word)
        cpu.get_state().pc = pc
        return cpu.step()

    # @intent:test_case ADD R0, R1, #2 で R1=5 のとき R0=7、フラグはPOS。
    def test_add_immediate(self, cpu):
        state = cpu.get_state()
        state.registers[1] = 5
        snapshot = self._run(cpu, 0x1062)

        assert state.registers[0] == 7
        assert state.cond == ConditionFlag.POS
        assert state.pc == 0x3001
        assert snapshot.metadata.symbol_info == "ADD R0, R1, #2"

    def test_add_register_sets_negative(self, cpu):
        state = cpu.get_state()
        state.registers[3] = 0x7FFF
        state.registers[4] = 0x0001
        snapshot = self._run(cpu, 0x14C4)  # ADD R2, R3, R4

        assert state.registers[2] == 0x8000
        assert state.cond == ConditionFlag.NEG
        assert str(snapshot.operation) == "ADD R2, R3, R4"

    @pytest.mark.parametrize("initial, expected, flag", [
        (0x0000, 0xFFFF, ConditionFlag.NEG),
        (0x0001, 0x0000, ConditionFlag.ZRO),
        (0x8000, 0x7FFF, ConditionFlag.POS),
    ])
    def test_add_wraps_to_16_bits(self, cpu, initial, expected, flag):
        state = cpu.get_state()
        state.registers[0] = initial
        self._run(cpu, 0x103F)  # ADD R0, R0, #-1

        assert state.registers[0] == expected
        assert state.cond == flag

    def test_and_immediate_zero(self, cpu):
        state = cpu.get_state()
        state.registers[1] = 0xFFFF
        state.cond = ConditionFlag.NEG
        self._run(cpu, 0x5060)  # AND R0, R1, #0

        assert state.registers[0] == 0
        assert state.cond == ConditionFlag.ZRO

    def test_and_immediate_is_sign_extended(self, cpu):
        state = cpu.get_state()
        state.registers[1] = 0x8001
        self._run(cpu, 0x507F)  # AND R0, R1, #-1

        assert state.registers[0] == 0x8001
        assert state.cond == ConditionFlag.NEG

    def test_and_register(self, cpu):
        state = cpu.get_state()
        state.registers[3] = 0xF0F0
        state.registers[4] = 0x0FF0
        self._run(cpu, 0x54C4)  # AND R2, R3, R4

        assert state.registers[2] == 0x00F0
        assert state.cond == ConditionFlag.POS

    @pytest.mark.parametrize("source, expected, flag", [
        (0x00FF, 0xFF00, ConditionFlag.NEG),
        (0xFFFF, 0x0000, ConditionFlag.ZRO),
        (0x8000, 0x7FFF, ConditionFlag.POS),
    ])
    def test_not(self, cpu, source, expected, flag):
        state = cpu.get_state()
        state.registers[1] = source
        snapshot = self._run(cpu, 0x907F)  # NOT R0, R1

        assert state.registers[0] == expected
        assert state.cond == flag
        assert snapshot.metadata.symbol_info == "NOT R0, R1"


class TestConditionFlags:
    """
    レジスタを書き込む全ての命令で、condが書き込まれた値の符号を反映することを検証します。
    """
    @pytest.fixture
    def cpu(self):
        bus = Bus()
        bus.register_device(0x0000, 0xFFFF, RAM(0x10000))
        return Lc3Cpu(bus, TrapDispatcher(BufferedHostIO()))

    def _prepare_add(self, cpu, value):
        cpu.get_state().registers[1] = value
        return 0x1060  # ADD R0, R1, #0

    def _prepare_and(self, cpu, value):
        cpu.get_state().registers[1] = value
        return 0x507F  # AND R0, R1, #-1

    def _prepare_not(self, cpu, value):
        cpu.get_state().registers[1] = ~value & 0xFFFF
        return 0x907F  # NOT R0, R1

    def _prepare_ld(self, cpu, value):
        cpu.get_bus().write(0x3002, value)
        return 0x2001  # LD R0, #1

    def _prepare_ldr(self, cpu, value):
        cpu.get_state().registers[1] = 0x4000
        cpu.get_bus().write(0x4000, value)
        return 0x6040  # LDR R0, R1, #0

    @pytest.mark.parametrize("prepare", ["_prepare_add", "_prepare_and", "_prepare_not",
                                         "_prepare_ld", "_prepare_ldr"])
    @pytest.mark.parametrize("value, flag", [
        (0x0000, ConditionFlag.ZRO),
        (0x0001, ConditionFlag.POS),
        (0x7FFF, ConditionFlag.POS),
        (0x8000, ConditionFlag.NEG),
        (0xFFFF, ConditionFlag.NEG),
    ])
    def test_flags_reflect_written_value(self, cpu, prepare, value, flag):
        word = getattr(self, prepare)(cpu, value)
        cpu.get_bus().write(0x3000, word)
        cpu.step()

        state = cpu.get_state()
        assert state.registers[0] == value
        assert state.cond == flag
        assert cpu.get_flag_state() == {
            "N": flag == ConditionFlag.NEG,
            "Z": flag == ConditionFlag.ZRO,
            "P": flag == ConditionFlag.POS,
        }


class TestAluDecode:
    def test_decode_records(self):
        assert decode_opcode(0x1062) == AddOp(0x1062, dr=0, sr1=1, sr2=None, imm5=2)
        assert decode_opcode(0x54C4) == AndOp(0x54C4, dr=2, sr1=3, sr2=4, imm5=None)
        assert decode_opcode(0x907F) == NotOp(0x907F, dr=0, sr=1)

    def test_negative_immediate_formatting(self):
        assert str(decode_opcode(0x103F)) == "ADD R0, R0, #-1"

    @pytest.mark.parametrize("value, bit_count, expected", [
        (0x1F, 5, 0xFFFF),
        (0x0F, 5, 0x000F),
        (0x10, 5, 0xFFF0),
        (0x1FF, 9, 0xFFFF),
        (0x0FF, 9, 0x00FF),
        (0x20, 6, 0xFFE0),
        (0x400, 11, 0xFC00),
    ])
    def test_sign_extend(self, value, bit_count, expected):
        assert sign_extend(value, bit_count) == expected
