# tests/debugger/test_commands.py
"""
lc3vm.debugger.commandsモジュールの単体テスト。
"""
import pytest

from lc3vm.debugger.commands import (
    HELP_TEXT, Continue, Help, ShowMemory, ShowRegisters, Step, Unknown, parse_command,
)

# @intent:test_suite コマンド行が先頭1文字で正しいコマンドに分類されることを検証します。

class TestParseCommand:
    @pytest.mark.parametrize("line, expected", [
        ("h", Help()),
        ("help", Help()),
        ("hello", Help()),
        ("c", Continue()),
        ("continue", Continue()),
        ("s", Step()),
        ("step", Step()),
        ("r", ShowRegisters()),
        ("reg", ShowRegisters()),
        ("registers please", ShowRegisters()),
    ])
    def test_prefix_dispatch(self, line, expected):
        assert parse_command(line) == expected

    # @intent:test_case 大文字小文字は区別され、大文字で始まる行は未知のコマンドです。
    @pytest.mark.parametrize("line", ["H", "Step", "xyz", " step", "?"])
    def test_unknown(self, line):
        assert parse_command(line) == Unknown(line)

    def test_empty_line_is_unknown(self):
        assert parse_command("") == Unknown("")

    @pytest.mark.parametrize("line, expected", [
        ("m", ShowMemory()),
        ("memory x3000", ShowMemory(address=0x3000)),
        ("m 0x3000 16", ShowMemory(address=0x3000, count=16)),
        ("m 12288 x10", ShowMemory(address=12288, count=16)),
        ("m zz", ShowMemory(address=None)),
    ])
    def test_memory_arguments(self, line, expected):
        assert parse_command(line) == expected

    def test_help_text_lists_commands(self):
        for name in ("help", "continue", "step", "memory [addr] [n]", "reg"):
            assert name in HELP_TEXT
        assert "Press ^C or ^D to exit." in HELP_TEXT
