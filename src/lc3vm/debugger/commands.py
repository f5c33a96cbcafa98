# lc3vm/debugger/commands.py
"""
デバッガコマンドのパーサ。

入力行を先頭1文字（大文字小文字を区別）で判定し、コマンドのレコードに変換します。
"""
from dataclasses import dataclass
from typing import Optional, Union

@dataclass(frozen=True)
class Help:
    pass

@dataclass(frozen=True)
class Continue:
    pass

@dataclass(frozen=True)
class Step:
    pass

@dataclass(frozen=True)
class ShowRegisters:
    pass

# @intent:responsibility "memory [addr] [n]" の引数を保持します。コマンド自体は未実装です。
@dataclass(frozen=True)
class ShowMemory:
    address: Optional[int] = None
    count: Optional[int] = None

@dataclass(frozen=True)
class Unknown:
    text: str

Command = Union[Help, Continue, Step, ShowRegisters, ShowMemory, Unknown]

HELP_TEXT = (
    "lc3vm commands:\n"
    "help\t\t\t-- Print this help page.\n"
    "continue\t\t-- Continue execution. Get back here with ^C.\n"
    "step\t\t\t-- Step forward one instruction.\n"
    "memory [addr] [n]\t-- Display n words of memory starting from addr.\n"
    "reg\t\t\t-- Display the contents of the registers.\n"
    "\n"
    "Press ^C or ^D to exit. You can abbreviate commands with their first letters.\n"
)

def _parse_number(token: str) -> Optional[int]:
    """x3000 / 0x3000 / 12288 形式の数値を解釈します。解釈できなければNone。"""
    text = token.lower()
    try:
        if text.startswith("0x"):
            return int(text[2:], 16)
        if text.startswith("x"):
            return int(text[1:], 16)
        return int(text)
    except ValueError:
        return None

def _parse_memory(line: str) -> ShowMemory:
    args = line.split()[1:]
    address = _parse_number(args[0]) if len(args) > 0 else None
    count = _parse_number(args[1]) if len(args) > 1 else None
    return ShowMemory(address=address, count=count)

# @intent:responsibility 1行のコマンド入力を解析します。
# @intent:rationale "help"でも"h"でも"hello"でも先頭が'h'ならHelpになります。空行はUnknownです。
def parse_command(line: str) -> Command:
    head = line[:1]
    if head == "h":
        return Help()
    if head == "c":
        return Continue()
    if head == "s":
        return Step()
    if head == "r":
        return ShowRegisters()
    if head == "m":
        return _parse_memory(line)
    return Unknown(line)
