# lc3vm/host/console.py
"""
デバッガのフロントエンド（コマンド行の読み込み、履歴、表示）。

デバッガはこのポートを通してのみ操作者とやり取りします。
端末上では標準ライブラリのreadlineで行編集と履歴を提供し、
テストではスクリプト化された実装に差し替えます。
"""
import os
import readline
import sys
from abc import ABC, abstractmethod
from typing import Callable, Iterable, List, Optional, TextIO

from lc3vm.host.terminal import Terminal

DEFAULT_HISTORY_LENGTH = 1024

# @intent:responsibility デバッガのフロントエンドのインターフェースを定義します。
class DebugConsole(ABC):
    @abstractmethod
    def read_line(self, prompt: str) -> Optional[str]:
        """
        1行読み込みます。入力終端や操作者による中断の場合はNoneを返します。
        入力が来るまでブロックします。
        """
        pass

    @abstractmethod
    def add_history(self, line: str) -> None:
        pass

    @abstractmethod
    def write(self, text: str) -> None:
        pass

    def write_line(self, text: str = "") -> None:
        self.write(text + "\n")

# @intent:responsibility readlineと端末を使うフロントエンド実装。
class ReadlineConsole(DebugConsole):
    """
    コマンド入力中だけ端末を通常モードに戻し、上矢印で過去のコマンドを呼び出せるようにします。
    標準入力が端末でない場合は、プログラムの入力（StdioHostIO）と同じファイルディスクリプタから
    1バイトずつ読み、sys.stdinのバッファ層は経由しません。
    """
    def __init__(self, terminal: Terminal, history_length: int = DEFAULT_HISTORY_LENGTH,
                 stdout: Optional[TextIO] = None, stdin: Optional[TextIO] = None):
        self._terminal = terminal
        self._stdout = stdout or sys.stdout
        self._stdin = stdin or sys.stdin
        readline.set_history_length(history_length)

    def read_line(self, prompt: str) -> Optional[str]:
        with self._terminal.cooked_mode():
            try:
                if self._stdin.isatty():
                    return input(prompt)
                return self._read_raw_line(prompt)
            except (EOFError, KeyboardInterrupt):
                self.write("\n")
                return None

    # @intent:responsibility 改行または入力終端まで、バッファを介さずに1行読みます。
    def _read_raw_line(self, prompt: str) -> str:
        self.write(prompt)
        fd = self._stdin.fileno()
        line = bytearray()
        while True:
            c = os.read(fd, 1)
            if not c:
                if not line:
                    raise EOFError
                break
            if c == b"\n":
                break
            line.extend(c)
        return line.decode("utf-8", errors="replace").rstrip("\r")

    def add_history(self, line: str) -> None:
        readline.add_history(line)

    def write(self, text: str) -> None:
        self._stdout.write(text)
        self._stdout.flush()

# @intent:responsibility 決められた入力行を順に返すフロントエンド実装。
class ScriptedConsole(DebugConsole):
    """
    入力行のリストを使い切るとNone（入力終端）を返します。
    before_readは各読み込みの直前に読み込み回数を引数に呼ばれます。
    """
    def __init__(self, lines: Iterable[str] = (),
                 before_read: Optional[Callable[[int], None]] = None):
        self._lines = list(lines)
        self._before_read = before_read
        self.prompts: List[str] = []
        self.history: List[str] = []
        self.output: List[str] = []

    def read_line(self, prompt: str) -> Optional[str]:
        if self._before_read is not None:
            self._before_read(len(self.prompts))
        self.prompts.append(prompt)
        if not self._lines:
            return None
        return self._lines.pop(0)

    def add_history(self, line: str) -> None:
        self.history.append(line)

    def write(self, text: str) -> None:
        self.output.append(text)

    @property
    def text(self) -> str:
        return "".join(self.output)
