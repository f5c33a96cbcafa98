# lc3vm/host/io.py
"""
Host Layer (文字入出力ポート)

TRAPルーチンとキーボードのメモリマップドレジスタが使用する、
ホスト側の文字単位の入出力を抽象化します。
"""
import os
import select
import sys
from abc import ABC, abstractmethod
from collections import deque
from contextlib import nullcontext
from typing import Callable, ContextManager, Iterable, Optional, TextIO

# @intent:constant 入力終端で返す値（Cの EOF(-1) を16ビットに切り詰めたもの）。
EOF_WORD = 0xFFFF

# @intent:responsibility ホストの文字入出力インターフェースを定義します。
class HostIO(ABC):
    # @intent:pre-condition ブロックしてはいけません。
    @abstractmethod
    def key_available(self) -> bool:
        """入力文字が待機しているかどうかを即座に返します。"""
        pass

    @abstractmethod
    def read_char(self) -> int:
        """1文字読み込み、その文字コードを返します。入力終端ではEOF_WORDを返します。"""
        pass

    @abstractmethod
    def write(self, data: bytes) -> None:
        pass

    @abstractmethod
    def flush(self) -> None:
        pass

# @intent:responsibility 標準入出力を使うHostIO実装。
class StdioHostIO(HostIO):
    """
    標準入力のファイルディスクリプタを直接読みます。
    select()によるポーリングと食い違わないよう、Pythonのバッファ層は経由しません。
    blocking_readは1文字を待つ間だけ入るコンテキストを返します（停止要求で待ちを打ち切るため）。
    """
    def __init__(self, stdin: Optional[TextIO] = None, stdout: Optional[TextIO] = None,
                 blocking_read: Optional[Callable[[], ContextManager]] = None):
        self._stdin = stdin or sys.stdin
        self._stdout = stdout or sys.stdout
        self._blocking_read = blocking_read or nullcontext

    def key_available(self) -> bool:
        readable, _, _ = select.select([self._stdin.fileno()], [], [], 0)
        return bool(readable)

    def read_char(self) -> int:
        with self._blocking_read():
            data = os.read(self._stdin.fileno(), 1)
        if not data:
            return EOF_WORD
        return data[0]

    def write(self, data: bytes) -> None:
        # テキスト層に残っているデバッガ出力を先に書き出す
        self._stdout.flush()
        self._stdout.buffer.write(data)

    def flush(self) -> None:
        self._stdout.flush()

# @intent:responsibility メモリ上のバッファを使うHostIO実装。テストや埋め込み実行用。
class BufferedHostIO(HostIO):
    """
    入力はあらかじめ与えたバイト列から1文字ずつ取り出し、出力はbytearrayに蓄積します。
    """
    def __init__(self, input_data: Iterable[int] = b""):
        self._pending = deque(input_data)
        self.output = bytearray()
        self.flush_count = 0

    def feed(self, data: Iterable[int]) -> None:
        self._pending.extend(data)

    def key_available(self) -> bool:
        return bool(self._pending)

    def read_char(self) -> int:
        if not self._pending:
            return EOF_WORD
        return self._pending.popleft()

    def write(self, data: bytes) -> None:
        self.output.extend(data)

    def flush(self) -> None:
        self.flush_count += 1

    @property
    def output_text(self) -> str:
        return self.output.decode("latin-1")
