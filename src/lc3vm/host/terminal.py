# lc3vm/host/terminal.py
"""
ホスト端末のrawモード切り替え。

プログラム実行中は行バッファリングとエコーを無効にし、
デバッガのコマンド入力中や終了時には元の設定に戻します。
"""
import sys
import termios
from contextlib import contextmanager
from typing import Iterator, List, Optional, TextIO

# @intent:responsibility 端末属性の保存・変更・復元を行います。
# @intent:rationale 標準入力が端末でない場合（パイプやテスト）は何もしません。
class Terminal:
    def __init__(self, stream: Optional[TextIO] = None):
        self._stream = stream or sys.stdin
        self._original: Optional[List] = None

    def _fd(self) -> Optional[int]:
        try:
            if self._stream.isatty():
                return self._stream.fileno()
        except (AttributeError, ValueError, OSError):
            return None
        return None

    # @intent:responsibility ICANONとECHOを無効にします。
    def disable_input_buffering(self) -> None:
        fd = self._fd()
        if fd is None:
            return
        if self._original is None:
            self._original = termios.tcgetattr(fd)
        new_attrs = termios.tcgetattr(fd)
        new_attrs[3] &= ~termios.ICANON & ~termios.ECHO
        termios.tcsetattr(fd, termios.TCSANOW, new_attrs)

    # @intent:responsibility 保存しておいた端末属性に戻します。
    def restore_input_buffering(self) -> None:
        fd = self._fd()
        if fd is None or self._original is None:
            return
        termios.tcsetattr(fd, termios.TCSANOW, self._original)

    @contextmanager
    def raw_mode(self) -> Iterator["Terminal"]:
        self.disable_input_buffering()
        try:
            yield self
        finally:
            self.restore_input_buffering()

    @contextmanager
    def cooked_mode(self) -> Iterator["Terminal"]:
        """一時的に元の端末設定へ戻します（デバッガのコマンド入力用）。"""
        self.restore_input_buffering()
        try:
            yield self
        finally:
            if self._original is not None:
                self.disable_input_buffering()
