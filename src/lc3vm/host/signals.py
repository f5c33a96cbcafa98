# lc3vm/host/signals.py
"""
操作者の割り込み（^C）を実行コントローラへの停止要求に変換します。
"""
import signal
from contextlib import contextmanager
from typing import Iterator

from lc3vm.debugger.controller import ExecutionController

# @intent:responsibility SIGINTハンドラを生成します。
# @intent:rationale ハンドラは停止要求を積むだけで、状態は書き換えません。
#                  ブロックしている読み込みだけはKeyboardInterruptで終わらせます。
#                  コマンド入力待ちでは常に、プログラムの文字入力待ちでは要求がOFFに達する場合だけです。
def make_stop_handler(controller: ExecutionController):
    def handle_interrupt(signum, frame):
        controller.request_stop()
        if controller.awaiting_command:
            raise KeyboardInterrupt
        if controller.awaiting_key and controller.stops_reach_off:
            raise KeyboardInterrupt
    return handle_interrupt

@contextmanager
def stop_signal_installed(controller: ExecutionController, signum: int = signal.SIGINT) -> Iterator[None]:
    previous = signal.signal(signum, make_stop_handler(controller))
    try:
        yield
    finally:
        signal.signal(signum, previous)
