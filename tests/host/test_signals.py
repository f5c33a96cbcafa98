# tests/host/test_signals.py
"""
lc3vm.host.signalsモジュールの単体テスト。
"""
import os
import signal

import pytest

from lc3vm.debugger.controller import ExecutionController, ExecutionState
from lc3vm.host.signals import make_stop_handler, stop_signal_installed

# @intent:test_suite SIGINTが状態を直接書き換えず、停止要求として積まれることを検証します。

class TestStopSignal:
    def test_handler_only_queues_a_request(self):
        controller = ExecutionController(ExecutionState.TURBO)
        handler = make_stop_handler(controller)

        handler(signal.SIGINT, None)

        assert controller.pending_stops == 1
        assert controller.state == ExecutionState.TURBO

    def test_handler_interrupts_command_read(self):
        controller = ExecutionController()
        handler = make_stop_handler(controller)

        with pytest.raises(KeyboardInterrupt):
            with controller.awaiting_command_input():
                handler(signal.SIGINT, None)

        assert controller.pending_stops == 1
        assert controller.state == ExecutionState.SINGLE_STEP

    # @intent:test_case プログラムの文字入力待ちは、要求がOFFに達するときだけ打ち切ります。
    def test_handler_interrupts_key_read_only_when_stops_reach_off(self):
        controller = ExecutionController(ExecutionState.TURBO)
        handler = make_stop_handler(controller)

        with controller.awaiting_key_input():
            handler(signal.SIGINT, None)
            assert controller.pending_stops == 1
            with pytest.raises(KeyboardInterrupt):
                handler(signal.SIGINT, None)

        assert controller.pending_stops == 2
        assert controller.state == ExecutionState.TURBO

    def test_single_stop_interrupts_key_read_while_stepping(self):
        controller = ExecutionController()
        handler = make_stop_handler(controller)

        with pytest.raises(KeyboardInterrupt):
            with controller.awaiting_key_input():
                handler(signal.SIGINT, None)

    def test_handler_outside_reads_never_raises(self):
        controller = ExecutionController()
        handler = make_stop_handler(controller)
        handler(signal.SIGINT, None)
        handler(signal.SIGINT, None)
        assert controller.pending_stops == 2

    def test_installed_handler_receives_sigint(self):
        controller = ExecutionController(ExecutionState.TURBO)
        previous = signal.getsignal(signal.SIGINT)

        with stop_signal_installed(controller):
            os.kill(os.getpid(), signal.SIGINT)
            # ハンドラはメインスレッドで次のバイトコード境界に呼ばれる
            for _ in range(1000):
                if controller.pending_stops:
                    break

        assert controller.pending_stops == 1
        assert signal.getsignal(signal.SIGINT) is previous
