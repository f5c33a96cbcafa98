# tests/test_cli.py
"""
lc3vm.cliモジュールの結合テスト。
HostIOとコンソールを差し替えて、イメージのロードから終了コードまでを通しで検証します。
"""
import os
import signal
import subprocess
import sys
import time
from pathlib import Path

import pytest

from lc3vm.cli import EXIT_ILLEGAL_OPCODE, EXIT_INTERRUPTED, EXIT_LOAD_FAILURE, EXIT_OK, EXIT_USAGE, main
from lc3vm.host.console import ScriptedConsole
from lc3vm.host.io import BufferedHostIO

# @intent:test_suite コマンドラインからの起動、終了コード、メッセージを検証します。

HELLO_IMAGE = bytes([
    0x30, 0x00,  # origin x3000
    0xE0, 0x02,  # LEA R0, #2
    0xF0, 0x22,  # PUTS
    0xF0, 0x25,  # HALT
    0x00, 0x48,  # 'H'
    0x00, 0x69,  # 'i'
    0x00, 0x00,
])

ECHO_KEY_IMAGE = bytes([
    0x30, 0x00,  # origin x3000
    0xF0, 0x20,  # GETC
    0xF0, 0x21,  # OUT
    0xF0, 0x25,  # HALT
])

SRC_DIR = Path(__file__).resolve().parents[1] / "src"

class TestCli:
    @pytest.fixture
    def image(self, tmp_path):
        path = tmp_path / "hello.obj"
        path.write_bytes(HELLO_IMAGE)
        return str(path)

    def test_requires_an_image(self, capsys):
        with pytest.raises(SystemExit) as excinfo:
            main([])
        assert excinfo.value.code == EXIT_USAGE
        assert "usage: lc3vm" in capsys.readouterr().err

    # @intent:test_case TURBOで起動したプログラムは端末入力なしでHALTまで走り、終了コード0を返します。
    def test_turbo_run_to_halt(self, image):
        host = BufferedHostIO()
        console = ScriptedConsole()

        assert main([image, "--turbo"], host=host, console=console) == EXIT_OK
        assert host.output_text == "HiHALT\n"
        assert console.text == (
            f"Loading image file #1: '{image}'...\n"
            "Putting file at 0x3000.\n"
        )
        assert console.prompts == []

    def test_single_step_start(self, image):
        host = BufferedHostIO()
        console = ScriptedConsole(["s"])

        assert main([image], host=host, console=console) == EXIT_OK
        assert "You are in single-step mode. Type (h)elp for help.\n" in console.text
        assert "Fetched instruction from 0x3000, containing 0xE002.\n" in console.text
        assert "Executed 0x3000: LEA R0, #2\n" in console.text
        assert host.output == b""

    def test_continue_from_single_step(self, image):
        host = BufferedHostIO()
        assert main([image], host=host, console=ScriptedConsole(["c"])) == EXIT_OK
        assert host.output_text == "HiHALT\n"

    def test_missing_image(self, image, tmp_path):
        missing = str(tmp_path / "missing.obj")
        console = ScriptedConsole()

        assert main([missing, image], host=BufferedHostIO(), console=console) == EXIT_LOAD_FAILURE
        assert console.text == (
            f"Loading image file #1: '{missing}'...\n"
            f"Failed to load image: {missing}.\n"
        )

    def test_multiple_images(self, image, tmp_path):
        patch_image = tmp_path / "patch.obj"
        patch_image.write_bytes(b"\x30\x03\x00\x59\x00\x6F")  # "Yo"
        host = BufferedHostIO()
        console = ScriptedConsole()

        assert main([image, str(patch_image), "--turbo"], host=host, console=console) == EXIT_OK
        assert host.output_text == "YoHALT\n"
        assert "Loading image file #2:" in console.text
        assert "Putting file at 0x3003.\n" in console.text

    def test_illegal_opcode_exit_code(self, tmp_path):
        path = tmp_path / "bad.obj"
        path.write_bytes(b"\x30\x00\xD0\x00")
        assert main([str(path), "--turbo"], host=BufferedHostIO(), console=ScriptedConsole()) == EXIT_ILLEGAL_OPCODE

    def test_config_file(self, image, tmp_path):
        config = tmp_path / "machine.yaml"
        config.write_text("start_mode: turbo\n")
        host = BufferedHostIO()

        assert main([image, "--config", str(config)], host=host, console=ScriptedConsole()) == EXIT_OK
        assert host.output_text == "HiHALT\n"

    def test_invalid_config(self, image, tmp_path, capsys):
        config = tmp_path / "machine.yaml"
        config.write_text("start_mode: warp\n")

        assert main([image, "--config", str(config)], host=BufferedHostIO(),
                    console=ScriptedConsole()) == EXIT_USAGE
        assert "Invalid start_mode" in capsys.readouterr().err

    # @intent:test_case コマンド入力中のSIGINTはOFFへ遷移させ、終了コード130を返します。
    def test_sigint_while_awaiting_command(self, image):
        previous = signal.getsignal(signal.SIGINT)

        def interrupt(index):
            os.kill(os.getpid(), signal.SIGINT)

        console = ScriptedConsole(["s"], before_read=interrupt)
        assert main([image], host=BufferedHostIO(), console=console) == EXIT_INTERRUPTED
        assert signal.getsignal(signal.SIGINT) is previous


# @intent:test_suite 実際のプロセスとして起動し、パイプされた標準入力とSIGINTの扱いを検証します。
class TestCliProcess:
    @pytest.fixture
    def echo_image(self, tmp_path):
        path = tmp_path / "echo.obj"
        path.write_bytes(ECHO_KEY_IMAGE)
        return str(path)

    def _spawn(self, *args):
        env = dict(os.environ)
        env["PYTHONPATH"] = os.pathsep.join(filter(None, [str(SRC_DIR), env.get("PYTHONPATH")]))
        return subprocess.Popen([sys.executable, "-m", "lc3vm", *args], env=env,
                                stdin=subprocess.PIPE, stdout=subprocess.PIPE, stderr=subprocess.PIPE)

    # @intent:test_case パイプされた入力ではコマンド行の後に続くバイトがプログラムの入力として届きます。
    def test_piped_input_after_command_reaches_program(self, echo_image):
        proc = self._spawn(echo_image)
        stdout, stderr = proc.communicate(b"c\nX", timeout=10)

        assert proc.returncode == EXIT_OK, stderr
        assert stdout.endswith(b"XHALT\n")
        assert b"(lc3vm) " in stdout

    # @intent:test_case TURBOでGETCが入力を待っている間に^Cを2回送ると、プログラムは終了コード130で終わります。
    def test_two_sigints_end_blocked_key_read(self, echo_image):
        proc = self._spawn(echo_image, "--turbo")
        try:
            output = b""
            while b"Putting file at" not in output:
                line = proc.stdout.readline()
                assert line, proc.stderr.read()
                output += line
            time.sleep(1.0)

            proc.send_signal(signal.SIGINT)
            time.sleep(0.3)
            proc.send_signal(signal.SIGINT)

            assert proc.wait(timeout=5) == EXIT_INTERRUPTED
        finally:
            if proc.poll() is None:
                proc.kill()
                proc.wait()
            proc.stdin.close()

        rest = proc.stdout.read()
        proc.stdout.close()
        proc.stderr.close()
        assert b"Dropped into single-step mode. Press ^C again to quit.\n" in rest
        assert b"HALT" not in rest
