# lc3vm/cli.py
"""
コマンドラインのエントリポイント。
イメージファイルをロードし、デバッガのメインループを起動します。
"""
import argparse
import logging
import sys
from typing import List, Optional

from lc3vm.config.builder import SystemBuilder
from lc3vm.config.loader import ConfigError, ConfigLoader
from lc3vm.config.models import MachineConfig
from lc3vm.debugger.controller import ExecutionState
from lc3vm.debugger.debugger import Debugger, StopReason
from lc3vm.host.console import DebugConsole, ReadlineConsole
from lc3vm.host.io import HostIO, StdioHostIO
from lc3vm.host.signals import stop_signal_installed
from lc3vm.host.terminal import Terminal
from lc3vm.loader.loader import ImageLoader, ImageLoadError

log = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_LOAD_FAILURE = 1
EXIT_USAGE = 2
EXIT_ILLEGAL_OPCODE = 3
EXIT_INTERRUPTED = 130

# @intent:map 終了理由からプロセスの終了コードへのマッピング。
EXIT_CODES = {
    StopReason.HALTED: EXIT_OK,
    StopReason.CANCELLED: EXIT_OK,
    StopReason.ILLEGAL_OPCODE: EXIT_ILLEGAL_OPCODE,
    StopReason.INTERRUPTED: EXIT_INTERRUPTED,
}

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="lc3vm", description="LC-3 virtual machine with a single-step debugger.")
    parser.add_argument("images", nargs="+", metavar="image-file", help="LC-3 object image(s) to load")
    parser.add_argument("--config", help="YAML machine configuration file")
    parser.add_argument("--turbo", action="store_true", help="start running at full speed instead of single-step mode")
    return parser

def _load_config(path: Optional[str]) -> MachineConfig:
    if path is None:
        return MachineConfig()
    return ConfigLoader().load_from_file(path)

# @intent:responsibility 引数を解析し、システムを構築して実行し、終了コードを返します。
# @intent:rationale hostとconsoleは差し替え可能にし、端末なしでも全体を動かせるようにしています。
def main(argv: Optional[List[str]] = None, host: Optional[HostIO] = None,
         console: Optional[DebugConsole] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        config = _load_config(args.config)
    except ConfigError as e:
        print(f"lc3vm: {e}", file=sys.stderr)
        return EXIT_USAGE
    if args.turbo:
        config.start_mode = "turbo"

    logging.basicConfig(level=config.log_level, stream=sys.stderr,
                        format="%(levelname)s:%(name)s:%(message)s")

    builder = SystemBuilder()
    controller = builder.build_controller(config)

    terminal = Terminal()
    host = host or StdioHostIO(blocking_read=controller.awaiting_key_input)
    console = console or ReadlineConsole(terminal, config.history_length)

    cpu, bus = builder.build_system(config, host)

    loader = ImageLoader()
    for i, path in enumerate(args.images, 1):
        console.write_line(f"Loading image file #{i}: '{path}'...")
        try:
            origin = loader.load_image(path, bus)
        except ImageLoadError as e:
            log.debug("%s", e)
            console.write_line(f"Failed to load image: {path}.")
            return EXIT_LOAD_FAILURE
        console.write_line(f"Putting file at 0x{origin:04X}.")

    if controller.state == ExecutionState.SINGLE_STEP:
        console.write_line("You are in single-step mode. Type (h)elp for help.")

    debugger = Debugger(cpu, controller, console, prompt=config.prompt, trace=config.trace)
    with terminal.raw_mode(), stop_signal_installed(controller):
        reason = debugger.run()

    return EXIT_CODES[reason]
