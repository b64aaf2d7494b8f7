"""
CHIP-8 Emulator — Headless Host + chip8run CLI Tests
"""

import logging
import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import pytest

import chip8run
from chip8_emulator.config import RunConfig, layout_rows, resolve_key
from chip8_emulator.emu import Chip8Emulator, StopReason
from chip8_emulator.host import HeadlessHost
from chip8_emulator.log_setup import setup_logging


def words(*ops: int) -> bytes:
    out = bytearray()
    for op in ops:
        out += bytes([(op >> 8) & 0xFF, op & 0xFF])
    return bytes(out)


def host_for(rom: bytes, **kwargs) -> HeadlessHost:
    emu = Chip8Emulator()
    emu.load_program(rom)
    return HeadlessHost(emu, RunConfig(**kwargs))


# ═══════════════════════════════════════════════
# Config
# ═══════════════════════════════════════════════

class TestConfig:
    def test_steps_per_tick(self):
        assert RunConfig().steps_per_tick == 8
        assert RunConfig(ips=60, timer_hz=60).steps_per_tick == 1
        assert RunConfig(ips=30, timer_hz=60).steps_per_tick == 1

    @pytest.mark.parametrize("token, key", [
        ("1", 0x1), ("4", 0xC), ("q", 0x4), ("V", 0xF), ("x", 0x0),
        ("0xA", 0xA), ("$f", 0xF), ("0x0", 0x0),
    ])
    def test_resolve_key(self, token, key):
        assert resolve_key(token) == key

    @pytest.mark.parametrize("token", ["g", "5", "0x10", "$", "enter"])
    def test_resolve_key_rejects(self, token):
        with pytest.raises(ValueError):
            resolve_key(token)

    def test_layout_rows(self):
        assert layout_rows() == [
            ('1', '2', '3', '4'),
            ('Q', 'W', 'E', 'R'),
            ('A', 'S', 'D', 'F'),
            ('Z', 'X', 'C', 'V'),
        ]


# ═══════════════════════════════════════════════
# Headless host
# ═══════════════════════════════════════════════

class TestHeadlessHost:
    def test_timeout_counts_ticks(self):
        host = host_for(words(0x1200), max_cycles=80)
        result = host.run()
        assert result.reason is StopReason.TIMEOUT
        assert result.cycles == 80
        assert result.ticks == 10

    def test_scripted_key_resolves_wait(self):
        host = host_for(words(0xF00A, 0x1202), max_cycles=10, key_presses=[5])
        result = host.run()
        assert result.reason is StopReason.TIMEOUT
        assert result.keys_used == 1
        assert result.cycles == 10
        assert host.emu.regs.V[0] == 5
        assert not host.emu.keypad.is_pressed(5)

    def test_key_wait_loop_keeps_timer_cadence(self):
        """Instructions before each FX0A still count toward the next tick."""
        rom = words(0x6001, 0x6102, 0x6203, 0x6304, 0xF00A, 0x1200)
        host = host_for(rom, max_cycles=800, key_presses=[1] * 1000)
        result = host.run()
        assert result.reason is StopReason.TIMEOUT
        assert result.cycles == 800
        assert result.ticks == 800 // host.config.steps_per_tick
        assert result.keys_used == 133

    def test_delay_timer_runs_across_key_waits(self):
        # DT = 16, then wait for a key; loop back to the wait forever
        rom = words(0x6010, 0xF015, 0xF00A, 0x1204)
        host = host_for(rom, max_cycles=64, key_presses=[2] * 100)
        host.run()
        assert host.emu.timers.delay == 16 - 64 // 8

    def test_wait_without_keys(self):
        host = host_for(words(0x6001, 0xF00A), max_cycles=100)
        result = host.run()
        assert result.reason is StopReason.WAIT_KEY
        assert result.cycles == 2
        assert host.emu.waiting_for_key

    def test_tone_counted_once(self):
        host = host_for(words(0x6002, 0xF018, 0x1204),
                        ips=60, timer_hz=60, max_cycles=10)
        result = host.run()
        assert result.tones == 1
        assert result.ticks == 10

    def test_fault_stops_run(self):
        host = host_for(words(0x6001, 0x0123), max_cycles=100)
        result = host.run()
        assert result.reason is StopReason.ILLEGAL
        assert result.cycles == 1
        assert host.emu.fault is not None

    def test_breakpoint_from_config(self):
        host = host_for(words(0x6001, 0x6002, 0x1204), breakpoints=[0x202])
        result = host.run()
        assert result.reason is StopReason.BREAK
        assert result.cycles == 1

    def test_trace_from_config(self):
        host = host_for(words(0x6001, 0x1202), max_cycles=3, trace=True)
        host.run()
        assert len(host.emu.get_trace().split('\n')) == 3

    def test_summary(self):
        result = host_for(words(0x1200), max_cycles=8).run()
        assert result.summary() == (
            "TIMEOUT: 8 instructions, 1 timer ticks, 0 tones, 0 scripted keys"
        )


# ═══════════════════════════════════════════════
# Logging
# ═══════════════════════════════════════════════

class TestLogging:
    def test_log_file_and_idempotent(self, tmp_path):
        name = "chip8_emulator_test_logfile"
        log = setup_logging(name, log_dir=tmp_path, rich_console=False)
        handlers = list(log.handlers)
        assert len(handlers) == 2
        assert setup_logging(name, log_dir=tmp_path) is log
        assert log.handlers == handlers
        log.warning("hello")
        for h in handlers:
            h.flush()
        files = list(tmp_path.glob(f"{name}_*.log"))
        assert len(files) == 1
        assert "hello" in files[0].read_text(encoding="utf-8")
        for h in handlers:
            h.close()
            log.removeHandler(h)

    def test_second_call_reconfigures(self, tmp_path):
        name = "chip8_emulator_test_reconfigure"
        log = setup_logging(name, console_level=logging.WARNING, rich_console=False)
        assert len(log.handlers) == 1
        console = log.handlers[0]

        setup_logging(name, console_level=logging.INFO, log_dir=tmp_path)
        assert console.level == logging.INFO
        file_handlers = [h for h in log.handlers if isinstance(h, logging.FileHandler)]
        assert len(file_handlers) == 1
        assert len(list(tmp_path.glob(f"{name}_*.log"))) == 1

        # Same directory again: no extra file
        setup_logging(name, console_level=logging.WARNING, log_dir=tmp_path)
        assert console.level == logging.WARNING
        assert len(log.handlers) == 2

        for h in list(log.handlers):
            h.close()
            log.removeHandler(h)

    def test_rich_console_handler(self):
        from rich.logging import RichHandler
        name = "chip8_emulator_test_rich"
        log = setup_logging(name, console_level=logging.ERROR)
        assert len(log.handlers) == 1
        assert isinstance(log.handlers[0], RichHandler)
        assert log.handlers[0].level == logging.ERROR
        log.removeHandler(log.handlers[0])


# ═══════════════════════════════════════════════
# chip8run CLI
# ═══════════════════════════════════════════════

class TestCli:
    def _rom(self, tmp_path, data: bytes):
        path = tmp_path / "test.ch8"
        path.write_bytes(data)
        return str(path)

    def test_parse_int_arg(self):
        assert chip8run.parse_int_arg("0x10") == 16
        assert chip8run.parse_int_arg("$10") == 16
        assert chip8run.parse_int_arg(" 10 ") == 10
        with pytest.raises(ValueError):
            chip8run.parse_int_arg("zz")

    def test_run_and_dump(self, tmp_path, capsys):
        rom = self._rom(tmp_path, words(0x6000, 0xF029, 0xD005, 0x1206))
        assert chip8run.main([rom, "--cycles", "20", "--dump"]) == 0
        out, err = capsys.readouterr()
        lines = out.splitlines()
        assert len(lines) == 32
        assert all(len(line) == 64 for line in lines)
        assert lines[0] == "####" + "." * 60
        assert "TIMEOUT: 20 instructions" in err

    def test_missing_file(self, tmp_path, capsys):
        assert chip8run.main([str(tmp_path / "nope.ch8")]) == 1
        assert "File not found" in capsys.readouterr().err

    def test_oversized_rom(self, tmp_path, capsys):
        rom = self._rom(tmp_path, bytes(3585))
        assert chip8run.main([rom]) == 1
        assert "Load error" in capsys.readouterr().err

    def test_bad_rates(self, tmp_path):
        rom = self._rom(tmp_path, words(0x1200))
        assert chip8run.main([rom, "--ips", "0"]) == 1
        assert chip8run.main([rom, "--timer-hz", "0"]) == 1

    def test_fault_exit_code(self, tmp_path, capsys):
        rom = self._rom(tmp_path, words(0x0123))
        assert chip8run.main([rom]) == 2
        assert "Fault: unimplemented opcode 0123 at $200" in capsys.readouterr().err

    def test_scripted_key(self, tmp_path, capsys):
        rom = self._rom(tmp_path, words(0xF00A, 0x1202))
        assert chip8run.main([rom, "--cycles", "5", "--press", "q"]) == 0
        assert "V=[04" in capsys.readouterr().err

    def test_unanswered_wait(self, tmp_path, capsys):
        rom = self._rom(tmp_path, words(0xF00A))
        assert chip8run.main([rom]) == 0
        assert "WAIT_KEY" in capsys.readouterr().err

    def test_break(self, tmp_path, capsys):
        rom = self._rom(tmp_path, words(0x6001, 0x6002, 0x1204))
        assert chip8run.main([rom, "--break", "$202"]) == 0
        assert "BREAK: 1 instructions" in capsys.readouterr().err

    def test_trace(self, tmp_path, capsys):
        rom = self._rom(tmp_path, words(0x6A05, 0x1202))
        assert chip8run.main([rom, "--cycles", "2", "--trace"]) == 0
        assert "$200: 6A05  LD VA, #$05" in capsys.readouterr().err

    def test_disasm(self, tmp_path, capsys):
        rom = self._rom(tmp_path, words(0x00E0, 0x1200))
        assert chip8run.main([rom, "--disasm"]) == 0
        out = capsys.readouterr().out.splitlines()
        assert out == ["$0200: 00 E0  CLS", "$0202: 12 00  JP $200"]

    def test_log_dir_on_later_run(self, tmp_path):
        rom = self._rom(tmp_path, words(0x1200))
        logs = tmp_path / "logs"
        assert chip8run.main([rom, "--cycles", "8"]) == 0
        assert chip8run.main([rom, "--cycles", "8", "--log-dir", str(logs)]) == 0
        files = list(logs.glob("chip8_emulator_*.log"))
        assert len(files) == 1

        log = logging.getLogger("chip8_emulator")
        for h in list(log.handlers):
            if isinstance(h, logging.FileHandler):
                h.flush()
                h.close()
                log.removeHandler(h)
        assert "loaded 2-byte program" in files[0].read_text(encoding="utf-8")

    def test_disasm_rejects_oversized_rom(self, tmp_path, capsys):
        rom = self._rom(tmp_path, bytes(3585))
        assert chip8run.main([rom, "--disasm"]) == 1
        captured = capsys.readouterr()
        assert "Load error" in captured.err
        assert captured.out == ""

    def test_bad_key_is_usage_error(self, tmp_path):
        rom = self._rom(tmp_path, words(0x1200))
        with pytest.raises(SystemExit) as exc:
            chip8run.main([rom, "--press", "g"])
        assert exc.value.code == 2

    def test_seed_reproducible(self, tmp_path, capsys):
        rom = self._rom(tmp_path, words(0xC0FF, 0xC1FF, 0x1204))
        chip8run.main([rom, "--cycles", "3", "--seed", "99"])
        first = capsys.readouterr().err
        chip8run.main([rom, "--cycles", "3", "--seed", "99"])
        assert capsys.readouterr().err == first
