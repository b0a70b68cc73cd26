import json
from types import SimpleNamespace

import pytest

from CRT571 import cli
from CRT571.crt571_core import CRT571Dispenser

from conftest import negative_reply, positive_reply


def test_parse_raw_command():
    args = cli.build_parser().parse_args(["raw", "0x51", "0x39", "00A40400"])
    assert (args.cm, args.pm, args.data) == (0x51, 0x39, b"\x00\xa4\x04\x00")


def test_parse_rejects_out_of_range_byte():
    with pytest.raises(SystemExit):
        cli.build_parser().parse_args(["raw", "0x100", "0x30"])


def test_parse_init_default_parameter():
    args = cli.build_parser().parse_args(["init"])
    assert args.pm == 0x30
    assert args.config == "config.json"
    assert not args.lenient


def test_run_status_prints_names(transport, capsys):
    dispenser = CRT571Dispenser("COM3", transport=transport)
    transport.script(positive_reply(status=b"\x31\x31\x30"))
    cli.run(dispenser, SimpleNamespace(action="status"))
    out = capsys.readouterr().out
    assert "One Card in gate | Few Card in stacker | Error card bin not full" in out


def test_main_reports_device_error(tmp_path, monkeypatch, transport, capsys):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"crt571": {"port_name": "COM3"}}))
    transport.script(negative_reply(code=b"A0"))

    real_from_config = CRT571Dispenser.from_config
    monkeypatch.setattr(CRT571Dispenser, "from_config",
                        classmethod(lambda cls, cfg: real_from_config(cfg, transport=transport)))

    with pytest.raises(SystemExit) as exc:
        cli.main(["--config", str(path), "dispense"])
    assert exc.value.code == 1
    assert "Empty-Stacker (A0)" in capsys.readouterr().out
    assert not transport.opened
