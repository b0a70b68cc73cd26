# CRT571/cli.py
import argparse
import sys

from kiosk_config import KioskConfig
from CRT571.crt571_core import CRT571Dispenser
from CRT571.exceptions import CRT571Error
from CRT571 import crt571_tables as T


def _byte(text: str) -> int:
    """Byte argument: decimal or 0x-prefixed hex."""
    value = int(text, 0)
    if not 0 <= value <= 0xFF:
        raise argparse.ArgumentTypeError(f"{text} does not fit in one byte")
    return value


def _hex_payload(text: str) -> bytes:
    try:
        return bytes.fromhex(text)
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"invalid hex payload: {e}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="crt571", description="CRT-571 card dispenser tool")
    parser.add_argument("--config", default="config.json", help="path to config.json")
    parser.add_argument("--lenient", action="store_true",
                        help="log bad reply checksums instead of failing")
    sub = parser.add_subparsers(dest="action", required=True)

    sub.add_parser("status", help="inquire device status")
    init = sub.add_parser("init", help="initialize the dispenser")
    init.add_argument("--pm", type=_byte, default=T.PM_INITIALIZE_MOVE_CARD,
                      help="initialize parameter (default 0x30, move card to holding position)")
    sub.add_parser("dispense", help="move card to gate")
    sub.add_parser("capture", help="move card to error card bin")
    sub.add_parser("version", help="read firmware version")
    sub.add_parser("serial", help="read card serial number")
    sub.add_parser("counter", help="read error card bin counter")

    raw = sub.add_parser("raw", help="send an arbitrary CM/PM with optional hex data")
    raw.add_argument("cm", type=_byte)
    raw.add_argument("pm", type=_byte)
    raw.add_argument("data", nargs="?", type=_hex_payload, default=b"")
    return parser


def run(dispenser: CRT571Dispenser, args) -> None:
    if args.action == "status":
        st = dispenser.status()
        print(f"[STATUS] {st.st0_message} | {st.st1_message} | {st.st2_message}")
    elif args.action == "init":
        print(dispenser.initialize(args.pm))
    elif args.action == "dispense":
        print(dispenser.dispense())
    elif args.action == "capture":
        print(dispenser.capture())
    elif args.action == "version":
        print(f"[VERSION] {dispenser.version_string()}")
    elif args.action == "serial":
        print(f"[SERIAL] {dispenser.card_serial_number().data.hex(' ').upper()}")
    elif args.action == "counter":
        print(dispenser.recycle_bin_counter())
    elif args.action == "raw":
        print(dispenser.request(args.cm, args.pm, args.data))


def main(argv=None):
    args = build_parser().parse_args(argv)
    cfg = KioskConfig(args.config)

    dispenser = CRT571Dispenser.from_config(cfg)
    if args.lenient:
        dispenser.strict_checksum = False
    dispenser.on_status = lambda s: print("[STATUS]", s)

    try:
        with dispenser:
            run(dispenser, args)
    except CRT571Error as e:
        print("[ERROR]", e)
        sys.exit(1)


if __name__ == "__main__":
    main()
