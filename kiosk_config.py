import json
import sys

class KioskConfig:
    """A simple class to load and manage the dispenser configuration from a JSON file."""

    DEFAULT_BAUD_RATE = 9600
    DEFAULT_ADDRESS = 0x00
    DEFAULT_READ_TIMEOUT_MS = 100

    def __init__(self, config_path='config.json'):
        try:
            with open(config_path, 'r') as f:
                config_data = json.load(f)
        except (FileNotFoundError, json.JSONDecodeError) as e:
            print(f"Error: Could not load or parse {config_path}. {e}")
            print("Please ensure 'config.json' exists and is correctly formatted.")
            sys.exit(1)

        crt = config_data.get("crt571")
        if not isinstance(crt, dict):
            print(f"Error: 'crt571' block is required in {config_path}.")
            sys.exit(1)

        # keep names close to JSON keys for clarity
        self.crt571_port_name: str = crt.get("port_name")
        try:
            self.crt571_baud_rate: int = int(crt.get("baud_rate", self.DEFAULT_BAUD_RATE))
            self.crt571_address: int = int(crt.get("address", self.DEFAULT_ADDRESS))
            self.crt571_read_timeout_ms: int = int(crt.get("read_timeout_ms", self.DEFAULT_READ_TIMEOUT_MS))
        except (TypeError, ValueError) as e:
            print(f"Error: invalid numeric value in 'crt571' block. {e}")
            sys.exit(1)
        self.crt571_strict_checksum: bool = bool(crt.get("strict_checksum", True))

        if not self.crt571_port_name:
            print("Error: 'crt571.port_name' is required in config.json.")
            sys.exit(1)
        if not 0 <= self.crt571_address <= 0xFF:
            print("Error: 'crt571.address' must fit in a single byte (0..255).")
            sys.exit(1)

    @property
    def crt571_read_timeout(self) -> float:
        """Read timeout in seconds, as pyserial expects it."""
        return self.crt571_read_timeout_ms / 1000.0

    def to_dict(self) -> dict:
        return {
            "crt571": {
                "port_name": self.crt571_port_name,
                "baud_rate": self.crt571_baud_rate,
                "address": self.crt571_address,
                "read_timeout_ms": self.crt571_read_timeout_ms,
                "strict_checksum": self.crt571_strict_checksum,
            },
        }
