# CRT571/crt571_tables.py
"""
Static protocol data for the CRT-571 card dispenser: wire markers, command and
parameter bytes, and the human-readable name tables used for status display,
logging and error reporting. Nothing in here talks to the device.
"""
from types import MappingProxyType
from typing import Mapping

# === Transport ===
BUFFER_MAX_LENGTH = 1024  # No frame (request or reply) may exceed this.

STX  = 0xF2  # Start of text
ETX  = 0x03  # End of text
CMT  = 0x43  # Command marker ('C')
PMT  = 0x50  # Positive reply marker ('P')
EMT  = 0x45  # Negative reply marker ('E')
EMT2 = 0x4E  # Alternate negative reply marker ('N') seen on some firmware
ACK  = 0x06  # Acknowledge
NAK  = 0x15  # Negative acknowledge
EOT  = 0x04  # Clear the line

NEGATIVE_MARKERS = frozenset((EMT, EMT2))

# === Commands (CM) ===
CM_INITIALIZE                = 0x30  # Initialize CRT-571
CM_STATUS_REQUEST            = 0x31  # Inquire status
CM_CARD_MOVE                 = 0x32  # Card movement
CM_CARD_ENTRY                = 0x33  # Card entry from output gate
CM_CARD_TYPE                 = 0x50  # IC card / RF card type check
CM_CPUCARD_CONTROL           = 0x51  # CPU card application operation
CM_SAMCARD_CONTROL           = 0x52  # SAM card application operation
CM_SLE4442_4428_CARD_CONTROL = 0x53  # SLE4442/4428 card control
CM_IIC_MEMORYCARD            = 0x54  # 24C01..24C256 card operation
CM_RFCARD_CONTROL            = 0x60  # Mifare / Type A & B T=CL (13.56 MHz)
CM_CARD_SERIAL_NUMBER        = 0xA2
CM_READ_CARD_CONFIG          = 0xA3
CM_READ_CRT571_VERSION       = 0xA4
CM_RECYCLEBIN_COUNTER        = 0xA5

# === Card status codes (st0, st1, st2) ===
ST0_NO_CARD              = 0x30
ST0_ONE_CARD_IN_GATE     = 0x31
ST0_ONE_CARD_ON_POSITION = 0x32

ST1_NO_CARD_IN_STACKER  = 0x30
ST1_FEW_CARD_IN_STACKER = 0x31
ST1_ENOUGH_CARDS_IN_BOX = 0x32

ST2_ERROR_CARD_BIN_NOT_FULL = 0x30
ST2_ERROR_CARD_BIN_FULL     = 0x31

# === Parameters (PM) ===
# Initialize
PM_INITIALIZE_MOVE_CARD              = 0x30
PM_INITIALIZE_CAPTURE_CARD           = 0x31
PM_INITIALIZE_DONT_MOVE_CARD         = 0x33
PM_INITIALIZE_MOVE_CARD_RETRACT      = 0x34
PM_INITIALIZE_CAPTURE_CARD_RETRACT   = 0x35
PM_INITIALIZE_DONT_MOVE_CARD_RETRACT = 0x37

# Status request
PM_STATUS_DEVICE = 0x30
PM_STATUS_SENSOR = 0x31

# Card move
PM_CARD_MOVE_HOLD      = 0x30
PM_CARD_MOVE_IC_POS    = 0x31
PM_CARD_MOVE_RF_POS    = 0x32
PM_CARD_MOVE_ERROR_BIN = 0x33
PM_CARD_MOVE_GATE      = 0x39

# Card entry from output gate
PM_CARD_ENTRY_ENABLE  = 0x30
PM_CARD_ENTRY_DISABLE = 0x31

# Card type check
PM_CARD_TYPE_IC = 0x30
PM_CARD_TYPE_RF = 0x31

# CPU card
PM_CPUCARD_COLD_RESET   = 0x30
PM_CPUCARD_POWER_DOWN   = 0x31
PM_CPUCARD_STATUS_CHECK = 0x32
PM_CPUCARD_T0_APDU      = 0x33
PM_CPUCARD_T1_APDU      = 0x34
PM_CPUCARD_HOT_RESET    = 0x38
PM_CPUCARD_AUTO_APDU    = 0x39

# SAM card
PM_SAMCARD_COLD_RESET   = 0x30
PM_SAMCARD_POWER_DOWN   = 0x31
PM_SAMCARD_STATUS_CHECK = 0x32
PM_SAMCARD_T0_APDU      = 0x33
PM_SAMCARD_T1_APDU      = 0x34
PM_SAMCARD_HOT_RESET    = 0x38
PM_SAMCARD_AUTO_APDU    = 0x39
PM_SAMCARD_STAND        = 0x40

# SLE4442/4428
PM_SLE_RESET           = 0x30
PM_SLE_POWER_DOWN      = 0x31
PM_SLE_CARD_STATUS     = 0x32
PM_SLE4442_OPERATE     = 0x33
PM_SLE4428_OPERATE     = 0x34

# 24C01..24C256 (IIC memory card)
PM_IIC_RESET      = 0x30
PM_IIC_POWER_DOWN = 0x31
PM_IIC_STATUS     = 0x32
PM_IIC_READ       = 0x33
PM_IIC_WRITE      = 0x34

# RF card
PM_RFCARD_STARTUP        = 0x30
PM_RFCARD_POWER_DOWN     = 0x31
PM_RFCARD_STATUS         = 0x32
PM_RFCARD_MIFARE_RW      = 0x33
PM_RFCARD_TYPEA_APDU     = 0x34
PM_RFCARD_TYPEB_APDU     = 0x35
PM_RFCARD_ENABLE_DISABLE = 0x39

# Single-parameter commands
PM_CARD_SERIAL_NUMBER_READ = 0x30
PM_READ_CARD_CONFIG        = 0x30
PM_READ_CRT571_VERSION     = 0x30

# Recycle bin counter
PM_RECYCLEBIN_COUNTER_READ     = 0x30
PM_RECYCLEBIN_COUNTER_INITIATE = 0x31


COMMAND_NAMES: Mapping[int, str] = MappingProxyType({
    CM_INITIALIZE:                "Initialize CRT-571",
    CM_STATUS_REQUEST:            "Inquire status",
    CM_CARD_MOVE:                 "Card movement",
    CM_CARD_ENTRY:                "Card entry from output gate",
    CM_CARD_TYPE:                 "IC card/RF card type check",
    CM_CPUCARD_CONTROL:           "CPU card application operation",
    CM_SAMCARD_CONTROL:           "SAM card application operation",
    CM_SLE4442_4428_CARD_CONTROL: "SLE4442/4428 card control",
    CM_IIC_MEMORYCARD:            "24C01-24C256 card operation",
    CM_RFCARD_CONTROL:            "Mifare standard card Type A & B T=CL protocol operation (13.56 MHz)",
    CM_CARD_SERIAL_NUMBER:        "Read card serial number",
    CM_READ_CARD_CONFIG:          "Read card configuration information",
    CM_READ_CRT571_VERSION:       "Read CRT-571 software version information",
    CM_RECYCLEBIN_COUNTER:        "Recycle bin counter",
})

CARD_STATUS: Mapping[str, Mapping[int, str]] = MappingProxyType({
    "ST0": MappingProxyType({
        ST0_NO_CARD:              "No Card in CRT-571",
        ST0_ONE_CARD_IN_GATE:     "One Card in gate",
        ST0_ONE_CARD_ON_POSITION: "One Card on RF/IC Card Position",
    }),
    "ST1": MappingProxyType({
        ST1_NO_CARD_IN_STACKER:  "No Card in stacker",
        ST1_FEW_CARD_IN_STACKER: "Few Card in stacker",
        ST1_ENOUGH_CARDS_IN_BOX: "Enough Cards in card box",
    }),
    "ST2": MappingProxyType({
        ST2_ERROR_CARD_BIN_NOT_FULL: "Error card bin not full",
        ST2_ERROR_CARD_BIN_FULL:     "Error card bin full",
    }),
})

PARAMETER_NAMES: Mapping[int, Mapping[int, str]] = MappingProxyType({
    CM_INITIALIZE: MappingProxyType({
        PM_INITIALIZE_MOVE_CARD:              "If card is inside, move card to cardholding position",
        PM_INITIALIZE_MOVE_CARD_RETRACT:      "If card is inside, move card to cardholding position and retract counter will work",
        PM_INITIALIZE_CAPTURE_CARD:           "If card is inside, capture card to error card bin",
        PM_INITIALIZE_CAPTURE_CARD_RETRACT:   "If card is inside, capture card to error card bin and retract counter will work",
        PM_INITIALIZE_DONT_MOVE_CARD:         "If card is inside, does not move the card",
        PM_INITIALIZE_DONT_MOVE_CARD_RETRACT: "If card is inside, does not move the card and retract counter will work",
    }),
    CM_STATUS_REQUEST: MappingProxyType({
        PM_STATUS_DEVICE: "Report CRT-571 status",
        PM_STATUS_SENSOR: "Report sensor status",
    }),
    CM_CARD_MOVE: MappingProxyType({
        PM_CARD_MOVE_HOLD:      "Move card to card holding position",
        PM_CARD_MOVE_IC_POS:    "Move card to IC card position",
        PM_CARD_MOVE_RF_POS:    "Move card to RF card position",
        PM_CARD_MOVE_ERROR_BIN: "Move card to error card bin",
        PM_CARD_MOVE_GATE:      "Move card to gate",
    }),
    CM_CARD_ENTRY: MappingProxyType({
        PM_CARD_ENTRY_ENABLE:  "Enable card entry from output gate",
        PM_CARD_ENTRY_DISABLE: "Disable card entry from output gate",
    }),
    CM_CARD_TYPE: MappingProxyType({
        PM_CARD_TYPE_IC: "Autocheck IC card type",
        PM_CARD_TYPE_RF: "Autocheck RF card type",
    }),
    CM_CPUCARD_CONTROL: MappingProxyType({
        PM_CPUCARD_COLD_RESET:   "CPU card cold reset",
        PM_CPUCARD_POWER_DOWN:   "CPU card power down",
        PM_CPUCARD_STATUS_CHECK: "CPU card status check",
        PM_CPUCARD_T0_APDU:      "T=0 CPU card APDU data exchange",
        PM_CPUCARD_T1_APDU:      "T=1 CPU card APDU data exchange",
        PM_CPUCARD_HOT_RESET:    "CPU card hot reset",
        PM_CPUCARD_AUTO_APDU:    "Auto distinguish T=0/T=1 CPU card APDU data exchange",
    }),
    CM_SAMCARD_CONTROL: MappingProxyType({
        PM_SAMCARD_COLD_RESET:   "SAM card cold reset",
        PM_SAMCARD_POWER_DOWN:   "SAM card power down",
        PM_SAMCARD_STATUS_CHECK: "SAM card status check",
        PM_SAMCARD_T0_APDU:      "T=0 SAM card APDU data exchange",
        PM_SAMCARD_T1_APDU:      "T=1 SAM card APDU data exchange",
        PM_SAMCARD_HOT_RESET:    "SAM card hot reset",
        PM_SAMCARD_AUTO_APDU:    "Auto distinguish T=0/T=1 SAM card APDU data exchange",
        PM_SAMCARD_STAND:        "Choose SAM card stand",
    }),
    CM_SLE4442_4428_CARD_CONTROL: MappingProxyType({
        PM_SLE_RESET:       "SLE4442/4428 card reset",
        PM_SLE_POWER_DOWN:  "SLE4442/4428 card power down",
        PM_SLE_CARD_STATUS: "Browse SLE4442/4428 card status",
        PM_SLE4442_OPERATE: "Operate SLE4442 card",
        PM_SLE4428_OPERATE: "Operate SLE4428 card",
    }),
    CM_IIC_MEMORYCARD: MappingProxyType({
        PM_IIC_RESET:      "IIC card reset",
        PM_IIC_POWER_DOWN: "IIC card power down",
        PM_IIC_STATUS:     "Check IIC card status",
        PM_IIC_READ:       "Read IIC card",
        PM_IIC_WRITE:      "Write IIC card",
    }),
    CM_RFCARD_CONTROL: MappingProxyType({
        PM_RFCARD_STARTUP:        "RF card startup",
        PM_RFCARD_POWER_DOWN:     "RF card power down",
        PM_RFCARD_STATUS:         "RF card operation status check",
        PM_RFCARD_MIFARE_RW:      "Mifare standard card read/write",
        PM_RFCARD_TYPEA_APDU:     "Type A standard T=CL card APDU data exchange",
        PM_RFCARD_TYPEB_APDU:     "Type B standard T=CL card APDU data exchange",
        PM_RFCARD_ENABLE_DISABLE: "RF card enable/disable",
    }),
    CM_CARD_SERIAL_NUMBER: MappingProxyType({
        PM_CARD_SERIAL_NUMBER_READ: "Read card serial number",
    }),
    CM_READ_CARD_CONFIG: MappingProxyType({
        PM_READ_CARD_CONFIG: "Read card configuration information",
    }),
    CM_READ_CRT571_VERSION: MappingProxyType({
        PM_READ_CRT571_VERSION: "Read CRT-571 software version information",
    }),
    CM_RECYCLEBIN_COUNTER: MappingProxyType({
        PM_RECYCLEBIN_COUNTER_READ:     "Read error card bin counter",
        PM_RECYCLEBIN_COUNTER_INITIATE: "Initiate error card bin counter",
    }),
})

# Negative replies carry the error as two ASCII hex digits (E1 E0).
ERROR_MESSAGES: Mapping[str, str] = MappingProxyType({
    "00": "Reception of Undefined Command",
    "01": "Command Parameter Error",
    "02": "Command Sequence Error",
    "03": "Out of Hardware Support Command",
    "04": "Command Data Error",
    "05": "IC Card Contact Not Release",
    "10": "Card Jam",
    "12": "Sensor error",
    "13": "Too Long-Card",
    "14": "Too Short-Card",
    "16": "Card move manually",
    "40": "Move card when recycling",
    "41": "Magnet of IC Card Error",
    "43": "Disable To Move Card To IC Card Position",
    "45": "Manually Move Card",
    "50": "Received Card Counter Overflow",
    "51": "Motor error",
    "60": "Short Circuit of IC Card Supply Power",
    "61": "Activation of Card False",
    "62": "Command Out Of IC Card Support",
    "65": "Disability of IC Card",
    "66": "Command Out Of IC Current Card Support",
    "67": "IC Card Transmission Error",
    "68": "IC Card Transmission Overtime",
    "69": "CPU/SAM Non-Compliance To EMV Standard",
    "A0": "Empty-Stacker",
    "A1": "Full-Stacker",
    "B0": "Not Reset",
})


def error_message(code: str) -> str:
    """Message for a two-character error code; unknown codes give ''."""
    return ERROR_MESSAGES.get(code.upper(), "")


def status_name(field: str, value: int) -> str:
    return CARD_STATUS[field].get(value, "")


def describe_command(command: int, parameter: int) -> str:
    """'Card movement / Move card to gate' style label for logs, with hex fallback."""
    cm_name = COMMAND_NAMES.get(command, f"CM 0x{command:02X}")
    pm_name = PARAMETER_NAMES.get(command, {}).get(parameter, f"PM 0x{parameter:02X}")
    return f"{cm_name} / {pm_name}"
