"""UBX CFG-MSG packets that switch a GPS receiver's output messages on or off."""

from __future__ import annotations

from enum import Enum
from typing import Dict, Optional, Tuple

UBX_CLASS = 0x01
NMEA_CLASS = 0xF0

_SYNC = bytes([0xB5, 0x62])
_CFG_MSG = bytes([0x06, 0x01])
_PAYLOAD_LENGTH = bytes([0x08, 0x00])


class MessageType(Enum):
    """Receiver output messages as (class, id) pairs."""

    GGA = (NMEA_CLASS, 0)
    GLL = (NMEA_CLASS, 1)
    GSA = (NMEA_CLASS, 2)
    GSV = (NMEA_CLASS, 3)
    RMC = (NMEA_CLASS, 4)
    VTG = (NMEA_CLASS, 5)
    NAV_PVT = (UBX_CLASS, 0x07)

    @property
    def msg_class(self) -> int:
        return self.value[0]

    @property
    def msg_id(self) -> int:
        return self.value[1]


def ubx_checksum(data: bytes) -> Tuple[int, int]:
    """Return the 8-bit Fletcher checksum bytes (CK_A, CK_B) of ``data``."""
    cka = ckb = 0
    for byte in data:
        cka = (cka + byte) & 0xFF
        ckb = (ckb + cka) & 0xFF
    return cka, ckb


def cfg_msg_packet(msg_class: int, msg_id: int, rate: int) -> bytes:
    """Build a CFG-MSG packet setting the message rate on the UART1 port."""
    for name, value in (("msg_class", msg_class), ("msg_id", msg_id), ("rate", rate)):
        if not 0 <= value <= 0xFF:
            raise ValueError(f"{name} must be in 0..255, got {value}")
    payload = bytes([msg_class, msg_id, 0, rate, 0, 0, 0, 0])
    body = _CFG_MSG + _PAYLOAD_LENGTH + payload
    return _SYNC + body + bytes(ubx_checksum(body))


def enable_message(message: MessageType) -> bytes:
    """Packet that turns ``message`` on."""
    return cfg_msg_packet(message.msg_class, message.msg_id, 1)


def disable_message(message: MessageType) -> bytes:
    """Packet that turns ``message`` off."""
    return cfg_msg_packet(message.msg_class, message.msg_id, 0)


_KEY_MESSAGES: Dict[str, MessageType] = {
    "a": MessageType.GLL,
    "b": MessageType.RMC,
    "c": MessageType.VTG,
    "d": MessageType.GSV,
    "e": MessageType.GSA,
    "f": MessageType.GGA,
    "g": MessageType.NAV_PVT,
}


def key_command(key: str) -> Optional[bytes]:
    """Packet for a keyboard command: lower case disables, upper case enables.

    Returns None for keys that have no command.
    """
    message = _KEY_MESSAGES.get(key.lower()) if len(key) == 1 else None
    if message is None:
        return None
    return enable_message(message) if key.isupper() else disable_message(message)