"""Tests for request frame building and reply decoding."""

import pytest

from CRT571 import bcc
from CRT571.crt571_frames import (
    HEADER_LEN, CardStatus, NegativeResponse, PositiveResponse, decode_response, encode_request,
    read_length,
)
from CRT571.crt571_tables import EMT2, PMT
from CRT571.exceptions import (
    DeviceError, FrameError, FrameTooLarge, TruncatedFrame, UnknownResponseType,
)

from conftest import negative_reply, positive_reply, with_bcc


# ---------- encode ----------

def test_status_request_frame_bytes():
    """Status inquiry with no data serializes to F2 00 00 03 43 31 30 03 <bcc>."""
    frame = encode_request(0x00, 0x31, 0x30, b"")
    head = bytes.fromhex("F2 00 00 03 43 31 30 03")
    assert frame == head + bytes([bcc.compute(head)])


def test_address_is_second_byte():
    frame = encode_request(0x0F, 0x30, 0x30)
    assert frame[1] == 0x0F


def test_length_field_is_payload_plus_three_big_endian():
    payload = bytes(300)
    frame = encode_request(0x00, 0x51, 0x33, payload)
    assert read_length(frame) == 303
    assert frame[2:4] == b"\x01\x2f"


def test_payload_sits_between_pm_and_etx():
    frame = encode_request(0x00, 0x51, 0x33, b"\x00\xa4\x04\x00")
    assert frame[4:7] == b"\x43\x51\x33"
    assert frame[7:11] == b"\x00\xa4\x04\x00"
    assert frame[-2] == 0x03


@pytest.mark.parametrize("size", [0, 1, 17, 512, 1021])
def test_encoded_frame_checksum_verifies(size):
    frame = encode_request(0x00, 0x60, 0x34, bytes([0x5A]) * size)
    assert read_length(frame) == size + 3
    assert bcc.verify(frame[-1], frame[:-1])
    assert bcc.compute(frame) == 0


def test_payload_of_1021_bytes_is_accepted():
    assert len(encode_request(0x00, 0x54, 0x34, bytes(1021))) == 1021 + 9


def test_payload_over_limit_raises():
    with pytest.raises(FrameTooLarge) as exc:
        encode_request(0x00, 0x54, 0x34, bytes(1022))
    assert exc.value.size == 1025


# ---------- decode: positive ----------

def test_positive_reply_status_names():
    response = decode_response(positive_reply(status=b"\x32\x32\x30"))
    assert isinstance(response, PositiveResponse)
    assert response.ok
    assert response.status.st0_message == "One Card on RF/IC Card Position"
    assert response.status.st1_message == "Enough Cards in card box"
    assert response.status.st2_message == "Error card bin not full"


def test_positive_reply_payload_and_echo():
    raw = positive_reply(cm=0xA4, pm=0x30, data=b"CRT-571-V1.2")
    response = decode_response(raw)
    assert response.type == PMT
    assert response.command == 0xA4
    assert response.parameter == 0x30
    assert response.length == 6 + 12
    assert response.data == b"CRT-571-V1.2"


def test_unknown_status_byte_has_empty_name():
    response = decode_response(positive_reply(status=b"\x39\x30\x31"))
    assert response.status.st0_message == ""
    assert response.status.st1_message == "No Card in stacker"
    assert response.status.st2_message == "Error card bin full"


def test_card_status_to_dict():
    st = CardStatus(0x30, 0x31, 0x30)
    assert st.to_dict() == {
        "st0": "No Card in CRT-571",
        "st1": "Few Card in stacker",
        "st2": "Error card bin not full",
        "raw": "30 31 30",
    }


def test_positive_str():
    text = str(decode_response(positive_reply(status=b"\x30\x32\x30")))
    assert text.startswith("CRT-571 positive response: card status:['No Card in CRT-571'")


# ---------- decode: negative ----------

def test_negative_reply_card_jam():
    response = decode_response(negative_reply(code=b"10"))
    assert isinstance(response, NegativeResponse)
    assert not response.ok
    assert response.error_code == "10"
    assert response.error_message == "Card Jam"


def test_alternate_negative_marker_is_accepted():
    response = decode_response(negative_reply(code=b"A0", marker=EMT2))
    assert isinstance(response, NegativeResponse)
    assert response.error_message == "Empty-Stacker"


def test_negative_reply_payload_and_echo():
    response = decode_response(negative_reply(cm=0x51, pm=0x33, code=b"67", data=b"\x6a\x82"))
    assert response.command == 0x51
    assert response.parameter == 0x33
    assert response.data == b"\x6a\x82"


def test_unknown_error_code_gives_empty_message():
    response = decode_response(negative_reply(code=b"99"))
    assert response.error_code == "99"
    assert response.error_message == ""


def test_negative_to_error():
    response = decode_response(negative_reply(code=b"B0"))
    err = response.to_error()
    assert isinstance(err, DeviceError)
    assert err.code == "B0"
    assert err.message == "Not Reset"
    assert err.response is response


# ---------- decode: malformed ----------

@pytest.mark.parametrize("type_byte", [0x00, 0x06, 0x43, 0x51, 0xFF])
@pytest.mark.parametrize("tail", [b"", b"\x00", bytes(20)])
def test_unknown_discriminator(type_byte, tail):
    raw = bytes([0xF2, 0x00, 0x00, 0x06, type_byte]) + tail
    with pytest.raises(UnknownResponseType) as exc:
        decode_response(raw)
    assert exc.value.type_byte == type_byte


POSITIVE = positive_reply(status=b"\x30\x32\x30")
NEGATIVE = negative_reply(code=b"10")
POSITIVE_WITH_DATA = positive_reply(cm=0xA4, pm=0x30, data=b"CRT-571-V1.2")
NEGATIVE_WITH_DATA = negative_reply(cm=0x51, pm=0x33, code=b"67", data=b"\x6a\x82")


@pytest.mark.parametrize("cut", range(0, len(POSITIVE)))
def test_truncated_positive_reply(cut):
    with pytest.raises(TruncatedFrame):
        decode_response(POSITIVE[:cut])


@pytest.mark.parametrize("cut", range(0, len(NEGATIVE)))
def test_truncated_negative_reply(cut):
    with pytest.raises(TruncatedFrame):
        decode_response(NEGATIVE[:cut])


@pytest.mark.parametrize("raw", [POSITIVE_WITH_DATA, NEGATIVE_WITH_DATA])
def test_reply_missing_its_trailer_is_truncated(raw):
    """Cutting anywhere inside DATA, ETX or BCC is rejected, never decoded as a shorter payload."""
    for cut in range(HEADER_LEN, len(raw)):
        with pytest.raises(TruncatedFrame) as exc:
            decode_response(raw[:cut])
        assert exc.value.needed == len(raw)


def test_complete_reply_decodes_with_exact_length():
    assert decode_response(POSITIVE).status.raw == b"\x30\x32\x30"
    assert decode_response(NEGATIVE).error_code == "10"


@pytest.mark.parametrize("raw", [POSITIVE_WITH_DATA, NEGATIVE_WITH_DATA])
def test_wrong_byte_in_etx_position(raw):
    broken = with_bcc(raw[:-2] + b"\x00")
    with pytest.raises(FrameError) as exc:
        decode_response(broken)
    assert not isinstance(exc.value, TruncatedFrame)
    assert "ETX" in str(exc.value)


def test_length_field_larger_than_buffer():
    raw = positive_reply(data=b"abcd")
    raw = raw[:2] + b"\x00\x40" + raw[4:]
    with pytest.raises(TruncatedFrame):
        decode_response(raw)


def test_positive_length_below_minimum():
    raw = with_bcc(bytes.fromhex("F2 00 00 03 50 31 30 30 32 30 03"))
    with pytest.raises(TruncatedFrame):
        decode_response(raw)


def test_oversized_reply():
    with pytest.raises(FrameTooLarge):
        decode_response(bytes(1025))
