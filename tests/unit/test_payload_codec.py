from __future__ import annotations

import base64

import pytest

from src.app.services.payload_codec import binary_result, encode_payload
from src.domain.models import BinaryResult


@pytest.mark.unit
@pytest.mark.parametrize(
    "data",
    [b"", b"\x00", b"ab", b"\x1a\x02\xff\xfe\x00\x10\x7f"],
)
def test_payload_round_trips(data: bytes) -> None:
    assert base64.b64decode(encode_payload(data), validate=True) == data


@pytest.mark.unit
def test_padding_follows_rfc4648() -> None:
    assert encode_payload(b"") == ""
    assert encode_payload(b"f") == "Zg=="
    assert encode_payload(b"fo") == "Zm8="
    assert encode_payload(b"foo") == "Zm9v"


@pytest.mark.unit
def test_binary_result_found_iff_data() -> None:
    assert binary_result(None) == BinaryResult(found=False)
    assert binary_result(b"") == BinaryResult(found=True, data_base64="")

    with pytest.raises(ValueError):
        BinaryResult(found=True)
    with pytest.raises(ValueError):
        BinaryResult(found=False, data_base64="Zg==")
