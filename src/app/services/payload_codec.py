from __future__ import annotations

import base64

from src.domain.models import BinaryResult


def encode_payload(data: bytes) -> str:
    """RFC 4648 base64 with padding."""

    return base64.b64encode(bytes(data)).decode("ascii")


def binary_result(data: bytes | None) -> BinaryResult:
    if data is None:
        return BinaryResult(found=False)
    return BinaryResult(found=True, data_base64=encode_payload(data))
