"""
Registry of intrinsic names recognized by DisableIntrinsic / ControlIntrinsic.

List syntax:
- entries are separated by commas or whitespace (repeated flags accumulate
  with newlines)
- ControlIntrinsic entries are signed: `+name` enables, `-name` disables
- any entry may name a compiler tier first: `c1:_hashCode`, `+c2:_dsin`
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable

KNOWN_INTRINSICS: frozenset[str] = frozenset(
    {
        "_hashCode",
        "_getClass",
        "_clone",
        "_notify",
        "_notifyAll",
        "_identityHashCode",
        "_currentTimeMillis",
        "_nanoTime",
        "_currentThread",
        "_arraycopy",
        "_copyOf",
        "_copyOfRange",
        "_isInstance",
        "_isAssignableFrom",
        "_getModifiers",
        "_isInterface",
        "_isArray",
        "_isPrimitive",
        "_getSuperclass",
        "_dabs",
        "_fabs",
        "_iabs",
        "_labs",
        "_dsin",
        "_dcos",
        "_dtan",
        "_datan2",
        "_dsqrt",
        "_dlog",
        "_dlog10",
        "_dpow",
        "_dexp",
        "_min",
        "_max",
        "_fmaD",
        "_fmaF",
        "_floatToRawIntBits",
        "_intBitsToFloat",
        "_doubleToRawLongBits",
        "_longBitsToDouble",
        "_numberOfLeadingZeros_i",
        "_numberOfLeadingZeros_l",
        "_numberOfTrailingZeros_i",
        "_numberOfTrailingZeros_l",
        "_bitCount_i",
        "_bitCount_l",
        "_reverseBytes_i",
        "_reverseBytes_l",
        "_equalsB",
        "_equalsC",
        "_compareToL",
        "_compareToU",
        "_indexOfL",
        "_indexOfU",
        "_hasNegatives",
        "_encodeISOArray",
        "_vectorizedMismatch",
        "_Reference_get",
        "_aescrypt_encryptBlock",
        "_aescrypt_decryptBlock",
        "_cipherBlockChaining_encryptAESCrypt",
        "_cipherBlockChaining_decryptAESCrypt",
        "_md5_implCompress",
        "_sha_implCompress",
        "_sha2_implCompress",
        "_sha5_implCompress",
        "_updateCRC32",
        "_updateBytesCRC32",
        "_updateBytesCRC32C",
        "_updateBytesAdler32",
        "_multiplyToLen",
        "_squareToLen",
        "_mulAdd",
        "_montgomeryMultiply",
        "_montgomerySquare",
        "_compareAndSetInt",
        "_compareAndSetLong",
        "_compareAndSetReference",
        "_getAndAddInt",
        "_getAndAddLong",
        "_getAndSetInt",
        "_getAndSetLong",
        "_getAndSetReference",
        "_onSpinWait",
        "_Preconditions_checkIndex",
        "_blackhole",
    }
)

TIER_QUALIFIERS = ("c1", "c2")

# Reported tokens are capped; every real intrinsic name is shorter than this.
MAX_REPORTED_TOKEN = 63

_SEPARATORS = re.compile(r"[,\s]+")


@dataclass(frozen=True)
class IntrinsicToken:
    raw: str
    name: str
    enabled: bool
    tier: str | None = None


class IntrinsicRegistry:
    """Answers which entries of an intrinsic list name no known intrinsic."""

    def __init__(self, names: Iterable[str] | None = None, extra: Iterable[str] = ()):
        self.names = set(KNOWN_INTRINSICS if names is None else names)
        self.names.update(extra)

    def __contains__(self, name: object) -> bool:
        return name in self.names

    def parse(self, value: str, *, signed: bool) -> list[IntrinsicToken | str]:
        """
        Split a list into tokens.

        Entries that cannot even be parsed (a signed list entry without +/-,
        an empty name, an unknown tier) are returned as their raw string.
        """
        parsed: list[IntrinsicToken | str] = []
        for raw in _SEPARATORS.split(value.strip()):
            if not raw:
                continue

            body = raw
            enabled = False
            if signed:
                if body[0] not in "+-":
                    parsed.append(raw)
                    continue
                enabled = body[0] == "+"
                body = body[1:]

            tier = None
            if ":" in body:
                qualifier, _, body = body.partition(":")
                tier = qualifier.lower()
                if tier not in TIER_QUALIFIERS:
                    parsed.append(raw)
                    continue

            if not body:
                parsed.append(raw)
                continue

            parsed.append(IntrinsicToken(raw=raw, name=body, enabled=enabled, tier=tier))
        return parsed

    def unrecognized(self, value: str, *, signed: bool) -> list[str]:
        """Raw entries of `value` that do not name a known intrinsic, in list order."""
        bad: list[str] = []
        for token in self.parse(value, signed=signed):
            if isinstance(token, str):
                bad.append(token[:MAX_REPORTED_TOKEN])
            elif token.name not in self.names:
                bad.append(token.raw[:MAX_REPORTED_TOKEN])
        return bad
