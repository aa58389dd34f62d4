"""
Account records decoded from a migration export

Enum fields keep the value found on the wire; the derived properties apply
the defaults authenticator apps use when a field is unspecified.
"""

import base64
from dataclasses import dataclass, replace
from enum import IntEnum
from typing import Optional

from pyotp.utils import build_uri

from otpmigrate.utils.base32 import encode, strip_padding

class Algorithm(IntEnum):
    UNSPECIFIED = 0
    SHA1 = 1
    SHA256 = 2
    SHA512 = 3
    MD5 = 4

class DigitCount(IntEnum):
    UNSPECIFIED = 0
    SIX = 1
    EIGHT = 2

class OtpType(IntEnum):
    UNSPECIFIED = 0
    HOTP = 1
    TOTP = 2

# Enum names as written in the migration schema
_SCHEMA_PREFIXES = {
    Algorithm: "ALGORITHM_",
    DigitCount: "DIGIT_COUNT_",
    OtpType: "OTP_TYPE_",
}

# Zero always means unspecified; these are the values applied when reading it
DEFAULT_DIGITS = 6
DEFAULT_ALGORITHM = Algorithm.SHA1
DEFAULT_OTP_TYPE = OtpType.TOTP

_DIGITS = {
    DigitCount.SIX: 6,
    DigitCount.EIGHT: 8,
}

def enum_value(enum_cls, value):
    """Map a wire integer to its enum member, keeping unknown values as plain ints"""
    try:
        return enum_cls(value)
    except ValueError:
        return value

def schema_name(value):
    """Symbolic name of an enum value (e.g. ALGORITHM_SHA1), or the int itself if unknown"""
    for enum_cls, prefix in _SCHEMA_PREFIXES.items():
        if isinstance(value, enum_cls):
            return prefix + value.name
    return int(value)

@dataclass(frozen=True)
class AccountRecord:
    """One credential from a migration export"""

    secret: bytes = b""
    name: str = ""
    issuer: str = ""
    algorithm: Algorithm = Algorithm.UNSPECIFIED
    digits: DigitCount = DigitCount.UNSPECIFIED
    otp_type: OtpType = OtpType.UNSPECIFIED
    counter: int = 0
    totp_secret: Optional[str] = None

    def with_totp_secret(self):
        """Return a copy of this record carrying the base32 form of its secret"""
        return replace(self, totp_secret=encode(self.secret))

    @property
    def digit_count(self):
        """Number of code digits; unspecified means 6"""
        return _DIGITS.get(self.digits, DEFAULT_DIGITS)

    @property
    def hash_name(self):
        """Hash algorithm name such as 'SHA1'; unspecified means SHA1"""
        if isinstance(self.algorithm, Algorithm) and self.algorithm != Algorithm.UNSPECIFIED:
            return self.algorithm.name
        return DEFAULT_ALGORITHM.name

    @property
    def otp_kind(self):
        """HOTP or TOTP; unspecified means TOTP"""
        if self.otp_type == OtpType.HOTP:
            return OtpType.HOTP
        return DEFAULT_OTP_TYPE

    def to_dict(self):
        """JSON-ready representation with the interchange field names"""
        return {
            "secret": base64.b64encode(self.secret).decode('ascii'),
            "name": self.name,
            "issuer": self.issuer,
            "algorithm": schema_name(self.algorithm),
            "digits": schema_name(self.digits),
            "type": schema_name(self.otp_type),
            # 64-bit counters do not survive a round trip through JSON numbers in every reader
            "counter": str(self.counter),
            "totpSecret": self.totp_secret,
        }

    def provisioning_uri(self):
        """
        Build the otpauth:// URI an authenticator app can import

        Returns:
            str: An otpauth://totp/... or otpauth://hotp/... URI
        """
        secret = self.totp_secret if self.totp_secret is not None else encode(self.secret)
        initial_count = self.counter if self.otp_kind == OtpType.HOTP else None
        return build_uri(
            strip_padding(secret),
            self.name,
            initial_count=initial_count,
            issuer=self.issuer or None,
            algorithm=self.hash_name.lower(),
            digits=self.digit_count,
        )
