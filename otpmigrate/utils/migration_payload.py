"""
Google Authenticator migration payload decoder

The payload exported by the "Transfer accounts" screen is a protocol buffers
message with this layout:

    MigrationPayload {
      1: repeated OtpParameters otp_parameters
      2: int32 version
      3: int32 batch_size
      4: int32 batch_index
      5: int32 batch_id
    }
    OtpParameters {
      1: bytes secret
      2: string name
      3: string issuer
      4: Algorithm algorithm
      5: DigitCount digits
      6: OtpType type
      7: int64 counter
    }

Unknown fields are skipped so newer exports still decode.
"""

import logging

from otpmigrate.models.account import AccountRecord, Algorithm, DigitCount, OtpType, enum_value
from otpmigrate.utils.wire_format import (
    DecodeError, WireReader, WIRETYPE_VARINT, WIRETYPE_LENGTH_DELIMITED
)

logger = logging.getLogger(__name__)

class MigrationPayload:
    """Ordered, read-only collection of decoded accounts plus batch metadata"""

    __slots__ = ('_accounts', 'version', 'batch_size', 'batch_index', 'batch_id')

    def __init__(self, accounts=(), version=0, batch_size=0, batch_index=0, batch_id=0):
        self._accounts = tuple(accounts)
        self.version = version
        self.batch_size = batch_size
        self.batch_index = batch_index
        self.batch_id = batch_id

    @property
    def accounts(self):
        return self._accounts

    def __len__(self):
        return len(self._accounts)

    def __iter__(self):
        return iter(self._accounts)

    def __getitem__(self, index):
        return self._accounts[index]

    def __eq__(self, other):
        if not isinstance(other, MigrationPayload):
            return NotImplemented
        return self._key() == other._key()

    def __hash__(self):
        return hash(self._key())

    def __repr__(self):
        return (f"MigrationPayload({len(self._accounts)} accounts, version={self.version}, "
                f"batch {self.batch_index + 1}/{self.batch_size or 1})")

    def _key(self):
        return (self._accounts, self.version, self.batch_size, self.batch_index, self.batch_id)

    def to_list(self):
        """List of account dicts for JSON output"""
        return [account.to_dict() for account in self._accounts]

_PAYLOAD_FIELDS = {
    2: 'version',
    3: 'batch_size',
    4: 'batch_index',
    5: 'batch_id',
}

# field number -> (attribute, wire type)
_OTP_FIELDS = {
    1: ('secret', WIRETYPE_LENGTH_DELIMITED),
    2: ('name', WIRETYPE_LENGTH_DELIMITED),
    3: ('issuer', WIRETYPE_LENGTH_DELIMITED),
    4: ('algorithm', WIRETYPE_VARINT),
    5: ('digits', WIRETYPE_VARINT),
    6: ('otp_type', WIRETYPE_VARINT),
    7: ('counter', WIRETYPE_VARINT),
}

_OTP_ENUMS = {
    'algorithm': Algorithm,
    'digits': DigitCount,
    'otp_type': OtpType,
}

def _expect(wire_type, expected, field_number, reader):
    if wire_type != expected:
        raise DecodeError(
            f"Field {field_number} has wire type {wire_type}, expected {expected}", reader.pos)

def _decode_text(raw, field, reader):
    try:
        return raw.decode('utf-8')
    except UnicodeDecodeError as e:
        raise DecodeError(f"Invalid UTF-8 in {field}: {e}", reader.pos) from e

def _parse_otp_parameters(reader):
    """Parse one OtpParameters sub-message into an AccountRecord"""
    values = {}
    while not reader.at_end():
        field_number, wire_type = reader.read_tag()
        field = _OTP_FIELDS.get(field_number)
        if field is None:
            reader.skip_field(wire_type, field_number)
            continue

        attribute, expected = field
        _expect(wire_type, expected, field_number, reader)
        if attribute == 'secret':
            values[attribute] = reader.read_length_delimited()
        elif expected == WIRETYPE_LENGTH_DELIMITED:
            values[attribute] = _decode_text(reader.read_length_delimited(), attribute, reader)
        elif attribute in _OTP_ENUMS:
            values[attribute] = enum_value(_OTP_ENUMS[attribute], reader.read_varint())
        else:
            values[attribute] = reader.read_varint()

    return AccountRecord(**values)

def _to_int32(value):
    # int32 fields are sign-extended to 64 bits on the wire
    value &= 0xFFFFFFFF
    return value - (1 << 32) if value & 0x80000000 else value

def decode(buffer):
    """
    Decode a binary migration payload

    Args:
        buffer (bytes): The payload after URI and base64 decoding

    Returns:
        MigrationPayload: The accounts in the order they appear, each with its
        base32 secret filled in

    Raises:
        DecodeError: If the buffer is truncated or malformed. Nothing is
        returned for a payload that fails part way through.
    """
    reader = WireReader(buffer)
    records = []
    metadata = {}

    while not reader.at_end():
        field_number, wire_type = reader.read_tag()
        if field_number == 1:
            _expect(wire_type, WIRETYPE_LENGTH_DELIMITED, field_number, reader)
            records.append(_parse_otp_parameters(reader.sub_reader()))
        elif field_number in _PAYLOAD_FIELDS:
            _expect(wire_type, WIRETYPE_VARINT, field_number, reader)
            metadata[_PAYLOAD_FIELDS[field_number]] = _to_int32(reader.read_varint())
        else:
            reader.skip_field(wire_type, field_number)

    # Base32 secrets only once the whole buffer has parsed
    accounts = [record.with_totp_secret() for record in records]
    logger.debug(f"Decoded migration payload with {len(accounts)} accounts")
    return MigrationPayload(accounts, **metadata)
