"""
RFC 4648 base32 encoding

Authenticator apps and password managers expect the shared secret as
uppercase base32 text, while the migration export carries raw bytes.
"""

ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZ234567"
PAD_CHAR = "="

def encode(data):
    """
    Encode a byte sequence as padded RFC 4648 base32 text

    Args:
        data (bytes or iterable of int): The bytes to encode, or None

    Returns:
        str: The base32 text, "" for empty input, or None when data is None
    """
    if data is None:
        return None

    # Continuous MSB-first bit string of all input bytes
    bits = []
    for value in data:
        if not 0 <= value <= 0xFF:
            raise ValueError(f"Byte value out of range: {value}")
        bits.append(format(value, '08b'))
    source = ''.join(bits)

    chars = []
    for i in range(0, len(source), 5):
        group = source[i:i + 5].ljust(5, '0')
        chars.append(ALPHABET[int(group, 2)])

    if len(chars) % 8:
        chars.append(PAD_CHAR * (8 - len(chars) % 8))

    return ''.join(chars)

def strip_padding(text):
    """Return base32 text without its trailing padding, as otpauth URIs expect"""
    if text is None:
        return None
    return text.rstrip(PAD_CHAR)
