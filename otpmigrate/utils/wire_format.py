"""
Protocol buffers wire format reader

A minimal cursor over a byte buffer that understands tags, varints and
length-delimited regions. It has no notion of schemas; callers decide what
each field number means.
"""

WIRETYPE_VARINT = 0
WIRETYPE_FIXED64 = 1
WIRETYPE_LENGTH_DELIMITED = 2
WIRETYPE_START_GROUP = 3
WIRETYPE_END_GROUP = 4
WIRETYPE_FIXED32 = 5

MAX_VARINT_BYTES = 10
MAX_GROUP_DEPTH = 100
UINT64_MASK = (1 << 64) - 1

class DecodeError(ValueError):
    """Raised when a binary message is truncated or malformed"""

    def __init__(self, message, offset=None):
        if offset is not None:
            message = f"{message} (at byte {offset})"
        super().__init__(message)
        self.offset = offset

class WireReader:
    """Reads wire format fields from buffer[start:end]"""

    def __init__(self, buffer, start=0, end=None):
        self.buffer = memoryview(buffer)
        self.pos = start
        self.end = len(self.buffer) if end is None else end
        if not 0 <= self.pos <= self.end <= len(self.buffer):
            raise DecodeError("Region outside of buffer", start)

    def at_end(self):
        return self.pos >= self.end

    def remaining(self):
        return self.end - self.pos

    def read_varint(self):
        """
        Read a base-128 varint, least significant group first

        Returns:
            int: The value, truncated to 64 bits unsigned
        """
        start = self.pos
        result = 0
        shift = 0
        for _ in range(MAX_VARINT_BYTES):
            if self.pos >= self.end:
                raise DecodeError("Truncated varint", start)
            byte = self.buffer[self.pos]
            self.pos += 1
            result |= (byte & 0x7F) << shift
            if not byte & 0x80:
                return result & UINT64_MASK
            shift += 7
        raise DecodeError("Varint longer than 10 bytes", start)

    def read_tag(self):
        """
        Read a field key

        Returns:
            tuple: (field_number, wire_type)
        """
        start = self.pos
        key = self.read_varint()
        field_number = key >> 3
        wire_type = key & 0x07
        if field_number == 0:
            raise DecodeError("Invalid field number 0", start)
        if wire_type > WIRETYPE_FIXED32:
            raise DecodeError(f"Invalid wire type {wire_type}", start)
        return field_number, wire_type

    def _take(self, length):
        start = self.pos
        if length > self.remaining():
            raise DecodeError(
                f"Field of {length} bytes overruns buffer ({self.remaining()} bytes left)", start)
        self.pos += length
        return start

    def read_length_delimited(self):
        """Read a length prefix and return the bytes it covers"""
        length = self.read_varint()
        start = self._take(length)
        return self.buffer[start:self.pos].tobytes()

    def sub_reader(self):
        """Read a length prefix and return a reader over the region it covers"""
        length = self.read_varint()
        start = self._take(length)
        return WireReader(self.buffer, start, self.pos)

    def skip_field(self, wire_type, field_number=None):
        """Skip the value of a field whose tag has just been read"""
        if wire_type == WIRETYPE_START_GROUP:
            self._skip_group(field_number)
        elif wire_type == WIRETYPE_END_GROUP:
            raise DecodeError("Unexpected end-group marker", self.pos)
        else:
            self._skip_value(wire_type)

    def _skip_value(self, wire_type):
        if wire_type == WIRETYPE_VARINT:
            self.read_varint()
        elif wire_type == WIRETYPE_FIXED64:
            self._take(8)
        elif wire_type == WIRETYPE_LENGTH_DELIMITED:
            self._take(self.read_varint())
        elif wire_type == WIRETYPE_FIXED32:
            self._take(4)
        else:
            raise DecodeError(f"Invalid wire type {wire_type}", self.pos)

    def _skip_group(self, field_number):
        start = self.pos
        # Field numbers of the groups still open, innermost last
        open_groups = [field_number]
        while open_groups:
            if self.at_end():
                raise DecodeError("Unterminated group", start)
            tag_pos = self.pos
            number, wire_type = self.read_tag()
            if wire_type == WIRETYPE_START_GROUP:
                if len(open_groups) >= MAX_GROUP_DEPTH:
                    raise DecodeError("Group nesting too deep", tag_pos)
                open_groups.append(number)
            elif wire_type == WIRETYPE_END_GROUP:
                expected = open_groups.pop()
                if expected is not None and number != expected:
                    raise DecodeError(f"Mismatched end-group for field {expected}", tag_pos)
            else:
                self._skip_value(wire_type)
