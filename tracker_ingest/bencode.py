'''
turning torrent bytes into python values and back
byte strings -> bytes, integers -> int, lists -> list, dictionaries -> dict

dict keys stay raw bytes and keep the order they had on the wire,
so encode(decode(data)) gives back the same bytes for the info hash
'''

import re

from .errors import MalformedEncoding

DEFAULT_MAX_DEPTH = 100
MAX_DEPTH_LIMIT = 300  #two stack frames per level, well under the interpreter recursion limit

_INTEGER = re.compile(rb'-?(0|[1-9][0-9]*)')
_LENGTH = re.compile(rb'0|[1-9][0-9]*')
_DIGITS = b'0123456789'


def check_max_depth(max_depth):
    if isinstance(max_depth, bool) or not isinstance(max_depth, int) \
            or not 1 <= max_depth <= MAX_DEPTH_LIMIT:
        raise ValueError(f"max_depth must be between 1 and {MAX_DEPTH_LIMIT}, got {max_depth!r}")
    return max_depth


class BencodeDecoder:
    def __init__(self, data, max_depth=DEFAULT_MAX_DEPTH):
        if not isinstance(data, (bytes, bytearray, memoryview)):
            raise TypeError(f"Expected bytes, got {type(data).__name__}")
        self.data = bytes(data)
        self.index = 0
        self.max_depth = check_max_depth(max_depth)

    def decode(self):
        value = self._decode_next(0)
        if self.index != len(self.data):
            raise MalformedEncoding(
                f"Trailing data after top-level value at offset {self.index}")
        return value

    def _decode_next(self, depth): #depth = containers already open
        if self.index >= len(self.data):
            raise MalformedEncoding("Unexpected end of data")

        current = self.data[self.index:self.index + 1]

        if current == b'i':
            return self._decode_int()
        elif current == b'l':
            return self._decode_list(depth + 1)
        elif current == b'd':
            return self._decode_dict(depth + 1)
        elif current in _DIGITS:
            return self._decode_string()
        elif current == b'-':
            raise MalformedEncoding(f"Negative string length at offset {self.index}")
        else:
            raise MalformedEncoding(
                f"Unknown bencode type {current!r} at offset {self.index}")

    def _decode_int(self): #i<>e
        start = self.index + 1  #skip i
        end = self.data.find(b'e', start)
        if end == -1:
            raise MalformedEncoding("Unterminated integer")

        raw = self.data[start:end]
        if not _INTEGER.fullmatch(raw) or raw == b'-0':
            raise MalformedEncoding(f"Invalid integer {raw[:32]!r} at offset {start}")
        try:
            number = int(raw)
        except ValueError as e: #too many digits for int()
            raise MalformedEncoding(f"Integer too large at offset {start}") from e

        self.index = end + 1
        return number

    def _decode_string(self): # n:<>
        colon = self.data.find(b':', self.index)
        if colon == -1:
            raise MalformedEncoding("Unterminated string length")

        raw = self.data[self.index:colon]
        if not _LENGTH.fullmatch(raw):
            raise MalformedEncoding(
                f"Invalid string length {raw[:32]!r} at offset {self.index}")
        try:
            length = int(raw)
        except ValueError as e:
            raise MalformedEncoding(f"String length too large at offset {self.index}") from e

        start = colon + 1
        if length > len(self.data) - start:
            raise MalformedEncoding(
                f"String length {length} exceeds remaining {len(self.data) - start} bytes")

        self.index = start + length
        return self.data[start:self.index]

    def _enter(self, depth):
        if depth > self.max_depth:
            raise MalformedEncoding(f"Nesting deeper than {self.max_depth} levels")
        self.index += 1  #skip l / d

    def _at_end(self, kind):
        if self.index >= len(self.data):
            raise MalformedEncoding(f"Unterminated {kind}")
        return self.data[self.index] == 0x65  #e

    def _decode_list(self, depth): #l<>e
        self._enter(depth)
        items = []
        while not self._at_end('list'):
            items.append(self._decode_next(depth))
        self.index += 1  #skip e
        return items

    def _decode_dict(self, depth): #d<>e
        self._enter(depth)
        dictionary = {}
        while not self._at_end('dictionary'):
            if self.data[self.index:self.index + 1] not in _DIGITS:
                raise MalformedEncoding(
                    f"Dictionary key is not a byte string at offset {self.index}")
            key = self._decode_string() #keys stay bytes
            if key in dictionary:
                raise MalformedEncoding(f"Duplicate dictionary key {key[:32]!r}")
            dictionary[key] = self._decode_next(depth)
        self.index += 1  #skip e
        return dictionary


class BencodeEncoder:
    @staticmethod
    def encode(data):
        chunks = []
        BencodeEncoder._encode_into(data, chunks)
        return b''.join(chunks)

    @staticmethod
    def _encode_into(data, chunks):
        if isinstance(data, bool):
            chunks.append(b'i1e' if data else b'i0e')
        elif isinstance(data, int):
            chunks.append(b'i%de' % data)
        elif isinstance(data, (bytes, bytearray)):
            chunks.append(b'%d:' % len(data))
            chunks.append(bytes(data))
        elif isinstance(data, str):
            BencodeEncoder._encode_into(data.encode('utf-8'), chunks)
        elif isinstance(data, (list, tuple)):
            chunks.append(b'l')
            for item in data:
                BencodeEncoder._encode_into(item, chunks)
            chunks.append(b'e')
        elif isinstance(data, dict):
            chunks.append(b'd')
            for key, value in data.items(): #stored order, never re-sorted
                if not isinstance(key, (bytes, bytearray, str)):
                    raise TypeError(f"Unsupported key type: {type(key)}")
                BencodeEncoder._encode_into(key, chunks)
                BencodeEncoder._encode_into(value, chunks)
            chunks.append(b'e')
        else:
            raise TypeError(f"Unsupported type: {type(data)}")


def decode(data, max_depth=DEFAULT_MAX_DEPTH):
    return BencodeDecoder(data, max_depth).decode()


def encode(data):
    return BencodeEncoder.encode(data)
