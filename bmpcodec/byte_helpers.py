from construct import Int32ul, StreamError
from bmpcodec.errors import Truncated


class ByteCursor:
    """
    Reads little-endian fields from a byte buffer, advancing a position as it goes.

    Every read checks the remaining length first, so a short buffer raises
    Truncated instead of returning a partial value.
    """

    def __init__(self, data, position=0):
        self.data = data
        self.position = position

    def remaining(self):
        return len(self.data) - self.position

    def _take(self, width):
        if width > self.remaining():
            raise Truncated("Wanted {} bytes at offset {}, only {} left".format(
                width, self.position, max(self.remaining(), 0)))
        chunk = bytes(self.data[self.position:self.position + width])
        self.position += width
        return chunk

    def peek(self, width):
        chunk = self._take(width)
        self.position -= width
        return chunk

    def read_bytes(self, width):
        return self._take(width)

    def read_u32(self):
        return Int32ul.parse(self._take(4))

    def parse(self, struct, width):
        """
        Parse a fixed-width construct struct at the cursor.

        :param struct: A construct Struct whose encoded size is width
        :param width: Number of bytes the struct occupies
        :return: The parsed Container
        """
        chunk = self._take(width)
        try:
            return struct.parse(chunk)
        except StreamError as e:
            raise Truncated(str(e)) from e
