from collections import namedtuple
from enum import IntEnum
from bmpcodec.errors import UnsupportedBitDepth


class BitDepth(IntEnum):
    BW = 1
    COLOR_16 = 4
    COLOR_256 = 8
    HIGH_COLOR = 16
    TRUE_COLOR = 24
    TRUE_COLOR_ALPHA = 32

    @classmethod
    def parse(cls, value):
        try:
            return cls(value)
        except ValueError as e:
            raise UnsupportedBitDepth("Unsupported bpp: {}".format(value)) from e

    @property
    def is_indexed(self):
        return self.value <= 8

    @property
    def palette_capacity(self):
        """Largest palette the depth can address, 0 for direct-colour depths."""
        return 1 << self.value if self.is_indexed else 0


class Rgba(namedtuple("Rgba", ["red", "green", "blue", "alpha"])):
    """
    A colour in memory channel order.

    BMP stores the same four channels as blue, green, red, alpha; use bgra()
    and as_bgra_bytes() when crossing that boundary.
    """
    __slots__ = ()

    @classmethod
    def bgra(cls, blue, green, red, alpha):
        return cls(red, green, blue, alpha)

    def as_bgra_bytes(self):
        return bytes([self.blue, self.green, self.red, self.alpha])

    def __str__(self):
        return "r: {}, g: {}, b: {}, a: {}".format(self.red, self.green, self.blue, self.alpha)
