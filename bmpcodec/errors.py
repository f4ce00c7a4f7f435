class BMPError(ValueError):
    """Base class for every condition that makes a byte stream or image unusable as a BMP."""


class Truncated(BMPError):
    pass


class InvalidMagic(BMPError):
    pass


class UnsupportedFormat(BMPError):
    pass


class UnsupportedCompression(UnsupportedFormat):
    pass


class UnsupportedBitDepth(UnsupportedFormat):
    pass


class PaletteOverflow(BMPError):
    pass


class InvalidPaletteIndex(BMPError):
    pass
