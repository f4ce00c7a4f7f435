import logging
from collections import namedtuple
import numpy as np
from bmpcodec.color import Rgba, BitDepth
from bmpcodec.errors import Truncated, InvalidPaletteIndex

logger = logging.getLogger(__name__)


def row_stride(width, bit_depth):
    """Bytes per stored row: width * bit_depth bits rounded up to a multiple of 4 bytes."""
    return ((bit_depth * width + 31) // 32) * 4


def color_keys(pixels):
    """
    Collapse the RGBA channel axis into one uint32 per pixel so colours can be
    compared, sorted and deduplicated as scalars.
    """
    pixels = np.ascontiguousarray(pixels, dtype=np.uint8)
    return pixels.view("<u4")[..., 0]


def _expand_5bit(channel):
    return ((channel << 3) | (channel >> 2)).astype(np.uint8)


class BitMap:
    """
    A grid of RGBA pixels.

    Rows are kept in the order they are stored in the file: row 0 is the bottom
    row of a bottom-up bitmap, or the top row when top_down is set.
    """

    def __init__(self, pixels, top_down=False):
        pixels = np.array(pixels, dtype=np.uint8)
        if pixels.ndim != 3 or pixels.shape[2] != 4:
            raise ValueError("Pixels must have shape (rows, width, 4), got {}".format(pixels.shape))
        if pixels.shape[0] == 0 or pixels.shape[1] == 0:
            raise ValueError("A bitmap needs at least one pixel")
        pixels.setflags(write=False)

        self.pixels = pixels
        self.top_down = top_down

    @classmethod
    def from_colors(cls, rows, top_down=False):
        return cls([[tuple(color) for color in row] for row in rows], top_down=top_down)

    @property
    def width(self):
        return self.pixels.shape[1]

    @property
    def height(self):
        return self.pixels.shape[0]

    def get_pixel(self, x, y):
        return Rgba(*(int(channel) for channel in self.pixels[y, x]))

    def as_colors(self):
        return [[Rgba(*(int(channel) for channel in pixel)) for pixel in row] for row in self.pixels]

    def display_rows(self):
        """The pixel array ordered top row first, whatever the storage order."""
        return self.pixels if self.top_down else self.pixels[::-1]

    def get_all_unique_colors(self):
        """Distinct colours in the order they are first met when the rows are written out."""
        flat = self.pixels.reshape(-1, 4)
        _, first_seen = np.unique(color_keys(flat), return_index=True)
        first_seen.sort()
        return [Rgba(*(int(channel) for channel in flat[i])) for i in first_seen]

    @classmethod
    def decode(cls, data, offset, info_header, palette):
        """
        Unpack the pixel array.

        :param data: The BMP byte stream
        :param offset: Start of the pixel array, taken from the file header
        :param info_header: InfoHeader giving geometry and bit depth
        :param palette: RgbQuad used to resolve indexed pixels
        :return: BitMap
        """
        bit_depth = BitDepth.parse(info_header.bit_depth)
        width = info_header.width
        rows = info_header.row_count
        stride = row_stride(width, bit_depth)
        size = stride * rows

        if offset + size > len(data):
            raise Truncated("Pixel data needs {} bytes at offset {}, buffer holds {}".format(
                size, offset, len(data)))
        logger.debug("Reading {} rows of {} bytes at offset {}".format(rows, stride, offset))

        raw = np.frombuffer(data, dtype=np.uint8, count=size, offset=offset).reshape(rows, stride)

        if bit_depth.is_indexed:
            if bit_depth == 8:
                indices = raw[:, :width]
            elif bit_depth == 4:
                nibbles = np.empty((rows, stride * 2), dtype=np.uint8)
                nibbles[:, 0::2] = raw >> 4
                nibbles[:, 1::2] = raw & 0x0F
                indices = nibbles[:, :width]
            else:
                indices = np.unpackbits(raw, axis=1)[:, :width]

            table = palette.as_array()
            highest = int(indices.max())
            if highest >= len(table):
                raise InvalidPaletteIndex("Pixel refers to palette entry {}, palette holds {}".format(
                    highest, len(table)))
            pixels = table[indices]

        elif bit_depth == 16:
            words = raw[:, :width * 2].copy().view("<u2")
            pixels = np.empty((rows, width, 4), dtype=np.uint8)
            pixels[..., 0] = _expand_5bit((words >> 10) & 0x1F)
            pixels[..., 1] = _expand_5bit((words >> 5) & 0x1F)
            pixels[..., 2] = _expand_5bit(words & 0x1F)
            pixels[..., 3] = 255

        elif bit_depth == 24:
            bgr = raw[:, :width * 3].reshape(rows, width, 3)
            pixels = np.empty((rows, width, 4), dtype=np.uint8)
            pixels[..., :3] = bgr[..., ::-1]
            pixels[..., 3] = 255

        else:
            pixels = raw[:, :width * 4].reshape(rows, width, 4)[..., [2, 1, 0, 3]]

        return cls(pixels, top_down=info_header.is_top_down)

    def encode(self, bit_depth, palette):
        """
        Pack the pixels at the given depth, each row zero padded to a multiple of 4 bytes.

        :param bit_depth: Target bits per pixel
        :param palette: RgbQuad that indexed pixels are looked up in
        :return: bytes
        """
        bit_depth = BitDepth.parse(bit_depth)
        rows, width = self.height, self.width

        if bit_depth.is_indexed:
            indices = palette.index_of(self.pixels).astype(np.uint8)
            if bit_depth == 8:
                packed = indices
            elif bit_depth == 4:
                if width % 2:
                    indices = np.hstack([indices, np.zeros((rows, 1), dtype=np.uint8)])
                packed = (indices[:, 0::2] << 4) | indices[:, 1::2]
            else:
                packed = np.packbits(indices, axis=1)

        elif bit_depth == 16:
            channels = self.pixels.astype(np.uint16)
            words = ((channels[..., 0] >> 3) << 10) | ((channels[..., 1] >> 3) << 5) | (channels[..., 2] >> 3)
            packed = words.astype("<u2").view(np.uint8).reshape(rows, width * 2)

        elif bit_depth == 24:
            packed = self.pixels[..., [2, 1, 0]].reshape(rows, width * 3)

        else:
            packed = self.pixels[..., [2, 1, 0, 3]].reshape(rows, width * 4)

        out = np.zeros((rows, row_stride(width, bit_depth)), dtype=np.uint8)
        out[:, :packed.shape[1]] = packed
        return out.tobytes()

    def __eq__(self, other):
        if not isinstance(other, BitMap):
            return NotImplemented
        return self.top_down == other.top_down and np.array_equal(self.pixels, other.pixels)

    def __repr__(self):
        return "BitMap({}x{}, top_down={})".format(self.width, self.height, self.top_down)


class Image(namedtuple("Image", ["bitmap", "bit_depth", "x_pixels_per_meter", "y_pixels_per_meter"],
                       defaults=(None, None, None))):
    """A decoded picture: the pixel grid plus the header values a re-encode needs."""
    __slots__ = ()

    @property
    def width(self):
        return self.bitmap.width

    @property
    def height(self):
        return self.bitmap.height
