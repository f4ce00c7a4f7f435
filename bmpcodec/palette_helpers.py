import logging
import numpy as np
from bmpcodec import bmp_codecs
from bmpcodec.bitmap_helpers import color_keys
from bmpcodec.byte_helpers import ByteCursor
from bmpcodec.color import Rgba, BitDepth
from bmpcodec.errors import Truncated, PaletteOverflow, InvalidPaletteIndex

logger = logging.getLogger(__name__)


class RgbQuad:
    """The colour table of an indexed bitmap. Empty for direct-colour depths."""

    def __init__(self, colors=None):
        self._colors = [Rgba(*color) for color in (colors or [])]

    @classmethod
    def empty(cls):
        return cls()

    @classmethod
    def decode(cls, data, file_header, info_header):
        """
        Read info_header.colors_used entries following the info header.

        :param data: The BMP byte stream
        :param file_header: Parsed FileHeader
        :param info_header: Parsed InfoHeader
        :return: RgbQuad
        """
        offset = file_header.BYTE_SIZE + info_header.header_size
        count = info_header.colors_used
        if offset + count * bmp_codecs.RGB_QUAD_SIZE > len(data):
            raise Truncated("Palette of {} entries at offset {} runs past the end of the buffer".format(
                count, offset))

        cursor = ByteCursor(data, offset)
        colors = []
        for _ in range(count):
            entry = cursor.parse(bmp_codecs.rgb_quad, bmp_codecs.RGB_QUAD_SIZE)
            colors.append(Rgba.bgra(entry.blue, entry.green, entry.red, entry.alpha))

        logger.debug("Read {} palette entries".format(len(colors)))
        return cls(colors)

    @classmethod
    def from_image(cls, bitmap, bit_depth):
        """
        Build the palette an encode at bit_depth needs: the distinct colours of
        the bitmap in first-seen order for indexed depths, nothing otherwise.
        """
        bit_depth = BitDepth.parse(bit_depth)
        if not bit_depth.is_indexed:
            return cls.empty()

        colors = bitmap.get_all_unique_colors()
        if len(colors) > bit_depth.palette_capacity:
            raise PaletteOverflow("{} distinct colors do not fit a {} bpp palette of {}".format(
                len(colors), int(bit_depth), bit_depth.palette_capacity))

        logger.info("Built a palette of {} colors for {} bpp".format(len(colors), int(bit_depth)))
        return cls(colors)

    def byte_size(self):
        return bmp_codecs.RGB_QUAD_SIZE * len(self._colors)

    def encode(self):
        return b"".join(bmp_codecs.rgb_quad.build(color._asdict()) for color in self._colors)

    def clone_colors(self):
        return list(self._colors)

    def as_array(self):
        return np.array(self._colors, dtype=np.uint8).reshape(-1, 4)

    def index_of(self, pixels):
        """
        Map every RGBA pixel to the index of its colour in this palette.

        :param pixels: uint8 array of shape (..., 4)
        :return: int array shaped like pixels without the channel axis
        """
        if not self._colors:
            raise InvalidPaletteIndex("Cannot index pixels against an empty palette")

        keys = color_keys(pixels)
        palette_keys = color_keys(self.as_array())
        order = np.argsort(palette_keys, kind="stable")
        sorted_keys = palette_keys[order]

        position = np.minimum(np.searchsorted(sorted_keys, keys), len(sorted_keys) - 1)
        if not np.all(sorted_keys[position] == keys):
            raise InvalidPaletteIndex("Pixel colour is missing from the palette")
        return order[position]

    def __len__(self):
        return len(self._colors)

    def __iter__(self):
        return iter(self._colors)

    def __getitem__(self, index):
        return self._colors[index]

    def __eq__(self, other):
        if not isinstance(other, RgbQuad):
            return NotImplemented
        return self._colors == other._colors

    def __repr__(self):
        return "RgbQuad({!r})".format(self._colors)

    def __str__(self):
        return "".join("{}\n".format(color) for color in self._colors)
