import unittest
import numpy as np
from bmpcodec.bitmap_helpers import BitMap
from bmpcodec.color import Rgba, BitDepth
from bmpcodec.errors import PaletteOverflow, InvalidPaletteIndex, Truncated
from bmpcodec.header_helpers import FileHeader, InfoHeader
from bmpcodec.palette_helpers import RgbQuad

RED = Rgba(255, 0, 0, 0)
GREEN = Rgba(0, 255, 0, 0)
BLUE = Rgba(0, 0, 255, 0)


def distinct_colors(count):
    return np.array([[[i % 256, i // 256, 0, 0] for i in range(count)]], dtype=np.uint8)


class TestRgbQuad(unittest.TestCase):

    def test_decode_from_stream(self):
        file_header = FileHeader.new(file_size=0, pixel_data_offset=0)
        info_header = InfoHeader.new(width=1, height=1, bit_depth=8, image_size=4, colors_used=2,
                                     x_pixels_per_meter=0, y_pixels_per_meter=0)
        data = file_header.encode() + info_header.encode() + b'\x03\x02\x01\x00\x30\x20\x10\x7f'

        palette = RgbQuad.decode(data, file_header, info_header)

        self.assertEqual(palette.clone_colors(), [Rgba(1, 2, 3, 0), Rgba(0x10, 0x20, 0x30, 0x7f)])

    def test_decode_short_palette(self):
        file_header = FileHeader.new(file_size=0, pixel_data_offset=0)
        info_header = InfoHeader.new(width=1, height=1, bit_depth=4, image_size=4, colors_used=0,
                                     x_pixels_per_meter=0, y_pixels_per_meter=0)
        data = file_header.encode() + info_header.encode() + b'\x00' * 8

        with self.assertRaises(Truncated):
            RgbQuad.decode(data, file_header, info_header)

    def test_from_image_first_seen_order(self):
        bitmap = BitMap.from_colors([[GREEN, RED], [RED, BLUE]])
        palette = RgbQuad.from_image(bitmap, BitDepth.COLOR_16)

        self.assertEqual(palette.clone_colors(), [GREEN, RED, BLUE])
        self.assertEqual(palette, RgbQuad.from_image(bitmap, BitDepth.COLOR_16))

    def test_from_image_direct_color_is_empty(self):
        bitmap = BitMap.from_colors([[GREEN, RED], [RED, BLUE]])
        for bit_depth in (16, 24, 32):
            palette = RgbQuad.from_image(bitmap, bit_depth)
            self.assertEqual(len(palette), 0)
            self.assertEqual(palette.byte_size(), 0)
            self.assertEqual(palette.encode(), b'')

    def test_overflow(self):
        with self.assertRaises(PaletteOverflow):
            RgbQuad.from_image(BitMap(distinct_colors(257)), BitDepth.COLOR_256)
        with self.assertRaises(PaletteOverflow):
            RgbQuad.from_image(BitMap(distinct_colors(17)), BitDepth.COLOR_16)
        with self.assertRaises(PaletteOverflow):
            RgbQuad.from_image(BitMap(distinct_colors(3)), BitDepth.BW)

        self.assertEqual(len(RgbQuad.from_image(BitMap(distinct_colors(256)), BitDepth.COLOR_256)), 256)

    def test_encode(self):
        palette = RgbQuad([RED, Rgba(1, 2, 3, 4)])

        self.assertEqual(palette.byte_size(), 8)
        self.assertEqual(palette.encode(), b'\x00\x00\xff\x00\x03\x02\x01\x04')
        self.assertEqual(str(palette), "r: 255, g: 0, b: 0, a: 0\nr: 1, g: 2, b: 3, a: 4\n")

    def test_clone_colors_is_a_copy(self):
        palette = RgbQuad([RED])
        colors = palette.clone_colors()
        colors.append(BLUE)
        self.assertEqual(len(palette), 1)

    def test_index_of(self):
        palette = RgbQuad([BLUE, RED, GREEN])
        pixels = np.array([[RED, GREEN], [BLUE, RED]], dtype=np.uint8)

        np.testing.assert_array_equal(palette.index_of(pixels), [[1, 2], [0, 1]])

    def test_index_of_missing_color(self):
        palette = RgbQuad([BLUE])
        with self.assertRaises(InvalidPaletteIndex):
            palette.index_of(np.array([[RED]], dtype=np.uint8))
        with self.assertRaises(InvalidPaletteIndex):
            RgbQuad.empty().index_of(np.array([[RED]], dtype=np.uint8))


if __name__ == '__main__':
    unittest.main()
