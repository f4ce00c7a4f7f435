import unittest
from bmpcodec import bmp_codecs
from construct import Container


class TestBmpCodecs(unittest.TestCase):

    def test_layout_sizes(self):
        self.assertEqual(bmp_codecs.FILE_HEADER_SIZE, 14)
        self.assertEqual(bmp_codecs.INFO_HEADER_SIZE, 40)
        self.assertEqual(bmp_codecs.RGB_QUAD_SIZE, 4)

    def test_file_header(self):
        pkt = b'BMF\x00\x00\x00\x00\x00\x00\x006\x00\x00\x00'
        decoded_pkt = Container(magic=b'BM', file_size=70, reserved1=0, reserved2=0, pixel_data_offset=54)

        self.assertEqual(bmp_codecs.file_header.parse(pkt), decoded_pkt)
        self.assertEqual(bmp_codecs.file_header.build(decoded_pkt), pkt)

    def test_info_header(self):
        pkt = b'(\x00\x00\x00\x03\x00\x00\x00\xfe\xff\xff\xff\x01\x00\x18\x00\x00\x00\x00\x00' \
              b'\x18\x00\x00\x00\x13\x0b\x00\x00\x13\x0b\x00\x00\x00\x00\x00\x00\x00\x00\x00\x00'
        decoded = bmp_codecs.info_header.parse(pkt)

        self.assertEqual(decoded.header_size, 40)
        self.assertEqual(decoded.width, 3)
        self.assertEqual(decoded.height, -2)
        self.assertEqual(decoded.bit_depth, 24)
        self.assertEqual(decoded.compression, 'BI_RGB')
        self.assertEqual(decoded.image_size, 24)
        self.assertEqual(decoded.x_pixels_per_meter, 2835)
        self.assertEqual(bmp_codecs.info_header.build(decoded), pkt)

    def test_compression_enum(self):
        self.assertEqual(bmp_codecs.compression.parse(b'\x01\x00\x00\x00'), 'BI_RLE8')
        self.assertEqual(bmp_codecs.compression.build('BI_BITFIELDS'), b'\x03\x00\x00\x00')
        self.assertEqual(bmp_codecs.compression.parse(b'\x63\x00\x00\x00'), 99)

    def test_rgb_quad_is_stored_blue_first(self):
        pkt = bmp_codecs.rgb_quad.build(Container(red=1, green=2, blue=3, alpha=4))
        self.assertEqual(pkt, b'\x03\x02\x01\x04')


if __name__ == '__main__':
    unittest.main()
