import logging
from collections import namedtuple
from construct import Container
from bmpcodec import bmp_codecs
from bmpcodec.byte_helpers import ByteCursor
from bmpcodec.errors import UnsupportedFormat

logger = logging.getLogger(__name__)


class FileHeader(namedtuple("FileHeader", ["magic", "file_size", "reserved1", "reserved2", "pixel_data_offset"])):
    """The fixed 14 byte structure at the start of every BMP file."""
    __slots__ = ()

    BYTE_SIZE = bmp_codecs.FILE_HEADER_SIZE

    @classmethod
    def new(cls, file_size, pixel_data_offset):
        return cls(magic=b"BM", file_size=file_size, reserved1=0, reserved2=0,
                   pixel_data_offset=pixel_data_offset)

    @classmethod
    def decode(cls, data, offset=0):
        """
        Parse a file header. The magic is not checked here.

        :param data: The BMP byte stream
        :param offset: Where the header starts
        :return: FileHeader
        """
        parsed = ByteCursor(data, offset).parse(bmp_codecs.file_header, cls.BYTE_SIZE)
        header = cls(magic=parsed.magic, file_size=parsed.file_size, reserved1=parsed.reserved1,
                     reserved2=parsed.reserved2, pixel_data_offset=parsed.pixel_data_offset)
        logger.debug("File header: {}".format(header))
        return header

    def encode(self):
        return bmp_codecs.file_header.build(Container(self._asdict()))

    def __str__(self):
        return "Type: {}, Size: {}, res1: {}, res2: {}, offset: {}".format(
            self.magic.decode("latin-1"), self.file_size, self.reserved1, self.reserved2,
            self.pixel_data_offset)


class InfoHeader(namedtuple("InfoHeader", ["header_size", "width", "height", "planes", "bit_depth",
                                           "compression", "image_size", "x_pixels_per_meter",
                                           "y_pixels_per_meter", "raw_colors_used", "colors_important",
                                           "extra"])):
    """
    The DIB header. Only the 40 byte BITMAPINFOHEADER prefix is interpreted;
    any bytes a larger variant carries after it are kept in extra.
    """
    __slots__ = ()

    BYTE_SIZE = bmp_codecs.INFO_HEADER_SIZE

    @classmethod
    def new(cls, width, height, bit_depth, image_size, colors_used, x_pixels_per_meter, y_pixels_per_meter):
        return cls(header_size=cls.BYTE_SIZE, width=width, height=height, planes=1,
                   bit_depth=int(bit_depth), compression="BI_RGB", image_size=image_size,
                   x_pixels_per_meter=x_pixels_per_meter, y_pixels_per_meter=y_pixels_per_meter,
                   raw_colors_used=colors_used, colors_important=0, extra=b"")

    @classmethod
    def decode(cls, data, offset=bmp_codecs.FILE_HEADER_SIZE):
        cursor = ByteCursor(data, offset)
        header_size = ByteCursor(data, offset).read_u32()
        if header_size < cls.BYTE_SIZE:
            raise UnsupportedFormat("DIB header of {} bytes is not supported, need at least {}".format(
                header_size, cls.BYTE_SIZE))

        parsed = cursor.parse(bmp_codecs.info_header, cls.BYTE_SIZE)
        extra = cursor.read_bytes(header_size - cls.BYTE_SIZE)
        if extra:
            logger.info("Keeping {} trailing bytes of a {} byte DIB header".format(len(extra), header_size))

        header = cls(header_size=parsed.header_size, width=parsed.width, height=parsed.height,
                     planes=parsed.planes, bit_depth=parsed.bit_depth, compression=parsed.compression,
                     image_size=parsed.image_size, x_pixels_per_meter=parsed.x_pixels_per_meter,
                     y_pixels_per_meter=parsed.y_pixels_per_meter, raw_colors_used=parsed.colors_used,
                     colors_important=parsed.colors_important, extra=extra)
        logger.debug("Info header: {}".format(header))
        return header

    @property
    def colors_used(self):
        """Palette entry count, with a raw 0 meaning 2 ** bit_depth for indexed depths."""
        if self.raw_colors_used == 0 and self.bit_depth <= 8:
            return 1 << self.bit_depth
        return self.raw_colors_used

    @property
    def is_top_down(self):
        return self.height < 0

    @property
    def row_count(self):
        return abs(self.height)

    def encode(self):
        fields = self._asdict()
        fields["colors_used"] = fields.pop("raw_colors_used")
        fields.pop("extra")
        return bmp_codecs.info_header.build(Container(fields)) + self.extra

    def __str__(self):
        return "Size: {}, {}x{}, planes: {}, bpp: {}, compression: {}, image size: {}, " \
               "res: {}x{}, colors used: {}, important: {}".format(
                   self.header_size, self.width, self.height, self.planes, self.bit_depth,
                   self.compression, self.image_size, self.x_pixels_per_meter,
                   self.y_pixels_per_meter, self.raw_colors_used, self.colors_important)
