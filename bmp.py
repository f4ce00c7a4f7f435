from transitions import Machine
import logging
import coloredlogs
from bmpcodec import statemachine_helpers
from bmpcodec.bitmap_helpers import BitMap, Image
from bmpcodec.byte_helpers import ByteCursor
from bmpcodec.color import BitDepth
from bmpcodec.errors import BMPError, InvalidMagic, UnsupportedCompression, UnsupportedFormat
from bmpcodec.header_helpers import FileHeader, InfoHeader
from bmpcodec.palette_helpers import RgbQuad

BMP_MAGIC = b"BM"

# Parent of the bmpcodec.* helper loggers.
LOGGER_NAME = "bmpcodec"

DECODE_STATES = ['file_header', 'info_header', 'palette', 'pixel_data', 'done']


class BMPCodec:

    def __init__(self, log_level="INFO", default_bit_depth=BitDepth.TRUE_COLOR, pixels_per_meter=2835):
        self._initialiseLogging(log_level)

        self.default_bit_depth = BitDepth.parse(default_bit_depth)
        self.pixels_per_meter = pixels_per_meter

        self._section_parsers = {
            'file_header': self._parse_file_header,
            'info_header': self._parse_info_header,
            'palette': self._parse_palette,
            'pixel_data': self._parse_pixel_data
        }

    def _initialiseLogging(self, log_level):
        self.logger = logging.getLogger(LOGGER_NAME)
        self.logger.setLevel(log_level)
        coloredlogs.install(level=log_level, logger=self.logger)

    def _build_decode_machine(self):
        transitions = [
            {'trigger': 'section_parsed', 'source': 'file_header', 'dest': 'info_header'},
            {'trigger': 'section_parsed', 'conditions': statemachine_helpers.bit_depth_is_indexed,
             'source': 'info_header', 'dest': 'palette'},
            {'trigger': 'section_parsed', 'unless': statemachine_helpers.bit_depth_is_indexed,
             'source': 'info_header', 'dest': 'pixel_data'},
            {'trigger': 'section_parsed', 'source': 'palette', 'dest': 'pixel_data'},
            {'trigger': 'section_parsed', 'conditions': statemachine_helpers.pixel_data_decoded,
             'source': 'pixel_data', 'dest': 'done'}
        ]

        return Machine(states=DECODE_STATES, transitions=transitions, initial='file_header')

    def decode(self, data):
        """
        Decode a BMP byte stream.

        :param data: The complete file contents
        :return: Image
        """
        context = {'data': data}
        fsm = self._build_decode_machine()

        try:
            while fsm.state != 'done':
                self._section_parsers[fsm.state](context)
                fsm.section_parsed(context=context)
        except BMPError as e:
            self.logger.error("Could not decode BMP ({}): {}".format(type(e).__name__, e))
            raise

        info_header = context['info_header']
        image = Image(bitmap=context['bitmap'], bit_depth=BitDepth(info_header.bit_depth),
                      x_pixels_per_meter=info_header.x_pixels_per_meter,
                      y_pixels_per_meter=info_header.y_pixels_per_meter)

        self.logger.info("Decoded a {}x{} image at {} bpp".format(image.width, image.height, info_header.bit_depth))
        return image

    def _parse_file_header(self, context):
        magic = ByteCursor(context['data']).peek(len(BMP_MAGIC))
        if magic != BMP_MAGIC:
            raise InvalidMagic("Expected {!r}, found {!r}".format(BMP_MAGIC, magic))

        context['file_header'] = FileHeader.decode(context['data'])

    def _parse_info_header(self, context):
        info_header = InfoHeader.decode(context['data'], offset=FileHeader.BYTE_SIZE)

        if info_header.compression != "BI_RGB":
            raise UnsupportedCompression("Can't handle compression {}".format(info_header.compression))
        BitDepth.parse(info_header.bit_depth)
        if info_header.width <= 0 or info_header.height == 0:
            raise UnsupportedFormat("Invalid geometry {}x{}".format(info_header.width, info_header.height))

        context['info_header'] = info_header

    def _parse_palette(self, context):
        context['palette'] = RgbQuad.decode(context['data'], context['file_header'], context['info_header'])

    def _parse_pixel_data(self, context):
        # The file header offset is authoritative; headers may carry metadata past the palette.
        context['bitmap'] = BitMap.decode(context['data'], context['file_header'].pixel_data_offset,
                                          context['info_header'], context.get('palette', RgbQuad.empty()))

    def encode(self, image, bit_depth=None):
        """
        Encode an image as a BMP byte stream.

        :param image: Image, or a bare BitMap
        :param bit_depth: Target bits per pixel; defaults to the image's own depth, then the codec's
        :return: bytes
        """
        if isinstance(image, BitMap):
            image = Image(bitmap=image)

        if bit_depth is None:
            bit_depth = image.bit_depth if image.bit_depth is not None else self.default_bit_depth
        bitmap = image.bitmap

        try:
            bit_depth = BitDepth.parse(bit_depth)
            palette = RgbQuad.from_image(bitmap, bit_depth)
        except BMPError as e:
            self.logger.error("Could not encode BMP ({}): {}".format(type(e).__name__, e))
            raise

        pixel_bytes = bitmap.encode(bit_depth, palette)
        pixel_data_offset = FileHeader.BYTE_SIZE + InfoHeader.BYTE_SIZE + palette.byte_size()

        file_header = FileHeader.new(file_size=pixel_data_offset + len(pixel_bytes),
                                     pixel_data_offset=pixel_data_offset)
        info_header = InfoHeader.new(
            width=bitmap.width,
            height=-bitmap.height if bitmap.top_down else bitmap.height,
            bit_depth=bit_depth,
            image_size=len(pixel_bytes),
            colors_used=len(palette),
            x_pixels_per_meter=self._resolution(image.x_pixels_per_meter),
            y_pixels_per_meter=self._resolution(image.y_pixels_per_meter)
        )

        self.logger.info("Encoding a {}x{} image at {} bpp, {} bytes".format(
            bitmap.width, bitmap.height, int(bit_depth), file_header.file_size))

        return b"".join([file_header.encode(), info_header.encode(), palette.encode(), pixel_bytes])

    def _resolution(self, value):
        return self.pixels_per_meter if value is None else value


_default_codec = BMPCodec()


def decode(data):
    return _default_codec.decode(data)


def encode(image, bit_depth=None):
    return _default_codec.encode(image, bit_depth)
