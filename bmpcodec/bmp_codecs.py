from construct import Struct, Bytes, Byte, Enum, Int16ul, Int32ul, Int32sl

compression = Enum(Int32ul,
                   BI_RGB=0, BI_RLE8=1, BI_RLE4=2, BI_BITFIELDS=3, BI_JPEG=4, BI_PNG=5,
                   BI_ALPHABITFIELDS=6, BI_CMYK=11, BI_CMYKRLE8=12, BI_CMYKRLE4=13)

# Magic is left as raw bytes; checking it is the orchestrator's job.
file_header = Struct(
    "magic" / Bytes(2),
    "file_size" / Int32ul,
    "reserved1" / Int16ul,
    "reserved2" / Int16ul,
    "pixel_data_offset" / Int32ul
)

# The common BITMAPINFOHEADER prefix shared by every supported DIB variant.
info_header = Struct(
    "header_size" / Int32ul,
    "width" / Int32sl,
    "height" / Int32sl,
    "planes" / Int16ul,
    "bit_depth" / Int16ul,
    "compression" / compression,
    "image_size" / Int32ul,
    "x_pixels_per_meter" / Int32sl,
    "y_pixels_per_meter" / Int32sl,
    "colors_used" / Int32ul,
    "colors_important" / Int32ul
)

# On disk a palette entry is blue, green, red, then the reserved/alpha byte.
rgb_quad = Struct(
    "blue" / Byte,
    "green" / Byte,
    "red" / Byte,
    "alpha" / Byte
)

FILE_HEADER_SIZE = file_header.sizeof()
INFO_HEADER_SIZE = info_header.sizeof()
RGB_QUAD_SIZE = rgb_quad.sizeof()
