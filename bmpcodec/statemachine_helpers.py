from bmpcodec.color import BitDepth


def bit_depth_is_indexed(context):
    return BitDepth(context["info_header"].bit_depth).is_indexed


def pixel_data_decoded(context):
    return "bitmap" in context
