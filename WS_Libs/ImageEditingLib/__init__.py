"""
ImageEditingLib - Core raster operations

Template segmentation, mask-constrained text fill, bucket fill and HSL
color adjustment, plus the image decode/encode helpers they share.
"""

from WS_Libs.ImageEditingLib.image_models import RgbColor, RgbaColor, SegmentationResult
from WS_Libs.ImageEditingLib.image_io import decode_png, encode_png, load_image
from WS_Libs.ImageEditingLib.template_mask import TemplateMaskConfig, segment
from WS_Libs.ImageEditingLib.text_fill import TextFillConfig, synthesize_text_pattern
from WS_Libs.ImageEditingLib.bucket_fill import BucketFillConfig, flood_fill_with_config
from WS_Libs.ImageEditingLib.color_adjustment import ColorAdjustments, adjust_colors

__all__ = [
    "RgbColor",
    "RgbaColor",
    "SegmentationResult",
    "decode_png",
    "encode_png",
    "load_image",
    "TemplateMaskConfig",
    "segment",
    "TextFillConfig",
    "synthesize_text_pattern",
    "BucketFillConfig",
    "flood_fill_with_config",
    "ColorAdjustments",
    "adjust_colors",
]
