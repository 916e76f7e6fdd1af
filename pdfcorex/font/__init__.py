"""TrueType support: parsing, subsetting and the installed font cache."""

from .install import install_true_type_font, installed_fonts, load_font, subset_installed_font
from .subset import subset
from .truetype import TTFLight, parse_font_file, to_pdf_glyph_space

__all__ = [
    "TTFLight",
    "install_true_type_font",
    "installed_fonts",
    "load_font",
    "parse_font_file",
    "subset",
    "subset_installed_font",
    "to_pdf_glyph_space",
]
