# python/brdflut/__init__.py
# Public API for split-sum BRDF lookup table generation
"""
brdflut: precompute the split-sum environment BRDF lookup table.

Each texel stores the scale ``A`` and bias ``B`` applied to the specular
reflectance at render time, ``specular = prefiltered * (F0 * A + B)``,
for the GGX distribution with Smith shadowing-masking and Fresnel-Schlick.
"""

from .sequence import SamplePoint, radical_inverse_vdc, hammersley, hammersley_points
from .sampling import REFERENCE_NORMAL, tangent_frame, importance_sample_ggx, importance_sample_ggx_batch
from .masking import geometry_schlick_ggx, geometry_smith
from .integrate import IntegrationInputs, IntegrationResult, integrate_brdf, integrate_brdf_reference
from .lut import LutImage, BrdfLutBuilder, build_brdf_lut, generate_brdf_lut_file, pixel_parameters
from .texture import (
    TextureFormat,
    TextureFormatError,
    TextureWriteError,
    Texture2D,
    pack_half2x16,
    unpack_half2x16,
    save_texture,
    load_texture,
)
from .config import LutConfig, load_lut_config

__version__ = "0.1.0"

__all__ = [
    "SamplePoint",
    "radical_inverse_vdc",
    "hammersley",
    "hammersley_points",
    "REFERENCE_NORMAL",
    "tangent_frame",
    "importance_sample_ggx",
    "importance_sample_ggx_batch",
    "geometry_schlick_ggx",
    "geometry_smith",
    "IntegrationInputs",
    "IntegrationResult",
    "integrate_brdf",
    "integrate_brdf_reference",
    "LutImage",
    "BrdfLutBuilder",
    "build_brdf_lut",
    "generate_brdf_lut_file",
    "pixel_parameters",
    "TextureFormat",
    "TextureFormatError",
    "TextureWriteError",
    "Texture2D",
    "pack_half2x16",
    "unpack_half2x16",
    "save_texture",
    "load_texture",
    "LutConfig",
    "load_lut_config",
    "__version__",
]
