"""Smith shadowing-masking term with the Schlick-GGX remapping."""


def geometry_schlick_ggx(n_dot_v, roughness):
    """Schlick-GGX ``G1`` with ``k = roughness**2 / 2``.

    Works on Python floats and on numpy arrays alike.
    """
    a = roughness
    k = (a * a) / 2.0
    return n_dot_v / (n_dot_v * (1.0 - k) + k)


def geometry_smith(n_dot_v, n_dot_l, roughness):
    """Joint shadowing-masking ``G1(NdotV) * G1(NdotL)``.

    Both cosines are expected to already be clamped to >= 0.
    """
    ggx_v = geometry_schlick_ggx(n_dot_v, roughness)
    ggx_l = geometry_schlick_ggx(n_dot_l, roughness)
    return ggx_l * ggx_v


__all__ = ["geometry_schlick_ggx", "geometry_smith"]
