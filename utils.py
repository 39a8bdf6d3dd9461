import numpy as np


def vec(list):
    """Handy shorthand to make a read-only double-precision float array."""
    v = np.array(list, dtype=np.float64)
    v.flags.writeable = False
    return v

def pt(x, y, z):
    """Shorthand for a 3D point (or direction)."""
    return vec([x, y, z])


def add(a, b):
    return vec(np.add(a, b))

def sub(a, b):
    return vec(np.subtract(a, b))

def scale(a, s):
    return vec(np.multiply(a, s))

def dot(a, b):
    return float(np.dot(a, b))

def length_squared(a):
    """Squared length of a vector. Compare distances with this, not with a norm."""
    return dot(a, a)


def to_rgba8(color, light):
    """Scale a color by the accumulated light and quantize it to 8 bits.

    Parameters:
      color : (3,) or (4,) or (n, 4) -- base color(s) in [0, 1]
      light : float or (n,) -- total light intensity, unclamped

    The RGB channels are rounded and clamped to [0, 255]; alpha is always opaque.
    """
    color = np.asarray(color, dtype=np.float64)
    light = np.asarray(light, dtype=np.float64)
    rgb = color[..., :3] * light[..., np.newaxis] * 255.0
    out = np.empty(rgb.shape[:-1] + (4,), dtype=np.uint8)
    out[..., :3] = np.clip(np.round(rgb), 0, 255).astype(np.uint8)
    out[..., 3] = 255
    return out
