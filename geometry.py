import numpy as np
from utils import vec, sub, dot, length_squared


class Hit:
    def __init__(self, point, normal, color, dist_sq):
        """Create a Hit with the given data.

        Parameters:
          point : (3,) -- the 3D point where the intersection happens
          normal : (3,) -- the outward normal at the hit point (not normalized)
          color : (4,) -- the RGBA color of the surface that was hit
          dist_sq : float -- squared distance from the ray origin to the point
        """
        self.point = point
        self.normal = normal
        self.color = color
        self.dist_sq = dist_sq


def _roots(a, b, disc, exact):
    # By default the roots are formed from the raw discriminant, not its square root.
    # exact=True uses the textbook sqrt(disc) instead.
    d = np.sqrt(disc) if exact else disc
    return (-b + d) / (2.0 * a), (-b - d) / (2.0 * a)


class Sphere:

    def __init__(self, center, radius, color):
        """Create a sphere with the given center and radius.

        Parameters:
          center : (3,) -- a 3D point specifying the sphere's center
          radius : float -- a Python float specifying the sphere's radius
          color : (3,) or (4,) -- RGB(A) color, each channel in [0, 1]
        """
        if len(color) == 3:
            color = list(color) + [1.0]
        elif len(color) != 4:
            raise ValueError(f"sphere color needs 3 or 4 channels, got {len(color)}")
        self.center = vec(center)
        self.radius = float(radius)
        self.color = vec(color)

    def normal_at(self, point):
        """Outward normal at a surface point, left unnormalized."""
        return sub(point, self.center)

    def intersect(self, ray, exact=False):
        """Computes the intersections of a ray with this sphere.

        Parameters:
          ray : Ray -- the ray to intersect with the sphere
          exact : bool -- use the standard quadratic formula for the roots
        Return:
          list of 0-2 world-space points, in the order t1, t2, each in front
          of the ray origin (t > 0)
        """
        a = length_squared(ray.direction)
        if a == 0.0:
            return []
        co = ray.origin - self.center
        b = 2.0 * dot(co, ray.direction)
        c = length_squared(co) - self.radius ** 2

        disc = b ** 2 - 4.0 * a * c
        if disc < 0:
            return []
        if disc == 0:
            ts = [-b / (2.0 * a)]
        else:
            ts = _roots(a, b, disc, exact)

        return [vec(ray.origin + t * ray.direction) for t in ts if t > 0]

    def intersect_batch(self, origin, directions, exact=False):
        """Vectorized intersection of N rays sharing one origin.

        Parameters:
          origin : (3,) -- common ray origin
          directions : (N, 3) -- unnormalized ray directions
        Return:
          (N,) array of the nearest forward t per ray, np.inf where there is none
        """
        directions = np.asarray(directions, dtype=np.float64)
        co = np.asarray(origin, dtype=np.float64) - self.center
        a = np.einsum('ij,ij->i', directions, directions)
        b = 2.0 * (directions @ co)
        c = np.dot(co, co) - self.radius ** 2

        t_values = np.full(a.shape, np.inf)
        with np.errstate(divide='ignore', invalid='ignore'):
            disc = b ** 2 - 4.0 * a * c
            valid = (a != 0.0) & (disc >= 0)
            t1, t2 = _roots(a, b, np.where(disc > 0, disc, 0.0), exact)

        for t in (t1, t2):
            ok = valid & (t > 0)
            t_values[ok] = np.minimum(t_values[ok], t[ok])
        return t_values
