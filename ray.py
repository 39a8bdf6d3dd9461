import numpy as np
from geometry import Sphere, Hit
from utils import *

"""
Core implementation of the ray caster.
"""

IMAGE_WIDTH = 1920
IMAGE_HEIGHT = 1080

# world-space size of the viewport and its distance from the camera along +z
VIEWPORT_WIDTH = 1.980
VIEWPORT_HEIGHT = 1.080
VIEWPORT_DISTANCE = 1.0

BACKGROUND = np.array([0, 0, 0, 255], dtype=np.uint8)


class Ray:

    def __init__(self, origin, direction):
        """Create a ray with the given origin and direction.

        The direction is kept as given; its length matters for the intersection math.
        """
        self.origin = vec(origin)
        self.direction = vec(direction)


class Viewport:

    def __init__(self, camera=pt(0, 0, 0), center=pt(0, 0, VIEWPORT_DISTANCE),
                 width=VIEWPORT_WIDTH, height=VIEWPORT_HEIGHT):
        """Create a viewport: the window in world space that rays are cast through.

        The camera looks along +z with +y up and +x right. The viewport size is
        fixed in world units and does not depend on the image resolution.
        """
        self.camera = vec(camera)
        self.center = vec(center)
        self.width = width
        self.height = height

        # top left corner of the viewport
        self.origin = add(self.center, pt(-width / 2.0, height / 2.0, 0.0))

    def point_on_viewport(self, x, y, nx, ny):
        """World coordinate that the image pixel (x, y) maps to."""
        return add(self.origin, pt(self.width * (x / nx), -self.height * (y / ny), 0.0))

    def generate_ray(self, x, y, nx, ny):
        """Compute the ray through pixel (x, y) of an nx by ny image."""
        return Ray(self.camera, sub(self.point_on_viewport(x, y, nx, ny), self.camera))

    def generate_rays(self, y, nx, ny):
        """Directions of the rays through every pixel of row y, shape (nx, 3)."""
        xs = np.arange(nx, dtype=np.float64)
        points = np.empty((nx, 3))
        points[:, 0] = self.origin[0] + self.width * (xs / nx)
        points[:, 1] = self.origin[1] + -self.height * (y / ny)
        points[:, 2] = self.origin[2] + 0.0
        return points - self.camera


class AmbientLight:

    def __init__(self, intensity):
        """Create an ambient light of given intensity
        """
        self.intensity = intensity

    def illuminate(self, normal, point):
        return self.intensity


def _falloff(intensity, normal, light_vec):
    # inverse-distance falloff, zero for surfaces facing away
    alignment = dot(normal, light_vec)
    dist_sq = length_squared(light_vec)
    if alignment < 0 or dist_sq == 0:
        return 0.0
    return intensity * (alignment / np.sqrt(dist_sq))


class PointLight:

    def __init__(self, intensity, position):
        """Create a point light at given position and with given intensity"""
        self.intensity = intensity
        self.position = vec(position)

    def illuminate(self, normal, point):
        """Compute the light reaching a surface point with the given normal."""
        return _falloff(self.intensity, normal, sub(self.position, point))


class DirectionalLight:

    def __init__(self, intensity, direction, position=None):
        """Create a light shining along direction from infinitely far away.

        position is accepted for symmetry with PointLight and is not used.
        """
        self.intensity = intensity
        self.direction = vec(direction)
        self.position = None if position is None else vec(position)

    def illuminate(self, normal, point):
        """Compute the light reaching a surface with the given normal.

        The falloff uses the length of the direction vector, so it is the same
        everywhere in the scene.
        """
        return _falloff(self.intensity, normal, scale(self.direction, -1.0))


class Scene:

    def __init__(self, spheres, lights, viewport=None, bg_color=BACKGROUND):
        """Create a scene containing the given spheres and lights.
        """
        self.spheres = list(spheres)
        self.lights = list(lights)
        self.viewport = viewport if viewport is not None else Viewport()
        self.bg_color = np.array(bg_color, dtype=np.uint8)

    @property
    def camera(self):
        return self.viewport.camera

    def intersect(self, ray, exact=False):
        """Computes the nearest intersection between a ray and the scene.

        Every sphere is tested. Returns a Hit, or None if the ray hits nothing.
        """
        nearest = None
        for sphere in self.spheres:
            for point in sphere.intersect(ray, exact=exact):
                dist_sq = length_squared(sub(point, ray.origin))
                if nearest is None or dist_sq < nearest.dist_sq:
                    nearest = Hit(point, sphere.normal_at(point), sphere.color, dist_sq)
        return nearest

    def illuminate(self, hit):
        """Total light arriving at a hit, summed over all lights and not clamped."""
        total_light = 0.0
        for light in self.lights:
            total_light += light.illuminate(hit.normal, hit.point)
        return total_light

    def shade(self, hit):
        """RGBA8 color of a pixel whose ray produced hit (or None)."""
        if hit is None:
            return self.bg_color.copy()
        return to_rgba8(hit.color, self.illuminate(hit))

    def trace_pixel(self, x, y, nx, ny, exact=False):
        ray = self.viewport.generate_ray(x, y, nx, ny)
        return self.shade(self.intersect(ray, exact=exact))

    def trace_row(self, y, nx, ny, exact=False):
        """Vectorized equivalent of trace_pixel over a whole image row."""
        origin = self.camera
        directions = self.viewport.generate_rays(y, nx, ny)

        row = np.empty((nx, 4), dtype=np.uint8)
        row[:] = self.bg_color
        if not self.spheres:
            return row

        a = np.einsum('ij,ij->i', directions, directions)
        best_t = np.full(nx, np.inf)
        best_dist = np.full(nx, np.inf)
        best_index = np.full(nx, -1)
        for i, sphere in enumerate(self.spheres):
            t = sphere.intersect_batch(origin, directions, exact=exact)
            with np.errstate(invalid='ignore'):
                dist_sq = t * t * a
            closer = dist_sq < best_dist
            best_t[closer] = t[closer]
            best_dist[closer] = dist_sq[closer]
            best_index[closer] = i

        for x in np.nonzero(best_index >= 0)[0]:
            sphere = self.spheres[best_index[x]]
            point = vec(origin + best_t[x] * directions[x])
            hit = Hit(point, sphere.normal_at(point), sphere.color, best_dist[x])
            row[x] = self.shade(hit)
        return row


class _Progress:
    """Prints a line whenever the completed percentage crosses a whole number."""

    def __init__(self, total, verbose=True):
        self.total = total
        self.verbose = verbose
        self.done = 0
        self.reported = 0

    def advance(self, n=1):
        self.done += n
        pct = (100 * self.done) // self.total
        if self.verbose and pct > self.reported:
            self.reported = pct
            print(f"2 / 3 | Casting rays... {pct}%")


def render_image(scene, nx=IMAGE_WIDTH, ny=IMAGE_HEIGHT, verbose=True, vectorized=False, exact=False):
    """
    Render the scene to an (ny, nx, 4) array of 8-bit RGBA pixels.

    Every pixel is a pure function of the scene and its coordinates.
    vectorized=True processes a whole row per step with numpy.
    exact=True uses the standard quadratic formula for sphere hits.
    """
    if int(nx) != nx or int(ny) != ny or nx <= 0 or ny <= 0:
        raise ValueError(f"image size must be positive integers, got {nx}x{ny}")
    nx, ny = int(nx), int(ny)

    if verbose:
        print("Beginning Render...")
    output_image = np.zeros((ny, nx, 4), np.uint8)
    if verbose:
        print("1 / 3 | Generated blank image buffer... ")

    progress = _Progress(nx * ny, verbose)
    for y in range(ny):
        if vectorized:
            output_image[y] = scene.trace_row(y, nx, ny, exact=exact)
            progress.advance(nx)
            continue
        for x in range(nx):
            output_image[y, x] = scene.trace_pixel(x, y, nx, ny, exact=exact)
            progress.advance()

    return output_image
