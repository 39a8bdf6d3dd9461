import contextlib
import io
import os
import tempfile
import unittest
import numpy as np
from ray import *
from utils import vec, pt, add, sub, scale, dot, length_squared, to_rgba8
from ImLite import Image
import ExampleSceneDef
import cli


def quantized(color, light):
    # expected 8-bit RGBA for a base color under a given total light
    rgb = np.clip(np.round(np.asarray(color[:3]) * light * 255), 0, 255)
    return np.append(rgb, 255).astype(np.uint8)


def axis_ray(origin=(0.0, 0.0, 0.0), direction=(0.0, 0.0, 1.0)):
    return Ray(vec(origin), vec(direction))


class TestVectors(unittest.TestCase):

    def test_arithmetic(self):
        a = pt(1, 2, 3)
        b = pt(-4, 0.5, 2)
        np.testing.assert_allclose(add(a, b), [-3, 2.5, 5])
        np.testing.assert_allclose(sub(a, b), [5, 1.5, 1])
        np.testing.assert_allclose(scale(a, -2), [-2, -4, -6])
        self.assertAlmostEqual(dot(a, b), -4 + 1 + 6)
        self.assertAlmostEqual(length_squared(a), 14)

    def test_values_are_immutable(self):
        a = pt(1, 2, 3)
        with self.assertRaises(ValueError):
            a[0] = 5
        b = add(a, pt(1, 1, 1))
        np.testing.assert_allclose(a, [1, 2, 3])
        self.assertIsNot(a, b)

    def test_quantize_clamps_and_forces_alpha(self):
        np.testing.assert_array_equal(to_rgba8([0.5, 1.0, 0.0, 0.1], 1.0), [128, 255, 0, 255])
        np.testing.assert_array_equal(to_rgba8([0.9, 0.9, 0.9, 1.0], 3.0), [255, 255, 255, 255])
        np.testing.assert_array_equal(to_rgba8([0.9, 0.9, 0.9, 1.0], -1.0), [0, 0, 0, 255])


class TestSphereIntersect(unittest.TestCase):

    def test_center_hits(self):
        sphere = Sphere(pt(0, 0, 5), 1.0, [1, 1, 1])
        # unit and non-unit direction straight at the center
        for direction in [(0, 0, 1), (0, 0, 2)]:
            points = sphere.intersect(axis_ray(direction=direction), exact=True)
            self.assertEqual(len(points), 2)
            zs = sorted(p[2] for p in points)
            np.testing.assert_allclose(zs, [4.0, 6.0])

    def test_center_hits_off_axis(self):
        sphere = Sphere(pt(0, 0, 0), 1.0, [1, 1, 1])
        origin = pt(2, 3, 4)
        points = sphere.intersect(Ray(origin, pt(-2, -3, -4)), exact=True)
        self.assertEqual(len(points), 2)
        d = np.sqrt(29)
        dists = sorted(np.sqrt(length_squared(sub(p, origin))) for p in points)
        np.testing.assert_allclose(dists, [d - 1.0, d + 1.0])
        for p in points:
            self.assertAlmostEqual(np.sqrt(length_squared(sub(p, sphere.center))), sphere.radius)

    def test_default_roots_use_raw_discriminant(self):
        # a=1, b=-10, c=24, discriminant=4: roots (10 +- 4) / 2
        sphere = Sphere(pt(0, 0, 5), 1.0, [1, 1, 1])
        points = sphere.intersect(axis_ray())
        self.assertEqual(len(points), 2)
        np.testing.assert_allclose(points[0], [0, 0, 7])
        np.testing.assert_allclose(points[1], [0, 0, 3])

    def test_miss(self):
        sphere = Sphere(pt(2, 0, 5), 1.0, [1, 1, 1])
        self.assertEqual(sphere.intersect(axis_ray()), [])
        self.assertEqual(sphere.intersect(axis_ray(), exact=True), [])

    def test_tangent(self):
        sphere = Sphere(pt(1, 0, 5), 1.0, [1, 1, 1])
        points = sphere.intersect(axis_ray())
        self.assertEqual(len(points), 1)
        np.testing.assert_allclose(points[0], [0, 0, 5])
        # same tangent line, pointing away
        self.assertEqual(sphere.intersect(axis_ray(direction=(0, 0, -1))), [])

    def test_sphere_behind_origin(self):
        sphere = Sphere(pt(0, 0, -5), 1.0, [1, 1, 1])
        self.assertEqual(sphere.intersect(axis_ray()), [])
        self.assertEqual(sphere.intersect(axis_ray(), exact=True), [])

    def test_origin_inside(self):
        sphere = Sphere(pt(0, 0, 0), 1.0, [1, 1, 1])
        points = sphere.intersect(axis_ray(), exact=True)
        self.assertEqual(len(points), 1)
        np.testing.assert_allclose(points[0], [0, 0, 1])

    def test_degenerate_inputs(self):
        sphere = Sphere(pt(0, 0, 5), 1.0, [1, 1, 1])
        self.assertEqual(sphere.intersect(axis_ray(direction=(0, 0, 0))), [])
        # a zero radius sphere is a single point
        dot_sphere = Sphere(pt(0, 0, 5), 0.0, [1, 1, 1])
        points = dot_sphere.intersect(axis_ray())
        self.assertEqual(len(points), 1)
        np.testing.assert_allclose(points[0], [0, 0, 5])

    def test_negative_radius_acts_like_positive(self):
        positive = Sphere(pt(0, 0, 5), 1.0, [1, 1, 1])
        negative = Sphere(pt(0, 0, 5), -1.0, [1, 1, 1])
        directions = np.array([[0, 0, 1], [0.1, 0.05, 1], [1, 0, 0]], dtype=np.float64)
        origin = pt(0, 0, 0)
        for exact in (False, True):
            for d in directions:
                ray = Ray(origin, d)
                expected = positive.intersect(ray, exact=exact)
                got = negative.intersect(ray, exact=exact)
                self.assertEqual(len(got), len(expected))
                for p, q in zip(got, expected):
                    np.testing.assert_array_equal(p, q)
            np.testing.assert_array_equal(negative.intersect_batch(origin, directions, exact=exact),
                                          positive.intersect_batch(origin, directions, exact=exact))

    def test_color_channels(self):
        np.testing.assert_allclose(Sphere(pt(0, 0, 0), 1, [0.1, 0.2, 0.3]).color, [0.1, 0.2, 0.3, 1.0])
        with self.assertRaises(ValueError):
            Sphere(pt(0, 0, 0), 1, [0.1, 0.2])

    def test_normal_is_unnormalized(self):
        sphere = Sphere(pt(1, 1, 1), 2.0, [1, 1, 1])
        np.testing.assert_allclose(sphere.normal_at(pt(1, 3, 1)), [0, 2, 0])

    def test_batch_matches_scalar(self):
        sphere = Sphere(pt(0, 0, 5), 1.0, [1, 1, 1])
        directions = np.array([[0, 0, 1], [0, 0, 2], [1, 0, 0], [0, 0, 0], [0.2, 0.1, 1]], dtype=np.float64)
        origin = pt(0, 0, 0)
        for exact in (False, True):
            ts = sphere.intersect_batch(origin, directions, exact=exact)
            for t, d in zip(ts, directions):
                points = sphere.intersect(Ray(origin, d), exact=exact)
                if not points:
                    self.assertEqual(t, np.inf)
                else:
                    nearest = min(points, key=length_squared)
                    np.testing.assert_allclose(origin + t * d, nearest)
        np.testing.assert_allclose(sphere.intersect_batch(origin, directions[:1]), [3.0])
        np.testing.assert_allclose(sphere.intersect_batch(origin, directions[:1], exact=True), [4.0])


class TestViewport(unittest.TestCase):

    def test_corner_and_center(self):
        vp = Viewport()
        ray = vp.generate_ray(0, 0, 1920, 1080)
        np.testing.assert_allclose(ray.origin, [0, 0, 0])
        np.testing.assert_allclose(ray.direction, [-0.99, 0.54, 1.0])
        ray = vp.generate_ray(960, 540, 1920, 1080)
        np.testing.assert_allclose(ray.direction, [0, 0, 1], atol=1e-12)

    def test_resolution_independent(self):
        vp = Viewport()
        big = vp.generate_ray(480, 270, 1920, 1080)
        small = vp.generate_ray(4, 2, 16, 8)
        np.testing.assert_allclose(big.direction, small.direction)

    def test_direction_not_normalized(self):
        ray = Viewport().generate_ray(0, 0, 1920, 1080)
        self.assertGreater(length_squared(ray.direction), 1.0)

    def test_camera_offset(self):
        vp = Viewport(camera=pt(0, 0, -1))
        ray = vp.generate_ray(960, 540, 1920, 1080)
        np.testing.assert_allclose(ray.origin, [0, 0, -1])
        np.testing.assert_allclose(ray.direction, [0, 0, 2], atol=1e-12)

    def test_row_matches_single_rays(self):
        vp = Viewport()
        rows = vp.generate_rays(3, 16, 9)
        self.assertEqual(rows.shape, (16, 3))
        for x in range(16):
            np.testing.assert_allclose(rows[x], vp.generate_ray(x, 3, 16, 9).direction)


class TestLights(unittest.TestCase):

    def test_ambient(self):
        light = AmbientLight(0.2)
        self.assertEqual(light.illuminate(pt(0, 1, 0), pt(0, 0, 0)), 0.2)
        self.assertEqual(light.illuminate(pt(0, -1, 0), pt(5, 5, 5)), 0.2)

    def test_point_overhead(self):
        light = PointLight(1.5, pt(0, 2, 0))
        self.assertAlmostEqual(light.illuminate(pt(0, 1, 0), pt(0, 0, 0)), 1.5)
        # the normal is not normalized, so its length scales the result
        self.assertAlmostEqual(light.illuminate(pt(0, 3, 0), pt(0, 0, 0)), 4.5)

    def test_point_at_angle(self):
        # light at 60 degrees from the normal, distance 2
        light = PointLight(1.0, pt(0, 1, np.sqrt(3)))
        self.assertAlmostEqual(light.illuminate(pt(0, 1, 0), pt(0, 0, 0)), 0.5)

    def test_point_inverse_distance(self):
        near = PointLight(1.0, pt(0, 1, 1))
        far = PointLight(1.0, pt(0, 2, 2))
        normal = pt(1, 1, 0)
        # alignment doubles with distance, so the result is unchanged
        self.assertAlmostEqual(near.illuminate(normal, pt(0, 0, 0)), far.illuminate(normal, pt(0, 0, 0)))

    def test_point_back_face(self):
        light = PointLight(5.0, pt(0, 2, 0))
        self.assertEqual(light.illuminate(pt(0, -1, 0), pt(0, 0, 0)), 0.0)
        self.assertEqual(light.illuminate(pt(1, 0, 0), pt(0, 0, 0)), 0.0)

    def test_directional(self):
        light = DirectionalLight(2.0, pt(0, -1, 0), position=pt(0, 0, 4))
        self.assertAlmostEqual(light.illuminate(pt(0, 1, 0), pt(0, 0, 0)), 2.0)
        self.assertAlmostEqual(light.illuminate(pt(0, 1, 0), pt(10, -3, 7)), 2.0)
        self.assertAlmostEqual(light.illuminate(pt(0, 2, 0), pt(0, 0, 0)), 4.0)
        self.assertEqual(light.illuminate(pt(0, -1, 0), pt(0, 0, 0)), 0.0)

    def test_directional_length_does_not_matter(self):
        a = DirectionalLight(2.0, pt(0, -1, 0))
        b = DirectionalLight(2.0, pt(0, -5, 0))
        self.assertAlmostEqual(a.illuminate(pt(0, 1, 1), pt(0, 0, 0)), b.illuminate(pt(0, 1, 1), pt(0, 0, 0)))

    def test_zero_light_vector(self):
        # light sitting on the surface point, or a directional light with no direction
        on_surface = PointLight(1.0, pt(0, 0, 3))
        self.assertEqual(on_surface.illuminate(pt(0, 0, -2), pt(0, 0, 3)), 0.0)
        no_direction = DirectionalLight(1.0, pt(0, 0, 0))
        self.assertEqual(no_direction.illuminate(pt(0, 1, 0), pt(0, 0, 0)), 0.0)

    def test_zero_light_vector_keeps_ambient(self):
        color = [1.0, 1.0, 1.0, 1.0]
        # the nearest hit along +z is (0,0,3), where the point light sits
        for light in [PointLight(1.0, pt(0, 0, 3)), DirectionalLight(1.0, pt(0, 0, 0))]:
            scene = Scene([Sphere(pt(0, 0, 5), 1.0, color)], [AmbientLight(0.2), light])
            with np.errstate(all='raise'):
                pixel = scene.trace_pixel(2, 1, 4, 2)
            np.testing.assert_array_equal(pixel, quantized(color, 0.2))


class TestScene(unittest.TestCase):

    red = [1.0, 0.0, 0.0, 1.0]
    green = [0.0, 1.0, 0.0, 1.0]

    def test_nearest_hit(self):
        far = Sphere(pt(0, 0, 5), 1.0, self.red)
        near = Sphere(pt(0, 0, 3), 1.0, self.green)
        for exact in (False, True):
            scene = Scene([far, near], [AmbientLight(1.0)])
            hit = scene.intersect(axis_ray(), exact=exact)
            np.testing.assert_array_equal(hit.color, self.green)
            np.testing.assert_allclose(hit.normal, sub(hit.point, near.center))
            self.assertAlmostEqual(hit.dist_sq, length_squared(hit.point))

    def test_tie_keeps_first(self):
        first = Sphere(pt(0, 0, 5), 1.0, self.red)
        second = Sphere(pt(0, 0, 5), 1.0, self.green)
        hit = Scene([first, second], []).intersect(axis_ray())
        np.testing.assert_array_equal(hit.color, self.red)

    def test_no_hit_is_none(self):
        self.assertIsNone(Scene([], []).intersect(axis_ray()))
        self.assertIsNone(Scene([Sphere(pt(2, 0, 5), 1.0, self.red)], []).intersect(axis_ray()))

    def test_lights_are_summed(self):
        scene = Scene([], [AmbientLight(0.2), AmbientLight(0.5), PointLight(1.0, pt(0, 2, 0))])
        hit = Hit(pt(0, 0, 0), pt(0, 1, 0), vec(self.red), 0.0)
        self.assertAlmostEqual(scene.illuminate(hit), 1.7)

    def test_background(self):
        np.testing.assert_array_equal(Scene([], []).shade(None), [0, 0, 0, 255])

    def test_ambient_only(self):
        color = [0.5, 0.25, 1.0, 0.3]
        scene = Scene([Sphere(pt(0, 0, 5), 1.0, color)], [AmbientLight(0.2)])
        # pixel (2, 1) of a 4x2 image looks straight down +z
        np.testing.assert_array_equal(scene.trace_pixel(2, 1, 4, 2), quantized(color, 0.2))

    def test_over_bright_is_clamped(self):
        scene = Scene([Sphere(pt(0, 0, 5), 1.0, [0.9, 0.5, 0.05])], [AmbientLight(3.0)])
        np.testing.assert_array_equal(scene.trace_pixel(2, 1, 4, 2), [255, 255, 38, 255])

    def test_point_light_on_front_face(self):
        color = [1.0, 1.0, 1.0, 1.0]
        scene = Scene([Sphere(pt(0, 0, 5), 1.0, color)], [PointLight(1.0, pt(0, 0, 0))])
        hit = scene.intersect(axis_ray(), exact=True)
        # hit (0,0,4), normal (0,0,-1), light vector (0,0,-4)
        self.assertAlmostEqual(scene.illuminate(hit), 1.0)
        np.testing.assert_array_equal(scene.shade(hit), [255, 255, 255, 255])

    def test_point_light_behind_sphere(self):
        color = [1.0, 1.0, 1.0, 1.0]
        scene = Scene([Sphere(pt(0, 0, 5), 1.0, color)], [PointLight(10.0, pt(0, 0, 20))])
        hit = scene.intersect(axis_ray(), exact=True)
        self.assertEqual(scene.illuminate(hit), 0.0)
        np.testing.assert_array_equal(scene.shade(hit), [0, 0, 0, 255])


def small_scene():
    spheres = [
        Sphere(pt(-0.8, 0.3, 3.0), 0.5, [0.9, 0.2, 0.2]),
        Sphere(pt(0.6, -0.2, 2.5), 0.4, [0.2, 0.8, 0.3]),
        Sphere(pt(0.0, 0.0, 6.0), 1.5, [0.3, 0.3, 0.9]),
    ]
    lights = [
        AmbientLight(0.2),
        PointLight(5.0, pt(0, 0, 4)),
        DirectionalLight(0.5, pt(1, -1, 1)),
    ]
    return Scene(spheres, lights)


class TestRender(unittest.TestCase):

    def test_shape_and_type(self):
        pix = render_image(small_scene(), 16, 9, verbose=False)
        self.assertEqual(pix.shape, (9, 16, 4))
        self.assertEqual(pix.dtype, np.uint8)
        np.testing.assert_array_equal(pix[..., 3], 255)

    def test_empty_scene_is_black(self):
        pix = render_image(Scene([Sphere(pt(100, 100, 5), 1.0, [1, 1, 1])], [AmbientLight(1.0)]),
                           12, 6, verbose=False)
        np.testing.assert_array_equal(pix, np.tile(BACKGROUND, (6, 12, 1)))

    def test_missed_pixels_are_black(self):
        scene = Scene([Sphere(pt(0, 0, 5), 0.5, [1, 1, 1])], [AmbientLight(1.0)])
        pix = render_image(scene, 8, 4, verbose=False)
        np.testing.assert_array_equal(pix[0, 0], [0, 0, 0, 255])
        np.testing.assert_array_equal(pix[2, 4], [255, 255, 255, 255])

    def test_deterministic(self):
        scene = small_scene()
        first = render_image(scene, 24, 12, verbose=False)
        second = render_image(scene, 24, 12, verbose=False)
        self.assertEqual(first.tobytes(), second.tobytes())

    def test_vectorized_matches_scalar(self):
        scene = small_scene()
        for exact in (False, True):
            scalar = render_image(scene, 32, 18, verbose=False, exact=exact).astype(int)
            fast = render_image(scene, 32, 18, verbose=False, vectorized=True, exact=exact).astype(int)
            self.assertLessEqual(np.abs(scalar - fast).max(), 1)

    def test_bad_size(self):
        with self.assertRaises(ValueError):
            render_image(small_scene(), 0, 10, verbose=False)
        with self.assertRaises(ValueError):
            render_image(small_scene(), 10, 2.5, verbose=False)

    def test_progress(self):
        out = io.StringIO()
        with contextlib.redirect_stdout(out):
            render_image(Scene([], []), 10, 10)
        lines = [l for l in out.getvalue().splitlines() if "Casting rays" in l]
        self.assertEqual(len(lines), 100)
        self.assertEqual(lines[0], "2 / 3 | Casting rays... 1%")
        self.assertEqual(lines[-1], "2 / 3 | Casting rays... 100%")

        quiet = io.StringIO()
        with contextlib.redirect_stdout(quiet):
            render_image(Scene([], []), 10, 10, verbose=False)
        self.assertEqual(quiet.getvalue(), "")


class TestExamples(unittest.TestCase):

    def test_random_spheres(self):
        example = ExampleSceneDef.RandomSpheresExample(num_spheres=25, seed=7)
        spheres = example.scene.spheres
        self.assertEqual(len(spheres), 25)
        for s in spheres:
            self.assertEqual(s.radius, 0.25)
            self.assertEqual(s.color[3], 1.0)
            self.assertTrue(-5.0 <= s.center[0] <= 4.5)
            self.assertTrue(-10 / 3 <= s.center[1] <= 3.0)
            self.assertTrue(2.0 <= s.center[2] <= 2.0 + 19 / 3)
            self.assertTrue(np.all((s.color[:3] >= 0) & (s.color[:3] < 1)))
        again = ExampleSceneDef.RandomSpheresExample(num_spheres=25, seed=7)
        for a, b in zip(spheres, again.scene.spheres):
            np.testing.assert_array_equal(a.center, b.center)
            np.testing.assert_array_equal(a.color, b.color)

    def test_face_and_directional(self):
        self.assertEqual(len(ExampleSceneDef.FaceExample().scene.spheres), 11)
        lights = ExampleSceneDef.DirectionalExample(num_spheres=3, seed=1).scene.lights
        self.assertTrue(any(isinstance(l, DirectionalLight) for l in lights))

    def test_render_to_image(self):
        im = ExampleSceneDef.FaceExample().render(output_shape=[9, 16], verbose=False)
        self.assertIsInstance(im, Image)
        self.assertEqual(im.width, 16)
        self.assertEqual(im.height, 9)
        self.assertEqual(im.n_color_channels, 4)


class TestOutput(unittest.TestCase):

    def test_png_round_trip(self):
        pix = render_image(small_scene(), 16, 9, verbose=False)
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "out.png")
            Image(pixels=pix).writeToFile(path)
            np.testing.assert_array_equal(Image(path).pixels, pix)

    def test_cli(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "face.png")
            status = cli.main([path, "--width", "8", "--height", "4", "--scene", "face", "--quiet"])
            self.assertEqual(status, 0)
            self.assertEqual(Image(path).pixels.shape, (4, 8, 4))

    def test_cli_messages(self):
        out = io.StringIO()
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "face.png")
            with contextlib.redirect_stdout(out):
                status = cli.main([path, "--width", "8", "--height", "4", "--scene", "face"])
            self.assertEqual(status, 0)
            self.assertTrue(os.path.exists(path))
        lines = out.getvalue().splitlines()
        self.assertIn("Beginning Render...", lines)
        self.assertIn("2 / 3 | Casting rays... 100%", lines)
        self.assertIn("3 / 3 | Saving image...", lines)
        self.assertIn("Done rendering!", lines)
        self.assertLess(lines.index("3 / 3 | Saving image..."), lines.index("Done rendering!"))

    def test_unknown_scene(self):
        with self.assertRaises(ValueError):
            cli.build_scene("teapot")


if __name__ == '__main__':
    unittest.main()
