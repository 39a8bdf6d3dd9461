import numpy as np
import ray
from ImLite import *
from utils import *

class ExampleSceneDef(object):
    def __init__(self, scene):
        self.scene = scene;

    def render(self, output_path=None, output_shape=None, **kwargs):
        """Render the scene; output_shape is [height, width].

        Extra keyword arguments go to ray.render_image. Returns the Image when
        no output_path is given, otherwise writes it there.
        """
        if(output_shape is None):
            output_shape=[ray.IMAGE_HEIGHT, ray.IMAGE_WIDTH];
        pix = ray.render_image(self.scene, output_shape[1], output_shape[0], **kwargs);
        im = Image(pixels=pix);
        if(output_path is None):
            return im;
        else:
            im.writeToFile(output_path);


def default_lights():
    return [
        ray.AmbientLight(0.2),
        ray.PointLight(5.0, pt(0, 0, 4)),
    ]


def RandomSpheresExample(num_spheres=70, seed=None, radius=0.25):
    """A cloud of small randomly placed and colored spheres in front of the camera."""
    rng = np.random.default_rng(seed)
    origin = pt(0.0, 0.0, 2.0)

    spheres = []
    for _ in range(num_spheres):
        offset = pt(
            (rng.integers(0, 20) - 10) / 2.0,
            (rng.integers(0, 20) - 10) / 3.0,
            rng.integers(0, 20) / 3.0,
        )
        color = [rng.integers(0, 100) / 100.0 for _ in range(3)] + [1.0]
        spheres.append(ray.Sphere(add(origin, offset), radius, color))

    scene = ray.Scene(spheres, default_lights(), viewport=ray.Viewport(pt(0, 0, 0), pt(0, 0, 1)))
    return ExampleSceneDef(scene=scene);


def FaceExample():
    """Two eyes with pupils above a smile."""
    white = [1.0, 1.0, 1.0, 1.0]
    red = [1.0, 0.1, 0.1, 1.0]
    mouth = [1.0, 0.2, 0.2, 1.0]

    spheres = [
        ray.Sphere(pt(-0.75, 0.75, 2.5), 0.2, white),
        ray.Sphere(pt(-0.6, 0.6, 2.2), 0.02, red),

        ray.Sphere(pt(0.75, 0.75, 2.5), 0.2, white),
        ray.Sphere(pt(0.6, 0.6, 2.2), 0.02, red),

        ray.Sphere(pt(0.0, -0.4, 2.5), 0.1, mouth),
    ]
    for x, y in [(0.18, -0.38), (0.35, -0.34), (0.5, -0.28)]:
        spheres.append(ray.Sphere(pt(-x, y, 2.5), 0.1, mouth))
        spheres.append(ray.Sphere(pt(x, y, 2.5), 0.1, mouth))

    scene = ray.Scene(spheres, default_lights())
    return ExampleSceneDef(scene=scene);


def DirectionalExample(num_spheres=70, seed=None):
    """The random sphere cloud lit from above by a directional light."""
    example = RandomSpheresExample(num_spheres=num_spheres, seed=seed)
    example.scene.lights = [
        ray.AmbientLight(0.2),
        ray.DirectionalLight(2.0, direction=pt(0, -1, 0), position=pt(0, 0, 4)),
    ]
    return example;


EXAMPLES = {
    'random': RandomSpheresExample,
    'face': FaceExample,
    'directional': DirectionalExample,
}
