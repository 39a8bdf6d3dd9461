from utils import *
from ray import *
from cli import render

# Four small spheres in front of a larger one
spheres = [
    Sphere(vec([-1.5, 0.6, 3.0]), 0.25, [0.9, 0.2, 0.2]),
    Sphere(vec([-0.5, -0.3, 2.5]), 0.25, [0.2, 0.8, 0.3]),
    Sphere(vec([0.4, 0.2, 3.5]), 0.25, [0.2, 0.3, 0.9]),
    Sphere(vec([1.2, -0.5, 2.8]), 0.25, [0.9, 0.8, 0.1]),
    Sphere(vec([0.0, 0.0, 6.0]), 1.0, [0.6, 0.6, 0.6]),
]

lights = [
    AmbientLight(0.2),
    PointLight(5.0, vec([0, 0, 4])),
]

scene = Scene(spheres, lights)

render(scene, "five_spheres.png", nx=480, ny=270, vectorized=True)
