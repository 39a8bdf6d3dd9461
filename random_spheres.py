from ExampleSceneDef import RandomSpheresExample
from cli import render

# 70 small spheres at random grid positions with random colors
render(RandomSpheresExample(num_spheres=70), "output.png", vectorized=True)
