from ExampleSceneDef import FaceExample
from cli import render

render(FaceExample(), "face.png")
