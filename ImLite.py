
from PIL import Image as PIM
import numpy as np

import matplotlib
import matplotlib.pyplot as plt

def aget_ipython():
    try:
        import IPython
        return IPython;
    except ImportError:
        return None;

def runningInNotebook():
    ipyth = aget_ipython();
    if(ipyth is None):
        return False;
    shell = ipyth.get_ipython().__class__.__name__;
    if shell == 'ZMQInteractiveShell':
        return True   # Jupyter notebook or qtconsole
    return False      # terminal IPython or plain interpreter


_ISNOTEBOOK = False;
if(runningInNotebook()):
    _ISNOTEBOOK = True;

def is_notebook():
    return _ISNOTEBOOK;

class Image(object):
    """Image

    Thin wrapper around a (height, width, channels) pixel array, as produced by
    ray.render_image, that knows how to save and display itself.
    """

    def __init__(self, path=None, pixels=None):
        # You can do Image(pixels) or Image(path)
        self._samples = None;
        self.file_path = None;
        if (isinstance(path, np.ndarray) and (pixels is None)):
            pixels = path;
            path = None;
        self.pixels = pixels;
        self.file_path = path;
        if(self.file_path is not None and pixels is None):
            self.loadImageData(self.file_path);

    @property
    def pixels(self):
        return self._samples;

    @pixels.setter
    def pixels(self, data):
        self._samples = data;

    @property
    def n_color_channels(self):
        if (len(self.pixels.shape) < 3):
            return 1;
        else:
            return self.pixels.shape[2];

    @property
    def dtype(self):
        return self.pixels.dtype;

    @property
    def _is_int(self):
        return (self.dtype.kind in 'iu');

    @property
    def ipixels(self):
        if (self._is_int):
            return self.pixels;
        else:
            return np.clip(np.round(self.pixels * 255), 0, 255).astype(np.uint8);

    @property
    def shape(self):
        return np.asarray(self.pixels.shape)[:];

    @property
    def width(self):
        return self.shape[1];

    @property
    def height(self):
        return self.shape[0];

    def loadImageData(self, path=None):
        if (path):
            self.file_path = path;
        if (self.file_path):
            pim = PIM.open(fp=self.file_path);
            self._samples = np.array(pim);

    def PIL(self):
        return PIM.fromarray(np.uint8(self.ipixels));

    def writeToFile(self, output_path=None, **kwargs):
        if (output_path is None):
            output_path = self.file_path;
        self.PIL().save(output_path, **kwargs);
        self.file_path = output_path;

    def show(self, title=None, new_figure=True, **kwargs):
        if (is_notebook()):
            Image.Show(self, new_figure=new_figure, title=title, **kwargs);
        else:
            self.PIL().show();

    @staticmethod
    def Show(im, title=None, new_figure=True, axis=None, **kwargs):
        if (isinstance(im, Image)):
            imdata = im.pixels;
        else:
            imdata = im;

        if (new_figure):
            if (title is not None):
                plt.figure(num=title);
            else:
                plt.figure();
        if (len(imdata.shape) < 3):
            nrm = matplotlib.colors.Normalize(vmin=0, vmax=255);
            if (axis is not None):
                axis.imshow(imdata, cmap='gray', norm=nrm, **kwargs);
            else:
                plt.imshow(imdata, cmap='gray', norm=nrm, **kwargs);
        else:
            if (axis is not None):
                axis.imshow(imdata, **kwargs);
            else:
                plt.imshow(imdata, **kwargs);
        plt.axis('off');
        if (title):
            plt.title(title);
