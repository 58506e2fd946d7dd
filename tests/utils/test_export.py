import numpy as np
import pytest

from sliceview.utils.export import save_image


def test_save_image_array(tmp_path):
    iio = pytest.importorskip("imageio.v3")

    im = np.zeros((10, 20, 4), np.uint8)
    im[2:5, 3:9] = (255, 0, 0, 255)
    filename = str(tmp_path / "frame.png")
    save_image(im, filename)

    im2 = iio.imread(filename)
    assert im2.shape == (10, 20, 4)
    assert np.all(im2 == im)


def test_save_image_snapshot(tmp_path):
    iio = pytest.importorskip("imageio.v3")

    class Source:
        def snapshot(self):
            return np.full((4, 5, 4), 200, np.uint8)

    filename = str(tmp_path / "snap.png")
    save_image(Source(), filename)
    assert iio.imread(filename).shape == (4, 5, 4)


def test_save_image_invalid(tmp_path):
    pytest.importorskip("imageio")

    with pytest.raises(ValueError):
        save_image(np.zeros((10, 20), np.uint8), str(tmp_path / "x.png"))
    with pytest.raises(ValueError):
        save_image(np.zeros((10, 20, 4), np.float32), str(tmp_path / "x.png"))
