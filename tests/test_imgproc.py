import numpy as np
import pytest

from orbfeatures.imgproc import (
    fast,
    gaussian_blur,
    reflect_border,
    resize_linear,
    retain_best,
)
from orbfeatures.keypoint import KeyPoint


def _random_image(shape=(40, 40), seed=0):
    rng = np.random.default_rng(seed)
    return rng.integers(0, 256, size=shape, dtype=np.uint8)


def test_fast_uniform_image_has_no_corners():
    img = np.full((30, 30), 100, dtype=np.uint8)
    assert fast(img, 10, True) == []


def test_fast_single_bright_pixel():
    img = np.zeros((21, 21), dtype=np.uint8)
    img[10, 10] = 255
    for nms in (True, False):
        kps = fast(img, 20, nms)
        assert [(kp.x, kp.y) for kp in kps] == [(10.0, 10.0)]
        assert kps[0].response >= 20


def test_fast_threshold_above_contrast_finds_nothing():
    img = np.zeros((21, 21), dtype=np.uint8)
    img[10, 10] = 255
    assert fast(img, 255, False) == []


def test_fast_small_image_is_empty():
    assert fast(np.zeros((5, 5), dtype=np.uint8), 10, True) == []


def test_fast_higher_threshold_gives_subset():
    img = _random_image(seed=1)
    low = {(kp.x, kp.y): kp.response for kp in fast(img, 10, False)}
    high = {(kp.x, kp.y): kp.response for kp in fast(img, 40, False)}
    assert low
    assert set(high) <= set(low)
    for key, response in high.items():
        assert response == low[key]
        assert response >= 40


def test_fast_nonmax_reduces_and_keeps_local_maxima():
    img = _random_image(seed=2)
    all_kps = fast(img, 15, False)
    kept = fast(img, 15, True)
    assert len(kept) <= len(all_kps)
    responses = {(kp.x, kp.y): kp.response for kp in all_kps}
    for kp in kept:
        for dx in (-1, 0, 1):
            for dy in (-1, 0, 1):
                if dx or dy:
                    assert kp.response > responses.get((kp.x + dx, kp.y + dy), 0)


def test_fast_row_major_order():
    kps = fast(_random_image(seed=3), 10, False)
    keys = [(kp.y, kp.x) for kp in kps]
    assert keys == sorted(keys)


def test_gaussian_blur_constant_image():
    img = np.full((12, 15), 90, dtype=np.uint8)
    out = gaussian_blur(img, 7, 2.0)
    assert out.dtype == np.uint8
    assert np.array_equal(out, img)


def test_gaussian_blur_impulse_is_symmetric():
    img = np.zeros((15, 15), dtype=np.uint8)
    img[7, 7] = 255
    out = gaussian_blur(img, 7, 2.0)
    assert np.array_equal(out, out.T)
    assert np.array_equal(out, out[::-1, ::-1])
    assert out[7, 7] == out.max()
    assert out[7, 7] < 255


def test_gaussian_blur_rejects_even_kernel():
    with pytest.raises(ValueError):
        gaussian_blur(np.zeros((10, 10), dtype=np.uint8), 4, 1.0)


def test_resize_shape_and_constant():
    img = np.full((20, 30), 42, dtype=np.uint8)
    out = resize_linear(img, 17, 11)
    assert out.shape == (11, 17)
    assert (out == 42).all()


def test_resize_same_size_is_identity():
    img = _random_image(shape=(13, 17), seed=4)
    assert np.array_equal(resize_linear(img, 17, 13), img)


def test_resize_halving_block_image():
    small = _random_image(shape=(5, 6), seed=5)
    big = np.kron(small, np.ones((2, 2), dtype=np.uint8))
    assert np.array_equal(resize_linear(big, 6, 5), small)


def test_resize_rejects_bad_size():
    with pytest.raises(ValueError):
        resize_linear(np.zeros((4, 4), dtype=np.uint8), 0, 3)


def test_reflect_border_layout():
    img = _random_image(shape=(8, 9), seed=6)
    out = reflect_border(img, 3)
    assert out.shape == (14, 15)
    assert np.array_equal(out[3:-3, 3:-3], img)
    assert out[3, 2] == img[0, 1]
    assert out[2, 3] == img[1, 0]
    assert out[-1, -1] == img[-4, -4]


def test_reflect_border_negative():
    with pytest.raises(ValueError):
        reflect_border(np.zeros((4, 4), dtype=np.uint8), -1)


def test_retain_best_keeps_strongest():
    kps = [KeyPoint(float(i), 0.0, response=r) for i, r in enumerate([3.0, 9.0, 1.0, 7.0, 5.0])]
    kept = retain_best(kps, 2)
    assert [kp.response for kp in kept] == [9.0, 7.0]


def test_retain_best_keeps_ties():
    kps = [KeyPoint(float(i), 0.0, response=r) for i, r in enumerate([4.0, 8.0, 4.0, 2.0])]
    kept = retain_best(kps, 2)
    assert sorted(kp.response for kp in kept) == [4.0, 4.0, 8.0]


def test_retain_best_edge_counts():
    kps = [KeyPoint(0.0, 0.0, response=1.0), KeyPoint(1.0, 0.0, response=2.0)]
    assert retain_best(kps, 0) == []
    assert len(retain_best(kps, 5)) == 2
    assert len(retain_best(kps, -1)) == 2