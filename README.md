# orbfeatures

This package provides building blocks for ORB-style feature work on 8-bit
grayscale images held as NumPy arrays. It covers:

- FAST corner detection and the image operations that go with it.
- Quadtree spreading of keypoints, so that they cover an image evenly.
- Hamming distance and nearest-neighbour search over binary descriptors.
- Gates that filter matches by rotation consistency, by viewing angle and by
  epipolar geometry.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Keypoints

`orbfeatures.keypoint.KeyPoint` is a dataclass with these fields:

- `x` and `y`: the pixel coordinates.
- `size`: the diameter of the meaningful neighbourhood.
- `angle`: the orientation in degrees, `-1` when not set.
- `response`: the detector score.
- `octave`: the pyramid level.

`scaled(factor)` and `shifted(dx, dy)` return moved copies.

## Image processing

`orbfeatures.imgproc` provides the following functions:

- `fast(image, threshold, nonmax_suppression)` detects FAST-9/16 corners. A
  corner needs nine contiguous circle pixels that are all brighter, or all
  darker, than the centre by more than `threshold`. The function returns
  `KeyPoint`s in row-major order with size 7 and the corner score as the
  response. With `nonmax_suppression`, it keeps only the corners whose score
  beats all eight of their neighbours.
- `gaussian_blur(image, ksize, sigma)` blurs with a square Gaussian kernel.
  `ksize` must be positive and odd. A non-positive `sigma` is derived from
  `ksize`.
- `resize_linear(image, width, height)` resizes the image with bilinear
  interpolation.
- `reflect_border(image, border)` pads every side, mirroring without
  repeating the edge pixel.
- `retain_best(keypoints, n)` keeps the `n` strongest keypoints, plus any
  that tie with the weakest one kept, sorted by decreasing response. A
  negative `n` keeps all of them.

All of these take a 2-D array. They raise `ValueError` for any other shape.

```python
import numpy as np
from orbfeatures.imgproc import fast, retain_best

image = np.random.default_rng(0).integers(0, 256, (120, 160), dtype=np.uint8)
corners = fast(image, threshold=20, nonmax_suppression=True)
strongest = retain_best(corners, 50)
```

## Spreading keypoints

`orbfeatures.quadtree.distribute_oct_tree(keypoints, min_x, max_x, min_y, max_y, n)`
subdivides the region until one of two things happens: there are at least `n`
cells, or no cell can be split further. It then returns the keypoint with the
highest response in each cell. Keypoint coordinates must be relative to
`(min_x, min_y)`. The function raises `ValueError` if the region has no
positive width or height.

`ExtractorNode` is a single cell. `divide()` splits a cell into four children
and hands each keypoint to the child that contains it. The children come in
this order: upper-left, upper-right, bottom-left, bottom-right.

```python
from orbfeatures.quadtree import distribute_oct_tree

relative = [kp.shifted(-16, -16) for kp in corners]
spread = distribute_oct_tree(relative, 16, 144, 16, 104, 30)
```

## Matching

`orbfeatures.distance` provides the following:

- `descriptor_distance(a, b)` returns the number of differing bits between two
  descriptors of equal length. Each descriptor may be a byte string or a 1-D
  array of byte values.
- `best_two_matches(query, candidates)` returns a
  `BestMatches(index, distance, second_distance)` named tuple.
  - Both distances start at 256.
  - `index` is `None` when there are no candidates.
  - On a tie, the earlier candidate stays best.
- `TH_HIGH = 100` and `TH_LOW = 50` are the usual acceptance thresholds.

`orbfeatures.histogram` provides the rotation-consistency check:

- `RotationHistogram(length=30)` bins matches by `angle1 - angle2`.
  - `add(angle1, angle2, index)` records an index and returns its bin.
  - `inconsistent()` lists the recorded indices that lie outside the three
    dominant bins.
- `compute_three_maxima(histogram)` returns the indices of the three fullest
  bins. It uses `None` for any bin it drops. A bin is dropped when it holds
  fewer than a tenth of the entries of the fullest bin.

`orbfeatures.geometry` provides two gates:

- `radius_by_viewing_cos(view_cos)` returns a search window factor. It is 2.5
  for near head-on views (cosine above 0.998) and 4.0 otherwise.
- `check_dist_epipolar_line(kp1, kp2, f12, level_sigma2)` tells whether `kp2`
  lies within the chi-square bound of 3.84 of the epipolar line of `kp1` under
  the 3x3 matrix `f12`. The bound is scaled by `level_sigma2[kp2.octave]`.

## What this package does not do

The package has no complete extractor. It does not build a scale pyramid,
compute keypoint orientations or produce descriptors from an image. The
matching helpers work on descriptors and keypoints that you supply. There is
no command-line tool.