"""Tests for temporal mask refinement."""

import numpy as np
import pytest
from PIL import Image

from bg_remove.compositing.temporal import (
    TemporalMaskRefiner,
    TemporalRefinerConfig,
    refine_masks,
)
from bg_remove.core.errors import InvariantViolation
from bg_remove.utils.image import gaussian_blur


def constant(value, shape=(5, 7)):
    return np.full(shape, value, dtype=np.uint8)


class TestBlend:
    def test_interior_frame_uses_both_neighbours(self):
        masks = [constant(0), constant(100), constant(200)]
        blended = TemporalMaskRefiner().blend(masks)
        assert np.all(blended[1] == 100)

    def test_first_frame_replicates_itself(self):
        masks = [constant(0), constant(100), constant(200)]
        blended = TemporalMaskRefiner().blend(masks)
        # 0.15*0 + 0.70*0 + 0.15*100
        assert np.all(blended[0] == 15)

    def test_last_frame_replicates_itself(self):
        masks = [constant(0), constant(100), constant(200)]
        blended = TemporalMaskRefiner().blend(masks)
        # 0.15*100 + 0.70*200 + 0.15*200
        assert np.all(blended[2] == 185)

    def test_half_values_round_up(self):
        refiner = TemporalMaskRefiner(TemporalRefinerConfig(weights=(0.25, 0.5, 0.25)))
        blended = refiner.blend([constant(0), constant(2)])
        assert np.all(blended[0] == 1)  # 0.5
        assert np.all(blended[1] == 2)  # 1.5

    def test_saturated_masks_stay_in_range(self):
        blended = TemporalMaskRefiner().blend([constant(255)] * 3)
        assert blended[1].dtype == np.uint8
        assert np.all(blended[1] == 255)


class TestRefine:
    def test_output_matches_input_length_and_shape(self):
        masks = [constant(i * 20) for i in range(6)]
        refined = TemporalMaskRefiner().refine(masks)
        assert len(refined) == 6
        assert all(m.shape == (5, 7) and m.dtype == np.uint8 for m in refined)

    def test_blur_applied_after_blend(self):
        refiner = TemporalMaskRefiner()
        edge = np.zeros((9, 9), dtype=np.uint8)
        edge[:, 5:] = 255
        masks = [edge, edge.copy(), edge.copy()]

        refined = refiner.refine(masks)
        expected = gaussian_blur(refiner.blend_frame(masks, 1), 0.5)
        np.testing.assert_array_equal(refined[1], expected)
        # the hard edge picks up intermediate values
        assert 0 < refined[1][4, 4] < 255

    def test_single_mask(self):
        refined = TemporalMaskRefiner().refine([constant(200)])
        assert len(refined) == 1
        assert np.all(refined[0] == 200)

    def test_empty(self):
        assert TemporalMaskRefiner().refine([]) == []

    def test_parallel_matches_serial(self):
        rng = np.random.default_rng(7)
        masks = [rng.integers(0, 256, size=(16, 12), dtype=np.uint8) for _ in range(10)]

        serial = TemporalMaskRefiner(TemporalRefinerConfig(workers=1)).refine(masks)
        parallel = TemporalMaskRefiner(TemporalRefinerConfig(workers=4)).refine(masks)

        assert len(serial) == len(parallel)
        for a, b in zip(serial, parallel):
            np.testing.assert_array_equal(a, b)

    def test_shape_mismatch_raises(self):
        with pytest.raises(InvariantViolation):
            TemporalMaskRefiner().refine([constant(0), constant(0, shape=(4, 4))])

    def test_multichannel_mask_raises(self):
        with pytest.raises(InvariantViolation):
            TemporalMaskRefiner().refine([np.zeros((4, 4, 3), dtype=np.uint8)])


def test_refine_masks_writes_pngs(tmp_path):
    masks = [constant(i * 40) for i in range(4)]
    refined, paths = refine_masks(masks, tmp_path, workers=2)

    assert [p.name for p in paths] == [f"mask_refined_{i:04d}.png" for i in range(4)]
    for mask, path in zip(refined, paths):
        with Image.open(path) as img:
            assert img.mode == "L"
            np.testing.assert_array_equal(np.array(img), mask)


def test_refine_masks_without_output_dir():
    refined, paths = refine_masks([constant(10), constant(20)])
    assert len(refined) == 2
    assert paths == []
