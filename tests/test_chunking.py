import numpy as np
import pytest

from scribeprep.chunking import chunk_params, find_cut_point, split_segments
from scribeprep.config import PreprocessConfig
from scribeprep.errors import ConfigError

SR = 16_000


def _tone(n: int) -> np.ndarray:
    return np.full(n, 0.5, dtype=np.float32)


def _params(sample_rate: int = SR, **overrides):
    return chunk_params(sample_rate=sample_rate, config=PreprocessConfig(**overrides))


def test_chunk_params_defaults_in_samples():
    params = _params()
    assert params.max_samples == 9_600_000
    assert params.window_samples == 4800
    assert params.radius_samples == 80_000
    assert params.min_samples == 16_000
    assert params.silence_threshold == pytest.approx(0.01)


def test_chunk_params_rejects_degenerate_values():
    with pytest.raises(ConfigError):
        _params(max_chunk_sec=0.0)
    with pytest.raises(ConfigError):
        _params(boundary_window_sec=0.0)


def test_twenty_minutes_without_silence_gives_two_full_chunks():
    audio = _tone(1200 * SR)
    segments = split_segments(audio, _params())
    assert [(s.start_sample, s.end_sample) for s in segments] == [
        (0, 600 * SR),
        (600 * SR, 1200 * SR),
    ]
    assert all(s.duration_sec(SR) == 600.0 for s in segments)


def test_cut_snaps_into_silent_gap_before_naive_point():
    audio = _tone(700 * SR)
    audio[598 * SR : 601 * SR] = 0.0
    params = _params()

    segments = split_segments(audio, params)
    cut = segments[0].end_sample
    assert cut == 600 * SR - params.window_samples
    assert 598 * SR <= cut < 600 * SR
    assert segments[1].start_sample == cut
    assert segments[1].end_sample == 700 * SR


def test_cut_snaps_to_latest_silent_window_in_radius():
    audio = _tone(700 * SR)
    audio[596 * SR : 597 * SR] = 0.0
    params = _params()
    segments = split_segments(audio, params)
    assert segments[0].end_sample == 597 * SR - params.window_samples


def test_short_tail_fragment_is_dropped():
    audio = _tone(600 * SR + SR // 2)
    segments = split_segments(audio, _params())
    assert len(segments) == 1
    assert segments[0].end_sample == 600 * SR


def test_buffer_shorter_than_minimum_yields_nothing():
    assert split_segments(_tone(SR - 1), _params()) == []
    assert split_segments(np.zeros(0, dtype=np.float32), _params()) == []


def test_single_chunk_when_under_limit():
    segments = split_segments(_tone(30 * SR), _params())
    assert len(segments) == 1
    assert segments[0].num_samples == 30 * SR


# Small sample rate keeps the boundary cases readable:
# max 1000 samples, window 30, radius 500, minimum 100.
SMALL_SR = 100


def test_backward_search_prefers_latest_window():
    params = _params(SMALL_SR, max_chunk_sec=10)
    audio = _tone(2000)
    audio[600:650] = 0.0
    audio[900:950] = 0.0
    assert find_cut_point(audio, start=0, desired=1000, params=params) == 920


def test_forward_search_used_when_nothing_behind():
    params = _params(SMALL_SR, max_chunk_sec=10)
    audio = _tone(2000)
    audio[1100:1140] = 0.0
    assert find_cut_point(audio, start=0, desired=1000, params=params) == 1100


def test_silence_outside_radius_is_ignored():
    params = _params(SMALL_SR, max_chunk_sec=10)
    audio = _tone(3000)
    audio[300:400] = 0.0
    audio[1600:1700] = 0.0
    assert find_cut_point(audio, start=0, desired=1000, params=params) == 1000


def test_window_shorter_than_required_does_not_snap():
    params = _params(SMALL_SR, max_chunk_sec=10)
    audio = _tone(2000)
    audio[950:979] = 0.0  # 29 samples, one short of the window
    assert find_cut_point(audio, start=0, desired=1000, params=params) == 1000


def test_snap_must_advance_past_start():
    params = _params(SMALL_SR, max_chunk_sec=10)
    audio = _tone(2000)
    audio[900:950] = 0.0
    assert find_cut_point(audio, start=920, desired=1000, params=params) == 1000
    assert find_cut_point(audio, start=919, desired=1000, params=params) == 920


def test_forward_window_may_be_truncated_at_buffer_end():
    params = _params(SMALL_SR, max_chunk_sec=10)
    audio = _tone(1020)
    audio[1010:] = 0.0
    assert find_cut_point(audio, start=0, desired=1000, params=params) == 1010


def test_forward_snap_overshoots_by_at_most_radius():
    params = _params(SMALL_SR, max_chunk_sec=10)
    audio = _tone(5000)
    audio[1450:1500] = 0.0
    segments = split_segments(audio, params)
    assert segments[0].end_sample == 1450
    assert segments[0].num_samples <= params.max_samples + params.radius_samples


def test_segments_are_ordered_contiguous_and_bounded():
    rng = np.random.default_rng(3)
    params = _params(SMALL_SR, max_chunk_sec=10)
    audio = _tone(20_000)
    for start in rng.integers(0, 19_900, size=25):
        audio[start : start + int(rng.integers(5, 80))] = 0.0

    segments = split_segments(audio, params)
    assert segments
    prev_end = 0
    for seg in segments:
        assert seg.start_sample >= prev_end
        assert params.min_samples <= seg.num_samples <= params.max_samples + params.radius_samples
        np.testing.assert_array_equal(seg.samples, audio[seg.start_sample : seg.end_sample])
        prev_end = seg.end_sample
    assert segments[-1].end_sample <= audio.size

    again = split_segments(audio, params)
    assert [(s.start_sample, s.end_sample) for s in again] == [
        (s.start_sample, s.end_sample) for s in segments
    ]


def test_on_segment_callback_sees_each_emitted_segment():
    seen = []
    segments = split_segments(_tone(25 * SMALL_SR), _params(SMALL_SR, max_chunk_sec=10), on_segment=seen.append)
    assert len(seen) == len(segments)
    assert all(a is b for a, b in zip(seen, segments))
    assert [s.num_samples for s in segments] == [1000, 1000, 500]
