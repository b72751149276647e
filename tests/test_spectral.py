import numpy as np
import pytest

from prometeo.analysis.bands import DEFAULT_BANDS, band_power, band_powers, coerce_bands
from prometeo.analysis.features import rms, rms_beta_power, signal_quality
from prometeo.analysis.fft import (
    bin_frequencies,
    dft_power,
    fft_power,
    hann_window,
    windowed_power_spectrum,
)
from prometeo.analysis.outputs import dominant_band
from prometeo.analysis.spectral import (
    SpectralEstimator,
    compute_band_powers,
    compute_rms_band_powers,
)


def _sine(freq_hz: float, fs: float = 256.0, n: int = 256, amplitude: float = 50.0) -> np.ndarray:
    t = np.arange(n) / fs
    return amplitude * np.sin(2.0 * np.pi * freq_hz * t)


def test_hann_window_matches_symmetric_definition() -> None:
    n = np.arange(16)
    expected = 0.5 * (1.0 - np.cos(2.0 * np.pi * n / 15))
    np.testing.assert_allclose(hann_window(16), expected, atol=1e-12)
    with pytest.raises(ValueError):
        hann_window(1)


def test_fast_transform_matches_direct_summation() -> None:
    rng = np.random.default_rng(7)
    x = rng.standard_normal(256) * hann_window(256)

    direct = dft_power(x)
    fast = fft_power(x)

    assert direct.shape == (129,)
    np.testing.assert_allclose(fast, direct, rtol=1e-9, atol=1e-9 * direct.max())


def test_bin_frequencies() -> None:
    freqs = bin_frequencies(256, 256.0)
    assert freqs.shape == (129,)
    assert freqs[10] == 10.0
    assert freqs[-1] == 128.0
    with pytest.raises(ValueError):
        bin_frequencies(256, 0.0)


@pytest.mark.parametrize("transform", ["fft", "dft"])
def test_ten_hz_sine_concentrates_power_in_alpha(transform: str) -> None:
    powers = compute_band_powers(_sine(10.0), 256.0, transform=transform)

    assert list(powers) == ["delta", "theta", "alpha", "beta", "gamma"]
    for other in ("delta", "beta", "gamma"):
        assert powers["alpha"] > powers[other]
    assert dominant_band(powers) == "alpha"


def test_white_noise_gives_non_negative_band_powers() -> None:
    rng = np.random.default_rng(1234)
    powers = compute_band_powers(rng.standard_normal(256), 256.0)

    assert set(powers) == set(DEFAULT_BANDS)
    assert all(value >= 0.0 for value in powers.values())
    assert dominant_band(powers) in DEFAULT_BANDS


def test_band_power_is_log_compressed_and_half_open() -> None:
    freqs = np.array([0.0, 4.0, 8.0, 12.0])
    power = np.array([1.0, 9.0, 99.0, 5.0])

    assert band_power(freqs, power, 4.0, 8.0) == pytest.approx(1.0)  # log10(1 + 9)
    assert band_power(freqs, power, 8.0, 12.0) == pytest.approx(2.0)  # 12 Hz excluded
    assert band_power(freqs, power, 20.0, 30.0) == 0.0
    with pytest.raises(ValueError):
        band_powers(freqs, power[:2])


def test_zero_signal_gives_zero_powers() -> None:
    powers = compute_band_powers(np.zeros(256), 256.0)
    assert all(value == 0.0 for value in powers.values())


def test_windowed_power_spectrum_rejects_unknown_transform() -> None:
    with pytest.raises(ValueError):
        windowed_power_spectrum(np.ones(8), 100.0, transform="wavelet")


def test_coerce_bands_drops_invalid_entries() -> None:
    bands = coerce_bands({"Alpha": [8, 13], "broken": [5], "backwards": [10, 2], "mu": ("8", "12")})
    assert bands == {"alpha": (8.0, 13.0), "mu": (8.0, 12.0)}
    assert coerce_bands(None) == DEFAULT_BANDS
    assert coerce_bands({"bad": "x"}) == DEFAULT_BANDS


def test_rms_variant_is_dc_insensitive_and_guarded() -> None:
    x = _sine(10.0)
    assert rms(x) == pytest.approx(50.0 / np.sqrt(2.0), rel=1e-3)

    expected = 10.0 * np.log1p(rms(x - x.mean()))
    assert rms_beta_power(x) == pytest.approx(expected)
    assert rms_beta_power(x + 512.0) == pytest.approx(expected)
    assert rms_beta_power(x[:99]) == 0.0
    assert rms_beta_power(np.full(256, 300.0)) == 0.0
    assert compute_rms_band_powers(x) == {"beta": pytest.approx(expected)}


def test_signal_quality() -> None:
    quality = signal_quality([1.0, 3.0, 5.0, 7.0])
    assert quality.mean == 4.0
    assert quality.minimum == 1.0
    assert quality.maximum == 7.0
    assert quality.range == 6.0
    assert quality.std == pytest.approx(np.sqrt(5.0))


def test_estimator_gates_on_rate_window_and_cooldown() -> None:
    est = SpectralEstimator(window_length=256, update_interval_ms=250, min_sample_rate_hz=20.0)
    buffer = _sine(10.0, n=300)

    assert est.maybe_update(buffer, None, 0) is None
    assert est.maybe_update(buffer, 19.9, 0) is None
    assert est.maybe_update(buffer[:255], 256.0, 0) is None

    first = est.maybe_update(buffer, 256.0, 0)
    assert first is not None
    assert est.last_update_ms == 0

    assert est.maybe_update(buffer, 256.0, 249) is None
    assert est.maybe_update(buffer, 256.0, 250) is not None
    assert est.update_count == 2


def test_estimator_uses_only_newest_window() -> None:
    est = SpectralEstimator(window_length=256)
    buffer = np.concatenate([np.full(500, 1e6), _sine(10.0)])

    powers = est.maybe_update(buffer, 256.0, 0)

    assert powers == pytest.approx(compute_band_powers(_sine(10.0), 256.0))


def test_rms_estimator_ignores_sample_rate_gate() -> None:
    est = SpectralEstimator(window_length=256, estimator="rms")
    powers = est.maybe_update(_sine(10.0), None, 0)
    assert powers is not None
    assert list(powers) == ["beta"]

    with pytest.raises(ValueError):
        SpectralEstimator(estimator="bogus")


def test_estimate_requires_sample_rate_for_spectral_variant() -> None:
    est = SpectralEstimator(window_length=256)
    with pytest.raises(ValueError):
        est.estimate(_sine(10.0), None)
    with pytest.raises(ValueError):
        est.estimate(_sine(10.0), 0.0)

    assert list(SpectralEstimator(estimator="rms").estimate(_sine(10.0), None)) == ["beta"]
