import pytest

from gnsslink.diagnostics import FixDiagnostic, UbloxTopicDiagnostic, target_frequency


def test_one_second_period_is_one_hertz():
    assert target_frequency(1, 1000) == pytest.approx(1.0)


def test_doubling_period_halves_frequency():
    assert target_frequency(1, 500) == pytest.approx(2 * target_frequency(1, 1000))
    assert target_frequency(2, 250) == pytest.approx(target_frequency(1, 500))


@pytest.mark.parametrize("nav_rate, meas_rate", [(0, 250), (1, 0), (-1, 250)])
def test_non_positive_rates_raise(nav_rate, meas_rate):
    with pytest.raises(ValueError):
        target_frequency(nav_rate, meas_rate)


def test_fix_diagnostic_bounds_equal_target():
    diag = FixDiagnostic("fix", 0.15, 10, 0.0, 1, 250)
    assert diag.min_freq == diag.max_freq == target_frequency(1, 250)
    assert diag.name == "fix"
    assert diag.freq_window == 10


def test_fix_diagnostic_stamp_bounds():
    diag = FixDiagnostic("fix", 0.15, 10, 0.0, 1, 1000)
    assert diag.stamp_min == 0.0
    assert diag.stamp_max == pytest.approx(1.15)


def test_fix_diagnostic_stamp_max_grows_with_tolerance():
    narrow = FixDiagnostic("fix", 0.1, 10, 0.0, 1, 250)
    wide = FixDiagnostic("fix", 0.5, 10, 0.0, 1, 250)
    assert wide.stamp_max > narrow.stamp_max


def test_fix_diagnostic_rejects_zero_rate():
    with pytest.raises(ValueError):
        FixDiagnostic("fix", 0.15, 10, 0.0, 0, 250)


def test_topic_from_rates():
    diag = UbloxTopicDiagnostic.from_rates("rxmraw", 0.15, 25, 1, 250)
    assert diag.topic == "rxmraw"
    assert diag.min_freq == diag.max_freq == target_frequency(1, 250)
    assert (diag.freq_tol, diag.freq_window) == (0.15, 25)


def test_topic_from_bounds():
    diag = UbloxTopicDiagnostic.from_bounds("rxmrtcm", 1, 10, 0.1, 25)
    assert (diag.min_freq, diag.max_freq) == (1, 10)
    assert diag.topic == "rxmrtcm"


def test_topic_constructors_agree_when_bounds_match():
    target = target_frequency(2, 200)
    assert UbloxTopicDiagnostic.from_rates("t", 0.1, 5, 2, 200) == (
        UbloxTopicDiagnostic.from_bounds("t", target, target, 0.1, 5)
    )