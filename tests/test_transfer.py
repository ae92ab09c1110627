import math

import numpy as np
import pytest

from hdrscope.errors import ConfigurationError, DomainError
from hdrscope.transfer import (
  HLG,
  PQ,
  SRGB,
  SystemGamma,
  TransferFunction,
  TransferFunctionKind,
  clip_signal,
  get_transfer_function,
  nits_to_relative,
  pq_to_relative,
  relative_to_nits,
  relative_to_pq,
  system_gamma_for,
)

ALL = [SRGB, PQ, HLG]


@pytest.mark.parametrize("tf", ALL, ids=lambda tf: tf.kind.value)
def test_zero_maps_to_zero(tf):
  assert tf.encode(0.0) == 0.0
  assert tf.decode(0.0) == 0.0


@pytest.mark.parametrize("tf", ALL, ids=lambda tf: tf.kind.value)
def test_satisfies_capability_contract(tf):
  assert isinstance(tf, TransferFunction)
  assert get_transfer_function(tf.kind) is tf
  assert get_transfer_function(tf.kind.value) is tf


def test_unknown_kind_is_rejected():
  with pytest.raises(ConfigurationError):
    get_transfer_function("gamma22")


# --- sRGB -------------------------------------------------------------------


def test_srgb_reference_values():
  assert SRGB.encode(1.0) == pytest.approx(1.0)
  assert SRGB.encode(0.0031308) == pytest.approx(0.040449936, abs=1e-9)
  assert SRGB.encode(0.001) == pytest.approx(0.01292)
  assert SRGB.encode(0.5) == pytest.approx(1.055 * 0.5 ** (1 / 2.4) - 0.055)


def test_srgb_branches_meet_at_threshold():
  t = 0.0031308
  linear_branch = 12.92 * t
  power_branch = 1.055 * t ** (1 / 2.4) - 0.055
  assert linear_branch == pytest.approx(power_branch, abs=1e-6)
  assert SRGB.encode(math.nextafter(t, 1.0)) == pytest.approx(SRGB.encode(t), abs=1e-6)


def test_srgb_round_trips(rng):
  for x in rng.uniform(0.0, 1.0, 500):
    assert SRGB.decode(SRGB.encode(x)) == pytest.approx(x, abs=1e-6)
    assert SRGB.encode(SRGB.decode(x)) == pytest.approx(x, abs=1e-6)


def test_srgb_does_not_clamp():
  assert SRGB.encode(2.0) > 1.0
  assert SRGB.encode(-0.5) == pytest.approx(-0.5 * 12.92)
  assert SRGB.decode(-0.1) == pytest.approx(-0.1 / 12.92)
  assert clip_signal(SRGB.encode(2.0)) == 1.0
  assert clip_signal(SRGB.encode(-0.5)) == 0.0


def test_srgb_array_matches_scalar():
  x = np.linspace(-0.1, 1.2, 257)
  expected = np.array([SRGB.encode(v) for v in x])
  np.testing.assert_allclose(SRGB.encode_array(x), expected, rtol=1e-12, atol=1e-15)
  expected = np.array([SRGB.decode(v) for v in x])
  np.testing.assert_allclose(SRGB.decode_array(x), expected, rtol=1e-12, atol=1e-15)


# --- PQ ---------------------------------------------------------------------


def test_pq_reference_values():
  assert PQ.encode(1.0) == pytest.approx(0.508078, abs=1e-5)
  assert PQ.encode(100.0) == pytest.approx(1.0, abs=1e-9)
  assert PQ.encode(0.01) == pytest.approx(0.14994573210018022, abs=1e-5)
  assert PQ.encode(10.0) == pytest.approx(0.751827096247041, abs=1e-5)
  assert PQ.encode(40.0) == pytest.approx(0.9025723933109373, abs=1e-5)


def test_pq_round_trip(rng):
  for x in np.concatenate([rng.uniform(0.0, 100.0, 500), [1e-4, 0.01, 1.0, 100.0]]):
    assert PQ.decode(PQ.encode(x)) == pytest.approx(x, rel=1e-6, abs=1e-9)


def test_pq_scale_conversion_is_explicit():
  assert relative_to_pq(1.0) == pytest.approx(0.01)
  assert relative_to_pq(100.0) == pytest.approx(1.0)
  assert pq_to_relative(relative_to_pq(3.7)) == pytest.approx(3.7)
  assert relative_to_nits(1.0) == 100.0
  assert nits_to_relative(250.0) == 2.5


def test_pq_nits_helpers():
  assert PQ.signal_to_nits(1.0) == pytest.approx(10000.0, rel=1e-9)
  assert PQ.nits_to_signal(100.0) == pytest.approx(0.508078, abs=1e-5)
  assert PQ.signal_to_nits(PQ.nits_to_signal(1000.0)) == pytest.approx(1000.0, rel=1e-9)


def test_pq_above_peak_is_not_clamped():
  assert PQ.encode(200.0) > 1.0
  assert PQ.decode(1.2) > 100.0


@pytest.mark.parametrize("bad", [-1.0, -1e-9])
def test_pq_rejects_negative_light(bad):
  with pytest.raises(DomainError):
    PQ.encode(bad)
  with pytest.raises(DomainError):
    PQ.encode_array([0.5, bad])


def test_pq_rejects_undecodable_signal():
  with pytest.raises(DomainError):
    PQ.decode(-0.1)
  with pytest.raises(DomainError):
    PQ.decode(2.5)
  with pytest.raises(DomainError):
    PQ.decode_array([0.2, 2.5])


def test_pq_array_matches_scalar():
  x = np.linspace(0.0, 100.0, 101)
  expected = np.array([PQ.encode(v) for v in x])
  np.testing.assert_allclose(PQ.encode_array(x), expected, rtol=1e-12)
  s = np.linspace(0.0, 1.0, 101)
  expected = np.array([PQ.decode(v) for v in s])
  np.testing.assert_allclose(PQ.decode_array(s), expected, rtol=1e-10, atol=1e-14)


# --- HLG --------------------------------------------------------------------


def test_hlg_constants():
  s = HLG.spec
  assert s.b == pytest.approx(0.28466892, abs=1e-8)
  assert s.c == pytest.approx(0.55991073, abs=1e-8)
  assert s.system_gamma == 1.2


def test_hlg_transition_point():
  assert HLG.encode(1 / 12) == pytest.approx(0.5, abs=1e-12)
  assert HLG.decode(0.5) == pytest.approx(1 / 12, abs=1e-12)


def test_hlg_reference_values():
  assert HLG.encode(1.0) == pytest.approx(1.0, abs=1e-7)
  assert HLG.encode(0.5) == pytest.approx(0.8716434713446153, abs=1e-6)
  assert HLG.encode(12.0) == pytest.approx(1.4483223301541637, abs=1e-6)


@pytest.mark.parametrize("x", [0.0, 1 / 12, 0.5, 1.0, 5.0, 12.0])
def test_hlg_round_trip_regression_points(x):
  assert HLG.decode(HLG.encode(x)) == pytest.approx(x, abs=1e-6)


def test_hlg_round_trip_random(rng):
  for e in rng.uniform(0.0, 12.0, 1000):
    assert HLG.decode(HLG.encode(e)) == pytest.approx(e, abs=1e-6)


def test_hlg_decode_ignores_display():
  # The inverse OETF is the same whatever display is configured
  before = HLG.decode(0.75)
  HLG.signal_to_nits(0.75, 4000)
  assert HLG.decode(0.75) == before


@pytest.mark.parametrize("peak", [100, 400, 1000, 4000, 10000])
def test_hlg_nits_round_trip(peak):
  for n in np.linspace(0.0, peak, 41):
    assert HLG.signal_to_nits(HLG.nits_to_signal(n, peak), peak) == pytest.approx(n, rel=1e-9, abs=1e-9)


def test_hlg_signal_to_nits_composition():
  assert HLG.signal_to_nits(1.0, 1000) == pytest.approx(1000.0, rel=1e-6)
  assert HLG.signal_to_nits(0.5, 1000) == pytest.approx(1000 * (1 / 12) ** 1.2)
  assert HLG.signal_to_nits(0.5, 1000, system_gamma=1.0) == pytest.approx(1000 / 12)


@pytest.mark.parametrize("peak", [0, -100, float("nan"), float("inf")])
def test_hlg_rejects_bad_peak(peak):
  with pytest.raises(ConfigurationError):
    HLG.signal_to_nits(0.5, peak)
  with pytest.raises(ConfigurationError):
    HLG.nits_to_signal(50.0, peak)


@pytest.mark.parametrize("gamma", [0, -1.2, float("nan")])
def test_hlg_rejects_bad_gamma(gamma):
  with pytest.raises(ConfigurationError):
    HLG.signal_to_nits(0.5, 1000, gamma)


def test_hlg_rejects_negative_input():
  with pytest.raises(DomainError):
    HLG.encode(-0.5)
  with pytest.raises(DomainError):
    HLG.decode(-0.01)
  with pytest.raises(DomainError):
    HLG.nits_to_signal(-1.0, 1000)


def test_hlg_array_matches_scalar():
  e = np.linspace(0.0, 12.0, 241)
  expected = np.array([HLG.encode(v) for v in e])
  np.testing.assert_allclose(HLG.encode_array(e), expected, rtol=1e-12)
  s = np.linspace(0.0, 1.5, 151)
  expected = np.array([HLG.decode(v) for v in s])
  np.testing.assert_allclose(HLG.decode_array(s), expected, rtol=1e-12)


# --- shared properties -------------------------------------------------------


@pytest.mark.parametrize(
  "tf, stop",
  [(SRGB, 1.0), (PQ, 100.0), (HLG, 12.0)],
  ids=["srgb", "pq", "hlg"],
)
def test_encode_is_monotonic(tf, stop):
  x = np.linspace(0.0, stop, 2001)
  y = tf.encode_array(x)
  assert np.all(np.diff(y) >= 0)


def test_system_gamma_defaults_to_fixed():
  for peak in (100, 1000, 4000):
    assert system_gamma_for(peak) == 1.2


def test_system_gamma_peak_adaptive():
  assert system_gamma_for(1000, SystemGamma.PEAK_ADAPTIVE) == pytest.approx(1.2)
  assert system_gamma_for(2000, "peak_adaptive") == pytest.approx(1.2 + 0.42 * math.log10(2))
  assert system_gamma_for(4000, SystemGamma.PEAK_ADAPTIVE) == pytest.approx(1.2 * 1.111 ** 2)
  assert system_gamma_for(200, SystemGamma.PEAK_ADAPTIVE) < 1.2


def test_system_gamma_rejects_unknown_mode():
  with pytest.raises(ConfigurationError):
    system_gamma_for(1000, "variable")


def test_kind_enum_is_closed():
  assert {k.value for k in TransferFunctionKind} == {"srgb", "pq", "hlg"}


@pytest.mark.parametrize("tf", ALL, ids=lambda tf: tf.kind.value)
@pytest.mark.parametrize("value", [math.inf, -math.inf, math.nan], ids=["inf", "-inf", "nan"])
def test_non_finite_input_is_rejected(tf, value):
  with pytest.raises(DomainError):
    tf.encode(value)
  with pytest.raises(DomainError):
    tf.decode(value)
  with pytest.raises(DomainError):
    tf.encode_array([0.5, value])
  with pytest.raises(DomainError):
    tf.decode_array([value])


def test_pq_infinite_light_is_not_nan():
  with pytest.raises(DomainError):
    PQ.encode(float("inf"))
  with pytest.raises(DomainError):
    PQ.nits_to_signal(float("inf"))


def test_hlg_decode_overflow_is_a_domain_error():
  with pytest.raises(DomainError) as excinfo:
    HLG.decode(200.0)
  assert excinfo.value.value == 200.0
  with pytest.raises(DomainError):
    HLG.decode_array([0.5, 200.0])
  assert math.isfinite(HLG.decode(100.0))


def test_hlg_display_light_overflow_is_a_domain_error():
  # decode(125) is finite, its power by the system gamma is not
  assert math.isfinite(HLG.decode(125.0))
  with pytest.raises(DomainError):
    HLG.signal_to_nits(125.0, 1000)
  with pytest.raises(DomainError):
    HLG.signal_to_nits_array([0.5, 125.0], 1000)
  with pytest.raises(DomainError):
    HLG.nits_to_signal(float("nan"), 1000)


def test_srgb_decode_overflow_is_a_domain_error():
  with pytest.raises(DomainError):
    SRGB.decode(1e200)
  with pytest.raises(DomainError):
    SRGB.decode_array([0.5, 1e200])
  assert SRGB.decode(1e100) > 0
