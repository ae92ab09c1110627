import dataclasses
import math

import pytest

from hdrscope.config import (
  DEFAULT_BINS,
  DEFAULT_PEAK_NITS,
  HistogramScale,
  TransferMode,
  ViewSettings,
)
from hdrscope.errors import ConfigurationError
from hdrscope.transfer import SystemGamma


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
  for name in ("HDRSCOPE_PEAK_NITS", "HDRSCOPE_TRANSFER_MODE", "HDRSCOPE_HISTOGRAM_SCALE"):
    monkeypatch.delenv(name, raising=False)


def test_defaults():
  settings = ViewSettings()
  assert settings.peak_nits == DEFAULT_PEAK_NITS
  assert settings.transfer_mode is TransferMode.EOTF
  assert settings.histogram_scale is HistogramScale.LOG
  assert settings.system_gamma_mode is SystemGamma.FIXED
  assert settings.system_gamma == 1.2
  assert settings.bins == DEFAULT_BINS
  assert settings.is_preset_peak


def test_strings_are_coerced():
  settings = ViewSettings(
    transfer_mode="oetf", histogram_scale="sqrt", system_gamma_mode="peak_adaptive", peak_nits=2000
  )
  assert settings.transfer_mode is TransferMode.OETF
  assert settings.histogram_scale is HistogramScale.SQRT
  assert settings.system_gamma == pytest.approx(1.2 + 0.42 * math.log10(2))


def test_non_preset_peak_is_accepted():
  settings = ViewSettings(peak_nits=750)
  assert settings.peak_nits == 750.0
  assert not settings.is_preset_peak


@pytest.mark.parametrize(
  "kwargs",
  [
    {"peak_nits": 0},
    {"peak_nits": -100},
    {"peak_nits": math.nan},
    {"peak_nits": math.inf},
    {"peak_nits": "bright"},
    {"transfer_mode": "sideways"},
    {"histogram_scale": "cubic"},
    {"system_gamma_mode": "auto"},
    {"bins": 0},
    {"curve_points": 1},
  ],
)
def test_invalid_settings(kwargs):
  with pytest.raises(ConfigurationError):
    ViewSettings(**kwargs)


def test_settings_are_frozen():
  settings = ViewSettings()
  with pytest.raises(dataclasses.FrozenInstanceError):
    settings.peak_nits = 400


def test_create_without_env():
  assert ViewSettings.create() == ViewSettings()


def test_create_reads_env(monkeypatch):
  monkeypatch.setenv("HDRSCOPE_PEAK_NITS", "600")
  monkeypatch.setenv("HDRSCOPE_TRANSFER_MODE", " OETF ")
  monkeypatch.setenv("HDRSCOPE_HISTOGRAM_SCALE", "sqrt")
  settings = ViewSettings.create()
  assert settings.peak_nits == 600.0
  assert settings.transfer_mode is TransferMode.OETF
  assert settings.histogram_scale is HistogramScale.SQRT


def test_arguments_override_env(monkeypatch):
  monkeypatch.setenv("HDRSCOPE_PEAK_NITS", "600")
  monkeypatch.setenv("HDRSCOPE_TRANSFER_MODE", "oetf")
  settings = ViewSettings.create(peak_nits=4000, transfer_mode="eotf")
  assert settings.peak_nits == 4000.0
  assert settings.transfer_mode is TransferMode.EOTF


def test_empty_env_falls_back(monkeypatch):
  monkeypatch.setenv("HDRSCOPE_PEAK_NITS", "  ")
  assert ViewSettings.create().peak_nits == DEFAULT_PEAK_NITS


@pytest.mark.parametrize(
  "name, value",
  [
    ("HDRSCOPE_PEAK_NITS", "bright"),
    ("HDRSCOPE_PEAK_NITS", "-5"),
    ("HDRSCOPE_PEAK_NITS", "0"),
    ("HDRSCOPE_HISTOGRAM_SCALE", "cubic"),
  ],
)
def test_bad_env_values(monkeypatch, name, value):
  monkeypatch.setenv(name, value)
  with pytest.raises(ConfigurationError):
    ViewSettings.create()


def test_create_rejects_zero_bins():
  with pytest.raises(ConfigurationError):
    ViewSettings.create(bins=0)


def test_system_gamma_is_resolved_once():
  settings = ViewSettings(peak_nits=2000, system_gamma_mode="peak_adaptive")
  assert settings.system_gamma == settings.system_gamma
  assert settings.system_gamma == pytest.approx(1.2 + 0.42 * math.log10(2))
  assert "_system_gamma" not in repr(settings)
