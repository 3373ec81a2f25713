from __future__ import annotations

import pytest

from gazelle.domain import RawAmount
from gazelle.errors import MalformedNumber
from gazelle.processors.normalizer import FieldScales, normalize, normalize_int
from gazelle.units import DecimalValue


def test_normalize_divides_by_decimals():
    assert normalize(RawAmount("1500000", 6)) == DecimalValue.of("1.5")


def test_normalize_applies_protocol_offset():
    raw = RawAmount("15" + "0" * 23, 6)
    assert normalize(raw, protocol_scale_offset=18) == DecimalValue.of("1.5")


def test_normalize_keeps_full_precision():
    value = normalize(RawAmount("1", 18))
    assert not value.is_zero()
    assert value.rescale(0).is_zero()


def test_normalize_rejects_negative_offset():
    with pytest.raises(ValueError):
        normalize(RawAmount("1", 0), protocol_scale_offset=-1)


def test_normalize_rejects_malformed_magnitude():
    with pytest.raises(MalformedNumber):
        normalize(RawAmount("12a", 6))


def test_normalize_int():
    assert normalize_int(10**18, 18) == DecimalValue.of(1)


def test_field_scales_defaults():
    scales = FieldScales()
    assert scales.total_minted_decimals == 18
    assert scales.stock_slp_scale_offset == 18
