import pytest

from minebeat.components.synth_params import SynthParams


def test_defaults():
    params = SynthParams()
    assert params.bpm == 100
    assert params.waveform == "triangle"
    assert params.filter_cutoff == 8000
    assert params.reverb_mix == pytest.approx(0.30)


def test_from_dict_ignores_unknown_keys():
    params = SynthParams.from_dict({"bpm": 140, "attack": 0.05, "colour": "blue"})
    assert params.bpm == 140
    assert params.attack == 0.05
    assert not hasattr(params, "colour")


def test_invalid_waveform_rejected():
    with pytest.raises(ValueError):
        SynthParams(waveform="noise")
    params = SynthParams()
    with pytest.raises(ValueError):
        params.update({"waveform": "noise", "bpm": 10})
    assert params.bpm == 100


def test_cache_key_ignores_transport():
    a = SynthParams(bpm=90, volume=0.2)
    b = SynthParams(bpm=180, volume=0.9)
    assert a.cache_key() == b.cache_key()
    assert SynthParams(waveform="sine").cache_key() != a.cache_key()


def test_to_dict_round_trip():
    params = SynthParams(bpm=123, waveform="square")
    assert SynthParams.from_dict(params.to_dict()) == params


def test_numeric_fields_are_coerced_or_rejected():
    params = SynthParams.from_dict({"bpm": "96", "filter_q": 2})
    assert params.bpm == 96.0
    assert isinstance(params.filter_q, float)
    for bad in (None, "fast", [1], True, float("nan")):
        with pytest.raises(ValueError):
            params.update({"attack": 0.5, "bpm": bad})
    assert params.attack == 0.01
    with pytest.raises(ValueError):
        params.update(["bpm", 90])
