import pytest
from pydantic import ValidationError

from playin_map.geo_box import quantize, to_bounding_box, viewport_around
from playin_map.schemas import BoundingBox, Viewport


def test_to_bounding_box_is_symmetric_around_center():
    box = to_bounding_box(
        Viewport(center_lat=48.8566, center_lon=2.3522, lat_delta=0.1, lon_delta=0.2)
    )
    assert box.min_lat == pytest.approx(48.8066)
    assert box.max_lat == pytest.approx(48.9066)
    assert box.min_lon == pytest.approx(2.2522)
    assert box.max_lon == pytest.approx(2.4522)


def test_zero_span_gives_degenerate_box():
    box = to_bounding_box(Viewport(center_lat=1.0, center_lon=2.0, lat_delta=0, lon_delta=0))
    assert box.min_lat == box.max_lat == 1.0
    assert box.min_lon == box.max_lon == 2.0


def test_negative_span_rejected():
    with pytest.raises(ValidationError):
        Viewport(center_lat=0, center_lon=0, lat_delta=-1, lon_delta=1)


def test_inverted_box_rejected():
    with pytest.raises(ValidationError):
        BoundingBox(min_lat=2, max_lat=1, min_lon=0, max_lon=1)


def test_quantize_rounds_to_six_decimals():
    box = BoundingBox(min_lat=48.80660049, max_lat=48.9066, min_lon=2.25, max_lon=2.4522)
    assert quantize(box) == "48.806600_48.906600_2.250000_2.452200"


def test_quantize_precision_is_configurable():
    box = BoundingBox(min_lat=1.234, max_lat=1.236, min_lon=0, max_lon=1)
    assert quantize(box, precision=2) == "1.23_1.24_0.00_1.00"


def test_quantize_normalizes_negative_zero():
    box = BoundingBox(min_lat=-0.0000001, max_lat=0.0000001, min_lon=-1, max_lon=1)
    assert quantize(box) == "0.000000_0.000000_-1.000000_1.000000"


def test_quantize_stable_under_recomputation_noise():
    base = BoundingBox(min_lat=48.80661, max_lat=48.90662, min_lon=2.25223, max_lon=2.45224)
    for noise in (1e-8, -1e-8, 5e-8, -5e-8, 1e-7, -1e-7):
        jittered = BoundingBox(
            min_lat=base.min_lat + noise,
            max_lat=base.max_lat + noise,
            min_lon=base.min_lon + noise,
            max_lon=base.max_lon + noise,
        )
        assert quantize(jittered) == quantize(base)


def test_viewport_around_uses_default_span():
    viewport = viewport_around(48.0, 2.0)
    assert viewport.lat_delta == viewport.lon_delta == 0.10
