# test_output.py
import io
import json
import math

import numpy as np
import pytest

from envlights.light import Light, angle_between, equirect_to_direction
from envlights.output import light_to_record, lights_to_records, output_json


def make_light(u, v, total):
    return Light(centroid=(u, v), footprint=(u - 0.05, v - 0.05, 0.1, 0.1), rect=(0, 0, 4, 4),
                 color=(1.0, 0.5, 0.25), sum=total, pixel_count=16, sum2=total * total / 16)


@pytest.mark.parametrize("u, v, expected", [
    (0.25, 0.5, (1.0, 0.0, 0.0)),
    (0.5, 0.5, (0.0, 0.0, 1.0)),
    (0.0, 0.5, (0.0, 0.0, -1.0)),
    (0.3, 0.0, (0.0, -1.0, 0.0)),
    (0.7, 1.0, (0.0, 1.0, 0.0)),
])
def test_equirect_direction(u, v, expected):
    d = equirect_to_direction(u, v)
    assert np.linalg.norm(d) == pytest.approx(1.0)
    assert d == pytest.approx(np.array(expected), abs=1e-12)


def test_angle_between():
    a = equirect_to_direction(0.25, 0.5)
    b = equirect_to_direction(0.5, 0.5)
    assert angle_between(a, b) == pytest.approx(90.0)
    assert angle_between(a, a) == pytest.approx(0.0, abs=1e-6)


def test_record_fields():
    light = make_light(0.25, 0.25, 40.0)
    record = light_to_record(light, 3, 160.0)

    assert record['index'] == 3
    assert record['direction'] == pytest.approx(list(equirect_to_direction(0.25, 0.25)))
    theta = 0.75 * math.pi
    assert record['direction'][0] == pytest.approx(math.sin(theta))
    assert record['luminosity'] == pytest.approx(2.5)
    assert record['color'] == [1.0, 0.5, 0.25]
    assert record['centroid'] == [0.25, 0.25]
    assert record['area'] == pytest.approx({'x': 0.2, 'y': 0.2, 'w': 0.1, 'h': 0.1})
    assert record['sum'] == 40.0
    assert record['lum_ratio'] == pytest.approx(0.25)
    assert record['variance'] == pytest.approx(0.0, abs=1e-9)
    assert record['error'] == 0


def test_lower_hemisphere_is_culled():
    lights = [make_light(0.1, 0.2, 50.0), make_light(0.2, 0.7, 40.0),
              make_light(0.3, 0.5, 30.0), make_light(0.4, 0.1, 20.0)]

    records = lights_to_records(lights, 140.0)
    assert [r['index'] for r in records] == [0, 3]
    assert all(r['centroid'][1] < 0.5 for r in records)


def test_light_cap_counts_emitted_records():
    lights = [make_light(0.1, 0.8, 50.0), make_light(0.2, 0.2, 40.0),
              make_light(0.3, 0.3, 30.0), make_light(0.4, 0.1, 20.0)]

    assert [r['index'] for r in lights_to_records(lights, 140.0, num_lights=1)] == [1]
    assert [r['index'] for r in lights_to_records(lights, 140.0, num_lights=2)] == [1, 2]
    assert len(lights_to_records(lights, 140.0, num_lights=0)) == 3


def test_output_json_stream():
    lights = [make_light(0.1, 0.2, 50.0), make_light(0.4, 0.1, 20.0)]
    stream = io.StringIO()
    text = output_json(lights, 70.0, num_lights=0, stream=stream)

    parsed = json.loads(stream.getvalue())
    assert parsed == json.loads(text)
    assert len(parsed) == 2
    assert sum(r['lum_ratio'] for r in parsed) == pytest.approx(1.0)


def test_error_flag_serialized():
    light = make_light(0.1, 0.2, 0.0)
    light.error = True
    assert light_to_record(light, 0, 0.0)['error'] == 1
    assert light_to_record(light, 0, 0.0)['lum_ratio'] == 0.0
