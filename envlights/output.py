# envlights/output.py
"""
JSON records for extracted lights
"""
import json


def light_to_record(light, index, luminance_sum):
    """
    Serializable description of one light

    Args:
        light: Light
        index: rank of the light in the sorted list
        luminance_sum: luminance sum of the whole environment map
    """
    u, v = light.centroid
    x, y, w, h = light.footprint
    return {
        'index': index,
        'direction': [float(c) for c in light.direction],
        'luminosity': light.lum_average,
        'color': list(light.color),
        'centroid': [u, v],
        'area': {'x': x, 'y': y, 'w': w, 'h': h},
        'sum': light.sum,
        'lum_ratio': light.sum / luminance_sum if luminance_sum else 0.0,
        'variance': light.variance,
        'error': 1 if light.error else 0,
    }


def lights_to_records(lights, luminance_sum, num_lights=0):
    """
    Records for the first num_lights lights above the horizon

    Lights with v >= 0.5 map to the lower hemisphere and are skipped;
    they keep their index but do not count toward num_lights.

    Args:
        lights: list of Light sorted by decreasing sum
        luminance_sum: luminance sum of the whole environment map
        num_lights: max number of records, <= 0 for all

    Returns:
        List of dict
    """
    limit = num_lights if num_lights > 0 else len(lights)
    records = []

    for index, light in enumerate(lights):
        if len(records) >= limit:
            break
        # under hemisphere, we cull
        if light.centroid[1] >= 0.5:
            continue
        records.append(light_to_record(light, index, luminance_sum))

    return records


def output_json(lights, luminance_sum, num_lights=0, stream=None, indent=None):
    """
    Write the light records as a JSON array

    Args:
        stream: file object to write to, None to only return the text

    Returns:
        The JSON text
    """
    text = json.dumps(lights_to_records(lights, luminance_sum, num_lights), indent=indent)
    if stream is not None:
        stream.write(text)
        stream.write("\n")
    return text
