# envlights/merge.py
"""
Merging of candidate lights into a smaller set of directional lights
"""
import math
from enum import Enum

from .light import angle_between


class MergeStrategy(Enum):
    """How candidate lights are reduced, one strategy per run"""
    PLAIN = 'plain'
    MERGE = 'merge'
    SELECT = 'select'
    NEAR_MERGE = 'near-merge'

    @classmethod
    def parse(cls, value):
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            choices = ', '.join(s.value for s in cls)
            raise ValueError(f"Unknown merge strategy '{value}' (expected one of: {choices})") from None


def can_absorb(acceptor, candidate, max_area, max_length, max_angle):
    """
    True if the candidate fits into the acceptor's neighbourhood

    The union footprint must stay within max_area and max_length
    (normalized) and the two directions must be at most max_angle
    degrees apart.
    """
    _, _, w, h = acceptor.union_footprint(candidate)
    if w * h > max_area:
        return False
    if max(w, h) > max_length:
        return False
    return angle_between(acceptor.direction, candidate.direction) <= max_angle


def merge_lights(candidates, max_area, max_length, min_luminance, max_angle):
    """
    Single pass merge of weak lights into stronger neighbours

    Candidates are visited from most to least powerful, so every light
    already accepted is at least as strong as the one being examined.
    A candidate whose sum is below min_luminance is absorbed by the
    first accepted light it fits with; anything else is accepted as its
    own light. The pass is not repeated: an acceptor that grows may
    catch later candidates that an earlier one missed.

    Args:
        candidates: list of Light
        max_area: max normalized area of a merged footprint
        max_length: max normalized width or height of a merged footprint
        min_luminance: absolute luminance sum under which a light may be absorbed
        max_angle: max angle in degrees between merged directions

    Returns:
        (merged lights sorted by decreasing sum, number of absorbed lights)
    """
    ordered = sorted(candidates, key=lambda l: l.sum, reverse=True)
    accepted = []

    for candidate in ordered:
        if candidate.sum < min_luminance:
            for i, light in enumerate(accepted):
                if can_absorb(light, candidate, max_area, max_length, max_angle):
                    accepted[i] = light.absorb(candidate)
                    break
            else:
                accepted.append(candidate)
        else:
            accepted.append(candidate)

    merged = sorted(accepted, key=lambda l: l.sum, reverse=True)
    return merged, len(candidates) - len(merged)


def select_lights(lights, max_area, max_angle):
    """
    Keep compact lights that point away from every stronger kept light

    Args:
        lights: list of Light
        max_area: max normalized footprint area of a kept light
        max_angle: lights within this many degrees of a kept one are dropped

    Returns:
        (selected lights sorted by decreasing sum, number of dropped lights)
    """
    selected = []
    for light in sorted(lights, key=lambda l: l.sum, reverse=True):
        if light.area > max_area:
            continue
        if any(angle_between(light.direction, kept.direction) <= max_angle for kept in selected):
            continue
        selected.append(light)
    return selected, len(lights) - len(selected)


def merge_near_lights(lights, max_area, max_length, max_angle):
    """Second merge pass where every light is eligible, whatever its sum"""
    return merge_lights(lights, max_area, max_length, math.inf, max_angle)


def apply_merge_strategy(strategy, candidates, max_area, max_length, min_luminance, max_angle):
    """
    Run the configured merge strategy

    Returns:
        (lights sorted by decreasing sum, len(candidates) - len(lights))
    """
    strategy = MergeStrategy.parse(strategy)

    if strategy is MergeStrategy.PLAIN:
        return sorted(candidates, key=lambda l: l.sum, reverse=True), 0

    lights, _ = merge_lights(candidates, max_area, max_length, min_luminance, max_angle)

    if strategy is MergeStrategy.SELECT:
        lights, _ = select_lights(lights, max_area, max_angle)
    elif strategy is MergeStrategy.NEAR_MERGE:
        lights, _ = merge_near_lights(lights, max_area, max_length, max_angle)

    return lights, len(candidates) - len(lights)
