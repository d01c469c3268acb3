"""
Scoring primitives for the rule engine.

Every check ends in make_check(): a passing check earns its full max_score
and carries no suggestion; a non-passing check earns a partial score in
[0, max_score - 1] and is a WARNING when that partial score is positive,
otherwise a FAIL.

Partial credit for numeric checks is linear between a fail floor (0 points)
and a pass ceiling (max_score points), clamped, then rounded half-up.
"""

import math
from typing import List, Union

from .models import Check, CheckStatus, Module


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def ratio(value: float, floor: float, ceiling: float) -> float:
    """Position of value between floor (0.0) and ceiling (1.0), clamped.

    floor may be above ceiling for lower-is-better metrics.
    """
    if ceiling == floor:
        return 1.0 if value == ceiling else 0.0
    r = (value - floor) / (ceiling - floor)
    return min(1.0, max(0.0, r))


def linear_score(value: float, floor: float, ceiling: float, max_score: int) -> int:
    return round_half_up(ratio(value, floor, ceiling) * max_score)


def band_score(
    value: float, low: float, high: float, tolerance: float, max_score: int
) -> int:
    """Full score inside [low, high], fading to 0 at `tolerance` outside it."""
    if low <= value <= high:
        return max_score
    if value < low:
        return linear_score(value, low - tolerance, low, max_score)
    return linear_score(value, high + tolerance, high, max_score)


def half(max_score: int, condition: bool) -> int:
    """Partial credit for boolean checks with a softer secondary condition."""
    return max_score // 2 if condition else 0


def make_check(
    check_id: str,
    name: str,
    passed: bool,
    current: Union[int, str],
    expected: str,
    suggestion: str,
    max_score: int,
    partial: int = 0,
) -> Check:
    if passed:
        return Check(
            id=check_id,
            name=name,
            status=CheckStatus.PASS,
            current=current,
            expected=expected,
            suggestion="",
            score=max_score,
            max_score=max_score,
        )

    score = min(max(partial, 0), max(max_score - 1, 0))
    status = CheckStatus.WARNING if score > 0 else CheckStatus.FAIL
    return Check(
        id=check_id,
        name=name,
        status=status,
        current=current,
        expected=expected,
        suggestion=suggestion or f"Cải thiện tiêu chí: {name}",
        score=score,
        max_score=max_score,
    )


def unscored(check_id: str, name: str, expected: str, max_score: int) -> Check:
    """A keyword-dependent check that cannot run without a primary keyword."""
    return Check(
        id=check_id,
        name=name,
        status=CheckStatus.WARNING,
        current="N/A",
        expected=expected,
        suggestion="Nhập từ khóa chính để chấm tiêu chí này",
        score=0,
        max_score=max_score,
    )


def neutral(check_id: str, name: str, expected: str, max_score: int) -> Check:
    """A check that does not apply to this page; passes without penalty."""
    return Check(
        id=check_id,
        name=name,
        status=CheckStatus.PASS,
        current="N/A",
        expected=expected,
        suggestion="",
        score=max_score,
        max_score=max_score,
    )


def build_module(module_id: str, name: str, checks: List[Check]) -> Module:
    return Module(
        id=module_id,
        name=name,
        score=sum(c.score for c in checks),
        max_score=sum(c.max_score for c in checks),
        checks=checks,
    )
