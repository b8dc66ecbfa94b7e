"""
Significance tests used by the seasonal analyzer.

Both tests share one normal-CDF approximation (Abramowitz & Stegun 26.2.17,
absolute error < 7.5e-8) and both carry a sample-size safeguard: when the
safeguard trips, the result is marked ``reference_only`` and can never be
significant, whatever the p-value.
"""

import math

import numpy as np

from summit.config import SignificanceParams
from summit.models import StatisticalTest


# A&S 26.2.17 coefficients
_P = 0.2316419
_B = (0.319381530, -0.356563782, 1.781477937, -1.821255978, 1.330274429)
_INV_SQRT_2PI = 1.0 / math.sqrt(2.0 * math.pi)


def normal_cdf(x: float) -> float:
    """Standard normal CDF Φ(x) via the A&S polynomial."""
    z = abs(x)
    t = 1.0 / (1.0 + _P * z)
    poly = t * (_B[0] + t * (_B[1] + t * (_B[2] + t * (_B[3] + t * _B[4]))))
    tail = _INV_SQRT_2PI * math.exp(-0.5 * z * z) * poly
    return 1.0 - tail if x >= 0 else tail


def two_tailed_p(z: float) -> float:
    """2 · (1 − Φ(|z|)), clamped to [0, 1]."""
    return float(np.clip(2.0 * (1.0 - normal_cdf(abs(z))), 0.0, 1.0))


# ---------------------------------------------------------------------------
# Chi-square (2×2)
# ---------------------------------------------------------------------------

def chi_square_2x2(
    neg_a: int,
    pos_a: int,
    neg_b: int,
    pos_b: int,
    params: SignificanceParams = SignificanceParams(),
) -> StatisticalTest:
    """
    Independence test of (negative, positive) counts for group A vs group B.

    p = 2 · (1 − Φ(√χ²)); effect size is Cramér's V = √(χ² / N).
    Any expected cell below ``params.min_expected`` makes the result
    reference-only.
    """
    observed = np.array([[neg_a, pos_a], [neg_b, pos_b]], dtype=np.float64)
    n = observed.sum()

    if n == 0:
        return StatisticalTest(
            test="chi_square", statistic=0.0, p_value=1.0,
            effect_size=0.0, effect_size_name="cramers_v",
            is_significant=False, reference_only=True, min_expected=0.0,
        )

    rows = observed.sum(axis=1, keepdims=True)
    cols = observed.sum(axis=0, keepdims=True)
    expected = rows @ cols / n

    nonzero = expected > 0
    chi2 = float(np.sum((observed[nonzero] - expected[nonzero]) ** 2 / expected[nonzero]))
    p_value = two_tailed_p(math.sqrt(chi2))
    cramers_v = math.sqrt(chi2 / n)

    min_expected = float(expected.min())
    reference_only = min_expected < params.min_expected

    return StatisticalTest(
        test="chi_square",
        statistic=round(chi2, 4),
        p_value=round(p_value, 6),
        effect_size=round(cramers_v, 4),
        effect_size_name="cramers_v",
        is_significant=(not reference_only) and p_value < params.alpha,
        reference_only=reference_only,
        min_expected=round(min_expected, 4),
    )


# ---------------------------------------------------------------------------
# Two-proportion z-test
# ---------------------------------------------------------------------------

def proportion_z_test(
    x1: int,
    n1: int,
    x2: int,
    n2: int,
    params: SignificanceParams = SignificanceParams(),
) -> StatisticalTest:
    """
    Pooled two-proportion z-test of x1/n1 against x2/n2.

    Effect size is Cohen's h = 2·asin(√p1) − 2·asin(√p2).
    Either sample below ``params.min_sample`` makes the result reference-only.
    """
    reference_only = n1 < params.min_sample or n2 < params.min_sample

    if n1 <= 0 or n2 <= 0:
        return StatisticalTest(
            test="z_test", statistic=0.0, p_value=1.0,
            effect_size=0.0, effect_size_name="cohens_h",
            is_significant=False, reference_only=True,
        )

    p1 = x1 / n1
    p2 = x2 / n2
    pooled = (x1 + x2) / (n1 + n2)
    se = math.sqrt(pooled * (1.0 - pooled) * (1.0 / n1 + 1.0 / n2))

    z = (p1 - p2) / se if se > 0 else 0.0
    p_value = two_tailed_p(z)
    h = 2.0 * math.asin(math.sqrt(p1)) - 2.0 * math.asin(math.sqrt(p2))

    return StatisticalTest(
        test="z_test",
        statistic=round(z, 4),
        p_value=round(p_value, 6),
        effect_size=round(h, 4),
        effect_size_name="cohens_h",
        is_significant=(not reference_only) and p_value < params.alpha,
        reference_only=reference_only,
    )
