"""
Regression engine fitting cost samples against canonical growth functions.

For each canonical class the engine fits ``cost ≈ c · f(size)`` through the
origin, scores the fit and picks the best candidate by a composite of R²,
confidence, simplicity and p-value.  R² is taken about the mean cost, except
for the constant class, whose R² measures the relative spread of the costs.
Inputs are sorted by size first, so every output is invariant under
permutation of the (size, cost) pairs.
"""

import logging
import math
from typing import List, Optional, Sequence

import numpy as np

from complexity_estimator.domain.models.analysis import (
    ComplexityChange,
    DataQuality,
    FitResult,
    RegressionAnalysis,
    Reliability,
)
from complexity_estimator.domain.models.growth import (
    CANONICAL_ORDER,
    GrowthClass,
    GrowthLattice,
)

logger = logging.getLogger(__name__)

R_SQUARED_WEIGHT = 0.4
CONFIDENCE_WEIGHT = 0.3
SIMPLICITY_WEIGHT = 0.2
P_VALUE_WEIGHT = 0.1

FLAT_SPREAD_TOLERANCE = 0.25

CHANGE_MIN_SAMPLES = 6
CHANGE_MIN_R_SQUARED = 0.7
HIGH_VARIANCE = 1_000_000


class RegressionEngine:
    """
    Least-squares curve fitting over one sample sequence.

    Example:
        >>> engine = RegressionEngine([10, 20, 40], [20.0, 40.0, 80.0])
        >>> engine.analyze().best_class
        <GrowthClass.LINEAR: 'O(n)'>
    """

    def __init__(self, sizes: Sequence[float], costs: Sequence[float]):
        if len(sizes) != len(costs):
            raise ValueError("sizes and costs must have the same length")
        pairs = sorted(zip(sizes, costs))
        self.sizes = np.array([float(size) for size, _ in pairs])
        self.costs = np.array([float(cost) for _, cost in pairs])

    def analyze(self) -> RegressionAnalysis:
        """Fit every canonical class and select the best one."""

        data_quality = self.assess_data_quality()
        all_fits = self.fit_all()
        best_fit = self.select_best_fit(all_fits)

        if best_fit is None:
            logger.warning(
                "No valid fit among %d candidates for %d samples",
                len(all_fits),
                len(self.sizes),
            )
            return RegressionAnalysis(
                best_fit=None,
                all_fits=all_fits,
                recommendation="No growth function explains the samples - complexity unclear.",
                reliability=Reliability.LOW,
                data_quality=data_quality,
                error_message="No valid fit: every candidate was non-finite or had R² <= 0",
            )

        return RegressionAnalysis(
            best_fit=best_fit,
            all_fits=all_fits,
            recommendation=self.generate_recommendation(best_fit, data_quality),
            reliability=self.assess_reliability(best_fit, data_quality),
            data_quality=data_quality,
        )

    # ----- data quality ----------------------------------------------------

    def assess_data_quality(self) -> DataQuality:
        return DataQuality(
            sample_size=len(self.sizes),
            variance=self._variance(),
            outliers=self._outliers(),
            monotonicity=self._monotonicity(),
        )

    def _variance(self) -> float:
        if len(self.costs) == 0:
            return 0.0
        return float(np.var(self.costs))

    def _outliers(self) -> List[int]:
        """Indices outside the 1.5·IQR fences (linear-interpolated quartiles)."""

        if len(self.costs) == 0:
            return []
        q1, q3 = np.percentile(self.costs, [25, 75])
        iqr = q3 - q1
        lower, upper = q1 - 1.5 * iqr, q3 + 1.5 * iqr
        return [
            index
            for index, value in enumerate(self.costs)
            if value < lower or value > upper
        ]

    def _monotonicity(self) -> float:
        """Fraction of consecutive steps that do not decrease."""

        if len(self.costs) < 2:
            return 0.0
        steps = np.diff(self.costs)
        return float(np.count_nonzero(steps >= 0) / len(steps))

    # ----- fitting ---------------------------------------------------------

    def fit_all(self) -> List[FitResult]:
        return [self.fit(growth) for growth in CANONICAL_ORDER]

    def fit(self, growth: GrowthClass) -> FitResult:
        """Single-parameter least-squares fit for one growth class."""

        n = len(self.sizes)
        with np.errstate(all="ignore"):
            basis = GrowthLattice.growth_values(growth, self.sizes)
            denominator = float(np.dot(basis, basis))

        if n == 0 or not np.all(np.isfinite(basis)) or denominator == 0.0:
            return FitResult(
                growth_class=growth,
                coefficient=float("nan"),
                r_squared=0.0,
                standard_error=float("inf"),
                p_value=1.0,
                confidence=0.0,
            )

        coefficient = float(np.dot(self.costs, basis) / denominator)
        predicted = coefficient * basis
        residuals = self.costs - predicted
        ss_res = float(np.dot(residuals, residuals))
        if growth is GrowthClass.CONSTANT:
            # A flat fit is scored against its own level: R² reaches zero
            # once the squared coefficient of variation hits the tolerance.
            ss_tot = n * coefficient**2 * FLAT_SPREAD_TOLERANCE
        else:
            centered = self.costs - float(np.mean(self.costs))
            ss_tot = float(np.dot(centered, centered))

        r_squared = 1.0 - ss_res / ss_tot if ss_tot > 0 else 0.0
        r_squared = min(1.0, max(0.0, r_squared))
        standard_error = math.sqrt(ss_res / (n - 1)) if n > 1 else float("inf")

        return FitResult(
            growth_class=growth,
            coefficient=coefficient,
            r_squared=r_squared,
            standard_error=standard_error,
            p_value=self._p_value(r_squared, n),
            confidence=self._confidence(r_squared, residuals, n),
            residuals=residuals.tolist(),
            predicted=predicted.tolist(),
        )

    def _p_value(self, r_squared: float, n: int) -> float:
        """Coarse p-value from bucketing the F statistic."""

        if n <= 2:
            return 1.0
        if r_squared >= 1.0:
            return 0.001
        f_statistic = r_squared / (1.0 - r_squared) * (n - 2)
        if f_statistic > 10:
            return 0.001
        if f_statistic > 5:
            return 0.01
        if f_statistic > 2:
            return 0.05
        if f_statistic > 1:
            return 0.1
        return 0.5

    def _confidence(self, r_squared: float, residuals: np.ndarray, n: int) -> float:
        confidence = r_squared

        if n < 5:
            confidence *= 0.5
        elif n < 10:
            confidence *= 0.7
        elif n >= 15:
            confidence *= 1.1

        relative_error = self._relative_error(residuals)
        if relative_error > 0.5:
            confidence *= 0.5
        elif relative_error > 0.2:
            confidence *= 0.7
        elif relative_error < 0.05:
            confidence *= 1.1

        return max(0.0, min(1.0, confidence))

    def _relative_error(self, residuals: np.ndarray) -> float:
        """Mean per-sample residual relative to the observed cost."""

        observed = np.abs(self.costs)
        usable = observed > 0
        if not np.any(usable):
            return float("inf")
        return float(np.mean(np.abs(residuals[usable]) / observed[usable]))

    # ----- selection -------------------------------------------------------

    def select_best_fit(self, fits: Sequence[FitResult]) -> Optional[FitResult]:
        """Highest composite score among valid fits; ties go to the simpler class."""

        valid = [fit for fit in fits if fit.is_valid]
        if not valid:
            return None
        return max(
            valid,
            key=lambda fit: (self.composite_score(fit), -fit.growth_class.rank),
        )

    @staticmethod
    def composite_score(fit: FitResult) -> float:
        simplicity = (len(CANONICAL_ORDER) - fit.growth_class.rank) / len(CANONICAL_ORDER)
        return (
            R_SQUARED_WEIGHT * fit.r_squared
            + CONFIDENCE_WEIGHT * fit.confidence
            + SIMPLICITY_WEIGHT * simplicity
            + P_VALUE_WEIGHT * max(0.0, 1.0 - fit.p_value)
        )

    # ----- advisories ------------------------------------------------------

    def generate_recommendation(self, best_fit: FitResult, quality: DataQuality) -> str:
        recommendations: List[str] = []
        r2 = best_fit.r_squared
        label = best_fit.growth_class.label

        if r2 > 0.9:
            recommendations.append(
                f"Excellent fit (R² = {r2:.3f}) - high confidence in {label} complexity."
            )
        elif r2 > 0.7:
            recommendations.append(f"Good fit (R² = {r2:.3f}) - {label} complexity is likely.")
        elif r2 > 0.5:
            recommendations.append(
                f"Moderate fit (R² = {r2:.3f}) - {label} complexity suggested but "
                "consider more testing."
            )
        else:
            recommendations.append(
                f"Poor fit (R² = {r2:.3f}) - complexity unclear, more data needed."
            )

        if quality.sample_size < 5:
            recommendations.append(
                "Small sample size - collect more data points for better accuracy."
            )
        elif quality.sample_size < 10:
            recommendations.append(
                "Consider collecting additional data points to improve confidence."
            )

        if quality.variance > HIGH_VARIANCE:
            recommendations.append(
                "High variance in measurements - consider running more iterations per test."
            )
        if quality.outliers:
            recommendations.append(
                f"{len(quality.outliers)} outlier(s) detected - verify test conditions."
            )
        if quality.monotonicity < 0.7:
            recommendations.append(
                "Non-monotonic behavior detected - check for measurement errors or "
                "algorithm variations."
            )
        return " ".join(recommendations)

    def assess_reliability(self, best_fit: FitResult, quality: DataQuality) -> Reliability:
        score = 0

        if best_fit.r_squared > 0.9:
            score += 3
        elif best_fit.r_squared > 0.7:
            score += 2
        elif best_fit.r_squared > 0.5:
            score += 1

        if quality.sample_size >= 10:
            score += 2
        elif quality.sample_size >= 5:
            score += 1

        if quality.monotonicity > 0.8:
            score += 2
        elif quality.monotonicity > 0.6:
            score += 1

        if not quality.outliers:
            score += 1
        elif len(quality.outliers) > quality.sample_size * 0.2:
            score -= 1

        if best_fit.p_value < 0.01:
            score += 2
        elif best_fit.p_value < 0.05:
            score += 1

        if score >= 7:
            return Reliability.HIGH
        if score >= 4:
            return Reliability.MEDIUM
        return Reliability.LOW

    # ----- auxiliary -------------------------------------------------------

    def detect_complexity_changes(self) -> ComplexityChange:
        """
        Refit both halves of the size sequence independently.

        A change is flagged when the halves disagree on the best class and
        each half fits with R² > 0.7.
        """
        if len(self.sizes) < CHANGE_MIN_SAMPLES:
            return ComplexityChange(has_change=False)

        midpoint = len(self.sizes) // 2
        first = RegressionEngine(self.sizes[:midpoint], self.costs[:midpoint]).analyze()
        second = RegressionEngine(self.sizes[midpoint:], self.costs[midpoint:]).analyze()

        if first.best_fit is None or second.best_fit is None:
            return ComplexityChange(has_change=False)

        has_change = (
            first.best_class is not second.best_class
            and first.best_fit.r_squared > CHANGE_MIN_R_SQUARED
            and second.best_fit.r_squared > CHANGE_MIN_R_SQUARED
        )
        if not has_change:
            return ComplexityChange(has_change=False)

        return ComplexityChange(
            has_change=True,
            change_point=int(self.sizes[midpoint]),
            before_class=first.best_class,
            after_class=second.best_class,
        )

    @staticmethod
    def predict(size: float, growth: GrowthClass, coefficient: float) -> float:
        """Predicted cost at ``size`` for a fitted class and coefficient."""

        return coefficient * GrowthLattice.growth_value(growth, size)
