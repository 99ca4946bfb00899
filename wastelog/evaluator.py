"""
Waste Activity Density Evaluator

Converts a contact dose-rate measurement on a waste package into an
estimated activity and an activity concentration ("density") per gram of
waste, using the point-source relation:

    A [MBq]       = D [uSv/h] * r^2 [m^2] / Gamma [uSv m^2 / (MBq h)]
    A [Bq]        = A [MBq] * 1e6
    density [Bq/g] = A [Bq] / m [g]

Preconditions are checked before any arithmetic so that a zero divisor is
reported as InvalidInput instead of surfacing as NaN or Infinity.
"""

import math
from dataclasses import dataclass

from .exceptions import InvalidInput


BQ_PER_MBQ = 1e6
BQ_PER_CI = 3.7e10

# Relative tolerance used when checking stored records against the formula
CONSISTENCY_RTOL = 1e-9

MAX_ISOTOPE_LENGTH = 32

# Isotope label -> typical specific gamma-ray dose constant, uSv m^2 / (MBq h)
# Values are starting points for the form; users should confirm them against
# their local reference tables.
KNOWN_ISOTOPES = {
    'F-18': 0.1879,
    'I-131': 0.0595,
    'Tc-99m': 0.0195,
}
CUSTOM_ISOTOPE = 'custom'

ISOTOPE_CHOICES = [(label, label) for label in KNOWN_ISOTOPES] + [
    (CUSTOM_ISOTOPE, 'Custom'),
]

MEASUREMENT_FIELDS = ('gamma_constant', 'distance_m', 'dose_rate_usv_h', 'mass_g')


@dataclass(frozen=True)
class Evaluation:
    """Validated inputs together with the derived activity values"""

    isotope: str
    gamma_constant: float
    distance_m: float
    dose_rate_usv_h: float
    mass_g: float
    activity_mbq: float
    activity_bq: float
    density_bq_per_g: float

    def as_fields(self):
        """Return the evaluation as WasteRecord model field values"""
        return {
            'isotope': self.isotope,
            'gamma_constant': self.gamma_constant,
            'distance_m': self.distance_m,
            'dose_rate_usv_h': self.dose_rate_usv_h,
            'mass_g': self.mass_g,
            'activity_mbq': self.activity_mbq,
            'activity_bq': self.activity_bq,
            'density_bq_per_g': self.density_bq_per_g,
        }

    @property
    def activity_ci(self):
        return self.activity_bq / BQ_PER_CI


def _as_real(value):
    """Return value as a finite float, or None if it is not one"""
    if isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number):
        return None
    return number


def validate_inputs(isotope, gamma_constant, distance_m, dose_rate_usv_h, mass_g):
    """
    Check every precondition and collect all failures

    Returns:
        Tuple (isotope, gamma_constant, distance_m, dose_rate_usv_h, mass_g)
        with the label stripped and the measurements as floats

    Raises:
        InvalidInput: listing every failing field
    """
    errors = {}

    label = isotope.strip() if isinstance(isotope, str) else ''
    if not label:
        errors['isotope'] = ['This field is required.']
    elif len(label) > MAX_ISOTOPE_LENGTH:
        errors['isotope'] = [f'Must be at most {MAX_ISOTOPE_LENGTH} characters.']

    raw = {
        'gamma_constant': gamma_constant,
        'distance_m': distance_m,
        'dose_rate_usv_h': dose_rate_usv_h,
        'mass_g': mass_g,
    }
    values = {}
    for field, value in raw.items():
        number = _as_real(value)
        if number is None:
            errors[field] = ['Must be a finite number.']
        else:
            values[field] = number

    # Divisors must be strictly positive
    for field in ('gamma_constant', 'mass_g'):
        if field in values and values[field] <= 0:
            errors[field] = ['Must be greater than zero.']

    for field in ('distance_m', 'dose_rate_usv_h'):
        if field in values and values[field] < 0:
            errors[field] = ['Must not be negative.']

    if errors:
        raise InvalidInput(errors)

    return (
        label,
        values['gamma_constant'],
        values['distance_m'],
        values['dose_rate_usv_h'],
        values['mass_g'],
    )


def evaluate(isotope, gamma_constant, distance_m, dose_rate_usv_h, mass_g):
    """
    Compute activity and activity density for one waste measurement

    Args:
        isotope: Isotope label (e.g. 'F-18' or a custom label)
        gamma_constant: Specific gamma-ray dose constant, uSv m^2 / (MBq h)
        distance_m: Measurement distance from the package (m)
        dose_rate_usv_h: Measured dose rate (uSv/h)
        mass_g: Waste mass (g)

    Returns:
        Evaluation

    Raises:
        InvalidInput: if any precondition fails or the result is not finite
    """
    isotope, gamma_constant, distance_m, dose_rate_usv_h, mass_g = validate_inputs(
        isotope, gamma_constant, distance_m, dose_rate_usv_h, mass_g
    )

    activity_mbq = (dose_rate_usv_h * (distance_m * distance_m)) / gamma_constant
    activity_bq = activity_mbq * BQ_PER_MBQ
    density_bq_per_g = activity_bq / mass_g

    # Extreme but individually valid inputs can still overflow
    if not all(math.isfinite(v) for v in (activity_mbq, activity_bq, density_bq_per_g)):
        raise InvalidInput({'__all__': ['Inputs produce a result outside the representable range.']})

    return Evaluation(
        isotope=isotope,
        gamma_constant=gamma_constant,
        distance_m=distance_m,
        dose_rate_usv_h=dose_rate_usv_h,
        mass_g=mass_g,
        activity_mbq=activity_mbq,
        activity_bq=activity_bq,
        density_bq_per_g=density_bq_per_g,
    )


def check_consistency(gamma_constant, distance_m, dose_rate_usv_h, mass_g,
                      activity_mbq, activity_bq, density_bq_per_g,
                      rel_tol=CONSISTENCY_RTOL):
    """True if the derived values satisfy the activity formula within rel_tol"""
    derived = (activity_mbq, activity_bq, density_bq_per_g)
    if any(v is None or not math.isfinite(v) for v in derived):
        return False
    if gamma_constant is None or mass_g is None or gamma_constant <= 0 or mass_g <= 0:
        return False

    expected_mbq = (dose_rate_usv_h * (distance_m * distance_m)) / gamma_constant
    return (
        math.isclose(activity_mbq, expected_mbq, rel_tol=rel_tol, abs_tol=0.0)
        and math.isclose(activity_bq, activity_mbq * BQ_PER_MBQ, rel_tol=rel_tol)
        and math.isclose(density_bq_per_g, activity_bq / mass_g, rel_tol=rel_tol)
    )
