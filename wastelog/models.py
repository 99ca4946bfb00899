from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models
from django.utils import timezone

from .evaluator import (
    BQ_PER_CI,
    CUSTOM_ISOTOPE,
    MAX_ISOTOPE_LENGTH,
    check_consistency,
    evaluate,
)
from .exceptions import InvalidInput, RecordImmutable


class WasteRecordQuerySet(models.QuerySet):

    def for_owner(self, owner_id):
        """Records of one owner, most recent first, later insert first on ties"""
        return self.filter(owner_id=owner_id).order_by('-created_at', '-id')


class WasteRecord(models.Model):
    """
    One saved waste activity density calculation

    Records are append-only: the derived activity fields are recomputed from
    the measured inputs when the record is first saved, and an existing
    record can never be saved again.
    """

    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='waste_records',
        help_text="User who performed the calculation"
    )

    # Measured inputs
    isotope = models.CharField(
        max_length=MAX_ISOTOPE_LENGTH,
        default=CUSTOM_ISOTOPE,
        help_text="Isotope label (F-18, I-131, Tc-99m or a custom label)"
    )
    gamma_constant = models.FloatField(
        help_text="Specific gamma-ray dose constant (uSv m²/MBq h), must be positive"
    )
    distance_m = models.FloatField(
        validators=[MinValueValidator(0)],
        help_text="Measurement distance from the waste package (m)"
    )
    dose_rate_usv_h = models.FloatField(
        validators=[MinValueValidator(0)],
        help_text="Measured dose rate (uSv/h)"
    )
    mass_g = models.FloatField(
        help_text="Mass of the waste (g), must be positive"
    )

    # Derived values, never supplied by callers
    activity_mbq = models.FloatField(
        editable=False,
        help_text="Estimated activity (MBq)"
    )
    activity_bq = models.FloatField(
        editable=False,
        help_text="Estimated activity (Bq)"
    )
    density_bq_per_g = models.FloatField(
        editable=False,
        help_text="Activity per gram of waste (Bq/g)"
    )

    created_at = models.DateTimeField(
        default=timezone.now,
        editable=False,
        db_index=True,
        help_text="When the calculation was saved"
    )

    objects = WasteRecordQuerySet.as_manager()

    class Meta:
        ordering = ['-created_at', '-id']
        verbose_name = 'Waste Record'
        verbose_name_plural = 'Waste Records'
        indexes = [
            models.Index(fields=['owner', '-created_at', '-id'], name='wasterecord_owner_created_idx'),
        ]

    def __str__(self):
        return f"{self.isotope} - {self.density_bq_per_g:.5g} Bq/g ({self.created_at:%Y-%m-%d %H:%M})"

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise RecordImmutable()
        self.apply_evaluation()
        super().save(*args, **kwargs)

    def apply_evaluation(self):
        """Recompute the derived fields from the measured inputs"""
        result = evaluate(
            self.isotope,
            self.gamma_constant,
            self.distance_m,
            self.dose_rate_usv_h,
            self.mass_g,
        )
        for name, value in result.as_fields().items():
            setattr(self, name, value)
        return result

    def clean(self):
        try:
            evaluate(self.isotope, self.gamma_constant, self.distance_m,
                     self.dose_rate_usv_h, self.mass_g)
        except InvalidInput as e:
            raise ValidationError(e.errors)

    def is_consistent(self):
        """True if the stored derived fields satisfy the activity formula"""
        return check_consistency(
            self.gamma_constant,
            self.distance_m,
            self.dose_rate_usv_h,
            self.mass_g,
            self.activity_mbq,
            self.activity_bq,
            self.density_bq_per_g,
        )

    @property
    def activity_ci(self):
        """Activity in Ci"""
        return self.activity_bq / BQ_PER_CI

    def to_dict(self):
        """JSON-serializable representation for the API"""
        return {
            'id': self.pk,
            'owner_id': self.owner_id,
            'isotope': self.isotope,
            'gamma_constant': self.gamma_constant,
            'distance_m': self.distance_m,
            'dose_rate_usv_h': self.dose_rate_usv_h,
            'mass_g': self.mass_g,
            'activity_mbq': self.activity_mbq,
            'activity_bq': self.activity_bq,
            'density_bq_per_g': self.density_bq_per_g,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }
