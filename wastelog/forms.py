from django import forms
from django.contrib.auth import get_user_model
from django.contrib.auth.forms import UserCreationForm

from .evaluator import CUSTOM_ISOTOPE, ISOTOPE_CHOICES, KNOWN_ISOTOPES, MAX_ISOTOPE_LENGTH, evaluate
from .exceptions import InvalidInput


def _number_input(placeholder):
    return forms.NumberInput(attrs={'class': 'form-control', 'step': 'any', 'placeholder': placeholder})


class MeasurementField(forms.FloatField):
    """FloatField that refuses JSON booleans instead of reading them as 1.0 / 0.0"""

    def to_python(self, value):
        if isinstance(value, bool):
            raise forms.ValidationError('Must be a number, not a boolean.', code='invalid')
        return super().to_python(value)


class CalculationForm(forms.Form):
    """
    Measurement inputs for one waste density calculation

    The isotope field renders as a select of known isotopes but accepts any
    label, so API clients can send free text. Choosing 'custom' takes the
    label from custom_isotope when one is given.
    """

    isotope = forms.CharField(
        max_length=MAX_ISOTOPE_LENGTH,
        initial='F-18',
        widget=forms.Select(choices=ISOTOPE_CHOICES, attrs={'class': 'form-select'}),
    )
    custom_isotope = forms.CharField(
        max_length=MAX_ISOTOPE_LENGTH,
        required=False,
        label='Custom isotope label',
        widget=forms.TextInput(attrs={'class': 'form-control', 'placeholder': 'e.g. Cs-137'}),
    )
    gamma_constant = MeasurementField(
        initial=KNOWN_ISOTOPES['F-18'],
        label='Gamma constant (µSv·m²/MBq·h)',
        widget=_number_input('gamma'),
    )
    distance_m = MeasurementField(
        initial=0.3,
        label='Distance (m)',
        widget=_number_input('distance m'),
    )
    dose_rate_usv_h = MeasurementField(
        initial=0.08,
        label='Dose rate (µSv/h)',
        widget=_number_input('dose uSv/hr'),
    )
    mass_g = MeasurementField(
        initial=10000,
        label='Mass (g)',
        widget=_number_input('mass g'),
    )

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.evaluation = None

    def isotope_label(self):
        isotope = (self.cleaned_data.get('isotope') or '').strip()
        custom = (self.cleaned_data.get('custom_isotope') or '').strip()
        if isotope == CUSTOM_ISOTOPE and custom:
            return custom
        return isotope

    def clean(self):
        """Run the evaluator so preconditions are reported as form errors"""
        cleaned_data = super().clean()

        # Field-level parsing failed; nothing to evaluate yet
        if self.errors:
            return cleaned_data

        try:
            self.evaluation = evaluate(
                self.isotope_label(),
                cleaned_data['gamma_constant'],
                cleaned_data['distance_m'],
                cleaned_data['dose_rate_usv_h'],
                cleaned_data['mass_g'],
            )
        except InvalidInput as e:
            for field, messages in e.errors.items():
                if field == '__all__':
                    field = None
                elif field == 'isotope' and cleaned_data.get('isotope') == CUSTOM_ISOTOPE:
                    field = 'custom_isotope'
                for message in messages:
                    self.add_error(field, message)

        return cleaned_data

    def measurements(self):
        """Keyword arguments for services.submit_calculation"""
        return {
            'isotope': self.isotope_label(),
            'gamma_constant': self.cleaned_data['gamma_constant'],
            'distance_m': self.cleaned_data['distance_m'],
            'dose_rate_usv_h': self.cleaned_data['dose_rate_usv_h'],
            'mass_g': self.cleaned_data['mass_g'],
        }


class SignUpForm(UserCreationForm):
    """Registration form; passwords are hashed by django.contrib.auth"""

    email = forms.EmailField(required=True)

    class Meta(UserCreationForm.Meta):
        model = get_user_model()
        fields = ('username', 'email')

    def clean_email(self):
        email = self.cleaned_data['email'].lower()
        if get_user_model().objects.filter(email__iexact=email).exists():
            raise forms.ValidationError('An account with this email already exists.')
        return email
