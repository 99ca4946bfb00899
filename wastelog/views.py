import json
import logging

from django.contrib import messages
from django.contrib.auth import login
from django.contrib.auth.mixins import LoginRequiredMixin
from django.contrib.auth.views import redirect_to_login
from django.http import HttpResponse, JsonResponse
from django.shortcuts import redirect
from django.urls import reverse_lazy
from django.views.decorators.http import require_GET, require_http_methods, require_POST
from django.views.generic import CreateView, FormView

from .charts import render_density_chart
from .evaluator import KNOWN_ISOTOPES
from .exceptions import InvalidInput, StoreUnavailable, Unauthorized
from .forms import CalculationForm, SignUpForm
from .owners import require_owner
from .services import chart_series, fetch_history, submit_calculation, summarize_history
from .store import get_store

logger = logging.getLogger(__name__)

HISTORY_TABLE_LIMIT = 100


def _error_response(error):
    """Translate a core error into a JSON response"""
    if isinstance(error, StoreUnavailable):
        logger.warning(f"Waste log store unavailable: {error!r}")
    return JsonResponse(error.to_dict(), status=error.http_status)


def _form_error_response(form):
    errors = {
        field: [error['message'] for error in field_errors]
        for field, field_errors in form.errors.get_json_data().items()
    }
    return _error_response(InvalidInput(errors))


class DashboardView(LoginRequiredMixin, FormView):
    """
    Main page with:
    - Calculation form (calculate or save)
    - Saved history table, summary and chart
    """
    template_name = 'wastelog/dashboard.html'
    form_class = CalculationForm
    success_url = reverse_lazy('wastelog:dashboard')

    def dispatch(self, request, *args, **kwargs):
        if request.user.is_authenticated:
            try:
                self.owner_id = require_owner(request)
            except Unauthorized:
                return redirect_to_login(request.get_full_path())
        return super().dispatch(request, *args, **kwargs)

    def get_context_data(self, **kwargs):
        """Add the owner's history and summary to context"""
        context = super().get_context_data(**kwargs)
        context['known_isotopes'] = KNOWN_ISOTOPES

        try:
            with get_store() as store:
                records = fetch_history(store, self.owner_id)
        except StoreUnavailable as e:
            logger.warning(f"Could not load history for owner {self.owner_id}: {e!r}")
            context['history_error'] = 'History could not be loaded. Please try again later.'
            records = []

        context['records'] = records[:HISTORY_TABLE_LIMIT]
        context['summary'] = summarize_history(records)
        return context

    def render_to_response(self, context, **response_kwargs):
        if 'history_error' in context:
            response_kwargs.setdefault('status', 503)
        return super().render_to_response(context, **response_kwargs)

    def form_valid(self, form):
        """'calculate' shows the result only; 'save' also appends it"""
        if self.request.POST.get('action') != 'save':
            return self.render_to_response(self.get_context_data(form=form, result=form.evaluation))

        try:
            with get_store() as store:
                record = submit_calculation(store, self.owner_id, **form.measurements())
        except Unauthorized:
            return redirect_to_login(self.request.get_full_path())
        except InvalidInput as e:
            for field, field_errors in e.errors.items():
                for message in field_errors:
                    form.add_error(None if field == '__all__' else field, message)
            return self.form_invalid(form)
        except StoreUnavailable as e:
            logger.warning(f"Could not save calculation for owner {self.owner_id}: {e!r}")
            messages.error(self.request, 'The calculation could not be saved. Please try again later.')
            return self.render_to_response(
                self.get_context_data(form=form, result=form.evaluation), status=503
            )

        messages.success(
            self.request,
            f'Saved {record.isotope}: {record.density_bq_per_g:.5g} Bq/g.'
        )
        return redirect(self.get_success_url())


class SignUpView(CreateView):
    """Create an account and log the new user in"""
    form_class = SignUpForm
    template_name = 'registration/signup.html'
    success_url = reverse_lazy('wastelog:dashboard')

    def dispatch(self, request, *args, **kwargs):
        if request.user.is_authenticated:
            return redirect(self.success_url)
        return super().dispatch(request, *args, **kwargs)

    def form_valid(self, form):
        response = super().form_valid(form)
        login(self.request, self.object, backend='django.contrib.auth.backends.ModelBackend')
        logger.info(f"Registered new user {self.object.pk}")
        messages.success(self.request, f'Welcome, {self.object.username}.')
        return response


@require_GET
def history_chart(request):
    """
    PNG bar chart of the owner's latest densities
    """
    try:
        owner_id = require_owner(request)
        with get_store() as store:
            records = fetch_history(store, owner_id)
    except Unauthorized as e:
        return HttpResponse(str(e), status=e.http_status, content_type='text/plain')
    except StoreUnavailable as e:
        logger.warning(f"Could not load chart history: {e!r}")
        return HttpResponse(str(e), status=e.http_status, content_type='text/plain')

    response = HttpResponse(render_density_chart(chart_series(records)), content_type='image/png')
    response['Cache-Control'] = 'no-store'
    return response


def _request_data(request):
    """
    Read submitted measurements from a JSON or form-encoded body

    Raises:
        InvalidInput: if a JSON body is malformed or not an object
    """
    if request.content_type == 'application/json':
        try:
            data = json.loads(request.body or b'{}')
        except (UnicodeDecodeError, json.JSONDecodeError):
            raise InvalidInput({'__all__': ['Request body must be valid JSON.']})
        if not isinstance(data, dict):
            raise InvalidInput({'__all__': ['Request body must be a JSON object.']})
        return data
    return request.POST


@require_http_methods(['GET', 'POST'])
def api_logs(request):
    """
    API endpoint for the owner's calculation log

    GET returns the owner's records (newest first).
    POST evaluates the submitted measurements and appends a record; any
    derived values in the body are ignored and recomputed.
    """
    try:
        owner_id = require_owner(request)

        if request.method == 'GET':
            with get_store() as store:
                records = fetch_history(store, owner_id)
            return JsonResponse({'results': [r.to_dict() for r in records]})

        form = CalculationForm(data=_request_data(request))
        if not form.is_valid():
            return _form_error_response(form)

        with get_store() as store:
            record = submit_calculation(store, owner_id, **form.measurements())
        return JsonResponse(record.to_dict(), status=201)

    except (InvalidInput, Unauthorized, StoreUnavailable) as e:
        return _error_response(e)


@require_POST
def api_evaluate(request):
    """
    API endpoint that evaluates measurements without saving them
    """
    try:
        require_owner(request)
        form = CalculationForm(data=_request_data(request))
    except (InvalidInput, Unauthorized) as e:
        return _error_response(e)

    if not form.is_valid():
        return _form_error_response(form)

    evaluation = form.evaluation
    data = evaluation.as_fields()
    data['activity_ci'] = evaluation.activity_ci
    return JsonResponse(data)
