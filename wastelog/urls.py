from django.urls import path
from . import views

app_name = 'wastelog'

urlpatterns = [
    # Dashboard (calculation form + history)
    path('', views.DashboardView.as_view(), name='dashboard'),
    path('history/chart.png', views.history_chart, name='history_chart'),

    # Accounts
    path('accounts/signup/', views.SignUpView.as_view(), name='signup'),

    # API endpoints
    path('api/logs/', views.api_logs, name='api_logs'),
    path('api/evaluate/', views.api_evaluate, name='api_evaluate'),
]
