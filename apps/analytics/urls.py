from django.urls import path
from . import views

urlpatterns = [
    path('overview/', views.overview, name='stats_overview'),
    path('trends/', views.repayment_trends, name='stats_trends'),
    path('dashboard/', views.dashboard, name='stats_dashboard'),
]
