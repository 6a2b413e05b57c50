from django.urls import path, include
from rest_framework.routers import DefaultRouter
from . import views

router = DefaultRouter()
router.register(r'loan-packages', views.LoanPackageViewSet, basename='loanpackage')
router.register(r'loan-applications', views.LoanApplicationViewSet, basename='loanapplication')
router.register(r'payments', views.PaymentViewSet, basename='payment')

urlpatterns = [
    path('', include(router.urls)),
    path('calculator/', views.calculator, name='calculator'),
]
