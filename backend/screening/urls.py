from django.urls import path

from screening import views

urlpatterns = [
    path('screening', views.ScreeningAPIView.as_view(), name='screening-api'),
    path('screening/batch', views.ScreeningBatchAPIView.as_view(), name='screening-batch-api'),
    path('screening/configuration', views.ScreeningConfigurationAPIView.as_view(), name='screening-configuration-api'),
    path('screening/status', views.ScreeningStatusAPIView.as_view(), name='screening-status-api'),
    path('vat/validate', views.VatValidationAPIView.as_view(), name='vat-validate-api'),
    path('vat/validate/batch', views.VatBatchValidationAPIView.as_view(), name='vat-validate-batch-api'),
    path('vat/countries', views.VatCountriesAPIView.as_view(), name='vat-countries-api'),
    path('vat/status', views.VatStatusAPIView.as_view(), name='vat-status-api'),
    path('health', views.HealthAPIView.as_view(), name='health-api'),
]
