"""
URL configuration for the checkout API
"""

from django.urls import path

from . import views

app_name = "orders"

urlpatterns = [
    path("checkout/validate/", views.validate_checkout, name="checkout_validate"),
    path("checkout/calculate/", views.calculate_totals, name="checkout_calculate"),
    path("checkout/", views.create_checkout, name="checkout"),
    path("orders/<str:order_number>/", views.order_detail, name="order_detail"),
    path("orders/<str:order_number>/sync-payment/", views.sync_payment, name="sync_payment"),
]
