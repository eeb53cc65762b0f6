from django.urls import path

from . import views

app_name = 'integrations'

urlpatterns = [
    path('webhooks/midtrans/', views.MidtransWebhookView.as_view(), name='midtrans_webhook'),
]
