from django.urls import path
from . import views

app_name = 'negotiations'

urlpatterns = [
    path('', views.NegotiationListView.as_view(), name='negotiation-list'),
    path('<int:negotiation_id>/accept/', views.AcceptNegotiationView.as_view(), name='negotiation-accept'),
    path('<int:negotiation_id>/reject/', views.RejectNegotiationView.as_view(), name='negotiation-reject'),
]
