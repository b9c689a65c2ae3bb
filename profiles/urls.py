from django.urls import path
from .views import ProfileMeView, DisplayNameView

app_name = 'profiles'

urlpatterns = [
    path('me/', ProfileMeView.as_view(), name='profile-me'),
    path('<str:user_id>/display-name/', DisplayNameView.as_view(), name='display-name'),
]
