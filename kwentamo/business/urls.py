from django.urls import path
from .views import user_profile, user_business

urlpatterns = [
    path('users/profile/', user_profile, name='user-profile'),
    path('users/business/', user_business, name='user-business'),
]
