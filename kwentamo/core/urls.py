from django.urls import path
from .views import (
    CustomTokenObtainPairView, CustomTokenRefreshView, register, user_me, auth_sync,
    supabase_sign_up, supabase_sign_in, supabase_refresh, supabase_sign_out,
    audit_log_list, audit_log_detail,
)

urlpatterns = [
    # Auth endpoints
    path('auth/register/', register, name='register'),
    path('auth/login/', CustomTokenObtainPairView.as_view(), name='token_obtain_pair'),
    path('auth/refresh/', CustomTokenRefreshView.as_view(), name='token_refresh'),
    path('auth/me/', user_me, name='user-me'),
    path('auth/sync/', auth_sync, name='auth-sync'),

    # Supabase Auth proxy
    path('auth/supabase/sign-up/', supabase_sign_up, name='supabase-sign-up'),
    path('auth/supabase/sign-in/', supabase_sign_in, name='supabase-sign-in'),
    path('auth/supabase/refresh/', supabase_refresh, name='supabase-refresh'),
    path('auth/supabase/sign-out/', supabase_sign_out, name='supabase-sign-out'),

    # AuditLog endpoints
    path('audit-logs/', audit_log_list, name='audit-log-list'),
    path('audit-logs/<int:pk>/', audit_log_detail, name='audit-log-detail'),
]
