"""
URL configuration for the KwentaMo API.

Every app mounts its endpoints under /api/v1/.
"""
from django.contrib import admin
from django.urls import path, include

admin.site.site_header = "KwentaMo Admin Panel"
admin.site.site_title = "KwentaMo Admin Portal"
admin.site.index_title = "KwentaMo costing assistant"

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/v1/', include('kwentamo.core.urls')),
    path('api/v1/', include('kwentamo.business.urls')),
    path('api/v1/', include('kwentamo.catalog.urls')),
    path('api/v1/', include('kwentamo.expenses.urls')),
    path('api/v1/', include('kwentamo.purchasing.urls')),
    path('api/v1/', include('kwentamo.inventory.urls')),
    path('api/v1/', include('kwentamo.sales.urls')),
    path('api/v1/', include('kwentamo.receipts.urls')),
    path('api/v1/', include('kwentamo.reports.urls')),
    path('api/v1/', include('kwentamo.adminpanel.urls')),
]
