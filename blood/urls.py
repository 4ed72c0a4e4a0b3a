from django.urls import path
from . import views

urlpatterns = [
    # Inventory
    path('inventory', views.inventory_collection_view, name='inventory-list'),
    path('inventory/critical', views.inventory_critical_view, name='inventory-critical'),
    path('inventory/low-stock', views.inventory_low_stock_view, name='inventory-low-stock'),
    path('inventory/out-of-stock', views.inventory_out_of_stock_view, name='inventory-out-of-stock'),
    path('inventory/availability', views.inventory_availability_view, name='inventory-availability'),
    path('inventory/availability/<str:blood_group>/<int:units>', views.inventory_availability_check_view, name='inventory-availability-check'),
    path('inventory/statistics', views.inventory_statistics_view, name='inventory-statistics'),
    path('inventory/initialize', views.inventory_initialize_view, name='inventory-initialize'),
    path('inventory/blood-group/<str:blood_group>', views.inventory_by_group_view, name='inventory-by-group'),
    path('inventory/<int:pk>', views.inventory_detail_view, name='inventory-detail'),
    path('inventory/<int:pk>/add-units', views.inventory_add_units_view, name='inventory-add-units'),
    path('inventory/<int:pk>/remove-units', views.inventory_remove_units_view, name='inventory-remove-units'),

    # Requests
    path('requests', views.request_collection_view, name='request-list'),
    path('requests/pending', views.request_pending_view, name='request-pending'),
    path('requests/emergency', views.request_emergency_view, name='request-emergency'),
    path('requests/recent', views.request_recent_view, name='request-recent'),
    path('requests/overdue', views.request_overdue_view, name='request-overdue'),
    path('requests/statistics', views.request_statistics_view, name='request-statistics'),
    path('requests/statistics/blood-groups', views.request_group_statistics_view, name='request-group-statistics'),
    path('requests/search/hospital', views.request_search_hospital_view, name='request-search-hospital'),
    path('requests/search/patient', views.request_search_patient_view, name='request-search-patient'),
    path('requests/status/<str:status>', views.request_by_status_view, name='request-by-status'),
    path('requests/blood-group/<str:blood_group>', views.request_by_group_view, name='request-by-group'),
    path('requests/email/<str:email>', views.request_by_email_view, name='request-by-email'),
    path('requests/<int:pk>', views.request_detail_view, name='request-detail'),
    path('requests/<int:pk>/status', views.request_status_view, name='request-status'),
    path('requests/<int:pk>/approve-fulfill', views.request_approve_fulfill_view, name='request-approve-fulfill'),
    path('requests/<int:pk>/cancel', views.request_cancel_view, name='request-cancel'),
    path('requests/<int:pk>/audit', views.request_audit_view, name='request-audit'),

    # Dashboard
    path('dashboard/stats', views.dashboard_stats_view, name='dashboard-stats'),
    path('dashboard/summary', views.dashboard_summary_view, name='dashboard-summary'),
    path('dashboard/health', views.dashboard_health_view, name='dashboard-health'),
]
