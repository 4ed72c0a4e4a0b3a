from django.urls import path
from . import views

urlpatterns = [
    path('donors', views.donor_collection_view, name='donor-list'),
    path('donors/eligible', views.donor_eligible_view, name='donor-eligible'),
    path('donors/eligible/<str:blood_group>', views.donor_eligible_view, name='donor-eligible-by-group'),
    path('donors/search', views.donor_search_view, name='donor-search'),
    path('donors/statistics', views.donor_statistics_view, name='donor-statistics'),
    path('donors/recent', views.donor_recent_view, name='donor-recent'),
    path('donors/email/<str:email>', views.donor_by_email_view, name='donor-by-email'),
    path('donors/blood-group/<str:blood_group>', views.donor_by_group_view, name='donor-by-group'),
    path('donors/<int:pk>', views.donor_detail_view, name='donor-detail'),
    path('donors/<int:pk>/donation-date', views.donor_donation_date_view, name='donor-donation-date'),
]
