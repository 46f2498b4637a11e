from django.urls import path

from .views import eligibility_view, opt_in_view, opt_out_view

app_name = "accounts"

urlpatterns = [
    path("<int:contact_id>/opt-out/", opt_out_view, name="opt-out"),
    path("<int:contact_id>/opt-in/", opt_in_view, name="opt-in"),
    path("<int:contact_id>/eligibility/", eligibility_view, name="eligibility"),
]
