from django.urls import path

from .views import generate_deadlines_view, mark_filed_view

app_name = "filings"

urlpatterns = [
    path("generate/", generate_deadlines_view, name="generate"),
    path("mark-filed/", mark_filed_view, name="mark-filed"),
]
