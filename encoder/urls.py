from django.urls import path
from .views import UploadAndCreateRunView, RunDetailView

urlpatterns = [
    path("encodings/upload/", UploadAndCreateRunView.as_view(), name="upload_create_run"),
    path("encodings/<uuid:run_pk>/", RunDetailView.as_view(), name="run_detail"),
]
