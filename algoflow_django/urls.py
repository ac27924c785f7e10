# algoflow_django/urls.py
from django.http import HttpResponse
from django.urls import path, include

urlpatterns = [
    path("api/", include("flowchart.urls")),  # конвертация и состояние запроса
    path('healthz/', lambda request: HttpResponse("Welcome to AlgoFlow API!")),   # проверка доступности
]
