# flowchart/apps.py
from django.apps import AppConfig


class FlowchartConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "flowchart"
