from django.urls import path
from . import views

urlpatterns = [
    path("convert/", views.convert, name="flowchart_convert"),
    path("flowchart/state/", views.state_detail, name="flowchart_state"),
    path("flowchart/submit/", views.submit, name="flowchart_submit"),
    path("flowchart/regenerate/", views.regenerate, name="flowchart_regenerate"),
    path("flowchart/clear/", views.clear, name="flowchart_clear"),
    path("flowchart/render-error/", views.render_error, name="flowchart_render_error"),
]
