# algoflow_django/wsgi.py
import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "algoflow_django.settings")

application = get_wsgi_application()
