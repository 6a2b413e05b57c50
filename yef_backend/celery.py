import os
from celery import Celery

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'yef_backend.settings')

app = Celery('yef_backend')
app.config_from_object('django.conf:settings', namespace='CELERY')
app.autodiscover_tasks()
