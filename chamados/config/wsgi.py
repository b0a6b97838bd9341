"""
WSGI config para o sistema de Chamados.
"""

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'chamados.config.settings')

application = get_wsgi_application()
