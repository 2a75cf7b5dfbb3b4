# backend/wsgi.py
from souq_admin import create_app

app = create_app()
