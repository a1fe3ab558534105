# wsgi.py (at repo root)
# The activity store lives in process memory, so serve this with a
# single worker process, e.g. ``gunicorn -w 1 --threads 4 wsgi:app``.
from wellbeing_tracker import create_app

app = create_app()
