from talentflow import create_app

app = create_app()

# Run the backfill scheduler on exactly one worker:
# SCHEDULER_ENABLED=true gunicorn -w 1 wsgi:app
