import os

# Force production env if the deploy does not set one
os.environ.setdefault("ENV", "production")

from hopebridge import create_app  # noqa: E402

app = create_app()
