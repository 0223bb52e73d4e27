"""Point the app at a throwaway SQLite file before db.py creates its engine."""
import os
import tempfile

os.environ.pop("DATABASE_URL", None)
os.environ["DATABASE_PATH"] = os.path.join(tempfile.mkdtemp(prefix="agenda-tests-"), "agenda.db")
