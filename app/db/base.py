from sqlalchemy.orm import declarative_base

Base = declarative_base()

# Import the models so they are registered on Base
from app.models import user, repository, squad, squad_member, activity_feed  # noqa: E402,F401
