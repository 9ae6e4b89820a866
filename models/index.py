# models/index.py
"""
Imports every model module so relationship strings resolve before the
mappers are configured, then exposes create_all for local setups.
"""
from config.database import engine, SessionLocal, Base

from api.achievements.achievements_model import Achievement
from api.achievements.user_achievements_model import UserAchievement
from api.user.user_model import User
from api.crews.crews_model import Crew, CrewMember
from api.challenges.challenges_model import Challenge
from api.submissions.submissions_model import Submission

models = {
    m.__tablename__: m
    for m in (Achievement, UserAchievement, User, Crew, CrewMember, Challenge, Submission)
}


def init_db(bind=None):
    Base.metadata.create_all(bind=bind or engine)


__all__ = ["engine", "SessionLocal", "Base", "models", "init_db"]
