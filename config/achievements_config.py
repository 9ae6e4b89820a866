# config/achievements_config.py

from enum import Enum


class AchievementKey(str, Enum):
    first_submission = "first_submission"
    ten_submissions  = "ten_submissions"
    level_five       = "level_five"
    green_commuter   = "green_commuter"
    zero_waste_hero  = "zero_waste_hero"
    quick_shower     = "quick_shower"


# Seeded into the achievements table on startup
DEFAULT_ACHIEVEMENTS = {
    AchievementKey.first_submission: {
        "name": "First Steps",
        "icon_key": "seedling",
        "description": "Logged your first sustainability action.",
    },
    AchievementKey.ten_submissions: {
        "name": "Habit Former",
        "icon_key": "calendar-check",
        "description": "Logged ten sustainability actions.",
    },
    AchievementKey.level_five: {
        "name": "Eco Veteran",
        "icon_key": "medal",
        "description": "Reached level 5.",
    },
    AchievementKey.green_commuter: {
        "name": "Green Commuter",
        "icon_key": "bicycle",
        "description": "Logged a day of trips without using a car.",
    },
    AchievementKey.zero_waste_hero: {
        "name": "Zero Waste Hero",
        "icon_key": "recycle",
        "description": "Earned the maximum score in a single recycling submission.",
    },
    AchievementKey.quick_shower: {
        "name": "Quick Shower",
        "icon_key": "shower",
        "description": "Finished a shower in five minutes or less.",
    },
}

TEN_SUBMISSIONS_THRESHOLD = 10
LEVEL_FIVE_THRESHOLD      = 5
QUICK_SHOWER_MINUTES      = 5
