# Re-export all models so Base.metadata knows every table
from campusbuddy.models.user import User, UserRole
from campusbuddy.models.message import Message, ChatSummary
from campusbuddy.models.announcement import Announcement, AnnouncementLike, AnnouncementPriority
from campusbuddy.models.lost_found import LostFoundItem, LostFoundCategory, LostFoundStatus
from campusbuddy.models.feedback import (
    AnonymousFeedback,
    FeedbackVote,
    FeedbackType,
    FeedbackPriority,
    FeedbackStatus,
    VoteType,
)
from campusbuddy.models.mood import MoodEntry, MoodType
from campusbuddy.models.campus_status import CampusStatus, FacilityStatus
from campusbuddy.models.badge import Badge, BadgeCategory, UserActivity, ActivityType

__all__ = [
    # User
    "User",
    "UserRole",
    # Chat
    "Message",
    "ChatSummary",
    # Announcements
    "Announcement",
    "AnnouncementLike",
    "AnnouncementPriority",
    # Lost & found
    "LostFoundItem",
    "LostFoundCategory",
    "LostFoundStatus",
    # Feedback
    "AnonymousFeedback",
    "FeedbackVote",
    "FeedbackType",
    "FeedbackPriority",
    "FeedbackStatus",
    "VoteType",
    # Mood
    "MoodEntry",
    "MoodType",
    # Status board
    "CampusStatus",
    "FacilityStatus",
    # Gamification
    "Badge",
    "BadgeCategory",
    "UserActivity",
    "ActivityType",
]
