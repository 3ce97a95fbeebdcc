"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class Sport(StrEnum):
    SOCCER = "Soccer"
    LACROSSE = "Lacrosse"


class CompetitionLevel(StrEnum):
    HIGH_SCHOOL = "High School"
    COLLEGE = "College"
    CLUB = "Club"


class FeedPlatform(StrEnum):
    REFQUEST = "RefQuest"
    DRAGONFLY = "DragonFly"


class GameStatus(StrEnum):
    SCHEDULED = "Scheduled"
    COMPLETED = "Completed"
    CANCELED = "Canceled"


class EventType(StrEnum):
    GAME = "Game"
    BLOCK = "Block"
    ADMIN = "Admin"
    TRAVEL = "Travel"


class EventSource(StrEnum):
    MANUAL = "Manual"
    CSV_IMPORT = "CSV Import"


class EventStatus(StrEnum):
    SCHEDULED = "Scheduled"
    CANCELED = "Canceled"


class Role(StrEnum):
    # soccer
    CENTER = "Center"
    AR = "AR"
    FOURTH = "4th"
    DUAL = "Dual"
    # lacrosse
    LEAD = "Lead"
    REF = "Ref"


class ExpenseCategory(StrEnum):
    MILEAGE = "Mileage"
    GEAR = "Gear"
    UNIFORM = "Uniform"
    DUES_REGISTRATION = "Dues/Registration"
    TOLLS = "Tolls"
    PARKING = "Parking"
    TRAINING = "Training"
    MEALS = "Meals"
    LODGING = "Lodging"
    SUPPLIES = "Supplies"
    PHONE_APP = "Phone/App"
    OTHER = "Other"


class RequirementStatus(StrEnum):
    NOT_STARTED = "Not Started"
    IN_PROGRESS = "In Progress"
    COMPLETE = "Complete"
    WAIVED = "Waived"
    OVERDUE = "Overdue"


class RequirementFrequency(StrEnum):
    SEASON = "Season"
    ANNUAL = "Annual"
    ONE_TIME = "One-time"


class EvidenceType(StrEnum):
    NONE = "None"
    ATTENDANCE = "Attendance"
    PASS_FAIL = "PassFail"
    DOCUMENT = "Document"
    SCORE = "Score"
    TEXT = "Text"


class ImportType(StrEnum):
    GAMES = "Games"
    BLOCKS = "Blocks"


class ImportRowStatus(StrEnum):
    IMPORTED = "Imported"
    SKIPPED = "Skipped"
    ERROR = "Error"
