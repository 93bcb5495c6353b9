from __future__ import annotations
import enum


class ContestType(str, enum.Enum):
    LIVESTOCK = "LIVESTOCK"
    COFFEE_PRODUCTS = "COFFEE_PRODUCTS"
    GENERAL_PRODUCTS = "GENERAL_PRODUCTS"


class ContestStatus(str, enum.Enum):
    DRAFT = "DRAFT"
    REGISTRATION_OPEN = "REGISTRATION_OPEN"
    REGISTRATION_CLOSED = "REGISTRATION_CLOSED"
    JUDGING = "JUDGING"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class ContestRole(str, enum.Enum):
    CONTEST_ADMINISTRATOR = "CONTEST_ADMINISTRATOR"
    JUDGE = "JUDGE"
    PARTICIPANT = "PARTICIPANT"
    PUBLIC_VIEWER = "PUBLIC_VIEWER"


class ParticipationStatus(str, enum.Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    WITHDRAWN = "WITHDRAWN"


class SubmissionStatus(str, enum.Enum):
    DRAFT = "DRAFT"
    SUBMITTED = "SUBMITTED"
    UNDER_REVIEW = "UNDER_REVIEW"
    JUDGED = "JUDGED"
    DISQUALIFIED = "DISQUALIFIED"


class Capability(str, enum.Enum):
    MANAGE_CONTEST = "canManageContest"
    JUDGE = "canJudge"
    PARTICIPATE = "canParticipate"
    VIEW_RESULTS = "canViewResults"
    MANAGE_USERS = "canManageUsers"
    MANAGE_CATEGORIES = "canManageCategories"
    MANAGE_SUBMISSIONS = "canManageSubmissions"
