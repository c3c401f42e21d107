"""
farmwise.database.models — SQLAlchemy 2.0 Data Models
======================================================

Tables:
- accounts              — Member profiles with embedded gamification + wallet state
- wallet_transactions   — Append-only wallet log (one row per signed movement)
- account_badges        — Earned badges
- challenges            — Admin-defined tasks with eligibility rules and rewards
- challenge_participants — Per-account progress within a challenge
- community_posts       — Community feed
"""

from __future__ import annotations

import enum
from datetime import datetime

from sqlalchemy import (
    Boolean,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


# ---------------------------------------------------------------------------
# Base
# ---------------------------------------------------------------------------
class Base(DeclarativeBase):
    """Shared base for all FarmWise ORM models."""


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class Role(enum.StrEnum):
    FARMER = "farmer"
    STUDENT = "student"
    DEALER = "dealer"
    ADMIN = "admin"


class FarmingExperience(enum.StrEnum):
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    EXPERT = "expert"


class IrrigationType(enum.StrEnum):
    TRADITIONAL = "traditional"
    DRIP = "drip"
    SPRINKLER = "sprinkler"
    MIXED = "mixed"


class Language(enum.StrEnum):
    EN = "en"
    HI = "hi"
    TA = "ta"
    TE = "te"
    BN = "bn"


class Theme(enum.StrEnum):
    LIGHT = "light"
    DARK = "dark"
    AUTO = "auto"


class TransactionKind(enum.StrEnum):
    """Wallet movement kinds.  Only SPENT subtracts from the balance."""
    EARNED = "earned"
    SPENT = "spent"
    REWARD = "reward"
    PURCHASE = "purchase"


class ChallengeCategory(enum.StrEnum):
    WATER_CONSERVATION = "water_conservation"
    SOIL_HEALTH = "soil_health"
    CROP_ROTATION = "crop_rotation"
    ORGANIC_FARMING = "organic_farming"
    ENERGY_EFFICIENCY = "energy_efficiency"
    WASTE_MANAGEMENT = "waste_management"


class Difficulty(enum.StrEnum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class ChallengeType(enum.StrEnum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    SPECIAL = "special"


class ParticipantStatus(enum.StrEnum):
    """Participation states.  IN_PROGRESS and FAILED are reserved — no
    transition currently reaches them."""
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    FAILED = "failed"


class SubmissionType(enum.StrEnum):
    PHOTO = "photo"
    DOCUMENT = "document"
    SURVEY = "survey"
    VIDEO = "video"
    TEXT = "text"


class PostCategory(enum.StrEnum):
    QUESTION = "question"
    SUCCESS_STORY = "success_story"
    GUIDE = "guide"
    TIPS = "tips"


# ---------------------------------------------------------------------------
# Accounts — one row per registered member
# ---------------------------------------------------------------------------
class Account(Base):
    __tablename__ = "accounts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    # Identity
    first_name: Mapped[str] = mapped_column(String(50), nullable=False)
    last_name: Mapped[str] = mapped_column(String(50), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    phone: Mapped[str | None] = mapped_column(String(15), unique=True, default=None)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[str] = mapped_column(String(20), nullable=False, default=Role.FARMER.value)
    profile_image: Mapped[str] = mapped_column(String(500), default="")

    # Verification
    is_email_verified: Mapped[bool] = mapped_column(Boolean, default=False)
    is_phone_verified: Mapped[bool] = mapped_column(Boolean, default=False)
    otp_code: Mapped[str | None] = mapped_column(String(6), default=None)
    otp_expires_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), default=None
    )

    # Preferences
    language: Mapped[str] = mapped_column(String(5), default=Language.EN.value)
    theme: Mapped[str] = mapped_column(String(10), default=Theme.LIGHT.value)
    notify_email: Mapped[bool] = mapped_column(Boolean, default=True)
    notify_push: Mapped[bool] = mapped_column(Boolean, default=True)
    notify_sms: Mapped[bool] = mapped_column(Boolean, default=False)

    # Location
    location_state: Mapped[str | None] = mapped_column(String(100), default=None)
    location_district: Mapped[str | None] = mapped_column(String(100), default=None)
    location_village: Mapped[str | None] = mapped_column(String(100), default=None)
    latitude: Mapped[float | None] = mapped_column(Float, default=None)
    longitude: Mapped[float | None] = mapped_column(Float, default=None)

    # Farming profile
    farming_experience: Mapped[str] = mapped_column(
        String(20), default=FarmingExperience.BEGINNER.value
    )
    farm_size: Mapped[float | None] = mapped_column(Float, default=None)  # acres
    crops: Mapped[list | None] = mapped_column(JSONB, default=list)
    irrigation_type: Mapped[str | None] = mapped_column(String(20), default=None)

    # Gamification — experience always mirrors points
    level: Mapped[int] = mapped_column(Integer, default=1)
    experience: Mapped[int] = mapped_column(Integer, default=0)
    points: Mapped[int] = mapped_column(Integer, default=0)
    streak: Mapped[int] = mapped_column(Integer, default=0)
    last_active_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), default=None
    )

    # Wallet — balance is the signed sum of ``transactions``
    balance: Mapped[int] = mapped_column(Integer, default=0)

    # Lifecycle
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    last_login_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), default=None
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    # Optimistic concurrency — every UPDATE is guarded by ``version``
    version: Mapped[int] = mapped_column(Integer, nullable=False)

    # Relationships
    transactions: Mapped[list[WalletTransaction]] = relationship(
        back_populates="account",
        cascade="all, delete-orphan",
        order_by="WalletTransaction.id",
    )
    badges: Mapped[list[AccountBadge]] = relationship(
        back_populates="account",
        cascade="all, delete-orphan",
        order_by="AccountBadge.id",
    )

    __mapper_args__ = {"version_id_col": version}

    __table_args__ = (
        Index("ix_accounts_points_desc", "points"),
        Index("ix_accounts_level_desc", "level"),
    )

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def __repr__(self) -> str:
        return f"<Account id={self.id} email={self.email!r} lvl={self.level}>"


# ---------------------------------------------------------------------------
# WalletTransaction — append-only wallet log
# ---------------------------------------------------------------------------
class WalletTransaction(Base):
    __tablename__ = "wallet_transactions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    account_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("accounts.id", ondelete="CASCADE"), nullable=False
    )
    kind: Mapped[str] = mapped_column(String(20), nullable=False)
    amount: Mapped[int] = mapped_column(Integer, nullable=False)
    description: Mapped[str] = mapped_column(String(255), default="")
    timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    account: Mapped[Account] = relationship(back_populates="transactions")

    __table_args__ = (
        Index("ix_wallet_transactions_account_time", "account_id", "timestamp"),
    )

    def __repr__(self) -> str:
        return f"<WalletTransaction id={self.id} {self.kind} {self.amount}>"


# ---------------------------------------------------------------------------
# AccountBadge — earned badges
# ---------------------------------------------------------------------------
class AccountBadge(Base):
    __tablename__ = "account_badges"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    account_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("accounts.id", ondelete="CASCADE"), nullable=False
    )
    badge_id: Mapped[str] = mapped_column(String(64), nullable=False)
    description: Mapped[str | None] = mapped_column(String(255), default=None)
    earned_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    account: Mapped[Account] = relationship(back_populates="badges")

    __table_args__ = (
        UniqueConstraint("account_id", "badge_id", name="uq_account_badges_account_badge"),
    )

    def __repr__(self) -> str:
        return f"<AccountBadge account={self.account_id} badge={self.badge_id!r}>"


# ---------------------------------------------------------------------------
# Challenges — tasks with eligibility rules and a point reward
# ---------------------------------------------------------------------------
class Challenge(Base):
    __tablename__ = "challenges"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str] = mapped_column(String(500), nullable=False)
    category: Mapped[str] = mapped_column(String(30), nullable=False)
    difficulty: Mapped[str] = mapped_column(String(10), default=Difficulty.EASY.value)
    type: Mapped[str] = mapped_column(String(10), default=ChallengeType.DAILY.value)
    points: Mapped[int] = mapped_column(Integer, nullable=False)

    # Content — stored as submitted by the admin UI
    requirements: Mapped[list | None] = mapped_column(JSONB, default=list)
    instructions: Mapped[list | None] = mapped_column(JSONB, default=list)
    resources: Mapped[dict | None] = mapped_column(JSONB, default=dict)
    rewards: Mapped[dict | None] = mapped_column(JSONB, default=dict)
    tags: Mapped[list | None] = mapped_column(JSONB, default=list)

    # Duration window
    starts_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    ends_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), default=None)
    time_limit_minutes: Mapped[int | None] = mapped_column(Integer, default=None)

    # Eligibility — empty lists / NULL mean "no restriction"
    eligible_roles: Mapped[list | None] = mapped_column(JSONB, default=list)
    eligible_experience: Mapped[str | None] = mapped_column(String(20), default=None)
    eligible_states: Mapped[list | None] = mapped_column(JSONB, default=list)
    eligible_districts: Mapped[list | None] = mapped_column(JSONB, default=list)

    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    is_featured: Mapped[bool] = mapped_column(Boolean, default=False)
    created_by: Mapped[int] = mapped_column(
        Integer, ForeignKey("accounts.id", ondelete="RESTRICT"), nullable=False
    )

    # Statistics
    total_participants: Mapped[int] = mapped_column(Integer, default=0)
    completed_participants: Mapped[int] = mapped_column(Integer, default=0)
    average_completion_minutes: Mapped[float | None] = mapped_column(Float, default=None)
    success_rate: Mapped[float | None] = mapped_column(Float, default=None)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    # Every join/submit bumps the statistics, so the version serialises them
    version: Mapped[int] = mapped_column(Integer, nullable=False)

    participants: Mapped[list[ChallengeParticipant]] = relationship(
        back_populates="challenge",
        cascade="all, delete-orphan",
        order_by="ChallengeParticipant.id",
    )
    creator: Mapped[Account] = relationship()

    __mapper_args__ = {"version_id_col": version}

    __table_args__ = (
        Index("ix_challenges_category", "category"),
        Index("ix_challenges_difficulty", "difficulty"),
        Index("ix_challenges_type", "type"),
        Index("ix_challenges_active_featured", "is_active", "is_featured"),
        Index("ix_challenges_window", "starts_at", "ends_at"),
    )

    @property
    def completion_rate(self) -> float:
        """Percentage of participants who completed (0 when nobody joined)."""
        if not self.total_participants:
            return 0.0
        return self.completed_participants / self.total_participants * 100

    def __repr__(self) -> str:
        return f"<Challenge id={self.id} title={self.title!r} active={self.is_active}>"


# ---------------------------------------------------------------------------
# ChallengeParticipant — per-account progress within a challenge
# ---------------------------------------------------------------------------
class ChallengeParticipant(Base):
    __tablename__ = "challenge_participants"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    challenge_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("challenges.id", ondelete="CASCADE"), nullable=False
    )
    account_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("accounts.id", ondelete="CASCADE"), nullable=False
    )
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=ParticipantStatus.PENDING.value
    )
    joined_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    completed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), default=None
    )
    submissions: Mapped[list | None] = mapped_column(JSONB, default=list)
    points_earned: Mapped[int] = mapped_column(Integer, default=0)

    challenge: Mapped[Challenge] = relationship(back_populates="participants")
    account: Mapped[Account] = relationship()

    __table_args__ = (
        UniqueConstraint(
            "challenge_id", "account_id", name="uq_challenge_participants_challenge_account"
        ),
        Index("ix_challenge_participants_account", "account_id"),
    )

    def __repr__(self) -> str:
        return (
            f"<ChallengeParticipant challenge={self.challenge_id} "
            f"account={self.account_id} status={self.status}>"
        )


# ---------------------------------------------------------------------------
# CommunityPost — community feed
# ---------------------------------------------------------------------------
class CommunityPost(Base):
    __tablename__ = "community_posts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    author_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("accounts.id", ondelete="CASCADE"), nullable=False
    )
    author_name: Mapped[str] = mapped_column(String(101), nullable=False)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    category: Mapped[str] = mapped_column(String(20), nullable=False)
    likes: Mapped[int] = mapped_column(Integer, default=0)
    comments: Mapped[int] = mapped_column(Integer, default=0)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    __table_args__ = (
        Index("ix_community_posts_category_time", "category", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<CommunityPost id={self.id} category={self.category}>"
