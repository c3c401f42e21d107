"""
farmwise.database.seed — Demo Accounts & Challenges
====================================================

Populates a fresh database so the app is immediately usable: three member
accounts, one admin, and three challenges owned by the admin.

Idempotent: accounts are skipped when any exist, challenges when any exist.
Demo point totals are credited through :func:`farmwise.engine.ledger.award_points`
so every seeded wallet reconciles with its transaction log.
"""

from __future__ import annotations

import logging
from datetime import timedelta

from sqlalchemy import Engine, func, select
from sqlalchemy.orm import Session

from farmwise.database.models import Account, Challenge, Role
from farmwise.engine import ledger
from farmwise.engine.clock import utcnow
from farmwise.services.passwords import hash_password

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Demo catalogue
# ---------------------------------------------------------------------------
DEMO_ACCOUNTS: list[dict] = [
    {
        "first_name": "Rajesh", "last_name": "Kumar",
        "email": "rajesh@farmwise.com", "password": "password123",
        "phone": "9876543210", "role": Role.FARMER.value, "language": "hi",
        "location_state": "Punjab", "location_district": "Amritsar",
        "location_village": "Ajnala",
        "farming_experience": "intermediate", "farm_size": 5.0,
        "crops": ["wheat", "rice", "corn"], "irrigation_type": "drip", "streak": 15,
        "awards": [
            (100, "Completed challenge: Drip Irrigation Setup"),
            (50, "Email verification bonus"),
            (2350, "Community contributions"),
        ],
        "badges": [("1", "First Steps"), ("2", "Water Saver")],
    },
    {
        "first_name": "Priya", "last_name": "Sharma",
        "email": "priya@farmwise.com", "password": "password123",
        "phone": "9876543211", "role": Role.STUDENT.value, "theme": "dark",
        "location_state": "Karnataka", "location_district": "Bangalore",
        "location_village": "Whitefield",
        "farming_experience": "beginner", "farm_size": 2.0,
        "crops": ["vegetables", "herbs"], "irrigation_type": "traditional", "streak": 8,
        "awards": [
            (75, "Completed challenge: Compost Making Challenge"),
            (50, "Email verification bonus"),
            (1975, "Community contributions"),
        ],
        "badges": [("1", "First Steps"), ("3", "Community Helper")],
    },
    {
        "first_name": "Amit", "last_name": "Patel",
        "email": "amit@farmwise.com", "password": "password123",
        "phone": "9876543212", "role": Role.FARMER.value, "notify_sms": True,
        "location_state": "Gujarat", "location_district": "Ahmedabad",
        "location_village": "Gandhinagar",
        "farming_experience": "expert", "farm_size": 15.0,
        "crops": ["cotton", "groundnut", "wheat"], "irrigation_type": "sprinkler", "streak": 25,
        "awards": [
            (200, "Completed challenge: Solar Panel Installation"),
            (50, "Email verification bonus"),
            (2950, "Community contributions"),
        ],
        "badges": [("1", "First Steps"), ("2", "Water Saver"), ("4", "Solar Pioneer")],
    },
    {
        "first_name": "Admin", "last_name": "User",
        "email": "admin@farmwise.com", "password": "admin123",
        "phone": "9876543213", "role": Role.ADMIN.value, "theme": "dark",
        "farming_experience": "expert", "farm_size": 0.0,
        "crops": [], "irrigation_type": "mixed", "streak": 100,
        "awards": [(5000, "Platform administration")],
        "badges": [],
    },
]


def _demo_challenges() -> list[dict]:
    now = utcnow()
    return [
        {
            "title": "Drip Irrigation Setup",
            "description": (
                "Install and use drip irrigation system for water conservation. "
                "Learn how to set up an efficient drip irrigation system that can "
                "reduce water usage by up to 50%."
            ),
            "category": "water_conservation", "difficulty": "medium", "type": "weekly",
            "points": 100,
            "requirements": [
                {"type": "photo", "description": "Before and after photos of irrigation setup", "required": True},
                {"type": "document", "description": "Installation checklist completion", "required": True},
                {"type": "survey", "description": "Water usage survey", "required": True},
            ],
            "instructions": [
                {"step": 1, "title": "Plan Your Layout",
                 "description": "Design your drip irrigation layout considering your crop arrangement and water source location."},
                {"step": 2, "title": "Install Main Line",
                 "description": "Install the main water line from your water source to the field."},
                {"step": 3, "title": "Install Drip Lines",
                 "description": "Lay out drip lines along your crops with proper spacing."},
            ],
            "resources": {
                "tools": ["Drip lines", "Connectors", "Timer", "Pressure regulator"],
                "tips": ["Check for leaks regularly", "Clean filters monthly",
                         "Adjust pressure based on soil type"],
            },
            "rewards": {"points": 100, "badges": [{"badge_id": "2", "name": "Water Saver"}]},
            "starts_at": now, "ends_at": now + timedelta(days=7), "time_limit_minutes": 60,
            "eligible_roles": ["farmer", "student"], "eligible_experience": "beginner",
            "eligible_states": ["Punjab", "Haryana", "Rajasthan"],
            "is_featured": True,
            "tags": ["water conservation", "irrigation", "sustainability"],
        },
        {
            "title": "Compost Making Challenge",
            "description": (
                "Create organic compost using kitchen and farm waste. Learn the art "
                "of composting to enrich your soil naturally."
            ),
            "category": "organic_farming", "difficulty": "easy", "type": "weekly",
            "points": 75,
            "requirements": [
                {"type": "photo", "description": "Photos of compost pile setup", "required": True},
                {"type": "document", "description": "Composting log for 2 weeks", "required": True},
                {"type": "survey", "description": "Material composition survey", "required": True},
            ],
            "instructions": [
                {"step": 1, "title": "Choose Location",
                 "description": "Select a suitable location for your compost pile with good drainage."},
                {"step": 2, "title": "Layer Materials",
                 "description": "Alternate between green (nitrogen-rich) and brown (carbon-rich) materials."},
                {"step": 3, "title": "Maintain Moisture",
                 "description": "Keep the pile moist but not soggy, and turn regularly."},
            ],
            "resources": {
                "tools": ["Compost bin", "Pitchfork", "Moisture meter", "Thermometer"],
                "tips": ["Mix materials well", "Monitor temperature", "Turn weekly",
                         "Avoid meat and dairy"],
            },
            "rewards": {"points": 75, "badges": [{"badge_id": "5", "name": "Compost Master"}]},
            "starts_at": now, "ends_at": now + timedelta(days=14), "time_limit_minutes": 30,
            "eligible_roles": ["farmer", "student"], "eligible_experience": "beginner",
            "eligible_states": [],
            "is_featured": False,
            "tags": ["composting", "organic farming", "soil health"],
        },
        {
            "title": "Solar Panel Installation",
            "description": (
                "Set up solar panels for renewable energy on your farm. Reduce your "
                "carbon footprint and energy costs."
            ),
            "category": "energy_efficiency", "difficulty": "hard", "type": "monthly",
            "points": 200,
            "requirements": [
                {"type": "photo", "description": "Installation progress photos", "required": True},
                {"type": "document", "description": "Energy consumption analysis", "required": True},
                {"type": "survey", "description": "Before and after energy usage", "required": True},
            ],
            "instructions": [
                {"step": 1, "title": "Site Assessment",
                 "description": "Evaluate your site for solar potential and shading issues."},
                {"step": 2, "title": "Installation Planning",
                 "description": "Plan the installation layout and obtain necessary permits."},
                {"step": 3, "title": "Panel Installation",
                 "description": "Install solar panels with proper mounting and wiring."},
            ],
            "resources": {
                "tools": ["Solar panels", "Mounting hardware", "Inverter", "Wiring"],
                "tips": ["Check local regulations", "Consider battery storage",
                         "Monitor performance", "Regular maintenance"],
            },
            "rewards": {"points": 200, "badges": [{"badge_id": "4", "name": "Solar Pioneer"}]},
            "starts_at": now, "ends_at": now + timedelta(days=30), "time_limit_minutes": 120,
            "eligible_roles": ["farmer"], "eligible_experience": "intermediate",
            "eligible_states": ["Gujarat", "Rajasthan", "Tamil Nadu"],
            "is_featured": True,
            "tags": ["solar energy", "renewable energy", "sustainability"],
        },
    ]


# ---------------------------------------------------------------------------
# Seeders
# ---------------------------------------------------------------------------
def seed_accounts(session: Session) -> int:
    if session.scalar(select(func.count()).select_from(Account)):
        logger.info("Accounts already exist, skipping seed")
        return 0

    now = utcnow()
    for demo in DEMO_ACCOUNTS:
        data = dict(demo)
        awards = data.pop("awards")
        badges = data.pop("badges")
        password = data.pop("password")
        account = Account(
            **data,
            password_hash=hash_password(password),
            is_email_verified=True,
            is_phone_verified=True,
        )
        for amount, description in awards:
            ledger.award_points(account, amount, description, now=now)
        for badge_id, description in badges:
            ledger.award_badge(account, badge_id, description, now=now)
        session.add(account)
    session.flush()
    return len(DEMO_ACCOUNTS)


def seed_challenges(session: Session) -> int:
    if session.scalar(select(func.count()).select_from(Challenge)):
        logger.info("Challenges already exist, skipping seed")
        return 0

    admin = session.scalar(
        select(Account).where(Account.role == Role.ADMIN.value).order_by(Account.id)
    )
    if admin is None:
        logger.warning("No admin account found, skipping challenge seed")
        return 0

    rows = _demo_challenges()
    for row in rows:
        session.add(Challenge(**row, created_by=admin.id))
    session.flush()
    return len(rows)


def seed_database(engine: Engine) -> None:
    """Seed demo accounts then challenges.  Safe to call repeatedly."""
    with Session(engine) as session:
        try:
            accounts = seed_accounts(session)
            challenges = seed_challenges(session)
            session.commit()
        except Exception:
            session.rollback()
            raise

    if accounts or challenges:
        logger.info("Seeded %d accounts and %d challenges.", accounts, challenges)
